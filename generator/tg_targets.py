#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

"""
Target type syntax.

A TypeSyntax turns resolved pieces (primitive categories, container element
types, qualified declaration names, constant literals) into type expressions
and value literals of one target language. The resolver decides WHAT a type
is; the syntax decides how it is spelled.
"""

import json
from typing import Dict, List, Optional, Tuple

from tg_ast import Category, Field, Type
from tg_errors import OptionError


class TypeSyntax:
    name = ""
    primitives: Dict[Category, str] = {}
    void = ""

    def primitive(self, category: Category) -> str:
        return self.primitives[category]

    def qualify(self, alias: str, name: str) -> str:
        return f"{alias}.{name}" if alias else name

    def list_of(self, elem: str) -> str:
        raise NotImplementedError

    def set_of(self, elem: str) -> str:
        raise NotImplementedError

    def map_of(self, key: str, value: str) -> str:
        raise NotImplementedError

    def struct_ref(self, qualified: str) -> str:
        return qualified

    def optional(self, type_name: str, f: Field, category: Category) -> str:
        """Type of a field given its resolved type and underlying (typedef-resolved) category."""
        return type_name

    def deref(self, type_name: str) -> str:
        return type_name

    def zero_value(self, type_name: str, category: Category) -> str:
        raise NotImplementedError

    # --- literals ---

    def bool_literal(self, value: bool) -> str:
        return "true" if value else "false"

    def string_literal(self, value: str) -> str:
        return json.dumps(value, ensure_ascii=False)

    def binary_literal(self, value: str) -> str:
        raise NotImplementedError

    def enum_literal(self, type_name: str, value_name: str, qualified_value: str) -> str:
        raise NotImplementedError

    def enum_cast(self, type_name: str, value: int) -> str:
        raise NotImplementedError

    def list_literal(self, type_name: str, items: List[str]) -> str:
        raise NotImplementedError

    def set_literal(self, type_name: str, items: List[str]) -> str:
        return self.list_literal(type_name, items)

    def map_literal(self, type_name: str, pairs: List[Tuple[str, str]]) -> str:
        raise NotImplementedError

    def struct_literal(self, type_name: str, pairs: List[Tuple[str, str]]) -> str:
        raise NotImplementedError


class GoSyntax(TypeSyntax):
    name = "go"
    primitives = {
        Category.BOOL: "bool",
        Category.BYTE: "int8",
        Category.I8: "int8",
        Category.I16: "int16",
        Category.I32: "int32",
        Category.I64: "int64",
        Category.DOUBLE: "float64",
        Category.STRING: "string",
        Category.BINARY: "[]byte",
    }
    void = ""

    def list_of(self, elem: str) -> str:
        return "[]" + elem

    def set_of(self, elem: str) -> str:
        return "[]" + elem

    def map_of(self, key: str, value: str) -> str:
        return f"map[{key}]{value}"

    def struct_ref(self, qualified: str) -> str:
        return "*" + qualified

    def optional(self, type_name: str, f: Field, category: Category) -> str:
        # Optional scalars without a default are pointers.
        if not f.is_optional or f.default is not None or type_name.startswith("*"):
            return type_name
        if category is Category.ENUM or (category.is_base_type() and category is not Category.BINARY):
            return "*" + type_name
        return type_name

    def deref(self, type_name: str) -> str:
        return type_name[1:] if type_name.startswith("*") else type_name

    def zero_value(self, type_name: str, category: Category) -> str:
        if type_name.startswith(("*", "[]", "map[")):
            return "nil"
        if category is Category.BOOL:
            return "false"
        if category is Category.STRING:
            return '""'
        if category.is_base_type() or category is Category.ENUM:
            return "0"
        return "nil"

    def binary_literal(self, value: str) -> str:
        return f"[]byte({self.string_literal(value)})"

    def enum_literal(self, type_name: str, value_name: str, qualified_value: str) -> str:
        return qualified_value

    def enum_cast(self, type_name: str, value: int) -> str:
        return f"{self.deref(type_name)}({value})"

    def list_literal(self, type_name: str, items: List[str]) -> str:
        return f"{type_name}{{{', '.join(items)}}}"

    def map_literal(self, type_name: str, pairs: List[Tuple[str, str]]) -> str:
        body = ", ".join(f"{k}: {v}" for k, v in pairs)
        return f"{type_name}{{{body}}}"

    def struct_literal(self, type_name: str, pairs: List[Tuple[str, str]]) -> str:
        body = ", ".join(f"{k}: {v}" for k, v in pairs)
        return f"&{type_name}{{{body}}}"


class TypeScriptSyntax(TypeSyntax):
    name = "typescript"
    primitives = {
        Category.BOOL: "boolean",
        Category.BYTE: "number",
        Category.I8: "number",
        Category.I16: "number",
        Category.I32: "number",
        Category.I64: "number",
        Category.DOUBLE: "number",
        Category.STRING: "string",
        Category.BINARY: "Uint8Array",
    }
    void = "void"

    _OPTIONAL_SUFFIX = " | undefined"

    def list_of(self, elem: str) -> str:
        return f"Array<{elem}>"

    def set_of(self, elem: str) -> str:
        return f"Set<{elem}>"

    def map_of(self, key: str, value: str) -> str:
        return f"{{ [key: {key}]: {value} }}"

    def optional(self, type_name: str, f: Field, category: Category) -> str:
        if f.is_optional and not type_name.endswith(self._OPTIONAL_SUFFIX):
            return type_name + self._OPTIONAL_SUFFIX
        return type_name

    def deref(self, type_name: str) -> str:
        return type_name.removesuffix(self._OPTIONAL_SUFFIX)

    def zero_value(self, type_name: str, category: Category) -> str:
        if type_name.endswith(self._OPTIONAL_SUFFIX):
            return "undefined"
        if category is Category.BOOL:
            return "false"
        if category is Category.STRING:
            return '""'
        if category is Category.ENUM or (category.is_base_type() and category is not Category.BINARY):
            return "0"
        if category is Category.LIST:
            return "[]"
        if category is Category.SET:
            return "new Set()"
        if category is Category.MAP:
            return "{}"
        return "null"

    def binary_literal(self, value: str) -> str:
        return f"new TextEncoder().encode({self.string_literal(value)})"

    def enum_literal(self, type_name: str, value_name: str, qualified_value: str) -> str:
        return f"{type_name}.{value_name}"

    def enum_cast(self, type_name: str, value: int) -> str:
        return f"{value} as {type_name}"

    def list_literal(self, type_name: str, items: List[str]) -> str:
        return f"[{', '.join(items)}]"

    def set_literal(self, type_name: str, items: List[str]) -> str:
        return f"new Set([{', '.join(items)}])"

    def map_literal(self, type_name: str, pairs: List[Tuple[str, str]]) -> str:
        if not pairs:
            return "{}"
        body = ", ".join(f"[{k}]: {v}" for k, v in pairs)
        return f"{{ {body} }}"

    def struct_literal(self, type_name: str, pairs: List[Tuple[str, str]]) -> str:
        body = ", ".join(f"{k}: {v}" for k, v in pairs)
        return f"{{ {body} }}"


_SYNTAXES = {
    "go": GoSyntax(),
    "typescript": TypeScriptSyntax(),
}


def get_syntax(target: str) -> TypeSyntax:
    syntax = _SYNTAXES.get(target)
    if syntax is None:
        raise OptionError(f"unsupported target '{target}'")
    return syntax


# ===============
# OpenAPI mapping
# ===============

_OPENAPI_TYPES = {
    Category.BOOL: "boolean",
    Category.BYTE: "integer",
    Category.I8: "integer",
    Category.I16: "integer",
    Category.I32: "integer",
    Category.I64: "integer",
    Category.DOUBLE: "number",
    Category.STRING: "string",
    Category.BINARY: "string",
    Category.LIST: "array",
    Category.SET: "array",
    Category.MAP: "object",
    Category.ENUM: "string",
    Category.STRUCT: "object",
    Category.UNION: "object",
    Category.EXCEPTION: "object",
}

_OPENAPI_FORMATS = {
    Category.BYTE: "int8",
    Category.I8: "int8",
    Category.I16: "int16",
    Category.I32: "int32",
    Category.I64: "int64",
    Category.DOUBLE: "double",
    Category.BINARY: "binary",
}


def to_openapi_type(t: Optional[Type]) -> str:
    if t is None:
        return "string"
    return _OPENAPI_TYPES.get(t.category, "string")


def to_openapi_format(t: Optional[Type]) -> str:
    if t is None:
        return ""
    return _OPENAPI_FORMATS.get(t.category, "")


def to_openapi_method(function_name: str) -> str:
    """HTTP method guessed from a function name prefix; POST when nothing matches."""
    lower = function_name.lower()
    if lower.startswith(("get", "find", "list")):
        return "get"
    if lower.startswith(("create", "add", "insert")):
        return "post"
    if lower.startswith(("update", "modify")):
        return "put"
    if lower.startswith(("delete", "remove")):
        return "delete"
    return "post"
