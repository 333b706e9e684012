#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import dataclasses
from typing import Optional, Set, Tuple

from tg_ast import Category, ConstKind, ConstValue, Type
from tg_context import GenerationContext
from tg_errors import TypeResolutionError
from tg_references import include_matches
from tg_scope import (
    Constant,
    Declaration,
    Enum,
    ExpandedField,
    Field,
    Function,
    Scope,
    StructLike,
    Typedef,
)
from tg_targets import TypeSyntax, get_syntax

_STRUCT_CATEGORIES = {
    "struct": Category.STRUCT,
    "union": Category.UNION,
    "exception": Category.EXCEPTION,
}


class TypeResolver:
    """
    Resolves type descriptors of one scope into target type expressions.

    Every lookup starts in a 'home' scope, the scope whose file the type
    expression was written in: the current scope for its own declarations,
    the declaring scope for expanded fields. Names found in another scope
    are qualified with the import alias the current scope uses for it; a
    scope reached only through an expanded field is included on demand.
    """

    def __init__(self, context: GenerationContext, scope: Scope):
        self.context = context
        self.scope = scope
        self.syntax: TypeSyntax = get_syntax(context.features.target)

    # --- declaration lookup ---

    def locate(self, home: Scope, name: str, owner: Optional[str] = None) -> Tuple[Scope, Declaration]:
        """
        Find the declaration 'name' refers to when written in 'home'.

        A bare name must be declared in 'home'. A qualified name is looked up
        in the includes its qualifier designates, then in any include that
        declares the bare name (IDL qualifiers need not match generated
        aliases).
        """
        qualifier, _, bare = name.rpartition(".")
        if not qualifier:
            decl = home.declaration(bare)
            if decl is not None:
                return home, decl
            raise TypeResolutionError(name, owner, self.scope.filename)

        if qualifier == home.ast.reference_name:
            decl = home.declaration(bare)
            if decl is not None:
                return home, decl

        includes = list(home.live_includes())
        for matching in (True, False):
            for inc in includes:
                if include_matches(inc, qualifier) != matching:
                    continue
                decl = inc.scope.declaration(bare)
                if decl is not None:
                    return inc.scope, decl
        raise TypeResolutionError(name, owner, self.scope.filename)

    def qualified(self, decl_scope: Scope, name: str) -> str:
        if decl_scope is self.scope:
            return name
        inc = self.scope.include_scope(decl_scope)
        if decl_scope.namespace == self.scope.namespace:
            return name
        return self.syntax.qualify(inc.package_name, name)

    def underlying(self, t: Type, home: Scope, owner: Optional[str] = None) -> Tuple[Category, Type, Scope]:
        """Follow typedefs to the real category, the type expression carrying it and its home scope."""
        seen: Set[Tuple[int, str]] = set()
        while True:
            c = t.category
            if c.is_base_type() or c.is_container() or c is Category.VOID:
                return c, t, home
            key = (id(home), t.name)
            if key in seen:
                raise TypeResolutionError(t.name, owner, self.scope.filename)
            seen.add(key)

            decl_scope, decl = self.locate(home, t.name, owner)
            if isinstance(decl, Typedef):
                t, home = decl.ast.type, decl_scope
                continue
            if isinstance(decl, Enum):
                return Category.ENUM, t, home
            if isinstance(decl, StructLike):
                return _STRUCT_CATEGORIES.get(decl.category, Category.STRUCT), t, home
            raise TypeResolutionError(t.name, owner, self.scope.filename)

    # --- type names ---

    def resolve_type_name(self, t: Type, home: Optional[Scope] = None, owner: Optional[str] = None) -> str:
        home = home or self.scope
        c = t.category
        if c.is_base_type():
            return self.syntax.primitive(c)
        if c is Category.VOID:
            return self.syntax.void
        if c in (Category.LIST, Category.SET):
            if t.value_type is None:
                raise TypeResolutionError(t.name, owner, self.scope.filename)
            elem = self.resolve_type_name(t.value_type, home, owner)
            return self.syntax.list_of(elem) if c is Category.LIST else self.syntax.set_of(elem)
        if c is Category.MAP:
            if t.key_type is None or t.value_type is None:
                raise TypeResolutionError(t.name, owner, self.scope.filename)
            return self.syntax.map_of(
                self.resolve_type_name(t.key_type, home, owner),
                self.resolve_type_name(t.value_type, home, owner),
            )

        decl_scope, decl = self.locate(home, t.name, owner)
        name = self.qualified(decl_scope, decl.name)
        if isinstance(decl, StructLike):
            return self.syntax.struct_ref(name)
        if isinstance(decl, Typedef):
            if decl.ast.type.category.is_struct_like():
                return self.syntax.struct_ref(name)
            return name
        if isinstance(decl, Enum):
            return name
        raise TypeResolutionError(t.name, owner, self.scope.filename)

    @staticmethod
    def home_of(f: Field, fallback: Scope) -> Scope:
        if isinstance(f, ExpandedField) and f.origin is not None:
            return f.origin
        return fallback

    def resolve_field_type_name(self, f: Field) -> str:
        home = self.home_of(f, self.scope)
        name = self.resolve_type_name(f.type, home, f.source_name)
        category, _, _ = self.underlying(f.type, home, f.source_name)
        return self.syntax.optional(name, f.ast, category)

    def default_type_name(self, f: Field) -> str:
        return self.syntax.deref(f.type_name or self.resolve_field_type_name(f))

    def field_init(self, f: Field) -> str:
        """Initial value of a field: its default, or the zero value of its type."""
        home = self.home_of(f, self.scope)
        if f.ast.default is None:
            category, _, _ = self.underlying(f.type, home, f.source_name)
            return self.syntax.zero_value(f.type_name or self.resolve_field_type_name(f), category)
        return self.const_value(f.type, f.ast.default, home, f.source_name)

    def resolve_field(self, f: Field) -> None:
        f.type_name = self.resolve_field_type_name(f)
        f.default_type_name = self.default_type_name(f)
        f.default_value = self.field_init(f)

    def resolve_typedef(self, t: Typedef) -> None:
        t.type_name = self.syntax.deref(self.resolve_type_name(t.ast.type, owner=t.ast.alias))

    def resolve_constant(self, c: Constant) -> None:
        c.type_name = self.resolve_type_name(c.ast.type, owner=c.ast.name)
        c.init = self.const_value(c.ast.type, c.ast.value, self.scope, c.ast.name)

    # --- functions ---

    def resolve_function(self, fun: Function) -> None:
        owner = f"{fun.service.ast.name}.{fun.ast.name}"
        if fun.arg_type is not None:
            fun.arguments = [
                dataclasses.replace(
                    f,
                    name=fun.scope.get(f.source_name) or f.name,
                    type_name=self.resolve_type_name(f.type, owner=owner),
                )
                for f in fun.arg_type.fields
            ]
        if fun.ast.oneway or fun.res_type is None:
            return

        fs = fun.res_type.fields
        if fs and fs[0].is_response:
            success = fs[0]
            # An expanded success slot still answers with the declared return type.
            declared = success.original.type if success.is_expandable and success.original else success.type
            fun.response_type = self.resolve_type_name(declared, owner=owner)
            fs = fs[1:]
        fun.throws = [dataclasses.replace(f, name=fun.scope.get(f.source_name) or f.name) for f in fs]

    # --- values ---

    def const_value(self, t: Type, v: ConstValue, home: Scope, owner: Optional[str] = None) -> str:
        category, real, real_home = self.underlying(t, home, owner)

        if v.kind is ConstKind.IDENTIFIER:
            ident = str(v.value)
            if category is Category.BOOL and ident in ("true", "false"):
                return self.syntax.bool_literal(ident == "true")
            if category is Category.ENUM:
                literal = self._enum_value(real, real_home, ident, owner)
                if literal is not None:
                    return literal
            return self._constant_ref(home, ident, owner)

        if category is Category.BOOL:
            if v.kind is ConstKind.LITERAL:
                return self.syntax.bool_literal(str(v.value).lower() == "true")
            return self.syntax.bool_literal(bool(v.value))
        if category in (Category.BYTE, Category.I8, Category.I16, Category.I32, Category.I64):
            return str(int(v.value))
        if category is Category.DOUBLE:
            return str(v.value)
        if category is Category.STRING:
            return self.syntax.string_literal(str(v.value))
        if category is Category.BINARY:
            return self.syntax.binary_literal(str(v.value))
        if category is Category.ENUM:
            return self.syntax.enum_cast(self.resolve_type_name(t, home, owner), int(v.value))

        type_name = self.syntax.deref(self.resolve_type_name(t, home, owner))
        if category in (Category.LIST, Category.SET) and v.kind is ConstKind.LIST:
            items = [self.const_value(real.value_type, item, real_home, owner) for item in v.value]
            if category is Category.LIST:
                return self.syntax.list_literal(type_name, items)
            return self.syntax.set_literal(type_name, items)
        if category is Category.MAP and v.kind is ConstKind.MAP:
            pairs = [
                (self.const_value(real.key_type, k, real_home, owner),
                 self.const_value(real.value_type, val, real_home, owner))
                for k, val in v.value
            ]
            return self.syntax.map_literal(type_name, pairs)
        if category.is_struct_like() and v.kind is ConstKind.MAP:
            return self._struct_value(real, real_home, type_name, v, owner)
        raise TypeResolutionError(t.name, owner, self.scope.filename)

    def _enum_value(self, t: Type, home: Scope, ident: str, owner: Optional[str]) -> Optional[str]:
        decl_scope, decl = self.locate(home, t.name, owner)
        if not isinstance(decl, Enum):
            return None
        value_name = ident.rsplit(".", 1)[-1]
        ev = decl.value(value_name)
        if ev is None:
            return None
        return self.syntax.enum_literal(
            self.qualified(decl_scope, decl.name),
            ev.ast.name,
            self.qualified(decl_scope, ev.name),
        )

    def _constant_ref(self, home: Scope, ident: str, owner: Optional[str]) -> str:
        decl_scope, decl = self.locate(home, ident, owner)
        if not isinstance(decl, Constant):
            raise TypeResolutionError(ident, owner, self.scope.filename)
        return self.qualified(decl_scope, decl.name)

    def _struct_value(self, t: Type, home: Scope, type_name: str, v: ConstValue, owner: Optional[str]) -> str:
        decl_scope, decl = self.locate(home, t.name, owner)
        if not isinstance(decl, StructLike):
            raise TypeResolutionError(t.name, owner, self.scope.filename)
        pairs = []
        for k, val in v.value:
            f = decl.field(str(k.value))
            if f is None:
                raise TypeResolutionError(f"{t.name}.{k.value}", owner, self.scope.filename)
            pairs.append((f.name, self.const_value(f.type, val, decl_scope, owner)))
        return self.syntax.struct_literal(type_name, pairs)
