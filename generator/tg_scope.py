#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import threading
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Union

import tg_ast
from tg_context import Features
from tg_imports import ImportManager, TsImport
from tg_namespace import Namespace
from tg_packages import import_of


def support_is_set(f: tg_ast.Field) -> bool:
    """Whether a presence check (IsSet<Field>) is generated for the field."""
    return f.is_optional or f.type.category.is_struct_like()


@dataclass
class Include:
    """A file included by a scope, with the alias its generated code imports it under."""
    package_name: str
    import_path: str
    scope: "Scope"

    @property
    def idl_name(self) -> str:
        return self.scope.ast.reference_name

    def matches(self, qualifier: str) -> bool:
        """Whether 'qualifier' (the prefix of a qualified IDL type name) designates this include."""
        return qualifier in (self.idl_name, self.package_name, self.scope.namespace)


@dataclass
class Field:
    """
    A structure field with its allocated names and resolved types.

    ast     : the source field
    name    : allocated storage name
    getter/reader/writer are always allocated; setter, isset and deep_equal
    are None when the corresponding feature is off.
    original: the field definition before expansion, set on expanded fields
              and on the fields they were expanded from
    is_response: the "success" slot of a synthesized result structure
    """
    ast: tg_ast.Field
    name: str
    getter: str
    reader: str
    writer: str
    setter: Optional[str] = None
    isset: Optional[str] = None
    deep_equal: Optional[str] = None
    is_nested: bool = False
    is_expandable: bool = False
    is_response: bool = False
    expanded_fields: List["ExpandedField"] = field(default_factory=list)
    original: Optional[tg_ast.Field] = None

    # Filled in by type resolution.
    type_name: str = ""
    default_type_name: str = ""
    default_value: str = ""
    tags: str = ""

    @property
    def id(self) -> int:
        return self.ast.id

    @property
    def source_name(self) -> str:
        return self.ast.name

    @property
    def type(self) -> tg_ast.Type:
        return self.ast.type

    @property
    def is_optional(self) -> bool:
        return self.ast.is_optional

    @property
    def has_default(self) -> bool:
        return self.ast.default is not None


@dataclass
class ExpandedField(Field):
    """
    A field inlined from a referenced structure.

    ast carries the adjusted id; original is the untouched field of the
    referenced structure and origin the scope that declares it, which is
    where its type expression has to be looked up.
    """
    origin: Optional["Scope"] = None
    expanded_from: str = ""


@dataclass
class StructLike:
    ast: tg_ast.StructLike
    name: str
    scope: Namespace
    fields: List[Field] = field(default_factory=list)
    is_alias: bool = False

    @property
    def source_name(self) -> str:
        return self.ast.name

    @property
    def category(self) -> str:
        return self.ast.category

    def field(self, source_name: str) -> Optional[Field]:
        for f in self.fields:
            if f.source_name == source_name:
                return f
        return None


@dataclass
class ExpansionRecord:
    """Which fields of a structure were expanded, and the fields that replace them."""
    struct_name: str
    expanded_field_names: Dict[str, bool] = field(default_factory=dict)
    expanded_fields: List[ExpandedField] = field(default_factory=list)

    def is_expanded(self, field_name: str) -> bool:
        return self.expanded_field_names.get(field_name, False)


@dataclass
class EnumValue:
    ast: tg_ast.EnumValue
    name: str
    literal: str


@dataclass
class Enum:
    ast: tg_ast.Enum
    name: str
    scope: Namespace
    values: List[EnumValue] = field(default_factory=list)

    def value(self, source_name: str) -> Optional[EnumValue]:
        for v in self.values:
            if v.ast.name == source_name:
                return v
        return None


@dataclass
class Typedef:
    ast: tg_ast.Typedef
    name: str
    type_name: str = ""


@dataclass
class Constant:
    ast: tg_ast.Constant
    name: str
    type_name: str = ""
    init: str = ""


@dataclass
class Function:
    ast: tg_ast.Function
    name: str
    scope: Namespace
    service: "Service"
    arg_type: Optional[StructLike] = None
    res_type: Optional[StructLike] = None
    arguments: List[Field] = field(default_factory=list)
    throws: List[Field] = field(default_factory=list)
    response_type: str = ""


@dataclass
class Service:
    ast: tg_ast.Service
    name: str
    scope: Namespace
    client_name: str = ""
    processor_name: str = ""
    functions: List[Function] = field(default_factory=list)
    base: Optional["Service"] = None


Declaration = Union[StructLike, Enum, Typedef, Constant, Service]


class Scope:
    """
    Resolved, name-assigned representation of one IDL file.

    The includes list is index-stable: position i holds the include for
    ast.includes[i], or None when that include is unused. Includes pulled in
    later (for types reached only through expanded fields) are appended.
    """

    def __init__(self, ast: tg_ast.Thrift, features: Features):
        self.ast = ast
        self.features = features
        self.namespace = ast.get_namespace_or_reference_name("go")
        self.import_package, self.import_path = import_of(ast, features)

        self.globals = Namespace()
        self.imports = ImportManager()
        self.includes: List[Optional[Include]] = []
        # Module imports of the TypeScript target, filled after resolution.
        self.ts_imports: List[TsImport] = []

        self.structs: List[StructLike] = []
        self.unions: List[StructLike] = []
        self.exceptions: List[StructLike] = []
        self.synthesized: List[StructLike] = []
        self.enums: List[Enum] = []
        self.typedefs: List[Typedef] = []
        self.constants: List[Constant] = []
        self.services: List[Service] = []

        self.expanded_structs: Dict[str, ExpansionRecord] = {}
        self._lock = threading.RLock()

    @property
    def filename(self) -> str:
        return self.ast.filename

    @property
    def package_name(self) -> str:
        return self.import_package

    # --- includes ---

    def make_include(self, other: "Scope") -> Include:
        pkg = other.import_package
        if self.namespace != other.namespace:
            pkg = self.imports.add(pkg, other.import_path)
        return Include(package_name=pkg, import_path=other.import_path, scope=other)

    def include_scope(self, other: "Scope") -> Include:
        """
        Return the include record for 'other', appending one when the file
        is not yet included (types reached through expanded fields).
        """
        with self._lock:
            for inc in self.includes:
                if inc is not None and inc.scope is other:
                    return inc
            inc = self.make_include(other)
            self.includes.append(inc)
            if self.namespace != other.namespace:
                self.imports.use(inc.package_name)
            return inc

    def live_includes(self) -> Iterator[Include]:
        for inc in self.includes:
            if inc is not None:
                yield inc

    def transitive_includes(self) -> Iterator[Include]:
        """Direct includes first, then their includes breadth-first; each scope once."""
        seen = {id(self)}
        queue = list(self.live_includes())
        while queue:
            inc = queue.pop(0)
            if id(inc.scope) in seen:
                continue
            seen.add(id(inc.scope))
            yield inc
            queue.extend(inc.scope.live_includes())

    # --- queries ---

    def struct_likes(self) -> List[StructLike]:
        return [*self.structs, *self.unions, *self.exceptions]

    def all_struct_likes(self) -> List[StructLike]:
        return [*self.struct_likes(), *self.synthesized]

    def is_empty(self) -> bool:
        return not (self.structs or self.unions or self.exceptions or self.enums
                    or self.typedefs or self.constants or self.services)

    def structure(self, source_name: str) -> Optional[StructLike]:
        for st in self.struct_likes():
            if st.source_name == source_name:
                return st
        return None

    def enum(self, source_name: str) -> Optional[Enum]:
        for e in self.enums:
            if e.ast.name == source_name:
                return e
        return None

    def typedef(self, alias: str) -> Optional[Typedef]:
        for t in self.typedefs:
            if t.ast.alias == alias:
                return t
        return None

    def constant(self, source_name: str) -> Optional[Constant]:
        for c in self.constants:
            if c.ast.name == source_name:
                return c
        return None

    def service(self, source_name: str) -> Optional[Service]:
        for svc in self.services:
            if svc.ast.name == source_name:
                return svc
        return None

    def declaration(self, source_name: str) -> Optional[Declaration]:
        """Type-level declaration (structure, enum, typedef, constant or service) by source name."""
        if self.globals.get(source_name) is None:
            return None
        return (self.structure(source_name) or self.enum(source_name) or self.typedef(source_name)
                or self.constant(source_name) or self.service(source_name))

    def expansion_record(self, struct_name: str) -> Optional[ExpansionRecord]:
        return self.expanded_structs.get(struct_name)

    def is_field_expanded(self, struct_name: str, field_name: str) -> bool:
        record = self.expanded_structs.get(struct_name)
        return record is not None and record.is_expanded(field_name)
