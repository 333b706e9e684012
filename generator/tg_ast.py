#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
import enum
from pathlib import PurePosixPath
from typing import Iterator, List, Optional, Set, Tuple


# ==========================
# Thrift IDL AST definitions
# ==========================
#
# These nodes are produced by the (external) IDL parser. The scope builder
# treats them as read-only input.


class Category(enum.Enum):
    BOOL = enum.auto()
    BYTE = enum.auto()
    I8 = enum.auto()
    I16 = enum.auto()
    I32 = enum.auto()
    I64 = enum.auto()
    DOUBLE = enum.auto()
    STRING = enum.auto()
    BINARY = enum.auto()
    LIST = enum.auto()
    SET = enum.auto()
    MAP = enum.auto()
    ENUM = enum.auto()
    STRUCT = enum.auto()
    UNION = enum.auto()
    EXCEPTION = enum.auto()
    TYPEDEF = enum.auto()
    SERVICE = enum.auto()
    VOID = enum.auto()

    def is_struct_like(self) -> bool:
        return self in (Category.STRUCT, Category.UNION, Category.EXCEPTION)

    def is_container(self) -> bool:
        return self in (Category.LIST, Category.SET, Category.MAP)

    def is_base_type(self) -> bool:
        return self in _BASE_CATEGORIES


_BASE_CATEGORIES = frozenset({
    Category.BOOL,
    Category.BYTE,
    Category.I8,
    Category.I16,
    Category.I32,
    Category.I64,
    Category.DOUBLE,
    Category.STRING,
    Category.BINARY,
})


class Requiredness(enum.Enum):
    DEFAULT = enum.auto()
    REQUIRED = enum.auto()
    OPTIONAL = enum.auto()


@dataclass(frozen=True)
class Reference:
    """Structural link from a type descriptor to a declaration in another file."""
    index: int
    name: str


@dataclass
class Type:
    name: str  # e.g. "i32", "list", "User", "base.User"
    category: Category
    key_type: Optional["Type"] = None
    value_type: Optional["Type"] = None
    reference: Optional[Reference] = None

    @property
    def is_qualified(self) -> bool:
        return "." in self.name

    def split_name(self) -> Tuple[str, str]:
        """
        Split "base.MyData" into ("base", "MyData"); nested prefixes such as
        "a.b.MyData" keep everything before the last dot as the qualifier.
        Unqualified names give ("", name).
        """
        if "." not in self.name:
            return "", self.name
        qualifier, _, bare = self.name.rpartition(".")
        return qualifier, bare


@dataclass
class Annotation:
    key: str
    values: List[str]


class Annotations(list):
    """Ordered list of annotations; one key may carry several values."""

    def get(self, key: str) -> List[str]:
        values: List[str] = []
        for anno in self:
            if anno.key == key:
                values.extend(anno.values)
        return values


class ConstKind(enum.Enum):
    INT = enum.auto()
    DOUBLE = enum.auto()
    LITERAL = enum.auto()
    IDENTIFIER = enum.auto()
    LIST = enum.auto()
    MAP = enum.auto()


@dataclass
class ConstValue:
    kind: ConstKind
    value: object  # int, float, str, list of ConstValue, or list of (ConstValue, ConstValue)


@dataclass
class Field:
    id: int
    name: str
    type: Type
    requiredness: Requiredness = Requiredness.DEFAULT
    default: Optional[ConstValue] = None
    annotations: Annotations = field(default_factory=Annotations)

    @property
    def is_optional(self) -> bool:
        return self.requiredness is Requiredness.OPTIONAL


@dataclass
class StructLike:
    category: str  # "struct", "union" or "exception"
    name: str
    fields: List[Field] = field(default_factory=list)
    annotations: Annotations = field(default_factory=Annotations)
    expandable: Optional[bool] = None
    synthesized: bool = False


@dataclass
class EnumValue:
    name: str
    value: int
    annotations: Annotations = field(default_factory=Annotations)


@dataclass
class Enum:
    name: str
    values: List[EnumValue] = field(default_factory=list)
    annotations: Annotations = field(default_factory=Annotations)


@dataclass
class Typedef:
    alias: str
    type: Type
    annotations: Annotations = field(default_factory=Annotations)


@dataclass
class Constant:
    name: str
    type: Type
    value: ConstValue
    annotations: Annotations = field(default_factory=Annotations)


@dataclass
class Function:
    name: str
    function_type: Optional[Type]
    arguments: List[Field] = field(default_factory=list)
    throws: List[Field] = field(default_factory=list)
    oneway: bool = False
    annotations: Annotations = field(default_factory=Annotations)

    @property
    def void(self) -> bool:
        return self.function_type is None or self.function_type.category is Category.VOID


@dataclass
class Service:
    name: str
    functions: List[Function] = field(default_factory=list)
    extends: str = ""
    annotations: Annotations = field(default_factory=Annotations)


@dataclass
class Namespace:
    language: str
    name: str


@dataclass
class Include:
    path: str
    reference: Optional["Thrift"] = None
    used: bool = True


@dataclass
class Thrift:
    filename: str
    includes: List[Include] = field(default_factory=list)
    namespaces: List[Namespace] = field(default_factory=list)
    typedefs: List[Typedef] = field(default_factory=list)
    constants: List[Constant] = field(default_factory=list)
    enums: List[Enum] = field(default_factory=list)
    structs: List[StructLike] = field(default_factory=list)
    unions: List[StructLike] = field(default_factory=list)
    exceptions: List[StructLike] = field(default_factory=list)
    services: List[Service] = field(default_factory=list)

    @property
    def reference_name(self) -> str:
        """The name other files use to qualify this file's types ("base" for base.thrift)."""
        return PurePosixPath(self.filename).name.removesuffix(".thrift")

    def get_struct_likes(self) -> List[StructLike]:
        return [*self.structs, *self.unions, *self.exceptions]

    def get_namespace(self, language: str) -> Optional[str]:
        for ns in self.namespaces:
            if ns.language == language:
                return ns.name
        return None

    def get_namespace_or_reference_name(self, language: str) -> str:
        ns = self.get_namespace(language)
        if ns:
            return ns
        return self.reference_name

    def depth_first_search(self) -> Iterator["Thrift"]:
        """Yield every file in the include graph once, dependencies first."""
        visited: Set[int] = set()

        def visit(t: "Thrift") -> Iterator["Thrift"]:
            if id(t) in visited:
                return
            visited.add(id(t))
            for inc in t.includes:
                if inc.reference is not None:
                    yield from visit(inc.reference)
            yield t

        yield from visit(self)


def build_synthesized(func: Function) -> Tuple[StructLike, StructLike]:
    """
    Build the argument and result structures of a service function.

    The result structure carries 'success' (id 0) for non-void functions,
    followed by one optional field per declared exception.
    """
    args = StructLike(
        category="struct",
        name=f"{func.name}_args",
        fields=list(func.arguments),
        synthesized=True,
    )

    result_fields: List[Field] = []
    if not func.void:
        result_fields.append(
            Field(id=0, name="success", type=func.function_type, requiredness=Requiredness.OPTIONAL)
        )
    for t in func.throws:
        result_fields.append(
            Field(id=t.id, name=t.name, type=t.type, requiredness=Requiredness.OPTIONAL, annotations=t.annotations)
        )
    result = StructLike(
        category="struct",
        name=f"{func.name}_result",
        fields=result_fields,
        synthesized=True,
    )
    return args, result
