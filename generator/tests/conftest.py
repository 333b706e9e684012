#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable, Optional

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tg_ast import (
    Annotation,
    Annotations,
    Category,
    ConstValue,
    Enum,
    EnumValue,
    Field,
    Include,
    Namespace,
    Reference,
    Requiredness,
    StructLike,
    Thrift,
    Type,
)
from tg_context import GenerationContext, LogLevel
from tg_diagnostics import Diagnostic


# --- type descriptors ---

def prim(category: Category) -> Type:
    return Type(name=category.name.lower(), category=category)


I32 = prim(Category.I32)
I64 = prim(Category.I64)
STRING = prim(Category.STRING)
BOOL = prim(Category.BOOL)
DOUBLE = prim(Category.DOUBLE)
BINARY = prim(Category.BINARY)


def struct_type(name: str, reference: Optional[Reference] = None) -> Type:
    return Type(name=name, category=Category.STRUCT, reference=reference)


def enum_type(name: str) -> Type:
    return Type(name=name, category=Category.ENUM)


def typedef_type(name: str) -> Type:
    return Type(name=name, category=Category.TYPEDEF)


def list_of(elem: Type) -> Type:
    return Type(name="list", category=Category.LIST, value_type=elem)


def set_of(elem: Type) -> Type:
    return Type(name="set", category=Category.SET, value_type=elem)


def map_of(key: Type, value: Type) -> Type:
    return Type(name="map", category=Category.MAP, key_type=key, value_type=value)


# --- declarations ---

def annos(pairs: Optional[dict] = None) -> Annotations:
    result = Annotations()
    for key, value in (pairs or {}).items():
        values = value if isinstance(value, list) else [value]
        result.append(Annotation(key=key, values=values))
    return result


def fld(
    id: int,
    name: str,
    t: Type,
    *,
    optional: bool = False,
    required: bool = False,
    default: Optional[ConstValue] = None,
    annotations: Optional[dict] = None,
) -> Field:
    requiredness = Requiredness.DEFAULT
    if optional:
        requiredness = Requiredness.OPTIONAL
    elif required:
        requiredness = Requiredness.REQUIRED
    return Field(
        id=id,
        name=name,
        type=t,
        requiredness=requiredness,
        default=default,
        annotations=annos(annotations),
    )


def struct(
    name: str,
    *fields: Field,
    category: str = "struct",
    expandable: Optional[bool] = None,
    annotations: Optional[dict] = None,
) -> StructLike:
    return StructLike(
        category=category,
        name=name,
        fields=list(fields),
        annotations=annos(annotations),
        expandable=expandable,
    )


def enum(name: str, *values: str) -> Enum:
    return Enum(name=name, values=[EnumValue(name=v, value=i) for i, v in enumerate(values)])


def thrift(
    filename: str,
    *,
    go_namespace: Optional[str] = None,
    includes: Iterable[Thrift] = (),
    **decls,
) -> Thrift:
    namespaces = [Namespace(language="go", name=go_namespace)] if go_namespace else []
    return Thrift(
        filename=filename,
        includes=[Include(path=t.filename, reference=t) for t in includes],
        namespaces=namespaces,
        **decls,
    )


# --- helpers ---

def has_error_code(diags: Iterable[Diagnostic], code: str) -> bool:
    return any(d.kind == "error" and f"[{code}]" in d.message for d in diags)


@pytest.fixture
def context() -> GenerationContext:
    return GenerationContext(log_level=LogLevel.SILENT)


@pytest.fixture
def make_context():
    def _make(*options: str) -> GenerationContext:
        ctx = GenerationContext(log_level=LogLevel.SILENT)
        ctx.features.handle_options(options)
        return ctx

    return _make


@pytest.fixture
def base_idl() -> Thrift:
    """
    base.thrift: an expandable Base carrying an error code and a message,
    plus a plain MyData.
    """
    return thrift(
        "base.thrift",
        go_namespace="example.base",
        enums=[enum("ErrorCode", "OK", "FAIL")],
        structs=[
            struct(
                "Base",
                fld(1, "code", enum_type("ErrorCode")),
                fld(2, "msg", STRING),
                expandable=True,
            ),
            struct(
                "MyData",
                fld(1, "id", I64),
                fld(2, "tags", list_of(STRING)),
            ),
        ],
    )
