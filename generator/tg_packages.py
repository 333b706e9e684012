#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

"""
File to package mapping.

Each IDL file maps to one generated package. The mapping is computed once per
file from its declared namespace (or its file stem when none is declared) and
never re-derived at call sites.
"""

import re
from typing import Tuple

from tg_ast import Thrift
from tg_context import Features

_NON_IDENT_RE = re.compile(r"[^A-Za-z0-9_]")

TS_NAMESPACE_LANGUAGES = ("ts", "typescript")


def package_path(namespace: str) -> str:
    """'example.base' -> 'example/base'."""
    return namespace.replace(".", "/")


def package_name(path: str) -> str:
    """Last path segment, lowered, with characters that cannot appear in an identifier replaced by '_'."""
    last = path.rstrip("/").rsplit("/", 1)[-1]
    name = _NON_IDENT_RE.sub("_", last).lower()
    if name[:1].isdigit():
        name = "_" + name
    return name


def import_of(ast: Thrift, features: Features) -> Tuple[str, str]:
    """Return (package name, import path) of the code generated for 'ast'."""
    path = package_path(ast.get_namespace_or_reference_name("go"))
    if features.package_prefix:
        path = features.package_prefix.rstrip("/") + "/" + path
    return package_name(path), path


def ts_namespace(ast: Thrift) -> str:
    """TypeScript namespace of a file as a path ('common.base' -> 'common/base'), or '' if undeclared."""
    for lang in TS_NAMESPACE_LANGUAGES:
        ns = ast.get_namespace(lang)
        if ns:
            return package_path(ns)
    return ""


def ts_module_of(ast: Thrift) -> str:
    """Module path of a file for TypeScript imports: its ts namespace, falling back to the file stem."""
    return ts_namespace(ast) or ast.reference_name


def relative_module_path(current_namespace: str, target_module: str) -> str:
    """
    Relative import path from a module in 'current_namespace' to 'target_module'.

    Siblings sharing a parent directory are one level apart
    ('common/base' -> 'common/enums' gives '../enums'); otherwise the path
    climbs to the root and descends ('domain/user' -> 'common/base' gives
    '../../common/base'). A file without a namespace imports from './'.
    """
    if not current_namespace:
        return "./" + target_module

    current = current_namespace.split("/")
    target = target_module.split("/")
    if len(current) > 1 and len(target) > 1 and current[:-1] == target[:-1]:
        return "../" + target[-1]
    return "/".join([".."] * len(current) + target)
