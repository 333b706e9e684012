#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from typing import Iterable, Iterator, List, NamedTuple, Optional

import tg_ast
from tg_scope import Include, Scope


class StructReference(NamedTuple):
    """A referenced structure definition and the scope that declares it."""
    struct: tg_ast.StructLike
    scope: Scope


def include_matches(inc: Include, qualifier: str) -> bool:
    return inc.matches(qualifier)


def _find_by_name(ast: tg_ast.Thrift, name: str) -> Optional[tg_ast.StructLike]:
    for group in (ast.structs, ast.unions, ast.exceptions):
        for s in group:
            if s.name == name:
                return s
    return None


def _at_index(structs: List[tg_ast.StructLike], index: int, name: str) -> Optional[tg_ast.StructLike]:
    if 0 <= index < len(structs) and structs[index].name == name:
        return structs[index]
    return None


def _qualified_first(includes: Iterable[Include], qualifier: str) -> Iterator[Include]:
    """Includes designated by the qualifier first, then the rest, each in original order."""
    includes = list(includes)
    if qualifier:
        yield from (inc for inc in includes if include_matches(inc, qualifier))
        yield from (inc for inc in includes if not include_matches(inc, qualifier))
    else:
        yield from includes


def resolve_struct_reference(scope: Scope, f: tg_ast.Field) -> Optional[StructReference]:
    """
    Locate the structure a struct-like field refers to.

    A structural reference (index into a file's declaration table) is tried
    first against every included file and then against the current file.
    Without one, the name is searched in the current file (structs, unions,
    exceptions) and then in each transitively included file; a qualified name
    only matches includes designated by its qualifier.

    Returns None when nothing matches; callers treat that as "not expandable".
    """
    t = f.type
    if t is None or not t.category.is_struct_like():
        return None

    qualifier, bare = t.split_name()
    ref = t.reference
    if ref is not None:
        name = ref.name or bare
        for inc in _qualified_first(scope.transitive_includes(), qualifier):
            found = _at_index(inc.scope.ast.structs, ref.index, name)
            if found is not None:
                return StructReference(found, inc.scope)
        found = _at_index(scope.ast.structs, ref.index, name)
        if found is not None:
            return StructReference(found, scope)
        return None

    if not qualifier:
        found = _find_by_name(scope.ast, bare)
        if found is not None:
            return StructReference(found, scope)

    for inc in scope.transitive_includes():
        if qualifier and not include_matches(inc, qualifier):
            continue
        found = _find_by_name(inc.scope.ast, bare)
        if found is not None:
            return StructReference(found, inc.scope)
    return None
