#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Set, Tuple

from tg_ast import Category, Type
from tg_context import GenerationContext
from tg_logger import log_debug
from tg_namespace import Namespace
from tg_packages import relative_module_path, ts_module_of, ts_namespace

if TYPE_CHECKING:
    from tg_scope import Scope

# "pkg.Name" inside a resolved type string, e.g. "map[base.Code]*common.User".
_QUALIFIER_RE = re.compile(r"([A-Za-z_][A-Za-z0-9_]*)\.[A-Za-z_]")
# Quoted string literal of a default value or constant initializer.
_STRING_LITERAL_RE = re.compile(r'"(?:[^"\\]|\\.)*"')


class ImportManager:
    """
    Import aliases of one generated file.

    Every import path gets a collision-free alias. Aliases start out used;
    the unused-import pruner flips those whose types no longer appear in
    any resolved type name.
    """

    def __init__(self):
        self._aliases = Namespace()
        self._path2alias: Dict[str, str] = {}
        self.lib_not_used: Set[str] = set()

    def add(self, pkg: str, path: str) -> str:
        alias = self._path2alias.get(path)
        if alias is not None:
            return alias
        alias = self._aliases.add(pkg, path)
        self._path2alias[path] = alias
        return alias

    def get(self, path: str) -> Optional[str]:
        return self._path2alias.get(path)

    def use(self, alias: str) -> None:
        self.lib_not_used.discard(alias)

    def mark_unused(self, alias: str) -> None:
        self.lib_not_used.add(alias)

    def is_used(self, alias: str) -> bool:
        return alias not in self.lib_not_used

    def imports(self) -> List[Tuple[str, str]]:
        """(alias, path) of every used import, sorted by path."""
        return sorted(
            ((alias, path) for path, alias in self._path2alias.items() if alias not in self.lib_not_used),
            key=lambda item: item[1],
        )


def collect_qualifiers(type_names: Iterable[str]) -> Set[str]:
    """Package qualifiers used by type names and values, ignoring string literal contents."""
    used: Set[str] = set()
    for name in type_names:
        if name:
            used.update(_QUALIFIER_RE.findall(_STRING_LITERAL_RE.sub('""', name)))
    return used


def resolved_type_names(scope: "Scope") -> Iterable[str]:
    """
    Every resolved type string and value the generated code of a scope spells
    out: fields (an expanded field contributes its replacements, not
    itself), typedefs, constants and function signatures.
    """
    for st in scope.all_struct_likes():
        for f in st.fields:
            if not f.is_expandable:
                yield f.type_name
                yield f.default_value
            for ef in f.expanded_fields:
                yield ef.type_name
                yield ef.default_value
    for t in scope.typedefs:
        yield t.type_name
    for c in scope.constants:
        yield c.type_name
        yield c.init
    for svc in scope.services:
        for fun in svc.functions:
            for a in fun.arguments:
                yield a.type_name
            yield fun.response_type


def prune_unused_imports(context: GenerationContext, scope: "Scope") -> List[str]:
    """
    Mark unused every include whose alias no longer qualifies any resolved
    type name of the scope. Returns the aliases that were flipped.
    """
    actual = collect_qualifiers(resolved_type_names(scope))
    pruned: List[str] = []
    for inc in scope.live_includes():
        if scope.imports.get(inc.import_path) is None:
            # Same package: nothing is imported.
            continue
        alias = inc.package_name
        if scope.imports.is_used(alias) and alias not in actual:
            scope.imports.mark_unused(alias)
            pruned.append(alias)
            log_debug(context, f"{scope.filename}: import '{inc.import_path}' ({alias}) is not used after expansion")
    return pruned


# =========================
# TypeScript module imports
# =========================

@dataclass
class TsImport:
    """Types one generated TypeScript module imports from another, and the relative path to it."""
    module: str
    types: List[str] = field(default_factory=list)
    path: str = ""


_TS_IMPORTABLE = frozenset({
    Category.ENUM,
    Category.STRUCT,
    Category.UNION,
    Category.EXCEPTION,
    Category.TYPEDEF,
})


def _declaring_scope(home: "Scope", t: Type) -> Optional["Scope"]:
    qualifier, _ = t.split_name()
    if not qualifier or qualifier == home.ast.reference_name:
        return home
    for inc in home.live_includes():
        if inc.matches(qualifier):
            return inc.scope
    return None


def _collect_ts_type(scope: "Scope", home: "Scope", t: Optional[Type], modules: Dict[str, List[str]]) -> None:
    if t is None:
        return
    _collect_ts_type(scope, home, t.value_type, modules)
    _collect_ts_type(scope, home, t.key_type, modules)
    if t.category not in _TS_IMPORTABLE:
        return
    decl_scope = _declaring_scope(home, t)
    if decl_scope is None or decl_scope is scope:
        return
    types = modules.setdefault(ts_module_of(decl_scope.ast), [])
    bare = t.split_name()[1]
    if bare not in types:
        types.append(bare)


def collect_ts_imports(scope: "Scope") -> List[TsImport]:
    """
    Modules the TypeScript output of a scope imports, with the type names
    taken from each. An expanded field contributes the types of its
    replacements (looked up in the file that declares them), not its own.
    """
    modules: Dict[str, List[str]] = {}
    for st in scope.struct_likes():
        for f in st.fields:
            if not f.is_expandable:
                _collect_ts_type(scope, scope, f.type, modules)
            for ef in f.expanded_fields:
                _collect_ts_type(scope, ef.origin or scope, ef.type, modules)
    for svc in scope.services:
        for fun in svc.functions:
            for a in fun.ast.arguments:
                _collect_ts_type(scope, scope, a.type, modules)
            if not fun.ast.void:
                _collect_ts_type(scope, scope, fun.ast.function_type, modules)

    current = ts_namespace(scope.ast)
    return [
        TsImport(module=module, types=types, path=relative_module_path(current, module))
        for module, types in modules.items()
    ]
