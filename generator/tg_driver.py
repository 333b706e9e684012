#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import io
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Set

from tg_ast import Thrift
from tg_builder import ScopeBuilder
from tg_context import GenerationContext
from tg_diagnostics import Diagnostic, diag_from_error
from tg_errors import IncludeCycleError, ScopeBuildError
from tg_logger import log_debug, log_diagnostic, log_info, log_stage
from tg_scope import Scope

Renderer = Callable[[Scope, io.StringIO], None]


@dataclass
class GenerationResult:
    """Outcome of one file: its scope and rendered output, or the diagnostics explaining why not."""
    filename: str
    scope: Optional[Scope] = None
    output: str = ""
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.scope is not None and not any(d.kind == "error" for d in self.diagnostics)


class BufferPool:
    """Reusable output buffers; a checked-out buffer belongs to one renderer until returned."""

    def __init__(self):
        self._free: List[io.StringIO] = []
        self._lock = threading.Lock()

    @contextmanager
    def checkout(self) -> Iterator[io.StringIO]:
        with self._lock:
            buf = self._free.pop() if self._free else io.StringIO()
        buf.seek(0)
        buf.truncate(0)
        try:
            yield buf
        finally:
            with self._lock:
                self._free.append(buf)

    def __len__(self) -> int:
        return len(self._free)


class GeneratorDriver:
    """
    Builds scopes for a batch of IDL files.

    Scopes are memoized per filename, so a file included from several places
    is built once. A failing file yields an error diagnostic and the rest of
    the batch carries on.

    Entry points:
      - build_scope(ast): build (or reuse) the scope of one file; raises ScopeBuildError.
      - generate(asts, renderer): build every file and render it into a pooled buffer.
    """

    def __init__(self, context: Optional[GenerationContext] = None):
        self.context = context or GenerationContext.default()
        # Scopes successfully built (by filename).
        self.scope_cache: Dict[str, Scope] = {}
        # Files currently being built (for cycle detection).
        self._building: Set[str] = set()
        self.buffers = BufferPool()
        self._builder = ScopeBuilder(self.context, self.build_scope)

    def build_scope(self, ast: Thrift) -> Scope:
        key = ast.filename
        # Check for cycles *before* checking the cache.
        if key in self._building:
            raise IncludeCycleError(f"cyclic include detected involving '{key}'", key)

        if key in self.scope_cache:
            log_debug(self.context, f"Scope for '{key}' already built (cache hit)")
            return self.scope_cache[key]

        log_debug(self.context, f"Building scope for '{key}'")
        self._building.add(key)
        try:
            scope = self._builder.build(ast)
        finally:
            self._building.discard(key)

        self.scope_cache[key] = scope
        return scope

    def generate(self, asts: Iterable[Thrift], renderer: Optional[Renderer] = None) -> List[GenerationResult]:
        results: List[GenerationResult] = []
        for ast in asts:
            log_stage(self.context, "Generating", ast.filename)
            result = GenerationResult(filename=ast.filename)
            try:
                result.scope = self.build_scope(ast)
            except ScopeBuildError as e:
                diag = diag_from_error(e, ast.filename)
                log_diagnostic(self.context, diag)
                result.diagnostics.append(diag)
                results.append(result)
                continue

            if renderer is not None:
                with self.buffers.checkout() as buf:
                    renderer(result.scope, buf)
                    result.output = buf.getvalue()
            results.append(result)

        failed = len([r for r in results if not r.ok])
        log_info(self.context, f"Generation complete: {len(results)} file(s), {failed} failed")
        return results


def build_scope(ast: Thrift, context: Optional[GenerationContext] = None) -> Scope:
    """Build the scope of one file (and its includes) with a fresh driver."""
    return GeneratorDriver(context).build_scope(ast)
