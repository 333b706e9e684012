#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

# tg_errors.py
from __future__ import annotations

from typing import Optional


class OptionError(ValueError):
    """An invalid generator option (bad value or unsupported target)."""
    pass


class ScopeBuildError(Exception):
    """
    A scope could not be built for one IDL file.

    Raised during scope construction or type resolution; the driver turns
    it into an error diagnostic for that file and carries on with siblings.
    """

    code = "BLD-0001"

    def __init__(self, message: str, filename: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.filename = filename

    def format(self) -> str:
        message = self.message
        if f"[{self.code}]" not in message:
            message = f"[{self.code}] {message}"
        if self.filename:
            return f"{self.filename}: error: {message}"
        return f"error: {message}"


class NameConflictError(ScopeBuildError):
    """A literal name could not be reserved because another key already owns it."""

    code = "BLD-0010"

    def __init__(self, name: str, key: str, owner: str, filename: Optional[str] = None):
        super().__init__(f"name '{name}' for '{key}' is already taken by '{owner}'", filename)
        self.name = name
        self.key = key
        self.owner = owner


class IdentifierError(ScopeBuildError):
    code = "BLD-0020"


class AnnotationGrammarError(ScopeBuildError):
    code = "BLD-0030"


class ExpansionIdCollisionError(ScopeBuildError):
    """Two fields of one structure ended up with the same id after expansion."""

    code = "BLD-0040"

    def __init__(self, struct_name: str, field_id: int, first: str, second: str, filename: Optional[str] = None):
        super().__init__(
            f"expanded field '{second}' of '{struct_name}' reuses field id {field_id} already held by '{first}'",
            filename,
        )
        self.struct_name = struct_name
        self.field_id = field_id


class IncludeCycleError(ScopeBuildError):
    code = "BLD-0050"


class TypeResolutionError(ScopeBuildError):
    """A type name could not be resolved to any declaration in-file or through includes."""

    code = "RES-0010"

    def __init__(self, type_name: str, owner: Optional[str] = None, filename: Optional[str] = None):
        where = f" (field '{owner}')" if owner else ""
        super().__init__(f"unresolved type '{type_name}'{where}", filename)
        self.type_name = type_name
        self.owner = owner
