#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import os
from dataclasses import dataclass
from typing import Optional

from tg_errors import ScopeBuildError


DIAGNOSTIC_CODE_FAMILIES = {
    "BLD": [
        "BLD-0001",
        "BLD-0010",
        "BLD-0020",
        "BLD-0030",
        "BLD-0040",
        "BLD-0050",
    ],
    "RES": [
        "RES-0010",
    ],
}


@dataclass
class Diagnostic:
    kind: str  # "error" or "warning"
    message: str
    filename: Optional[str] = None  # IDL file path

    def format(self) -> str:
        loc = ""
        if self.filename is not None:
            loc = f"{os.path.abspath(str(self.filename))}: "
        return f"{loc}{self.kind}: {self.message}"


def diag_from_error(err: ScopeBuildError, filename: Optional[str] = None) -> Diagnostic:
    message = err.message
    if f"[{err.code}]" not in message:
        message = f"[{err.code}] {message}"
    return Diagnostic(kind="error", message=message, filename=err.filename or filename)
