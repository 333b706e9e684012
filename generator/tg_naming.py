#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import re

from tg_context import Features
from tg_errors import IdentifierError

# Prefix of synthetic logical keys and synthesized declaration names.
SYNTH_PREFIX = "$"

GO_KEYWORDS = frozenset({
    "break", "default", "func", "interface", "select",
    "case", "defer", "go", "map", "struct",
    "chan", "else", "goto", "package", "switch",
    "const", "fallthrough", "if", "range", "type",
    "continue", "for", "import", "return", "var",
})

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _p(key: str) -> str:
    return SYNTH_PREFIX + key


def upper_first_rune(s: str) -> str:
    return s[:1].upper() + s[1:]


def lower_first_rune(s: str) -> str:
    return s[:1].lower() + s[1:]


def identify(raw: str, features: Features) -> str:
    """
    Turn an IDL name into an exported Go-style identifier.

    'user_name' -> 'UserName', '$GetUser_args' -> 'GetUserArgs'. With
    compatible_names, identifiers that look like generated ones
    (New*, *Args, *Result) get a '_' suffix unless they are synthesized.
    """
    synthesized = raw.startswith(SYNTH_PREFIX)
    name = raw[len(SYNTH_PREFIX):] if synthesized else raw
    if not _IDENT_RE.match(name):
        raise IdentifierError(f"'{raw}' is not a valid identifier")
    parts = [p for p in name.split("_") if p]
    if not parts:
        raise IdentifierError(f"'{raw}' does not contain any identifier characters")
    result = "".join(upper_first_rune(p) for p in parts)

    if not synthesized and features.compatible_names:
        if result.startswith("New") or result.endswith("Args") or result.endswith("Result"):
            result += "_"
    return result


def id2str(field_id: int) -> str:
    if field_id < 0:
        return "_" + str(-field_id)
    return str(field_id)


def snakify(ident: str) -> str:
    """
    'HTTPRequest' -> 'http_request', 'GetUserIP' -> 'get_user_ip'.

    An upper-case rune starts a new word when it follows a lower-case rune
    or when it ends an acronym (the next rune is lower-case).
    """
    out = []
    n = len(ident)
    for i, r in enumerate(ident):
        if r.isupper():
            if i > 0 and (ident[i - 1].islower() or (i + 1 < n and ident[i + 1].islower())):
                if out and out[-1] != "_":
                    out.append("_")
            out.append(r.lower())
        else:
            out.append(r)
    return "".join(out)


def lower_camel_case(ident: str) -> str:
    """'HTTPRequest' -> 'httpRequest', 'Get_API' -> 'getApi'."""
    words = [w for w in snakify(ident).split("_") if w]
    if not words:
        return ident
    return words[0] + "".join(upper_first_rune(w) for w in words[1:])


def property_name(name: str, features: Features) -> str:
    if features.snake_style_property_name:
        return snakify(name)
    if features.lower_camel_case_property_name:
        return lower_camel_case(name)
    return name


def local_name(raw: str, features: Features) -> str:
    """Name of a parameter or local variable: lower first rune, keywords escaped."""
    name = lower_first_rune(identify(raw, features))
    if name in GO_KEYWORDS:
        name = "_" + name
    return name
