#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from tg_ast import Category, Field
import tg_scope

WORD = 8

# (size, alignment) of the generated storage of each category.
_LAYOUT = {
    Category.BOOL: (1, 1),
    Category.BYTE: (1, 1),
    Category.I8: (1, 1),
    Category.I16: (2, 2),
    Category.I32: (4, 4),
    Category.I64: (8, 8),
    Category.DOUBLE: (8, 8),
    Category.ENUM: (8, 8),
    Category.STRING: (2 * WORD, WORD),
    Category.BINARY: (3 * WORD, WORD),
    Category.LIST: (3 * WORD, WORD),
    Category.SET: (3 * WORD, WORD),
}


@dataclass
class ReorderDiff:
    original: int
    arranged: int

    def percent(self) -> float:
        if self.original == 0:
            return 0.0
        return (self.original - self.arranged) * 100.0 / self.original


def field_layout(f: Field) -> Tuple[int, int]:
    """Size and alignment of a field's storage; optional scalars without a default are pointers."""
    c = f.type.category
    if f.is_optional and f.default is None and (c is Category.ENUM or (c.is_base_type() and c is not Category.BINARY)):
        return WORD, WORD
    return _LAYOUT.get(c, (WORD, WORD))


def _align_up(n: int, a: int) -> int:
    return (n + a - 1) // a * a


def layout_size(fields: Sequence[Field]) -> int:
    offset = 0
    max_align = 1
    for f in fields:
        size, align = field_layout(f)
        offset = _align_up(offset, align) + size
        max_align = max(max_align, align)
    return _align_up(offset, max_align)


def _sort_key(f: tg_scope.Field) -> Tuple[int, int]:
    size, align = field_layout(f.ast)
    return -align, -size


def reorder_fields(st: tg_scope.StructLike) -> Optional[ReorderDiff]:
    """
    Stable-sort the fields of 'st' by descending alignment, then size, when
    that shrinks the layout. Returns None for structures with fewer than two
    fields.
    """
    if len(st.fields) < 2:
        return None
    before = layout_size([f.ast for f in st.fields])
    arranged = sorted(st.fields, key=_sort_key)
    after = layout_size([f.ast for f in arranged])
    if after < before:
        st.fields = arranged
        return ReorderDiff(before, after)
    return ReorderDiff(before, before)
