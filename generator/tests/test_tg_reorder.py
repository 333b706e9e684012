#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import pytest

from conftest import BOOL, I32, I64, STRING, fld, list_of, struct, thrift
from tg_driver import build_scope
from tg_reorder import WORD, field_layout, layout_size, reorder_fields


def test_field_layout():
    assert field_layout(fld(1, "b", BOOL)) == (1, 1)
    assert field_layout(fld(1, "i", I32)) == (4, 4)
    assert field_layout(fld(1, "s", STRING)) == (2 * WORD, WORD)
    assert field_layout(fld(1, "l", list_of(I32))) == (3 * WORD, WORD)
    # Optional scalars are stored behind a pointer.
    assert field_layout(fld(1, "o", I32, optional=True)) == (WORD, WORD)


def test_layout_size():
    assert layout_size([fld(1, "a", BOOL), fld(2, "b", I64), fld(3, "c", BOOL)]) == 24
    assert layout_size([fld(1, "b", I64), fld(2, "a", BOOL), fld(3, "c", BOOL)]) == 16
    assert layout_size([]) == 0


def test_reorder_shrinks_padding(context):
    main = thrift("main.thrift", structs=[struct("P", fld(1, "a", BOOL), fld(2, "b", I64), fld(3, "c", BOOL))])
    st = build_scope(main, context).structure("P")

    diff = reorder_fields(st)

    assert (diff.original, diff.arranged) == (24, 16)
    assert diff.percent() == pytest.approx(33.33, abs=0.01)
    assert [f.source_name for f in st.fields] == ["b", "a", "c"]


def test_reorder_keeps_optimal_layout(context):
    main = thrift("main.thrift", structs=[struct("P", fld(1, "b", I64), fld(2, "a", BOOL), fld(3, "i", I32))])
    st = build_scope(main, context).structure("P")

    diff = reorder_fields(st)

    assert diff.original == diff.arranged
    assert [f.source_name for f in st.fields] == ["b", "a", "i"]


def test_reorder_skips_small_structs(context):
    main = thrift("main.thrift", structs=[struct("One", fld(1, "a", BOOL))])

    assert reorder_fields(build_scope(main, context).structure("One")) is None
