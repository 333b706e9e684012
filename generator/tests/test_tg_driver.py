#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import pytest

from conftest import I32, fld, has_error_code, struct, struct_type, thrift
from tg_ast import Include
from tg_driver import BufferPool, GeneratorDriver
from tg_errors import IncludeCycleError


def test_failing_file_does_not_stop_the_batch(context, base_idl):
    bad = thrift("bad.thrift", structs=[struct("S", fld(1, "x", struct_type("Missing")))])
    good = thrift("good.thrift", includes=[base_idl], structs=[struct("T", fld(1, "d", struct_type("base.MyData")))])

    results = GeneratorDriver(context).generate([bad, good])

    assert [r.filename for r in results] == ["bad.thrift", "good.thrift"]
    assert not results[0].ok
    assert results[0].scope is None
    assert has_error_code(results[0].diagnostics, "RES-0010")
    assert results[0].diagnostics[0].filename == "bad.thrift"
    assert results[1].ok
    assert results[1].diagnostics == []


def test_include_cycle_is_detected(context):
    a = thrift("a.thrift")
    b = thrift("b.thrift", includes=[a])
    a.includes.append(Include(path="b.thrift", reference=b))

    driver = GeneratorDriver(context)

    with pytest.raises(IncludeCycleError):
        driver.build_scope(a)
    results = driver.generate([a])
    assert has_error_code(results[0].diagnostics, "BLD-0050")
    assert "a.thrift" not in driver.scope_cache


def test_shared_include_is_built_once(context, base_idl):
    one = thrift("one.thrift", includes=[base_idl])
    two = thrift("two.thrift", includes=[base_idl])

    driver = GeneratorDriver(context)
    results = driver.generate([one, two])

    assert results[0].scope.includes[0].scope is results[1].scope.includes[0].scope
    assert driver.scope_cache["base.thrift"] is results[0].scope.includes[0].scope
    assert set(driver.scope_cache) == {"base.thrift", "one.thrift", "two.thrift"}


def test_cached_scope_is_returned(context, base_idl):
    driver = GeneratorDriver(context)

    assert driver.build_scope(base_idl) is driver.build_scope(base_idl)


def test_renderer_writes_into_pooled_buffers(context):
    files = [thrift("a.thrift", go_namespace="x.alpha"), thrift("b.thrift", go_namespace="x.beta")]

    def render(scope, buf):
        buf.write(f"package {scope.package_name}\n")

    driver = GeneratorDriver(context)
    results = driver.generate(files, render)

    assert [r.output for r in results] == ["package alpha\n", "package beta\n"]
    assert len(driver.buffers) == 1


def test_buffer_pool_reuses_cleared_buffers():
    pool = BufferPool()

    with pool.checkout() as first:
        first.write("stale")
    with pool.checkout() as second:
        assert second is first
        assert second.getvalue() == ""
        with pool.checkout() as third:
            assert third is not second

    assert len(pool) == 2


def test_buffer_is_returned_when_rendering_fails():
    pool = BufferPool()

    with pytest.raises(RuntimeError):
        with pool.checkout():
            raise RuntimeError("render failed")

    assert len(pool) == 1


def test_include_failure_is_reported_on_the_including_file(context):
    broken = thrift("broken.thrift", structs=[struct("B", fld(1, "x", struct_type("Nope")))])
    main = thrift("main.thrift", includes=[broken], structs=[struct("M", fld(1, "v", I32))])

    results = GeneratorDriver(context).generate([main])

    assert not results[0].ok
    assert has_error_code(results[0].diagnostics, "RES-0010")
