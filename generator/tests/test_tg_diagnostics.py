#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import os

import pytest

from conftest import has_error_code
from tg_context import GenerationContext, LogLevel
from tg_diagnostics import DIAGNOSTIC_CODE_FAMILIES, Diagnostic, diag_from_error
from tg_errors import (
    AnnotationGrammarError,
    ExpansionIdCollisionError,
    IdentifierError,
    IncludeCycleError,
    NameConflictError,
    ScopeBuildError,
    TypeResolutionError,
)
from tg_logger import log_debug, log_diagnostic, log_error, log_info, log_stage, log_warning, timed_stage


@pytest.mark.parametrize(
    "error_class",
    [
        ScopeBuildError,
        NameConflictError,
        IdentifierError,
        AnnotationGrammarError,
        ExpansionIdCollisionError,
        IncludeCycleError,
        TypeResolutionError,
    ],
)
def test_every_error_code_is_registered(error_class):
    family = error_class.code.split("-")[0]

    assert error_class.code in DIAGNOSTIC_CODE_FAMILIES[family]


def test_error_format():
    assert ScopeBuildError("boom", "x.thrift").format() == "x.thrift: error: [BLD-0001] boom"
    assert ScopeBuildError("boom").format() == "error: [BLD-0001] boom"
    assert IncludeCycleError("[BLD-0050] loop").format() == "error: [BLD-0050] loop"


def test_error_messages():
    assert TypeResolutionError("Foo", "bar").message == "unresolved type 'Foo' (field 'bar')"
    assert TypeResolutionError("Foo").message == "unresolved type 'Foo'"
    err = ExpansionIdCollisionError("Outer", 1001, "x", "base.code")
    assert "1001" in err.message
    assert "'base.code'" in err.message


def test_diag_from_error():
    diag = diag_from_error(TypeResolutionError("Foo", "bar", "m.thrift"))

    assert diag.kind == "error"
    assert diag.message == "[RES-0010] unresolved type 'Foo' (field 'bar')"
    assert diag.filename == "m.thrift"
    assert has_error_code([diag], "RES-0010")
    assert not has_error_code([diag], "BLD-0001")


def test_diag_from_error_falls_back_to_given_filename():
    diag = diag_from_error(NameConflictError("NewUser", "$new:User", "NewUser"), "main.thrift")

    assert diag.filename == "main.thrift"
    assert diag.message.startswith("[BLD-0010] ")


def test_diagnostic_format():
    diag = Diagnostic(kind="warning", message="careful", filename="a.thrift")

    assert diag.format() == f"{os.path.abspath('a.thrift')}: warning: careful"
    assert Diagnostic(kind="error", message="bad").format() == "error: bad"


def test_logging_respects_level(capsys):
    context = GenerationContext(log_level=LogLevel.WARNING)

    log_error(context, "e")
    log_warning(context, "w")
    log_info(context, "i")
    log_debug(context, "d")

    assert capsys.readouterr().err == "e\nw\n"


def test_silent_context_logs_nothing(capsys):
    context = GenerationContext(log_level=LogLevel.SILENT)

    log_error(context, "e")
    log_stage(context, "Resolving types", "main.thrift")

    assert capsys.readouterr().err == ""


def test_rich_format_and_stages(capsys):
    context = GenerationContext(log_level=LogLevel.INFO, log_rich_format=True)

    log_stage(context, "Resolving types", "main.thrift")
    log_stage(context, "Pruning")

    err = capsys.readouterr().err.splitlines()
    assert err[0].endswith("[INFO] Resolving types for 'main.thrift'")
    assert err[1].endswith("[INFO] Pruning...")


def test_timed_stage_reports_elapsed_time_at_debug(capsys):
    with timed_stage(GenerationContext(log_level=LogLevel.DEBUG), "Resolving types", "main.thrift"):
        pass
    with timed_stage(GenerationContext(log_level=LogLevel.INFO), "Installing names"):
        pass

    err = capsys.readouterr().err.splitlines()
    assert err[0] == "Resolving types for 'main.thrift'"
    assert err[1].startswith("Resolving types for 'main.thrift' done in ")
    assert err[1].endswith(" ms")
    assert err[2:] == ["Installing names..."]


def test_timed_stage_logs_no_completion_on_failure(capsys):
    with pytest.raises(NameConflictError):
        with timed_stage(GenerationContext(log_level=LogLevel.DEBUG), "Installing names"):
            raise NameConflictError("NewS", "$new:S", "NewS")

    assert capsys.readouterr().err == "Installing names...\n"


def test_log_diagnostic_uses_its_kind(capsys):
    warning = Diagnostic(kind="warning", message="careful")
    error = Diagnostic(kind="error", message="[RES-0010] bad")

    log_diagnostic(GenerationContext(log_level=LogLevel.ERROR), warning)
    log_diagnostic(GenerationContext(log_level=LogLevel.ERROR), error)

    assert capsys.readouterr().err == "error: [RES-0010] bad\n"
