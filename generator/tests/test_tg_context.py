#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import pytest

from tg_context import Features, GenerationContext, LogLevel
from tg_errors import OptionError


def test_default_context():
    ctx = GenerationContext.default()

    assert ctx.log_level == LogLevel.WARNING
    assert ctx.features.generate_setter is True
    assert ctx.features.target == "go"


def test_handle_options_sets_flags():
    f = Features()
    unknown = f.handle_options(["gen_deep_equal=true", "keep_unknown_fields", "generate_setter=False"])

    assert unknown == []
    assert f.gen_deep_equal is True
    assert f.keep_unknown_fields is True
    assert f.generate_setter is False


def test_handle_options_returns_unknown_names():
    f = Features()

    assert f.handle_options(["frugal_tag=true", "", "reorder_fields"]) == ["frugal_tag"]
    assert f.reorder_fields is True


def test_handle_options_string_and_int_values():
    f = Features()
    f.handle_options(["package_prefix=github.com/acme/gen", "target=typescript", "resolution_workers=8"])

    assert f.package_prefix == "github.com/acme/gen"
    assert f.target == "typescript"
    assert f.resolution_workers == 8


def test_naming_styles_are_mutually_exclusive():
    f = Features()
    f.handle_options(["snake_style_property_name=true"])

    assert f.snake_style_property_name is True
    assert f.lower_camel_case_property_name is False

    f.handle_options(["lower_camel_case_property_name"])

    assert f.snake_style_property_name is False
    assert f.lower_camel_case_property_name is True


@pytest.mark.parametrize(
    "option",
    ["gen_deep_equal=yes", "target=rust", "resolution_workers=0", "resolution_workers=many"],
)
def test_bad_options_raise(option):
    with pytest.raises(OptionError):
        Features().handle_options([option])
