"""
Generation context for cross-cutting generator options.

This module defines the GenerationContext dataclass which holds the feature
flags and logging options shared by every stage of scope building. The
context is set once before any scope is built and is read-only afterwards.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field, fields
from enum import IntEnum
from typing import List, Sequence

from tg_errors import OptionError


class LogLevel(IntEnum):
    """Hierarchical logging levels for the generator."""
    SILENT = 0      # No logging
    ERROR = 3       # Error messages only
    WARNING = 6     # Warning messages (default)
    INFO = 10       # General progress messages
    DEBUG = 30      # Detailed diagnostic information


SUPPORTED_TARGETS = ("go", "typescript")


@dataclass
class Features:
    """
    Feature flags consumed while building scopes.

    Attributes:
        keep_unknown_fields:            Reserve the CarryingUnknownFields method on structures.
        gen_deep_equal:                 Reserve DeepEqual and per-field deep-equality methods.
        generate_setter:                Allocate Set<Field> accessors.
        reorder_fields:                 Reorder structure fields to reduce padding.
        use_option:                     Check annotation grammar over the whole include graph.
        gen_binding_tag:                Emit path/query/form tags from api.* annotations.
        compatible_names:               Suffix identifiers that collide with generated ones (New*, *Args, *Result).
        enable_nested_struct:           Name accessors of thrift.nested fields after the referenced type.
        typed_enum_string:              Use the allocated enum value name as its string literal.
        snake_style_property_name:      Property names in snake_case.
        lower_camel_case_property_name: Property names in lowerCamelCase (default).
        package_prefix:                 Prefix prepended to every generated import path.
        target:                         Type syntax of the resolved type names ("go" or "typescript").
        parallel_resolution:            Resolve field types on a worker pool.
        resolution_workers:             Worker count when parallel_resolution is set.
    """
    keep_unknown_fields: bool = False
    gen_deep_equal: bool = False
    generate_setter: bool = True
    reorder_fields: bool = False
    use_option: bool = False
    gen_binding_tag: bool = False
    compatible_names: bool = False
    enable_nested_struct: bool = False
    typed_enum_string: bool = False
    snake_style_property_name: bool = False
    lower_camel_case_property_name: bool = True
    package_prefix: str = ""
    target: str = "go"
    parallel_resolution: bool = False
    resolution_workers: int = 4

    def handle_options(self, args: Sequence[str]) -> List[str]:
        """
        Apply generator options given as 'name=value' strings.

        A bare 'name' means 'name=true'. Returns the names that are not
        recognized so the caller can report them.
        """
        known = {f.name: f for f in fields(self)}
        unknown: List[str] = []
        for arg in args:
            if not arg:
                continue
            name, sep, value = arg.partition("=")
            if not sep:
                value = "true"
            spec = known.get(name)
            if spec is None:
                unknown.append(name)
                continue

            current = getattr(self, name)
            if isinstance(current, bool):
                setattr(self, name, _parse_bool(name, value))
            elif isinstance(current, int):
                try:
                    setattr(self, name, int(value))
                except ValueError:
                    raise OptionError(f"option '{name}' expects an integer, got '{value}'") from None
            else:
                setattr(self, name, value)

            # The two property naming styles are mutually exclusive.
            if name == "snake_style_property_name" and self.snake_style_property_name:
                self.lower_camel_case_property_name = False
            elif name == "lower_camel_case_property_name" and self.lower_camel_case_property_name:
                self.snake_style_property_name = False

        if self.target not in SUPPORTED_TARGETS:
            raise OptionError(f"unsupported target '{self.target}' (expected one of {', '.join(SUPPORTED_TARGETS)})")
        if self.resolution_workers < 1:
            raise OptionError("option 'resolution_workers' must be at least 1")
        return unknown


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise OptionError(f"option '{name}' expects true or false, got '{value}'")


@dataclass
class GenerationContext:
    """
    Holds cross-cutting generator options.

    Attributes:
        features:           Feature flags, see Features.
        log_rich_format:    If True, emit logs in rich format (level and timestamp prefix).
        log_level:          Current logging level.
    """
    features: Features = field(default_factory=Features)
    log_rich_format: bool = False
    log_level: LogLevel = LogLevel.WARNING

    @staticmethod
    def default() -> 'GenerationContext':
        """Create a GenerationContext with default settings."""
        return GenerationContext(log_level=LogLevel.WARNING)
