#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import re
from typing import Iterable, Tuple

from tg_ast import Annotations, Field, Requiredness, StructLike, Thrift
from tg_context import GenerationContext
from tg_errors import AnnotationGrammarError
from tg_logger import log_warning
from tg_naming import property_name

# The field is a nested type: accessors are named after the referenced type.
NESTED_ANNOTATION = "thrift.nested"
# The structure is an alias type.
ALIAS_ANNOTATION = "thrift.is_alias"
# The field should be expanded into its parent structure.
EXPAND_ANNOTATION = "thrift.expand"
# Structure-level flag: every field referencing the structure expands.
EXPANDABLE_ANNOTATION = "expandable"

BOOLEAN_ANNOTATIONS = (NESTED_ANNOTATION, ALIAS_ANNOTATION, EXPAND_ANNOTATION, EXPANDABLE_ANNOTATION)

_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


def annotation_contains_true(context: GenerationContext, annos: Annotations, key: str) -> bool:
    vals = annos.get(key)
    if not vals:
        return False
    if len(vals) > 1:
        log_warning(context, f"{key} annotation has been set multiple values")
        return False
    return vals[0].lower() == "true"


def is_expand_field(context: GenerationContext, f: Field) -> bool:
    return annotation_contains_true(context, f.annotations, EXPAND_ANNOTATION)


def is_nested_field(context: GenerationContext, f: Field) -> bool:
    return annotation_contains_true(context, f.annotations, NESTED_ANNOTATION)


def is_alias_type(context: GenerationContext, s: StructLike) -> bool:
    return annotation_contains_true(context, s.annotations, ALIAS_ANNOTATION)


def is_expandable_struct(context: GenerationContext, s: StructLike) -> bool:
    # The parser normally lifts expandable="true" into StructLike.expandable.
    if s.expandable is not None:
        return s.expandable
    return annotation_contains_true(context, s.annotations, EXPANDABLE_ANNOTATION)


def _annotated_nodes(ast: Thrift) -> Iterable[Tuple[str, Annotations]]:
    for s in ast.get_struct_likes():
        yield s.name, s.annotations
        for f in s.fields:
            yield f"{s.name}.{f.name}", f.annotations
    for e in ast.enums:
        yield e.name, e.annotations
        for v in e.values:
            yield f"{e.name}.{v.name}", v.annotations
    for t in ast.typedefs:
        yield t.alias, t.annotations
    for c in ast.constants:
        yield c.name, c.annotations
    for svc in ast.services:
        yield svc.name, svc.annotations
        for fn in svc.functions:
            yield f"{svc.name}.{fn.name}", fn.annotations
            for a in fn.arguments:
                yield f"{svc.name}.{fn.name}.{a.name}", a.annotations


def check_annotation_grammar(ast: Thrift) -> None:
    """
    Validate annotations of one file: keys are dotted identifiers and the
    boolean annotations carry 'true' or 'false'.
    """
    for owner, annos in _annotated_nodes(ast):
        for anno in annos:
            if not _KEY_RE.match(anno.key):
                raise AnnotationGrammarError(
                    f"malformed annotation key '{anno.key}' on '{owner}'", ast.filename
                )
            if anno.key in BOOLEAN_ANNOTATIONS:
                for value in anno.values:
                    if value.lower() not in ("true", "false"):
                        raise AnnotationGrammarError(
                            f"annotation '{anno.key}' on '{owner}' expects true or false, got '{value}'",
                            ast.filename,
                        )


# api.* annotation -> binding tag key.
BINDING_TAGS = (
    ("api.path", "path"),
    ("api.query", "query"),
    ("api.body", "form"),
)


def field_tags(context: GenerationContext, f: Field) -> str:
    """
    Struct tag of a generated field.

    thrift:"name,id[,required|optional]" and json:"<property>[,omitempty]"
    always; path/query/form from api.* annotations with gen_binding_tag.
    """
    features = context.features
    spec = f"{f.name},{f.id}"
    if f.requiredness is Requiredness.REQUIRED:
        spec += ",required"
    elif f.requiredness is Requiredness.OPTIONAL:
        spec += ",optional"
    tags = [f'thrift:"{spec}"']

    if features.gen_binding_tag:
        for key, tag in BINDING_TAGS:
            vals = f.annotations.get(key)
            if vals:
                tags.append(f'{tag}:"{vals[0]}"')

    json_name = property_name(f.name, features)
    if f.is_optional:
        json_name += ",omitempty"
    tags.append(f'json:"{json_name}"')
    return " ".join(tags)
