#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import pytest

from conftest import I32, STRING, annos, fld, struct, thrift
from tg_annotations import (
    annotation_contains_true,
    check_annotation_grammar,
    field_tags,
    is_alias_type,
    is_expand_field,
    is_expandable_struct,
    is_nested_field,
)
from tg_ast import Annotation, Function, Service
from tg_errors import AnnotationGrammarError


def test_annotation_contains_true(context):
    assert annotation_contains_true(context, annos({"thrift.expand": "true"}), "thrift.expand")
    assert annotation_contains_true(context, annos({"thrift.expand": "TRUE"}), "thrift.expand")
    assert not annotation_contains_true(context, annos({"thrift.expand": "false"}), "thrift.expand")
    assert not annotation_contains_true(context, annos(), "thrift.expand")


def test_multiple_values_are_not_true(context):
    values = annos({"thrift.nested": ["true", "true"]})

    assert not annotation_contains_true(context, values, "thrift.nested")


def test_values_of_repeated_keys_accumulate(context):
    values = annos({"thrift.nested": "true"})
    values.append(Annotation(key="thrift.nested", values=["false"]))

    assert values.get("thrift.nested") == ["true", "false"]
    assert not annotation_contains_true(context, values, "thrift.nested")


def test_field_and_struct_predicates(context):
    assert is_expand_field(context, fld(1, "x", I32, annotations={"thrift.expand": "true"}))
    assert is_nested_field(context, fld(1, "x", I32, annotations={"thrift.nested": "true"}))
    assert not is_nested_field(context, fld(1, "x", I32))
    assert is_alias_type(context, struct("A", annotations={"thrift.is_alias": "true"}))


def test_expandable_flag_wins_over_annotation(context):
    assert is_expandable_struct(context, struct("A", annotations={"expandable": "true"}))
    assert not is_expandable_struct(context, struct("A", expandable=False, annotations={"expandable": "true"}))
    assert is_expandable_struct(context, struct("A", expandable=True))
    assert not is_expandable_struct(context, struct("A"))


def test_annotation_grammar_accepts_well_formed_annotations():
    ast = thrift(
        "ok.thrift",
        structs=[struct("S", fld(1, "v", I32, annotations={"api.query": "v", "thrift.expand": "false"}))],
        services=[Service(name="Svc", functions=[Function(name="Do", function_type=None)])],
    )

    check_annotation_grammar(ast)


@pytest.mark.parametrize(
    "key, value",
    [
        ("bad key", "x"),
        ("api..path", "x"),
        ("1api", "x"),
        ("thrift.nested", "yes"),
    ],
)
def test_annotation_grammar_rejects(key, value):
    ast = thrift("bad.thrift", structs=[struct("S", fld(1, "v", I32, annotations={key: value}))])

    with pytest.raises(AnnotationGrammarError) as exc:
        check_annotation_grammar(ast)

    assert exc.value.filename == "bad.thrift"
    assert "S.v" in exc.value.message


def test_annotation_grammar_checks_function_arguments():
    fn = Function(name="Do", function_type=None, arguments=[fld(1, "a", STRING, annotations={"api body": "x"})])
    ast = thrift("svc.thrift", services=[Service(name="Svc", functions=[fn])])

    with pytest.raises(AnnotationGrammarError):
        check_annotation_grammar(ast)


def test_field_tags_default_requiredness(context):
    assert field_tags(context, fld(7, "display_name", STRING)) == 'thrift:"display_name,7" json:"displayName"'


def test_field_tags_with_body_binding(make_context):
    context = make_context("gen_binding_tag", "lower_camel_case_property_name=false")
    f = fld(3, "Payload", STRING, annotations={"api.body": "payload"})

    assert field_tags(context, f) == 'thrift:"Payload,3" form:"payload" json:"Payload"'
