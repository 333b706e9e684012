#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

"""
Field expansion.

A struct-like field expands when it carries thrift.expand="true" or when the
structure it references is marked expandable. The referenced structure's
fields are then cloned into the parent: each clone keeps its name, gets the
id child.id + parent.id * EXPANSION_ID_OFFSET and fresh accessors in the
parent's namespace. Expansion is one level deep: a clone that is itself a
struct-like field is not expanded again.
"""

import dataclasses
from typing import Dict, List, Optional

import tg_ast
from tg_annotations import is_expand_field, is_expandable_struct
from tg_context import GenerationContext
from tg_errors import ExpansionIdCollisionError
from tg_naming import _p, id2str, identify
from tg_references import StructReference, resolve_struct_reference
from tg_scope import ExpandedField, ExpansionRecord, Field, Scope, StructLike, support_is_set

EXPANSION_ID_OFFSET = 1000
# Expansion slot of a response: one past the largest declarable (i16) field
# id, so its clones never share an id with a declared exception.
RESPONSE_EXPANSION_SLOT = 32768


def adjusted_id(parent_id: int, child_id: int) -> int:
    return child_id + parent_id * EXPANSION_ID_OFFSET


def expansion_target(context: GenerationContext, scope: Scope, f: tg_ast.Field) -> Optional[StructReference]:
    """
    The structure 'f' expands into, or None when the field stays as is.

    An unresolvable reference is never an error here: expansion is
    opportunistic.
    """
    if not f.type.category.is_struct_like():
        return None
    target = resolve_struct_reference(scope, f)
    if target is None:
        return None
    if is_expand_field(context, f) or is_expandable_struct(context, target.struct):
        return target
    return None


def should_expand(context: GenerationContext, scope: Scope, f: tg_ast.Field) -> bool:
    return expansion_target(context, scope, f) is not None


def build_expanded_fields(
    context: GenerationContext,
    st: StructLike,
    parent: Field,
    target: StructReference,
    taken_ids: Dict[int, str],
    filename: Optional[str] = None,
) -> List[ExpandedField]:
    """
    Clone the fields of 'target' into 'st' on behalf of 'parent'.

    taken_ids maps every field id already present in the structure to the
    name of its holder; it is updated with the new ids. A clone whose
    adjusted id is already taken raises ExpansionIdCollisionError.

    The response slot of a result structure expands under
    RESPONSE_EXPANSION_SLOT instead of its own id (0).
    """
    features = context.features
    ns = st.scope
    slot = RESPONSE_EXPANSION_SLOT if parent.is_response else parent.id
    expanded: List[ExpandedField] = []

    for child in target.struct.fields:
        fid = adjusted_id(slot, child.id)
        holder = taken_ids.get(fid)
        if holder is not None:
            raise ExpansionIdCollisionError(
                st.source_name, fid, holder, f"{parent.source_name}.{child.name}", filename
            )
        taken_ids[fid] = f"{parent.source_name}.{child.name}"

        adjusted = dataclasses.replace(child, id=fid)
        key = f"expand:{parent.source_name}.{child.name}"
        sid = id2str(fid)
        name = ns.add(identify(child.name, features), _p(key))

        ef = ExpandedField(
            ast=adjusted,
            name=name,
            getter=ns.add("Get" + name, _p("get:" + key)),
            reader=ns.add("ReadField" + sid, _p("read:" + sid)),
            writer=ns.add("writeField" + sid, _p("write:" + sid)),
            original=child,
            origin=target.scope,
            expanded_from=parent.source_name,
        )
        if features.generate_setter:
            ef.setter = ns.add("Set" + name, _p("set:" + key))
        if support_is_set(adjusted):
            ef.isset = ns.add("IsSet" + name, _p("isset:" + key))
        if features.gen_deep_equal:
            ef.deep_equal = ns.add("Field" + sid + "DeepEqual", _p("deepequal:" + sid))
        expanded.append(ef)
    return expanded


def record_expansion(scope: Scope, st: StructLike) -> Optional[ExpansionRecord]:
    """
    Build the expansion record of 'st' once; later calls return the stored
    record. Structures without an expanded field get no record.

    Records are keyed by source name, except for synthesized argument and
    result structures whose source names repeat across services.
    """
    key = st.name if st.ast.synthesized else st.source_name
    record = scope.expanded_structs.get(key)
    if record is not None:
        return record

    expandable = [f for f in st.fields if f.is_expandable]
    if not expandable:
        return None
    record = ExpansionRecord(struct_name=key)
    for f in expandable:
        record.expanded_field_names[f.source_name] = True
        record.expanded_fields.extend(f.expanded_fields)
    scope.expanded_structs[key] = record
    return record
