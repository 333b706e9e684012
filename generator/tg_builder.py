#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional

import tg_ast
from tg_annotations import check_annotation_grammar, field_tags, is_alias_type, is_nested_field
from tg_context import GenerationContext
from tg_errors import TypeResolutionError
from tg_expansion import build_expanded_fields, expansion_target, record_expansion
from tg_imports import collect_ts_imports, prune_unused_imports
from tg_logger import log_debug, log_info, log_warning, timed_stage
from tg_namespace import Namespace
from tg_naming import _p, id2str, identify, local_name
from tg_references import include_matches
from tg_reorder import reorder_fields
from tg_scope import (
    Constant,
    Enum,
    EnumValue,
    Field,
    Function,
    Scope,
    Service,
    StructLike,
    Typedef,
    support_is_set,
)
from tg_types import TypeResolver

IncludeLoader = Callable[[tg_ast.Thrift], Scope]


class ScopeBuilder:
    """
    Builds the Scope of one IDL file:

      1. check annotation grammar over the include graph (use_option)
      2. build includes, index-stable, through the include loader
      3. install names: services with their argument/result structures,
         structures, enums, typedefs, constants
      4. resolve field types and values (expanded fields included),
         typedefs, constants, service bases and function types
      5. prune imports left unused by expansion
      6. reorder structure fields (reorder_fields)

    Included files are built through 'load_include', which is expected to
    memoize scopes per file.
    """

    def __init__(self, context: GenerationContext, load_include: IncludeLoader):
        self.context = context
        self.features = context.features
        self.load_include = load_include

    def build(self, ast: tg_ast.Thrift) -> Scope:
        scope = Scope(ast, self.features)

        if self.features.use_option:
            with timed_stage(self.context, "Checking annotation grammar", ast.filename):
                for t in ast.depth_first_search():
                    check_annotation_grammar(t)

        with timed_stage(self.context, "Building includes", ast.filename):
            self.build_includes(scope)

        with timed_stage(self.context, "Installing names", ast.filename):
            self.install_names(scope)

        with timed_stage(self.context, "Resolving types", ast.filename):
            self.resolve_types_and_values(scope)

        if self.features.reorder_fields:
            self.reorder(scope)
        return scope

    # --- includes ---

    def build_includes(self, scope: Scope) -> None:
        # Reference indices count unused includes too, so positions are kept.
        scope.includes = [None] * len(scope.ast.includes)
        for idx, inc in enumerate(scope.ast.includes):
            if not inc.used or inc.reference is None:
                continue
            other = self.load_include(inc.reference)
            scope.includes[idx] = scope.make_include(other)

    # --- names ---

    def install_names(self, scope: Scope) -> None:
        for v in scope.ast.services:
            self.build_service(scope, v)
        for v in scope.ast.get_struct_likes():
            self.build_struct_like(scope, v)
        for e in scope.ast.enums:
            self.build_enum(scope, e)
        for t in scope.ast.typedefs:
            self.build_typedef(scope, t)
        for c in scope.ast.constants:
            self.build_constant(scope, c)

    def build_service(self, scope: Scope, v: tg_ast.Service) -> Service:
        sn = scope.globals.add(identify(v.name, self.features), v.name)
        svc = Service(ast=v, name=sn, scope=Namespace())
        scope.services.append(svc)

        for f in v.functions:
            fn = svc.scope.add(identify(f.name, self.features), f.name)
            svc.functions.append(Function(ast=f, name=fn, scope=Namespace(), service=svc))

        for fun in svc.functions:
            f = fun.ast
            arg_type, res_type = tg_ast.build_synthesized(f)
            an = _p(v.name + identify(_p(f.name + "_args"), self.features))
            rn = _p(v.name + identify(_p(f.name + "_result"), self.features))

            fun.arg_type = self.build_struct_like(scope, arg_type, an)
            if not f.oneway:
                fun.res_type = self.build_struct_like(scope, res_type, rn, has_response=not f.void)
            self.build_function(fun)

        svc.client_name = sn + "Client"
        svc.processor_name = sn + "Processor"
        scope.globals.must_reserve(svc.client_name, _p("client:" + v.name))
        scope.globals.must_reserve(svc.processor_name, _p("processor:" + v.name))
        return svc

    def build_function(self, fun: Function) -> None:
        """Names of parameters, the receiver and locals of one generated method."""
        ns = fun.scope
        ns.must_reserve("p", _p("p"))      # receiver
        ns.must_reserve("err", _p("err"))
        ns.must_reserve("ctx", _p("ctx"))  # first parameter
        if not fun.ast.void:
            ns.must_reserve("r", _p("r"))  # response
            ns.must_reserve("_result", _p("_result"))

        for a in fun.ast.arguments:
            ns.add(local_name(a.name, self.features), a.name)
        for t in fun.ast.throws:
            ns.add(local_name(t.name, self.features), t.name)

    def _builtin_methods(self, v: tg_ast.StructLike) -> List[str]:
        funcs = ["Read", "Write", "String"]
        if not v.synthesized:
            if v.category == "union":
                funcs.append("CountSetFields")
            if v.category == "exception":
                funcs.append("Error")
            if self.features.keep_unknown_fields:
                funcs.append("CarryingUnknownFields")
            if self.features.gen_deep_equal:
                funcs.append("DeepEqual")
        return funcs

    def _accessor_base(self, f: tg_ast.Field) -> str:
        if self.features.enable_nested_struct and is_nested_field(self.context, f):
            # Nested fields are accessed through the referenced type's name.
            return identify(f.type.split_name()[1], self.features)
        return identify(f.name, self.features)

    def build_struct_like(
        self,
        scope: Scope,
        v: tg_ast.StructLike,
        used_name: Optional[str] = None,
        has_response: bool = False,
    ) -> StructLike:
        nn = used_name or v.name
        sn = scope.globals.add(identify(nn, self.features), nn)
        scope.globals.must_reserve("New" + sn, _p("new:" + nn))
        scope.globals.must_reserve("fieldIDToName_" + sn, _p("ids:" + nn))

        st = StructLike(ast=v, name=sn, scope=Namespace(), is_alias=is_alias_type(self.context, v))
        ns = st.scope
        for fn in self._builtin_methods(v):
            ns.must_reserve(fn, _p(fn))

        # Accessors first, so that storage names never take them.
        for f in v.fields:
            fn = self._accessor_base(f)
            sid = id2str(f.id)
            ns.add("Get" + fn, _p("get:" + f.name))
            if self.features.generate_setter:
                ns.add("Set" + fn, _p("set:" + f.name))
            if support_is_set(f):
                ns.add("IsSet" + fn, _p("isset:" + f.name))
            ns.add("ReadField" + sid, _p("read:" + sid))
            ns.add("writeField" + sid, _p("write:" + sid))
            if self.features.gen_deep_equal:
                ns.add("Field" + sid + "DeepEqual", _p("deepequal:" + sid))

        taken_ids = {f.id: f.name for f in v.fields}
        for i, f in enumerate(v.fields):
            sid = id2str(f.id)
            field = Field(
                ast=f,
                name=ns.add(identify(f.name, self.features), f.name),
                getter=ns.get(_p("get:" + f.name)),
                reader=ns.get(_p("read:" + sid)),
                writer=ns.get(_p("write:" + sid)),
                setter=ns.get(_p("set:" + f.name)),
                isset=ns.get(_p("isset:" + f.name)),
                deep_equal=ns.get(_p("deepequal:" + sid)),
                is_nested=self.features.enable_nested_struct and is_nested_field(self.context, f),
                is_response=has_response and i == 0,
            )
            target = expansion_target(self.context, scope, f)
            if target is not None:
                field.is_expandable = True
                field.original = f
                field.expanded_fields = build_expanded_fields(
                    self.context, st, field, target, taken_ids, scope.filename
                )
                log_debug(
                    self.context,
                    f"{scope.filename}: {v.name}.{f.name} expands into {len(field.expanded_fields)} field(s)",
                )
            st.fields.append(field)

        if used_name:
            scope.synthesized.append(st)
        else:
            bucket = {
                "struct": scope.structs,
                "union": scope.unions,
                "exception": scope.exceptions,
            }.get(v.category)
            if bucket is None:
                log_warning(self.context, f"struct[{sn}].category[{v.category}]")
            else:
                bucket.append(st)
        record_expansion(scope, st)
        return st

    def build_enum(self, scope: Scope, e: tg_ast.Enum) -> Enum:
        en = scope.globals.add(identify(e.name, self.features), e.name)
        enum = Enum(ast=e, name=en, scope=Namespace())
        for v in e.values:
            vn = enum.scope.add(en + "_" + v.name, v.name)
            literal = vn if self.features.typed_enum_string else v.name
            enum.values.append(EnumValue(ast=v, name=vn, literal=literal))
        scope.enums.append(enum)
        return enum

    def build_typedef(self, scope: Scope, t: tg_ast.Typedef) -> Typedef:
        tn = scope.globals.add(identify(t.alias, self.features), t.alias)
        if t.type.category.is_struct_like():
            scope.globals.must_reserve("New" + tn, _p("new:" + t.alias))
        typedef = Typedef(ast=t, name=tn)
        scope.typedefs.append(typedef)
        return typedef

    def build_constant(self, scope: Scope, c: tg_ast.Constant) -> Constant:
        cn = scope.globals.add(identify(c.name, self.features), c.name)
        constant = Constant(ast=c, name=cn)
        scope.constants.append(constant)
        return constant

    # --- resolution ---

    def resolve_types_and_values(self, scope: Scope) -> None:
        resolver = TypeResolver(self.context, scope)
        fields = [f for st in scope.all_struct_likes() for f in st.fields]
        if self.features.parallel_resolution and len(fields) > 1:
            self._resolve_fields_parallel(resolver, fields)
        else:
            for f in fields:
                self.resolve_field(resolver, f)

        for t in scope.typedefs:
            resolver.resolve_typedef(t)
        for c in scope.constants:
            resolver.resolve_constant(c)

        self.resolve_service_bases(scope)
        for svc in scope.services:
            for fun in svc.functions:
                resolver.resolve_function(fun)

        for alias in prune_unused_imports(self.context, scope):
            log_info(self.context, f"{scope.filename}: import '{alias}' dropped after expansion")
        if self.features.target == "typescript":
            scope.ts_imports = collect_ts_imports(scope)

    def resolve_field(self, resolver: TypeResolver, f: Field) -> None:
        resolver.resolve_field(f)
        if f.is_nested:
            name = resolver.syntax.deref(f.type_name)
            f.name = name.rsplit(".", 1)[-1]
        f.tags = field_tags(self.context, f.ast)
        for ef in f.expanded_fields:
            resolver.resolve_field(ef)
            ef.tags = field_tags(self.context, ef.ast)

    def _resolve_fields_parallel(self, resolver: TypeResolver, fields: List[Field]) -> None:
        workers = self.features.resolution_workers
        log_debug(self.context, f"Resolving {len(fields)} field(s) on {workers} worker(s)")
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self.resolve_field, resolver, f) for f in fields]
            for future in as_completed(futures):
                future.result()

    def resolve_service_bases(self, scope: Scope) -> None:
        for svc in scope.services:
            extends = svc.ast.extends
            if not extends:
                continue
            qualifier, _, bare = extends.rpartition(".")
            if not qualifier:
                svc.base = scope.service(bare)
            else:
                for inc in scope.live_includes():
                    if include_matches(inc, qualifier):
                        svc.base = inc.scope.service(bare)
                        if svc.base is not None:
                            break
            if svc.base is None:
                raise TypeResolutionError(extends, svc.ast.name, scope.filename)

    # --- layout ---

    def reorder(self, scope: Scope) -> None:
        for st in scope.struct_likes():
            diff = reorder_fields(st)
            if diff is not None and diff.original != diff.arranged:
                log_info(
                    self.context,
                    f"<reorder>({scope.filename}) {st.source_name}: "
                    f"{diff.original} -> {diff.arranged}: {diff.percent():.2f}%",
                )
