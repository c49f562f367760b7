"""
Monomorphizing collection of reachable function instances
"""

import logging
from typing import Dict, List, Optional, Sequence

from ..errors import MalformedBodyError, UnresolvedSymbolError
from ..ir.models import BasicBlock, CallInfo, DispatchKind, FunctionDef, TerminatorKind
from ..ir.paths import is_concrete_type, strip_generic_args, substitute_type_params
from .context import AnalysisContext, ResolvedCall
from .constraints import BlockConstraints, compute_block_constraints, validate_body
from .models import FunctionInstance, InstanceKind, SkippedInstance, UnresolvedCall

logger = logging.getLogger(__name__)


class InstanceCollector:
    """Collects every instance reachable from the entry points.

    Works through a FIFO worklist: each concrete instance is expanded once,
    its call terminators are resolved against the caller's type bindings and
    the resolved targets are recorded on the context for the extractor.
    """

    def __init__(self, context: AnalysisContext):
        self.context = context
        self.provider = context.provider

    def collect(self) -> List[FunctionInstance]:
        """Run collection to a fixed point and return instances in discovery order"""
        with self.context.timer.measure("collect_instances"):
            for instance in self._seed_entry_points():
                if instance.identity not in self.context.entry_points:
                    self.context.entry_points.append(instance.identity)
                self.context.enqueue(instance.identity)

            if not self.context.entry_points:
                logger.warning("No entry points found in crate %s", self.provider.crate_name)

            while self.context.worklist:
                identity = self.context.worklist.popleft()
                if identity in self.context.visited:
                    continue
                self.context.visited.add(identity)
                self._expand(self.context.index.get(identity))

        instances = self.context.index.instances()
        logger.info("Collected %d function instances", len(instances))
        return instances

    def _seed_entry_points(self) -> List[FunctionInstance]:
        seeds: List[FunctionInstance] = []

        if self.context.options.entry_points:
            for path in self.context.options.entry_points:
                function = self._find_entry_definition(path)
                if function is None:
                    logger.warning("Entry point %s not found in the IR", path)
                    continue
                seeds.append(self._instantiate(function, []))
            return seeds

        declared = self.provider.entry_points()
        if declared:
            for entry in declared:
                function = self._find_entry_definition(entry.path)
                if function is None:
                    logger.warning("Entry point %s not found in the IR", entry.path)
                    continue
                seeds.append(self._instantiate(function, entry.type_args))
            return seeds

        for function in self.provider.functions():
            if function.public and function.has_body:
                seeds.append(self._instantiate(function, []))
        return seeds

    def _find_entry_definition(self, path: str) -> Optional[FunctionDef]:
        function = self.provider.function(path)
        if function is not None:
            return function

        base = strip_generic_args(path)
        for candidate in self.provider.functions():
            if strip_generic_args(candidate.path) == base:
                return candidate
        return None

    def _expand(self, instance: FunctionInstance) -> None:
        if instance.kind == InstanceKind.ABSTRACT:
            logger.debug("Not expanding non-instance function %s", instance.def_path)
            return
        if instance.kind == InstanceKind.EXTERNAL:
            logger.debug("Function %s has no body", instance.def_path)
            return

        function = self.provider.function(instance.def_path)
        try:
            blocks = validate_body(instance.display_path, function.body)
        except MalformedBodyError as e:
            logger.warning("%s, skipping its body", e)
            self.context.skipped.append(SkippedInstance(identity=instance.identity, reason=e.reason))
            return

        constraints = self._constraints_for(function, blocks)

        resolved: Dict[int, ResolvedCall] = {}
        for block in function.body.blocks:
            if block.terminator.kind != TerminatorKind.CALL:
                continue
            if block.id not in constraints:
                logger.debug("Skipping call in unreachable block bb%d of %s", block.id, instance.display_path)
                continue

            call = block.terminator.call
            try:
                callees = self._resolve_call(instance, call, block.id)
            except UnresolvedSymbolError as e:
                logger.warning("%s, dropping the call", e)
                self.context.unresolved.append(UnresolvedCall(
                    caller=instance.identity,
                    block=e.block,
                    target=e.target,
                    reason=e.reason
                ))
                continue

            identities = []
            for callee in callees:
                if callee.identity not in identities:
                    identities.append(callee.identity)
                    self.context.enqueue(callee.identity)

            resolved[block.id] = ResolvedCall(dispatch=call.dispatch, callees=identities, target=call.describe())
            logger.debug("%s bb%d -> %s", instance.display_path, block.id,
                         ", ".join(callee.display_path for callee in callees))

        self.context.resolutions[instance.identity] = resolved

    def _constraints_for(self, function: FunctionDef, blocks: Dict[int, BasicBlock]) -> BlockConstraints:
        """Block weights of a definition, shared by all its instantiations"""
        constraints = self.context.constraints.get(function.path)
        if constraints is None:
            with self.context.timer.measure("compute_constraints"):
                constraints = compute_block_constraints(function.body, blocks)
            self.context.constraints[function.path] = constraints
        return constraints

    def _resolve_call(self, caller: FunctionInstance, call: CallInfo, block: int) -> List[FunctionInstance]:
        bindings = caller.bindings
        type_args = [substitute_type_params(arg, bindings) for arg in call.type_args]

        if call.dispatch == DispatchKind.DYNAMIC:
            return self._resolve_dynamic(caller, call, block, bindings)

        if call.dispatch == DispatchKind.EXTERNAL:
            return [self._resolve_external(caller, call, block, type_args)]

        if call.dispatch == DispatchKind.GENERIC and call.interface and call.method:
            return [self._resolve_trait_method(caller, call, block, type_args, bindings)]

        if not call.path:
            raise UnresolvedSymbolError(caller.display_path, block, call.describe(), "call has no target path")

        function = self.provider.function(call.path)
        if function is None:
            raise UnresolvedSymbolError(caller.display_path, block, call.path, "unknown symbol")
        return [self._instantiate(function, type_args)]

    def _resolve_trait_method(self, caller: FunctionInstance, call: CallInfo, block: int,
                              type_args: List[str], bindings: Dict[str, str]) -> FunctionInstance:
        """Resolve `<Self as Interface>::method` once `Self` is known"""
        if call.self_type:
            self_type = substitute_type_params(call.self_type, bindings)
            method_args = type_args
        elif type_args:
            self_type, method_args = type_args[0], type_args[1:]
        else:
            self_type, method_args = "", []

        declaration = self.provider.function(call.path) if call.path else None

        if not is_concrete_type(self_type):
            if declaration is None:
                raise UnresolvedSymbolError(caller.display_path, block, call.describe(),
                                            "receiver type is not known")
            return self._register(declaration, (), InstanceKind.ABSTRACT)

        for impl in self.provider.implementations(call.interface, call.method):
            if impl.self_type != self_type:
                continue
            function = self.provider.function(impl.path)
            if function is None:
                raise UnresolvedSymbolError(caller.display_path, block, impl.path,
                                            f"implementation of {call.interface}::{call.method} has no definition")
            # Implementation generics are its own, only Self comes from the call
            impl_args = [substitute_type_params(arg, {"Self": self_type}) for arg in impl.type_args] + method_args
            return self._instantiate(function, impl_args)

        # Provided method of the interface itself
        if declaration is not None and declaration.has_body:
            return self._instantiate(declaration, [self_type] + method_args)

        raise UnresolvedSymbolError(caller.display_path, block, call.describe(),
                                    f"no implementation for {self_type}")

    def _resolve_dynamic(self, caller: FunctionInstance, call: CallInfo, block: int,
                         bindings: Dict[str, str]) -> List[FunctionInstance]:
        """Every known implementation is a possible target"""
        candidates: List[FunctionInstance] = []

        if call.interface and call.method:
            for impl in self.provider.implementations(call.interface, call.method):
                function = self.provider.function(impl.path)
                if function is None:
                    logger.warning("Implementation %s of %s::%s has no definition",
                                   impl.path, call.interface, call.method)
                    continue
                candidates.append(self._instantiate(function, impl.type_args))

        # Candidates are listed at the call site, so they use the caller's bindings
        for ref in call.candidates:
            function = self.provider.function(ref.path)
            if function is None:
                logger.warning("Dynamic call candidate %s has no definition", ref.path)
                continue
            args = [substitute_type_params(arg, bindings) for arg in ref.type_args]
            candidates.append(self._instantiate(function, args))

        if not candidates:
            raise UnresolvedSymbolError(caller.display_path, block, call.describe(), "no dispatch candidates")
        return candidates

    def _resolve_external(self, caller: FunctionInstance, call: CallInfo, block: int,
                          type_args: List[str]) -> FunctionInstance:
        if not call.path:
            raise UnresolvedSymbolError(caller.display_path, block, call.describe(),
                                        "external call has no target path")

        function = self.provider.function(call.path)
        if function is not None:
            return self._instantiate(function, type_args)

        crate = call.crate or self.provider.crate_name
        instance = FunctionInstance.create(
            def_path=call.path,
            crate_name=crate,
            crate_version=self.provider.crate_version(crate),
            type_args=tuple(type_args),
            kind=InstanceKind.EXTERNAL
        )
        return self.context.index.register(instance)

    def _instantiate(self, function: FunctionDef, type_args: Sequence[str]) -> FunctionInstance:
        """Bind a definition to type arguments and register the result"""
        if not function.has_body:
            return self._register(function, tuple(type_args), InstanceKind.EXTERNAL)

        if not function.is_generic:
            return self._register(function, (), InstanceKind.CONCRETE)

        args = tuple(type_args[:len(function.generics)])
        if len(args) < len(function.generics) or not all(is_concrete_type(arg, function.generics) for arg in args):
            logger.debug("Generic arguments of %s are not bound: %s", function.path, list(args))
            return self._register(function, (), InstanceKind.ABSTRACT)

        return self._register(function, args, InstanceKind.CONCRETE)

    def _register(self, function: FunctionDef, type_args: tuple, kind: InstanceKind) -> FunctionInstance:
        crate = self.provider.crate_of(function)
        instance = FunctionInstance.create(
            def_path=function.path,
            crate_name=crate,
            crate_version=self.provider.crate_version(crate),
            generics=tuple(function.generics),
            type_args=type_args,
            kind=kind
        )
        return self.context.index.register(instance)
