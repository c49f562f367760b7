"""
Data models for call graph representation
"""

import hashlib
from typing import Dict, List, Optional, Any, Tuple
from pydantic import BaseModel, Field, PrivateAttr
from enum import Enum

from ..ir.models import DispatchKind
from ..ir.paths import strip_generic_args, substitute_type_params


class InstanceKind(str, Enum):
    """Resolution state of a function instance"""
    CONCRETE = "concrete"    # All generic parameters bound (or none declared)
    ABSTRACT = "abstract"    # Unbound generic parameters, never expanded
    EXTERNAL = "external"    # No body available in the IR


def compute_identity(crate_name: str, def_path: str, type_args: Tuple[str, ...]) -> str:
    """Structural identity of a (definition, type arguments) pair"""
    hasher = hashlib.blake2b(digest_size=16)
    hasher.update(f"{crate_name}::{def_path}".encode('utf-8'))
    for arg in type_args:
        hasher.update(b"\x1f")
        hasher.update(arg.encode('utf-8'))
    return hasher.hexdigest()


class FunctionInstance(BaseModel):
    """A collected function: a definition plus its type arguments"""
    identity: str = Field(..., description="Stable structural hash")
    def_path: str = Field(..., description="Definition path with generic parameters inline")
    generics: Tuple[str, ...] = Field(default=(), description="Generic parameter names")
    type_args: Tuple[str, ...] = Field(default=(), description="Bound type arguments")
    crate_name: str = Field(..., description="Owning crate")
    crate_version: str = Field(..., description="Owning crate version")
    kind: InstanceKind = Field(default=InstanceKind.CONCRETE, description="Resolution state")

    class Config:
        """Pydantic configuration"""
        frozen = True

    @classmethod
    def create(cls, def_path: str, crate_name: str, crate_version: str,
               generics: Tuple[str, ...] = (), type_args: Tuple[str, ...] = (),
               kind: InstanceKind = InstanceKind.CONCRETE) -> 'FunctionInstance':
        """Build an instance with its identity computed from the definition"""
        return cls(
            identity=compute_identity(crate_name, def_path, tuple(type_args)),
            def_path=def_path,
            generics=tuple(generics),
            type_args=tuple(type_args),
            crate_name=crate_name,
            crate_version=crate_version,
            kind=kind
        )

    @property
    def bindings(self) -> Dict[str, str]:
        """Generic parameter name to concrete type"""
        return dict(zip(self.generics, self.type_args))

    @property
    def display_path(self) -> str:
        """Path with type arguments substituted into the generic segments"""
        if self.kind == InstanceKind.ABSTRACT or not self.type_args:
            return self.def_path
        return substitute_type_params(self.def_path, self.bindings, generic_only=True)

    @property
    def base_path(self) -> str:
        """Path with every generic segment removed"""
        return strip_generic_args(self.def_path)

    def label(self, without_args: bool = False) -> str:
        """Human readable name used in reports"""
        if self.kind == InstanceKind.ABSTRACT:
            return f"{self.def_path} (non-instance)"
        if without_args:
            return self.base_path
        return self.display_path


class CallSite(BaseModel):
    """One call terminator inside a collected instance"""
    caller: str = Field(..., description="Caller identity")
    callees: List[str] = Field(..., description="Resolved callee identities (several for dynamic dispatch)")
    weight: int = Field(..., description="Branch decisions between function entry and the call")
    block: int = Field(..., description="Basic block holding the call")
    order: int = Field(..., description="Position of the call in the caller's traversal")
    dispatch: DispatchKind = Field(..., description="Resolution kind of the call")


class GraphEdge(BaseModel):
    """Caller to callee edge"""
    caller: str = Field(..., description="Caller identity")
    callee: str = Field(..., description="Callee identity")
    weight: int = Field(..., description="Constraint weight (minimum over collapsed sites)")
    multiplicity: int = Field(default=1, description="Number of call sites collapsed into this edge")
    block: int = Field(..., description="Block of the witnessing call site")


class UnresolvedCall(BaseModel):
    """A call whose target could not be resolved and was dropped"""
    caller: str = Field(..., description="Caller identity")
    block: int = Field(..., description="Basic block of the call")
    target: str = Field(..., description="Description of the requested target")
    reason: str = Field(..., description="Why resolution failed")


class SkippedInstance(BaseModel):
    """An instance whose body was not analyzed"""
    identity: str = Field(..., description="Instance identity")
    reason: str = Field(..., description="Why the body was skipped")


class CallGraph(BaseModel):
    """Complete call graph representation"""
    crate_name: str = Field(..., description="Crate under analysis")
    instances: Dict[str, FunctionInstance] = Field(default_factory=dict, description="Instances by identity, discovery order")
    edges: List[GraphEdge] = Field(default_factory=list, description="Call edges")
    entry_points: List[str] = Field(default_factory=list, description="Entry point identities")
    skipped: List[SkippedInstance] = Field(default_factory=list, description="Instances with skipped bodies")
    unresolved: List[UnresolvedCall] = Field(default_factory=list, description="Dropped call targets")
    deduplicated: bool = Field(default=True, description="Edges were deduplicated per caller/callee pair")
    total_call_sites: int = Field(default=0, description="Call sites before edge construction")
    analysis_metadata: Dict[str, Any] = Field(default_factory=dict, description="Analysis metadata")

    _forward: Optional[Dict[str, List[GraphEdge]]] = PrivateAttr(default=None)
    _reverse: Optional[Dict[str, List[GraphEdge]]] = PrivateAttr(default=None)

    def instance(self, identity: str) -> Optional[FunctionInstance]:
        return self.instances.get(identity)

    def outgoing(self, identity: str) -> List[GraphEdge]:
        """Edges leaving a function, in construction order"""
        if self._forward is None:
            forward: Dict[str, List[GraphEdge]] = {}
            for edge in self.edges:
                forward.setdefault(edge.caller, []).append(edge)
            self._forward = forward
        return self._forward.get(identity, [])

    def reverse_adjacency(self) -> Dict[str, List[GraphEdge]]:
        """Callee identity to the edges that reach it (built once)"""
        if self._reverse is None:
            reverse: Dict[str, List[GraphEdge]] = {}
            for edge in self.edges:
                reverse.setdefault(edge.callee, []).append(edge)
            self._reverse = reverse
        return self._reverse

    def get_callers(self, identity: str) -> List[str]:
        """Get functions that directly call the specified function"""
        return [edge.caller for edge in self.reverse_adjacency().get(identity, [])]

    def get_callees(self, identity: str) -> List[str]:
        """Get functions called by the specified function"""
        return [edge.callee for edge in self.outgoing(identity)]

    def edges_between(self, caller: str, callee: str) -> List[GraphEdge]:
        """All edges for one caller/callee pair"""
        return [edge for edge in self.outgoing(caller) if edge.callee == callee]

    def get_leaf_functions(self) -> List[str]:
        """Get functions that don't call any other functions"""
        callers = {edge.caller for edge in self.edges}
        return [identity for identity in self.instances if identity not in callers]

    def get_root_functions(self) -> List[str]:
        """Get functions that are never called by others"""
        callees = {edge.callee for edge in self.edges}
        return [identity for identity in self.instances if identity not in callees]

    def get_recursive_functions(self) -> List[str]:
        """Get functions that call themselves directly"""
        seen = []
        for edge in self.edges:
            if edge.caller == edge.callee and edge.caller not in seen:
                seen.append(edge.caller)
        return seen


class ReachedCaller(BaseModel):
    """A transitive caller found by a backward search"""
    identity: str = Field(..., description="Caller identity")
    weight: int = Field(..., description="Minimal accumulated constraint weight to a target")
    path: List[str] = Field(default_factory=list, description="Witness chain from this caller to a target")


class ReachabilityResult(BaseModel):
    """Answer to one find-callers query"""
    query: str = Field(..., description="Query string or hash as given")
    by_hash: bool = Field(default=False, description="Query was an exact identity")
    targets: List[str] = Field(default_factory=list, description="Matched target identities")
    callers: Dict[str, ReachedCaller] = Field(default_factory=dict, description="Callers by identity")

    @property
    def found(self) -> bool:
        """Whether the query matched at least one function"""
        return bool(self.targets)

    @property
    def total_callers(self) -> int:
        return len(self.callers)

    @property
    def is_ambiguous(self) -> bool:
        return len(self.targets) > 1

    def weight_of(self, identity: str) -> Optional[int]:
        caller = self.callers.get(identity)
        return caller.weight if caller else None


class CallGraphStats(BaseModel):
    """Statistics about the call graph"""
    total_functions: int = Field(..., description="Total number of instances")
    concrete_functions: int = Field(..., description="Fully instantiated functions")
    abstract_functions: int = Field(..., description="Functions with unbound generics")
    external_functions: int = Field(..., description="Functions without a body")
    total_edges: int = Field(..., description="Number of call edges")
    total_call_sites: int = Field(..., description="Number of call sites before deduplication")
    entry_points: int = Field(..., description="Number of entry points")
    leaf_functions: int = Field(..., description="Functions that don't call others")
    root_functions: int = Field(..., description="Functions never called by others")
    recursive_functions: int = Field(..., description="Directly recursive functions")
    skipped_bodies: int = Field(..., description="Bodies skipped as malformed")
    unresolved_calls: int = Field(..., description="Call targets dropped as unresolved")
    max_constraint: int = Field(..., description="Largest edge weight")
    avg_calls_per_function: float = Field(..., description="Average edges per function")

    @classmethod
    def from_call_graph(cls, graph: CallGraph) -> 'CallGraphStats':
        """Create statistics from call graph"""
        kinds = [instance.kind for instance in graph.instances.values()]
        total_functions = len(graph.instances)
        total_edges = len(graph.edges)

        return cls(
            total_functions=total_functions,
            concrete_functions=kinds.count(InstanceKind.CONCRETE),
            abstract_functions=kinds.count(InstanceKind.ABSTRACT),
            external_functions=kinds.count(InstanceKind.EXTERNAL),
            total_edges=total_edges,
            total_call_sites=graph.total_call_sites,
            entry_points=len(graph.entry_points),
            leaf_functions=len(graph.get_leaf_functions()),
            root_functions=len(graph.get_root_functions()),
            recursive_functions=len(graph.get_recursive_functions()),
            skipped_bodies=len(graph.skipped),
            unresolved_calls=len(graph.unresolved),
            max_constraint=max((edge.weight for edge in graph.edges), default=0),
            avg_calls_per_function=round(total_edges / max(total_functions, 1), 2)
        )
