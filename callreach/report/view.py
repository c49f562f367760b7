"""
Deterministic ordering shared by the reporters
"""

from typing import List

from ..graph.models import CallGraph, FunctionInstance, GraphEdge, ReachabilityResult, ReachedCaller


class GraphView:
    """Read-only, sorted view of a call graph for serialization"""

    def __init__(self, call_graph: CallGraph, without_args: bool = False):
        self.call_graph = call_graph
        self.without_args = without_args

    def instance(self, identity: str) -> FunctionInstance:
        return self.call_graph.instances[identity]

    def label(self, identity: str) -> str:
        return self.instance(identity).label(self.without_args)

    def name(self, identity: str) -> str:
        """Label with the identity appended"""
        return f"{self.label(identity)} [{identity}]"

    def callers(self) -> List[str]:
        """Functions with outgoing edges, by (label, identity)"""
        identities = {edge.caller for edge in self.call_graph.edges}
        return sorted(identities, key=lambda identity: (self.label(identity), identity))

    def callees(self, caller: str) -> List[GraphEdge]:
        """Outgoing edges of a caller, by (label, weight, identity)"""
        return sorted(
            self.call_graph.outgoing(caller),
            key=lambda edge: (self.label(edge.callee), edge.weight, edge.callee)
        )

    def targets(self, result: ReachabilityResult) -> List[str]:
        return sorted(result.targets, key=lambda identity: (self.label(identity), identity))

    def reached(self, result: ReachabilityResult) -> List[ReachedCaller]:
        """Callers of a query result, by (label, identity)"""
        return sorted(
            result.callers.values(),
            key=lambda caller: (self.label(caller.identity), caller.identity)
        )
