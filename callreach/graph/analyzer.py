"""
Backward reachability analysis for call graphs
"""

import heapq
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional

from ..timer import Timer
from .index import InstanceIndex
from .models import CallGraph, FunctionInstance, ReachabilityResult, ReachedCaller

logger = logging.getLogger(__name__)


class CallerAnalyzer:
    """Answers "who transitively calls X" on a finished call graph"""

    def __init__(self, call_graph: CallGraph, index: Optional[InstanceIndex] = None,
                 timer: Optional[Timer] = None):
        self.call_graph = call_graph
        self.index = index if index is not None else self._index_graph(call_graph)
        self.timer = timer or Timer(enabled=False)
        # Built once up front so concurrent queries only read it
        self.call_graph.reverse_adjacency()

    @staticmethod
    def _index_graph(call_graph: CallGraph) -> InstanceIndex:
        index = InstanceIndex()
        for instance in call_graph.instances.values():
            index.register(instance)
        return index

    def resolve_targets(self, query: str, by_hash: bool = False) -> List[FunctionInstance]:
        """Instances a query refers to, in stable order"""
        if by_hash:
            return self.index.lookup_hash(query)
        return self.index.match_path(query, candidates=self.call_graph.instances.keys())

    def find_callers(self, query: str, by_hash: bool = False) -> ReachabilityResult:
        """All transitive callers of every function matching a query"""
        with self.timer.measure("find_callers"):
            targets = [instance.identity for instance in self.resolve_targets(query, by_hash)]
            if not targets:
                logger.warning("No function found matching '%s'", query)
                return ReachabilityResult(query=query, by_hash=by_hash)

            callers = self.find_callers_of(targets)

        logger.info("Found %d callers for '%s' (%d targets)", len(callers), query, len(targets))
        return ReachabilityResult(query=query, by_hash=by_hash, targets=targets, callers=callers)

    def find_callers_of(self, targets: List[str]) -> Dict[str, ReachedCaller]:
        """Multi-source Dijkstra over reverse edges.

        Each caller gets the smallest accumulated constraint weight to any
        target and the chain of functions that realizes it. Targets are not
        part of the result.
        """
        reverse = self.call_graph.reverse_adjacency()
        distances: Dict[str, int] = {}
        next_hop: Dict[str, Optional[str]] = {}
        heap = []
        counter = 0

        for target in targets:
            if target in distances:
                continue
            distances[target] = 0
            next_hop[target] = None
            heapq.heappush(heap, (0, counter, target))
            counter += 1

        while heap:
            distance, _, current = heapq.heappop(heap)
            if distance > distances[current]:
                continue

            for edge in reverse.get(current, []):
                candidate = distance + edge.weight
                if edge.caller in distances and distances[edge.caller] <= candidate:
                    continue
                distances[edge.caller] = candidate
                next_hop[edge.caller] = current
                heapq.heappush(heap, (candidate, counter, edge.caller))
                counter += 1

        target_set = set(targets)
        callers: Dict[str, ReachedCaller] = {}
        for identity, distance in distances.items():
            if identity in target_set:
                continue
            callers[identity] = ReachedCaller(
                identity=identity,
                weight=distance,
                path=self._witness_path(identity, next_hop)
            )
        return callers

    @staticmethod
    def _witness_path(identity: str, next_hop: Dict[str, Optional[str]]) -> List[str]:
        path = [identity]
        current = next_hop.get(identity)
        while current is not None:
            path.append(current)
            current = next_hop.get(current)
        return path

    def run_queries(self, queries: List[str], by_hash: bool = False, workers: int = 1) -> List[ReachabilityResult]:
        """Answer several queries independently, results in query order"""
        if workers > 1 and len(queries) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                return list(executor.map(lambda query: self.find_callers(query, by_hash), queries))
        return [self.find_callers(query, by_hash) for query in queries]
