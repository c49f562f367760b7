"""
Call graph construction engine
"""

import logging
from typing import Any, Dict, List, Tuple

from ..ir.models import DispatchKind
from .collector import InstanceCollector
from .context import AnalysisContext
from .extractor import CallSiteExtractor
from .models import CallGraph, CallSite, FunctionInstance, GraphEdge, InstanceKind

logger = logging.getLogger(__name__)


def expand_call_sites(call_sites: List[CallSite]) -> List[GraphEdge]:
    """One edge per call site and callee, in call-site order"""
    edges = []
    for site in call_sites:
        for callee in site.callees:
            edges.append(GraphEdge(caller=site.caller, callee=callee, weight=site.weight, block=site.block))
    return edges


def deduplicate_edges(edges: List[GraphEdge]) -> List[GraphEdge]:
    """Collapse edges per (caller, callee).

    The surviving edge carries the minimal weight and counts the collapsed
    sites. On equal weight the first edge seen stays the witness.
    """
    merged: Dict[Tuple[str, str], GraphEdge] = {}
    for edge in edges:
        key = (edge.caller, edge.callee)
        existing = merged.get(key)
        if existing is None:
            merged[key] = edge.model_copy()
            continue

        existing.multiplicity += 1
        if edge.weight < existing.weight:
            existing.weight = edge.weight
            existing.block = edge.block

    return list(merged.values())


def build_edges(call_sites: List[CallSite], deduplicate: bool = True) -> List[GraphEdge]:
    """Edge list for a call-site list, deduplicated or one per site"""
    edges = expand_call_sites(call_sites)
    if deduplicate:
        return deduplicate_edges(edges)
    return edges


class CallGraphBuilder:
    """Builds call graphs from an IR provider"""

    def __init__(self, context: AnalysisContext):
        self.context = context
        self.collector = InstanceCollector(context)
        self.extractor = CallSiteExtractor(context)

    def build(self) -> CallGraph:
        """Collect instances, extract call sites and assemble the graph"""
        instances = self.collector.collect()
        call_sites = self.extractor.extract_all(instances)
        return self.assemble(instances, call_sites)

    def assemble(self, instances: List[FunctionInstance], call_sites: List[CallSite]) -> CallGraph:
        """Turn collected instances and call sites into a call graph"""
        deduplicate = self.context.options.deduplicate

        with self.context.timer.measure("build_graph"):
            known = {instance.identity: instance for instance in instances}
            edges = []
            for edge in build_edges(call_sites, deduplicate):
                if edge.caller not in known or edge.callee not in known:
                    logger.warning("Dropping edge with unregistered endpoint: %s -> %s", edge.caller, edge.callee)
                    continue
                edges.append(edge)

            call_graph = CallGraph(
                crate_name=self.context.provider.crate_name,
                instances=known,
                edges=edges,
                entry_points=list(self.context.entry_points),
                skipped=list(self.context.skipped),
                unresolved=list(self.context.unresolved),
                deduplicated=deduplicate,
                total_call_sites=len(call_sites),
                analysis_metadata=self._generate_metadata(instances, call_sites, edges)
            )

        if deduplicate:
            logger.info("Deduplicated call sites: %d edges before, %d after",
                        sum(len(site.callees) for site in call_sites), len(edges))
        return call_graph

    def _generate_metadata(self, instances: List[FunctionInstance], call_sites: List[CallSite],
                           edges: List[GraphEdge]) -> Dict[str, Any]:
        """Generate analysis metadata"""
        expanded_edges = sum(len(site.callees) for site in call_sites)
        return {
            'total_functions': len(instances),
            'total_call_sites': len(call_sites),
            'total_edges': len(edges),
            'dedup_ratio': round(len(edges) / expanded_edges, 3) if expanded_edges else 1.0,
            'instance_kinds': {
                kind.value: sum(1 for instance in instances if instance.kind == kind)
                for kind in InstanceKind
            },
            'dispatch_kinds': {
                dispatch.value: sum(1 for site in call_sites if site.dispatch == dispatch)
                for dispatch in DispatchKind
            },
            'skipped_bodies': len(self.context.skipped),
            'unresolved_calls': len(self.context.unresolved)
        }

