"""
Tests for edge construction and deduplication
"""

from pathlib import Path

from callreach.config import AnalysisOptions
from callreach.graph.builder import CallGraphBuilder, build_edges, deduplicate_edges, expand_call_sites
from callreach.graph.context import AnalysisContext
from callreach.graph.models import CallGraphStats, CallSite
from callreach.ir.loader import IRLoader
from callreach.ir.models import DispatchKind

EXAMPLE = Path(__file__).parent.parent / "examples" / "inventory.yaml"


def site(caller, callees, weight, block, order=0, dispatch=DispatchKind.DIRECT):
    return CallSite(caller=caller, callees=callees, weight=weight, block=block, order=order, dispatch=dispatch)


class TestDeduplication:
    """Test collapsing of call sites per caller/callee pair"""

    def setup_method(self):
        """Set up test fixtures"""
        self.sites = [
            site("a", ["b"], 2, 1, 0),
            site("a", ["b"], 0, 3, 1),
            site("a", ["c"], 1, 4, 2),
            site("a", ["b"], 0, 5, 3),
        ]

    def test_minimum_weight_and_multiplicity(self):
        edges = build_edges(self.sites, deduplicate=True)
        by_pair = {(edge.caller, edge.callee): edge for edge in edges}

        assert len(edges) == 2
        assert by_pair[("a", "b")].weight == 0
        assert by_pair[("a", "b")].multiplicity == 3
        assert by_pair[("a", "c")].multiplicity == 1

    def test_first_minimal_site_is_the_witness(self):
        edges = build_edges(self.sites, deduplicate=True)
        assert edges[0].block == 3

    def test_first_appearance_order(self):
        edges = build_edges(self.sites, deduplicate=True)
        assert [(edge.caller, edge.callee) for edge in edges] == [("a", "b"), ("a", "c")]

    def test_without_deduplication(self):
        edges = build_edges(self.sites, deduplicate=False)
        assert len(edges) == 4
        assert all(edge.multiplicity == 1 for edge in edges)
        assert [edge.weight for edge in edges] == [2, 0, 1, 0]

    def test_input_edges_not_mutated(self):
        edges = expand_call_sites(self.sites)
        deduplicate_edges(edges)
        assert [edge.multiplicity for edge in edges] == [1, 1, 1, 1]
        assert edges[0].weight == 2

    def test_dynamic_site_expands_per_candidate(self):
        dynamic = [site("main", ["circle", "square"], 1, 0, dispatch=DispatchKind.DYNAMIC)]
        edges = build_edges(dynamic)
        assert [(edge.callee, edge.weight) for edge in edges] == [("circle", 1), ("square", 1)]

    def test_pure_function_of_input(self):
        assert build_edges(self.sites) == build_edges(self.sites)


class TestCallGraphBuilder:
    """Test end-to-end graph construction"""

    def build(self, **options):
        context = AnalysisContext(provider=IRLoader().load_file(str(EXAMPLE)),
                                  options=AnalysisOptions(**options))
        return CallGraphBuilder(context).build()

    def test_every_edge_endpoint_is_registered(self):
        graph = self.build()
        for edge in graph.edges:
            assert edge.caller in graph.instances
            assert edge.callee in graph.instances

    def test_repeated_calls_collapse(self):
        graph = self.build()
        labels = {instance.label(): identity for identity, instance in graph.instances.items()}
        report = labels["InventoryManager::generate_inventory_report"]
        fmt = labels["alloc::fmt::format"]

        edges = graph.edges_between(report, fmt)
        assert len(edges) == 1
        assert edges[0].multiplicity == 6
        assert edges[0].weight == 0

    def test_no_dedup_keeps_every_site(self):
        deduplicated = self.build()
        expanded = self.build(deduplicate=False)

        assert not expanded.deduplicated
        assert len(expanded.edges) > len(deduplicated.edges)
        assert len(expanded.edges) == sum(edge.multiplicity for edge in deduplicated.edges)

        labels = {instance.label(): identity for identity, instance in expanded.instances.items()}
        edges = expanded.edges_between(labels["InventoryManager::generate_inventory_report"],
                                       labels["alloc::fmt::format"])
        assert sorted(edge.weight for edge in edges) == [0, 0, 0, 0, 1, 2]

    def test_loop_calls_are_constrained(self):
        graph = self.build()
        labels = {instance.label(): identity for identity, instance in graph.instances.items()}
        edges = graph.edges_between(labels["main"], labels["<Clothing as Product>::name"])
        assert [edge.weight for edge in edges] == [1]

    def test_metadata_and_stats(self):
        graph = self.build()
        stats = CallGraphStats.from_call_graph(graph)

        assert stats.total_functions == len(graph.instances)
        assert stats.entry_points == 1
        assert stats.external_functions > 0
        assert stats.abstract_functions == 0
        assert stats.max_constraint == 2
        assert graph.analysis_metadata["dispatch_kinds"]["dynamic"] == 5
        assert 0 < graph.analysis_metadata["dedup_ratio"] < 1
