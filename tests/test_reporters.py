"""
Tests for text and JSON serialization
"""

import json
import re
from pathlib import Path

from rich.console import Console

from callreach.config import AnalysisOptions
from callreach.graph.analyzer import CallerAnalyzer
from callreach.ir.loader import IRLoader
from callreach.pipeline import run_analysis
from callreach.report.artifacts import callers_file_stem, slugify
from callreach.report.console import ConsoleReporter
from callreach.report.json_reporter import JSONReporter
from callreach.report.text_reporter import TextReporter

FIXTURES = Path(__file__).parent / "fixtures"
EXAMPLE = Path(__file__).parent.parent / "examples" / "inventory.yaml"


def build(path, **options):
    return run_analysis(IRLoader().load_file(str(path)), AnalysisOptions(**options)).call_graph


def identity_of(graph, label):
    return next(identity for identity, instance in graph.instances.items() if instance.label() == label)


class TestTextReporter:
    """Test the plain-text artifacts"""

    def setup_method(self):
        """Set up test fixtures"""
        self.graph = build(FIXTURES / "store.yaml")
        self.reporter = TextReporter(self.graph)
        self.ids = {label: identity_of(self.graph, label)
                    for label in ["main", "report", "DataStore::<Electronics>::total",
                                  "DataStore::<Clothing>::total", "DataStore::<Electronics>::len"]}

    def test_call_graph(self):
        text = self.reporter.format_call_graph()
        ids = self.ids

        assert text == (
            "Call Graph:\n"
            "===========\n"
            "\n"
            f"Function: main [{ids['main']}]\n"
            f"  -> report [{ids['report']}] [constraint: 0]\n"
            "\n"
            f"Function: report [{ids['report']}]\n"
            f"  -> DataStore::<Clothing>::total [{ids['DataStore::<Clothing>::total']}] [constraint: 0]\n"
            f"  -> DataStore::<Electronics>::len [{ids['DataStore::<Electronics>::len']}] [constraint: 0]\n"
            f"  -> DataStore::<Electronics>::total [{ids['DataStore::<Electronics>::total']}] [constraint: 0]\n"
            "\n"
        )

    def test_callers(self):
        result = CallerAnalyzer(self.graph).find_callers("DataStore::total")
        text = self.reporter.format_callers(result)

        assert text.startswith("Callers of functions matching 'DataStore::total':\n")
        assert f"  * DataStore::<Clothing>::total [{self.ids['DataStore::<Clothing>::total']}]" in text
        assert f"  * DataStore::<Electronics>::total [{self.ids['DataStore::<Electronics>::total']}]" in text
        caller_lines = [line for line in text.splitlines() if line.startswith("- ")]
        assert caller_lines == [
            f"- main [{self.ids['main']}] [constraint: 0]",
            f"- report [{self.ids['report']}] [constraint: 0]",
        ]
        assert text.endswith("Total: 2 callers found\n")

    def test_target_not_found(self):
        result = CallerAnalyzer(self.graph).find_callers("Nope::nothing")
        assert self.reporter.format_callers(result) == "No function found matching 'Nope::nothing'\n"

    def test_without_args(self):
        text = TextReporter(self.graph, without_args=True).format_call_graph()
        assert "DataStore::<" not in text
        assert text.count("  -> DataStore::total [") == 2

    def test_multiplicity_suffix(self):
        graph = build(EXAMPLE)
        text = TextReporter(graph).format_call_graph()
        fmt = identity_of(graph, "alloc::fmt::format")
        add = identity_of(graph, "InventoryManager::add_electronic")

        assert f"  -> alloc::fmt::format [{fmt}] [constraint: 0] (x6)\n" in text
        assert f"  -> InventoryManager::add_electronic [{add}] [constraint: 0] (x2)\n" in text

    def test_non_instance_label(self):
        text_ir = '''
entry_points: [{path: main}]
functions:
  - path: main
    body: {blocks: [{id: 0, terminator: {kind: call, target: 1, call: {dispatch: generic, path: "id::<T>"}}}, {id: 1, terminator: {kind: return}}]}
  - path: "id::<T>"
    generics: [T]
    body: {blocks: [{id: 0, terminator: {kind: return}}]}
'''
        graph = run_analysis(IRLoader().load_string(text_ir)).call_graph
        assert "  -> id::<T> (non-instance) [" in TextReporter(graph).format_call_graph()


class TestJSONReporter:
    """Test the JSON artifacts"""

    def setup_method(self):
        """Set up test fixtures"""
        self.graph = build(EXAMPLE)
        self.reporter = JSONReporter(self.graph)

    def test_call_graph_shape(self):
        data = json.loads(self.reporter.format_call_graph())

        assert isinstance(data, list)
        names = [entry["caller"]["name"] for entry in data]
        assert names == sorted(names)

        entry = next(entry for entry in data if entry["caller"]["name"].startswith("main ["))
        assert entry["caller"]["version"] == "0.1.0"
        assert entry["caller"]["path"] == "main"
        assert entry["caller"]["constraint_depth"] == max(callee["constraint_depth"] for callee in entry["callee"])
        assert set(entry["callee"][0]) == {"name", "version", "path", "constraint_depth", "path_hash", "multiplicity"}

    def test_callee_paths_use_definition_without_arguments(self):
        data = self.reporter.format_call_graph_data()
        report = next(entry for entry in data
                      if entry["caller"]["path"] == "InventoryManager::generate_inventory_report")
        paths = {callee["path"] for callee in report["callee"]}
        assert "DataStore::total_value" in paths
        fmt = next(callee for callee in report["callee"] if callee["path"] == "alloc::fmt::format")
        assert fmt["multiplicity"] == 6
        assert fmt["version"] == "1.80.0"

    def test_callers(self):
        result = CallerAnalyzer(self.graph).find_callers("log_calculation")
        data = json.loads(self.reporter.format_callers(result))

        assert data["target"] == "log_calculation"
        assert data["total_callers"] == len(data["callers"]) == result.total_callers
        assert [target["path"] for target in data["matched_targets"]] == ["log_calculation"]
        assert all(set(caller) == {"name", "version", "path", "path_hash", "path_constraints"}
                   for caller in data["callers"])
        main = next(caller for caller in data["callers"] if caller["path"] == "main")
        assert main["path_constraints"] == 1

    def test_unknown_target(self):
        result = CallerAnalyzer(self.graph).find_callers("nope")
        data = self.reporter.format_callers_data(result)
        assert data == {"target": "nope", "total_callers": 0, "matched_targets": [], "callers": []}


class TestDeterminism:
    """Identical input gives byte-identical artifacts"""

    def test_repeated_runs(self):
        first = build(EXAMPLE)
        second = build(EXAMPLE, workers=4)

        assert TextReporter(first).format_call_graph() == TextReporter(second).format_call_graph()
        assert JSONReporter(first).format_call_graph() == JSONReporter(second).format_call_graph()

        query = "DataStore::total_value"
        first_result = CallerAnalyzer(first).find_callers(query)
        second_result = CallerAnalyzer(second).find_callers(query)
        assert JSONReporter(first).format_callers(first_result) == JSONReporter(second).format_callers(second_result)

    def test_identities_are_stable(self):
        first = build(EXAMPLE)
        second = build(EXAMPLE)
        assert list(first.instances) == list(second.instances)


class TestConsoleReporter:
    """Test the rich function listing"""

    def test_instantiation_counts(self):
        outcome = run_analysis(IRLoader().load_file(str(FIXTURES / "store.yaml")))
        console = Console(record=True, width=200)

        ConsoleReporter(console=console).print_functions(outcome.call_graph, index=outcome.context.index)

        rows = {}
        for line in console.export_text().splitlines():
            cells = [cell.strip() for cell in line.split("\u2502") if cell.strip()]
            if len(cells) == 5:
                rows[cells[0]] = cells[4]
        assert rows["Function"] == "Instances"
        assert rows["DataStore::<Electronics>::total"] == "2"
        assert rows["DataStore::<Electronics>::len"] == "1"
        assert rows["main"] == "1"


class TestArtifactNames:
    """Test caller report file naming"""

    def test_path_query(self):
        stem = callers_file_stem("DataStore::<Electronics>::total_value")
        assert re.fullmatch(r"callers_DataStore_Electronics_total_value_[0-9a-f]{8}", stem)

    def test_similar_queries_do_not_collide(self):
        assert callers_file_stem("a::b") != callers_file_stem("a__b")

    def test_hash_query(self):
        assert callers_file_stem("ABCDEF", by_hash=True) == "callers_by_hash_ABCDEF"

    def test_slug_fallback(self):
        assert slugify("<>") == "target"
