"""
JSON reporter for machine-readable output
"""

import json
from typing import Any, Dict, List

from ..graph.models import CallGraph, ReachabilityResult
from .view import GraphView


class JSONReporter:
    """JSON output formatter for call graphs and caller queries"""

    def __init__(self, call_graph: CallGraph, without_args: bool = False, pretty: bool = True):
        self.view = GraphView(call_graph, without_args)
        self.pretty = pretty

    def _dumps(self, data: Any) -> str:
        if self.pretty:
            return json.dumps(data, indent=2)
        return json.dumps(data)

    def _function_entry(self, identity: str) -> Dict[str, Any]:
        instance = self.view.instance(identity)
        return {
            "name": self.view.name(identity),
            "version": instance.crate_version,
            "path": instance.base_path,
            "path_hash": identity
        }

    def format_call_graph_data(self) -> List[Dict[str, Any]]:
        """Call graph as a list of caller entries with their callees"""
        entries = []
        for caller in self.view.callers():
            edges = self.view.callees(caller)

            callees = []
            for edge in edges:
                callee = self._function_entry(edge.callee)
                callee["constraint_depth"] = edge.weight
                callee["multiplicity"] = edge.multiplicity
                callees.append(callee)

            caller_entry = self._function_entry(caller)
            caller_entry["constraint_depth"] = max(edge.weight for edge in edges)

            entries.append({"caller": caller_entry, "callee": callees})
        return entries

    def format_call_graph(self) -> str:
        """Format the call graph as a JSON string"""
        return self._dumps(self.format_call_graph_data())

    def format_callers_data(self, result: ReachabilityResult) -> Dict[str, Any]:
        """One find-callers result as a JSON-ready mapping"""
        callers = []
        for reached in self.view.reached(result):
            entry = self._function_entry(reached.identity)
            entry["path_constraints"] = reached.weight
            callers.append(entry)

        return {
            "target": result.query,
            "total_callers": result.total_callers,
            "matched_targets": [self._function_entry(target) for target in self.view.targets(result)],
            "callers": callers
        }

    def format_callers(self, result: ReachabilityResult) -> str:
        """Format one find-callers result as a JSON string"""
        return self._dumps(self.format_callers_data(result))
