"""
Plain-text reporter for call graphs and caller queries
"""

from typing import List

from ..graph.models import CallGraph, ReachabilityResult
from .view import GraphView


class TextReporter:
    """Text output formatter"""

    def __init__(self, call_graph: CallGraph, without_args: bool = False):
        self.view = GraphView(call_graph, without_args)

    def format_call_graph(self) -> str:
        """Format the call graph as readable text"""
        lines: List[str] = ["Call Graph:", "===========", ""]

        for caller in self.view.callers():
            lines.append(f"Function: {self.view.name(caller)}")
            for edge in self.view.callees(caller):
                line = f"  -> {self.view.name(edge.callee)} [constraint: {edge.weight}]"
                if edge.multiplicity > 1:
                    line += f" (x{edge.multiplicity})"
                lines.append(line)
            lines.append("")

        return "\n".join(lines) + "\n"

    def format_callers(self, result: ReachabilityResult) -> str:
        """Format one find-callers result as readable text"""
        if not result.found:
            return f"No function found matching '{result.query}'\n"

        lines: List[str] = [
            f"Callers of functions matching '{result.query}':",
            "==================================",
            "",
            "Matched targets:",
        ]
        for target in self.view.targets(result):
            lines.append(f"  * {self.view.name(target)}")
        lines.append("")

        for caller in self.view.reached(result):
            lines.append(f"- {self.view.name(caller.identity)} [constraint: {caller.weight}]")

        lines.append("")
        lines.append(f"Total: {result.total_callers} callers found")
        return "\n".join(lines) + "\n"
