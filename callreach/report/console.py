"""
Console reporter for terminal output with colors and formatting
"""

from typing import List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from ..errors import SerializationIOError
from ..graph.index import InstanceIndex
from ..graph.models import CallGraph, CallGraphStats, InstanceKind, ReachabilityResult
from .view import GraphView


class ConsoleReporter:
    """Rich console reporter for analysis results"""

    def __init__(self, use_colors: bool = True, quiet: bool = False, console: Optional[Console] = None):
        self.console = console or Console(force_terminal=use_colors)
        self.quiet = quiet

        self.kind_colors = {
            InstanceKind.CONCRETE: "green",
            InstanceKind.ABSTRACT: "yellow",
            InstanceKind.EXTERNAL: "dim"
        }

    def print_summary(self, call_graph: CallGraph) -> None:
        """Print call graph statistics"""
        if self.quiet:
            return

        stats = CallGraphStats.from_call_graph(call_graph)

        table = Table(title=f"📊 Call Graph: {call_graph.crate_name}", box=box.ROUNDED)
        table.add_column("Metric", style="bold")
        table.add_column("Count", justify="right")

        table.add_row("Functions", str(stats.total_functions))
        table.add_row("  Concrete", str(stats.concrete_functions))
        table.add_row("  Non-instance", str(stats.abstract_functions))
        table.add_row("  External", str(stats.external_functions))
        table.add_row("Entry Points", str(stats.entry_points))
        table.add_row("Call Sites", str(stats.total_call_sites))
        table.add_row("Edges", str(stats.total_edges))
        table.add_row("Dedup Ratio", str(call_graph.analysis_metadata.get('dedup_ratio', 1.0)))
        table.add_row("Max Constraint", str(stats.max_constraint))
        table.add_row("Recursive Functions", str(stats.recursive_functions))
        table.add_row("", "")  # Separator
        table.add_row("Skipped Bodies", Text(str(stats.skipped_bodies), style="yellow" if stats.skipped_bodies else ""))
        table.add_row("Unresolved Calls", Text(str(stats.unresolved_calls), style="yellow" if stats.unresolved_calls else ""))

        self.console.print(table)
        self.console.print()

    def print_callers(self, call_graph: CallGraph, results: List[ReachabilityResult],
                      without_args: bool = False) -> None:
        """Print each find-callers result"""
        if self.quiet:
            return

        view = GraphView(call_graph, without_args)
        for result in results:
            if not result.found:
                self.console.print(f"\n❓ [yellow]No function found matching '{escape(result.query)}'[/yellow]")
                continue

            self.console.print(f"\n🎯 [bold blue]{escape(result.query)}[/bold blue]")
            if result.is_ambiguous:
                self.console.print(f"   Matched {len(result.targets)} functions:")
            for target in view.targets(result):
                self.console.print(f"   • {escape(view.label(target))} [dim]\\[{target}][/dim]")

            table = Table(box=box.SIMPLE)
            table.add_column("Caller")
            table.add_column("Constraint", justify="right")
            table.add_column("Hash", style="dim")
            for reached in view.reached(result):
                table.add_row(Text(view.label(reached.identity)), str(reached.weight), reached.identity)

            self.console.print(table)
            self.console.print(f"   Total: {result.total_callers} callers found")

    def print_functions(self, call_graph: CallGraph, without_args: bool = False,
                        index: Optional[InstanceIndex] = None) -> None:
        """Print every collected function with its identity.

        With an index, each row also shows how many instantiations its
        definition has.
        """
        view = GraphView(call_graph, without_args)
        ordered = sorted(call_graph.instances, key=lambda identity: (view.label(identity), identity))

        table = Table(title=f"Functions in {call_graph.crate_name}", box=box.ROUNDED)
        table.add_column("Function")
        table.add_column("Kind")
        table.add_column("Version", style="dim")
        table.add_column("Hash", style="dim")
        if index is not None:
            table.add_column("Instances", justify="right")

        for identity in ordered:
            instance = call_graph.instances[identity]
            color = self.kind_colors[instance.kind]
            row = [
                Text(view.label(identity)),
                Text(instance.kind.value, style=color),
                f"{instance.crate_name} {instance.crate_version}",
                identity
            ]
            if index is not None:
                row.append(str(len(index.by_base_path(instance.base_path))))
            table.add_row(*row)

        self.console.print(table)

    def print_artifacts(self, paths: List[str]) -> None:
        """Print the artifacts written by a run"""
        if self.quiet or not paths:
            return
        for path in paths:
            self.console.print(f"💾 Wrote [bold]{path}[/bold]")

    def print_errors(self, errors: List[SerializationIOError]) -> None:
        """Print artifact write failures if any"""
        if not errors:
            return

        self.console.print(f"\n⚠️  [bold red]Write Errors ({len(errors)})[/bold red]")
        for error in errors:
            self.console.print(f"   {error.destination}: {error.reason}")
