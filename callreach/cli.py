"""
Command-line interface for callreach
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console

from . import __version__
from .config import DEFAULT_TIMER_FILE, AnalysisOptions, OutputFormat, load_options
from .errors import CallReachError
from .ir.loader import IRLoader, IRProvider
from .log import setup_logging
from .pipeline import AnalysisOutcome, run_analysis, write_artifacts
from .report.console import ConsoleReporter

# Initialize typer app
app = typer.Typer(
    name="callreach",
    help="Whole-program call graph construction and caller reachability queries",
    add_completion=False
)

console = Console()


# Global options
def version_callback(value: bool):
    if value:
        typer.echo(f"callreach version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True,
        help="Show version and exit"
    )
):
    """Whole-program call graph construction and caller reachability queries"""
    pass


def _load_provider(ir_file: str) -> IRProvider:
    if not Path(ir_file).exists():
        typer.echo(f"IR file not found: {ir_file}")
        raise typer.Exit(1)
    return IRLoader().load_file(ir_file)


def _resolve_options(config_file: Optional[str], overrides: Dict[str, Any], timing: bool) -> AnalysisOptions:
    options = load_options(config_file, overrides)
    if timing and options.timer_output is None:
        timer_output = str(options.output_path(DEFAULT_TIMER_FILE))
        options = options.model_copy(update={'timer_output': timer_output})
    return options


def _report(outcome: AnalysisOutcome, reporter: ConsoleReporter, show_summary: bool) -> None:
    if show_summary:
        reporter.print_summary(outcome.call_graph)
    reporter.print_callers(outcome.call_graph, outcome.results, outcome.options.without_args)
    reporter.print_artifacts(outcome.artifacts)
    reporter.print_errors(outcome.errors)


@app.command()
def graph(
    ir_file: str = typer.Argument(..., help="IR document (YAML or JSON) to analyze"),
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c",
        help="YAML file with analysis options"
    ),
    deduplicate: Optional[bool] = typer.Option(
        None, "--deduplicate/--no-dedup",
        help="Collapse call sites per caller/callee pair (default: on)"
    ),
    without_args: Optional[bool] = typer.Option(
        None, "--without-args",
        help="Print paths without generic arguments"
    ),
    find_callers: Optional[List[str]] = typer.Option(
        None, "--find-callers", help="Find callers of functions matching a path (can be repeated)"
    ),
    find_callers_by_hash: Optional[List[str]] = typer.Option(
        None, "--find-callers-by-hash", help="Find callers of a function identity (can be repeated)"
    ),
    output_format: Optional[OutputFormat] = typer.Option(
        None, "--format", "-f",
        help="Artifact format: text, json, both"
    ),
    output_dir: Optional[str] = typer.Option(
        None, "--output-dir", "-o",
        help="Directory for artifacts (default: ./target)"
    ),
    timing: bool = typer.Option(
        False, "--timing",
        help=f"Write a timing report ({DEFAULT_TIMER_FILE} in the output directory)"
    ),
    timer_output: Optional[str] = typer.Option(
        None, "--timer-output",
        help="Write the timing report to this file"
    ),
    entry_points: Optional[List[str]] = typer.Option(
        None, "--entry-point", "-e", help="Entry point functions (can be repeated)"
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1,
        help="Worker threads for extraction and queries"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging"),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress console output"
    )
):
    """Build the call graph and optionally answer find-callers queries"""
    setup_logging(verbose=verbose, quiet=quiet)

    try:
        options = _resolve_options(config_file, {
            'deduplicate': deduplicate,
            'without_args': without_args,
            'find_callers': find_callers or [],
            'find_callers_by_hash': find_callers_by_hash or [],
            'output_format': output_format,
            'output_dir': output_dir,
            'timer_output': timer_output,
            'entry_points': entry_points or [],
            'workers': workers
        }, timing)

        provider = _load_provider(ir_file)

        if not quiet:
            console.print(f"🔍 Building call graph for crate {provider.crate_name}...")

        outcome = write_artifacts(run_analysis(provider, options))

    except CallReachError as e:
        if not quiet:
            console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    _report(outcome, ConsoleReporter(quiet=quiet), show_summary=True)


@app.command()
def callers(
    ir_file: str = typer.Argument(..., help="IR document (YAML or JSON) to analyze"),
    targets: List[str] = typer.Argument(..., help="Function paths (or identities with --by-hash)"),
    by_hash: bool = typer.Option(
        False, "--by-hash",
        help="Treat targets as exact function identities"
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c",
        help="YAML file with analysis options"
    ),
    deduplicate: Optional[bool] = typer.Option(
        None, "--deduplicate/--no-dedup",
        help="Collapse call sites per caller/callee pair (default: on)"
    ),
    without_args: Optional[bool] = typer.Option(
        None, "--without-args",
        help="Print paths without generic arguments"
    ),
    output_format: Optional[OutputFormat] = typer.Option(
        None, "--format", "-f",
        help="Artifact format: text, json, both"
    ),
    output_dir: Optional[str] = typer.Option(
        None, "--output-dir", "-o",
        help="Directory for artifacts (default: ./target)"
    ),
    entry_points: Optional[List[str]] = typer.Option(
        None, "--entry-point", "-e", help="Entry point functions (can be repeated)"
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1,
        help="Worker threads for extraction and queries"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging"),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress console output"
    )
):
    """Find the transitive callers of one or more functions"""
    setup_logging(verbose=verbose, quiet=quiet)

    try:
        options = _resolve_options(config_file, {
            'deduplicate': deduplicate,
            'without_args': without_args,
            'find_callers': [] if by_hash else targets,
            'find_callers_by_hash': targets if by_hash else [],
            'output_format': output_format,
            'output_dir': output_dir,
            'entry_points': entry_points or [],
            'workers': workers,
            'emit_graph': False
        }, timing=False)

        provider = _load_provider(ir_file)
        outcome = write_artifacts(run_analysis(provider, options))

    except CallReachError as e:
        if not quiet:
            console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    _report(outcome, ConsoleReporter(quiet=quiet), show_summary=False)


@app.command()
def functions(
    ir_file: str = typer.Argument(..., help="IR document (YAML or JSON) to analyze"),
    entry_points: Optional[List[str]] = typer.Option(
        None, "--entry-point", "-e", help="Entry point functions (can be repeated)"
    ),
    without_args: bool = typer.Option(
        False, "--without-args",
        help="Print paths without generic arguments"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging")
):
    """List every function instance reachable from the entry points"""
    setup_logging(verbose=verbose)

    try:
        options = AnalysisOptions(entry_points=entry_points or [], without_args=without_args)
        provider = _load_provider(ir_file)
        outcome = run_analysis(provider, options)
    except CallReachError as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    ConsoleReporter().print_functions(outcome.call_graph, without_args, outcome.context.index)


@app.command()
def validate(
    ir_file: str = typer.Argument(..., help="IR document (YAML or JSON) to validate"),
    verbose: bool = typer.Option(False, "--verbose", help="Show detailed validation info")
):
    """Validate an IR document and the bodies it reaches"""
    setup_logging(verbose=verbose)

    try:
        provider = _load_provider(ir_file)
        outcome = run_analysis(provider, AnalysisOptions())
    except CallReachError as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    call_graph = outcome.call_graph
    console.print(f"\n📊 Validation Summary for crate {call_graph.crate_name}:")
    console.print(f"   Definitions: {len(provider.functions())}")
    console.print(f"   Reachable instances: {len(call_graph.instances)}")
    console.print(f"   Skipped bodies: {len(call_graph.skipped)}")
    console.print(f"   Unresolved calls: {len(call_graph.unresolved)}")

    if verbose:
        for skipped in call_graph.skipped:
            console.print(f"   ⚠️  {call_graph.instances[skipped.identity].display_path}: {skipped.reason}")
        for unresolved in call_graph.unresolved:
            console.print(f"   ⚠️  {unresolved.target} (bb{unresolved.block}): {unresolved.reason}")

    if call_graph.skipped or call_graph.unresolved:
        console.print("⚠️  IR document has problems")
        raise typer.Exit(1)

    console.print("✅ IR document is valid!")


if __name__ == "__main__":
    app()
