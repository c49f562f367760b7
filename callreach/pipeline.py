"""
End-to-end analysis run: build the graph, answer queries, write artifacts
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .config import AnalysisOptions
from .errors import SerializationIOError
from .graph.analyzer import CallerAnalyzer
from .graph.builder import CallGraphBuilder
from .graph.context import AnalysisContext
from .graph.models import CallGraph, ReachabilityResult
from .ir.loader import IRProvider
from .report.artifacts import CALL_GRAPH_STEM, callers_file_stem, write_artifact
from .report.json_reporter import JSONReporter
from .report.text_reporter import TextReporter
from .timer import Timer

logger = logging.getLogger(__name__)


@dataclass
class AnalysisOutcome:
    """Everything a run produced"""
    context: AnalysisContext
    call_graph: CallGraph
    results: List[ReachabilityResult] = field(default_factory=list)
    artifacts: List[str] = field(default_factory=list)
    errors: List[SerializationIOError] = field(default_factory=list)

    @property
    def options(self) -> AnalysisOptions:
        return self.context.options


def answer_queries(call_graph: CallGraph, context: AnalysisContext) -> List[ReachabilityResult]:
    """Run every configured find-callers query"""
    options = context.options
    if not options.has_queries:
        return []

    analyzer = CallerAnalyzer(call_graph, index=context.index, timer=context.timer)
    with context.timer.measure("answer_queries"):
        if options.find_callers_by_hash:
            return analyzer.run_queries(options.find_callers_by_hash, by_hash=True, workers=options.workers)
        return analyzer.run_queries(options.find_callers, workers=options.workers)


def run_analysis(provider: IRProvider, options: Optional[AnalysisOptions] = None,
                 timer: Optional[Timer] = None) -> AnalysisOutcome:
    """Build the call graph for one provider and answer its queries"""
    context = AnalysisContext(provider=provider, options=options or AnalysisOptions(), timer=timer)

    with context.timer.measure("total_analysis"):
        call_graph = CallGraphBuilder(context).build()
        results = answer_queries(call_graph, context)

    return AnalysisOutcome(context=context, call_graph=call_graph, results=results)


def write_artifacts(outcome: AnalysisOutcome) -> AnalysisOutcome:
    """Serialize the outcome into the output directory.

    A failed write is recorded on the outcome and the remaining artifacts
    are still attempted.
    """
    options = outcome.options
    fmt = options.output_format
    without_args = options.without_args
    pending = []

    with outcome.context.timer.measure("write_artifacts"):
        text_reporter = TextReporter(outcome.call_graph, without_args)
        json_reporter = JSONReporter(outcome.call_graph, without_args)

        if options.emit_graph:
            if fmt.wants_text:
                pending.append((f"{CALL_GRAPH_STEM}.txt", text_reporter.format_call_graph()))
            if fmt.wants_json:
                pending.append((f"{CALL_GRAPH_STEM}.json", json_reporter.format_call_graph()))

        for result in outcome.results:
            stem = callers_file_stem(result.query, result.by_hash)
            if fmt.wants_text:
                pending.append((f"{stem}.txt", text_reporter.format_callers(result)))
            if fmt.wants_json:
                pending.append((f"{stem}.json", json_reporter.format_callers(result)))

        for file_name, content in pending:
            try:
                path = write_artifact(options.output_path(file_name), content)
            except SerializationIOError as e:
                logger.error("%s", e)
                outcome.errors.append(e)
                continue
            outcome.artifacts.append(str(path))

    if options.timer_output:
        try:
            outcome.context.timer.write_report(options.timer_output)
        except OSError as e:
            error = SerializationIOError(options.timer_output, str(e))
            logger.error("%s", error)
            outcome.errors.append(error)
        else:
            outcome.artifacts.append(options.timer_output)

    return outcome
