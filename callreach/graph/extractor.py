"""
Call-site extraction from collected function bodies
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List

from ..ir.models import TerminatorKind
from .context import AnalysisContext
from .models import CallSite, FunctionInstance

logger = logging.getLogger(__name__)


class CallSiteExtractor:
    """Emits one call site per resolved call terminator, weighted by its block"""

    def __init__(self, context: AnalysisContext):
        self.context = context

    def extract(self, instance: FunctionInstance) -> List[CallSite]:
        """Call sites of one instance, in block order"""
        resolved = self.context.resolutions.get(instance.identity)
        if resolved is None:
            return []

        function = self.context.provider.function(instance.def_path)
        constraints = self.context.constraints[function.path]

        sites: List[CallSite] = []
        for block in function.body.blocks:
            if block.terminator.kind != TerminatorKind.CALL:
                continue
            call = resolved.get(block.id)
            if call is None:
                # Unreachable, or dropped as unresolved during collection
                continue

            sites.append(CallSite(
                caller=instance.identity,
                callees=list(call.callees),
                weight=constraints.weight(block.id),
                block=block.id,
                order=len(sites),
                dispatch=call.dispatch
            ))

        return sites

    def extract_all(self, instances: List[FunctionInstance]) -> List[CallSite]:
        """Extract call sites of every expanded instance, merged in discovery order"""
        expanded = [instance for instance in instances if instance.identity in self.context.resolutions]
        workers = self.context.options.workers

        with self.context.timer.measure("extract_call_sites"):
            if workers > 1 and len(expanded) > 1:
                with ThreadPoolExecutor(max_workers=workers) as executor:
                    partial_results = list(executor.map(self.extract, expanded))
            else:
                partial_results = [self.extract(instance) for instance in expanded]

        call_sites = [site for partial in partial_results for site in partial]
        logger.info("Extracted %d call sites from %d functions", len(call_sites), len(expanded))
        return call_sites
