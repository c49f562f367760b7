"""
Per-run analysis state shared by the pipeline stages
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Set

from ..config import AnalysisOptions
from ..ir.loader import IRProvider
from ..ir.models import DispatchKind
from ..timer import Timer
from .constraints import BlockConstraints
from .index import InstanceIndex
from .models import SkippedInstance, UnresolvedCall


@dataclass
class ResolvedCall:
    """Targets resolved for one call terminator"""
    dispatch: DispatchKind
    callees: List[str]
    target: str


@dataclass
class AnalysisContext:
    """Everything one analysis run owns.

    Nothing here is module-global, so several runs (one per target set, or
    one per test) never share a worklist or an identity table.
    """
    provider: IRProvider
    options: AnalysisOptions = field(default_factory=AnalysisOptions)
    timer: Optional[Timer] = None
    index: InstanceIndex = field(default_factory=InstanceIndex)
    worklist: Deque[str] = field(default_factory=deque)
    visited: Set[str] = field(default_factory=set)
    entry_points: List[str] = field(default_factory=list)
    resolutions: Dict[str, Dict[int, ResolvedCall]] = field(default_factory=dict)
    unresolved: List[UnresolvedCall] = field(default_factory=list)
    skipped: List[SkippedInstance] = field(default_factory=list)
    constraints: Dict[str, BlockConstraints] = field(default_factory=dict)

    def __post_init__(self):
        if self.timer is None:
            self.timer = Timer(enabled=self.options.timing_enabled)

    def enqueue(self, identity: str) -> None:
        if identity not in self.visited:
            self.worklist.append(identity)
