"""
Call graph construction and analysis
"""

from .builder import CallGraphBuilder
from .analyzer import CallerAnalyzer
from .context import AnalysisContext
from .index import InstanceIndex, PathMatcher
from .models import CallGraph, CallGraphStats, FunctionInstance, ReachabilityResult

__all__ = ["CallGraphBuilder", "CallerAnalyzer", "AnalysisContext", "InstanceIndex", "PathMatcher",
           "CallGraph", "CallGraphStats", "FunctionInstance", "ReachabilityResult"]
