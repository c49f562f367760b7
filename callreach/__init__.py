"""
callreach - call graph construction and caller reachability over compiler IR
"""

__version__ = "0.1.0"
