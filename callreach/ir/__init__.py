"""
IR models and the provider interface
"""

from .loader import IRLoader, IRProvider, DocumentIRProvider
from .models import IRProgram, FunctionDef, Body, BasicBlock, Terminator, CallInfo

__all__ = [
    "IRLoader",
    "IRProvider",
    "DocumentIRProvider",
    "IRProgram",
    "FunctionDef",
    "Body",
    "BasicBlock",
    "Terminator",
    "CallInfo",
]
