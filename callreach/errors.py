"""
Error types raised by the analysis pipeline
"""

from typing import Optional


class CallReachError(Exception):
    """Base class for all analysis errors"""


class IRLoadError(CallReachError):
    """IR document could not be read or failed validation"""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to load IR from {source}: {reason}")


class ConfigError(CallReachError):
    """Invalid analysis options"""


class UnresolvedSymbolError(CallReachError):
    """A call target could not be resolved from the IR"""

    def __init__(self, caller: str, block: int, target: str, reason: str):
        self.caller = caller
        self.block = block
        self.target = target
        self.reason = reason
        super().__init__(f"Unresolved call in {caller} (bb{block}) to {target}: {reason}")


class MalformedBodyError(CallReachError):
    """A function body failed internal consistency checks"""

    def __init__(self, function: str, reason: str, block: Optional[int] = None):
        self.function = function
        self.reason = reason
        self.block = block
        location = f" (bb{block})" if block is not None else ""
        super().__init__(f"Malformed body for {function}{location}: {reason}")


class SerializationIOError(CallReachError):
    """An output artifact could not be written"""

    def __init__(self, destination: str, reason: str):
        self.destination = destination
        self.reason = reason
        super().__init__(f"Failed to write {destination}: {reason}")
