"""
Data models for the intermediate representation consumed by the analysis
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from enum import Enum


class TerminatorKind(str, Enum):
    """Kinds of basic block terminators"""
    GOTO = "goto"                # Unconditional jump
    SWITCH = "switch"            # Conditional branch (if/match/loop guard)
    CALL = "call"                # Function call, continues at target
    RETURN = "return"            # Function exit
    ASSERT = "assert"            # Runtime check, continues at target
    UNREACHABLE = "unreachable"  # Diverging end of a path


class DispatchKind(str, Enum):
    """How a call terminator's target is resolved"""
    DIRECT = "direct"        # Concrete, non-generic target
    GENERIC = "generic"      # Needs substitution of the caller's type arguments
    DYNAMIC = "dynamic"      # Trait object, function pointer or closure value
    EXTERNAL = "external"    # Opaque target without a body in the IR


class CallableRef(BaseModel):
    """Reference to a callable definition with its type arguments"""
    path: str = Field(..., description="Definition path of the callable")
    type_args: List[str] = Field(default_factory=list, description="Type arguments, may reference caller generics")


class CallInfo(BaseModel):
    """Resolution annotation attached to a call terminator"""
    dispatch: DispatchKind = Field(..., description="Resolution kind")
    path: Optional[str] = Field(None, description="Callee definition path for direct/generic/external calls")
    type_args: List[str] = Field(default_factory=list, description="Type arguments at the call site")
    interface: Optional[str] = Field(None, description="Trait or capability name for method dispatch")
    method: Optional[str] = Field(None, description="Method name within the interface")
    self_type: Optional[str] = Field(None, description="Receiver type for trait-method calls")
    candidates: List[CallableRef] = Field(default_factory=list, description="Explicit dynamic dispatch candidates")
    crate: Optional[str] = Field(None, description="Owning crate of an external callee")

    def describe(self) -> str:
        """Short human readable description of the call target"""
        if self.path:
            return self.path
        if self.interface and self.method:
            receiver = self.self_type or "dyn"
            return f"<{receiver} as {self.interface}>::{self.method}"
        return f"<{self.dispatch.value} call>"


class Terminator(BaseModel):
    """Block terminator with its successor edges"""
    kind: TerminatorKind = Field(..., description="Terminator kind")
    target: Optional[int] = Field(None, description="Successor block for goto/call/assert")
    targets: List[int] = Field(default_factory=list, description="Successor blocks for switch")
    unwind: Optional[int] = Field(None, description="Cleanup block taken on unwinding")
    diverges: bool = Field(default=False, description="Call never returns (no target expected)")
    call: Optional[CallInfo] = Field(None, description="Call annotation for kind=call")

    def successors(self) -> List[int]:
        """All successor block ids in a fixed order"""
        result = []
        if self.kind == TerminatorKind.SWITCH:
            result.extend(self.targets)
        elif self.target is not None:
            result.append(self.target)
        if self.unwind is not None:
            result.append(self.unwind)
        return result

    @property
    def is_branch(self) -> bool:
        """Whether leaving this block is a branch decision"""
        return self.kind == TerminatorKind.SWITCH


class BasicBlock(BaseModel):
    """Straight-line sequence of statements ending in a terminator"""
    id: int = Field(..., description="Block id, unique within the body")
    statements: List[str] = Field(default_factory=list, description="Typed statements (opaque text)")
    terminator: Optional[Terminator] = Field(None, description="Block terminator")


class Body(BaseModel):
    """Control-flow body of a function definition"""
    entry: int = Field(default=0, description="Entry block id")
    blocks: List[BasicBlock] = Field(default_factory=list, description="Basic blocks")

    def block_map(self) -> Dict[int, BasicBlock]:
        """Blocks keyed by id"""
        return {block.id: block for block in self.blocks}


class FunctionDef(BaseModel):
    """A function definition as exposed by the front-end"""
    path: str = Field(..., description="Definition path, generic parameters written inline")
    generics: List[str] = Field(default_factory=list, description="Generic parameter names in binding order")
    public: bool = Field(default=True, description="Visible outside its crate")
    crate: Optional[str] = Field(None, description="Owning crate, defaults to the document crate")
    body: Optional[Body] = Field(None, description="Body, absent for external functions")

    @property
    def is_generic(self) -> bool:
        return bool(self.generics)

    @property
    def has_body(self) -> bool:
        return self.body is not None


class ImplDef(BaseModel):
    """Implementation of an interface method (trait impl, closure capability)"""
    interface: str = Field(..., description="Trait or capability name")
    method: str = Field(..., description="Method name")
    self_type: Optional[str] = Field(None, description="Implementing type")
    path: str = Field(..., description="Definition path of the implementing function")
    type_args: List[str] = Field(default_factory=list, description="Type arguments of the implementation")


class EntryPoint(BaseModel):
    """Program entry point"""
    path: str = Field(..., description="Definition path")
    type_args: List[str] = Field(default_factory=list, description="Concrete type arguments")


class IRProgram(BaseModel):
    """Complete IR document for one compilation unit"""
    crate: str = Field(default="main", description="Crate under analysis")
    crates: Dict[str, str] = Field(default_factory=dict, description="Crate name to version")
    entry_points: List[EntryPoint] = Field(default_factory=list, description="Explicit entry points")
    functions: List[FunctionDef] = Field(default_factory=list, description="Function definitions")
    implementations: List[ImplDef] = Field(default_factory=list, description="Interface implementations")
