"""
Body validation and per-block constraint weights
"""

from collections import deque
from typing import Dict, List, Optional

from ..errors import MalformedBodyError
from ..ir.models import BasicBlock, Body, TerminatorKind


def validate_body(function: str, body: Body) -> Dict[int, BasicBlock]:
    """Check a body's internal consistency and return its blocks by id"""
    blocks: Dict[int, BasicBlock] = {}
    for block in body.blocks:
        if block.id in blocks:
            raise MalformedBodyError(function, "duplicate block id", block.id)
        blocks[block.id] = block

    if body.entry not in blocks:
        raise MalformedBodyError(function, f"entry block bb{body.entry} does not exist")

    for block in body.blocks:
        terminator = block.terminator
        if terminator is None:
            raise MalformedBodyError(function, "block has no terminator", block.id)

        if terminator.kind == TerminatorKind.CALL:
            if terminator.call is None:
                raise MalformedBodyError(function, "call terminator without call information", block.id)
            if terminator.target is None and not terminator.diverges:
                raise MalformedBodyError(function, "call has no successor and does not diverge", block.id)
        elif terminator.kind == TerminatorKind.SWITCH:
            if not terminator.targets:
                raise MalformedBodyError(function, "switch without targets", block.id)
        elif terminator.kind in (TerminatorKind.GOTO, TerminatorKind.ASSERT):
            if terminator.target is None:
                raise MalformedBodyError(function, f"{terminator.kind.value} without target", block.id)

        for successor in terminator.successors():
            if successor not in blocks:
                raise MalformedBodyError(function, f"successor bb{successor} does not exist", block.id)

    return blocks


class BlockConstraints:
    """Minimal branch count from the entry block to every reachable block"""

    def __init__(self, entry: int, weights: Dict[int, int], predecessors: Dict[int, Optional[int]]):
        self.entry = entry
        self.weights = weights
        self.predecessors = predecessors

    def __contains__(self, block_id: int) -> bool:
        return block_id in self.weights

    def weight(self, block_id: int) -> int:
        return self.weights[block_id]

    def path_to(self, block_id: int) -> List[int]:
        """Blocks on the minimal-weight path from the entry to a block"""
        if block_id not in self.weights:
            return []
        path = [block_id]
        current = self.predecessors.get(block_id)
        while current is not None:
            path.append(current)
            current = self.predecessors.get(current)
        path.reverse()
        return path


def compute_block_constraints(body: Body, blocks: Optional[Dict[int, BasicBlock]] = None) -> BlockConstraints:
    """0-1 breadth-first search over the CFG.

    Leaving a switch costs one constraint, every other edge is free. Each
    block gets the fewest branch decisions needed to reach it, so a loop
    guard is counted once no matter how often the loop runs.
    """
    blocks = blocks if blocks is not None else body.block_map()
    weights: Dict[int, int] = {body.entry: 0}
    predecessors: Dict[int, Optional[int]] = {body.entry: None}
    queue = deque([body.entry])

    while queue:
        block_id = queue.popleft()
        terminator = blocks[block_id].terminator
        if terminator is None:
            continue

        cost = 1 if terminator.is_branch else 0
        new_weight = weights[block_id] + cost
        for successor in terminator.successors():
            if successor in weights and weights[successor] <= new_weight:
                continue
            weights[successor] = new_weight
            predecessors[successor] = block_id
            if cost:
                queue.append(successor)
            else:
                queue.appendleft(successor)

    return BlockConstraints(body.entry, weights, predecessors)
