from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
import logging
import math

from tilepuzzle.domains.puzzlemn import Goal, SearchContext, State, children, is_goal
from tilepuzzle.heuristics.linear_conflict import linear_conflict
from tilepuzzle.search.result import Result, no_path, solved, timeout

logger = logging.getLogger(__name__)

ALGORITHM = "IDA*"

Heuristic = Callable[[State, Goal], int]


@dataclass(eq=False)
class Frame:
    """Stack entry. `out` marks a node whose children were pushed above it."""
    state: State
    out: bool = False
    evicted: bool = False


def ida_star(
    start: State,
    goal: Goal,
    ctx: Optional[SearchContext] = None,
    hfun: Heuristic = linear_conflict,
) -> Result:
    """
    Iterative deepening on f with an explicit stack instead of recursion.

    Each node is popped twice: first to expand it (pre-order), then, once
    everything above it is done, to drop it from the key table (post-order).
    The next threshold is the smallest f that exceeded the current one.
    """
    ctx = ctx or SearchContext()
    start.g = 0
    start.h = hfun(start, goal)
    start.f = start.h
    if is_goal(start, goal):
        return solved(start, ctx, ALGORITHM, bound=start.f)

    threshold = start.f
    while True:
        ctx.bound_history.append(threshold)
        min_excess = math.inf
        root = Frame(start)
        stack: List[Frame] = [root]
        table: Dict[str, Frame] = {start.key: root}

        while stack:
            ctx.log_open(ALGORITHM, (f.state for f in table.values()))
            if ctx.timed_out():
                return timeout(ctx, ALGORITHM, bound=threshold)
            frame = stack.pop()
            if frame.evicted:
                continue
            if frame.out:
                del table[frame.state.key]
                continue

            frame.out = True
            stack.append(frame)
            ctx.on_expand(frame.state)

            for child in children(frame.state, ctx):
                child.h = hfun(child, goal)
                child.f = child.g + child.h
                if child.f > threshold:
                    min_excess = min(min_excess, child.f)
                    continue
                existing = table.get(child.key)
                if existing is not None:
                    if existing.out or existing.state.f <= child.f:
                        continue
                    existing.evicted = True
                    del table[child.key]
                if is_goal(child, goal):
                    return solved(child, ctx, ALGORITHM, bound=threshold)
                cf = Frame(child)
                stack.append(cf)
                table[child.key] = cf

        if min_excess == math.inf:
            return no_path(ctx, ALGORITHM, bound=threshold)
        logger.debug("IDA* threshold %s -> %s", threshold, min_excess)
        threshold = int(min_excess)
