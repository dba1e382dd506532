from __future__ import annotations
from typing import Callable, Dict, List, Optional
import logging
import math

from tilepuzzle.domains.puzzlemn import Goal, SearchContext, State, children, is_goal
from tilepuzzle.heuristics.linear_conflict import linear_conflict
from tilepuzzle.search.ida_star import Frame
from tilepuzzle.search.result import Result, no_path, solved, timeout

logger = logging.getLogger(__name__)

ALGORITHM = "DFBnB"
MAX_INT = 2 ** 31 - 1

Heuristic = Callable[[State, Goal], int]


def initial_upper_bound(n: int) -> int:
    """n! for n <= 12, otherwise the largest 32-bit int."""
    if n <= 12:
        return math.factorial(n)
    return MAX_INT


def dfbnb(
    start: State,
    goal: Goal,
    ctx: Optional[SearchContext] = None,
    hfun: Heuristic = linear_conflict,
) -> Result:
    """
    Depth-first branch and bound on an explicit stack.

    Children with f >= bound are pruned; a goal child tightens the bound to
    its g and becomes the best path so far. The bound never increases.
    """
    ctx = ctx or SearchContext()
    start.g = 0
    start.h = hfun(start, goal)
    start.f = start.h
    if is_goal(start, goal):
        return solved(start, ctx, ALGORITHM, bound=0)

    bound = initial_upper_bound(start.rows * start.cols - 1)
    ctx.bound_history.append(bound)
    best: Optional[State] = None

    root = Frame(start)
    stack: List[Frame] = [root]
    table: Dict[str, Frame] = {start.key: root}

    while stack:
        if ctx.timed_out():
            return timeout(ctx, ALGORITHM, bound=bound)
        frame = stack.pop()
        if frame.evicted:
            continue
        if frame.out:
            del table[frame.state.key]
            continue

        frame.out = True
        stack.append(frame)
        ctx.on_expand(frame.state)

        survivors: List[State] = []
        for child in children(frame.state, ctx):
            child.h = hfun(child, goal)
            child.f = child.g + child.h
            if child.f < bound:
                survivors.append(child)
        ctx.log_open(ALGORITHM, survivors)
        survivors.sort(key=lambda s: s.f)

        staged: List[State] = []
        for child in survivors:
            if child.f >= bound:
                break
            if is_goal(child, goal):
                bound = child.g
                best = child
                ctx.bound_history.append(bound)
                logger.debug("DFBnB bound tightened to %d", bound)
            else:
                staged.append(child)

        # lowest f ends up on top of the stack
        for child in reversed(staged):
            existing = table.get(child.key)
            if existing is not None:
                if existing.out or existing.state.f <= child.f:
                    continue
                existing.evicted = True
            cf = Frame(child)
            stack.append(cf)
            table[child.key] = cf

    if best is None:
        return no_path(ctx, ALGORITHM, bound=bound)
    return solved(best, ctx, ALGORITHM, bound=bound)
