from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, List, Optional, Set, Union
import logging

from tilepuzzle.domains.puzzlemn import Goal, SearchContext, State, is_goal, try_move
from tilepuzzle.domains.tiles import DIRECTIONS, Direction
from tilepuzzle.search.result import Result, no_path, solved, timeout

logger = logging.getLogger(__name__)

ALGORITHM = "DFID"


class _Outcome:
    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return self.name


CUTOFF = _Outcome("cutoff")
FAIL = _Outcome("no path")
TIMEOUT = _Outcome("timeout")


@dataclass
class _Frame:
    state: State
    depth_left: int
    moves: Iterator[Direction]
    cutoff: bool = False


def limited_dfs(start: State, goal: Goal, limit: int, ctx: SearchContext) -> Union[State, _Outcome]:
    """
    Depth-limited DFS with cycle avoidance along the current path only.

    Returns the goal state, CUTOFF if some branch hit the limit, FAIL, or
    TIMEOUT once the context deadline passes.
    Runs on an explicit frame stack; a popped frame reports its cutoff
    flag to its parent, exactly as the recursive version would.
    """
    if is_goal(start, goal):
        return start
    if limit == 0:
        return CUTOFF

    on_path: Set[str] = {start.key}
    stack: List[_Frame] = [_Frame(start, limit, iter(DIRECTIONS))]
    ctx.on_expand(start)
    root_cutoff = False

    while stack:
        if ctx.timed_out():
            return TIMEOUT
        frame = stack[-1]
        d = next(frame.moves, None)
        if d is None:
            stack.pop()
            on_path.discard(frame.state.key)
            if stack:
                if frame.cutoff:
                    stack[-1].cutoff = True
            else:
                root_cutoff = frame.cutoff
            continue

        child = try_move(frame.state, d, ctx)
        if child is None or child.key in on_path:
            continue
        if is_goal(child, goal):
            return child
        if frame.depth_left - 1 == 0:
            frame.cutoff = True
            continue

        on_path.add(child.key)
        ctx.on_expand(child)
        stack.append(_Frame(child, frame.depth_left - 1, iter(DIRECTIONS)))
        ctx.log_open(ALGORITHM, (f.state for f in stack))

    return CUTOFF if root_cutoff else FAIL


def dfid(start: State, goal: Goal, ctx: Optional[SearchContext] = None,
         max_depth: Optional[int] = None) -> Result:
    """
    Depth-first iterative deepening over limits 1, 2, 3, ...
    Stops at the first limit that does not report a cutoff. Reaching
    `max_depth` (when given) ends the run with no path.
    """
    ctx = ctx or SearchContext()
    if is_goal(start, goal):
        return solved(start, ctx, ALGORITHM, bound=0)

    limit = 1
    while max_depth is None or limit <= max_depth:
        ctx.bound_history.append(limit)
        outcome = limited_dfs(start, goal, limit, ctx)
        if isinstance(outcome, State):
            return solved(outcome, ctx, ALGORITHM, bound=limit)
        if outcome is FAIL:
            return no_path(ctx, ALGORITHM, bound=limit)
        if outcome is TIMEOUT:
            return timeout(ctx, ALGORITHM, bound=limit)
        logger.debug("DFID limit %d cut off (%d nodes so far)", limit, ctx.nodes_generated)
        limit += 1
    return no_path(ctx, ALGORITHM, bound=max_depth)
