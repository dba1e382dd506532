from __future__ import annotations
from typing import Callable, Dict, List, Optional, Set, Tuple
import heapq
import itertools
import logging

from tilepuzzle.domains.puzzlemn import Goal, SearchContext, State, children, is_goal
from tilepuzzle.heuristics.linear_conflict import linear_conflict
from tilepuzzle.search.result import Result, no_path, solved, timeout

logger = logging.getLogger(__name__)

ALGORITHM = "A*"
TIE_BREAKS = ("h", "g", "fifo", "lifo")

Heuristic = Callable[[State, Goal], int]


class OpenList:
    """
    Binary heap keyed by f with a key -> entry index for duplicate checks.

    Replacing a state marks exactly its indexed heap entry as removed and
    pushes the new one; removed entries are skipped when popped.
    """
    _REMOVED = None

    def __init__(self, tie_break: str = "h"):
        if tie_break not in TIE_BREAKS:
            raise ValueError(f"unknown tie_break {tie_break!r}")
        self.tie_break = tie_break
        self._heap: List[list] = []
        self._index: Dict[str, list] = {}
        self._counter = itertools.count()
        self.peak = 0

    def _priority(self, s: State, ctr: int) -> Tuple[int, int, int]:
        if self.tie_break == "h":    return (s.f, s.h, ctr)
        if self.tie_break == "g":    return (s.f, -s.g, ctr)
        if self.tie_break == "fifo": return (s.f, 0, ctr)
        return (s.f, 0, -ctr)

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, key: str) -> bool:
        return key in self._index

    def get(self, key: str) -> Optional[State]:
        entry = self._index.get(key)
        return None if entry is None else entry[-1]

    def push(self, s: State) -> None:
        entry = [self._priority(s, next(self._counter)), s]
        self._index[s.key] = entry
        heapq.heappush(self._heap, entry)
        self.peak = max(self.peak, len(self._index))

    def replace(self, s: State) -> None:
        stale = self._index.pop(s.key)
        stale[-1] = self._REMOVED
        self.push(s)

    def pop(self) -> State:
        while self._heap:
            entry = heapq.heappop(self._heap)
            s = entry[-1]
            if s is not self._REMOVED:
                del self._index[s.key]
                return s
        raise KeyError("pop from an empty open list")

    def states(self) -> List[State]:
        return [e[-1] for e in self._index.values()]


def a_star(
    start: State,
    goal: Goal,
    ctx: Optional[SearchContext] = None,
    hfun: Heuristic = linear_conflict,
    tie_break: str = "h",
) -> Result:
    """
    Best-first search on f = g + h with a closed set of expanded keys.
    A child already open replaces the open entry only on a strictly better f.
    """
    ctx = ctx or SearchContext()
    open_list = OpenList(tie_break)
    closed: Set[str] = set()

    start.g = 0
    start.h = hfun(start, goal)
    start.f = start.h
    open_list.push(start)

    while len(open_list):
        if ctx.timed_out():
            return timeout(ctx, ALGORITHM)
        if ctx.show_open:
            ctx.log_open(ALGORITHM, open_list.states())
        node = open_list.pop()
        if is_goal(node, goal):
            return solved(node, ctx, ALGORITHM)

        closed.add(node.key)
        ctx.on_expand(node)

        for child in children(node, ctx):
            child.h = hfun(child, goal)
            child.f = child.g + child.h
            if child.key in closed:
                continue
            existing = open_list.get(child.key)
            if existing is None:
                open_list.push(child)
            elif child.f < existing.f:
                open_list.replace(child)

    logger.debug("A* exhausted after %d expansions (peak open %d)", ctx.expanded, open_list.peak)
    return no_path(ctx, ALGORITHM)
