from collections import deque
from typing import Optional, Set

from tilepuzzle.domains.puzzlemn import Goal, SearchContext, State, children, is_goal
from tilepuzzle.search.result import Result, no_path, solved

ALGORITHM = "BFS"


def bfs(start: State, goal: Goal, ctx: Optional[SearchContext] = None) -> Result:
    """Breadth-first reference search: fewest moves, cost ignored."""
    ctx = ctx or SearchContext()
    q = deque([start])
    seen: Set[str] = {start.key}
    while q:
        s = q.popleft()
        if is_goal(s, goal):
            return solved(s, ctx, ALGORITHM)
        ctx.on_expand(s)
        for s2 in children(s, ctx):
            if s2.key in seen: continue
            seen.add(s2.key); q.append(s2)
    return no_path(ctx, ALGORITHM)


def shortest_move_count(start: State, goal: Goal) -> Optional[int]:
    res = bfs(start, goal)
    return len(res.path) if res.solved else None
