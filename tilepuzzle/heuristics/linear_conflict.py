from typing import List

from tilepuzzle.domains.puzzlemn import Goal, State
from tilepuzzle.heuristics.manhattan import manhattan


def _row_conflicts(vals: List[int], goal: Goal, R: int, C: int) -> int:
    extra = 0
    for r in range(R):
        for c in range(C):
            t = vals[r * C + c]
            if t == 0 or goal.position(t)[0] != r:
                continue
            # tiles to the right that belong in this row but left of t's column
            for i in range(c + 1, C):
                u = vals[r * C + i]
                if u == 0:
                    continue
                ur, uc = goal.position(u)
                if ur == r and uc < c:
                    extra += 2
    return extra


def _col_conflicts(vals: List[int], goal: Goal, R: int, C: int) -> int:
    extra = 0
    for c in range(C):
        for r in range(R):
            t = vals[r * C + c]
            if t == 0 or goal.position(t)[1] != c:
                continue
            for i in range(r + 1, R):
                u = vals[i * C + c]
                if u == 0:
                    continue
                ur, uc = goal.position(u)
                if uc == c and ur < r:
                    extra += 2
    return extra


def linear_conflict(s: State, goal: Goal) -> int:
    """
    Manhattan distance + 2 per linear conflict along goal rows and columns.

    Tuned for unit move cost. With Constrained/Free prices it is neither
    admissible nor consistent, so A* and IDA* may return non-optimal costs.
    """
    vals = [t.value for t in s.tiles]
    R, C = s.rows, s.cols
    return manhattan(s, goal) + _row_conflicts(vals, goal, R, C) + _col_conflicts(vals, goal, R, C)
