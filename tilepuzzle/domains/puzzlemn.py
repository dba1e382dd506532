from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import logging
import random
from time import perf_counter

from tilepuzzle.domains.tiles import DIRECTIONS, Direction, FREE_PRICE, Tile

logger = logging.getLogger(__name__)

Values = Tuple[int, ...]
Move = Tuple[int, Direction]


def make_key(tiles: Iterable[Tile]) -> str:
    """Row-major tile values. Remaining move budgets are not part of the key."""
    return ",".join(str(t.value) for t in tiles)


@dataclass(eq=False)
class State:
    """
    One node of the search. The grid is a flat row-major tuple of immutable
    Tiles, so a child shares untouched tiles with its parent while still
    owning an independent logical board.
    """
    rows: int
    cols: int
    tiles: Tuple[Tile, ...]
    blank: Tuple[int, int]
    g: int = 0
    h: int = 0
    f: int = 0
    path: Tuple[Move, ...] = ()
    last_move: Optional[Direction] = None
    key: str = ""

    def __post_init__(self):
        if not self.key:
            self.key = make_key(self.tiles)

    @classmethod
    def from_rows(
        cls,
        matrix: Sequence[Sequence[int]],
        constrained: Optional[Mapping[int, int]] = None,
        free_price: int = FREE_PRICE,
    ) -> State:
        """
        Build a start state from a matrix of values (0 is the blank).
        constrained maps tile value -> move budget; every other tile is Free.
        """
        rows = len(matrix)
        cols = len(matrix[0])
        values = tuple(v for row in matrix for v in row)
        return build_state(values, rows, cols, constrained, free_price)

    @property
    def values(self) -> Values:
        return tuple(t.value for t in self.tiles)

    def tile_at(self, r: int, c: int) -> Tile:
        return self.tiles[r * self.cols + c]

    def to_rows(self) -> List[List[int]]:
        vals = self.values
        return [list(vals[r * self.cols:(r + 1) * self.cols]) for r in range(self.rows)]

    def __str__(self) -> str:
        lines = []
        for r in range(self.rows):
            lines.append(" ".join(str(self.tile_at(r, c)) for c in range(self.cols)))
        return f"g={self.g} f={self.f} path={''.join(f'{v}{d.letter}-' for v, d in self.path)}\n" + "\n".join(lines)


@dataclass(frozen=True)
class Goal:
    rows: int
    cols: int
    values: Values
    key: str
    positions: Dict[int, Tuple[int, int]]

    def position(self, value: int) -> Tuple[int, int]:
        return self.positions[value]


def make_goal(rows: int, cols: int) -> Goal:
    """Ascending row-major values with the blank in the bottom-right cell."""
    assert rows >= 1 and cols >= 1 and rows * cols >= 2
    size = rows * cols
    values: Values = tuple(list(range(1, size)) + [0])
    positions = {v: divmod(i, cols) for i, v in enumerate(values)}
    return Goal(rows, cols, values, ",".join(map(str, values)), positions)


def is_goal(state: State, goal: Goal) -> bool:
    return state.key == goal.key


@dataclass
class SearchContext:
    """Run-scoped bookkeeping. One per search run, never shared."""
    nodes_generated: int = 0
    expanded: int = 0
    bound_history: List[int] = field(default_factory=list)
    expansion_f: List[int] = field(default_factory=list)
    record: bool = False
    show_open: bool = False
    deadline: Optional[float] = None

    def start_clock(self, timeout_sec: Optional[float]) -> None:
        """Arm a wall-clock limit measured with perf_counter; None means no limit."""
        self.deadline = None if timeout_sec is None else perf_counter() + timeout_sec

    def timed_out(self) -> bool:
        return self.deadline is not None and perf_counter() >= self.deadline

    def on_expand(self, state: State) -> None:
        self.expanded += 1
        if self.record:
            self.expansion_f.append(state.f)

    def log_open(self, label: str, states: Iterable[State]) -> None:
        if not self.show_open:
            return
        for s in states:
            logger.info("%s %s\n%s", label, s.key, s)


def build_state(
    values: Sequence[int],
    rows: int,
    cols: int,
    constrained: Optional[Mapping[int, int]] = None,
    free_price: int = FREE_PRICE,
) -> State:
    constrained = constrained or {}
    tiles: List[Tile] = []
    blank = None
    for idx, v in enumerate(values):
        if v == 0:
            blank = divmod(idx, cols)
            tiles.append(Tile.free(0, free_price))
        elif v in constrained:
            tiles.append(Tile.constrained(v, constrained[v]))
        else:
            tiles.append(Tile.free(v, free_price))
    if blank is None:
        raise ValueError("board has no blank cell")
    return State(rows=rows, cols=cols, tiles=tuple(tiles), blank=blank)


def try_move(state: State, direction: Direction, ctx: Optional[SearchContext] = None) -> Optional[State]:
    """
    Slide the tile next to the blank in `direction`. Returns the child state,
    or None when the move reverses the last one, leaves the grid, or would
    move a Constrained tile with no budget left.
    """
    if state.last_move is not None and direction is state.last_move.reverse:
        return None
    br, bc = state.blank
    dr, dc = direction.source_offset
    sr, sc = br + dr, bc + dc
    if not (0 <= sr < state.rows and 0 <= sc < state.cols):
        return None

    src = sr * state.cols + sc
    dst = br * state.cols + bc
    moved = state.tiles[src]
    if not moved.can_move():
        return None

    tiles = list(state.tiles)
    tiles[dst] = moved.after_move()
    tiles[src] = state.tiles[dst]
    child = State(
        rows=state.rows,
        cols=state.cols,
        tiles=tuple(tiles),
        blank=(sr, sc),
        g=state.g + moved.move_price,
        path=state.path + ((moved.value, direction),),
        last_move=direction,
    )
    if ctx is not None:
        ctx.nodes_generated += 1
    return child


def children(state: State, ctx: Optional[SearchContext] = None) -> List[State]:
    """Legal children in the fixed LEFT, UP, RIGHT, DOWN order."""
    out: List[State] = []
    for d in DIRECTIONS:
        child = try_move(state, d, ctx)
        if child is not None:
            out.append(child)
    return out


def apply_path(start: State, path: Iterable[Move]) -> State:
    """Replay a move list from `start`; raises ValueError on an illegal step."""
    s = start
    for i, (value, direction) in enumerate(path):
        nxt = try_move(s, direction)
        if nxt is None:
            raise ValueError(f"move {i} ({value}{direction.letter}) is illegal")
        moved = nxt.path[-1][0]
        if moved != value:
            raise ValueError(f"move {i} slides tile {moved}, expected {value}")
        s = nxt
    return s


class RectPuzzle:
    """
    Generic R×C sliding-tile puzzle shape (0 is blank): goal layout,
    instance generation and solvability, independent of tile costs.
    """
    def __init__(self, rows: int, cols: int):
        assert rows >= 2 and cols >= 2
        self.R = rows
        self.C = cols
        self.size = rows * cols
        self.goal = make_goal(rows, cols)
        self.GOAL: Values = self.goal.values

        # Cells the blank can swap with, per blank index
        self._nei: Dict[int, Tuple[int, ...]] = {}
        for i in range(self.size):
            r, c = divmod(i, self.C)
            moves = []
            if r > 0:             moves.append(i - self.C)
            if r < self.R - 1:    moves.append(i + self.C)
            if c > 0:             moves.append(i - 1)
            if c < self.C - 1:    moves.append(i + 1)
            self._nei[i] = tuple(moves)

    # ---------- instance generation ----------
    def scramble(self, depth: int, seed: int) -> Values:
        """Random walk of `depth` blank moves from GOAL with no immediate backtrack."""
        rng = random.Random(seed)
        s = self.GOAL
        last_blank = None
        for _ in range(depth):
            z = s.index(0)
            cand = list(self._nei[z])
            if last_blank in cand and len(cand) > 1:
                cand.remove(last_blank)
            j = rng.choice(cand)
            lst = list(s)
            lst[z], lst[j] = lst[j], lst[z]
            last_blank = z
            s = tuple(lst)
        return s

    def pick_constrained(self, count: int, budget: int, seed: int) -> Dict[int, int]:
        """Choose `count` tile values to be Constrained, each with `budget` moves."""
        rng = random.Random(seed)
        count = max(0, min(count, self.size - 1))
        chosen = rng.sample(range(1, self.size), count)
        return {v: budget for v in sorted(chosen)}

    def build(self, values: Sequence[int], constrained: Optional[Mapping[int, int]] = None,
              free_price: int = FREE_PRICE) -> State:
        return build_state(values, self.R, self.C, constrained, free_price)

    # ---------- solvability ----------
    def is_solvable(self, s: Sequence[int]) -> bool:
        """
        Parity rule, ignoring move budgets:
        - If width (cols) is odd  -> inversions even.
        - If width is even        -> (inversions + blank_row_from_bottom) is ODD.
        """
        arr = [x for x in s if x != 0]
        inv = 0
        for i in range(len(arr)):
            for j in range(i + 1, len(arr)):
                if arr[i] > arr[j]:
                    inv += 1
        if self.C % 2 == 1:
            return (inv % 2) == 0
        blank_row_top_idx = list(s).index(0) // self.C
        blank_row_from_bottom = self.R - blank_row_top_idx  # 1-based
        return ((inv + blank_row_from_bottom) % 2) == 1
