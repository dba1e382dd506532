"""
Reader/writer for the puzzle text format:

    A*
    with time
    no open
    3x4
    White: (1,4),(6,2)
    1,2,3,4
    5,_,6,8
    9,10,7,11

Line 1 names the strategy, lines 2-3 toggle the elapsed-time line in the
report and the open-list trace, line 4 gives the board size, line 5 lists
the Constrained ("white") tiles with their move budgets, and the rest is
the board with "_" for the blank.
"""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional
import re

from tilepuzzle.domains.puzzlemn import State, build_state
from tilepuzzle.domains.tiles import FREE_PRICE

_PAIR = re.compile(r"\(\s*(\d+)\s*,\s*(\d+)\s*\)")


class PuzzleFormatError(ValueError):
    pass


@dataclass
class PuzzleSpec:
    algorithm: str
    with_time: bool
    with_open: bool
    rows: int
    cols: int
    constrained: Dict[int, int]
    start: State


def parse_constrained(line: str) -> Dict[int, int]:
    """'White: (3,1),(5,2)' -> {3: 1, 5: 2}. A bare 'White:' means none."""
    if ":" not in line:
        raise PuzzleFormatError(f"expected 'White:' line, got {line!r}")
    body = line.split(":", 1)[1].strip()
    pairs = _PAIR.findall(body)
    if body and not pairs:
        raise PuzzleFormatError(f"cannot parse constrained tiles from {line!r}")
    return {int(v): int(n) for v, n in pairs}


def parse_size(line: str):
    m = re.fullmatch(r"\s*(\d+)\s*x\s*(\d+)\s*", line)
    if not m:
        raise PuzzleFormatError(f"expected '<rows>x<cols>', got {line!r}")
    return int(m.group(1)), int(m.group(2))


def parse_board(lines: List[str], rows: int, cols: int) -> List[int]:
    if len(lines) != rows:
        raise PuzzleFormatError(f"expected {rows} board rows, got {len(lines)}")
    values: List[int] = []
    for r, line in enumerate(lines):
        cells = [c.strip() for c in line.split(",")]
        if len(cells) != cols:
            raise PuzzleFormatError(f"row {r} has {len(cells)} cells, expected {cols}")
        for cell in cells:
            if cell == "_":
                values.append(0)
            elif cell.isdigit():
                values.append(int(cell))
            else:
                raise PuzzleFormatError(f"bad cell {cell!r} in row {r}")
    if values.count(0) != 1:
        raise PuzzleFormatError("board must contain exactly one blank")
    if sorted(values) != list(range(rows * cols)):
        raise PuzzleFormatError(f"board must hold the values 1..{rows * cols - 1} exactly once")
    return values


def parse_puzzle(text: str, free_price: int = FREE_PRICE) -> PuzzleSpec:
    lines = [ln.rstrip() for ln in text.splitlines()]
    while lines and not lines[-1]:
        lines.pop()
    if len(lines) < 6:
        raise PuzzleFormatError("puzzle description is too short")

    algorithm = lines[0].strip()
    with_time = lines[1].strip() == "with time"
    with_open = lines[2].strip() == "with open"
    rows, cols = parse_size(lines[3])
    constrained = parse_constrained(lines[4])
    values = parse_board([ln for ln in lines[5:] if ln.strip()], rows, cols)

    start = build_state(values, rows, cols, constrained, free_price)
    return PuzzleSpec(algorithm, with_time, with_open, rows, cols, constrained, start)


def load_puzzle(path: Path, free_price: int = FREE_PRICE) -> PuzzleSpec:
    return parse_puzzle(Path(path).read_text(encoding="utf-8"), free_price)


def write_report(path: Path, report: str, elapsed_sec: Optional[float] = None) -> None:
    """Write the result text; the elapsed-time line is added when given."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.write(report + "\n")
        if elapsed_sec is not None:
            f.write(f"{elapsed_sec} seconds\n")
