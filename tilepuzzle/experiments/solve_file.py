#!/usr/bin/env python3
import argparse, logging, sys
from pathlib import Path
from time import perf_counter

from tilepuzzle.domains.loader import PuzzleFormatError, load_puzzle, write_report
from tilepuzzle.domains.puzzlemn import SearchContext, make_goal
from tilepuzzle.domains.tiles import FREE_PRICE
from tilepuzzle.search.dispatch import solve


def _open_trace_handler(log):
    """Send the open-list trace of every search module to stdout."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    log.setLevel(logging.INFO)
    log.addHandler(handler)
    return handler


def main(argv=None):
    ap = argparse.ArgumentParser(description="Solve one puzzle description file and write the report.")
    ap.add_argument("--input", type=Path, default=Path("input.txt"))
    ap.add_argument("--output", type=Path, default=Path("output.txt"))
    ap.add_argument("--free_price", type=int, default=FREE_PRICE, help="Per-move cost of Free tiles")
    args = ap.parse_args(argv)

    try:
        spec = load_puzzle(args.input, free_price=args.free_price)
    except (OSError, PuzzleFormatError) as e:
        print(f"An error occurred: {e}", file=sys.stderr)
        return 1

    ctx = SearchContext(show_open=spec.with_open)
    goal = make_goal(spec.rows, spec.cols)
    log = logging.getLogger("tilepuzzle")
    old_level = log.level
    handler = _open_trace_handler(log) if spec.with_open else None
    try:
        t0 = perf_counter()
        res = solve(spec.algorithm, spec.start, goal, ctx)
        elapsed = perf_counter() - t0
    finally:
        if handler is not None:
            log.removeHandler(handler)
            log.setLevel(old_level)

    write_report(args.output, res.report(), elapsed if spec.with_time else None)
    print(f"{spec.algorithm}: {res.status.value} (cost={res.total_cost}, generated={res.nodes_generated}) "
          f"-> {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
