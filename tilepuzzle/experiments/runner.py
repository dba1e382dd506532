#!/usr/bin/env python3
from __future__ import annotations
import argparse, csv
from dataclasses import dataclass
from pathlib import Path
from time import perf_counter
from typing import Dict, List, Optional, Sequence, Tuple

from tilepuzzle.domains.puzzlemn import RectPuzzle, SearchContext
from tilepuzzle.domains.tiles import FREE_PRICE
from tilepuzzle.search.a_star import TIE_BREAKS
from tilepuzzle.search.dispatch import STRATEGIES, canonical_name
from tilepuzzle.search.result import Result

Values = Tuple[int, ...]

HEADER = [
    "algorithm", "rows", "cols", "depth", "seed", "constrained",
    "status", "generated", "expanded", "cost", "path_len", "time_sec", "bound_final",
]


@dataclass
class Instance:
    seed: int
    depth: int
    values: Values
    constrained: Dict[int, int]


def generate(dom: RectPuzzle, depths: Sequence[int], per_depth: int, n_constrained: int,
             budget: int, start_seed: int = 0) -> List[Instance]:
    out: List[Instance] = []
    seed = start_seed
    for d in depths:
        made = 0
        attempts = 0
        while made < per_depth:
            s = dom.scramble(d, seed)
            seed += 1
            attempts += 1
            if dom.is_solvable(s):
                out.append(Instance(seed=seed, depth=d, values=s,
                                    constrained=dom.pick_constrained(n_constrained, budget, seed)))
                made += 1
            if attempts > per_depth * 2000:
                raise RuntimeError(f"Instance generation took too long at depth={d}. Check solvability logic.")
    return out


def run_one(name: str, dom: RectPuzzle, inst: Instance, free_price: int = FREE_PRICE,
            tie_break: str = "h", dfid_max_depth: Optional[int] = None,
            timeout_sec: Optional[float] = None) -> Tuple[Result, float]:
    """Run one registered strategy on one instance; raises KeyError for an unknown name."""
    algo = STRATEGIES[name]
    extra = {}
    if name == "A*":
        extra["tie_break"] = tie_break
    elif name == "DFID":
        extra["max_depth"] = dfid_max_depth

    start = dom.build(inst.values, inst.constrained, free_price)
    ctx = SearchContext()
    t0 = perf_counter()
    ctx.start_clock(timeout_sec)
    res = algo(start, dom.goal, ctx, **extra)
    return res, perf_counter() - t0


def row_for(res: Result, dom: RectPuzzle, inst: Instance, elapsed: float) -> list:
    constrained = ";".join(f"{v}:{b}" for v, b in inst.constrained.items())
    return [
        res.algorithm, dom.R, dom.C, inst.depth, inst.seed, constrained,
        res.status.value, res.nodes_generated, res.expanded,
        "" if res.total_cost is None else res.total_cost,
        len(res.path) if res.solved else "",
        f"{elapsed:.6f}",
        "" if res.bound_final is None else res.bound_final,
    ]


def main(argv=None):
    ap = argparse.ArgumentParser(description="DFID/A*/IDA*/DFBnB weighted-tile puzzle experiment runner")
    ap.add_argument("--algo", nargs="+", default=["all"],
                    help="Strategies to run (DFID, A*, IDA*, DFBnB or 'all')")
    ap.add_argument("--rows", type=int, default=3)
    ap.add_argument("--cols", type=int, default=3)
    ap.add_argument("--depths", type=int, nargs="+", default=[4, 8, 12])
    ap.add_argument("--per_depth", type=int, default=10)
    ap.add_argument("--constrained", type=int, default=2, help="How many tiles are Constrained")
    ap.add_argument("--budget", type=int, default=3, help="Move budget of each Constrained tile")
    ap.add_argument("--free_price", type=int, default=FREE_PRICE)
    ap.add_argument("--tie_break", choices=list(TIE_BREAKS), default="h")
    ap.add_argument("--dfid_max_depth", type=int, default=None, help="Depth ceiling for DFID (optional)")
    ap.add_argument("--timeout_sec", type=float, default=30.0,
                    help="Per-run wall time; runs past it are recorded as timeout")
    ap.add_argument("--out", type=Path, default=Path("results/last_run.csv"))
    args = ap.parse_args(argv)

    if any(a.lower() == "all" for a in args.algo):
        algos = list(STRATEGIES)
    else:
        algos = []
        for a in args.algo:
            name = canonical_name(a)
            if name is None:
                ap.error(f"unknown algorithm {a!r}")
            algos.append(name)

    dom = RectPuzzle(args.rows, args.cols)
    insts = generate(dom, args.depths, args.per_depth, args.constrained, args.budget)
    args.out.parent.mkdir(parents=True, exist_ok=True)

    with args.out.open("w", newline="") as f:
        w = csv.writer(f); w.writerow(HEADER)
        for inst in insts:
            for name in algos:
                res, elapsed = run_one(name, dom, inst, args.free_price, args.tie_break,
                                       args.dfid_max_depth, args.timeout_sec)
                w.writerow(row_for(res, dom, inst, elapsed))

    print(f"Wrote {args.out} ({len(insts)} instances x {len(algos)} algorithms)")


if __name__ == "__main__":
    main()
