"""Behaviour of the four strategies and the dispatcher."""

from __future__ import annotations

import logging
import math
from typing import Dict, Optional

import pytest

from tilepuzzle.domains.puzzlemn import (
    Goal,
    RectPuzzle,
    SearchContext,
    State,
    apply_path,
    children,
    is_goal,
    make_goal,
)
from tilepuzzle.domains.tiles import Direction
from tilepuzzle.heuristics.linear_conflict import linear_conflict
from tilepuzzle.search.a_star import OpenList, a_star
from tilepuzzle.search.bfs import shortest_move_count
from tilepuzzle.search.dfbnb import dfbnb, initial_upper_bound
from tilepuzzle.search.dfid import dfid
from tilepuzzle.search.dispatch import STRATEGIES, canonical_name, solve
from tilepuzzle.search.ida_star import ida_star
from tilepuzzle.search.result import Result, Status

NAMES = list(STRATEGIES)


def _board(matrix, constrained: Optional[Dict[int, int]] = None, free_price: int = 1) -> State:
    return State.from_rows(matrix, constrained, free_price)


# -- trivial and tiny instances -----------------------------------------------


@pytest.mark.parametrize("name", NAMES)
def test_start_equal_to_goal(name: str) -> None:
    res = solve(name, _board([[1, 2], [3, 0]]), make_goal(2, 2))

    assert res.status is Status.SOLVED
    assert res.path == ()
    assert res.total_cost == 0
    assert res.nodes_generated == 0


@pytest.mark.parametrize("name", NAMES)
def test_one_move_instance(name: str) -> None:
    res = solve(name, _board([[1, 2], [0, 3]]), make_goal(2, 2))

    assert res.status is Status.SOLVED
    assert res.path == ((3, Direction.LEFT),)
    assert res.format_path() == "3L"
    assert res.total_cost == 1
    assert res.nodes_generated >= 1


def test_dfid_one_move_report() -> None:
    res = dfid(_board([[1, 2], [0, 3]]), make_goal(2, 2))

    assert res.report() == "3L\nNum: 1\nCost: 1"


@pytest.mark.parametrize("name", NAMES)
def test_immovable_board_has_no_path(name: str) -> None:
    start = _board([[1, 2], [0, 3]], constrained={1: 0, 3: 0})
    res = solve(name, start, make_goal(2, 2))

    assert res.status is Status.NO_PATH
    assert res.path == ()
    assert res.total_cost is None
    assert res.report().startswith("no path\nNum: ")


@pytest.mark.parametrize("name", NAMES)
def test_depleted_tile_blocks_every_route(name: str) -> None:
    # on a 2x2 board every route to the goal has to move tile 3
    start = _board([[1, 2], [0, 3]], constrained={3: 0})
    res = solve(name, start, make_goal(2, 2))

    assert res.status is Status.NO_PATH


def test_unknown_strategy_is_an_input_error() -> None:
    res = solve("BFS", _board([[1, 2], [0, 3]]), make_goal(2, 2))

    assert res.status is Status.INPUT_ERROR
    assert res.nodes_generated == 0
    assert res.report() == "Input Error"


def test_aliases() -> None:
    assert canonical_name("astar") == "A*"
    assert canonical_name("ida") == "IDA*"
    assert canonical_name("DFBNB") == "DFBnB"
    assert canonical_name("DFID") == "DFID"
    assert canonical_name("greedy") is None


def test_dfid_depth_ceiling() -> None:
    # two moves from the goal: 1 up, then 3 left
    goal = make_goal(2, 2)

    assert dfid(_board([[0, 2], [1, 3]]), goal, max_depth=1).status is Status.NO_PATH
    res = dfid(_board([[0, 2], [1, 3]]), goal, max_depth=2)
    assert res.format_path() == "1U-3L"
    assert res.total_cost == 2


# -- replay -------------------------------------------------------------------


def _instances(depth: int, count: int, constrained=None, free_price: int = 1):
    dom = RectPuzzle(2, 3)
    for seed in range(count):
        yield dom, dom.scramble(depth, seed), constrained, free_price


@pytest.mark.parametrize("name", NAMES)
def test_returned_path_replays_to_goal(name: str) -> None:
    for dom, values, constrained, price in _instances(6, 5, {1: 20, 2: 20, 4: 20}, 5):
        res = solve(name, dom.build(values, constrained, price), dom.goal)
        assert res.solved, values

        end = apply_path(dom.build(values, constrained, price), res.path)
        assert end.key == dom.goal.key
        assert end.g == res.total_cost


# -- optimality on unit-cost boards -------------------------------------------


def test_dfid_length_matches_breadth_first() -> None:
    for dom, values, _, _ in _instances(8, 6):
        start = dom.build(values, free_price=1)
        res = dfid(start, dom.goal)
        assert res.solved
        assert len(res.path) == shortest_move_count(dom.build(values, free_price=1), dom.goal)
        assert res.total_cost == len(res.path)


def test_a_star_expands_in_nondecreasing_f() -> None:
    dom = RectPuzzle(2, 2)
    for seed in range(6):
        values = dom.scramble(5, seed)
        ctx = SearchContext(record=True)
        res = a_star(dom.build(values, free_price=1), dom.goal, ctx)

        assert res.solved
        fs = ctx.expansion_f
        assert all(a <= b for a, b in zip(fs, fs[1:])), fs
        assert res.total_cost == shortest_move_count(dom.build(values, free_price=1), dom.goal)


# -- bounds and thresholds ----------------------------------------------------


def test_dfbnb_bound_never_increases() -> None:
    for dom, values, constrained, price in _instances(8, 5, {2: 4, 5: 4}, 3):
        ctx = SearchContext()
        res = dfbnb(dom.build(values, constrained, price), dom.goal, ctx)
        bounds = ctx.bound_history

        assert bounds[0] == initial_upper_bound(5)
        assert all(a >= b for a, b in zip(bounds, bounds[1:]))
        if res.solved:
            assert res.total_cost <= bounds[0]
            assert res.total_cost == bounds[-1]


def test_initial_upper_bound() -> None:
    assert initial_upper_bound(3) == 6
    assert initial_upper_bound(8) == 40320
    assert initial_upper_bound(15) == 2 ** 31 - 1


def test_ida_star_thresholds_grow() -> None:
    for dom, values, constrained, price in _instances(10, 5, {3: 10}, 2):
        start = dom.build(values, constrained, price)
        h0 = linear_conflict(start, dom.goal)
        ctx = SearchContext()
        res = ida_star(start, dom.goal, ctx)
        thresholds = ctx.bound_history

        assert res.solved
        assert thresholds[0] == h0
        assert all(a < b for a, b in zip(thresholds, thresholds[1:]))
        assert res.bound_final == thresholds[-1]


def _smallest_f_over(state: State, goal, threshold: int):
    """Plain recursive bounded DFS: smallest child f above `threshold`."""
    best = math.inf
    for child in children(state):
        f = child.g + linear_conflict(child, goal)
        if f > threshold:
            best = min(best, f)
        elif not is_goal(child, goal):
            best = min(best, _smallest_f_over(child, goal, threshold))
    return best


def test_ida_star_next_threshold_is_smallest_excess() -> None:
    # on a 2x2 board each state has one non-reversing child, so a plain
    # bounded DFS sees exactly the nodes IDA* sees until the goal is reached
    dom = RectPuzzle(2, 2)
    constrained = {1: 20}
    checked = 0
    for depth in (3, 4, 5):
        values = dom.scramble(depth, depth)
        ctx = SearchContext()
        res = ida_star(dom.build(values, constrained, 3), dom.goal, ctx)
        assert res.solved

        thresholds = ctx.bound_history
        for t, nxt in zip(thresholds, thresholds[1:]):
            assert nxt == _smallest_f_over(dom.build(values, constrained, 3), dom.goal, t)
            checked += 1
    assert checked > 0


def test_ida_star_finds_optimal_cost_on_unit_board() -> None:
    dom = RectPuzzle(2, 2)
    for seed in range(6):
        values = dom.scramble(6, seed)
        res = ida_star(dom.build(values, free_price=1), dom.goal)
        assert res.total_cost == shortest_move_count(dom.build(values, free_price=1), dom.goal)


# -- open list ----------------------------------------------------------------


def test_open_list_replace_drops_stale_entry() -> None:
    a = _board([[1, 2], [0, 3]])
    a.f = 9
    b = _board([[1, 2], [0, 3]])
    b.f = 4
    other = _board([[1, 0], [3, 2]])
    other.f = 6

    ol = OpenList()
    ol.push(a)
    ol.push(other)
    ol.replace(b)

    assert len(ol) == 2
    assert ol.get(a.key) is b
    assert ol.pop() is b
    assert ol.pop() is other
    assert len(ol) == 0
    with pytest.raises(KeyError):
        ol.pop()


def test_open_list_rejects_unknown_tie_break() -> None:
    with pytest.raises(ValueError):
        OpenList("random")


def test_open_list_trace_is_logged(caplog) -> None:
    caplog.set_level(logging.INFO, logger="tilepuzzle")
    ctx = SearchContext(show_open=True)
    a_star(_board([[1, 2], [0, 3]]), make_goal(2, 2), ctx)

    assert any("A*" in r.getMessage() for r in caplog.records)


def test_runs_do_not_share_counters() -> None:
    goal = make_goal(2, 2)
    first = solve("A*", _board([[1, 2], [0, 3]]), goal)
    second = solve("A*", _board([[1, 2], [0, 3]]), goal)

    assert first.nodes_generated == second.nodes_generated


def test_format_path_joins_moves() -> None:
    res = Result(Status.SOLVED, path=((3, Direction.LEFT), (1, Direction.UP)), total_cost=2)

    assert res.format_path() == "3L-1U"


# -- A* decrease-key ----------------------------------------------------------

# The 12 reachable 2x2 boards in cycle order; neighbours differ by one slide.
RING = [
    [[1, 2], [3, 0]], [[1, 2], [0, 3]], [[0, 2], [1, 3]], [[2, 0], [1, 3]],
    [[2, 3], [1, 0]], [[2, 3], [0, 1]], [[0, 3], [2, 1]], [[3, 0], [2, 1]],
    [[3, 1], [2, 0]], [[3, 1], [0, 2]], [[0, 1], [3, 2]], [[1, 0], [3, 2]],
]


def _key(matrix) -> str:
    return ",".join(str(v) for row in matrix for v in row)


def test_a_star_replaces_open_entry_with_cheaper_route() -> None:
    # From RING[1] one route to RING[8] costs 123 (via RING[2..7]) and the
    # other costs 121 (via RING[0], [11..9]). The table below sends A* down
    # the dear route first, so RING[8] is opened at g=123 and then improved
    # to g=121 before it is expanded. The goal is the odd-parity swap of the
    # real goal, so the search exhausts the ring.
    bias = {_key(RING[0]): 100, _key(RING[8]): 1000}

    def h(s: State, goal) -> int:
        return bias.get(s.key, 0)

    odd = (2, 1, 3, 0)
    unreachable = Goal(2, 2, odd, _key([[2, 1], [3, 0]]),
                       {v: divmod(i, 2) for i, v in enumerate(odd)})
    start = _board(RING[1], constrained={1: 10}, free_price=30)
    ctx = SearchContext(record=True)
    res = a_star(start, unreachable, ctx, hfun=h)

    assert res.status is Status.NO_PATH
    assert 1000 + 121 in ctx.expansion_f
    assert 1000 + 123 not in ctx.expansion_f
    assert ctx.expanded == 12


# -- deadlines ----------------------------------------------------------------


@pytest.mark.parametrize("name", NAMES)
def test_expired_deadline_stops_search(name: str) -> None:
    dom = RectPuzzle(3, 3)
    start = dom.build(dom.scramble(10, 1), {2: 3})
    ctx = SearchContext()
    ctx.start_clock(0)

    res = solve(name, start, dom.goal, ctx)

    assert res.status is Status.TIMEOUT
    assert res.path == ()
    assert res.total_cost is None
    assert res.report().startswith("no path\nNum: ")


def test_no_deadline_by_default() -> None:
    ctx = SearchContext()
    ctx.start_clock(None)

    assert not ctx.timed_out()
