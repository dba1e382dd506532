from __future__ import annotations
from typing import Callable, Dict, Optional

from tilepuzzle.domains.puzzlemn import Goal, SearchContext, State
from tilepuzzle.search.a_star import a_star
from tilepuzzle.search.dfbnb import dfbnb
from tilepuzzle.search.dfid import dfid
from tilepuzzle.search.ida_star import ida_star
from tilepuzzle.search.result import Result, input_error

Strategy = Callable[[State, Goal, SearchContext], Result]

STRATEGIES: Dict[str, Strategy] = {
    "DFID": dfid,
    "A*": a_star,
    "IDA*": ida_star,
    "DFBnB": dfbnb,
}

# Command-line spellings
ALIASES: Dict[str, str] = {
    "dfid": "DFID",
    "a": "A*", "a*": "A*", "astar": "A*",
    "ida": "IDA*", "ida*": "IDA*", "idastar": "IDA*",
    "dfbnb": "DFBnB",
}


def canonical_name(name: str) -> Optional[str]:
    if name in STRATEGIES:
        return name
    return ALIASES.get(name.strip().lower())


def solve(name: str, start: State, goal: Goal, ctx: Optional[SearchContext] = None) -> Result:
    """Run the strategy registered under `name`; unknown names give an INPUT_ERROR result."""
    algo = STRATEGIES.get(name)
    if algo is None:
        return input_error(name)
    return algo(start, goal, ctx or SearchContext())
