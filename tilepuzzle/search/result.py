from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from tilepuzzle.domains.puzzlemn import Move, SearchContext, State


class Status(Enum):
    SOLVED = "solved"
    NO_PATH = "no path"
    TIMEOUT = "timeout"
    INPUT_ERROR = "input error"


@dataclass(frozen=True)
class Result:
    status: Status
    path: Tuple[Move, ...] = ()
    total_cost: Optional[int] = None
    nodes_generated: int = 0
    expanded: int = 0
    algorithm: str = ""
    bound_final: Optional[int] = None

    @property
    def solved(self) -> bool:
        return self.status is Status.SOLVED

    def format_path(self) -> str:
        """'<value><letter>-' per move, trailing separator stripped."""
        return "".join(f"{v}{d.letter}-" for v, d in self.path)[:-1]

    def report(self) -> str:
        if self.status is Status.INPUT_ERROR:
            return "Input Error"
        if self.status in (Status.NO_PATH, Status.TIMEOUT):
            return f"no path\nNum: {self.nodes_generated}\nCost:"
        return f"{self.format_path()}\nNum: {self.nodes_generated}\nCost: {self.total_cost}"


def solved(state: State, ctx: SearchContext, algorithm: str, bound: Optional[int] = None) -> Result:
    return Result(
        status=Status.SOLVED,
        path=state.path,
        total_cost=state.g,
        nodes_generated=ctx.nodes_generated,
        expanded=ctx.expanded,
        algorithm=algorithm,
        bound_final=bound,
    )


def no_path(ctx: SearchContext, algorithm: str, bound: Optional[int] = None) -> Result:
    return Result(
        status=Status.NO_PATH,
        nodes_generated=ctx.nodes_generated,
        expanded=ctx.expanded,
        algorithm=algorithm,
        bound_final=bound,
    )


def input_error(algorithm: str) -> Result:
    return Result(status=Status.INPUT_ERROR, algorithm=algorithm)


def timeout(ctx: SearchContext, algorithm: str, bound: Optional[int] = None) -> Result:
    return Result(
        status=Status.TIMEOUT,
        nodes_generated=ctx.nodes_generated,
        expanded=ctx.expanded,
        algorithm=algorithm,
        bound_final=bound,
    )
