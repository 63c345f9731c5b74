"""Events emitted by a game session for the presentation layer."""

from dataclasses import dataclass
from typing import Callable, Optional, Union

from .constants import Actor, EndCondition


@dataclass(frozen=True)
class CellChanged:
    index: int
    revealed: bool
    flagged: bool
    mine_exposed: bool = False
    number: Optional[int] = None


@dataclass(frozen=True)
class StatusMessage:
    text: str


@dataclass(frozen=True)
class TimerTick:
    seconds: int


@dataclass(frozen=True)
class GameEnded:
    condition: EndCondition
    elapsed_seconds: int
    actor: Optional[Actor] = None


GameEvent = Union[CellChanged, StatusMessage, TimerTick, GameEnded]
Listener = Callable[[GameEvent], None]
