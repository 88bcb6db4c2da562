# okchef/core/moves.py

"""
Navigation moves produced by the resolvers.

A move is the single outcome of interpreting one settled sentence. It is
immutable; the walkthrough decides what it means for the current recipe.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class MoveKind(Enum):
    BEGINNING = auto()
    END = auto()
    NEXT = auto()
    PREVIOUS = auto()
    REPEAT = auto()
    GO_TO_POSITION = auto()
    UNRECOGNIZED = auto()


@dataclass(frozen=True)
class NavigationMove:
    kind: MoveKind
    position: Optional[int] = None   # 1-based, only for GO_TO_POSITION
    recovery: Optional[str] = None   # only for UNRECOGNIZED

    # ------------------------------------------------------------------ #
    # Constructors
    # ------------------------------------------------------------------ #

    @classmethod
    def beginning(cls) -> "NavigationMove":
        return cls(MoveKind.BEGINNING)

    @classmethod
    def end(cls) -> "NavigationMove":
        return cls(MoveKind.END)

    @classmethod
    def next(cls) -> "NavigationMove":
        return cls(MoveKind.NEXT)

    @classmethod
    def previous(cls) -> "NavigationMove":
        return cls(MoveKind.PREVIOUS)

    @classmethod
    def repeat(cls) -> "NavigationMove":
        return cls(MoveKind.REPEAT)

    @classmethod
    def go_to(cls, position: int) -> "NavigationMove":
        return cls(MoveKind.GO_TO_POSITION, position=int(position))

    @classmethod
    def unrecognized(cls, recovery: Optional[str] = None) -> "NavigationMove":
        return cls(MoveKind.UNRECOGNIZED, recovery=recovery)

    @property
    def is_recognized(self) -> bool:
        return self.kind is not MoveKind.UNRECOGNIZED

    def __str__(self) -> str:
        if self.kind is MoveKind.GO_TO_POSITION:
            return f"GoToPosition({self.position})"
        if self.kind is MoveKind.UNRECOGNIZED:
            return f"Unrecognized({self.recovery!r})"
        return self.kind.name.title()


@dataclass(frozen=True)
class RecognitionContext:
    """
    Read-only snapshot handed to a resolver for one sentence.

    current_index is 0-based; -1 means the intro, before step 1.
    """

    total_steps: int
    current_index: int = -1

    def in_range(self, position: int) -> bool:
        return 1 <= position <= self.total_steps
