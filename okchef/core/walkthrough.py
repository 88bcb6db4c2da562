# okchef/core/walkthrough.py

"""
Applies navigation moves to one recipe.

The walkthrough owns the current step index (0-based, -1 = intro) and turns
every move into the sentence that should be spoken next. Positions outside
the recipe are rejected here (or clamped, depending on the policy).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .moves import MoveKind, NavigationMove, RecognitionContext
from .recipes import Recipe
from .resolver import OutOfRangePolicy


DEFAULT_APOLOGY = "Désolé, je n'ai pas compris."


@dataclass
class StepOutcome:
    move: NavigationMove
    moved: bool
    index: int
    text: str


class RecipeWalkthrough:
    def __init__(
        self,
        recipe: Recipe,
        out_of_range: OutOfRangePolicy = OutOfRangePolicy.PASS_THROUGH,
        apology: str = DEFAULT_APOLOGY,
    ):
        if not recipe.steps:
            raise ValueError(f"Recipe '{recipe.title}' has no steps")
        self.logger = logging.getLogger("okchef.walkthrough")
        self.recipe = recipe
        self.out_of_range = out_of_range
        self.apology = apology
        self.current_index = -1

    # ---------- state ----------

    @property
    def total_steps(self) -> int:
        return self.recipe.step_count

    def context(self) -> RecognitionContext:
        return RecognitionContext(total_steps=self.total_steps, current_index=self.current_index)

    def intro(self) -> str:
        return f"{self.recipe.title}. {self.recipe.description}"

    def current_text(self) -> str:
        if self.current_index < 0:
            return self.intro()
        return self._step_sentence(self.current_index)

    # ---------- moves ----------

    def apply(self, move: NavigationMove) -> StepOutcome:
        kind = move.kind
        last = self.total_steps - 1

        if kind is MoveKind.BEGINNING:
            return self._go(move, 0)

        if kind is MoveKind.END:
            return self._go(move, last)

        if kind is MoveKind.NEXT:
            if self.current_index >= last:
                return self._stay(move, "C'était la dernière étape. Bon appétit !")
            return self._go(move, self.current_index + 1)

        if kind is MoveKind.PREVIOUS:
            if self.current_index <= 0:
                return self._stay(move, "Nous sommes déjà au début de la recette.")
            return self._go(move, self.current_index - 1)

        if kind is MoveKind.REPEAT:
            return self._stay(move, self.current_text())

        if kind is MoveKind.GO_TO_POSITION:
            position = move.position or 0
            if 1 <= position <= self.total_steps:
                return self._go(move, position - 1)
            if self.out_of_range is OutOfRangePolicy.CLAMP:
                return self._go(move, min(max(position, 1), self.total_steps) - 1)
            self.logger.info(f"Rejected step {position} (recipe has {self.total_steps})")
            return self._stay(
                move,
                f"Il n'y a pas d'étape {position}. Cette recette a {self.total_steps} étapes.",
            )

        return self._stay(move, move.recovery or self.apology)

    # ---------- helpers ----------

    def _go(self, move: NavigationMove, index: int) -> StepOutcome:
        self.current_index = index
        return StepOutcome(move=move, moved=True, index=index, text=self._step_sentence(index))

    def _stay(self, move: NavigationMove, text: str) -> StepOutcome:
        return StepOutcome(move=move, moved=False, index=self.current_index, text=text)

    def _step_sentence(self, index: int) -> str:
        return f"Étape {index + 1}. {self.recipe.steps[index]}"
