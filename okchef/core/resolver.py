# okchef/core/resolver.py

"""
Pattern-based move resolver.

resolve() maps one settled sentence to exactly one NavigationMove:

  0) wake-token gate (configurable)
  1) "step + number word" extraction  -> GoToPosition(n) / End
  2) beginning keywords               -> Beginning
  3) end keywords                     -> End
  4) next keywords                    -> Next
  5) previous keywords                -> Previous
  6) repeat keywords                  -> Repeat
  7) otherwise                        -> Unrecognized

It does no I/O and keeps no state: the pattern snapshot and the recognition
context are passed in on every call.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .lexicon import OrdinalLexicon
from .moves import NavigationMove, RecognitionContext
from .patterns import (
    BEGINNING,
    END,
    NEXT,
    PREVIOUS,
    REPEAT,
    STEP_AT_NUMBER,
    PatternSnapshot,
    PatternTable,
)


logger = logging.getLogger("okchef.resolver")


DEFAULT_WAKE_TOKEN = r"ok[\s,.!]*chef"

_LEADING_JUNK = re.compile(r"^[\s,.;:!?]+")


class WakeTokenMode(Enum):
    REQUIRED = "required"              # gate before everything
    NUMERIC_BYPASS = "numeric_bypass"  # step numbers pass without the token
    DISABLED = "disabled"              # always-on listening


class OutOfRangePolicy(Enum):
    PASS_THROUGH = "pass_through"  # caller rejects GoToPosition(n) out of range
    UNRECOGNIZED = "unrecognized"
    CLAMP = "clamp"


@dataclass(frozen=True)
class ResolverOptions:
    wake_token_mode: WakeTokenMode = WakeTokenMode.REQUIRED
    wake_token: str = DEFAULT_WAKE_TOKEN
    out_of_range: OutOfRangePolicy = OutOfRangePolicy.PASS_THROUGH
    recovery_text: Optional[str] = None
    lexicon: OrdinalLexicon = field(default_factory=OrdinalLexicon)

    @classmethod
    def from_config(cls, config) -> "ResolverOptions":
        return cls(
            wake_token_mode=WakeTokenMode(config.get("resolver.wake_token_mode", "required")),
            wake_token=config.get("resolver.wake_token", DEFAULT_WAKE_TOKEN),
            out_of_range=OutOfRangePolicy(config.get("resolver.out_of_range", "pass_through")),
            recovery_text=config.get("resolver.recovery_text"),
        )


def normalize_sentence(sentence: Optional[str]) -> str:
    if not sentence:
        return ""
    return unicodedata.normalize("NFC", sentence).strip()


def split_wake_token(sentence: str, wake_token: str) -> Tuple[bool, str]:
    """
    Look for the wake token.

    Returns (found, command) where command is the text after the first
    occurrence, or the whole sentence when the token is absent.
    """
    try:
        m = re.search(wake_token, sentence, re.IGNORECASE)
    except re.error as e:
        logger.warning(f"Invalid wake token {wake_token!r}: {e}")
        return False, sentence
    if m is None:
        return False, sentence
    return True, _LEADING_JUNK.sub("", sentence[m.end():])


def _extract_step(text: str, snapshot: PatternSnapshot, context: RecognitionContext,
                  lexicon: OrdinalLexicon) -> Optional[NavigationMove]:
    for rule in snapshot.get(STEP_AT_NUMBER).rules:
        for word in rule.captures(text):
            if lexicon.is_final(word):
                return NavigationMove.end()
            position = lexicon.lookup(word, context.total_steps)
            if position is not None:
                return NavigationMove.go_to(position)
    return None


def _apply_range_policy(move: NavigationMove, context: RecognitionContext,
                        options: ResolverOptions) -> NavigationMove:
    if move.position is None or context.in_range(move.position):
        return move
    if options.out_of_range is OutOfRangePolicy.UNRECOGNIZED:
        return NavigationMove.unrecognized(options.recovery_text)
    if options.out_of_range is OutOfRangePolicy.CLAMP:
        return NavigationMove.go_to(min(max(move.position, 1), max(context.total_steps, 1)))
    return move


_KEYWORD_MOVES = (
    (BEGINNING, NavigationMove.beginning),
    (END, NavigationMove.end),
    (NEXT, NavigationMove.next),
    (PREVIOUS, NavigationMove.previous),
    (REPEAT, NavigationMove.repeat),
)


def resolve(
    sentence: Optional[str],
    context: RecognitionContext,
    snapshot: PatternSnapshot,
    options: Optional[ResolverOptions] = None,
) -> NavigationMove:
    options = options or ResolverOptions()
    text = normalize_sentence(sentence)
    if not text:
        return NavigationMove.unrecognized(options.recovery_text)

    mode = options.wake_token_mode
    if mode is not WakeTokenMode.DISABLED:
        found, command = split_wake_token(text, options.wake_token)
        if found:
            text = command
        elif mode is WakeTokenMode.REQUIRED:
            return NavigationMove.unrecognized(options.recovery_text)
        else:
            # NUMERIC_BYPASS without the token: only step numbers count
            move = _extract_step(text, snapshot, context, options.lexicon)
            if move is None:
                return NavigationMove.unrecognized(options.recovery_text)
            return _apply_range_policy(move, context, options)

    move = _extract_step(text, snapshot, context, options.lexicon)
    if move is not None:
        return _apply_range_policy(move, context, options)

    for category, make in _KEYWORD_MOVES:
        if snapshot.get(category).matches(text):
            return make()

    return NavigationMove.unrecognized(options.recovery_text)


class PatternMoveResolver:
    """Binds a PatternTable and options to the resolve() contract."""

    def __init__(self, table: PatternTable, options: Optional[ResolverOptions] = None):
        self.table = table
        self.options = options or ResolverOptions()

    def resolve(self, sentence: str, context: RecognitionContext) -> NavigationMove:
        move = resolve(sentence, context, self.table.snapshot, self.options)
        logger.info(f"Resolved {sentence!r} -> {move}")
        return move
