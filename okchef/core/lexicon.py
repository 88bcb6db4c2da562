# okchef/core/lexicon.py

"""
Spoken number words -> 1-based step positions.

Speech engines hand back either words ("cinquième", "huit") or digits
("étape 3", "1ère"). Final aliases ("dernière", "last") have no fixed value:
they resolve against the active recipe's step count at lookup time.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Dict, Iterable, Mapping, Optional


FRENCH_CARDINALS = {
    "un": 1, "une": 1, "deux": 2, "trois": 3, "quatre": 4, "cinq": 5,
    "six": 6, "sept": 7, "huit": 8, "neuf": 9, "dix": 10, "onze": 11,
    "douze": 12, "treize": 13, "quatorze": 14, "quinze": 15, "seize": 16,
    "vingt": 20,
}

FRENCH_ORDINALS = {
    "première": 1, "premier": 1, "1ère": 1, "1re": 1, "1er": 1,
    "deuxième": 2, "second": 2, "seconde": 2, "troisième": 3,
    "quatrième": 4, "cinquième": 5, "sixième": 6, "septième": 7,
    "huitième": 8, "neuvième": 9, "dixième": 10, "onzième": 11,
    "douzième": 12, "treizième": 13, "quatorzième": 14, "quinzième": 15,
    "seizième": 16, "vingtième": 20,
}

ENGLISH_WORDS = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5, "six": 6,
    "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11, "twelve": 12,
    "first": 1, "third": 3, "fourth": 4, "fifth": 5, "sixth": 6,
    "seventh": 7, "eighth": 8, "ninth": 9, "tenth": 10,
}

INITIAL_ALIASES = ("initial", "initiale")
FINAL_ALIASES = ("final", "finale", "dernière", "dernier", "last")

_ORDINAL_SUFFIX = re.compile(r"^(\d+)\s*(?:e|è|ème|eme|er|ère|re|st|nd|rd|th)?$")


def normalize_word(word: str) -> str:
    return unicodedata.normalize("NFC", word).strip(" \t,.;:!?'\"").casefold()


class OrdinalLexicon:
    def __init__(
        self,
        words: Optional[Mapping[str, int]] = None,
        initial_aliases: Iterable[str] = INITIAL_ALIASES,
        final_aliases: Iterable[str] = FINAL_ALIASES,
    ):
        if words is None:
            words = {**FRENCH_CARDINALS, **FRENCH_ORDINALS, **ENGLISH_WORDS}
        self._words: Dict[str, int] = {normalize_word(k): int(v) for k, v in words.items()}
        for alias in initial_aliases:
            self._words[normalize_word(alias)] = 1
        self._final = frozenset(normalize_word(a) for a in final_aliases)

    def is_final(self, word: str) -> bool:
        return normalize_word(word) in self._final

    def lookup(self, word: str, total_steps: int) -> Optional[int]:
        """Return the 1-based position for ``word`` or None if it is not a number word."""
        key = normalize_word(word)
        if not key:
            return None
        if key in self._final:
            return total_steps
        if key in self._words:
            return self._words[key]

        m = _ORDINAL_SUFFIX.match(key)
        if m:
            return int(m.group(1))
        return None

    def __contains__(self, word: str) -> bool:
        return self.lookup(word, 1) is not None

    def __len__(self) -> int:
        return len(self._words) + len(self._final)
