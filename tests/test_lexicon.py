"""Unit tests for the spoken number lexicon."""

from __future__ import annotations

import pytest

from okchef.core.lexicon import OrdinalLexicon


@pytest.mark.parametrize(
    "word, expected",
    [
        ("un", 1),
        ("une", 1),
        ("huit", 8),
        ("neuf", 9),
        ("première", 1),
        ("Cinquième", 5),
        ("CINQUIÈME", 5),
        ("initial", 1),
        ("third", 3),
        ("3", 3),
        ("1ère", 1),
        ("2e", 2),
        ("trois,", 3),
    ],
)
def test_lookup(word, expected) -> None:
    assert OrdinalLexicon().lookup(word, total_steps=7) == expected


def test_final_aliases_use_current_step_count() -> None:
    lexicon = OrdinalLexicon()
    assert lexicon.lookup("dernière", total_steps=7) == 7
    assert lexicon.lookup("final", total_steps=9) == 9
    assert lexicon.is_final("Dernière")
    assert not lexicon.is_final("deux")


@pytest.mark.parametrize("word", ["prochaine", "suivante", "", "chef"])
def test_unknown_words(word) -> None:
    assert OrdinalLexicon().lookup(word, total_steps=7) is None


def test_decomposed_accents_are_normalized() -> None:
    assert OrdinalLexicon().lookup("deuxie\u0300me", total_steps=7) == 2


def test_custom_words() -> None:
    lexicon = OrdinalLexicon(words={"eins": 1, "zwei": 2}, final_aliases=("letzte",))
    assert lexicon.lookup("zwei", 5) == 2
    assert lexicon.lookup("letzte", 5) == 5
    assert lexicon.lookup("deux", 5) is None
    assert "eins" in lexicon
