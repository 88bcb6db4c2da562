# okchef/core/patterns.py

"""
Pattern table for the command resolver.

The table holds one PatternSet per move category. Readers take the current
PatternSnapshot (an immutable object) and never see a half-built table:
refresh() builds a complete new snapshot off to the side and swaps the
reference in one assignment.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from .errors import FetchError, PatternCompileError


logger = logging.getLogger("okchef.patterns")


STEP_AT_NUMBER = "stepAtNumber"
BEGINNING = "beginning"
END = "end"
NEXT = "next"
PREVIOUS = "previous"
REPEAT = "repeat"

# Resolution order after the wake-token gate
CATEGORY_ORDER = (STEP_AT_NUMBER, BEGINNING, END, NEXT, PREVIOUS, REPEAT)

DEFAULT_PATTERNS: Dict[str, Tuple[str, ...]] = {
    STEP_AT_NUMBER: (
        r"(?:[ée]tape|step)\s+(?:num[ée]ro\s+|number\s+|n°\s*)?(\w+)",
        # suffix order takes ordinals only
        r"\b(\d+(?:e|è|ème|eme|er|ère|re|st|nd|rd|th)|\w+i[èe]me|premi[èe]re?|seconde?|derni[èe]re?|finale?"
        r"|first|second|third|\w+th|last)\s+(?:[ée]tape|step)",
    ),
    BEGINNING: ("début", "commencer", "recommencer", "first"),
    END: ("dernière", "final", "last", "fin"),
    NEXT: ("prochain", "prochaine", "passer", "suite", "suivant", "après", "next"),
    PREVIOUS: ("back", "retour", "reviens", "oups", "revenir", "précédent", "avant", "previous"),
    REPEAT: ("répète", "répéter", "redis", "repeat", "again"),
}

_WORD = re.compile(r"\w+")


@dataclass(frozen=True)
class MatchRule:
    """One trigger: a literal keyword or a regular expression."""

    pattern: str
    compiled: "re.Pattern[str]"
    is_regex: bool = True

    @classmethod
    def build(cls, category: str, pattern: str, is_regex: bool = True) -> "MatchRule":
        source = pattern if is_regex else re.escape(pattern)
        try:
            compiled = re.compile(source, re.IGNORECASE)
        except re.error as e:
            raise PatternCompileError(category, pattern, e) from e
        return cls(pattern=pattern, compiled=compiled, is_regex=is_regex)

    def search(self, text: str) -> bool:
        return self.compiled.search(text) is not None

    def captures(self, text: str) -> Iterator[str]:
        """
        Yield candidate number words, leftmost occurrence first.

        Rules with a capturing group yield the group; rules without one yield
        every word of the whole match.
        """
        for m in self.compiled.finditer(text):
            if self.compiled.groups:
                value = m.group(1)
                if value:
                    yield value
            else:
                for word in _WORD.findall(m.group(0)):
                    yield word


@dataclass(frozen=True)
class PatternSet:
    name: str
    rules: Tuple[MatchRule, ...] = ()

    @classmethod
    def from_patterns(
        cls,
        name: str,
        patterns: Iterable[str],
        is_regex: bool = True,
    ) -> "PatternSet":
        """Compile patterns in order, dropping (and logging) any that are malformed."""
        rules: List[MatchRule] = []
        for pattern in patterns:
            if not pattern:
                continue
            try:
                rules.append(MatchRule.build(name, pattern, is_regex=is_regex))
            except PatternCompileError as e:
                logger.warning(f"Dropping pattern: {e}")
        return cls(name=name, rules=tuple(rules))

    def matches(self, text: str) -> bool:
        return any(rule.search(text) for rule in self.rules)

    @property
    def patterns(self) -> List[str]:
        return [r.pattern for r in self.rules]

    def __len__(self) -> int:
        return len(self.rules)


@dataclass(frozen=True)
class PatternSnapshot:
    sets: Mapping[str, PatternSet] = field(default_factory=dict)
    version: int = 0
    source: str = "empty"
    loaded_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        # read-only view over a private copy
        object.__setattr__(self, "sets", MappingProxyType(dict(self.sets)))

    def get(self, category: str) -> PatternSet:
        return self.sets.get(category) or PatternSet(name=category)

    def describe(self) -> str:
        counts = ", ".join(f"{c}={len(self.get(c))}" for c in CATEGORY_ORDER)
        return f"v{self.version} from {self.source} ({counts})"


def build_snapshot(
    columns: Mapping[str, Sequence[str]],
    *,
    version: int,
    source: str,
    literal_keywords: bool = False,
    fallback: Optional[PatternSnapshot] = None,
) -> PatternSnapshot:
    """
    Build a snapshot from category -> patterns.

    The step category is always compiled as regex. Keyword categories are
    literals when ``literal_keywords`` is set. Categories absent from
    ``columns`` are taken from ``fallback`` unchanged.
    """
    sets: Dict[str, PatternSet] = {}
    for category in CATEGORY_ORDER:
        if category in columns:
            is_regex = category == STEP_AT_NUMBER or not literal_keywords
            sets[category] = PatternSet.from_patterns(category, columns[category], is_regex=is_regex)
        elif fallback is not None:
            sets[category] = fallback.get(category)
        else:
            sets[category] = PatternSet(name=category)
    return PatternSnapshot(sets=sets, version=version, source=source)


class PatternTable:
    """
    Owns the current PatternSnapshot.

    - snapshot: read by any number of threads, never mutated
    - refresh(): one writer at a time, swaps only a fully built snapshot
    """

    def __init__(self, snapshot: Optional[PatternSnapshot] = None):
        self._snapshot = snapshot or PatternSnapshot()
        self._refresh_lock = threading.Lock()
        self._inflight: Optional[threading.Thread] = None
        self._inflight_lock = threading.Lock()

    @property
    def snapshot(self) -> PatternSnapshot:
        return self._snapshot

    # ---------- loading ----------

    def load(self, default_patterns: Optional[Mapping[str, Sequence[str]]] = None) -> PatternSnapshot:
        """Populate from built-in literal keywords and step regexes."""
        if default_patterns is None:
            default_patterns = DEFAULT_PATTERNS
        with self._refresh_lock:
            snapshot = build_snapshot(
                default_patterns,
                version=self._snapshot.version + 1,
                source="defaults",
                literal_keywords=True,
            )
            self._snapshot = snapshot
        logger.info(f"Pattern table loaded: {snapshot.describe()}")
        return snapshot

    def refresh(self, source) -> PatternSnapshot:
        """
        Fetch and parse a pattern feed, then swap it in.

        Raises FetchError on network, decode or parse failure; the previous
        snapshot is kept in that case. Concurrent callers are serialised.
        """
        # importer imports this module
        from .importer import parse_pattern_feed

        with self._refresh_lock:
            current = self._snapshot
            try:
                text = source.fetch()
                columns = parse_pattern_feed(text)
            except FetchError as e:
                logger.error(f"Pattern refresh from {source} failed, keeping {current.describe()}: {e}")
                raise

            snapshot = build_snapshot(
                columns,
                version=current.version + 1,
                source=str(source),
                fallback=current,
            )
            self._snapshot = snapshot

        logger.info(f"Pattern table refreshed: {snapshot.describe()}")
        return snapshot

    def refresh_async(
        self,
        source,
        on_done: Optional[Callable[[Optional[FetchError]], None]] = None,
    ) -> threading.Thread:
        """
        Run refresh() on a background thread.

        While a background refresh is running, further calls are coalesced
        into it and return the running thread.
        """
        with self._inflight_lock:
            if self._inflight is not None and self._inflight.is_alive():
                logger.info("Pattern refresh already in flight; coalescing request.")
                return self._inflight

            def worker():
                error: Optional[FetchError] = None
                try:
                    self.refresh(source)
                except FetchError as e:
                    error = e
                if on_done is not None:
                    try:
                        on_done(error)
                    except Exception as cb_err:
                        logger.error(f"Pattern refresh callback error: {cb_err}", exc_info=True)

            self._inflight = threading.Thread(target=worker, name="okchef-pattern-refresh", daemon=True)
            self._inflight.start()
            return self._inflight


_default_table: Optional[PatternTable] = None
_default_lock = threading.Lock()


def default_table() -> PatternTable:
    """Process-wide table, loaded with the embedded defaults on first use."""
    global _default_table
    with _default_lock:
        if _default_table is None:
            table = PatternTable()
            table.load()
            _default_table = table
        return _default_table
