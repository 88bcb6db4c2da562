# okchef/core/importer.py

"""
Remote pattern feed.

The feed is a published spreadsheet exported as CSV with one column per
category:

    Step(N),Start,End,Next,Previous[,Repeat]

Each non-empty cell is one regular expression for that category. Empty cells
are skipped, so columns can have different lengths.
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Dict, List

import requests

from .errors import FetchError
from .patterns import BEGINNING, END, NEXT, PREVIOUS, REPEAT, STEP_AT_NUMBER


logger = logging.getLogger("okchef.importer")


REQUIRED_COLUMNS = {
    "Step(N)": STEP_AT_NUMBER,
    "Start": BEGINNING,
    "End": END,
    "Next": NEXT,
    "Previous": PREVIOUS,
}
OPTIONAL_COLUMNS = {
    "Repeat": REPEAT,
}


def parse_pattern_feed(text: str) -> Dict[str, List[str]]:
    """
    Parse CSV text into category -> patterns, preserving row order.

    Raises FetchError("parse") when the header is missing a required column
    or the CSV stream is malformed. Optional columns that are absent are not
    present in the result.
    """
    if not text or not text.strip():
        raise FetchError(FetchError.PARSE, "empty pattern feed")

    reader = csv.DictReader(io.StringIO(text, newline=""), strict=True)
    try:
        header = [h.strip() for h in (reader.fieldnames or [])]
        missing = [name for name in REQUIRED_COLUMNS if name not in header]
        if missing:
            raise FetchError(FetchError.PARSE, f"missing columns: {', '.join(missing)}")
        reader.fieldnames = header

        columns: Dict[str, List[str]] = {category: [] for category in REQUIRED_COLUMNS.values()}
        for name, category in OPTIONAL_COLUMNS.items():
            if name in header:
                columns[category] = []

        mapping = {**REQUIRED_COLUMNS, **OPTIONAL_COLUMNS}
        for row in reader:
            for name, category in mapping.items():
                if category not in columns:
                    continue
                value = (row.get(name) or "").strip()
                if value:
                    columns[category].append(value)
    except csv.Error as e:
        raise FetchError(FetchError.PARSE, f"malformed CSV at line {reader.line_num}", e) from e

    return columns


# ---------- sources ----------


class HttpPatternSource:
    """Fetches the feed over HTTP(S)."""

    def __init__(self, url: str, timeout: float = 10.0):
        self.url = url
        self.timeout = timeout

    def fetch(self) -> str:
        try:
            r = requests.get(self.url, timeout=self.timeout, allow_redirects=True)
            r.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(FetchError.NETWORK, f"GET {self.url} failed", e) from e

        logger.info(f"Fetched pattern feed from {self.url} ({len(r.content)} bytes)")

        try:
            return r.content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FetchError(FetchError.DECODE, f"{self.url} is not UTF-8", e) from e

    def __str__(self) -> str:
        return self.url


class FilePatternSource:
    """Reads the feed from a local CSV file."""

    def __init__(self, path):
        self.path = Path(path)

    def fetch(self) -> str:
        try:
            data = self.path.read_bytes()
        except OSError as e:
            raise FetchError(FetchError.NETWORK, f"cannot read {self.path}", e) from e
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FetchError(FetchError.DECODE, f"{self.path} is not UTF-8", e) from e

    def __str__(self) -> str:
        return str(self.path)


class TextPatternSource:
    """In-memory feed, mostly for tests and embedded tables."""

    def __init__(self, text: str, name: str = "<text>"):
        self.text = text
        self.name = name

    def fetch(self) -> str:
        return self.text

    def __str__(self) -> str:
        return self.name
