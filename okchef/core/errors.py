# okchef/core/errors.py

from __future__ import annotations

from typing import Optional


class OkChefError(Exception):
    """Base class for okchef errors."""


class FetchError(OkChefError):
    """
    A pattern refresh failed. The previous pattern table is still in place.

    reason is one of "network", "decode" or "parse".
    """

    NETWORK = "network"
    DECODE = "decode"
    PARSE = "parse"

    def __init__(self, reason: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"{reason}: {message}")
        self.reason = reason
        self.cause = cause


class PatternCompileError(OkChefError):
    """A single pattern could not be compiled as a regular expression."""

    def __init__(self, category: str, pattern: str, cause: Exception):
        super().__init__(f"invalid pattern {pattern!r} in '{category}': {cause}")
        self.category = category
        self.pattern = pattern
        self.cause = cause
