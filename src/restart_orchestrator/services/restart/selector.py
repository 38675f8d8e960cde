"""Name selectors deciding which workloads get restarted.

A selector sees only the bare workload name. An empty token or pattern
selects nothing, so a missing setting can never restart the whole fleet.
"""

from __future__ import annotations

import re
from typing import Protocol, runtime_checkable

DEFAULT_TOKEN = "database"


@runtime_checkable
class Selector(Protocol):
    """Predicate over a workload name."""

    def matches(self, name: str) -> bool:
        """Return True if the workload should be restarted."""
        ...


class SubstringSelector:
    """Case-insensitive substring match against a fixed token."""

    def __init__(self, token: str | None = DEFAULT_TOKEN) -> None:
        self._token = (token or "").strip().lower()

    @property
    def token(self) -> str:
        return self._token

    def matches(self, name: str) -> bool:
        if not self._token:
            return False
        return self._token in name.lower()

    def __repr__(self) -> str:
        return f"SubstringSelector(token={self._token!r})"


class RegexSelector:
    """Case-insensitive regular-expression search against the name."""

    def __init__(self, pattern: str | None) -> None:
        """Compile the pattern.

        Args:
            pattern: Regular expression; empty or None selects nothing.

        Raises:
            ValueError: If the pattern does not compile.
        """
        self._pattern = (pattern or "").strip()
        self._regex: re.Pattern[str] | None = None
        if self._pattern:
            try:
                self._regex = re.compile(self._pattern, re.IGNORECASE)
            except re.error as e:
                raise ValueError(f"Invalid name pattern '{self._pattern}': {e}") from e

    @property
    def pattern(self) -> str:
        return self._pattern

    def matches(self, name: str) -> bool:
        if self._regex is None:
            return False
        return self._regex.search(name) is not None

    def __repr__(self) -> str:
        return f"RegexSelector(pattern={self._pattern!r})"


def build_selector(token: str | None = DEFAULT_TOKEN, pattern: str | None = None) -> Selector:
    """Build the selector for a run; a pattern takes precedence over a token."""
    if pattern:
        return RegexSelector(pattern)
    return SubstringSelector(token)
