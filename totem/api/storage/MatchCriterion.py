"""Structured match criterion for a single field."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

CASE_INSENSITIVE_MARKER = "(?i)"


class MatchKind(str, Enum):
    EXACT = "exact"
    SUBSTRING = "substring"


@dataclass(frozen=True)
class MatchCriterion:
    """Exact equality, or a literal substring match that may ignore case.

    Substring values are regex-escaped before rendering, so characters such as
    `.` or `(` in user input match themselves.
    """

    kind: MatchKind
    value: Any
    case_insensitive: bool = False

    @classmethod
    def exact(cls, value: Any) -> "MatchCriterion":
        return cls(MatchKind.EXACT, value)

    @classmethod
    def substring(cls, value: Any, case_insensitive: bool = False) -> "MatchCriterion":
        return cls(MatchKind.SUBSTRING, value, case_insensitive)

    @property
    def pattern(self) -> str:
        prefix = CASE_INSENSITIVE_MARKER if self.case_insensitive else ""
        return prefix + re.escape(str(self.value))

    def to_selector(self) -> Any:
        """Render as a backend selector clause."""
        if self.kind is MatchKind.EXACT:
            return self.value
        return {"$regex": self.pattern}

    def matches(self, candidate: Any) -> bool:
        """Evaluate against a value in memory."""
        if self.kind is MatchKind.EXACT:
            return candidate == self.value
        if candidate is None:
            return False
        return re.search(self.pattern, str(candidate)) is not None
