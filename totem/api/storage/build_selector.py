"""Translate simple field/value criteria into a backend selector."""

from collections.abc import Mapping
from typing import Any

from .MatchCriterion import MatchCriterion


def build_criteria(
    criteria: Mapping[str, Any],
    match_exact: bool = False,
    ignore_case: bool = False,
) -> dict[str, MatchCriterion]:
    """Wrap every field value in a MatchCriterion.

    Falsy values are kept: a field present in `criteria` is always matched.
    """
    if match_exact:
        return {field: MatchCriterion.exact(value) for field, value in criteria.items()}
    return {field: MatchCriterion.substring(value, ignore_case) for field, value in criteria.items()}


def build_selector(
    criteria: Mapping[str, Any],
    match_exact: bool = False,
    match_all: bool = False,
    ignore_case: bool = False,
) -> dict[str, Any]:
    """Build a selector from `criteria`.

    With `match_all` the result is a flat conjunction `{field: clause, ...}`;
    otherwise it is `{"$or": [{field: clause}, ...]}`. Empty criteria give `{}`,
    which callers treat as "match nothing" and never send to the backend.
    `criteria` is not modified.
    """
    if not criteria:
        return {}
    clauses = {
        field: criterion.to_selector()
        for field, criterion in build_criteria(criteria, match_exact, ignore_case).items()
    }
    if match_all:
        return clauses
    return {"$or": [{field: clause} for field, clause in clauses.items()]}
