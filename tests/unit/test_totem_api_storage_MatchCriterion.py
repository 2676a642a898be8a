"""Unit tests for totem.api.storage.MatchCriterion module."""

import pytest

from totem.api.storage.MatchCriterion import MatchCriterion

pytestmark = pytest.mark.storage


def test_exact_matches_equal_values_only():
    criterion = MatchCriterion.exact("Alice")
    assert criterion.matches("Alice")
    assert not criterion.matches("alice")
    assert not criterion.matches("Alice2")


def test_substring_is_case_sensitive_by_default():
    criterion = MatchCriterion.substring("ali")
    assert criterion.matches("Kalimba")
    assert not criterion.matches("Alice")


def test_substring_ignore_case():
    criterion = MatchCriterion.substring("ali", case_insensitive=True)
    assert criterion.matches("Alice")
    assert criterion.pattern == "(?i)ali"


def test_substring_treats_regex_characters_literally():
    criterion = MatchCriterion.substring("1.5")
    assert criterion.matches("v1.5")
    assert not criterion.matches("v125")


def test_substring_of_non_string_values():
    criterion = MatchCriterion.substring(42)
    assert criterion.matches(1420)
    assert not criterion.matches(None)
