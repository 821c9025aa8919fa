"""Tests for the version compatibility heuristic."""

from __future__ import annotations

import pytest

from save_manager.core.compat import CompatibilityRules, is_problematic_change, shares_fragile_family


@pytest.mark.parametrize(
    "current, last, expected",
    [
        # Equal versions
        ("1.9.11", "1.9.11", False),
        ("v1.9.11", "1.9.11", False),
        # Fragile 1.9.0x series only accepts itself
        ("1.9.03", "1.9.11", True),
        ("1.9.11", "1.9.03", True),
        ("1.9.03", "1.9.07", False),
        # Same family
        ("1.9.11", "1.9.12", False),
        ("1.9.15", "1.9.11", False),
        ("1.10.1", "1.10.0", False),
        # Different families
        ("1.10.0", "1.9.15", True),
        # Unknown versions: same first segment only
        ("2.0", "2.1", False),
        ("3.0", "2.1", True),
        ("1.11", "1.10.2", False),
    ],
)
def test_is_problematic_change(current: str, last: str, expected: bool) -> None:
    assert is_problematic_change(current, last) is expected


class TestRules:
    def test_family_matches_whole_segments(self) -> None:
        rules = CompatibilityRules()
        assert rules.family_of("1.9.15") == "1.9"
        assert rules.family_of("1.90") is None

    def test_custom_rules(self) -> None:
        rules = CompatibilityRules(families=("5",), fragile_families=("5.0.",))
        assert is_problematic_change("5.0.1", "5.1", rules)
        assert not is_problematic_change("5.2", "5.1", rules)


@pytest.mark.parametrize(
    "current, last, expected",
    [
        ("1.9.07", "1.9.03", True),
        ("v1.9.07", "1.9.03", True),
        ("1.9.12", "1.9.11", False),
        ("1.9.03", "1.9.11", False),
    ],
)
def test_shares_fragile_family(current: str, last: str, expected: bool) -> None:
    assert shares_fragile_family(current, last) is expected
