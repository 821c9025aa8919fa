"""Version compatibility heuristic.

Decides whether save data written by one host version can be carried over
to another. This is a business rule, not a format check: versions are
grouped into families by their leading dotted segments, and a few fragile
patch series only accept data from within themselves.
"""

from __future__ import annotations

from dataclasses import dataclass

from save_manager.core.version import normalize_version


@dataclass(frozen=True)
class CompatibilityRules:
    """Known version families.

    ``families`` are matched on whole dotted segments (``"1.9"`` matches
    ``"1.9.15"`` but not ``"1.90"``). ``fragile_families`` are matched as
    plain string prefixes so they can name a partial segment such as the
    ``1.9.0x`` patch series.
    """

    families: tuple[str, ...] = ("1.9", "1.10")
    fragile_families: tuple[str, ...] = ("1.9.0",)

    def family_of(self, version: str) -> str | None:
        segments = version.split(".")
        matches = [
            family
            for family in self.families
            if segments[: len(family.split("."))] == family.split(".")
        ]
        if not matches:
            return None
        return max(matches, key=lambda f: len(f.split(".")))

    def fragile_family_of(self, version: str) -> str | None:
        matches = [f for f in self.fragile_families if version.startswith(f)]
        if not matches:
            return None
        return max(matches, key=len)


DEFAULT_RULES = CompatibilityRules()


def _first_segment(version: str) -> str:
    return version.split(".", 1)[0]


def is_problematic_change(
    current: str,
    last: str,
    rules: CompatibilityRules = DEFAULT_RULES,
) -> bool:
    """True if saves from *last* should not be inherited by *current*."""
    current = normalize_version(current)
    last = normalize_version(last)
    if current == last:
        return False

    current_fragile = rules.fragile_family_of(current)
    last_fragile = rules.fragile_family_of(last)
    if current_fragile or last_fragile:
        return current_fragile != last_fragile

    current_family = rules.family_of(current)
    last_family = rules.family_of(last)
    if current_family and last_family:
        return current_family != last_family

    # Unknown versions only carry over within the same major line
    return _first_segment(current) != _first_segment(last)


def shares_fragile_family(
    current: str,
    last: str,
    rules: CompatibilityRules = DEFAULT_RULES,
) -> bool:
    """True if both versions belong to the same fragile patch series."""
    family = rules.fragile_family_of(normalize_version(current))
    return family is not None and family == rules.fragile_family_of(normalize_version(last))
