"""Semver comparison utilities."""

from __future__ import annotations

from packaging.version import Version, InvalidVersion


def parse_version(v: str) -> Version | None:
    """Parse a version string, returning None on failure."""
    try:
        return Version(v)
    except InvalidVersion:
        # Try stripping leading 'v'
        if v.startswith("v"):
            try:
                return Version(v[1:])
            except InvalidVersion:
                pass
    return None


def classify_change(previous: str, current: str) -> str:
    """Classify the move between two chart versions.

    Returns: "major", "minor", "patch", "downgrade", "same", or "unknown".
    """
    prev = parse_version(previous)
    cur = parse_version(current)

    if prev is None or cur is None:
        return "unknown"
    if cur == prev:
        return "same"
    if cur < prev:
        return "downgrade"
    if cur.major > prev.major:
        return "major"
    if cur.minor > prev.minor:
        return "minor"
    return "patch"
