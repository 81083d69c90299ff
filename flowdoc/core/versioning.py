"""Semantic version counters for projects and documents."""

from typing import List, Tuple

INITIAL_VERSION = "1.0.0"

MAJOR = "major"
MINOR = "minor"
PATCH = "patch"


def parse_version(version: str) -> Tuple[int, int, int]:
    parts = version.split(".")
    if len(parts) != 3:
        raise ValueError(f"Not a semantic version: {version!r}")
    try:
        major, minor, patch = (int(p) for p in parts)
    except ValueError as e:
        raise ValueError(f"Not a semantic version: {version!r}") from e
    return major, minor, patch


def increment_version(version: str, kind: str) -> str:
    """
    Bump one component of a semantic version string.

    "major" resets minor and patch, "minor" resets patch. Any other kind
    returns the version unchanged.
    """
    major, minor, patch = parse_version(version)
    if kind == MAJOR:
        return f"{major + 1}.0.0"
    if kind == MINOR:
        return f"{major}.{minor + 1}.0"
    if kind == PATCH:
        return f"{major}.{minor}.{patch + 1}"
    return version


def next_document_version(versions: List) -> str:
    """Version for the next save of a document given its version log."""
    if not versions:
        return INITIAL_VERSION
    return increment_version(versions[-1].version, PATCH)
