"""
Version handling for runtime requests and tool cache entries.

Requested versions arrive as user tokens ("17", "11.0.3-ea", "11.0.3-ea.2")
and are normalized into a semantic-version range plus a stability flag.
Early-access builds are expressed with build metadata ("11.0.3+2"), which
cannot be used in tool cache folder names, so cache entries use a reversible
textual encoding:

    stable 11.0.3+4        <->  11.0.3-4
    early-access 17.0.0+1  <->  17.0.0-ea.1
    early-access 11.0.3    <->  11.0.3-ea

Usage:
    from runtimekit.core.versions import normalize_version, encode_cache_version

    spec = normalize_version("11.0.3-ea.2")
    print(spec.range, spec.stable)  # 11.0.3+2 False
"""

import functools
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import semantic_version

from runtimekit.core.exceptions import InvalidVersionSpec

logger = logging.getLogger(__name__)

EA_SUFFIX = "-ea"
EA_BUILD_MARKER = "-ea."


@dataclass(frozen=True)
class VersionSpec:
    """
    Normalized version request.

    Attributes:
        range: Semantic-version range (npm syntax, or an exact version with build)
        stable: False when early-access builds were requested
    """

    range: str
    stable: bool


def normalize_version(raw: str) -> VersionSpec:
    """
    Normalize a user-provided version token.

    Args:
        raw: Version token, e.g. "17", "11.0.3-ea", "11.0.3-ea.2", ">=11 <12"

    Returns:
        VersionSpec with canonical range and stability flag

    Raises:
        InvalidVersionSpec: If the result is not a valid semantic-version range

    Example:
        >>> normalize_version("11.0.3-ea.2")
        VersionSpec(range='11.0.3+2', stable=False)
    """
    version = raw.strip()
    stable = True

    if version.endswith(EA_SUFFIX):
        version = version[: -len(EA_SUFFIX)]
        stable = False
    elif EA_BUILD_MARKER in version:
        # 11.0.3-ea.2 -> 11.0.3+2
        version = version.replace(EA_BUILD_MARKER, "+", 1)
        stable = False

    if not is_valid_range(version):
        raise InvalidVersionSpec(raw, version)

    return VersionSpec(range=version, stable=stable)


def is_valid_range(text: str) -> bool:
    """Check whether text is a valid version or npm-style version range."""
    if _parse_version(text) is not None:
        return True
    try:
        semantic_version.NpmSpec(text)
    except ValueError:
        return False
    return True


def encode_cache_version(version: str, stable: bool) -> str:
    """
    Encode a version as a filesystem-safe tool cache token.

    Some JVM tooling breaks when the runtime path contains "+", so build
    metadata is rewritten before the version becomes a folder name.

    Args:
        version: Semantic version, possibly with build metadata
        stable: Whether the version is a stable release

    Returns:
        Tool cache folder token
    """
    if not stable:
        if "+" in version:
            return version.replace("+", EA_BUILD_MARKER, 1)
        return f"{version}{EA_SUFFIX}"

    return version.replace("+", "-", 1)


def decode_cache_version(token: str) -> Tuple[str, bool]:
    """
    Reverse encode_cache_version().

    Args:
        token: Tool cache folder token

    Returns:
        Tuple of (semantic version, stable flag)
    """
    stable = EA_SUFFIX not in token

    version = token.replace(EA_BUILD_MARKER, "+", 1)
    if version.endswith(EA_SUFFIX):
        version = version[: -len(EA_SUFFIX)]
    version = version.replace("-", "+", 1)

    return version, stable


def is_version_satisfies(version_range: str, version: str) -> bool:
    """
    Check whether a version satisfies a range.

    A range that is itself a full version with build metadata ("11.0.3+2")
    only matches that exact build. Otherwise build metadata on the candidate
    is ignored and npm range rules apply.

    Args:
        version_range: Normalized range
        version: Candidate semantic version

    Returns:
        True if the version satisfies the range
    """
    candidate = _parse_version(version)
    if candidate is None:
        return False

    exact = _parse_version(version_range)
    if exact is not None and exact.build:
        return compare_build(version_range, version) == 0

    try:
        spec = semantic_version.NpmSpec(version_range)
    except ValueError:
        return False

    return spec.match(semantic_version.Version(version.split("+", 1)[0]))


def build_sort_key(version: str) -> tuple:
    """
    Sort key honoring build metadata, so 11.0.3+10 ranks above 11.0.3+2.

    Args:
        version: Valid semantic version

    Returns:
        Tuple usable with sorted()/max()
    """
    parsed = semantic_version.Version(version)
    if parsed.prerelease:
        prerelease_key = (0, _identifiers_key(parsed.prerelease))
    else:
        prerelease_key = (1, ())
    return (
        parsed.major,
        parsed.minor,
        parsed.patch,
        prerelease_key,
        _identifiers_key(parsed.build),
    )


def compare_build(left: str, right: str) -> int:
    """Compare two versions including build metadata; returns -1, 0 or 1."""
    left_key = build_sort_key(left)
    right_key = build_sort_key(right)
    return (left_key > right_key) - (left_key < right_key)


def sort_versions_descending(versions: Iterable[str]) -> List[str]:
    """Sort semantic versions from highest to lowest, build-aware."""
    return sorted(versions, key=build_sort_key, reverse=True)


def max_satisfying(versions: Iterable[str], version_range: str) -> Optional[str]:
    """Return the highest version satisfying the range, or None."""
    satisfied = [v for v in versions if is_version_satisfies(version_range, v)]
    if not satisfied:
        return None
    return sort_versions_descending(satisfied)[0]


def major_version(version: str) -> str:
    """Return the major component of a version string."""
    return version.split(".")[0]


def _identifiers_key(identifiers: Iterable[str]) -> tuple:
    # Numeric identifiers sort before alphanumeric ones
    return tuple(
        (0, int(part), "") if part.isdigit() else (1, 0, part) for part in identifiers
    )


@functools.lru_cache(maxsize=256)
def _parse_version(text: str) -> Optional[semantic_version.Version]:
    try:
        return semantic_version.Version(text)
    except ValueError:
        return None


__all__ = [
    "VersionSpec",
    "normalize_version",
    "is_valid_range",
    "encode_cache_version",
    "decode_cache_version",
    "is_version_satisfies",
    "build_sort_key",
    "compare_build",
    "sort_versions_descending",
    "max_satisfying",
    "major_version",
]
