"""Engine version comparison and feature gating.

Every function here is pure.  The running engine version is never read
from a global: callers hold an :class:`EngineContext` and pass it to
whatever needs to know which features are available.

Version strings follow ``vMAJOR.MINOR.PATCH[-prerelease]``.  This is a
deliberately small subset of semver:

* a leading ``v`` is ignored;
* missing or non-numeric components count as ``0``;
* a pre-release sorts before the same release without a suffix;
* two pre-release suffixes are compared as plain strings.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from ahoy.version import __version__

SUPPORTED_API_VERSION: str = "v2"
"""The only ``ahoyapi`` value this engine accepts."""

DEVELOPMENT_VERSION: str = "development"
"""Reported by unreleased builds; treated as supporting every feature."""

FEATURE_SUPPORT: Mapping[str, str] = MappingProxyType(
    {
        "command_aliases": "v2.1.0",
        "optional_imports": "v2.2.0",
        "multiple_env_files": "v2.5.0",
        "schema_validation": "v2.6.0",
    }
)
"""Minimum engine version for each gated configuration feature."""


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------

def _split_version(version: str) -> tuple[tuple[int, int, int], str | None]:
    """Split *version* into numeric core parts and an optional pre-release."""
    version = version.removeprefix("v")
    core, sep, prerelease = version.partition("-")
    parts = core.split(".")
    numbers: list[int] = []
    for i in range(3):
        try:
            numbers.append(int(parts[i]) if i < len(parts) else 0)
        except ValueError:
            numbers.append(0)
    return (numbers[0], numbers[1], numbers[2]), (prerelease if sep else None)


def compare_versions(v1: str, v2: str) -> int:
    """Compare two version strings.

    Returns ``-1`` if *v1* < *v2*, ``0`` if equal and ``1`` if *v1* > *v2*.
    """
    core1, pre1 = _split_version(v1)
    core2, pre2 = _split_version(v2)

    if core1 != core2:
        return -1 if core1 < core2 else 1

    if pre1 is None and pre2 is None:
        return 0
    if pre1 is None:
        return 1
    if pre2 is None:
        return -1
    if pre1 == pre2:
        return 0
    return -1 if pre1 < pre2 else 1


def supports(
    current_version: str,
    feature: str,
    table: Mapping[str, str] = FEATURE_SUPPORT,
) -> bool:
    """Return whether *current_version* supports *feature*.

    Features absent from *table* are not gated.  Development builds and
    an empty version string support everything.
    """
    required = table.get(feature)
    if required is None:
        return True
    if current_version in (DEVELOPMENT_VERSION, ""):
        return True
    return compare_versions(current_version, required) >= 0


# ---------------------------------------------------------------------------
# Explicit engine context
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class EngineContext:
    """The engine version a configuration is being interpreted by.

    Parameters
    ----------
    version:
        Version string of the running (or simulated) engine.
    features:
        Feature → minimum version table.  Defaults to
        :data:`FEATURE_SUPPORT`.
    """

    version: str = DEVELOPMENT_VERSION
    features: Mapping[str, str] = field(default_factory=lambda: FEATURE_SUPPORT)

    @classmethod
    def current(cls, simulate_version: str | None = None) -> EngineContext:
        """Build the context for this process.

        *simulate_version*, when given, replaces the package version so a
        configuration can be checked against an older engine.
        """
        if simulate_version:
            return cls(version=simulate_version)
        return cls(version=f"v{__version__}" if __version__ else DEVELOPMENT_VERSION)

    def supports(self, feature: str) -> bool:
        return supports(self.version, feature, self.features)

    def required_version(self, feature: str) -> str:
        """Minimum version for *feature*, or ``""`` when it is not gated."""
        return self.features.get(feature, "")
