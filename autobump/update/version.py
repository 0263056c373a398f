from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

__all__ = [
    "SemVer",
    "VersionSeries",
    "compare_versions",
    "parse_version",
]

_COMPARED_SEGMENTS = 4

VersionSeries: TypeAlias = tuple[int, int]


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int

    @property
    def series(self) -> VersionSeries:
        """``(major, minor)``: the release line this version belongs to."""
        return (self.major, self.minor)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def _segments(version: str) -> list[int]:
    # Missing or non-numeric segments count as zero.
    parts = version.strip().split(".")
    out: list[int] = []
    for i in range(_COMPARED_SEGMENTS):
        raw = parts[i].strip() if i < len(parts) else ""
        out.append(int(raw) if raw.isascii() and raw.isdigit() else 0)
    return out


def parse_version(version: str) -> SemVer:
    """Lenient parse: ``"1.2"`` is ``1.2.0`` and ``"1.x.3"`` is ``1.0.3``."""
    major, minor, patch, _ = _segments(version)
    return SemVer(major, minor, patch)


def compare_versions(a: str, b: str) -> int:
    """Three-way compare of dotted versions.

    Both sides are padded with zero segments up to four before comparing
    left to right. Never raises.

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b.
    """
    for left, right in zip(_segments(a), _segments(b)):
        if left < right:
            return -1
        if left > right:
            return 1
    return 0
