"""Container image references.

Tags follow ``<version>[-<distro>-<release>]-r<revision>``, for example
``2.0.0-debian-10-r5``: a dotted version, an optional base-OS suffix and a
build revision that is bumped on every rebuild of the same version.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from autobump.update.version import SemVer, parse_version

__all__ = [
    "TAG_PATTERN",
    "ImageReference",
    "parse_image_reference",
    "parse_tag",
]

# Group-free form, for embedding into larger expressions.
TAG_PATTERN = r"\d+(?:\.\d+){0,3}(?:-[A-Za-z][A-Za-z0-9]*(?:-\d+)?)?-r\d+"

_TAG_RE = re.compile(
    r"^(?P<version>\d+(?:\.\d+){0,3})"
    r"(?:-(?P<suffix>[A-Za-z][A-Za-z0-9]*(?:-\d+)?))?"
    r"-r(?P<revision>\d+)$"
)
_NAME_RE = re.compile(r"^[A-Za-z0-9][\w./:-]*$")


@dataclass(frozen=True, slots=True)
class ImageReference:
    """A parsed ``name:tag`` image reference.

    ``tag`` keeps the text exactly as published so that writing the reference
    back never rewrites ``1.2`` into ``1.2.0``.
    """

    name: str
    version: SemVer
    revision: int
    tag_suffix: str | None
    tag: str

    @property
    def version_text(self) -> str:
        """Version part of the tag as published (``"2.0.0"``)."""
        return self.tag.split("-", 1)[0]

    @property
    def full_name(self) -> str:
        return f"{self.name}:{self.tag}"

    @property
    def short_name(self) -> str:
        """Last path segment of the image name (``bitnami/nginx`` -> ``nginx``)."""
        return self.name.rsplit("/", 1)[-1]

    def __str__(self) -> str:
        return self.full_name


def parse_tag(tag: str) -> tuple[SemVer, str | None, int] | None:
    """Split a tag into ``(version, suffix, revision)``; None if malformed."""
    m = _TAG_RE.match(tag.strip())
    if m is None:
        return None
    return (parse_version(m.group("version")), m.group("suffix"), int(m.group("revision")))


def parse_image_reference(text: str) -> ImageReference | None:
    """Parse ``name:version[-suffix]-r<revision>``; None if malformed."""
    name, sep, tag = text.strip().rpartition(":")
    if not sep or not name or _NAME_RE.match(name) is None:
        return None

    parsed = parse_tag(tag)
    if parsed is None:
        return None

    version, suffix, revision = parsed
    return ImageReference(
        name=name,
        version=version,
        revision=revision,
        tag_suffix=suffix,
        tag=tag,
    )
