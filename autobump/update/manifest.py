"""Image references inside a manifest document.

The manifest (typically a chart's ``values.yaml``) is edited as text: only
the ``name:tag`` occurrence of one image is rewritten, so comments, key order
and quoting elsewhere in the document are untouched.
"""

from __future__ import annotations

import re
from pathlib import Path

from autobump.core.result import Err, Ok, Result
from autobump.update.errors import ManifestError
from autobump.update.image import TAG_PATTERN, ImageReference

__all__ = ["ManifestStore"]


def _reference_re(image_name: str) -> re.Pattern[str]:
    # ``bitnami/app`` must not match inside ``bitnami/app-server``, and ``app``
    # must not match ``bitnami/app``. A registry host prefix
    # (``docker.io/bitnami/app``) is allowed and kept on rewrite.
    return re.compile(
        r"(?<![\w./:-])"
        r"(?P<registry>(?:[\w-]+\.[\w.-]+|localhost)(?::\d+)?/)?"
        + re.escape(image_name)
        + r":(?P<tag>"
        + TAG_PATTERN
        + r")(?![\w.-])"
    )


class ManifestStore:
    """Reads and rewrites image tags of a single manifest file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read(self) -> Result[str, ManifestError]:
        try:
            return Ok(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return Err(ManifestError(path=self.path, reason="manifest not found"))
        except (OSError, UnicodeDecodeError) as e:
            return Err(ManifestError(path=self.path, reason=f"cannot read manifest: {e}"))

    def read_current_tag(self, image_name: str) -> Result[str | None, ManifestError]:
        """Tag currently pinned for ``image_name``.

        Returns:
            Ok(tag) for the first occurrence, Ok(None) when the image is not
            referenced at all, Err if the file cannot be read.
        """
        text = self._read()
        if isinstance(text, Err):
            return text

        m = _reference_re(image_name).search(text.value)
        return Ok(m.group("tag") if m else None)

    def write_tag(self, image_name: str, new_full_name: str) -> Result[bool, ManifestError]:
        """Replace every ``image_name:<tag>`` with ``new_full_name``.

        The file is written in one call, after the substitution succeeded.

        Returns:
            Ok(True) if the file changed, Ok(False) if it already carried
            ``new_full_name``.
        """
        text = self._read()
        if isinstance(text, Err):
            return text

        updated, count = _reference_re(image_name).subn(
            lambda m: (m.group("registry") or "") + new_full_name, text.value
        )
        if count == 0:
            return Err(
                ManifestError(
                    path=self.path,
                    reason=f"image not referenced by this manifest: {image_name}",
                )
            )
        if updated == text.value:
            return Ok(False)

        try:
            self.path.write_text(updated, encoding="utf-8")
        except OSError as e:
            return Err(ManifestError(path=self.path, reason=f"cannot write manifest: {e}"))
        return Ok(True)

    def set_component_image(self, ref: ImageReference) -> Result[bool, ManifestError]:
        return self.write_tag(ref.name, ref.full_name)
