from __future__ import annotations

import logging
import re
import time
import uuid
from pathlib import Path
from typing import Optional

from media_gateway.media.formats import video_codec_for
from media_gateway.media.types import ConversionJob

logger = logging.getLogger(__name__)

_ARTIFACT_NAME = re.compile(r"[0-9a-f]{32}_output\.[a-z0-9]{1,8}")
_INPUT_NAME = re.compile(r"[0-9a-f]{32}_input(\.[A-Za-z0-9]{1,16})?")
_SAFE_SUFFIX = re.compile(r"\.[A-Za-z0-9]{1,16}")


class ScratchStorage:
    """Allocates job paths under a single scratch root shared with the download route."""

    def __init__(self, root: Path) -> None:
        self._root = root.expanduser().resolve()

    @property
    def root(self) -> Path:
        return self._root

    def ensure_root(self) -> None:
        self._root.mkdir(parents=True, exist_ok=True)

    def allocate(self, original_filename: str, target_format: str) -> ConversionJob:
        identifier = uuid.uuid4().hex
        suffix = self._safe_suffix(original_filename)
        return ConversionJob(
            identifier=identifier,
            input_path=self._root / f"{identifier}_input{suffix}",
            output_path=self._root / f"{identifier}_output.{target_format}",
            target_format=target_format,
            codec=video_codec_for(target_format),
        )

    def resolve_artifact(self, filename: str) -> Optional[Path]:
        """Return the path for a generated output name, or ``None`` if the name is not one."""
        if not _ARTIFACT_NAME.fullmatch(filename or ""):
            return None
        candidate = (self._root / filename).resolve()
        if candidate.parent != self._root:
            return None
        return candidate

    def sweep_expired(self, max_age_seconds: float, *, include_inputs: bool = False) -> int:
        """Delete generated artifacts older than ``max_age_seconds``.

        Inputs belong to jobs that may still be running, so they are only swept when
        ``include_inputs`` is set, which is safe at startup before any job exists.
        """
        if not self._root.exists():
            return 0
        cutoff = time.time() - max_age_seconds
        removed = 0
        for path in self._root.iterdir():
            try:
                if not self._is_sweepable(path.name, include_inputs):
                    continue
                if path.is_file() and path.stat().st_mtime < cutoff:
                    path.unlink()
                    removed += 1
            except OSError as exc:
                logger.warning("Failed to remove expired scratch file %s: %s", path, exc)
        if removed:
            logger.info("Removed %d expired scratch file(s) from %s", removed, self._root)
        return removed

    @staticmethod
    def _safe_suffix(original_filename: str) -> str:
        suffix = Path(original_filename or "").suffix
        return suffix if _SAFE_SUFFIX.fullmatch(suffix) else ""

    @staticmethod
    def _is_sweepable(name: str, include_inputs: bool) -> bool:
        if _ARTIFACT_NAME.fullmatch(name):
            return True
        return include_inputs and _INPUT_NAME.fullmatch(name) is not None

    @staticmethod
    def cleanup(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.error("Error cleaning up %s: %s", path, exc)
        else:
            logger.debug("Cleaned up %s", path)
