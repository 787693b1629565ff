from __future__ import annotations

import logging
import os

from media_gateway.media.exceptions import ArtifactNotFoundError
from media_gateway.media.formats import content_type_for
from media_gateway.media.storage import ScratchStorage
from media_gateway.media.types import Artifact

logger = logging.getLogger(__name__)


class ArtifactDeliveryService:
    """Looks up converted artifacts by their generated name. Serving never deletes them."""

    def __init__(self, storage: ScratchStorage) -> None:
        self._storage = storage

    def fetch(self, filename: str) -> Artifact:
        path = self._storage.resolve_artifact(filename)
        if path is None:
            logger.warning("Rejected download request for invalid name %r", filename)
            raise ArtifactNotFoundError(f"Artifact '{filename}' not found")
        if not path.is_file() or not os.access(path, os.R_OK):
            logger.warning("File access failed for %s", filename)
            raise ArtifactNotFoundError(f"Artifact '{filename}' not found")
        return Artifact(path=path, filename=filename, media_type=content_type_for(filename))
