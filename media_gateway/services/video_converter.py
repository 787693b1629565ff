from __future__ import annotations

import asyncio
import logging
from typing import List, Sequence

from media_gateway.media.encoder import FFmpegEncoder
from media_gateway.media.exceptions import MediaProcessingError, NoFilesUploadedError
from media_gateway.media.formats import VIDEO_FORMATS, normalize_video_format
from media_gateway.media.storage import ScratchStorage
from media_gateway.media.types import ConversionResult, UploadedFile

logger = logging.getLogger(__name__)

DOWNLOAD_ROUTE = "/download-video"


def download_reference_for(filename: str) -> str:
    return f"{DOWNLOAD_ROUTE}/{filename}"


class VideoConverterService:
    def __init__(self, storage: ScratchStorage, encoder: FFmpegEncoder) -> None:
        self._storage = storage
        self._encoder = encoder

    async def convert_batch(
        self,
        files: Sequence[UploadedFile],
        target_format: str | None,
    ) -> List[ConversionResult]:
        """Convert every file to ``target_format``.

        The request is validated before any file is touched. After that, a failing
        file yields a failed result in its slot and never fails the batch.
        """
        if not files:
            raise NoFilesUploadedError("No video files uploaded.")
        normalized = normalize_video_format(target_format)

        logger.info("Converting %d video file(s) to %s", len(files), normalized)
        results = await asyncio.gather(*(self._convert_one(upload, normalized) for upload in files))
        return list(results)

    async def _convert_one(self, upload: UploadedFile, target_format: str) -> ConversionResult:
        job = self._storage.allocate(upload.filename, target_format)
        logger.debug(
            "Job %s: %s (%s, %d bytes) -> %s",
            job.identifier,
            upload.filename,
            upload.content_type,
            upload.size,
            job.output_path.name,
        )
        try:
            size = await self._encoder.run(job, upload.content)
        except (MediaProcessingError, OSError, ValueError) as exc:
            logger.error("Failed to process %s: %s", upload.filename, exc)
            self._storage.cleanup(job.output_path)
            return ConversionResult.failure(upload.filename, f"Failed to convert: {exc}")
        finally:
            self._storage.cleanup(job.input_path)

        new_name = job.output_path.name
        logger.info("Converted %s to %s (%d bytes)", upload.filename, new_name, size)
        return ConversionResult.success(
            original_name=upload.filename,
            new_name=new_name,
            mime_type=VIDEO_FORMATS[target_format],
            download_reference=download_reference_for(new_name),
            size=size,
        )
