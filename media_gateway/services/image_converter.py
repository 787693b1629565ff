from __future__ import annotations

import asyncio
import base64
import io
import logging
from pathlib import Path
from typing import List, Sequence

from PIL import Image, UnidentifiedImageError

from media_gateway.media.exceptions import ImageProcessingError, NoFilesUploadedError
from media_gateway.media.formats import (
    GENERIC_MIME_TYPE,
    IMAGE_FORMATS,
    PILLOW_FORMATS,
    normalize_image_format,
)
from media_gateway.media.types import ConvertedImage, UploadedFile

logger = logging.getLogger(__name__)


class ImageConverterService:
    async def convert_batch(
        self,
        files: Sequence[UploadedFile],
        target_format: str | None,
    ) -> List[ConvertedImage]:
        if not files:
            raise NoFilesUploadedError("No files uploaded.")
        normalized = normalize_image_format(target_format)

        results = await asyncio.gather(*(self._convert_one(upload, normalized) for upload in files))
        return list(results)

    async def _convert_one(self, upload: UploadedFile, target_format: str) -> ConvertedImage:
        try:
            encoded = await asyncio.to_thread(self._encode, upload.content, target_format)
        except ImageProcessingError as exc:
            logger.error("Failed to process %s: %s", upload.filename, exc)
            return ConvertedImage(
                original_name=upload.filename,
                new_name=f"{upload.filename}.error",
                mime_type=GENERIC_MIME_TYPE,
                data="",
                error=f"Failed to convert: {exc}",
            )

        new_name = f"{Path(upload.filename).stem}.{target_format}"
        logger.info("Converted %s to %s", upload.filename, new_name)
        return ConvertedImage(
            original_name=upload.filename,
            new_name=new_name,
            mime_type=IMAGE_FORMATS[target_format],
            data=base64.b64encode(encoded).decode("ascii"),
        )

    @staticmethod
    def _encode(content: bytes, target_format: str) -> bytes:
        pillow_format = PILLOW_FORMATS[target_format]
        try:
            with Image.open(io.BytesIO(content)) as image:
                image.load()
                if pillow_format == "JPEG" and image.mode not in ("RGB", "L"):
                    image = image.convert("RGB")
                buffer = io.BytesIO()
                image.save(buffer, format=pillow_format)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
            raise ImageProcessingError(str(exc) or exc.__class__.__name__) from exc
        return buffer.getvalue()
