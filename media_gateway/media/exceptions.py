from __future__ import annotations

from typing import Optional


class MediaConversionError(Exception):
    """Base error for media conversion operations."""


class InvalidConversionRequestError(MediaConversionError):
    """Raised when a batch is rejected before any work starts."""


class NoFilesUploadedError(InvalidConversionRequestError):
    """Raised when a conversion request carries no files."""


class UnsupportedMediaFormatError(InvalidConversionRequestError):
    """Raised when an unsupported target format is requested."""


class UploadTooLargeError(InvalidConversionRequestError):
    """Raised when an uploaded file exceeds the configured size limit."""


class MediaProcessingError(MediaConversionError):
    """Raised when ffmpeg or file processing fails for a single file."""


class EncoderSpawnError(MediaProcessingError):
    """Raised when the encoder process cannot be started at all."""


class EncoderFailedError(MediaProcessingError):
    """Raised when the encoder exits with a non-zero status."""

    def __init__(self, returncode: Optional[int], stderr: str) -> None:
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr or "Unknown FFmpeg error"
        super().__init__(f"FFmpeg conversion failed with code {returncode}: {detail}")


class EncoderTimeoutError(MediaProcessingError):
    """Raised when the encoder does not finish within the configured deadline."""


class OutputMissingError(MediaProcessingError):
    """Raised when the encoder reports success but produced no usable file."""


class ImageProcessingError(MediaProcessingError):
    """Raised when an image cannot be decoded or re-encoded."""


class ArtifactNotFoundError(MediaConversionError):
    """Raised when a requested output artifact does not exist or is not addressable."""
