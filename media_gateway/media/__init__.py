from __future__ import annotations

from .encoder import FFmpegEncoder
from .exceptions import (
    ArtifactNotFoundError,
    EncoderFailedError,
    EncoderSpawnError,
    EncoderTimeoutError,
    ImageProcessingError,
    InvalidConversionRequestError,
    MediaConversionError,
    MediaProcessingError,
    NoFilesUploadedError,
    OutputMissingError,
    UnsupportedMediaFormatError,
    UploadTooLargeError,
)
from .storage import ScratchStorage
from .types import Artifact, ConversionJob, ConversionResult, ConvertedImage, UploadedFile

__all__ = [
    "Artifact",
    "ArtifactNotFoundError",
    "ConversionJob",
    "ConversionResult",
    "ConvertedImage",
    "EncoderFailedError",
    "EncoderSpawnError",
    "EncoderTimeoutError",
    "FFmpegEncoder",
    "ImageProcessingError",
    "InvalidConversionRequestError",
    "MediaConversionError",
    "MediaProcessingError",
    "NoFilesUploadedError",
    "OutputMissingError",
    "ScratchStorage",
    "UnsupportedMediaFormatError",
    "UploadTooLargeError",
    "UploadedFile",
]
