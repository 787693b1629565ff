from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from media_gateway.media.exceptions import UnsupportedMediaFormatError

GENERIC_MIME_TYPE = "application/octet-stream"

VIDEO_FORMATS: Dict[str, str] = {
    "mp4": "video/mp4",
    "webm": "video/webm",
}

IMAGE_FORMATS: Dict[str, str] = {
    "png": "image/png",
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "webp": "image/webp",
}

# Pillow encoder names; "jpg" is only an alias.
PILLOW_FORMATS: Dict[str, str] = {
    "png": "PNG",
    "jpeg": "JPEG",
    "jpg": "JPEG",
    "webp": "WEBP",
}

_DEFAULT_VIDEO_CODEC = "libx264"
_VIDEO_CODECS: Dict[str, str] = {
    "webm": "libvpx",
}

VIDEO_FORMAT_ERROR = "Invalid or missing target video format. Supported formats: mp4, webm."
IMAGE_FORMAT_ERROR = "Invalid or missing target image format. Supported formats: png, jpeg, webp."


def normalize_video_format(target_format: Optional[str]) -> str:
    normalized = (target_format or "").strip().lower()
    if normalized not in VIDEO_FORMATS:
        raise UnsupportedMediaFormatError(VIDEO_FORMAT_ERROR)
    return normalized


def normalize_image_format(target_format: Optional[str]) -> str:
    normalized = (target_format or "").strip().lower()
    if normalized not in IMAGE_FORMATS:
        raise UnsupportedMediaFormatError(IMAGE_FORMAT_ERROR)
    return normalized


def video_codec_for(target_format: str) -> str:
    return _VIDEO_CODECS.get(target_format, _DEFAULT_VIDEO_CODEC)


def content_type_for(filename: str) -> str:
    """Map a served artifact's extension to its content type."""
    extension = Path(filename).suffix.lower().lstrip(".")
    return VIDEO_FORMATS.get(extension, GENERIC_MIME_TYPE)
