from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def _as_bool(value: Optional[str], *, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _as_int(value: Optional[str], *, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Optional[str], *, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


DEFAULT_SCRATCH_DIR = Path(tempfile.gettempdir()) / "media-gateway"


@dataclass(frozen=True)
class Settings:
    scratch_directory: Path = Path(os.getenv("SCRATCH_DIR", str(DEFAULT_SCRATCH_DIR)))
    frontend_url: str = os.getenv("FRONTEND_URL", "http://localhost:3000")
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = _as_int(os.getenv("PORT"), default=3001)
    reload: bool = _as_bool(os.getenv("UVICORN_RELOAD"), default=False)
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    ffmpeg_path: str = os.getenv("FFMPEG_PATH", "ffmpeg")
    video_preset: str = os.getenv("VIDEO_PRESET", "veryfast")
    video_crf: int = _as_int(os.getenv("VIDEO_CRF"), default=28)
    max_concurrent_conversions: int = _as_int(os.getenv("MAX_CONCURRENT_CONVERSIONS"), default=4)
    conversion_timeout: float = _as_float(os.getenv("CONVERSION_TIMEOUT_SECONDS"), default=600.0)
    encoder_stderr_limit: int = _as_int(os.getenv("ENCODER_STDERR_LIMIT"), default=64 * 1024)
    max_upload_mb: int = _as_int(os.getenv("MAX_UPLOAD_MB"), default=100)
    output_ttl_hours: float = _as_float(os.getenv("OUTPUT_TTL_HOURS"), default=24.0)

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @property
    def output_ttl_seconds(self) -> float:
        return self.output_ttl_hours * 3600


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        settings = Settings()
        scratch_dir = settings.scratch_directory.expanduser().resolve()
        scratch_dir.mkdir(parents=True, exist_ok=True)
        object.__setattr__(settings, "scratch_directory", scratch_dir)
        _settings = settings
    return _settings
