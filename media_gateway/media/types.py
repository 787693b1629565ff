from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from media_gateway.media.formats import GENERIC_MIME_TYPE


@dataclass(frozen=True)
class UploadedFile:
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class ConversionJob:
    identifier: str
    input_path: Path
    output_path: Path
    target_format: str
    codec: str


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of one job. Successful results carry a download reference and size,
    failed ones an error message; never both."""

    original_name: str
    new_name: str
    mime_type: str
    download_reference: Optional[str] = None
    size: Optional[int] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls,
        original_name: str,
        new_name: str,
        mime_type: str,
        download_reference: str,
        size: int,
    ) -> "ConversionResult":
        return cls(
            original_name=original_name,
            new_name=new_name,
            mime_type=mime_type,
            download_reference=download_reference,
            size=size,
        )

    @classmethod
    def failure(cls, original_name: str, error: str) -> "ConversionResult":
        return cls(
            original_name=original_name,
            new_name=f"{original_name}.error",
            mime_type=GENERIC_MIME_TYPE,
            error=error,
        )


@dataclass(frozen=True)
class ConvertedImage:
    original_name: str
    new_name: str
    mime_type: str
    data: str
    error: Optional[str] = None


@dataclass(frozen=True)
class Artifact:
    path: Path
    filename: str
    media_type: str
