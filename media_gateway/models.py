from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class ConvertedVideo(BaseModel):
    originalName: str
    newName: str
    mimeType: str
    downloadUrl: str = Field(..., description="Absolute download URL, or '#' when conversion failed")
    size: Optional[int] = Field(default=None, description="Output size in bytes; absent on failure")
    error: Optional[str] = None


class VideoConversionResponse(BaseModel):
    success: bool = True
    message: str = "Video conversion completed. Download links point to temporary server files."
    convertedFiles: List[ConvertedVideo] = Field(default_factory=list)


class ConvertedImageItem(BaseModel):
    originalName: str
    newName: str
    mimeType: str
    data: str = Field(..., description="Base64-encoded image, empty when conversion failed")
    error: Optional[str] = None


class ImageConversionResponse(BaseModel):
    success: bool = True
    convertedFiles: List[ConvertedImageItem] = Field(default_factory=list)


class HelloResponse(BaseModel):
    message: str
