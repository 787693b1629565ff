from __future__ import annotations

import logging
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse

from media_gateway.config import Settings
from media_gateway.dependencies import (
    get_artifact_delivery_service,
    get_image_converter_service,
    get_settings_dependency,
    get_video_converter_service,
)
from media_gateway.media.exceptions import (
    ArtifactNotFoundError,
    InvalidConversionRequestError,
    UploadTooLargeError,
)
from media_gateway.media.types import ConversionResult, UploadedFile
from media_gateway.models import (
    ConvertedImageItem,
    ConvertedVideo,
    HelloResponse,
    ImageConversionResponse,
    VideoConversionResponse,
)
from media_gateway.services.artifact_delivery import ArtifactDeliveryService
from media_gateway.services.image_converter import ImageConverterService
from media_gateway.services.video_converter import VideoConverterService

logger = logging.getLogger(__name__)

router = APIRouter()
image_router = APIRouter(tags=["image"])
video_router = APIRouter(tags=["video"])
health_router = APIRouter(tags=["health"])

_CHUNK_SIZE = 1024 * 1024


async def _read_upload(upload: UploadFile, max_bytes: int) -> UploadedFile:
    buffer = bytearray()
    try:
        while True:
            chunk = await upload.read(_CHUNK_SIZE)
            if not chunk:
                break
            buffer.extend(chunk)
            if len(buffer) > max_bytes:
                raise UploadTooLargeError(
                    f"File '{upload.filename}' exceeds the {max_bytes // (1024 * 1024)} MB upload limit."
                )
    finally:
        await upload.close()
    return UploadedFile(
        filename=upload.filename or "upload",
        content_type=upload.content_type or "application/octet-stream",
        content=bytes(buffer),
    )


async def _read_uploads(uploads: Optional[List[UploadFile]], settings: Settings) -> List[UploadedFile]:
    files: List[UploadedFile] = []
    for upload in uploads or []:
        files.append(await _read_upload(upload, settings.max_upload_bytes))
    for index, item in enumerate(files, start=1):
        logger.info("File %d: %s, MIME: %s, Size: %d bytes", index, item.filename, item.content_type, item.size)
    return files


def _error_response(exc: InvalidConversionRequestError) -> JSONResponse:
    status_code = (
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
        if isinstance(exc, UploadTooLargeError)
        else status.HTTP_400_BAD_REQUEST
    )
    logger.info("Rejected request with %d: %s", status_code, exc)
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


def _to_converted_video(result: ConversionResult, base_url: str) -> ConvertedVideo:
    if result.succeeded:
        return ConvertedVideo(
            originalName=result.original_name,
            newName=result.new_name,
            mimeType=result.mime_type,
            downloadUrl=f"{base_url}{result.download_reference}",
            size=result.size,
        )
    return ConvertedVideo(
        originalName=result.original_name,
        newName=result.new_name,
        mimeType=result.mime_type,
        downloadUrl="#",
        error=result.error,
    )


@image_router.post("/convert", response_model=ImageConversionResponse, response_model_exclude_none=True)
async def convert_images(
    images: Optional[List[UploadFile]] = File(None),
    target_format: Optional[str] = Form(None, alias="format"),
    settings: Settings = Depends(get_settings_dependency),
    service: ImageConverterService = Depends(get_image_converter_service),
) -> Union[ImageConversionResponse, JSONResponse]:
    logger.info("POST /convert received, target format: %s", target_format)
    try:
        files = await _read_uploads(images, settings)
        converted = await service.convert_batch(files, target_format)
    except InvalidConversionRequestError as exc:
        return _error_response(exc)

    logger.info("POST /convert sending %d converted image file(s)", len(converted))
    return ImageConversionResponse(
        convertedFiles=[
            ConvertedImageItem(
                originalName=item.original_name,
                newName=item.new_name,
                mimeType=item.mime_type,
                data=item.data,
                error=item.error,
            )
            for item in converted
        ]
    )


@video_router.post("/convert-video", response_model=VideoConversionResponse, response_model_exclude_none=True)
async def convert_videos(
    request: Request,
    videos: Optional[List[UploadFile]] = File(None),
    target_format: Optional[str] = Form(None, alias="format"),
    settings: Settings = Depends(get_settings_dependency),
    service: VideoConverterService = Depends(get_video_converter_service),
) -> Union[VideoConversionResponse, JSONResponse]:
    logger.info("POST /convert-video received, target format: %s", target_format)
    try:
        files = await _read_uploads(videos, settings)
        results = await service.convert_batch(files, target_format)
    except InvalidConversionRequestError as exc:
        return _error_response(exc)

    base_url = str(request.base_url).rstrip("/")
    logger.info("POST /convert-video sending %d conversion result(s)", len(results))
    return VideoConversionResponse(
        convertedFiles=[_to_converted_video(result, base_url) for result in results],
    )


@video_router.get("/download-video/{filename}", response_class=FileResponse)
async def download_video(
    filename: str,
    service: ArtifactDeliveryService = Depends(get_artifact_delivery_service),
):
    try:
        artifact = service.fetch(filename)
    except ArtifactNotFoundError:
        return PlainTextResponse("File not found or not accessible.", status_code=status.HTTP_404_NOT_FOUND)

    logger.info("Sending file: %s", artifact.filename)
    return FileResponse(
        artifact.path,
        media_type=artifact.media_type,
        filename=artifact.filename,
    )


@health_router.get("/", response_class=PlainTextResponse)
async def health() -> str:
    return "Hello Media Service! Image Converter Backend is operational."


@health_router.get("/media/hello", response_model=HelloResponse)
async def hello() -> HelloResponse:
    return HelloResponse(message="Welcome to the Media Service API!")


router.include_router(image_router)
router.include_router(video_router)
router.include_router(health_router)
