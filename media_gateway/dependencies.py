from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from media_gateway.config import Settings
from media_gateway.media.encoder import FFmpegEncoder
from media_gateway.media.storage import ScratchStorage
from media_gateway.services.artifact_delivery import ArtifactDeliveryService
from media_gateway.services.image_converter import ImageConverterService
from media_gateway.services.video_converter import VideoConverterService


@dataclass(frozen=True)
class ServiceContainer:
    settings: Settings
    storage: ScratchStorage
    video_converter: VideoConverterService
    artifact_delivery: ArtifactDeliveryService
    image_converter: ImageConverterService


def build_services(settings: Settings) -> ServiceContainer:
    """Wire every service against the same settings, and so the same scratch root."""
    storage = ScratchStorage(settings.scratch_directory)
    return ServiceContainer(
        settings=settings,
        storage=storage,
        video_converter=VideoConverterService(storage=storage, encoder=FFmpegEncoder(settings)),
        artifact_delivery=ArtifactDeliveryService(storage=storage),
        image_converter=ImageConverterService(),
    )


def _services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_settings_dependency(request: Request) -> Settings:
    return _services(request).settings


def get_video_converter_service(request: Request) -> VideoConverterService:
    return _services(request).video_converter


def get_artifact_delivery_service(request: Request) -> ArtifactDeliveryService:
    return _services(request).artifact_delivery


def get_image_converter_service(request: Request) -> ImageConverterService:
    return _services(request).image_converter
