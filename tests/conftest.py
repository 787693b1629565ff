import dataclasses
import stat
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from media_gateway.config import Settings
from media_gateway.main import create_app
from media_gateway.media.encoder import FFmpegEncoder
from media_gateway.media.storage import ScratchStorage
from media_gateway.services.video_converter import VideoConverterService

# Stands in for ffmpeg: behaviour is chosen by the first bytes of the input file.
FAKE_ENCODER = """\
#!{python}
import os
import sys
import time

started = time.time()
args = sys.argv[1:]
source = args[args.index("-i") + 1]
target = args[-1]
with open(source, "rb") as handle:
    data = handle.read()

if data.startswith(b"FAIL"):
    sys.stderr.write("Invalid data found when processing input\\n")
    sys.exit(1)
if data.startswith(b"NOISY"):
    sys.stderr.write("x" * 200000 + "\\nfinal line\\n")
    sys.exit(1)
if data.startswith(b"SLEEP"):
    time.sleep(30)
if data.startswith(b"SLOW"):
    time.sleep(0.5)
if data.startswith(b"EMPTY"):
    sys.exit(0)

with open(target, "wb") as handle:
    handle.write(b"converted:" + data)

timeline = os.environ.get("FAKE_FFMPEG_TIMELINE")
if timeline:
    with open(timeline, "a") as handle:
        handle.write(f"{{started}} {{time.time()}}\\n")
"""


@pytest.fixture
def fake_ffmpeg(tmp_path: Path) -> Path:
    script = tmp_path / "bin" / "ffmpeg"
    script.parent.mkdir()
    script.write_text(FAKE_ENCODER.format(python=sys.executable))
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def settings(tmp_path: Path, fake_ffmpeg: Path) -> Settings:
    return dataclasses.replace(
        Settings(),
        scratch_directory=tmp_path / "scratch",
        ffmpeg_path=str(fake_ffmpeg),
        conversion_timeout=10.0,
        max_concurrent_conversions=4,
        max_upload_mb=1,
        output_ttl_hours=0,
    )


@pytest.fixture
def storage(settings: Settings) -> ScratchStorage:
    scratch = ScratchStorage(settings.scratch_directory)
    scratch.ensure_root()
    return scratch


@pytest.fixture
def encoder(settings: Settings) -> FFmpegEncoder:
    return FFmpegEncoder(settings)


@pytest.fixture
def video_service(storage: ScratchStorage, encoder: FFmpegEncoder) -> VideoConverterService:
    return VideoConverterService(storage=storage, encoder=encoder)


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings))
