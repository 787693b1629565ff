from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from media_gateway.config import Settings
from media_gateway.media.exceptions import (
    EncoderFailedError,
    EncoderSpawnError,
    EncoderTimeoutError,
    OutputMissingError,
)
from media_gateway.media.types import ConversionJob

logger = logging.getLogger(__name__)


class FFmpegEncoder:
    """Runs one ffmpeg transcode per job as a child process.

    At most ``max_concurrent_conversions`` encoders run at once across all requests;
    further jobs wait for a free slot. Each run is bounded by ``conversion_timeout``.
    """

    _STDERR_CHUNK_SIZE = 4096

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._slots = asyncio.Semaphore(max(1, settings.max_concurrent_conversions))

    def build_command(self, job: ConversionJob) -> List[str]:
        return [
            self._settings.ffmpeg_path,
            "-i",
            str(job.input_path),
            "-c:v",
            job.codec,
            "-preset",
            self._settings.video_preset,
            "-crf",
            str(self._settings.video_crf),
            "-threads",
            "0",
            "-y",
            str(job.output_path),
        ]

    async def run(self, job: ConversionJob, content: bytes) -> int:
        """Write ``content`` to the job's input path, transcode it and return the output size."""
        await asyncio.to_thread(self._write_input, job.input_path, content)
        logger.debug("Saved input file to %s", job.input_path)

        async with self._slots:
            await self._encode(job)
        return self._output_size(job.output_path)

    async def _encode(self, job: ConversionJob) -> None:
        command = self.build_command(job)
        logger.info("Running command: %s", " ".join(command))
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise EncoderSpawnError(f"Failed to start FFmpeg: {exc}") from exc

        stderr_task = asyncio.create_task(self._collect_stderr(process.stderr))
        try:
            await asyncio.wait_for(process.wait(), timeout=self._timeout)
        except asyncio.TimeoutError:
            self._kill(process)
            await process.wait()
            stderr_task.cancel()
            raise EncoderTimeoutError(
                f"FFmpeg did not finish within {self._settings.conversion_timeout:g} seconds"
            ) from None
        except asyncio.CancelledError:
            self._kill(process)
            stderr_task.cancel()
            raise

        stderr = await stderr_task
        if process.returncode != 0:
            logger.error(
                "Conversion of %s failed with code %s. FFmpeg output: %s",
                job.input_path.name,
                process.returncode,
                stderr,
            )
            raise EncoderFailedError(process.returncode, stderr)
        logger.info("Conversion successful for %s", job.input_path.name)

    async def _collect_stderr(self, stream: Optional[asyncio.StreamReader]) -> str:
        if stream is None:
            return ""
        limit = max(0, self._settings.encoder_stderr_limit)
        buffer = bytearray()
        while True:
            chunk = await stream.read(self._STDERR_CHUNK_SIZE)
            if not chunk:
                break
            buffer.extend(chunk)
            # keep only the tail, where ffmpeg reports the failure
            if len(buffer) > limit:
                del buffer[: len(buffer) - limit]
        return buffer.decode(errors="replace").strip()

    @property
    def _timeout(self) -> Optional[float]:
        timeout = self._settings.conversion_timeout
        return timeout if timeout > 0 else None

    @staticmethod
    def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass

    @staticmethod
    def _write_input(destination: Path, content: bytes) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(content)

    @staticmethod
    def _output_size(path: Path) -> int:
        try:
            size = path.stat().st_size
        except OSError as exc:
            raise OutputMissingError(f"FFmpeg reported success but output is missing: {exc}") from exc
        if size == 0:
            raise OutputMissingError("FFmpeg reported success but output is empty")
        return size
