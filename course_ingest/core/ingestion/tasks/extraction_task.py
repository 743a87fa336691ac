"""
PDF text extraction task using the pdftotext subprocess (poppler-utils).

Streams the extractor's stdout in fixed-size blocks instead of buffering
one unbounded read, so large PDFs do not hit pipe/buffer limits.

Dependencies: asyncio subprocesses, codecs
System role: First stage of material ingestion pipeline
"""

import asyncio
import codecs
import logging
import os
from pathlib import Path

from course_ingest.core.exceptions import ExtractionFailed

logger = logging.getLogger(__name__)

_STDERR_LOG_LIMIT = 2000


class ExtractionTask:
    """Extract plain text from a PDF on local storage."""

    def __init__(
        self,
        executable: str = "pdftotext",
        extra_args: list[str] | None = None,
        read_block_size: int = 64 * 1024,
    ) -> None:
        """
        Initialize extraction task.

        The command run is ``[executable, *extra_args, file_path, "-"]``;
        ``-`` makes pdftotext write to stdout.

        Args:
            executable: Extraction executable
            extra_args: Arguments placed before the file path
            read_block_size: Bytes read from stdout per await

        Raises:
            ValueError: When read_block_size is not positive
        """
        if read_block_size <= 0:
            raise ValueError("read_block_size must be positive")

        self._executable = executable
        self._extra_args = list(extra_args or [])
        self._read_block_size = read_block_size

    async def extract(self, file_path: str) -> str:
        """
        Extract the full text of a PDF, pages in source order.

        Args:
            file_path: Path to the PDF on local storage

        Returns:
            str: Concatenated page text

        Raises:
            ExtractionFailed: File missing/unreadable, executable missing,
                or non-zero exit
        """
        path = Path(file_path)
        if not path.is_file() or not os.access(path, os.R_OK):
            raise ExtractionFailed(
                f"File not found or unreadable: {file_path}",
                file_path=file_path,
            )

        try:
            proc = await asyncio.create_subprocess_exec(
                self._executable,
                *self._extra_args,
                str(path),
                "-",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ExtractionFailed(
                f"Could not start {self._executable}: {e}",
                file_path=file_path,
            ) from e

        try:
            text, stderr_text = await asyncio.gather(
                self._read_stdout(proc.stdout),
                self._read_stderr(proc.stderr),
            )
            exit_code = await proc.wait()
        except asyncio.CancelledError:
            await self._kill(proc)
            raise

        if stderr_text:
            logger.warning(
                f"{__name__}:extract - {self._executable} stderr: "
                f"{stderr_text[:_STDERR_LOG_LIMIT]}",
                extra={"file_path": file_path},
            )

        if exit_code != 0:
            raise ExtractionFailed(
                f"{self._executable} failed with code {exit_code}",
                exit_code=exit_code,
                file_path=file_path,
            )

        logger.info(
            f"{__name__}:extract - Extracted {len(text)} characters",
            extra={"file_path": file_path},
        )
        return text

    async def _read_stdout(self, stream: asyncio.StreamReader) -> str:
        """Read stdout block by block, decoding UTF-8 across block boundaries."""
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        parts: list[str] = []
        while True:
            block = await stream.read(self._read_block_size)
            if not block:
                break
            parts.append(decoder.decode(block))
        parts.append(decoder.decode(b"", final=True))
        return "".join(parts)

    async def _read_stderr(self, stream: asyncio.StreamReader) -> str:
        data = await stream.read()
        return data.decode("utf-8", errors="replace").strip()

    async def _kill(self, proc: asyncio.subprocess.Process) -> None:
        """Kill and reap the subprocess after cancellation."""
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.wait()
        logger.warning(f"{__name__}:_kill - Extraction cancelled, {self._executable} killed")
