"""Bounded execution of the external extraction tool."""
from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal
from typing import Optional, Sequence

from socialsave.core.errors import (
    ExternalToolFailure,
    ExternalToolOutputTooLarge,
    ExternalToolTimeout,
)

logger = logging.getLogger(__name__)

_CHUNK_SIZE: int = 64 * 1024
_STDERR_TAIL: int = 500
# Upper bound on reaping after a kill; descendants that escaped the group can hold the pipes
_REAP_GRACE: float = 2.0


async def _read_bounded(stream: Optional[asyncio.StreamReader], limit: int) -> bytes:
    """Drain ``stream`` into memory, failing once more than ``limit`` bytes arrive."""

    if stream is None:
        return b""
    buf: bytearray = bytearray()
    while True:
        chunk: bytes = await stream.read(_CHUNK_SIZE)
        if not chunk:
            return bytes(buf)
        buf.extend(chunk)
        if len(buf) > limit:
            raise ExternalToolOutputTooLarge(limit)


def _stderr_tail(stderr: bytes) -> str:
    text: str = stderr.decode("utf-8", errors="replace").strip()
    return text[-_STDERR_TAIL:]


class ToolInvoker:
    """Run a command given as an argument vector and return its stdout.

    Notes
    -----
    - Uses ``asyncio.create_subprocess_exec``; arguments are never joined into a shell
      string, so URLs and format selectors reach the tool verbatim as single arguments.
    - stdout and stderr are drained concurrently to avoid pipe deadlocks, each bounded
      by ``max_output_bytes``.
    - On timeout or oversized output the child and every process in its group are
      killed, then the child is reaped before raising; partial output is discarded.
    - POSIX only: relies on ``start_new_session`` and ``os.killpg``.
    """

    @staticmethod
    async def _abort(
        process: asyncio.subprocess.Process,
        readers: list[asyncio.Future[bytes]],
    ) -> None:
        """Stop readers, kill the child's process group and reap the child.

        Notes
        -----
        - The child leads its own session, so the group kill also reaches helpers it
          spawned (yt-dlp runs ffmpeg with the inherited stdout and stderr).
        - Buffered pipe data is read and dropped so ``wait()`` cannot stall on a paused
          pipe. Draining and reaping are bounded by ``_REAP_GRACE``.
        """

        for reader in readers:
            reader.cancel()
        await asyncio.gather(*readers, return_exceptions=True)
        with contextlib.suppress(ProcessLookupError):
            os.killpg(process.pid, signal.SIGKILL)
        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.kill()

        async def _reap() -> None:
            for stream in (process.stdout, process.stderr):
                if stream is not None:
                    await stream.read()
            await process.wait()

        try:
            await asyncio.wait_for(_reap(), timeout=_REAP_GRACE)
        except asyncio.TimeoutError:
            logger.warning("External tool left running descendants", extra={"returncode": process.returncode})

    async def run(self, argv: Sequence[str], *, timeout: float, max_output_bytes: int) -> str:
        """Execute ``argv`` and return decoded stdout.

        Raises
        ------
        ExternalToolTimeout
            If the process does not finish within ``timeout`` seconds.
        ExternalToolOutputTooLarge
            If stdout or stderr exceeds ``max_output_bytes``.
        ExternalToolFailure
            If the executable is missing or exits with a non-zero status.
        """

        args: list[str] = [str(a) for a in argv]
        logger.debug("Spawning external tool", extra={"argv": args})
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as ex:
            raise ExternalToolFailure(f"Could not start {args[0]}: {ex}") from ex

        readers: list[asyncio.Future[bytes]] = [
            asyncio.ensure_future(_read_bounded(process.stdout, max_output_bytes)),
            asyncio.ensure_future(_read_bounded(process.stderr, max_output_bytes)),
        ]

        async def _communicate() -> tuple[bytes, bytes]:
            out, err = await asyncio.gather(*readers)
            await process.wait()
            return out, err

        completed: bool = False
        try:
            stdout, stderr = await asyncio.wait_for(_communicate(), timeout=timeout)
            completed = True
        except asyncio.TimeoutError:
            logger.warning("External tool timed out", extra={"argv": args})
            raise ExternalToolTimeout(timeout) from None
        finally:
            if not completed:
                await self._abort(process, readers)

        if process.returncode != 0:
            tail: str = _stderr_tail(stderr)
            logger.warning(
                "External tool exited with failure: %s",
                tail,
                extra={"argv": args, "returncode": process.returncode},
            )
            raise ExternalToolFailure(
                tail or None,
                returncode=process.returncode,
                stderr=tail,
            )

        return stdout.decode("utf-8", errors="replace")
