"""Subprocess execution for installer and PowerShell calls."""

import asyncio
from dataclasses import dataclass
from typing import Optional, Sequence
import logging


@dataclass(frozen=True)
class ProcessResult:
    """Completed process exit status and decoded output."""

    returncode: int
    stdout: str
    stderr: str


class ProcessRunner:
    """Runs external programs to completion.

    Every call blocks the session until the child exits; there is no
    cancellation.
    """

    POWERSHELL = "powershell.exe"

    def __init__(self):
        """Initialize process runner."""
        self.logger = logging.getLogger("upgrader.process")

    async def run(
        self, args: Sequence[str], timeout: Optional[float] = None
    ) -> ProcessResult:
        """Run a program and wait for it to exit.

        Args:
            args: Program and arguments (no shell interpretation)
            timeout: Seconds to wait before killing the child (None waits forever)

        Returns:
            ProcessResult with exit code and decoded stdout/stderr

        Raises:
            FileNotFoundError: If the program doesn't exist
            asyncio.TimeoutError: If the timeout expires
        """
        self.logger.debug(f"Running: {' '.join(args)}")

        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            self.logger.error(f"Timed out after {timeout}s: {args[0]}")
            raise

        result = ProcessResult(
            returncode=process.returncode,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
        )
        self.logger.debug(f"{args[0]} exited with code {result.returncode}")
        return result

    async def run_powershell(
        self, script: str, timeout: Optional[float] = 120.0
    ) -> ProcessResult:
        """Run a PowerShell snippet non-interactively.

        Args:
            script: PowerShell command text
            timeout: Seconds to wait (default 120)

        Returns:
            ProcessResult of powershell.exe
        """
        return await self.run(
            [
                self.POWERSHELL,
                "-NoProfile",
                "-NonInteractive",
                "-ExecutionPolicy",
                "Bypass",
                "-Command",
                script,
            ],
            timeout=timeout,
        )
