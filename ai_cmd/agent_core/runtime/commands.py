"""Shell command execution.

``CommandRunner`` is the host's command-execution collaborator. It runs one
shell command at a time in the working directory and captures its output.
"""

import asyncio
import os
import time
from typing import Optional

from pydantic import BaseModel, Field

from ai_cmd.core.logging_config import get_logger

logger = get_logger(__name__)


class CommandResult(BaseModel):
    """Outcome of a shell command."""

    success: bool = Field(..., description="Whether the command exited with status 0")
    command: str = Field(..., description="Command that was executed")
    exit_code: Optional[int] = Field(None, description="Command exit code")
    stdout: str = Field(default="", description="Standard output")
    stderr: str = Field(default="", description="Standard error")
    error: Optional[str] = Field(None, description="Error message if the command could not run")
    duration_seconds: Optional[float] = Field(None, description="Execution duration in seconds")


class CommandRunner:
    """Runs shell commands with ``asyncio`` subprocesses."""

    def __init__(self, *, timeout: float = 300.0, cwd: Optional[str] = None) -> None:
        """
        Args:
            timeout: Seconds before a command is killed.
            cwd: Working directory; defaults to the process working directory at call time.
        """
        self._timeout = timeout
        self._cwd = cwd

    async def run(self, command: str) -> CommandResult:
        """Execute ``command`` through the shell.

        Never raises for a failing command; inspect ``CommandResult.success``.
        """
        start_time = time.time()
        cwd = self._cwd or os.getcwd()

        if not os.path.isdir(cwd):
            error_msg = f"Working directory not found: {cwd}"
            logger.error(error_msg)
            return CommandResult(success=False, command=command, error=error_msg)

        logger.info(f"Executing command: {command} (cwd={cwd})")

        try:
            process = await asyncio.create_subprocess_shell(
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
            )
        except OSError as e:
            error_msg = f"Error starting command: {e}"
            logger.error(error_msg)
            return CommandResult(
                success=False, command=command, error=error_msg, duration_seconds=time.time() - start_time
            )

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(process.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            error_msg = f"Command execution timeout after {self._timeout} seconds"
            logger.error(error_msg)
            return CommandResult(
                success=False,
                command=command,
                exit_code=process.returncode,
                error=error_msg,
                duration_seconds=time.time() - start_time,
            )

        stdout = stdout_bytes.decode("utf-8", errors="replace") if stdout_bytes else ""
        stderr = stderr_bytes.decode("utf-8", errors="replace") if stderr_bytes else ""
        exit_code = process.returncode
        duration = time.time() - start_time

        logger.info(
            f"Command completed with exit code {exit_code} "
            f"(duration: {duration:.2f}s, stdout: {len(stdout)} chars, stderr: {len(stderr)} chars)"
        )

        return CommandResult(
            success=exit_code == 0,
            command=command,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            duration_seconds=duration,
        )
