import asyncio
import os
from dataclasses import dataclass
from typing import Dict, List, Optional

from coreason_skip_automator.utils.logger import logger


@dataclass
class CommandResult:
    """Result of a shell command execution."""

    exit_code: int
    stdout: str
    stderr: str


class ShellError(RuntimeError):
    """Raised when a shell command fails."""

    def __init__(self, message: str, result: CommandResult):
        super().__init__(message)
        self.result = result


class AsyncShellExecutor:
    """Executes shell commands asynchronously."""

    def __init__(self, env: Optional[Dict[str, str]] = None, timeout: int = 60) -> None:
        self.env = env or {}
        self.timeout = timeout

    async def run(
        self,
        command: List[str],
        timeout: Optional[int] = None,
        check: bool = False,
        stdin: Optional[str] = None,
    ) -> CommandResult:
        """
        Executes a shell command asynchronously.

        Args:
            command: The command to execute as a list of arguments.
            timeout: Timeout in seconds. Defaults to the executor timeout.
            check: If True, raise ShellError if exit code is non-zero.
            stdin: Optional text written to the process standard input.

        Returns:
            CommandResult containing exit code, stdout, and stderr.
        """
        timeout = timeout or self.timeout
        logger.debug(f"Executing async: {' '.join(command)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.PIPE if stdin is not None else None,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env={**os.environ, **self.env} if self.env else None,
            )
        except Exception as e:
            result = CommandResult(exit_code=-1, stdout="", stderr=str(e))
            if check:
                raise ShellError(f"Failed to execute command: {e}", result) from e
            return result

        input_bytes = stdin.encode() if stdin is not None else None
        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(process.communicate(input_bytes), timeout=timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            result = CommandResult(exit_code=-1, stdout="", stderr=f"Command timed out after {timeout}s")
            if check:
                raise ShellError(f"Command timed out: {' '.join(command)}", result) from e
            return result

        # process.returncode is expected to be int after communicate()
        exit_code = process.returncode if process.returncode is not None else -1
        result = CommandResult(exit_code=exit_code, stdout=stdout_bytes.decode(), stderr=stderr_bytes.decode())

        if check and result.exit_code != 0:
            error_msg = f"Command failed with exit code {result.exit_code}"
            if result.stderr:
                error_msg += f": {result.stderr.strip()}"
            elif result.stdout:
                error_msg += f": {result.stdout.strip()}"
            raise ShellError(error_msg, result)

        return result
