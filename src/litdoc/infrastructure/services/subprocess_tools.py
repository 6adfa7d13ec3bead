import asyncio
import logging
import shlex
from collections.abc import Sequence

from litdoc.infrastructure.errors import LitdocError

TERMINATE_GRACE_PERIOD = 2.0

logger = logging.getLogger(__name__)


class SubprocessError(LitdocError):
    """Exception raised when subprocess execution fails."""

    pass


class SubprocessCrashError(SubprocessError):
    """Exception raised when subprocess exits with a non-zero exit code.

    This is a subclass of SubprocessError that specifically indicates the
    subprocess ran but exited with a non-zero return code, as opposed to
    other failure modes like timeout or a missing executable.

    Attributes:
        return_code: The non-zero exit code from the subprocess
        stderr: The stderr output from the subprocess
        stdout: The stdout output from the subprocess
    """

    def __init__(self, message: str, return_code: int, stderr: bytes = b"", stdout: bytes = b""):
        super().__init__(message)
        self.return_code = return_code
        self.stderr = stderr
        self.stdout = stdout


async def run_subprocess(
    cmd: Sequence[str],
    correlation_id: str,
    timeout: float | None = None,
    env: dict | None = None,
):
    """Run a subprocess command once and wait for it to finish.

    There is no retry: the first failure is raised to the caller.

    Args:
        cmd: Command and arguments to execute
        correlation_id: ID for tracking this operation in logs
        timeout: Seconds to wait for the process. None waits indefinitely.
        env: Environment variables for the subprocess. If None, inherits parent env.

    Returns:
        Tuple of (process, stdout, stderr)

    Raises:
        SubprocessError: If the executable cannot be started or the timeout expires
        SubprocessCrashError: If the subprocess exits with a non-zero code
    """
    command_line = shlex.join(cmd)
    logger.debug(f"{correlation_id}:Starting subprocess: {command_line}")

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env,
        )
    except (FileNotFoundError, PermissionError) as e:
        raise SubprocessError(
            f"{correlation_id}:Command could not be started: {e}\nCommand: {command_line}"
        ) from e

    logger.debug(f"{correlation_id}:Communicating with subprocess: {process.pid}")
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout)
    except asyncio.TimeoutError as e:
        logger.warning(f"{correlation_id}:Subprocess timed out after {timeout}s")
        await try_to_terminate_process(correlation_id, process)
        raise SubprocessError(
            f"{correlation_id}:Subprocess timed out after {timeout}s\nCommand: {command_line}"
        ) from e

    # After communicate() completes, returncode is guaranteed to be set
    assert process.returncode is not None
    if process.returncode != 0:
        raise SubprocessCrashError(
            f"{correlation_id}:Subprocess failed\n"
            f"Command: {command_line}\n"
            f"Exit code: {process.returncode}\n"
            f"Stderr: {stderr.decode(errors='replace')[:1000]}",
            return_code=process.returncode,
            stderr=stderr,
            stdout=stdout,
        )

    return process, stdout, stderr


async def try_to_terminate_process(correlation_id, process):
    """Attempt to gracefully terminate a subprocess, then force kill if needed.

    Args:
        correlation_id: ID for tracking this operation in logs
        process: The asyncio subprocess to terminate
    """
    try:
        process.terminate()
        try:
            await asyncio.wait_for(process.wait(), TERMINATE_GRACE_PERIOD)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            logger.debug(f"{correlation_id}:Process force killed")
    except ProcessLookupError:
        logger.debug(f"{correlation_id}:Process already terminated")
