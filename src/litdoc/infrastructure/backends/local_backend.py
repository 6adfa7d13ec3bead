import logging
from collections.abc import Sequence

from attrs import define, field

from litdoc.infrastructure.backend import Backend
from litdoc.infrastructure.services.subprocess_tools import run_subprocess

logger = logging.getLogger(__name__)


@define
class LocalBackend(Backend):
    """Runs every command as a local subprocess, one at a time."""

    timeout: float | None = field(default=None, kw_only=True)

    async def _run_command(self, argv: Sequence[str], correlation_id: str) -> None:
        process, stdout, stderr = await run_subprocess(argv, correlation_id, timeout=self.timeout)
        logger.debug(f"{correlation_id}:Return code: {process.returncode}")
        if stdout:
            logger.debug(f"{correlation_id}:stdout:{stdout.decode(errors='replace')}")
        if stderr:
            logger.debug(f"{correlation_id}:stderr:{stderr.decode(errors='replace')}")
