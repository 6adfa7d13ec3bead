import logging
import shlex
from collections.abc import Sequence

from attrs import define, field

from litdoc.infrastructure.backend import Backend

logger = logging.getLogger(__name__)


@define
class DryRunBackend(Backend):
    commands: list[tuple[str, ...]] = field(factory=list, kw_only=True)

    @property
    def executes_commands(self) -> bool:
        return False

    async def _run_command(self, argv: Sequence[str], correlation_id: str) -> None:
        logger.info(f"DryRunBackend:{correlation_id}:Skipping command:{shlex.join(argv)}")
        self.commands.append(tuple(argv))
