import logging
from abc import abstractmethod
from collections.abc import Callable, Sequence
from contextlib import AbstractAsyncContextManager

from attrs import define, field

logger = logging.getLogger(__name__)

CommandEcho = Callable[[Sequence[str]], None]


@define
class Backend(AbstractAsyncContextManager):
    """Executes the external commands issued by operations.

    ``echo`` is called with every command before it is issued so that the
    CLI can show the commands on the console.
    """

    echo: CommandEcho | None = field(default=None, kw_only=True)

    async def __aenter__(self) -> "Backend":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    @property
    def executes_commands(self) -> bool:
        """False for backends that only report what they would run."""
        return True

    async def run_command(self, argv: Sequence[str], correlation_id: str) -> None:
        if self.echo is not None:
            self.echo(argv)
        await self._run_command(argv, correlation_id)

    @abstractmethod
    async def _run_command(self, argv: Sequence[str], correlation_id: str) -> None: ...
