import logging
from typing import Any

from attrs import frozen

from litdoc.core.build_settings import BuildSettings
from litdoc.infrastructure.backend import Backend
from litdoc.infrastructure.errors import SourceDirectoryError
from litdoc.infrastructure.operation import Operation

logger = logging.getLogger(__name__)


def compiler_command(settings: BuildSettings) -> list[str]:
    """Build the doc compiler invocation, site variables last."""
    argv = [settings.compiler_executable, *settings.expand(settings.compiler_args)]
    for key, value in settings.site_variables.items():
        argv.extend([f"--site.{key}", str(value)])
    return argv


@frozen
class CompileDocsOperation(Operation):
    settings: BuildSettings

    async def execute(self, backend: Backend, *args: Any, **kwargs: Any) -> None:
        source_dir = self.settings.source_dir
        if not source_dir.is_dir():
            raise SourceDirectoryError(source_dir)
        try:
            logger.info(f"Compiling '{source_dir}' to '{self.settings.target_dir}'")
            await backend.run_command(compiler_command(self.settings), "compile")
        except Exception as e:
            logger.error(f"Error while compiling '{source_dir}': {e}")
            logger.debug(f"Error traceback for '{source_dir}'", exc_info=e)
            raise
