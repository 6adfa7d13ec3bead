import logging
from pathlib import Path
from typing import Any

from attrs import frozen

from litdoc.core.build_settings import BuildSettings
from litdoc.infrastructure.backend import Backend
from litdoc.infrastructure.errors import TargetDirectoryError
from litdoc.infrastructure.operation import Operation

logger = logging.getLogger(__name__)


@frozen
class ConversionCommand:
    input_file: Path
    output_file: Path
    argv: tuple[str, ...]


def output_path_for(input_file: Path, output_extension: str) -> Path:
    """Append ``.<output_extension>`` to the full file name, e.g. a.md -> a.md.html."""
    return input_file.with_name(f"{input_file.name}.{output_extension}")


def conversion_commands(settings: BuildSettings) -> list[ConversionCommand]:
    """List the target directory once and build one converter call per file.

    The listing is not sorted and not recursive; subdirectories are skipped.
    """
    commands = []
    for entry in settings.target_dir.iterdir():
        if not entry.is_file():
            logger.debug(f"Skipping non-file entry '{entry}'")
            continue
        output_file = output_path_for(entry, settings.output_extension)
        argv = (settings.converter_executable, str(entry), "-o", str(output_file))
        commands.append(ConversionCommand(input_file=entry, output_file=output_file, argv=argv))
    return commands


@frozen
class ConvertFilesOperation(Operation):
    settings: BuildSettings

    async def execute(self, backend: Backend, *args: Any, **kwargs: Any) -> None:
        target_dir = self.settings.target_dir
        if not target_dir.is_dir():
            if not backend.executes_commands:
                logger.info(f"Target directory '{target_dir}' does not exist yet; nothing to list")
                return
            raise TargetDirectoryError(target_dir)

        commands = conversion_commands(self.settings)
        logger.info(f"Converting {len(commands)} file(s) in '{target_dir}'")
        for index, command in enumerate(commands, start=1):
            try:
                await backend.run_command(command.argv, f"convert:{index}")
            except Exception as e:
                logger.error(f"Error while converting '{command.input_file}': {e}")
                logger.debug(f"Error traceback for '{command.input_file}'", exc_info=e)
                raise
            logger.info(f"Converted '{command.input_file.name}' to '{command.output_file.name}'")
