import logging
from collections.abc import Mapping
from pathlib import Path

from attrs import field, frozen

from litdoc.infrastructure.config import LitdocConfig, normalize_output_extension

logger = logging.getLogger(__name__)


def _as_tuple(value) -> tuple[str, ...]:
    return tuple(str(v) for v in value)


@frozen
class BuildSettings:
    """Resolved directories, tools and options for one build run."""

    source_dir: Path = field(converter=Path)
    target_dir: Path = field(converter=Path)
    compiler_executable: str = "mdoc"
    compiler_args: tuple[str, ...] = field(
        default=("--in", "{source_dir}", "--out", "{target_dir}"), converter=_as_tuple
    )
    site_variables: Mapping[str, str] = field(factory=dict, converter=dict)
    converter_executable: str = "pandoc"
    output_extension: str = "html"
    publish_command: tuple[str, ...] = field(default=(), converter=_as_tuple)
    command_timeout: float | None = None

    @classmethod
    def from_config(cls, config: LitdocConfig, **overrides) -> "BuildSettings":
        """Create settings from the configuration, applying non-None overrides.

        Override keys are the attribute names of this class.
        """
        values = dict(
            source_dir=config.paths.source_dir,
            target_dir=config.paths.target_dir,
            compiler_executable=config.compiler.executable,
            compiler_args=config.compiler.args,
            site_variables=config.compiler.site_variables,
            converter_executable=config.converter.executable,
            output_extension=config.converter.output_extension,
            publish_command=config.publish.command,
            command_timeout=config.execution.command_timeout,
        )
        unknown = set(overrides) - set(values)
        if unknown:
            raise TypeError(f"Unknown build settings: {', '.join(sorted(unknown))}")
        values.update({key: value for key, value in overrides.items() if value is not None})
        values["output_extension"] = normalize_output_extension(values["output_extension"])
        settings = cls(**values)
        logger.debug(f"Build settings: {settings!r}")
        return settings

    def expand(self, args: tuple[str, ...]) -> list[str]:
        """Substitute the {source_dir} and {target_dir} placeholders in ``args``."""
        return [
            arg.replace("{source_dir}", str(self.source_dir)).replace(
                "{target_dir}", str(self.target_dir)
            )
            for arg in args
        ]
