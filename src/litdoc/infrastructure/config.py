"""Configuration management for litdoc.

This module provides a unified configuration system that supports:
- Configuration files in TOML format
- Environment variables
- Multiple configuration file locations (project, user, system)
- Type-safe configuration using Pydantic

Configuration Priority (highest to lowest):
1. Environment variables
2. Project configuration file (.litdoc/config.toml or litdoc.toml)
3. User configuration file (~/.config/litdoc/config.toml)
4. System configuration file (/etc/litdoc/config.toml)
5. Default values

Environment Variable Naming:
- Nested fields: LITDOC_<SECTION>__<FIELD> (e.g., LITDOC_PATHS__TARGET_DIR)
- External tools: <TOOL_NAME>_EXECUTABLE (e.g., PANDOC_EXECUTABLE, MDOC_EXECUTABLE)
"""

import logging
import os
from pathlib import Path
from typing import Any

import platformdirs
from pydantic import BaseModel, Field, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

logger = logging.getLogger(__name__)


def normalize_output_extension(value: str) -> str:
    """Strip surrounding whitespace and a leading dot; reject empty extensions."""
    extension = str(value).strip().lstrip(".")
    if not extension:
        raise ValueError("Output extension must not be empty")
    return extension


class LegacyEnvSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source for tool environment variables.

    This source handles environment variables that don't follow the LITDOC_
    prefix convention, such as PANDOC_EXECUTABLE and MDOC_EXECUTABLE.
    """

    LEGACY_ENV_VARS = {
        ("compiler", "executable"): "MDOC_EXECUTABLE",
        ("converter", "executable"): "PANDOC_EXECUTABLE",
    }

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        """Get field value from environment variables."""
        raise ValueError(f"Field {field_name} not found in legacy environment")

    def __call__(self) -> dict[str, Any]:
        """Build settings from legacy environment variables."""
        data: dict[str, Any] = {}

        for field_path, env_var in self.LEGACY_ENV_VARS.items():
            env_value = os.getenv(env_var)

            if env_value is not None:
                current = data
                for part in field_path[:-1]:
                    current = current.setdefault(part, {})
                current[field_path[-1]] = env_value

        return data


class PathsConfig(BaseModel):
    """Path-related configuration."""

    source_dir: str = Field(
        default="docs",
        description="Directory containing the literate markdown sources",
    )

    target_dir: str = Field(
        default="target/mdoc",
        description="Directory the doc compiler writes to and the converter reads from",
    )


class CompilerConfig(BaseModel):
    """Literate-doc compiler configuration."""

    executable: str = Field(
        default="mdoc",
        description="Doc compiler executable",
    )

    args: list[str] = Field(
        default_factory=lambda: ["--in", "{source_dir}", "--out", "{target_dir}"],
        description="Compiler arguments; {source_dir} and {target_dir} are substituted",
    )

    site_variables: dict[str, str] = Field(
        default_factory=dict,
        description="Variables passed to the compiler as --site.<KEY> <VALUE>",
    )


class ConverterConfig(BaseModel):
    """Document converter configuration."""

    executable: str = Field(
        default="pandoc",
        description="Document converter executable",
    )

    output_extension: str = Field(
        default="html",
        description="Extension appended to every converted file",
    )

    @field_validator("output_extension")
    @classmethod
    def validate_output_extension(cls, v: str) -> str:
        return normalize_output_extension(v)


class PublishConfig(BaseModel):
    """Publish step configuration."""

    command: list[str] = Field(
        default_factory=list,
        description="Publish command; empty means there is nothing to publish",
    )


class ExecutionConfig(BaseModel):
    """Subprocess execution configuration."""

    command_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds to wait for each external command (unset waits indefinitely)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    log_file: str = Field(
        default="",
        description="Log file path (empty uses the system log directory)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}, got {v}")
        return v_upper


class LitdocConfig(BaseSettings):
    """Main litdoc configuration.

    This class manages all configuration for litdoc, loading from multiple
    sources in priority order: environment variables > project config > user
    config > system config > defaults.

    Environment Variables:
        - LITDOC_PATHS__SOURCE_DIR: Markdown source directory
        - LITDOC_PATHS__TARGET_DIR: Compiler output directory
        - LITDOC_CONVERTER__OUTPUT_EXTENSION: Extension of converted files
        - LITDOC_LOGGING__LOG_LEVEL: Logging level
        - MDOC_EXECUTABLE: Doc compiler executable (no LITDOC_ prefix)
        - PANDOC_EXECUTABLE: Converter executable (no LITDOC_ prefix)
    """

    model_config = SettingsConfigDict(
        env_prefix="LITDOC_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    paths: PathsConfig = Field(
        default_factory=PathsConfig,
        description="Path-related configuration",
    )

    compiler: CompilerConfig = Field(
        default_factory=CompilerConfig,
        description="Literate-doc compiler configuration",
    )

    converter: ConverterConfig = Field(
        default_factory=ConverterConfig,
        description="Document converter configuration",
    )

    publish: PublishConfig = Field(
        default_factory=PublishConfig,
        description="Publish step configuration",
    )

    execution: ExecutionConfig = Field(
        default_factory=ExecutionConfig,
        description="Subprocess execution configuration",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize the sources and their priority for settings.

        Priority order (highest to lowest):
        1. Environment variables (both LITDOC_ prefixed and legacy)
        2. Project configuration file
        3. User configuration file
        4. System configuration file
        5. Init settings (programmatic)
        """
        config_files = find_config_files()

        # Lowest priority first; reversed when returned
        toml_sources = []
        for kind in ("system", "user", "project"):
            config_file = config_files[kind]
            if config_file:
                toml_sources.append(TomlConfigSettingsSource(settings_cls, toml_file=config_file))
                logger.debug(f"Loaded {kind} config: {config_file}")

        legacy_env_settings = LegacyEnvSettingsSource(settings_cls)

        return (
            env_settings,
            legacy_env_settings,
            *reversed(toml_sources),
            init_settings,
        )


def find_config_files() -> dict[str, Path | None]:
    """Find configuration files in standard locations.

    Returns:
        Dictionary with keys 'system', 'user', 'project', each containing
        a Path to the config file if it exists, or None otherwise.
    """
    config_files: dict[str, Path | None] = {
        "system": None,
        "user": None,
        "project": None,
    }

    system_config = Path("/etc/litdoc/config.toml")
    if system_config.exists():
        config_files["system"] = system_config

    user_config_dir = Path(platformdirs.user_config_dir("litdoc", appauthor=False))
    user_config = user_config_dir / "config.toml"
    if user_config.exists():
        config_files["user"] = user_config

    # .litdoc/config.toml takes precedence over litdoc.toml
    cwd = Path.cwd()
    for project_config in (cwd / ".litdoc" / "config.toml", cwd / "litdoc.toml"):
        if project_config.exists():
            config_files["project"] = project_config
            break

    return config_files


def get_config_file_locations() -> dict[str, Path]:
    """Get the standard configuration file locations.

    Returns:
        Dictionary with keys 'system', 'user', 'project', each containing
        the Path where the config file should be located (may not exist).
    """
    user_config_dir = Path(platformdirs.user_config_dir("litdoc", appauthor=False))
    return {
        "system": Path("/etc/litdoc/config.toml"),
        "user": user_config_dir / "config.toml",
        "project": Path.cwd() / ".litdoc" / "config.toml",
    }


# Lazily initialized on first access
_config: LitdocConfig | None = None


def get_config(reload: bool = False) -> LitdocConfig:
    """Get the global configuration instance.

    Args:
        reload: If True, reload the configuration from files and environment.
    """
    global _config

    if _config is None or reload:
        _config = LitdocConfig()

    return _config


def create_example_config() -> str:
    """Create an example configuration file content.

    Returns:
        String containing an example TOML configuration with all options
        documented.
    """
    return """# litdoc Configuration File
#
# Configuration files are loaded from (in priority order):
#   1. .litdoc/config.toml or litdoc.toml (project directory)
#   2. ~/.config/litdoc/config.toml (user directory)
#   3. /etc/litdoc/config.toml (system directory)
#
# Environment variables can override any setting (highest priority).
# Nested settings use double underscores: LITDOC_<SECTION>__<KEY>
#
# Examples:
#   LITDOC_PATHS__TARGET_DIR=build/docs
#   LITDOC_LOGGING__LOG_LEVEL=DEBUG
#   PANDOC_EXECUTABLE=/usr/local/bin/pandoc
#   MDOC_EXECUTABLE=/usr/local/bin/mdoc

[paths]
# Directory containing the literate markdown sources
source_dir = "docs"

# Directory the doc compiler writes to and the converter reads from
target_dir = "target/mdoc"

[compiler]
# Doc compiler executable
# Environment variable: MDOC_EXECUTABLE (no LITDOC_ prefix)
executable = "mdoc"

# Compiler arguments; {source_dir} and {target_dir} are substituted
args = ["--in", "{source_dir}", "--out", "{target_dir}"]

[compiler.site_variables]
# Passed to the compiler as --site.<KEY> <VALUE>
# VERSION = "1.0.0"

[converter]
# Document converter executable, invoked as: <executable> <file> -o <file>.<ext>
# Environment variable: PANDOC_EXECUTABLE (no LITDOC_ prefix)
executable = "pandoc"

# Extension appended to every converted file
output_extension = "html"

[publish]
# Command run after compile and convert succeed; empty means nothing to publish
# {source_dir} and {target_dir} are substituted
command = []

[execution]
# Seconds to wait for each external command (leave unset to wait indefinitely)
# command_timeout = 300

[logging]
# Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL
# Environment variable: LITDOC_LOGGING__LOG_LEVEL
log_level = "INFO"

# Log file path (empty uses the system log directory)
log_file = ""
"""


def write_example_config(location: str = "user") -> Path:
    """Write an example configuration file to a standard location.

    Args:
        location: Where to write the config file. One of "user", "project",
            or "system".

    Returns:
        Path to the created configuration file.

    Raises:
        ValueError: If location is invalid.
        PermissionError: If cannot write to the location.
    """
    locations = get_config_file_locations()

    if location not in locations:
        raise ValueError(f"Invalid location '{location}'. Must be one of: user, project, system")

    config_path = locations[location]
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(create_example_config())

    logger.info(f"Created example configuration at: {config_path}")

    return config_path
