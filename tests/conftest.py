"""Pytest configuration and fixtures.

Logging Configuration:
---------------------
Application logs are suppressed during tests unless explicitly enabled.

Environment variables:
- LITDOC_ENABLE_TEST_LOGGING: Enable live logging for all tests (set to any value)
- LITDOC_TEST_LOG_LEVEL: Set log level (DEBUG, INFO, WARNING, ERROR) - default: INFO
"""

import logging
import os
import shutil
import stat
import sys
from pathlib import Path

import pytest
from attrs import define, field

from litdoc.core.build_settings import BuildSettings
from litdoc.infrastructure.backend import Backend
from litdoc.infrastructure.services.subprocess_tools import SubprocessCrashError

FAKE_CONVERTER_SOURCE = """\
#!{python}
import os
import shutil
import sys
from pathlib import Path

input_file, flag, output_file = sys.argv[1:4]
assert flag == "-o", sys.argv
fail_on = os.environ.get("FAKE_CONVERTER_FAIL_ON", "")
if fail_on and Path(input_file).name == fail_on:
    print(f"cannot convert {{input_file}}", file=sys.stderr)
    sys.exit(3)
with open(os.environ["FAKE_CONVERTER_LOG"], "a", encoding="utf-8") as log:
    log.write(Path(input_file).name + "\\n")
shutil.copyfile(input_file, output_file)
"""

FAKE_COMPILER_SOURCE = """\
#!{python}
import shutil
import sys
from pathlib import Path

args = sys.argv[1:]
source = Path(args[args.index("--in") + 1])
target = Path(args[args.index("--out") + 1])
target.mkdir(parents=True, exist_ok=True)
for entry in source.iterdir():
    if entry.is_file():
        shutil.copyfile(entry, target / entry.name)
"""


# ====================================================================
# Tool Availability Detection
# ====================================================================


def get_tool_availability() -> dict[str, bool]:
    return {
        "pandoc": shutil.which(os.environ.get("PANDOC_EXECUTABLE", "pandoc")) is not None,
        "mdoc": shutil.which(os.environ.get("MDOC_EXECUTABLE", "mdoc")) is not None,
    }


def pytest_configure(config):
    """Register markers and quiet application logs by default."""
    config.addinivalue_line("markers", "requires_pandoc: mark test as requiring pandoc")
    config.addinivalue_line("markers", "requires_mdoc: mark test as requiring mdoc")

    if os.environ.get("LITDOC_ENABLE_TEST_LOGGING"):
        config.option.log_cli = True
        config.option.log_cli_level = os.environ.get("LITDOC_TEST_LOG_LEVEL", "INFO")
        config.option.log_cli_format = "[%(asctime)s] %(levelname)-8s %(name)s - %(message)s"
        config.option.log_cli_date_format = "%H:%M:%S"
    else:
        config.option.log_cli = False

    logging.getLogger("litdoc").setLevel(logging.WARNING)


def pytest_collection_modifyitems(config, items):
    """Auto-skip tests based on tool availability."""
    tool_status = get_tool_availability()

    for item in items:
        markers = [marker.name for marker in item.iter_markers()]
        for tool in ("pandoc", "mdoc"):
            if f"requires_{tool}" in markers and not tool_status[tool]:
                item.add_marker(pytest.mark.skip(reason=f"{tool} not available on PATH"))


# ====================================================================
# Fixtures
# ====================================================================


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Run in an empty working directory with no litdoc environment variables."""
    for var in list(os.environ):
        if var.startswith("LITDOC_") and var != "LITDOC_ENABLE_TEST_LOGGING":
            monkeypatch.delenv(var, raising=False)
    for var in ("PANDOC_EXECUTABLE", "MDOC_EXECUTABLE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("LITDOC_LOGGING__LOG_FILE", str(tmp_path / "logs" / "litdoc.log"))
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return workdir


def _write_script(path: Path, source: str) -> Path:
    path.write_text(source.format(python=sys.executable), encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_converter(tmp_path, monkeypatch):
    """An executable taking ``<input> -o <output>`` that copies input to output.

    Every converted file name is appended to the file returned as ``log``.
    Set FAKE_CONVERTER_FAIL_ON to a file name to make that conversion fail.
    """
    if sys.platform == "win32":
        pytest.skip("script shebangs are not supported on Windows")
    tools = tmp_path / "tools"
    tools.mkdir(exist_ok=True)
    log = tmp_path / "converter.log"
    log.touch()
    monkeypatch.setenv("FAKE_CONVERTER_LOG", str(log))
    monkeypatch.delenv("FAKE_CONVERTER_FAIL_ON", raising=False)
    script = _write_script(tools / "fake-converter", FAKE_CONVERTER_SOURCE)
    return script, log


@pytest.fixture
def fake_compiler(tmp_path):
    """An executable accepting ``--in <dir> --out <dir>`` that copies files across."""
    if sys.platform == "win32":
        pytest.skip("script shebangs are not supported on Windows")
    tools = tmp_path / "tools"
    tools.mkdir(exist_ok=True)
    return _write_script(tools / "fake-compiler", FAKE_COMPILER_SOURCE)


@pytest.fixture
def tutorial_sources(tmp_path):
    """A source directory with two literate markdown files."""
    source_dir = tmp_path / "docs"
    source_dir.mkdir()
    (source_dir / "a.md").write_text(
        "# Type classes\n\n```scala mdoc\ntrait Comparator[A]\n```\n", encoding="utf-8"
    )
    (source_dir / "b.md").write_text(
        "# Implicit resolution\n\n```scala mdoc\nimplicitly[Ordering[Int]]\n```\n",
        encoding="utf-8",
    )
    return source_dir


@pytest.fixture
def settings(tmp_path, tutorial_sources):
    return BuildSettings(
        source_dir=tutorial_sources,
        target_dir=tmp_path / "target" / "mdoc",
    )


@define
class RecordingBackend(Backend):
    """Records commands; raises SubprocessCrashError for the command at ``fail_at``."""

    commands: list[tuple[str, ...]] = field(factory=list)
    fail_at: int | None = None

    async def _run_command(self, argv, correlation_id):
        self.commands.append(tuple(argv))
        if self.fail_at is not None and len(self.commands) == self.fail_at:
            raise SubprocessCrashError(
                f"{correlation_id}:Subprocess failed", return_code=1, stderr=b"boom"
            )


@pytest.fixture
def recording_backend():
    return RecordingBackend()
