import pytest

from litdoc.core.build_settings import BuildSettings
from litdoc.core.operations.compile_docs import CompileDocsOperation, compiler_command
from litdoc.infrastructure.backends.local_backend import LocalBackend
from litdoc.infrastructure.errors import SourceDirectoryError
from litdoc.infrastructure.services.subprocess_tools import SubprocessCrashError


def test_compiler_command_default_shape(settings):
    assert compiler_command(settings) == [
        "mdoc",
        "--in",
        str(settings.source_dir),
        "--out",
        str(settings.target_dir),
    ]


def test_compiler_command_appends_site_variables(tmp_path):
    settings = BuildSettings(
        source_dir=tmp_path / "docs",
        target_dir=tmp_path / "out",
        compiler_executable="/opt/mdoc",
        site_variables={"VERSION": "1.0.0", "SCALA": "3.3"},
    )

    argv = compiler_command(settings)

    assert argv[0] == "/opt/mdoc"
    assert argv[-4:] == ["--site.VERSION", "1.0.0", "--site.SCALA", "3.3"]


@pytest.mark.asyncio
async def test_runs_compiler_once(settings, recording_backend):
    await CompileDocsOperation(settings).execute(recording_backend)

    assert recording_backend.commands == [tuple(compiler_command(settings))]


@pytest.mark.asyncio
async def test_missing_source_dir_runs_nothing(tmp_path, recording_backend):
    settings = BuildSettings(source_dir=tmp_path / "missing", target_dir=tmp_path / "out")

    with pytest.raises(SourceDirectoryError):
        await CompileDocsOperation(settings).execute(recording_backend)

    assert recording_backend.commands == []


@pytest.mark.asyncio
async def test_compiler_failure_propagates(settings, recording_backend):
    recording_backend.fail_at = 1

    with pytest.raises(SubprocessCrashError):
        await CompileDocsOperation(settings).execute(recording_backend)


@pytest.mark.asyncio
async def test_fake_compiler_populates_target_dir(settings, fake_compiler):
    settings = BuildSettings(
        source_dir=settings.source_dir,
        target_dir=settings.target_dir,
        compiler_executable=str(fake_compiler),
    )

    await CompileDocsOperation(settings).execute(LocalBackend())

    assert sorted(p.name for p in settings.target_dir.iterdir()) == ["a.md", "b.md"]
