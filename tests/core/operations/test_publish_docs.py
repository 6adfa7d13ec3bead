import pytest

from litdoc.core.build_settings import BuildSettings
from litdoc.core.operations.publish_docs import PublishDocsOperation


@pytest.mark.asyncio
async def test_without_command_publishes_nothing(settings, recording_backend):
    await PublishDocsOperation(settings).execute(recording_backend)

    assert recording_backend.commands == []


@pytest.mark.asyncio
async def test_runs_configured_command(tmp_path, recording_backend):
    settings = BuildSettings(
        source_dir=tmp_path / "docs",
        target_dir=tmp_path / "out",
        publish_command=["rsync", "-a", "{target_dir}/", "docs-host:/srv/docs"],
    )

    await PublishDocsOperation(settings).execute(recording_backend)

    assert recording_backend.commands == [
        ("rsync", "-a", f"{tmp_path / 'out'}/", "docs-host:/srv/docs")
    ]
