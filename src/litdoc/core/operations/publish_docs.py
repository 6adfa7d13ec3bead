import logging
from typing import Any

from attrs import frozen

from litdoc.core.build_settings import BuildSettings
from litdoc.infrastructure.backend import Backend
from litdoc.infrastructure.operation import Operation

logger = logging.getLogger(__name__)


@frozen
class PublishDocsOperation(Operation):
    settings: BuildSettings

    async def execute(self, backend: Backend, *args: Any, **kwargs: Any) -> None:
        if not self.settings.publish_command:
            logger.info("No publish command configured; nothing to publish")
            return
        try:
            logger.info(f"Publishing '{self.settings.target_dir}'")
            await backend.run_command(self.settings.expand(self.settings.publish_command), "publish")
        except Exception as e:
            logger.error(f"Error while publishing '{self.settings.target_dir}': {e}")
            raise
