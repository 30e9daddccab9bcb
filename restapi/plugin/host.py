"""
Host adapter for the REST API plugin.

Thin shim mapping the host's plugin lifecycle onto the functions in
restapi.plugin.contract.
"""

from typing import Any, Dict, List, Optional

from restapi import __version__
from restapi.core.config import PluginSettings, get_plugin_settings
from restapi.core.logger import setup_logger
from restapi.plugin import contract
from restapi.tools.http import (
    DatasourceConfiguration,
    DatasourceMetadata,
    ExecutionOutput,
    HttpExecutor,
)

logger = setup_logger(__name__, include_location=True)


class RestApiPlugin:
    """REST API plugin as seen by the host runtime."""

    name = "restapi"
    version = __version__

    def __init__(
        self,
        settings: Optional[PluginSettings] = None,
        executor: Optional[HttpExecutor] = None,
    ) -> None:
        self.settings = settings or get_plugin_settings()
        self.executor = executor

    async def execute(
        self,
        action_configuration: Any,
        datasource_configuration: Optional[DatasourceConfiguration] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> ExecutionOutput:
        # datasource_configuration belongs to the host's connection layer
        logger.debug(f"RESTAPI.PLUGIN: execute called, templated={context is not None}")
        return await contract.execute(
            action_configuration,
            limits=self.settings.limits(),
            context=context,
            executor=self.executor,
            settings=self.settings,
        )

    def get_request(self, action_configuration: Any) -> str:
        return contract.render(action_configuration)

    def dynamic_properties(self) -> List[str]:
        return contract.dynamic_properties()

    def escape_string_properties(self) -> List[str]:
        return contract.escape_string_properties()

    async def metadata(self, datasource_configuration: Optional[DatasourceConfiguration] = None) -> DatasourceMetadata:
        return await contract.metadata(datasource_configuration)

    async def test(self, datasource_configuration: Optional[DatasourceConfiguration] = None) -> None:
        await contract.test(datasource_configuration)
