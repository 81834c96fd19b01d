# wikiboot/core/bootstrap.py
"""
Bootstrap System for the wiki launcher
======================================

Builds the RuntimeContext from the launch arguments and the merged
configuration. The order of the steps is fixed:

1. Configuration file loaded and overlaid with command line values
2. Plugin directories searched for additional components
3. Page factory, versions controller and recent-changes tracker resolved
4. Versions controller history depth applied
5. Root page materialized (fatal on failure)
6. Request logger and authenticator created
7. Context assembled, plugin contributions loaded into its registries
8. Import test-event listener registered
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from . import component_factory as keys
from . import registry as roles
from .arguments import DEFAULT_VERSION_DAYS, LaunchArguments
from .component_factory import ComponentFactory
from .config import ConfigFileLoader, MergedConfiguration, merge_configuration
from .discovery import DEFAULT_PLUGIN_PATH, PluginDiscovery
from .exceptions import ConfigurationError
from .plugins_loader import PluginsLoader
from .registry import ComponentRegistry, default_registry
from ..server.import_listener import ImportTestEventListener
from ..server.page_run import PageRunListeners
from ..server.responders import ResponderFactory
from ..server.wiki_server import WikiServer
from ..wiki.symbols import SymbolProvider

logger = logging.getLogger(__name__)


@dataclass
class RuntimeContext:
    """
    The wired object graph handed to the launcher.

    Components are assigned once when the context is built. The registries
    (responders, symbol types, content filters, test tables, comparators)
    are filled in place by the plugin loader.
    """
    root: Any
    versions_controller: Any
    recent_changes: Any
    logger: Optional[Any]
    authenticator: Any
    page_factory: Any
    port: int
    root_path: str
    root_directory_name: str
    config: MergedConfiguration
    page_run_listeners: PageRunListeners = field(default_factory=PageRunListeners)
    responder_factory: ResponderFactory = field(default_factory=ResponderFactory)
    symbol_provider: SymbolProvider = field(default_factory=SymbolProvider)
    content_filters: List[Any] = field(default_factory=list)
    test_tables: Dict[str, Any] = field(default_factory=dict)
    comparators: Dict[str, Any] = field(default_factory=dict)
    wiki_server: Optional[WikiServer] = None

    def __post_init__(self):
        if self.wiki_server is None:
            self.wiki_server = WikiServer(self)


class Bootstrap:
    """Turns launch arguments into a RuntimeContext."""

    def __init__(self, registry: Optional[ComponentRegistry] = None):
        self.registry = registry if registry is not None else default_registry()
        self.context: Optional[RuntimeContext] = None

    def load_configuration(self, arguments: LaunchArguments) -> MergedConfiguration:
        file_values = ConfigFileLoader(arguments.config_file).load()
        return merge_configuration(file_values, arguments)

    def discover_plugins(self, config: MergedConfiguration) -> int:
        search_paths = config.get_list(keys.PLUGIN_PATH) or [DEFAULT_PLUGIN_PATH]
        return PluginDiscovery(search_paths).register_plugins(self.registry)

    def _history_depth(self, config: MergedConfiguration) -> int:
        days = config.get(keys.VERSIONS_CONTROLLER_DAYS, str(DEFAULT_VERSION_DAYS))
        try:
            return int(days)
        except ValueError:
            raise ConfigurationError(
                f"{keys.VERSIONS_CONTROLLER_DAYS} must be a whole number of days, got '{days}'") from None

    def _make_responder_factory(self) -> ResponderFactory:
        responder_factory = ResponderFactory(default_responder=self.registry.get(roles.RESPONDER, "wiki_page"))
        responder_factory.add_responder("names", self.registry.get(roles.RESPONDER, "names"))
        return responder_factory

    def load_context(self, arguments: LaunchArguments,
                     config: Optional[MergedConfiguration] = None) -> RuntimeContext:
        if config is None:
            config = self.load_configuration(arguments)
        component_factory = ComponentFactory(config, self.registry)

        page_factory = component_factory.create_component(keys.WIKI_PAGE_FACTORY, roles.PAGE_FACTORY, "file_system")
        theme = config.get(keys.THEME)
        if theme:
            page_factory.theme = theme

        versions_controller = component_factory.create_component(
            keys.VERSIONS_CONTROLLER, roles.VERSIONS_CONTROLLER, "zip")
        versions_controller.set_history_depth(self._history_depth(config))

        recent_changes = component_factory.create_component(keys.RECENT_CHANGES, roles.RECENT_CHANGES, "wiki_page")

        root_path = arguments.effective_root_path
        root_directory_name = arguments.effective_root_directory
        root = page_factory.make_root_page(root_path, root_directory_name)

        plugins_loader = PluginsLoader(component_factory)

        context = RuntimeContext(
            root=root,
            versions_controller=versions_controller,
            recent_changes=recent_changes,
            logger=plugins_loader.make_logger(arguments.log_directory),
            authenticator=plugins_loader.make_authenticator(arguments.userpass),
            page_factory=page_factory,
            port=arguments.effective_port,
            root_path=root_path,
            root_directory_name=root_directory_name,
            config=config,
            responder_factory=self._make_responder_factory(),
        )

        plugins_loader.load_plugins(context.responder_factory, context.symbol_provider)
        plugins_loader.load_responders(context.responder_factory)
        plugins_loader.load_symbol_types(context.symbol_provider)
        plugins_loader.load_content_filter(context.content_filters)
        plugins_loader.load_slim_tables(context.test_tables)
        plugins_loader.load_custom_comparators(context.comparators)

        ImportTestEventListener.register(context.page_run_listeners)

        logger.info(f"root page: {context.root}")
        logger.info(f"logger: {'none' if context.logger is None else context.logger}")
        logger.info(f"authenticator: {context.authenticator}")
        logger.info(f"page factory: {context.page_factory}")
        logger.info(f"page theme: {getattr(context.page_factory, 'theme', 'none')}")
        logger.info(f"Starting wiki on port: {context.port}")

        self.context = context
        return context
