# wikiboot/core/component_factory.py
import logging
from typing import Any, Callable

from .config import MergedConfiguration, VERSIONS_CONTROLLER_DAYS
from .exceptions import ComponentError
from .registry import ComponentRegistry

logger = logging.getLogger(__name__)

# Configuration keys
WIKI_PAGE_FACTORY = "WikiPageFactory"
VERSIONS_CONTROLLER = "VersionsController"
RECENT_CHANGES = "RecentChanges"
AUTHENTICATOR = "Authenticator"
THEME = "Theme"
PLUGINS = "Plugins"
RESPONDERS = "Responders"
SYMBOL_TYPES = "SymbolTypes"
CONTENT_FILTER = "ContentFilter"
SLIM_TABLES = "SlimTables"
CUSTOM_COMPARATORS = "CustomComparators"
PLUGIN_PATH = "PluginPath"


class ComponentFactory:
    """Creates components chosen by name in the merged configuration."""

    def __init__(self, config: MergedConfiguration, registry: ComponentRegistry):
        self.config = config
        self.registry = registry

    def instantiate(self, constructor: Callable[..., Any]) -> Any:
        """Call a constructor with the configuration, or with no arguments if it takes none."""
        try:
            return constructor(self.config)
        except TypeError as config_error:
            try:
                return constructor()
            except TypeError as e:
                name = getattr(constructor, '__name__', constructor)
                raise ComponentError(
                    f"Unable to construct {name}: with configuration: {config_error}; "
                    f"without arguments: {e}") from e

    def create(self, role: str, name: str) -> Any:
        """Create the component registered under name; errors propagate."""
        return self.instantiate(self.registry.get(role, name))

    def create_component(self, config_key: str, role: str, default: str) -> Any:
        """
        Create the component configured under config_key.

        Falls back to the default implementation when the key is absent, the
        configured name is not registered, or its constructor fails.
        """
        name = self.config.get(config_key)
        if name:
            try:
                component = self.create(role, name)
                logger.debug(f"{config_key}: using configured {role} '{name}'")
                return component
            except Exception as e:
                logger.warning(f"{config_key}: unable to create {role} '{name}' ({e}), using default '{default}'")
        return self.create(role, default)
