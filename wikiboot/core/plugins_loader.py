# wikiboot/core/plugins_loader.py
"""
Loads plugin contributions into the runtime context's registries.

Configuration values name components registered in the ComponentRegistry:

    Plugins: extra_responders, my_symbols
    Responders: run:test_runner, history:page_history
    SymbolTypes: today, include_once
    ContentFilter: profanity_filter
    SlimTables: ddt:decision_table
    CustomComparators: glob:glob_comparator

Unknown names and malformed entries are logged and skipped. A registered
component that cannot be constructed is a PluginError.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from . import component_factory as keys
from . import registry as roles
from .component_factory import ComponentFactory
from .exceptions import PluginError

logger = logging.getLogger(__name__)


class PluginsLoader:
    def __init__(self, component_factory: ComponentFactory):
        self.component_factory = component_factory
        self.config = component_factory.config
        self.registry = component_factory.registry

    def make_logger(self, log_directory: Optional[str]):
        if log_directory is None:
            return None
        from ..server.request_logger import RequestLogger
        return RequestLogger(log_directory)

    def make_authenticator(self, userpass: Optional[str]):
        if userpass is not None:
            from ..server.authentication import make_authenticator_from_userpass
            return make_authenticator_from_userpass(userpass)
        return self.component_factory.create_component(keys.AUTHENTICATOR, roles.AUTHENTICATOR, "promiscuous")

    def _construct(self, role: str, name: str) -> Any:
        try:
            return self.component_factory.create(role, name)
        except Exception as e:
            raise PluginError(f"Unable to construct {role} '{name}': {e}") from e

    def _registered(self, role: str, name: str, config_key: str) -> bool:
        if self.registry.is_registered(role, name):
            return True
        logger.error(f"{config_key}: no {role} registered as '{name}'. Available: {self.registry.names(role)}")
        return False

    def _pairs(self, config_key: str) -> List[Tuple[str, str]]:
        pairs = []
        for entry in self.config.get_list(config_key):
            key, sep, name = entry.partition(':')
            if not sep or not key.strip() or not name.strip():
                logger.error(f"{config_key}: malformed entry '{entry}', expected key:name")
                continue
            pairs.append((key.strip(), name.strip()))
        return pairs

    def load_plugins(self, responder_factory, symbol_provider) -> None:
        for name in self.config.get_list(keys.PLUGINS):
            if not self._registered(roles.PLUGIN, name, keys.PLUGINS):
                continue
            plugin = self._construct(roles.PLUGIN, name)
            if hasattr(plugin, 'register_responders'):
                plugin.register_responders(responder_factory)
            if hasattr(plugin, 'register_symbol_types'):
                plugin.register_symbol_types(symbol_provider)
            logger.info(f"Loaded plugin: {name}")

    def load_responders(self, responder_factory) -> None:
        for key, name in self._pairs(keys.RESPONDERS):
            if self._registered(roles.RESPONDER, name, keys.RESPONDERS):
                responder_factory.add_responder(key, self.registry.get(roles.RESPONDER, name))
                logger.info(f"Loaded responder: ?{key} -> {name}")

    def load_symbol_types(self, symbol_provider) -> None:
        for name in self.config.get_list(keys.SYMBOL_TYPES):
            if self._registered(roles.SYMBOL_TYPE, name, keys.SYMBOL_TYPES):
                symbol_provider.add(self._construct(roles.SYMBOL_TYPE, name))
                logger.info(f"Loaded symbol type: {name}")

    def load_content_filter(self, content_filters: List[Any]) -> None:
        name = self.config.get(keys.CONTENT_FILTER)
        if name and self._registered(roles.CONTENT_FILTER, name, keys.CONTENT_FILTER):
            content_filters.append(self._construct(roles.CONTENT_FILTER, name))
            logger.info(f"Loaded content filter: {name}")

    def load_slim_tables(self, test_tables: Dict[str, Any]) -> None:
        for key, name in self._pairs(keys.SLIM_TABLES):
            if self._registered(roles.TEST_TABLE, name, keys.SLIM_TABLES):
                test_tables[key] = self.registry.get(roles.TEST_TABLE, name)
                logger.info(f"Loaded test table: {key} -> {name}")

    def load_custom_comparators(self, comparators: Dict[str, Any]) -> None:
        for key, name in self._pairs(keys.CUSTOM_COMPARATORS):
            if self._registered(roles.COMPARATOR, name, keys.CUSTOM_COMPARATORS):
                comparators[key] = self._construct(roles.COMPARATOR, name)
                logger.info(f"Loaded custom comparator: {key} -> {name}")
