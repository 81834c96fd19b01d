# wikiboot/core/registry.py
import logging
from typing import Any, Callable, Dict, List

from .exceptions import ComponentError

logger = logging.getLogger(__name__)

# Component roles
PAGE_FACTORY = "page_factory"
VERSIONS_CONTROLLER = "versions_controller"
RECENT_CHANGES = "recent_changes"
AUTHENTICATOR = "authenticator"
PLUGIN = "plugin"
RESPONDER = "responder"
SYMBOL_TYPE = "symbol_type"
CONTENT_FILTER = "content_filter"
TEST_TABLE = "test_table"
COMPARATOR = "comparator"

ROLES = (PAGE_FACTORY, VERSIONS_CONTROLLER, RECENT_CHANGES, AUTHENTICATOR, PLUGIN,
         RESPONDER, SYMBOL_TYPE, CONTENT_FILTER, TEST_TABLE, COMPARATOR)


class ComponentRegistry:
    """
    Maps (role, name) to the constructor of an implementation.

    Configuration selects implementations by registered name; the built-in
    defaults are registered by default_registry() and plugin discovery adds
    the rest.
    """

    def __init__(self):
        self._providers: Dict[str, Dict[str, Callable[..., Any]]] = {role: {} for role in ROLES}

    def register(self, role: str, name: str, constructor: Callable[..., Any]) -> None:
        if role not in self._providers:
            raise ComponentError(f"Unknown component role '{role}'. Known roles: {list(ROLES)}")
        if name in self._providers[role]:
            logger.info(f"Component '{name}' is already registered for role '{role}'. Overwriting.")
        self._providers[role][name] = constructor
        logger.debug(f"Registered {role} '{name}': {getattr(constructor, '__name__', constructor)}")

    def get(self, role: str, name: str) -> Callable[..., Any]:
        try:
            return self._providers[role][name]
        except KeyError:
            raise ComponentError(
                f"No {role} registered as '{name}'. Available: {self.names(role)}") from None

    def is_registered(self, role: str, name: str) -> bool:
        return name in self._providers.get(role, {})

    def names(self, role: str) -> List[str]:
        return sorted(self._providers.get(role, {}))


def default_registry() -> ComponentRegistry:
    """Registry holding the built-in implementation of every role that has one."""
    from ..wiki.page import FileSystemPageFactory
    from ..wiki.versions import NullVersionsController, ZipFileVersionsController
    from ..wiki.recent_changes import RecentChangesWikiPage
    from ..server.authentication import PromiscuousAuthenticator
    from ..server.responders import NamesResponder, WikiPageResponder

    registry = ComponentRegistry()
    registry.register(PAGE_FACTORY, "file_system", FileSystemPageFactory)
    registry.register(VERSIONS_CONTROLLER, "zip", ZipFileVersionsController)
    registry.register(VERSIONS_CONTROLLER, "no_history", NullVersionsController)
    registry.register(RECENT_CHANGES, "wiki_page", RecentChangesWikiPage)
    registry.register(AUTHENTICATOR, "promiscuous", PromiscuousAuthenticator)
    registry.register(RESPONDER, "wiki_page", WikiPageResponder)
    registry.register(RESPONDER, "names", NamesResponder)
    return registry
