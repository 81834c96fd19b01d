# wikiboot/server/responders.py
"""
Responder registry and the built-in responders.

A request names a page resource and an optional responder key in its query
string, e.g. 'FrontPage?names' or 'SuiteTests?suite&format=text'. Plugins
add responders (test and suite runners among them) through the
ResponderFactory held by the runtime context. A responder that runs tests
sets runs_tests = True so page run listeners are notified.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from urllib.parse import parse_qsl, unquote

logger = logging.getLogger(__name__)


@dataclass
class Request:
    resource: str
    query: Dict[str, str] = field(default_factory=dict)
    query_order: List[str] = field(default_factory=list)
    username: Optional[str] = None

    @classmethod
    def parse(cls, command: str, username: Optional[str] = None) -> 'Request':
        resource, _, query_string = command.lstrip('/').partition('?')
        pairs = parse_qsl(query_string, keep_blank_values=True)
        return cls(resource=unquote(resource),
                   query=dict(pairs),
                   query_order=[key for key, _ in pairs],
                   username=username)


@dataclass
class Response:
    status: int = 200
    body: str = ""
    content_type: str = "text/plain; charset=utf-8"
    failure_count: int = 0


class WikiPageResponder:
    """Default responder: the raw content of the requested page."""

    def make_response(self, context, request: Request) -> Response:
        page = context.root.get_page(request.resource) if request.resource else context.root
        if page is None:
            return Response(status=404, body=f"Page not found: {request.resource}\n")
        return Response(body=page.read_content())


class NamesResponder:
    """Lists the names of the child pages of the requested page."""

    def make_response(self, context, request: Request) -> Response:
        page = context.root.get_page(request.resource) if request.resource else context.root
        if page is None:
            return Response(status=404, body=f"Page not found: {request.resource}\n")
        return Response(body="".join(f"{child.name}\n" for child in page.children()))


class ResponderFactory:
    def __init__(self, default_responder: Callable[[], object] = WikiPageResponder):
        self._responders: Dict[str, Callable[[], object]] = {}
        self._default_responder = default_responder

    def add_responder(self, key: str, responder: Callable[[], object]) -> None:
        if key in self._responders:
            logger.info(f"Responder '{key}' is already registered. Overwriting.")
        self._responders[key] = responder
        logger.debug(f"Responder registered for '?{key}': {getattr(responder, '__name__', responder)}")

    def get_responder_key(self, request: Request) -> Optional[str]:
        for key in request.query_order:
            if key in self._responders:
                return key
        return None

    def make_responder(self, request: Request):
        key = self.get_responder_key(request)
        responder = self._responders[key] if key else self._default_responder
        return responder()

    def responder_keys(self) -> List[str]:
        return sorted(self._responders)
