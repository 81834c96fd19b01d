# wikiboot/server/page_run.py
"""
Notifications around test runs on wiki pages.

A responder that executes the tests of a page sets ``runs_tests = True``.
The wiki server then tells every registered listener before the test
system starts on the page and after it has finished. Listeners implement
``run_starting(event)``, ``run_finished(event)`` or both.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageRunEvent:
    page: Any
    request: Any = None
    # (page, source) -> None; supplied by the responder when it can import pages
    importer: Optional[Callable[[Any, str], None]] = None


class PageRunListeners:
    """
    Listeners held by the runtime context.

    Request handler threads notify concurrently, so the listener list is
    guarded by a lock and copied before dispatch. A failing listener is
    logged and does not stop the run.
    """

    def __init__(self):
        self._listeners: List[Any] = []
        self._lock = threading.Lock()

    def add(self, listener: Any) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)
                logger.debug(f"Page run listener added: {listener}")

    def remove(self, listener: Any) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def __len__(self):
        with self._lock:
            return len(self._listeners)

    def run_starting(self, event: PageRunEvent) -> None:
        self._notify('run_starting', event)

    def run_finished(self, event: PageRunEvent) -> None:
        self._notify('run_finished', event)

    def _notify(self, method_name: str, event: PageRunEvent) -> None:
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            handler = getattr(listener, method_name, None)
            if handler is None:
                continue
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Listener {listener} failed in {method_name} for page {event.page}: {e}",
                             exc_info=True)
