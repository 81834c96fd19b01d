# wikiboot/server/import_listener.py
import logging

from .page_run import PageRunEvent

logger = logging.getLogger(__name__)

IMPORT_SOURCE_PROPERTY = "WikiImportSource"


class ImportTestEventListener:
    """
    Refreshes imported pages before a test system starts running them.

    A page is imported when its properties carry a WikiImportSource. The
    refresh is done by the importer the running responder put on the event.
    """

    _registered = False

    @classmethod
    def register(cls, listeners) -> None:
        if cls._registered:
            logger.debug("Import test event listener already registered")
            return
        listeners.add(cls())
        cls._registered = True
        logger.debug("Import test event listener registered")

    def run_starting(self, event: PageRunEvent) -> None:
        page = event.page
        if page is None:
            return
        source = page.get_properties().get(IMPORT_SOURCE_PROPERTY)
        if not source:
            return
        if event.importer is None:
            logger.warning(f"Page {page} is imported from {source} but no importer is available")
            return
        logger.info(f"Updating imported page {page} from {source}")
        event.importer(page, source)

    def __str__(self):
        return self.__class__.__name__
