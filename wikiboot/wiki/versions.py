# wikiboot/wiki/versions.py
import datetime
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class VersionsController:
    """Retention policy over historical page versions."""

    def __init__(self):
        self.history_depth: int = 0

    def set_history_depth(self, days: int) -> None:
        self.history_depth = days
        logger.debug(f"{self}: versions expire after {days} days")

    def is_expired(self, version_time: datetime.datetime,
                   now: Optional[datetime.datetime] = None) -> bool:
        now = now or datetime.datetime.now()
        return version_time < now - datetime.timedelta(days=self.history_depth)

    def __str__(self):
        return self.__class__.__name__


class ZipFileVersionsController(VersionsController):
    """Keeps page versions as zip archives next to the page content."""

    ARCHIVE_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

    def archive_name(self, version_time: datetime.datetime, user: Optional[str] = None) -> str:
        stamp = version_time.strftime(self.ARCHIVE_TIMESTAMP_FORMAT)
        return f"{user}-{stamp}.zip" if user else f"{stamp}.zip"


class NullVersionsController(VersionsController):
    """Keeps no history; every version is expired as soon as it is replaced."""

    def is_expired(self, version_time, now=None) -> bool:
        return True
