# wikiboot/wiki/recent_changes.py
import datetime
from collections import deque
from typing import Deque, List, Optional, Tuple

MAX_RECENT_CHANGES = 100


class RecentChangesWikiPage:
    """Records recently modified pages, newest first."""

    def __init__(self):
        self._changes: Deque[Tuple[str, Optional[str], datetime.datetime]] = deque(maxlen=MAX_RECENT_CHANGES)

    def update(self, page_name: str, user: Optional[str] = None) -> None:
        # a page appears once, at its latest change
        self._changes = deque((c for c in self._changes if c[0] != page_name),
                              maxlen=self._changes.maxlen)
        self._changes.appendleft((page_name, user, datetime.datetime.now()))

    def recent(self) -> List[str]:
        return [name for name, _, _ in self._changes]

    def __str__(self):
        return self.__class__.__name__
