# wikiboot/core/updater.py
"""
Updates applied to the wiki root before launch.

The record of applied updates and the wiki version that applied them is
kept in <root>/updates.yaml. An update runs when its should_be_applied()
says so; running the updater on an up-to-date root changes nothing and
reports False.
"""

import datetime
import logging
import os
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

WIKI_VERSION = "0.1.0"
UPDATE_RECORD_FILE = "updates.yaml"

FRONT_PAGE_CONTENT = """!1 Welcome to your wiki

Create pages by editing this one, or run a suite with '?suite'.
"""


class Update:
    name = "update"

    def __init__(self, root_dir: str):
        self.root_dir = root_dir

    def should_be_applied(self, record: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def do_update(self, record: Dict[str, Any]) -> None:
        """Apply the update; may add what it changed to the record."""
        raise NotImplementedError


class CreateDirectoryUpdate(Update):
    def __init__(self, root_dir: str, directory: str):
        super().__init__(root_dir)
        self.directory = directory
        self.name = f"create-directory:{directory}"

    def should_be_applied(self, record) -> bool:
        return not os.path.isdir(os.path.join(self.root_dir, self.directory))

    def do_update(self, record) -> None:
        os.makedirs(os.path.join(self.root_dir, self.directory), exist_ok=True)


class FrontPageUpdate(Update):
    """Writes a FrontPage into a root without one, once."""
    name = "front-page"

    def should_be_applied(self, record) -> bool:
        if self.name in record.get('applied', []):
            return False
        return not os.path.exists(os.path.join(self.root_dir, "FrontPage", "content.txt"))

    def do_update(self, record) -> None:
        page_dir = os.path.join(self.root_dir, "FrontPage")
        os.makedirs(page_dir, exist_ok=True)
        with open(os.path.join(page_dir, "content.txt"), 'w', encoding='utf-8') as f:
            f.write(FRONT_PAGE_CONTENT)


class VersionUpdate(Update):
    name = "version"

    def should_be_applied(self, record) -> bool:
        return record.get('version') != WIKI_VERSION

    def do_update(self, record) -> None:
        record['version'] = WIKI_VERSION


class Updater:
    def __init__(self, context, updates: Optional[List[Update]] = None):
        self.context = context
        self.root_dir = context.root.path
        self.record_file = os.path.join(self.root_dir, UPDATE_RECORD_FILE)
        if updates is None:
            updates = [
                CreateDirectoryUpdate(self.root_dir, "files"),
                FrontPageUpdate(self.root_dir),
                VersionUpdate(self.root_dir),
            ]
        self.updates = updates

    def _read_record(self) -> Dict[str, Any]:
        if not os.path.exists(self.record_file):
            return {}
        with open(self.record_file, 'r', encoding='utf-8') as f:
            record = yaml.safe_load(f)
        return record if isinstance(record, dict) else {}

    def _write_record(self, record: Dict[str, Any]) -> None:
        with open(self.record_file, 'w', encoding='utf-8') as f:
            yaml.safe_dump(record, f, default_flow_style=False, sort_keys=True)

    def update(self) -> bool:
        """Apply pending updates. Returns True if any update was applied."""
        record = self._read_record()
        applied = list(record.get('applied', []))
        applied_any = False

        for update in self.updates:
            if not update.should_be_applied(record):
                continue
            logger.info(f"Applying update: {update.name}")
            update.do_update(record)
            if update.name not in applied:
                applied.append(update.name)
            applied_any = True

        if applied_any:
            record['applied'] = applied
            record['updated'] = datetime.datetime.now().isoformat(timespec='seconds')
            self._write_record(record)
        else:
            logger.debug("Wiki root is up to date")
        return applied_any
