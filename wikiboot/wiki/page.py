# wikiboot/wiki/page.py
"""
File system backed wiki pages.

Only the surface the launcher needs lives here: materializing the root page,
walking child pages and reading page content and properties. Page storage
formats and versioning belong to the storage engine.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import yaml

from ..core.exceptions import WikiPageError

logger = logging.getLogger(__name__)

CONTENT_FILE = "content.txt"
PROPERTIES_FILE = "properties.yaml"
DEFAULT_THEME = "bootstrap"


class FileSystemPage:
    def __init__(self, path: str, name: str, parent: Optional['FileSystemPage'] = None):
        self.path = path
        self.name = name
        self.parent = parent

    def get_child(self, name: str) -> Optional['FileSystemPage']:
        child_path = os.path.join(self.path, name)
        if os.path.isdir(child_path):
            return FileSystemPage(child_path, name, self)
        return None

    def get_page(self, page_path: str) -> Optional['FileSystemPage']:
        """Resolve a dotted page path such as 'FrontPage.SubPage'."""
        page = self
        for part in [p for p in page_path.split(".") if p]:
            page = page.get_child(part)
            if page is None:
                return None
        return page

    def children(self) -> List['FileSystemPage']:
        if not os.path.isdir(self.path):
            return []
        return [FileSystemPage(os.path.join(self.path, entry), entry, self)
                for entry in sorted(os.listdir(self.path))
                if os.path.isfile(os.path.join(self.path, entry, CONTENT_FILE))]

    def read_content(self) -> str:
        content_path = os.path.join(self.path, CONTENT_FILE)
        if not os.path.exists(content_path):
            return ""
        with open(content_path, 'r', encoding='utf-8') as f:
            return f.read()

    def write_content(self, content: str) -> None:
        os.makedirs(self.path, exist_ok=True)
        with open(os.path.join(self.path, CONTENT_FILE), 'w', encoding='utf-8') as f:
            f.write(content)

    def get_properties(self) -> Dict[str, Any]:
        properties_path = os.path.join(self.path, PROPERTIES_FILE)
        if not os.path.exists(properties_path):
            return {}
        with open(properties_path, 'r', encoding='utf-8') as f:
            properties = yaml.safe_load(f)
        return properties if isinstance(properties, dict) else {}

    def __str__(self):
        return self.path

    def __repr__(self):
        return f"<FileSystemPage name={self.name} path={self.path}>"


class FileSystemPageFactory:
    """Default page factory: pages are directories below the storage root."""

    def __init__(self):
        self.theme = DEFAULT_THEME

    def make_root_page(self, root_path: str, root_name: str) -> FileSystemPage:
        path = os.path.join(root_path, root_name)
        if os.path.exists(path) and not os.path.isdir(path):
            raise WikiPageError(f"Wiki root '{path}' exists but is not a directory")
        try:
            if not os.path.isdir(path):
                logger.info(f"Creating wiki root directory: {os.path.abspath(path)}")
            os.makedirs(path, exist_ok=True)
            os.listdir(path)
        except OSError as e:
            raise WikiPageError(f"Unable to materialize wiki root '{path}': {e}") from e
        return FileSystemPage(path, root_name)

    def __str__(self):
        return self.__class__.__name__
