# wikiboot/wiki/symbols.py
import logging
from typing import Any, List

logger = logging.getLogger(__name__)


class SymbolProvider:
    """Registry of markup symbol types used by the wiki parser."""

    def __init__(self):
        self._symbol_types: List[Any] = []

    def add(self, symbol_type: Any) -> None:
        self._symbol_types.append(symbol_type)
        logger.debug(f"Symbol type registered: {symbol_type}")

    @property
    def symbol_types(self) -> List[Any]:
        return list(self._symbol_types)

    def __len__(self):
        return len(self._symbol_types)
