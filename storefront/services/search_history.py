import json
import logging
from typing import List, Optional

from storefront.core.config import settings
from storefront.core.exceptions import StorageException

logger = logging.getLogger(__name__)


class SearchHistory:
    """Most-recent-first list of search terms kept in client storage"""

    def __init__(self, storage, key: Optional[str] = None, limit: Optional[int] = None):
        self.storage = storage
        self.key = key or settings.RECENT_SEARCHES_KEY
        self.limit = settings.RECENT_SEARCHES_LIMIT if limit is None else limit

    def load(self) -> List[str]:
        try:
            raw = self.storage.get_item(self.key)
        except StorageException as e:
            logger.warning(f"Cannot read recent searches: {e}")
            return []
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Recent searches entry is not valid JSON, ignoring it")
            return []
        if not isinstance(data, list):
            return []
        return [term for term in data if isinstance(term, str)][: self.limit]

    def _save(self, terms: List[str]) -> List[str]:
        self.storage.set_item(self.key, json.dumps(terms))
        return terms

    def add(self, term: str) -> List[str]:
        if not term or not term.strip():
            return self.load()
        terms = [term] + [t for t in self.load() if t != term]
        return self._save(terms[: self.limit])

    def remove(self, term: str) -> List[str]:
        return self._save([t for t in self.load() if t != term])

    def clear(self) -> None:
        self.storage.remove_item(self.key)
