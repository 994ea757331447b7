"""Persistence of the quotation list.

A single JSON file holds every quotation. It is read once when the
book is opened and rewritten in full after every change.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional, Union

from .editor import new_quotation
from .models import Quotation
from .serializer import QuotationSerializer

logger = logging.getLogger(__name__)


class JsonFileStore:
    """A named storage slot backed by one JSON file."""

    def __init__(self, path: Union[str, Path], serializer: Optional[QuotationSerializer] = None):
        self.path = Path(path)
        self.serializer = serializer or QuotationSerializer()

    def load(self) -> list[Quotation]:
        """Read all stored quotations.

        A missing file is an empty list. Unreadable or corrupt content
        is logged and also treated as an empty list.
        """
        if not self.path.exists():
            return []

        try:
            raw = self.path.read_text(encoding='utf-8')
            if not raw.strip():
                return []
            return self.serializer.list_from_json(raw)
        except (OSError, ValueError, ArithmeticError) as e:
            logger.warning(f"Failed to parse stored quotes from {self.path}: {str(e)}")
            return []

    def save(self, quotations: list[Quotation]) -> None:
        """Replace the stored list with the given quotations."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            self.serializer.list_to_json(quotations),
            encoding='utf-8'
        )


class QuotationBook:
    """In-memory list of quotations kept in sync with a store.

    Mutations hold a lock for the whole read-modify-save sequence, so
    there is at most one writer at a time.
    """

    def __init__(self, store: JsonFileStore):
        self.store = store
        self._lock = threading.Lock()
        self._quotes = store.load()
        logger.info(f"Loaded {len(self._quotes)} quotations from {store.path}")

    def list_quotes(self) -> list[Quotation]:
        """All quotations, newest first."""
        with self._lock:
            return list(self._quotes)

    def get(self, quotation_id: str) -> Optional[Quotation]:
        with self._lock:
            return self._find(quotation_id)

    def create(self, **kwargs) -> Quotation:
        """Create a new draft quotation and put it first in the list.

        Keyword arguments are passed on to editor.new_quotation.
        """
        quotation = new_quotation(**kwargs)
        with self._lock:
            self._quotes.insert(0, quotation)
            self._save()
        logger.info(f"Created quotation {quotation.number} ({quotation.id})")
        return quotation

    def replace(self, quotation: Quotation) -> Optional[Quotation]:
        """Swap in a new snapshot for an existing quotation.

        Returns:
            The stored snapshot, or None if no quotation has that id.
        """
        return self.apply(quotation.id, lambda _: quotation)

    def apply(
        self,
        quotation_id: str,
        change: Callable[[Quotation], Quotation]
    ) -> Optional[Quotation]:
        """Apply an editing function to a stored quotation and save.

        Args:
            quotation_id: Which quotation to edit.
            change: Function returning the next snapshot.

        Returns:
            The new snapshot, or None if no quotation has that id.
        """
        with self._lock:
            for index, current in enumerate(self._quotes):
                if current.id == quotation_id:
                    updated = change(current)
                    self._quotes[index] = updated
                    self._save()
                    return updated
        return None

    def delete(self, quotation_id: str) -> bool:
        """Delete a quotation. Returns False if there was none."""
        with self._lock:
            remaining = [q for q in self._quotes if q.id != quotation_id]
            if len(remaining) == len(self._quotes):
                return False
            self._quotes = remaining
            self._save()
        logger.info(f"Deleted quotation {quotation_id}")
        return True

    def _find(self, quotation_id: str) -> Optional[Quotation]:
        for quotation in self._quotes:
            if quotation.id == quotation_id:
                return quotation
        return None

    def _save(self):
        self.store.save(self._quotes)
