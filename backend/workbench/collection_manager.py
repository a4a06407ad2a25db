import threading
from typing import Dict, List, Optional

from .logging_utils import get_logger
from .schemas import ApiRequest, new_id

logger = get_logger(__name__)


class CollectionManager:
    """
    Saved requests grouped by their collection tag.

    A collection exists only through the requests tagged with it, plus the
    active collection pointer, which may name a collection nothing is saved
    in yet. Groupings are always derived from the saved table on demand.
    """

    def __init__(
        self,
        saved: Optional[List[ApiRequest]] = None,
        active_collection: Optional[str] = None,
        default_collection: str = "Default",
    ):
        self._lock = threading.RLock()
        self.default_collection = default_collection
        self._saved: tuple = tuple(saved or ())
        self._active = active_collection or default_collection

    @property
    def active_collection(self) -> str:
        return self._active

    def saved(self) -> List[ApiRequest]:
        return list(self._saved)

    def get(self, request_id: str) -> Optional[ApiRequest]:
        for request in self._saved:
            if request.id == request_id:
                return request
        return None

    def grouped(self) -> Dict[str, List[ApiRequest]]:
        groups: Dict[str, List[ApiRequest]] = {}
        for request in self._saved:
            groups.setdefault(request.collection or self.default_collection, []).append(request)
        return groups

    def names(self) -> List[str]:
        names = list(self.grouped())
        if self._active not in names:
            names.append(self._active)
        return names

    def create_collection(self, name: str) -> None:
        name = (name or "").strip()
        if not name:
            return
        with self._lock:
            self._active = name

    def rename_collection(self, old_name: str, new_name: str) -> bool:
        new_name = (new_name or "").strip()
        if not new_name or new_name == old_name:
            return False
        with self._lock:
            self._saved = tuple(
                r.model_copy(update={"collection": new_name}) if self._tagged(r, old_name) else r
                for r in self._saved
            )
            if self._active == old_name:
                self._active = new_name
        logger.info("Renamed collection %r to %r", old_name, new_name)
        return True

    def save_to_collection(self, request: ApiRequest, collection: Optional[str] = None) -> str:
        """Store a copy of ``request`` under ``collection`` and return the copy's id."""
        target = (collection or "").strip() or self._active
        saved = request.model_copy(update={"id": new_id("req"), "collection": target}, deep=True)
        with self._lock:
            self._saved = self._saved + (saved,)
        return saved.id

    def delete_from_collection(self, request_id: str) -> None:
        with self._lock:
            self._saved = tuple(r for r in self._saved if r.id != request_id)

    def _tagged(self, request: ApiRequest, name: str) -> bool:
        # untagged requests are shown under the default collection
        return (request.collection or self.default_collection) == name

    def delete_collection(self, name: str) -> bool:
        if name == self.default_collection:
            return False
        with self._lock:
            before = len(self._saved)
            self._saved = tuple(r for r in self._saved if r.collection != name)
            if self._active == name:
                remaining = [n for n in self.grouped() if n != name]
                self._active = remaining[0] if remaining else self.default_collection
            removed = before - len(self._saved)
        logger.info("Deleted collection %r with %d saved request(s)", name, removed)
        return True
