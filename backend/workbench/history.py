import threading
import time
from typing import Callable, List, Optional

from .schemas import ApiRequest, HistoryEntry

HISTORY_LIMIT = 50


class HistoryLog:
    """Executed requests, newest first, holding at most ``limit`` entries."""

    def __init__(
        self,
        entries: Optional[List[HistoryEntry]] = None,
        limit: int = HISTORY_LIMIT,
        clock: Callable[[], float] = time.time,
    ):
        self._lock = threading.Lock()
        self.limit = limit
        self.clock = clock
        self._entries: tuple = tuple(entries or ())[:limit]

    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def get(self, index: int) -> Optional[HistoryEntry]:
        if 0 <= index < len(self._entries):
            return self._entries[index]
        return None

    def record(self, request: ApiRequest) -> HistoryEntry:
        entry = HistoryEntry(
            request=request.model_copy(deep=True),
            timestamp=int(self.clock() * 1000),
        )
        with self._lock:
            self._entries = ((entry,) + self._entries)[: self.limit]
        return entry

    def __len__(self) -> int:
        return len(self._entries)
