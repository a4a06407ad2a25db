import threading
from typing import List, Optional

from .schemas import ApiRequest, Tab, TabPatch, new_id


class TabStore:
    """Open request tabs in insertion order, with at most one active."""

    def __init__(self):
        self._lock = threading.RLock()
        self._tabs: tuple = ()
        self._active_id: Optional[str] = None

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    def list(self) -> List[Tab]:
        return list(self._tabs)

    def get(self, tab_id: str) -> Optional[Tab]:
        for tab in self._tabs:
            if tab.id == tab_id:
                return tab
        return None

    def active(self) -> Optional[Tab]:
        if self._active_id is None:
            return None
        return self.get(self._active_id)

    def add_tab(self, request: Optional[dict] = None, collection: Optional[str] = None) -> str:
        """
        Open a new tab and make it active.

        ``request`` holds fields overriding the defaults; the new request is
        tagged with ``collection`` unless the fields name one. The tab always
        gets its own copy, a caller's dicts are never shared.
        """
        fields = {"id": new_id("req"), "collection": collection}
        fields.update(request or {})
        tab = Tab(request=ApiRequest(**fields).model_copy(deep=True))
        with self._lock:
            self._tabs = self._tabs + (tab,)
            self._active_id = tab.id
        return tab.id

    def close_tab(self, tab_id: str) -> None:
        with self._lock:
            remaining = tuple(t for t in self._tabs if t.id != tab_id)
            if len(remaining) == len(self._tabs):
                return
            if self._active_id == tab_id:
                self._active_id = remaining[-1].id if remaining else None
            self._tabs = remaining

    def set_active_tab(self, tab_id: str) -> None:
        with self._lock:
            if self.get(tab_id) is not None:
                self._active_id = tab_id

    def update_tab(self, tab_id: str, patch: TabPatch) -> None:
        updates = patch.model_dump(exclude_unset=True, by_alias=False)
        # model_dump turns nested models into dicts, keep the originals
        if "request" in updates:
            updates["request"] = patch.request
        if "response" in updates:
            updates["response"] = patch.response
        self._update(tab_id, updates)

    def _update(self, tab_id: str, updates: dict) -> None:
        with self._lock:
            tabs = list(self._tabs)
            for i, tab in enumerate(tabs):
                if tab.id != tab_id:
                    continue
                request = updates.get("request")
                if request is not None:
                    # request identity never changes
                    updates = dict(updates, request=request.model_copy(update={"id": tab.request.id}, deep=True))
                elif "request" in updates:
                    updates = {k: v for k, v in updates.items() if k != "request"}
                tabs[i] = tab.model_copy(update=updates)
                self._tabs = tuple(tabs)
                return

    def update_request(self, tab_id: str, fields: dict) -> None:
        """Shallow-merge request fields into a tab's request."""
        with self._lock:
            tab = self.get(tab_id)
            if tab is None:
                return
            fields = {k: v for k, v in fields.items() if k != "id"}
            self._update(tab_id, {"request": tab.request.model_copy(update=fields)})

    def retag(self, old: str, new: Optional[str]) -> None:
        with self._lock:
            self._tabs = tuple(
                t.model_copy(update={"request": t.request.model_copy(update={"collection": new})})
                if t.request.collection == old else t
                for t in self._tabs
            )
