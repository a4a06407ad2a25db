"""
Workspace: the single object the UI layer talks to.

It owns the tab, environment, collection and history stores and is the only
place where they are wired together. Every mutation is synchronous; the one
suspension point is the network call inside ``send``, so other tabs, and
the sending tab's own request fields, stay editable while it is in flight.
"""

import threading
import time
from typing import Callable, Dict, List, Optional

from . import curl
from .collection_manager import CollectionManager
from .config import Settings, get_settings
from .environments import EnvironmentStore
from .executor import RequestExecutor, prepare
from .history import HistoryLog
from .interpolation import interpolate, tokens
from .logging_utils import get_logger
from .schemas import (
    ApiRequest,
    Environment,
    HistoryEntry,
    RequestPatch,
    Tab,
    TabPatch,
    WorkspaceSnapshot,
)
from .tabs import TabStore

logger = get_logger(__name__)


class Workspace:
    def __init__(
        self,
        snapshot: Optional[WorkspaceSnapshot] = None,
        settings: Optional[Settings] = None,
        executor: Optional[RequestExecutor] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings or get_settings()
        self.executor = executor or RequestExecutor(timeout=self.settings.request_timeout)
        self.clock = clock
        self._lock = threading.RLock()
        self.tabs = TabStore()
        self._load(snapshot or WorkspaceSnapshot(activeCollection=self.settings.default_collection))

    def _load(self, snapshot: WorkspaceSnapshot) -> None:
        self.environments = EnvironmentStore(snapshot.environments, snapshot.active_environment_id)
        self.collections = CollectionManager(
            snapshot.collections,
            snapshot.active_collection,
            default_collection=self.settings.default_collection,
        )
        self.history = HistoryLog(snapshot.history, limit=self.settings.history_limit, clock=self.clock)

    # --- snapshot ---

    def snapshot(self) -> WorkspaceSnapshot:
        with self._lock:
            return WorkspaceSnapshot(
                collections=self.collections.saved(),
                active_collection=self.collections.active_collection,
                environments=self.environments.list(),
                active_environment_id=self.environments.active_id,
                history=self.history.entries(),
            )

    def restore(self, snapshot: WorkspaceSnapshot) -> None:
        """Replace the persistent state; open tabs are left alone."""
        with self._lock:
            self._load(snapshot)
        logger.info(
            "Restored snapshot: %d saved request(s), %d environment(s), %d history entries",
            len(snapshot.collections),
            len(snapshot.environments),
            len(snapshot.history),
        )

    # --- tabs ---

    def add_tab(self, request: Optional[dict] = None) -> str:
        with self._lock:
            tab_id = self.tabs.add_tab(request, collection=self.collections.active_collection)
            if not request and self.settings.clear_env_on_new_tab:
                # TODO: decide whether blank tabs should keep the active environment, WORKBENCH_CLEAR_ENV_ON_NEW_TAB switches it off meanwhile
                self.environments.set_active(None)
        return tab_id

    def load_request(self, request: ApiRequest) -> str:
        """Open a tab holding an independent copy of a saved or past request."""
        fields = request.model_dump(exclude={"id"})
        return self.add_tab(fields)

    def open_saved(self, request_id: str) -> Optional[str]:
        request = self.collections.get(request_id)
        if request is None:
            return None
        return self.load_request(request)

    def open_history(self, index: int) -> Optional[str]:
        entry = self.history.get(index)
        if entry is None:
            return None
        return self.load_request(entry.request)

    def close_tab(self, tab_id: str) -> None:
        self.tabs.close_tab(tab_id)

    def set_active_tab(self, tab_id: str) -> None:
        self.tabs.set_active_tab(tab_id)

    def update_tab(self, tab_id: str, patch: TabPatch) -> None:
        self.tabs.update_tab(tab_id, patch)

    def update_request(self, tab_id: str, patch: RequestPatch) -> None:
        self.tabs.update_request(tab_id, patch.model_dump(exclude_unset=True))

    def get_tab(self, tab_id: str) -> Optional[Tab]:
        return self.tabs.get(tab_id)

    def active_tab(self) -> Optional[Tab]:
        return self.tabs.active()

    async def send(self, tab_id: str) -> Optional[Tab]:
        """
        Execute the tab's request and store the response on the tab.

        Callers must not send a tab that is already loading; this is not
        guarded. The request is captured when the call starts, edits made
        while it is in flight apply to the next send. History receives the
        request as written, templates unresolved.
        """
        tab = self.tabs.get(tab_id)
        if tab is None:
            return None
        if tab.is_loading:
            logger.debug("Tab %s sent while a previous send is still loading", tab_id)

        request = tab.request
        self.tabs.update_tab(tab_id, TabPatch(is_loading=True))
        response = None
        try:
            response = await self.executor.execute(request, self.environments.active())
        finally:
            # a tab is never left loading, not even when the send is cancelled
            if response is None:
                self.tabs.update_tab(tab_id, TabPatch(is_loading=False))
            else:
                self.tabs.update_tab(tab_id, TabPatch(response=response, is_loading=False))
        self.history.record(request)
        return self.tabs.get(tab_id)

    def to_curl(self, tab_id: str) -> Optional[str]:
        tab = self.tabs.get(tab_id)
        if tab is None:
            return None
        return curl.to_curl(prepare(tab.request, self.environments.active()))

    # --- environments ---

    def add_environment(self, environment: Environment) -> None:
        self.environments.add_environment(environment)

    def set_active_environment(self, env_id: Optional[str]) -> None:
        self.environments.set_active(env_id)

    def update_environment(self, env_id: str, name: Optional[str] = None, variables: Optional[Dict[str, str]] = None) -> None:
        self.environments.update_environment(env_id, name=name, variables=variables)

    def update_variable(self, env_id: str, key: str, value: str) -> None:
        self.environments.update_variable(env_id, key, value)

    def delete_variable(self, env_id: str, key: str) -> None:
        self.environments.delete_variable(env_id, key)

    def active_environment(self) -> Optional[Environment]:
        return self.environments.active()

    def preview(self, text: str) -> dict:
        resolved = interpolate(text, self.environments.active())
        return {"text": resolved, "unresolved": tokens(resolved)}

    # --- collections ---

    def grouped_collections(self) -> Dict[str, List[ApiRequest]]:
        return self.collections.grouped()

    def collection_names(self) -> List[str]:
        return self.collections.names()

    def create_collection(self, name: str) -> None:
        self.collections.create_collection(name)

    def rename_collection(self, old_name: str, new_name: str) -> None:
        with self._lock:
            if self.collections.rename_collection(old_name, new_name):
                self.tabs.retag(old_name, new_name.strip())

    def save_to_collection(self, request: ApiRequest, collection: Optional[str] = None) -> str:
        return self.collections.save_to_collection(request, collection)

    def save_tab(self, tab_id: str, collection: Optional[str] = None) -> Optional[str]:
        # copy only, the tab keeps its own collection tag
        tab = self.tabs.get(tab_id)
        if tab is None:
            return None
        return self.collections.save_to_collection(tab.request, collection)

    def delete_from_collection(self, request_id: str) -> None:
        self.collections.delete_from_collection(request_id)

    def delete_collection(self, name: str) -> None:
        with self._lock:
            if self.collections.delete_collection(name):
                self.tabs.retag(name, self.collections.active_collection)

    # --- history ---

    def history_entries(self) -> List[HistoryEntry]:
        return self.history.entries()

