from fastapi import FastAPI, Depends, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from typing import Dict, List, Optional

from .config import get_settings
from .db import Base, engine, SessionLocal
from .logging_utils import configure_logging, get_logger
from .schemas import (
    ActivateEnvironment,
    CreateCollection,
    Environment,
    HistoryEntry,
    InterpolateText,
    NewTab,
    RenameCollection,
    RequestPatch,
    SaveToCollection,
    SetVariable,
    Tab,
    TabPatch,
    UpdateEnvironment,
    WorkspaceSnapshot,
)
from .storage import SnapshotStore
from .workspace import Workspace

settings = get_settings()
configure_logging(settings.log_level)
logger = get_logger(__name__)

app = FastAPI(title="API Workbench Backend", version="0.4.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Base.metadata.create_all(bind=engine)

_workspace: Optional[Workspace] = None


def get_store() -> SnapshotStore:
    return SnapshotStore(SessionLocal)


def get_workspace(store: SnapshotStore = Depends(get_store)) -> Workspace:
    global _workspace
    if _workspace is None:
        _workspace = Workspace(store.load(), settings=settings)
        logger.info("Workspace loaded from %s", settings.database_url)
    return _workspace


def _tab_state(ws: Workspace) -> dict:
    return {
        "tabs": [t.model_dump(by_alias=True) for t in ws.tabs.list()],
        "activeTabId": ws.tabs.active_id,
    }


@app.get("/health")
def health():
    return {"status": "ok"}


# --- tabs ---

@app.get("/tabs")
async def list_tabs(ws: Workspace = Depends(get_workspace)):
    return _tab_state(ws)


@app.post("/tabs")
async def create_tab(payload: Optional[NewTab] = None, ws: Workspace = Depends(get_workspace)):
    fields = None
    if payload is not None and payload.request is not None:
        fields = payload.request.model_dump(exclude_unset=True) or None
    tab_id = ws.add_tab(fields)
    return {"id": tab_id, **_tab_state(ws)}


@app.get("/tabs/{tab_id}", response_model=Tab, response_model_by_alias=True)
async def get_tab(tab_id: str, ws: Workspace = Depends(get_workspace)):
    tab = ws.get_tab(tab_id)
    if tab is None:
        raise HTTPException(status_code=404, detail="Tab not found")
    return tab


@app.delete("/tabs/{tab_id}")
async def close_tab(tab_id: str, ws: Workspace = Depends(get_workspace)):
    ws.close_tab(tab_id)
    return _tab_state(ws)


@app.post("/tabs/{tab_id}/activate")
async def activate_tab(tab_id: str, ws: Workspace = Depends(get_workspace)):
    ws.set_active_tab(tab_id)
    return _tab_state(ws)


@app.patch("/tabs/{tab_id}")
async def update_tab(tab_id: str, patch: TabPatch, ws: Workspace = Depends(get_workspace)):
    ws.update_tab(tab_id, patch)
    return _tab_state(ws)


@app.patch("/tabs/{tab_id}/request")
async def update_request(tab_id: str, patch: RequestPatch, ws: Workspace = Depends(get_workspace)):
    ws.update_request(tab_id, patch)
    return _tab_state(ws)


@app.post("/tabs/{tab_id}/send")
async def send(tab_id: str, ws: Workspace = Depends(get_workspace)):
    tab = await ws.send(tab_id)
    if tab is None:
        return _tab_state(ws)
    return tab.model_dump(by_alias=True)


@app.get("/tabs/{tab_id}/curl")
async def generate_curl(tab_id: str, ws: Workspace = Depends(get_workspace)):
    command = ws.to_curl(tab_id)
    if command is None:
        raise HTTPException(status_code=404, detail="Tab not found")
    return {"curl": command}


# --- environments ---

def _env_state(ws: Workspace) -> dict:
    return {
        "environments": [e.model_dump() for e in ws.environments.list()],
        "activeEnvironmentId": ws.environments.active_id,
    }


@app.get("/environments")
async def list_envs(ws: Workspace = Depends(get_workspace)):
    return _env_state(ws)


@app.post("/environments")
async def create_env(payload: Environment, ws: Workspace = Depends(get_workspace)):
    ws.add_environment(payload)
    return {"id": payload.id, **_env_state(ws)}


@app.put("/environments/active")
async def set_active_env(payload: ActivateEnvironment, ws: Workspace = Depends(get_workspace)):
    ws.set_active_environment(payload.id)
    return _env_state(ws)


@app.patch("/environments/{env_id}")
async def update_env(env_id: str, payload: UpdateEnvironment, ws: Workspace = Depends(get_workspace)):
    ws.update_environment(env_id, name=payload.name, variables=payload.variables)
    return _env_state(ws)


@app.put("/environments/{env_id}/variables/{key}")
async def set_variable(env_id: str, key: str, payload: SetVariable, ws: Workspace = Depends(get_workspace)):
    ws.update_variable(env_id, key, payload.value)
    return _env_state(ws)


@app.delete("/environments/{env_id}/variables/{key}")
async def delete_variable(env_id: str, key: str, ws: Workspace = Depends(get_workspace)):
    ws.delete_variable(env_id, key)
    return _env_state(ws)


@app.post("/interpolate")
async def interpolate_text(payload: InterpolateText, ws: Workspace = Depends(get_workspace)):
    return ws.preview(payload.text)


# --- collections ---

def _collection_state(ws: Workspace) -> dict:
    grouped: Dict[str, List[dict]] = {
        name: [r.model_dump() for r in requests]
        for name, requests in ws.grouped_collections().items()
    }
    return {
        "collections": grouped,
        "names": ws.collection_names(),
        "activeCollection": ws.collections.active_collection,
    }


@app.get("/collections")
async def list_collections(ws: Workspace = Depends(get_workspace)):
    return _collection_state(ws)


@app.post("/collections")
async def create_collection(payload: CreateCollection, ws: Workspace = Depends(get_workspace)):
    ws.create_collection(payload.name)
    return _collection_state(ws)


@app.put("/collections/{name}")
async def rename_collection(name: str, payload: RenameCollection, ws: Workspace = Depends(get_workspace)):
    ws.rename_collection(name, payload.new_name)
    return _collection_state(ws)


@app.delete("/collections/{name}")
async def delete_collection(name: str, ws: Workspace = Depends(get_workspace)):
    ws.delete_collection(name)
    return _collection_state(ws)


@app.post("/collections/save")
async def save_to_collection(payload: SaveToCollection, ws: Workspace = Depends(get_workspace)):
    request_id = ws.save_tab(payload.tab_id, payload.collection)
    return {"id": request_id, **_collection_state(ws)}


@app.delete("/requests/{request_id}")
async def delete_request(request_id: str, ws: Workspace = Depends(get_workspace)):
    ws.delete_from_collection(request_id)
    return _collection_state(ws)


@app.post("/requests/{request_id}/open")
async def open_request(request_id: str, ws: Workspace = Depends(get_workspace)):
    tab_id = ws.open_saved(request_id)
    return {"id": tab_id, **_tab_state(ws)}


# --- history ---

@app.get("/history", response_model=List[HistoryEntry])
async def get_history(ws: Workspace = Depends(get_workspace)):
    return ws.history_entries()


@app.post("/history/{index}/open")
async def open_history(index: int, ws: Workspace = Depends(get_workspace)):
    tab_id = ws.open_history(index)
    return {"id": tab_id, **_tab_state(ws)}


# --- snapshot ---

@app.get("/snapshot")
async def get_snapshot(ws: Workspace = Depends(get_workspace)):
    return ws.snapshot().model_dump(by_alias=True)


@app.put("/snapshot")
async def put_snapshot(snapshot: WorkspaceSnapshot, ws: Workspace = Depends(get_workspace)):
    ws.restore(snapshot)
    return ws.snapshot().model_dump(by_alias=True)


@app.post("/snapshot/save")
def save_snapshot(ws: Workspace = Depends(get_workspace), store: SnapshotStore = Depends(get_store)):
    store.save(ws.snapshot())
    return {"status": "saved"}


@app.post("/snapshot/load")
def load_snapshot(ws: Workspace = Depends(get_workspace), store: SnapshotStore = Depends(get_store)):
    ws.restore(store.load())
    return ws.snapshot().model_dump(by_alias=True)
