import json
from typing import Any, Callable, Dict

from sqlalchemy.orm import Session

from .logging_utils import get_logger
from .models import EnvironmentRow, HistoryRow, SavedRequestRow, SettingRow
from .schemas import ApiRequest, Environment, HistoryEntry, WorkspaceSnapshot

logger = get_logger(__name__)

ACTIVE_COLLECTION = "activeCollection"
ACTIVE_ENVIRONMENT = "activeEnvironmentId"


def _loads(raw: str, default: Any) -> Any:
    try:
        return json.loads(raw or "null") or default
    except ValueError:
        return default


class SnapshotStore:
    """
    Persists a WorkspaceSnapshot through SQLAlchemy.

    ``save`` rewrites every table in a single transaction. ``load`` fills in
    defaults for whatever an older database does not carry yet.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def load(self) -> WorkspaceSnapshot:
        db = self.session_factory()
        try:
            settings = {s.key: s.value for s in db.query(SettingRow).all()}
            saved = db.query(SavedRequestRow).order_by(SavedRequestRow.position).all()
            envs = db.query(EnvironmentRow).order_by(EnvironmentRow.position).all()
            history = db.query(HistoryRow).order_by(HistoryRow.position).all()

            data: Dict[str, Any] = {
                "collections": [
                    ApiRequest(
                        id=r.id,
                        name=r.name,
                        method=r.method,
                        url=r.url,
                        headers=_loads(r.headers, {}),
                        body=r.body or "",
                        collection=r.collection,
                    )
                    for r in saved
                ],
                "history": [
                    HistoryEntry(request=ApiRequest(**_loads(h.request, {})), timestamp=h.timestamp)
                    for h in history
                ],
            }
            if envs:
                data["environments"] = [
                    Environment(id=e.id, name=e.name, variables=_loads(e.variables, {})) for e in envs
                ]
            if settings.get(ACTIVE_COLLECTION):
                data["activeCollection"] = settings[ACTIVE_COLLECTION]
            if ACTIVE_ENVIRONMENT in settings:
                data["activeEnvironmentId"] = settings[ACTIVE_ENVIRONMENT]
        finally:
            db.close()

        snapshot = WorkspaceSnapshot(**data)
        logger.debug(
            "Loaded snapshot with %d saved request(s) and %d history entries",
            len(snapshot.collections),
            len(snapshot.history),
        )
        return snapshot

    def save(self, snapshot: WorkspaceSnapshot) -> None:
        db = self.session_factory()
        try:
            for model in (SavedRequestRow, HistoryRow, EnvironmentRow, SettingRow):
                db.query(model).delete()

            for i, r in enumerate(snapshot.collections):
                db.add(SavedRequestRow(
                    id=r.id,
                    position=i,
                    name=r.name,
                    method=r.method,
                    url=r.url,
                    headers=json.dumps(r.headers),
                    body=r.body,
                    collection=r.collection,
                ))
            for i, h in enumerate(snapshot.history):
                db.add(HistoryRow(position=i, timestamp=h.timestamp, request=h.request.model_dump_json()))
            for i, e in enumerate(snapshot.environments):
                db.add(EnvironmentRow(id=e.id, position=i, name=e.name, variables=json.dumps(e.variables)))

            db.add(SettingRow(key=ACTIVE_COLLECTION, value=snapshot.active_collection))
            db.add(SettingRow(key=ACTIVE_ENVIRONMENT, value=snapshot.active_environment_id))
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
