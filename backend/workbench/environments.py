import threading
from typing import Dict, List, Optional

from .logging_utils import get_logger
from .schemas import Environment

logger = get_logger(__name__)

DEFAULT_ENVIRONMENTS = (
    Environment(
        id="local",
        name="Local",
        variables={"base_url": "http://localhost:3000", "api_key": "dev-key-123"},
    ),
    Environment(
        id="staging",
        name="Staging",
        variables={"base_url": "https://api-staging.example.com", "api_key": "staging-key-456"},
    ),
    Environment(
        id="production",
        name="Production",
        variables={"base_url": "https://api.example.com", "api_key": "prod-key-789"},
    ),
)


class EnvironmentStore:
    """
    Named variable sets keyed by id, at most one of them active.

    Unknown ids are ignored by every mutation. Each mutation swaps in a new
    mapping so readers never observe a half-applied change. Environments
    cannot be deleted.
    """

    def __init__(
        self,
        environments: Optional[List[Environment]] = None,
        active_id: Optional[str] = None,
    ):
        self._lock = threading.RLock()
        if environments is None:
            environments = list(DEFAULT_ENVIRONMENTS)
        self._environments: Dict[str, Environment] = {e.id: e for e in environments}
        self._active_id = active_id if active_id in self._environments else None

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    def list(self) -> List[Environment]:
        return list(self._environments.values())

    def get(self, env_id: str) -> Optional[Environment]:
        return self._environments.get(env_id)

    def active(self) -> Optional[Environment]:
        if self._active_id is None:
            return None
        return self._environments.get(self._active_id)

    def add_environment(self, environment: Environment) -> None:
        # same id replaces the previous definition in place
        with self._lock:
            environments = dict(self._environments)
            environments[environment.id] = environment.model_copy(deep=True)
            self._environments = environments

    def set_active(self, env_id: Optional[str]) -> None:
        with self._lock:
            if env_id is not None and env_id not in self._environments:
                return
            self._active_id = env_id

    def update_environment(
        self,
        env_id: str,
        name: Optional[str] = None,
        variables: Optional[Dict[str, str]] = None,
    ) -> None:
        updates = {}
        if name is not None:
            updates["name"] = name
        if variables is not None:
            updates["variables"] = dict(variables)
        if updates:
            self._replace(env_id, updates)

    def update_variable(self, env_id: str, key: str, value: str) -> None:
        with self._lock:
            env = self._environments.get(env_id)
            if env is None:
                return
            variables = dict(env.variables)
            variables[key] = value
            self._replace(env_id, {"variables": variables})

    def delete_variable(self, env_id: str, key: str) -> None:
        with self._lock:
            env = self._environments.get(env_id)
            if env is None or key not in env.variables:
                return
            variables = {k: v for k, v in env.variables.items() if k != key}
            self._replace(env_id, {"variables": variables})

    def _replace(self, env_id: str, updates: dict) -> None:
        with self._lock:
            env = self._environments.get(env_id)
            if env is None:
                return
            environments = dict(self._environments)
            environments[env_id] = env.model_copy(update=updates)
            self._environments = environments
