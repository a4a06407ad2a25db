"""
Shared fixtures for the workbench tests.

Nothing here touches the network: executors run on ``httpx.MockTransport``
and persistence runs on in-memory SQLite.
"""

import os

# must be set before workbench.db builds its engine
os.environ.setdefault("WORKBENCH_DATABASE_URL", "sqlite://")

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from workbench.config import Settings
from workbench.db import Base
from workbench.executor import RequestExecutor
from workbench.schemas import Environment
from workbench.storage import SnapshotStore
from workbench.workspace import Workspace


def echo_handler(request: httpx.Request) -> httpx.Response:
    """Answer with a JSON description of what was received."""
    return httpx.Response(
        200,
        json={
            "method": request.method,
            "url": str(request.url),
            "headers": dict(request.headers),
            "body": request.content.decode("utf-8"),
        },
    )


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        self.now += 1
        return self.now


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def local_env():
    return Environment(id="local", name="Local", variables={"base_url": "http://x", "token": "abc"})


@pytest.fixture
def echo_executor():
    return RequestExecutor(transport=httpx.MockTransport(echo_handler))


@pytest.fixture
def workspace(settings, echo_executor):
    return Workspace(settings=settings, executor=echo_executor, clock=FakeClock())


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def snapshot_store(session_factory):
    return SnapshotStore(session_factory)
