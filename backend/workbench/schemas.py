from typing import Annotated, Any, Dict, List, Literal, Optional, Union
import uuid

from pydantic import BaseModel, ConfigDict, Field

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]

BODY_METHODS = ("POST", "PUT", "PATCH")


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class ApiRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: new_id("req"))
    name: str = "Untitled Request"
    method: HttpMethod = "GET"
    url: str = ""
    headers: Dict[str, str] = {}
    body: str = ""
    collection: Optional[str] = None


class RequestPatch(BaseModel):
    """Editable request fields; ``id`` is deliberately absent."""

    name: Optional[str] = None
    method: Optional[HttpMethod] = None
    url: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    body: Optional[str] = None
    collection: Optional[str] = None


class StructuredPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["structured"] = "structured"
    value: Any = None


class RawPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["raw"] = "raw"
    text: str = ""


Payload = Annotated[Union[StructuredPayload, RawPayload], Field(discriminator="kind")]


class ApiResponse(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: int
    status_text: str = Field("", alias="statusText")
    headers: Dict[str, str] = {}
    data: Payload = RawPayload()
    time: int = 0
    size: int = 0


class Environment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: new_id("env"))
    name: str
    variables: Dict[str, str] = {}


class Tab(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=lambda: new_id("tab"))
    request: ApiRequest
    response: Optional[ApiResponse] = None
    is_loading: bool = Field(False, alias="isLoading")


class TabPatch(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    request: Optional[ApiRequest] = None
    response: Optional[ApiResponse] = None
    is_loading: Optional[bool] = Field(None, alias="isLoading")


class HistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    request: ApiRequest
    # epoch milliseconds
    timestamp: int


def _default_environments() -> List[Environment]:
    from .environments import DEFAULT_ENVIRONMENTS

    return list(DEFAULT_ENVIRONMENTS)


class WorkspaceSnapshot(BaseModel):
    """Persistent part of the workspace; tabs are session-only and never included."""

    model_config = ConfigDict(populate_by_name=True)

    collections: List[ApiRequest] = []
    active_collection: str = Field("Default", alias="activeCollection")
    environments: List[Environment] = Field(default_factory=_default_environments)
    active_environment_id: Optional[str] = Field("local", alias="activeEnvironmentId")
    history: List[HistoryEntry] = []


# --- HTTP bodies ---

class NewTab(BaseModel):
    request: Optional[RequestPatch] = None


class ActivateEnvironment(BaseModel):
    id: Optional[str] = None


class SetVariable(BaseModel):
    value: str


class UpdateEnvironment(BaseModel):
    name: Optional[str] = None
    variables: Optional[Dict[str, str]] = None


class CreateCollection(BaseModel):
    name: str


class RenameCollection(BaseModel):
    new_name: str


class SaveToCollection(BaseModel):
    tab_id: str
    collection: Optional[str] = None


class InterpolateText(BaseModel):
    text: str
