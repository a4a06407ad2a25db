import json
import math
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

import httpx

from .interpolation import interpolate
from .logging_utils import get_logger
from .schemas import BODY_METHODS, ApiRequest, ApiResponse, Environment, RawPayload, StructuredPayload

logger = get_logger(__name__)

NETWORK_ERROR = "Network Error"


@dataclass(frozen=True)
class PreparedRequest:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None


def _reject_constant(name: str):
    # NaN and Infinity are not JSON and cannot be serialized back out
    raise ValueError(f"invalid JSON constant {name}")


def _finite_float(literal: str) -> float:
    value = float(literal)
    if math.isinf(value):
        raise ValueError(f"number out of range {literal}")
    return value


def _loads(text: str):
    return json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)


def _is_json(text: str) -> bool:
    try:
        _loads(text)
    except (ValueError, RecursionError):
        return False
    return True


def parse_payload(text: str):
    try:
        return StructuredPayload(value=_loads(text))
    except (ValueError, RecursionError):
        return RawPayload(text=text)


def prepare(request: ApiRequest, environment: Optional[Environment]) -> PreparedRequest:
    """Resolve templates and derive the exact headers and body that go on the wire."""
    url = interpolate(request.url, environment)
    body = interpolate(request.body, environment)

    headers = {}
    for key, value in request.headers.items():
        resolved = interpolate(value, environment)
        if key.strip() and resolved.strip():
            headers[key.strip()] = resolved

    has_body = request.method in BODY_METHODS and bool(body)
    if has_body and not any(k.lower() == "content-type" for k in headers):
        # a guess for the server's sake, malformed JSON is still sent
        headers["Content-Type"] = "application/json" if _is_json(body) else "text/plain"

    return PreparedRequest(
        method=request.method,
        url=url,
        headers=headers,
        body=body if has_body else None,
    )


def network_error(message: str) -> ApiResponse:
    return ApiResponse(
        status=0,
        status_text=NETWORK_ERROR,
        headers={},
        data=StructuredPayload(value={"error": message}),
        time=0,
        size=0,
    )


class RequestExecutor:
    """
    Sends one resolved request and normalizes the outcome into an ApiResponse.

    Transport failures never escape: they come back as a status 0 response.
    ``transport`` is handed to httpx as is, tests pass an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        kwargs = {"follow_redirects": True, "transport": self.transport}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        return httpx.AsyncClient(**kwargs)

    async def execute(self, request: ApiRequest, environment: Optional[Environment]) -> ApiResponse:
        prepared = prepare(request, environment)
        logger.debug("Sending %s %s", request.method, request.url)

        start = time.time()
        try:
            async with self._client() as client:
                r = await client.request(
                    method=prepared.method,
                    url=prepared.url,
                    headers=prepared.headers,
                    content=prepared.body,
                )
                text = r.text
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError, ValueError) as exc:
            message = str(exc) or type(exc).__name__
            logger.warning("%s %s failed: %s", request.method, request.url, message)
            return network_error(message)

        duration_ms = max(0, int((time.time() - start) * 1000))

        return ApiResponse(
            status=r.status_code,
            status_text=r.reason_phrase,
            headers=dict(r.headers),
            data=parse_payload(text),
            time=duration_ms,
            size=len(text.encode("utf-8")),
        )
