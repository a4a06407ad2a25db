"""Tests for request preparation and execution."""

import json

import httpx
import pytest

from workbench.executor import NETWORK_ERROR, RequestExecutor, parse_payload, prepare
from workbench.schemas import ApiRequest, RawPayload, StructuredPayload


def make_request(**kwargs):
    return ApiRequest(**kwargs)


# =============================================================================
# prepare()
# =============================================================================

class TestPrepare:
    def test_resolves_url_body_and_header_values(self, local_env):
        request = make_request(
            method="POST",
            url="{{base_url}}/items",
            headers={"Authorization": "Bearer {{token}}"},
            body='{"u": "{{base_url}}"}',
        )
        prepared = prepare(request, local_env)
        assert prepared.url == "http://x/items"
        assert prepared.headers["Authorization"] == "Bearer abc"
        assert prepared.body == '{"u": "http://x"}'

    def test_blank_header_key_or_value_dropped(self, local_env):
        request = make_request(headers={" ": "v", "X-Empty": "  ", "X-Keep": "1"})
        assert prepare(request, local_env).headers == {"X-Keep": "1"}

    def test_unresolved_header_value_kept_verbatim(self):
        request = make_request(headers={"X-Token": "{{missing}}"})
        assert prepare(request, None).headers == {"X-Token": "{{missing}}"}

    def test_json_body_gets_json_content_type(self):
        prepared = prepare(make_request(method="POST", body='{"a": 1}'), None)
        assert prepared.headers["Content-Type"] == "application/json"

    def test_malformed_json_sent_as_text(self):
        prepared = prepare(make_request(method="PUT", body="{not json"), None)
        assert prepared.headers["Content-Type"] == "text/plain"
        assert prepared.body == "{not json"

    def test_existing_content_type_respected(self):
        request = make_request(method="PATCH", body="a=1", headers={"content-type": "application/x-www-form-urlencoded"})
        prepared = prepare(request, None)
        assert prepared.headers == {"content-type": "application/x-www-form-urlencoded"}

    @pytest.mark.parametrize("method", ["GET", "DELETE"])
    def test_body_omitted_for_get_and_delete(self, method):
        prepared = prepare(make_request(method=method, body='{"a": 1}'), None)
        assert prepared.body is None
        assert "Content-Type" not in prepared.headers

    def test_empty_body_omitted_without_content_type(self):
        prepared = prepare(make_request(method="POST", body=""), None)
        assert prepared.body is None
        assert prepared.headers == {}

    def test_deeply_nested_body_sent_as_text(self):
        body = "[" * 100000
        prepared = prepare(make_request(method="POST", body=body), None)
        assert prepared.headers["Content-Type"] == "text/plain"
        assert prepared.body == body

    def test_nan_body_sent_as_text(self):
        prepared = prepare(make_request(method="POST", body="NaN"), None)
        assert prepared.headers["Content-Type"] == "text/plain"


class TestParsePayload:
    def test_json_is_structured(self):
        assert parse_payload('{"a": [1, 2]}') == StructuredPayload(value={"a": [1, 2]})

    def test_text_is_raw(self):
        assert parse_payload("hello") == RawPayload(text="hello")

    def test_empty_is_raw(self):
        assert parse_payload("") == RawPayload(text="")

    def test_deeply_nested_is_raw(self):
        text = "[" * 100000
        assert parse_payload(text) == RawPayload(text=text)

    @pytest.mark.parametrize("text", ['{"v": NaN}', "Infinity", "[-Infinity]", "1e999"])
    def test_non_finite_numbers_are_raw(self, text):
        assert parse_payload(text) == RawPayload(text=text)


# =============================================================================
# execute()
# =============================================================================

class TestExecute:
    @pytest.mark.asyncio
    async def test_get_against_reachable_endpoint(self, local_env):
        body = "héllo wörld"

        def handler(request):
            return httpx.Response(200, text=body, headers={"X-Trace": "1"})

        executor = RequestExecutor(transport=httpx.MockTransport(handler))
        response = await executor.execute(make_request(url="{{base_url}}/ping"), local_env)

        assert response.status == 200
        assert response.status_text == "OK"
        assert response.time >= 0
        assert response.size == len(body.encode("utf-8"))
        assert response.data == RawPayload(text=body)
        assert response.headers["x-trace"] == "1"

    @pytest.mark.asyncio
    async def test_wire_request_matches_prepared(self, local_env, echo_executor):
        request = make_request(
            method="POST",
            url="{{base_url}}/items",
            headers={"X-Key": "{{token}}"},
            body='{"n": 1}',
        )
        response = await echo_executor.execute(request, local_env)
        seen = response.data.value
        assert seen["method"] == "POST"
        assert seen["url"] == "http://x/items"
        assert seen["headers"]["x-key"] == "abc"
        assert seen["headers"]["content-type"] == "application/json"
        assert json.loads(seen["body"]) == {"n": 1}

    @pytest.mark.asyncio
    async def test_get_sends_no_body(self, echo_executor):
        response = await echo_executor.execute(make_request(url="http://x", body="ignored"), None)
        assert response.data.value["body"] == ""

    @pytest.mark.asyncio
    async def test_json_response_structured_size_from_raw_text(self):
        raw = '{"ok":   true}'

        def handler(request):
            return httpx.Response(201, content=raw.encode("utf-8"))

        executor = RequestExecutor(transport=httpx.MockTransport(handler))
        response = await executor.execute(make_request(url="http://x"), None)
        assert response.status == 201
        assert response.data == StructuredPayload(value={"ok": True})
        assert response.size == len(raw)

    @pytest.mark.asyncio
    async def test_unreachable_host_becomes_network_error(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        executor = RequestExecutor(transport=httpx.MockTransport(handler))
        response = await executor.execute(make_request(url="http://unreachable.invalid"), None)

        assert response.status == 0
        assert response.status_text == NETWORK_ERROR
        assert response.headers == {}
        assert response.time == 0
        assert response.size == 0
        assert response.data == StructuredPayload(value={"error": "Connection refused"})

    @pytest.mark.asyncio
    async def test_timeout_becomes_network_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        executor = RequestExecutor(transport=httpx.MockTransport(handler))
        response = await executor.execute(make_request(url="http://slow"), None)
        assert response.status == 0
        assert response.data.value["error"] == "timed out"

    @pytest.mark.asyncio
    async def test_empty_url_becomes_network_error(self):
        response = await RequestExecutor().execute(make_request(url=""), None)
        assert response.status == 0
        assert response.status_text == NETWORK_ERROR

    @pytest.mark.asyncio
    async def test_unresolved_scheme_becomes_network_error(self):
        response = await RequestExecutor().execute(make_request(url="{{base_url}}/ping"), None)
        assert response.status == 0

    @pytest.mark.asyncio
    async def test_deeply_nested_response_is_raw(self):
        raw = "[" * 100000

        def handler(request):
            return httpx.Response(200, text=raw)

        executor = RequestExecutor(transport=httpx.MockTransport(handler))
        response = await executor.execute(make_request(url="http://x"), None)
        assert response.status == 200
        assert response.data == RawPayload(text=raw)
        assert response.size == len(raw)
