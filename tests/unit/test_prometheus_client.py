"""Unit tests for the Prometheus range-query client

Tests selector building, request parameters and failure handling.
"""
import asyncio
from unittest.mock import AsyncMock, patch

import aiohttp
from aiohttp import web
import pytest

from sonicmon.api.prometheus_client import (
    PrometheusClient,
    build_selector,
    escape_label_value,
    has_samples,
)
from tests.conftest import empty_response, range_response, serve


MOCK_RANGE_PAYLOAD = {
    "status": "success",
    "data": {
        "resultType": "matrix",
        "result": [
            {
                "metric": {"__name__": "temperature_celsius", "job": "sw1", "sensor": "tempA"},
                "values": [[1705312800, "41.5"], [1705312830, "42"], [1705312860, "NaN"]],
            }
        ],
    },
}


class TestBuildSelector:
    """PromQL selector construction"""

    def test_device_only(self):
        assert build_selector("cpu_usage", "sw1") == 'cpu_usage{job="sw1"}'

    def test_with_extra_label(self):
        selector = build_selector("temperature_celsius", "sw1", "sensor", "tempA")
        assert selector == 'temperature_celsius{job="sw1", sensor="tempA"}'

    def test_extra_label_needs_key_and_value(self):
        assert build_selector("m", "sw1", "sensor", None) == 'm{job="sw1"}'
        assert build_selector("m", "sw1", None, "tempA") == 'm{job="sw1"}'
        assert build_selector("m", "sw1", "sensor", "") == 'm{job="sw1"}'

    def test_label_values_are_escaped(self):
        assert escape_label_value('a"b\\c') == 'a\\"b\\\\c'
        assert build_selector("m", 'dev"1') == 'm{job="dev\\"1"}'


class TestHasSamples:
    def test_none_has_no_samples(self):
        assert has_samples(None) is False

    def test_empty_result(self):
        assert has_samples(empty_response()) is False

    def test_result_without_values(self):
        assert has_samples(range_response([])) is False

    def test_with_values(self):
        assert has_samples(range_response([(1705312800, 1)])) is True


class TestQuery:
    """PrometheusClient.query with the HTTP layer mocked"""

    def _client(self):
        return PrometheusClient("http://prometheus:9090/", window_seconds=3600, step_seconds=30)

    def test_base_url_trailing_slash_stripped(self):
        assert self._client().base_url == "http://prometheus:9090"

    def test_successful_query_is_parsed(self):
        client = self._client()
        with patch.object(client, "_get_json", new=AsyncMock(return_value=MOCK_RANGE_PAYLOAD)):
            response = asyncio.run(client.query("temperature_celsius", "sw1", "sensor", "tempA"))

        assert response is not None
        assert response.status == "success"
        values = response.data.result[0].values
        assert values[0] == (1705312800.0, 41.5)
        assert values[1] == (1705312830.0, 42.0)
        assert response.data.result[0].metric["sensor"] == "tempA"

    def test_request_parameters(self):
        client = self._client()
        mock_get = AsyncMock(return_value=MOCK_RANGE_PAYLOAD)

        with patch.object(client, "_get_json", new=mock_get), \
                patch("sonicmon.api.prometheus_client.time.time", return_value=1705316400.7):
            asyncio.run(client.query("memory_usage", "sw1", "memory_type", "used"))

        path, params = mock_get.call_args[0]
        assert path == "/api/v1/query_range"
        assert params == {
            "query": 'memory_usage{job="sw1", memory_type="used"}',
            "start": "1705312800",
            "end": "1705316400",
            "step": "30s",
        }

    def test_window_and_step_overrides(self):
        client = self._client()
        mock_get = AsyncMock(return_value=MOCK_RANGE_PAYLOAD)

        with patch.object(client, "_get_json", new=mock_get), \
                patch("sonicmon.api.prometheus_client.time.time", return_value=1000000):
            asyncio.run(client.query("cpu_usage", "sw1", window_seconds=600, step_seconds=15))

        params = mock_get.call_args[0][1]
        assert params["start"] == "999400"
        assert params["step"] == "15s"

    @pytest.mark.parametrize("error", [
        aiohttp.ClientConnectionError("connection refused"),
        aiohttp.ClientPayloadError("truncated"),
        asyncio.TimeoutError(),
        ValueError("not json"),
    ])
    def test_transport_failures_return_none(self, error):
        client = self._client()
        with patch.object(client, "_get_json", new=AsyncMock(side_effect=error)):
            assert asyncio.run(client.query("cpu_usage", "sw1")) is None

    def test_error_status_returns_none(self):
        client = self._client()
        payload = {"status": "error", "errorType": "bad_data", "error": "parse error"}
        with patch.object(client, "_get_json", new=AsyncMock(return_value=payload)):
            assert asyncio.run(client.query("cpu_usage", "sw1")) is None

    def test_malformed_payload_returns_none(self):
        client = self._client()
        payload = {"status": "success", "data": {"result": [{"values": "oops"}]}}
        with patch.object(client, "_get_json", new=AsyncMock(return_value=payload)):
            assert asyncio.run(client.query("cpu_usage", "sw1")) is None

    def test_empty_result_is_not_a_failure(self):
        client = self._client()
        payload = {"status": "success", "data": {"resultType": "matrix", "result": []}}
        with patch.object(client, "_get_json", new=AsyncMock(return_value=payload)):
            response = asyncio.run(client.query("cpu_usage", "sw1"))

        assert response is not None
        assert has_samples(response) is False

    def test_close_without_session(self):
        client = self._client()
        asyncio.run(client.close())
        assert client._session is None


class TestQueryOverHttp:
    """PrometheusClient.query against a local HTTP server"""

    def _query(self, handler, **query_kwargs):
        async def scenario(base_url):
            client = PrometheusClient(base_url, timeout=5)
            try:
                return await client.query("cpu_usage", "sw1", "current_cpu_usage", "cpu_percent", **query_kwargs)
            finally:
                await client.close()

        return asyncio.run(serve([web.get("/api/v1/query_range", handler)], scenario))

    def test_success_sends_range_parameters(self):
        seen = {}

        async def handler(request):
            seen.update(request.query)
            return web.json_response(MOCK_RANGE_PAYLOAD)

        response = self._query(handler, window_seconds=600, step_seconds=15)

        assert response is not None
        assert response.data.result[0].values[0] == (1705312800.0, 41.5)
        assert seen["query"] == 'cpu_usage{job="sw1", current_cpu_usage="cpu_percent"}'
        assert int(seen["end"]) - int(seen["start"]) == 600
        assert seen["step"] == "15s"

    def test_bad_request_with_json_body_returns_none(self):
        async def handler(request):
            return web.json_response(
                {"status": "error", "errorType": "bad_data", "error": "parse error"}, status=400
            )

        assert self._query(handler) is None

    def test_server_error_returns_none(self):
        async def handler(request):
            return web.Response(status=500, text="internal error")

        assert self._query(handler) is None

    def test_non_json_body_returns_none(self):
        async def handler(request):
            return web.Response(text="<html>maintenance</html>", content_type="text/html")

        assert self._query(handler) is None

    def test_unreachable_server_returns_none(self):
        async def scenario():
            client = PrometheusClient("http://127.0.0.1:1", timeout=2)
            try:
                return await client.query("cpu_usage", "sw1")
            finally:
                await client.close()

        assert asyncio.run(scenario()) is None
