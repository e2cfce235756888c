"""Pytest configuration and shared fixtures"""
import asyncio
import os
import sys
import time
from unittest.mock import AsyncMock, Mock

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from sonicmon.api.prometheus_client import PrometheusClient
from sonicmon.api.registry_client import RegistryClient
from sonicmon.api.schemas import Device, DeviceDetails, DeviceListing, RangeQueryResponse


def local_ts(hour, minute, second=0, day=15):
    """Epoch seconds for a local wall-clock time on a fixed day."""
    return time.mktime((2024, 1, day, hour, minute, second, 0, 0, -1))


def range_response(*series, status="success"):
    """
    Build a Prometheus query_range response.

    Each positional argument is a list of (timestamp, value) pairs for one
    result entry; values are sent as strings like the real API does.
    """
    return RangeQueryResponse.model_validate({
        "status": status,
        "data": {
            "resultType": "matrix",
            "result": [
                {"metric": {}, "values": [[ts, str(value)] for ts, value in values]}
                for values in series
            ],
        },
    })


def empty_response():
    return range_response()


async def serve(routes, scenario):
    """Run ``await scenario(base_url)`` against a local aiohttp server with the given routes."""
    app = web.Application()
    app.add_routes(routes)
    server = TestServer(app)
    await server.start_server()
    try:
        return await scenario(str(server.make_url("/")))
    finally:
        await server.close()


async def settle(*pollers, rounds=50):
    """Let scheduled poller tasks run until none is idle or loading."""
    for _ in range(rounds):
        await asyncio.sleep(0)
        if all(p.snapshot.state.value not in ("idle", "loading") for p in pollers):
            return


@pytest.fixture
def sample_details():
    return DeviceDetails(
        temperature_sensors=["tempA", "tempB"],
        containers=["swss", "syncd"],
        memory_types=["used", "free"],
        os_version="SONiC.202311",
        kernel_version="6.1.0-11-2-amd64",
        asic_type="broadcom",
        sai_version="libsaibcm 10.1.0.0",
        active_interfaces=32,
    )


@pytest.fixture
def sample_samples():
    """Three one-minute-apart samples at 10:00-10:02 local time."""
    return [(local_ts(10, 0), 41.5), (local_ts(10, 1), 42.0), (local_ts(10, 2), 43.25)]


@pytest.fixture
def mock_registry(sample_details):
    """RegistryClient with mocked network calls: lists D1 and D2, details only for D1."""
    registry = Mock(spec=RegistryClient)
    registry.list_devices = AsyncMock(return_value=DeviceListing(
        devices=[Device(id="D1", name="Switch D1", ip="10.0.0.1"), Device(id="D2", name="Switch D2")],
        offline=False,
    ))

    async def details_for(device_id):
        return sample_details if device_id == "D1" else None

    registry.get_details = AsyncMock(side_effect=details_for)
    registry.close = AsyncMock()
    return registry


@pytest.fixture
def mock_metrics(sample_samples):
    """
    PrometheusClient with mocked queries.

    tempA, swss, used and the CPU series return three samples; every other
    series returns an empty (but successful) response.
    """
    metrics = Mock(spec=PrometheusClient)
    with_data = {"tempA", "swss", "used", "cpu_percent"}

    async def query(metric_name, device_id, label_key=None, label_value=None, *args, **kwargs):
        if label_value in with_data:
            return range_response(sample_samples)
        return empty_response()

    metrics.query = AsyncMock(side_effect=query)
    metrics.close = AsyncMock()
    return metrics
