"""Prometheus range-query client for device telemetry."""

import asyncio
import logging
import time
from typing import Dict, Optional

import aiohttp
from pydantic import ValidationError

from .schemas import RangeQueryResponse

logger = logging.getLogger("sonicmon.metrics")


def escape_label_value(value: str) -> str:
    """Escape a label value for use inside a double-quoted PromQL matcher."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def build_selector(
    metric_name: str,
    device_id: str,
    label_key: Optional[str] = None,
    label_value: Optional[str] = None,
) -> str:
    """
    Build a label-matched selector for one device.

    The device is matched on the ``job`` label; the extra equality filter is
    only added when both key and value are given.

    >>> build_selector("cpu_usage", "sw1", "current_cpu_usage", "cpu_percent")
    'cpu_usage{job="sw1", current_cpu_usage="cpu_percent"}'
    """
    selector = f'{metric_name}{{job="{escape_label_value(device_id)}"'
    if label_key and label_value:
        selector += f', {label_key}="{escape_label_value(label_value)}"'
    return selector + "}"


def has_samples(response: Optional[RangeQueryResponse]) -> bool:
    """True when any series in the response carries at least one sample."""
    if response is None:
        return False
    return any(series.values for series in response.data.result)


class PrometheusClient:
    """Client for the Prometheus HTTP API (``/api/v1/query_range``)."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        window_seconds: int = 3600,
        step_seconds: int = 30,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize Prometheus client.

        Args:
            base_url: Prometheus base URL (e.g., http://localhost:9090)
            timeout: Total request timeout in seconds
            window_seconds: Default trailing window for range queries
            step_seconds: Default resolution step for range queries
            session: Optional shared aiohttp session (owned by the caller)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.window_seconds = window_seconds
        self.step_seconds = step_seconds
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _get_json(self, path: str, params: Dict[str, str]) -> dict:
        """
        GET a JSON document from Prometheus.

        Raises:
            aiohttp.ClientError: On connection errors and non-2xx statuses
            asyncio.TimeoutError: When the request exceeds the timeout
        """
        url = f"{self.base_url}{path}"
        async with self._get_session().get(url, params=params) as response:
            response.raise_for_status()
            return await response.json(content_type=None)

    async def query(
        self,
        metric_name: str,
        device_id: str,
        label_key: Optional[str] = None,
        label_value: Optional[str] = None,
        window_seconds: Optional[int] = None,
        step_seconds: Optional[int] = None,
    ) -> Optional[RangeQueryResponse]:
        """
        Range-query one metric for one device over a trailing window ending now.

        Returns:
            Parsed response, or None on any failure (transport error, HTTP
            error status, undecodable body or a non-success status field).
            Callers treat None exactly like an empty result.
        """
        window = window_seconds or self.window_seconds
        step = step_seconds or self.step_seconds
        end = int(time.time())
        start = end - window
        selector = build_selector(metric_name, device_id, label_key, label_value)
        params = {
            "query": selector,
            "start": str(start),
            "end": str(end),
            "step": f"{step}s",
        }

        try:
            payload = await self._get_json("/api/v1/query_range", params)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning(f"Prometheus query failed for {selector}: {e}")
            return None

        try:
            response = RangeQueryResponse.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Unexpected Prometheus payload for {selector}: {e}")
            return None

        if response.status != "success":
            logger.warning(f"Prometheus returned status '{response.status}' for {selector}")
            return None

        logger.debug(
            f"Prometheus {selector}: {len(response.data.result)} series, "
            f"{sum(len(s.values) for s in response.data.result)} samples"
        )
        return response
