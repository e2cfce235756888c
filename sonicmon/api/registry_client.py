"""Device registry API client for the device list and per-device details."""

import asyncio
import logging
from typing import List, Optional
from urllib.parse import quote

import aiohttp
from pydantic import ValidationError

from .schemas import Device, DeviceDetails, DeviceListing

logger = logging.getLogger("sonicmon.registry")

# Served (flagged as placeholders) when the registry cannot be reached
PLACEHOLDER_DEVICES = [
    Device(id="ixr-7220-h5-32d-evt2-1", name="SONiC Switch 01", ip="192.168.1.10", placeholder=True),
    Device(id="sonic-sw-02", name="SONiC Switch 02", ip="192.168.1.11", placeholder=True),
]


class RegistryClient:
    """Client for the device registry HTTP API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        placeholder_fallback: bool = True,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize registry client.

        Args:
            base_url: Registry base URL (e.g., http://localhost:8080)
            timeout: Total request timeout in seconds
            placeholder_fallback: Serve PLACEHOLDER_DEVICES when listing fails
            session: Optional shared aiohttp session (owned by the caller)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.placeholder_fallback = placeholder_fallback
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

    async def _get_json(self, endpoint: str) -> dict:
        """
        GET a JSON document from the registry.

        Raises:
            aiohttp.ClientError: On connection errors and non-2xx statuses
            asyncio.TimeoutError: When the request exceeds the timeout
        """
        url = f"{self.base_url}{endpoint}"
        async with self._get_session().get(url, headers={"Accept": "application/json"}) as response:
            response.raise_for_status()
            return await response.json(content_type=None)

    def _offline_listing(self) -> DeviceListing:
        devices: List[Device] = list(PLACEHOLDER_DEVICES) if self.placeholder_fallback else []
        return DeviceListing(devices=devices, offline=True)

    async def list_devices(self) -> DeviceListing:
        """
        Get the registered devices.

        Returns:
            DeviceListing. When the registry is unreachable or answers with
            garbage, the listing is marked offline and holds the placeholder
            devices (or nothing, when the fallback is disabled).
        """
        try:
            data = await self._get_json("/registered_devices")
            raw_devices = data.get("registered_devices") or []
            if not isinstance(raw_devices, list):
                raise ValueError(f"registered_devices is a {type(raw_devices).__name__}, not a list")
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError, AttributeError) as e:
            logger.warning(f"Device registry unavailable at {self.base_url}: {e}")
            listing = self._offline_listing()
            if listing.devices:
                logger.warning(f"Serving {len(listing.devices)} placeholder devices")
            return listing

        devices = []
        for item in raw_devices:
            try:
                devices.append(Device.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed registry entry {item!r}: {e}")

        logger.debug(f"Registry listed {len(devices)} devices")
        return DeviceListing(devices=devices, offline=False)

    async def get_details(self, device_id: str) -> Optional[DeviceDetails]:
        """
        Get static details for one device.

        Returns:
            DeviceDetails, or None on any failure. None means "details unknown",
            not an empty device.
        """
        try:
            data = await self._get_json(f"/details/{quote(device_id, safe='')}")
            return DeviceDetails.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Invalid details payload for {device_id}: {e}")
            return None
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning(f"Failed to fetch details for {device_id}: {e}")
            return None
