"""
Dashboard Controller

Holds the dashboard's application state: registry listing, selected device,
its details and one poller per panel. All methods return Python data
structures that are easy to debug and test.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

from ..api.prometheus_client import PrometheusClient
from ..api.registry_client import RegistryClient
from ..api.schemas import Device, DeviceDetails, DeviceListing, PanelSnapshot
from ..core.errors import UnknownDeviceError, UnknownPanelError
from .config import PANELS, CHART_COLORS
from .poller import PanelPoller

logger = logging.getLogger("sonicmon.dashboard")


class DashboardController:
    """
    Single-session dashboard state.

    Device selection replaces the previous device's details and restarts
    every panel poller; nothing from the previous device is carried over.
    """

    def __init__(
        self,
        registry: RegistryClient,
        metrics: PrometheusClient,
        poll_interval: float = 30,
        settings: Optional[Dict[str, Any]] = None,
    ):
        self.registry = registry
        self.metrics = metrics
        self.poll_interval = poll_interval
        self.settings = settings or {}
        self.listing = DeviceListing()
        self.selected: Optional[Device] = None
        self.details: Optional[DeviceDetails] = None
        self.loading = False
        self.pollers: Dict[str, PanelPoller] = {
            panel.key: PanelPoller(panel, metrics, poll_interval) for panel in PANELS
        }
        self._select_lock = asyncio.Lock()

    # ---------------- Devices ----------------

    @property
    def devices(self) -> List[Device]:
        return self.listing.devices

    def find_device(self, device_id: str) -> Device:
        for device in self.listing.devices:
            if device.id == device_id:
                return device
        raise UnknownDeviceError(device_id)

    async def load_devices(self) -> DeviceListing:
        """Fetch the registry listing and select the first device, if any."""
        self.loading = True
        try:
            self.listing = await self.registry.list_devices()
        finally:
            self.loading = False

        logger.info(
            f"Loaded {len(self.listing.devices)} devices"
            + (" (registry offline)" if self.listing.offline else "")
        )

        if self.listing.devices:
            await self.select_device(self.listing.devices[0].id)
        else:
            self._unmount_panels()
            self.selected = None
            self.details = None
        return self.listing

    async def select_device(self, device_id: str) -> Optional[DeviceDetails]:
        """
        Select a device: replace its details and restart every panel.

        Raises:
            UnknownDeviceError: device_id is not in the current listing
        """
        device = self.find_device(device_id)

        async with self._select_lock:
            # Stop old timers before the details request so no panel keeps
            # polling the previous device meanwhile
            self._unmount_panels()
            self.selected = device
            self.details = None

            details = await self.registry.get_details(device.id)
            if self.selected is not device:
                return self.details
            self.details = details

            if details is None:
                logger.warning(f"No details for {device.id}; dependent panels will be empty")

            for poller in self.pollers.values():
                poller.start(device.id, details)

        logger.info(f"Selected device {device.id}")
        return details

    # ---------------- Panels ----------------

    def get_poller(self, key: str) -> PanelPoller:
        poller = self.pollers.get(key)
        if poller is None:
            raise UnknownPanelError(key)
        return poller

    def get_panel(self, key: str) -> PanelSnapshot:
        return self.get_poller(key).snapshot

    async def refresh_panel(self, key: str) -> PanelSnapshot:
        return await self.get_poller(key).refresh()

    def panel_snapshots(self) -> List[PanelSnapshot]:
        return [poller.snapshot for poller in self.pollers.values()]

    def _unmount_panels(self) -> None:
        for poller in self.pollers.values():
            poller.stop()

    # ---------------- Page data ----------------

    def get_main_dashboard_data(self) -> Dict[str, Any]:
        """
        Get complete dashboard data structure.

        Returns a dictionary with all data needed to render the main page.
        """
        if self.loading:
            health = "Loading..."
        elif self.listing.offline:
            health = "Registry Offline"
        elif self.listing.devices:
            health = "System Healthy"
        else:
            health = "No Devices"

        return {
            "page_title": "SONiC Network Dashboard",
            "timestamp": int(time.time()),
            "devices": [d.model_dump() for d in self.listing.devices],
            "total_devices": len(self.listing.devices),
            "registry_offline": self.listing.offline,
            "health": health,
            "selected": self.selected.model_dump() if self.selected else None,
            "details": self.details.model_dump() if self.details else None,
            "panels": [snapshot.model_dump(mode="json") for snapshot in self.panel_snapshots()],
            "colors": CHART_COLORS,
            "settings": self.settings,
        }

    async def shutdown(self) -> None:
        """Unmount every panel and close the HTTP clients."""
        self._unmount_panels()
        await self.registry.close()
        await self.metrics.close()
        logger.info("Dashboard controller shut down")
