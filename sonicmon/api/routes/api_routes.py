#!/usr/bin/env python3
"""
JSON API Routes - Devices, Panels and Health
"""

import logging
import time

from fastapi import APIRouter, HTTPException

from ...core.errors import UnknownDeviceError, UnknownPanelError
from ...dashboard import DashboardController

logger = logging.getLogger("sonicmon.server")


def create_api_routes(controller: DashboardController) -> APIRouter:
    """Create JSON API routes."""
    router = APIRouter()

    @router.get("/api/devices")
    def list_devices():
        """Registry listing as last loaded, plus the current selection."""
        return {
            "devices": [d.model_dump() for d in controller.devices],
            "offline": controller.listing.offline,
            "selected": controller.selected.id if controller.selected else None,
        }

    @router.post("/api/devices/reload")
    async def reload_devices():
        """Re-read the registry listing and select its first device."""
        listing = await controller.load_devices()
        return {
            "devices": [d.model_dump() for d in listing.devices],
            "offline": listing.offline,
            "selected": controller.selected.id if controller.selected else None,
        }

    @router.get("/api/devices/{device_id}/details")
    async def device_details(device_id: str):
        """Details of the selected device, or a fresh fetch for another one."""
        try:
            controller.find_device(device_id)
        except UnknownDeviceError as e:
            raise HTTPException(status_code=404, detail=str(e))

        if controller.selected is not None and controller.selected.id == device_id:
            details = controller.details
        else:
            details = await controller.registry.get_details(device_id)

        if details is None:
            raise HTTPException(status_code=502, detail=f"details unavailable for {device_id}")
        return details.model_dump()

    @router.post("/api/devices/{device_id}/select")
    async def select_device(device_id: str):
        """Select a device; every panel restarts polling for it."""
        try:
            details = await controller.select_device(device_id)
        except UnknownDeviceError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return {
            "selected": device_id,
            "details": details.model_dump() if details else None,
        }

    @router.get("/api/panels")
    def list_panels():
        return {"panels": [s.model_dump(mode="json") for s in controller.panel_snapshots()]}

    @router.get("/api/panels/{key}")
    def get_panel(key: str):
        try:
            return controller.get_panel(key).model_dump(mode="json")
        except UnknownPanelError as e:
            raise HTTPException(status_code=404, detail=str(e))

    @router.post("/api/panels/{key}/refresh")
    async def refresh_panel(key: str):
        """Run one fetch+merge cycle now, outside the timer."""
        try:
            snapshot = await controller.refresh_panel(key)
        except UnknownPanelError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return snapshot.model_dump(mode="json")

    @router.get("/health")
    def health():
        return {
            "status": "ok",
            "timestamp": int(time.time()),
            "registry": "offline" if controller.listing.offline else "online",
            "devices": len(controller.devices),
            "panels": {s.key: s.state.value for s in controller.panel_snapshots()},
        }

    return router
