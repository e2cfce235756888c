#!/usr/bin/env python3
"""
Dashboard Routes - Web UI and Template Rendering
"""

import logging
import time
from pathlib import Path

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from ...core.errors import UnknownDeviceError, UnknownPanelError
from ...dashboard import DashboardController
from ...dashboard.config import CHART_COLORS
from ...web.template_helpers import setup_template_filters

logger = logging.getLogger("sonicmon.server")

UI_DIR = Path(__file__).resolve().parent.parent.parent / "ui"


def create_templates() -> Jinja2Templates:
    templates = Jinja2Templates(directory=[str(UI_DIR / "pages"), str(UI_DIR / "components"), str(UI_DIR)])
    setup_template_filters(templates)
    return templates


def create_dashboard_routes(controller: DashboardController) -> APIRouter:
    """Create dashboard and web UI routes."""
    router = APIRouter()
    templates = create_templates()

    @router.get("/", response_class=HTMLResponse)
    def dashboard_main(request: Request):
        """Main dashboard page - device selector, device details and the four panels."""
        logger.debug("Rendering main dashboard")
        try:
            dashboard_data = controller.get_main_dashboard_data()
        except Exception as e:
            logger.error(f"Dashboard error: {e}", exc_info=True)
            dashboard_data = {
                "page_title": "SONiC Network Dashboard - Error",
                "error": str(e),
                "timestamp": int(time.time()),
                "devices": [],
                "panels": [],
                "settings": {},
            }
        return templates.TemplateResponse(request, "dashboard.html", dashboard_data)

    @router.post("/dashboard/select")
    async def dashboard_select(device_id: str = Form(...)):
        """Select a device from the page form and go back to the dashboard."""
        try:
            await controller.select_device(device_id)
        except UnknownDeviceError as e:
            logger.warning(f"Device selection rejected: {e}")
        return RedirectResponse(url="/", status_code=303)

    @router.get("/dashboard/panels/{key}", response_class=HTMLResponse)
    def dashboard_panel(key: str, request: Request):
        """Panel partial, re-fetched by htmx on the polling interval."""
        try:
            panel = controller.get_panel(key)
        except UnknownPanelError as e:
            return HTMLResponse(str(e), status_code=404)
        return templates.TemplateResponse(request, "panel.html", {
            "panel": panel.model_dump(mode="json"),
            "colors": CHART_COLORS,
            "settings": controller.settings,
        })

    return router
