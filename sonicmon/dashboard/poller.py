"""
Panel Poller

Owns one panel's refresh timer and its latest result.

State machine: IDLE -> LOADING -> {READY, ERROR}, back to LOADING on every
interval and on every dependency change (start() with a new device or new
details), UNMOUNTED after stop(). Each start() or stop() bumps the generation;
a refresh that finishes for an older generation is dropped.
"""

import asyncio
import logging
import time
from typing import Optional

from ..api.prometheus_client import PrometheusClient
from ..api.schemas import DeviceDetails, PanelSnapshot, PanelState
from ..core.errors import EmptyPanelError
from .config import PanelConfig
from .panels import fetch_panel_table, summarize_panel

logger = logging.getLogger("sonicmon.dashboard")


class PanelPoller:
    """Periodic fetch+merge for a single dashboard panel."""

    def __init__(self, panel: PanelConfig, metrics: PrometheusClient, interval: float = 30):
        self.panel = panel
        self.metrics = metrics
        self.interval = interval
        self.device_id: Optional[str] = None
        self.details: Optional[DeviceDetails] = None
        self.snapshot = self._blank_snapshot(PanelState.IDLE)
        self._generation = 0
        self._has_data = False
        self._task: Optional[asyncio.Task] = None

    def _blank_snapshot(self, state: PanelState) -> PanelSnapshot:
        return PanelSnapshot(
            key=self.panel.key,
            title=self.panel.title,
            unit=self.panel.unit,
            chart=self.panel.chart,
            y_domain=self.panel.y_domain,
            state=state,
            device_id=self.device_id,
            series=self.panel.series_names(self.details),
        )

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _cancel_timer(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def start(self, device_id: str, details: Optional[DeviceDetails]) -> None:
        """
        (Re)start polling for a device. Previous data is discarded, not merged.

        Must be called from within a running event loop.
        """
        self._cancel_timer()
        self._generation += 1
        self.device_id = device_id
        self.details = details
        self._has_data = False
        self.snapshot = self._blank_snapshot(PanelState.IDLE)
        self._task = asyncio.get_running_loop().create_task(
            self._run(self._generation), name=f"poll-{self.panel.key}"
        )
        logger.debug(f"{self.panel.key}: polling {device_id} every {self.interval}s (generation {self._generation})")

    def stop(self) -> None:
        """Cancel the timer; results still in flight are ignored."""
        self._cancel_timer()
        self._generation += 1
        self.snapshot = self.snapshot.model_copy(update={"state": PanelState.UNMOUNTED})
        logger.debug(f"{self.panel.key}: unmounted")

    async def _run(self, generation: int) -> None:
        loop = asyncio.get_running_loop()
        while generation == self._generation:
            started = loop.time()
            await self.refresh(generation)
            # Fixed period: the fetch time counts against the interval
            await asyncio.sleep(max(0.0, self.interval - (loop.time() - started)))

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation and self.snapshot.state != PanelState.UNMOUNTED

    async def refresh(self, generation: Optional[int] = None) -> PanelSnapshot:
        """Run one fetch+merge cycle and publish the result if still current."""
        if generation is None:
            generation = self._generation
        if not self._is_current(generation) or self.device_id is None:
            return self.snapshot

        device_id = self.device_id
        details = self.details
        self.snapshot = self.snapshot.model_copy(update={"state": PanelState.LOADING})

        if not self.panel.queries(details):
            if self._is_current(generation):
                self._publish_empty()
            return self.snapshot

        try:
            table = await fetch_panel_table(self.panel, self.metrics, device_id, details)
            if not table.rows and self.panel.empty_error:
                raise EmptyPanelError(self.panel.empty_error)
            summary = summarize_panel(self.panel, table)
        except EmptyPanelError as e:
            if self._is_current(generation):
                self._publish_error(str(e))
            return self.snapshot
        except Exception as e:
            logger.error(f"Error fetching {self.panel.key} data for {device_id}: {e}", exc_info=True)
            if self._is_current(generation):
                self._publish_error(self.panel.error_message)
            return self.snapshot

        if not self._is_current(generation):
            logger.debug(f"{self.panel.key}: dropping late result for {device_id}")
            return self.snapshot

        self._has_data = True
        self.snapshot = PanelSnapshot(
            key=self.panel.key,
            title=self.panel.title,
            unit=self.panel.unit,
            chart=self.panel.chart,
            y_domain=self.panel.y_domain,
            state=PanelState.READY,
            device_id=device_id,
            series=self.panel.series_names(details),
            rows=table.rows,
            present=table.present,
            summary=summary,
            updated_at=int(time.time()),
        )
        logger.debug(f"{self.panel.key}: {len(table.rows)} rows for {device_id}")
        return self.snapshot

    def _publish_empty(self) -> None:
        notice = self.panel.empty_notice
        if self.details is None and self.panel.requires_details:
            notice = f"{notice} (device details unavailable)"
        self._has_data = False
        self.snapshot = self._blank_snapshot(PanelState.READY).model_copy(
            update={"notice": notice, "updated_at": int(time.time())}
        )

    def _publish_error(self, message: str) -> None:
        if self._has_data:
            # Keep the last good table on screen
            self.snapshot = self.snapshot.model_copy(
                update={"state": PanelState.READY, "stale": True, "error": message}
            )
        else:
            self.snapshot = self._blank_snapshot(PanelState.ERROR).model_copy(
                update={"error": message, "updated_at": int(time.time())}
            )
