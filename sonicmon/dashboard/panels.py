"""
Panel data preparation

Fan-out of one range query per series, join, merge and summary for a panel.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from ..api.prometheus_client import PrometheusClient
from ..api.schemas import DeviceDetails
from .config import PanelConfig, get_metric_status, format_metric_value
from .merger import MergedTable, column_stats, latest_values, merge_series

logger = logging.getLogger("sonicmon.dashboard")


async def fetch_panel_table(
    panel: PanelConfig,
    metrics: PrometheusClient,
    device_id: str,
    details: Optional[DeviceDetails],
) -> MergedTable:
    """
    Query every series of a panel concurrently and merge the results.

    All queries settle before the merge runs. A failed query (None) counts
    as no data; an exception raised by any query aborts the whole update.
    """
    queries = panel.queries(details)
    if not queries:
        return MergedTable()

    results = await asyncio.gather(
        *[
            metrics.query(panel.metric_name, device_id, label_key, label_value)
            for _, label_key, label_value in queries
        ],
        return_exceptions=True,
    )

    for (name, _, _), result in zip(queries, results):
        if isinstance(result, BaseException):
            logger.error(f"{panel.key}: query for series '{name}' on {device_id} raised: {result}")
            raise result

    named = [(name, result) for (name, _, _), result in zip(queries, results)]
    return merge_series(named, panel.value_transform)


def summarize_panel(panel: PanelConfig, table: MergedTable) -> Dict[str, Any]:
    """Headline figures shown above a panel's chart."""
    latest = latest_values(table.rows)
    summary: Dict[str, Any] = {
        "latest": latest,
        "stats": column_stats(table.rows),
        "points": len(table.rows),
    }

    if panel.key == "cpu":
        current = latest.get("cpu")
        summary["current"] = current
        summary["current_formatted"] = format_metric_value(current, panel.unit)
        summary["status"] = get_metric_status("cpu_usage", current)

    elif panel.key == "uptime":
        summary["running"] = sum(1 for up in table.present.values() if up)
        summary["total"] = len(table.present)
        summary["status_by_container"] = {
            name: "Up" if up else "Down" for name, up in table.present.items()
        }

    elif panel.key == "memory":
        total = sum(latest.values()) if latest else None
        summary["total_gb"] = total
        summary["total_formatted"] = format_metric_value(total, panel.unit)

    elif panel.key == "temperature":
        hottest = max(latest.values()) if latest else None
        summary["hottest"] = hottest
        summary["hottest_formatted"] = format_metric_value(hottest, panel.unit)
        summary["status"] = get_metric_status(panel.metric_name, hottest)

    return summary
