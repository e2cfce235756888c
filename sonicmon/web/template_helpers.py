#!/usr/bin/env python3
"""
Template Helpers for the sonicmon Dashboard
"""

import json
import time


def format_datetime(timestamp):
    """Format timestamp as full datetime string."""
    if not timestamp:
        return ""
    try:
        return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(timestamp))
    except (TypeError, ValueError, OverflowError):
        return str(timestamp)


def format_time(timestamp):
    """Format timestamp as time only."""
    if not timestamp:
        return ""
    try:
        return time.strftime("%H:%M:%S", time.localtime(timestamp))
    except (TypeError, ValueError, OverflowError):
        return str(timestamp)


def format_time_ago(timestamp):
    """Format timestamp as relative time (e.g., '5m ago')."""
    if not timestamp:
        return "Never"
    try:
        diff = int(time.time()) - int(timestamp)
    except (TypeError, ValueError):
        return "Unknown"
    if diff < 60:
        return f"{diff}s ago"
    elif diff < 3600:
        return f"{diff // 60}m ago"
    elif diff < 86400:
        return f"{diff // 3600}h ago"
    return f"{diff // 86400}d ago"


def format_duration(seconds):
    """Format a window length in seconds (e.g., 3600 -> '1h')."""
    if not seconds:
        return "0s"
    seconds = int(seconds)
    if seconds % 3600 == 0:
        return f"{seconds // 3600}h"
    elif seconds % 60 == 0:
        return f"{seconds // 60}m"
    return f"{seconds}s"


def to_chart_json(rows, series):
    """
    Column-oriented chart payload: {"labels": [...], "series": {name: [...]}}.

    Absent values become null so the chart leaves a gap instead of a zero.
    """
    labels = [row.get("time") for row in rows]
    columns = {name: [row.get(name) for row in rows] for name in series}
    return json.dumps({"labels": labels, "series": columns})


def status_badge_class(status):
    """CSS class for a metric status string."""
    return {
        "low": "badge-blue",
        "normal": "badge-green",
        "high": "badge-yellow",
        "critical": "badge-red",
    }.get(status, "badge-muted")


def setup_template_filters(templates):
    """Setup all template filters in Jinja2 environment."""
    templates.env.filters['format_datetime'] = format_datetime
    templates.env.filters['format_time'] = format_time
    templates.env.filters['format_time_ago'] = format_time_ago
    templates.env.filters['format_duration'] = format_duration
    templates.env.filters['status_badge_class'] = status_badge_class
    templates.env.globals['to_chart_json'] = to_chart_json
