"""
Dashboard Configuration

Panel definitions, thresholds and value formatting for the dashboard.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..api.schemas import DeviceDetails
from .merger import TRANSFORMS, Transform


@dataclass(frozen=True)
class PanelConfig:
    """One chart on the dashboard and how its series are queried."""
    key: str
    title: str
    metric_name: str
    unit: str
    transform: str = "identity"
    # DeviceDetails attribute listing the series names; None for fixed series
    details_field: Optional[str] = None
    # Label used to select one series per name from details_field
    label_key: Optional[str] = None
    # Fixed (series_name, label_key, label_value) triples for detail-free panels
    fixed_series: List[tuple] = field(default_factory=list)
    empty_notice: str = "No data available"
    empty_error: Optional[str] = None
    # Noun used in "Failed to load ... data"; defaults to the key
    error_label: Optional[str] = None
    y_domain: Optional[List[Any]] = None
    chart: str = "line"

    @property
    def requires_details(self) -> bool:
        return self.details_field is not None

    @property
    def value_transform(self) -> Transform:
        return TRANSFORMS[self.transform]

    @property
    def error_message(self) -> str:
        return f"Failed to load {self.error_label or self.key} data"

    def series_names(self, details: Optional[DeviceDetails]) -> List[str]:
        if not self.requires_details:
            return [name for name, _, _ in self.fixed_series]
        if details is None:
            return []
        return list(getattr(details, self.details_field))

    def queries(self, details: Optional[DeviceDetails]) -> List[tuple]:
        """(series_name, label_key, label_value) for every series to fetch."""
        if not self.requires_details:
            return list(self.fixed_series)
        return [(name, self.label_key, name) for name in self.series_names(details)]


PANELS: List[PanelConfig] = [
    PanelConfig(
        key="temperature",
        title="Device Temperature Monitoring",
        metric_name="temperature_celsius",
        unit="°C",
        details_field="temperature_sensors",
        label_key="sensor",
        empty_notice="No temperature sensors found for this device",
        y_domain=[30, 80],
    ),
    PanelConfig(
        key="memory",
        title="Memory Usage",
        metric_name="memory_usage",
        unit="GB",
        transform="bytes_to_gb",
        details_field="memory_types",
        label_key="memory_type",
        empty_notice="No memory types found for this device",
        y_domain=[0, "dataMax"],
        chart="area",
    ),
    PanelConfig(
        key="cpu",
        title="CPU Usage",
        metric_name="cpu_usage",
        unit="%",
        fixed_series=[("cpu", "current_cpu_usage", "cpu_percent")],
        empty_error="No CPU data available",
        error_label="CPU",
        y_domain=[0, 100],
    ),
    PanelConfig(
        key="uptime",
        title="Container Status",
        metric_name="docker_state",
        unit="status",
        transform="liveness",
        details_field="containers",
        label_key="docker",
        empty_notice="No containers found for this device",
        error_label="container",
        y_domain=[0, 1],
        chart="step",
    ),
]

PANELS_BY_KEY: Dict[str, PanelConfig] = {panel.key: panel for panel in PANELS}

# Metric Thresholds for Color Coding
# Format: [low_threshold, medium_threshold, high_threshold]
# Colors: blue (optimal) -> green (normal) -> yellow (warning) -> red (critical)
METRIC_THRESHOLDS = {
    'cpu_usage': [0, 60, 80],
    'temperature_celsius': [40, 65, 75],
}

CHART_COLORS = ['#8884d8', '#82ca9d', '#ffc658', '#ff7300', '#3b82f6', '#ef4444']


def get_metric_status(metric_name: str, value: Optional[float]) -> str:
    """
    Determine the status level of a metric based on configured thresholds.

    Args:
        metric_name: Name of the metric (e.g., 'cpu_usage')
        value: Metric value to evaluate

    Returns:
        Status string: 'low', 'normal', 'high', 'critical' or 'no_data'
    """
    if value is None or metric_name not in METRIC_THRESHOLDS:
        return 'no_data'

    low, medium, high = METRIC_THRESHOLDS[metric_name]
    if value < low:
        return 'low'
    elif value <= medium:
        return 'normal'
    elif value <= high:
        return 'high'
    return 'critical'


def format_metric_value(value: Any, unit: str) -> str:
    """
    Format a metric value with proper rounding and unit.

    Args:
        value: Raw metric value
        unit: Unit string (e.g., "°C", "%", "GB", "status")

    Returns:
        Formatted string representation with proper rounding
    """
    if value is None or value == '':
        return '—'

    try:
        num_val = float(value)
    except (ValueError, TypeError):
        return '—'

    if unit == "status":
        return "Up" if num_val >= 1 else "Down"
    elif unit == "%":
        return f"{num_val:.1f}%"
    elif unit == "GB":
        return f"{num_val:.2f}GB"
    elif unit == "°C":
        return f"{num_val:.0f}°C"
    return f"{num_val:.1f}{unit}"
