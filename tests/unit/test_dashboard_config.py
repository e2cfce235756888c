"""Unit tests for panel definitions, thresholds and value formatting"""
import pytest

from sonicmon.dashboard.config import (
    PANELS,
    PANELS_BY_KEY,
    format_metric_value,
    get_metric_status,
)
from sonicmon.dashboard.merger import bytes_to_gb, identity, liveness


class TestGetMetricStatus:
    """Threshold-based status levels"""

    @pytest.mark.parametrize("value,expected", [
        (0, "normal"),
        (45.0, "normal"),
        (60, "normal"),
        (60.1, "high"),
        (80, "high"),
        (95.5, "critical"),
        (-1, "low"),
    ])
    def test_cpu_usage(self, value, expected):
        assert get_metric_status("cpu_usage", value) == expected

    @pytest.mark.parametrize("value,expected", [
        (35, "low"),
        (50, "normal"),
        (70, "high"),
        (76, "critical"),
    ])
    def test_temperature(self, value, expected):
        assert get_metric_status("temperature_celsius", value) == expected

    def test_none_value_is_no_data(self):
        assert get_metric_status("cpu_usage", None) == "no_data"

    def test_unknown_metric_is_no_data(self):
        assert get_metric_status("memory_usage", 10) == "no_data"


class TestFormatMetricValue:
    """Value formatting with units"""

    def test_percentage(self):
        assert format_metric_value(42.345, "%") == "42.3%"

    def test_gigabytes(self):
        assert format_metric_value(7.5, "GB") == "7.50GB"

    def test_temperature(self):
        assert format_metric_value(43.6, "°C") == "44°C"

    def test_status(self):
        assert format_metric_value(1, "status") == "Up"
        assert format_metric_value(0, "status") == "Down"

    def test_other_unit(self):
        assert format_metric_value(3.14159, "W") == "3.1W"

    @pytest.mark.parametrize("value", [None, "", "n/a"])
    def test_missing_or_invalid(self, value):
        assert format_metric_value(value, "%") == "—"


class TestPanelConfig:
    """Panel definitions and the queries they produce"""

    def test_panel_order_and_keys(self):
        assert [panel.key for panel in PANELS] == ["temperature", "memory", "cpu", "uptime"]

    def test_metric_names(self):
        assert PANELS_BY_KEY["temperature"].metric_name == "temperature_celsius"
        assert PANELS_BY_KEY["memory"].metric_name == "memory_usage"
        assert PANELS_BY_KEY["cpu"].metric_name == "cpu_usage"
        assert PANELS_BY_KEY["uptime"].metric_name == "docker_state"

    def test_transforms(self):
        assert PANELS_BY_KEY["temperature"].value_transform is identity
        assert PANELS_BY_KEY["memory"].value_transform is bytes_to_gb
        assert PANELS_BY_KEY["cpu"].value_transform is identity
        assert PANELS_BY_KEY["uptime"].value_transform is liveness

    def test_detail_driven_queries(self, sample_details):
        queries = PANELS_BY_KEY["temperature"].queries(sample_details)
        assert queries == [("tempA", "sensor", "tempA"), ("tempB", "sensor", "tempB")]

        queries = PANELS_BY_KEY["uptime"].queries(sample_details)
        assert queries == [("swss", "docker", "swss"), ("syncd", "docker", "syncd")]

        queries = PANELS_BY_KEY["memory"].queries(sample_details)
        assert queries == [("used", "memory_type", "used"), ("free", "memory_type", "free")]

    def test_no_details_means_no_queries(self):
        for key in ("temperature", "memory", "uptime"):
            panel = PANELS_BY_KEY[key]
            assert panel.requires_details is True
            assert panel.queries(None) == []
            assert panel.series_names(None) == []

    def test_cpu_uses_fixed_series(self, sample_details):
        cpu = PANELS_BY_KEY["cpu"]

        assert cpu.requires_details is False
        assert cpu.queries(None) == [("cpu", "current_cpu_usage", "cpu_percent")]
        assert cpu.queries(sample_details) == cpu.queries(None)
        assert cpu.series_names(None) == ["cpu"]

    def test_error_messages(self):
        assert PANELS_BY_KEY["temperature"].error_message == "Failed to load temperature data"
        assert PANELS_BY_KEY["memory"].error_message == "Failed to load memory data"
        assert PANELS_BY_KEY["cpu"].error_message == "Failed to load CPU data"
        assert PANELS_BY_KEY["uptime"].error_message == "Failed to load container data"

    def test_chart_kinds_and_y_domains(self):
        charts = {panel.key: (panel.chart, panel.y_domain) for panel in PANELS}

        assert charts == {
            "temperature": ("line", [30, 80]),
            "memory": ("area", [0, "dataMax"]),
            "cpu": ("line", [0, 100]),
            "uptime": ("step", [0, 1]),
        }
