"""
API Modules

- prometheus_client.py: range queries against the metrics backend
- registry_client.py: device list and per-device details
- schemas.py: pydantic models for backend payloads and panel state
- routes/: FastAPI routers for the page and the JSON API
"""

from .prometheus_client import PrometheusClient, build_selector, has_samples
from .registry_client import RegistryClient, PLACEHOLDER_DEVICES

__all__ = [
    'PrometheusClient',
    'RegistryClient',
    'PLACEHOLDER_DEVICES',
    'build_selector',
    'has_samples',
]
