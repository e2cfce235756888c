"""sonicmon - SONiC device telemetry dashboard."""

__version__ = "0.1.0"
