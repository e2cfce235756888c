"""sonicmon domain exceptions."""


class SonicmonError(Exception):
    """Base class for sonicmon errors."""


class UnknownDeviceError(SonicmonError):
    """Raised when a device id is not in the current registry listing."""

    def __init__(self, device_id: str):
        super().__init__(f"unknown device: {device_id}")
        self.device_id = device_id


class UnknownPanelError(SonicmonError):
    """Raised when a panel key does not name a configured panel."""

    def __init__(self, key: str):
        super().__init__(f"unknown panel: {key}")
        self.key = key


class EmptyPanelError(SonicmonError):
    """Raised when a panel that needs data got no samples at all."""
