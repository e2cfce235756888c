#!/usr/bin/env python3
"""
sonicmon API Schemas - Pydantic Models for backend payloads and panel state
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ---------------- Registry ----------------

class Device(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    ip: Optional[str] = None
    placeholder: bool = False

    @model_validator(mode="before")
    @classmethod
    def from_name(cls, data: Any) -> Any:
        # The registry may list bare device names instead of objects
        if isinstance(data, str):
            return {"id": data, "name": data}
        if isinstance(data, dict) and "name" not in data and "id" in data:
            return {**data, "name": data["id"]}
        return data


class DeviceListing(BaseModel):
    devices: List[Device] = []
    offline: bool = False


class DeviceDetails(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    temperature_sensors: List[str] = []
    containers: List[str] = []
    memory_types: List[str] = []
    os_version: str = ""
    kernel_version: str = ""
    asic_type: str = ""
    sai_version: str = ""
    active_interfaces: Optional[int] = None

    @field_validator("temperature_sensors", "containers", "memory_types", mode="before")
    @classmethod
    def clean_names(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            raise ValueError("expected a list of names")
        names = []
        for item in value:
            name = str(item).strip()
            if name and name not in names:
                names.append(name)
        return names

    @field_validator("os_version", "kernel_version", "asic_type", "sai_version", mode="before")
    @classmethod
    def clean_text(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("active_interfaces", mode="before")
    @classmethod
    def parse_count(cls, value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        try:
            return int(str(value).strip())
        except ValueError:
            return None


# ---------------- Prometheus ----------------

class RangeSeries(BaseModel):
    metric: Dict[str, str] = {}
    values: List[Tuple[float, float]] = []


class RangeData(BaseModel):
    resultType: str = "matrix"
    result: List[RangeSeries] = []


class RangeQueryResponse(BaseModel):
    status: str
    data: RangeData = RangeData()


# ---------------- Panels ----------------

class PanelState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
    UNMOUNTED = "unmounted"


class PanelSnapshot(BaseModel):
    key: str
    title: str
    unit: str = ""
    # Chart rendering: "line", "area" or "step"; y_domain bounds may be "dataMax"
    chart: str = "line"
    y_domain: Optional[List[Any]] = None
    state: PanelState = PanelState.IDLE
    device_id: Optional[str] = None
    series: List[str] = []
    rows: List[Dict[str, Any]] = []
    present: Dict[str, bool] = {}
    summary: Dict[str, Any] = {}
    error: Optional[str] = None
    notice: Optional[str] = None
    stale: bool = False
    updated_at: Optional[int] = None
