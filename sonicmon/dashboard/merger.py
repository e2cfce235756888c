"""
Series Merger

Merges independently fetched series (one per sensor, container or memory
type) into a single chart table keyed by an ``hh:mm AM/PM`` time bucket.

Bucket labels drop the date and the seconds, so samples taken in the same
minute (or at the same clock minute on different days) share a row. The
series processed last wins for that row/column pair.
"""

import logging
import math
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..api.schemas import RangeQueryResponse

logger = logging.getLogger("sonicmon.dashboard")

BYTES_PER_GB = 1024 ** 3
TIME_LABEL_FORMAT = "%I:%M %p"
TIME_COLUMN = "time"

Transform = Callable[[float], float]
SeriesInput = Sequence[Tuple[str, Optional[RangeQueryResponse]]]


# ---------------- Value transforms ----------------

def identity(value: float) -> float:
    return value


def bytes_to_gb(value: float) -> float:
    """Convert bytes to gigabytes (1024**3)."""
    return value / BYTES_PER_GB


def liveness(value: float) -> int:
    """1 (up) for a positive sample, 0 (down) otherwise."""
    return 1 if value > 0 else 0


TRANSFORMS: Dict[str, Transform] = {
    "identity": identity,
    "bytes_to_gb": bytes_to_gb,
    "liveness": liveness,
}


# ---------------- Labels ----------------

def bucket_label(timestamp: float) -> str:
    """Local-time ``hh:mm AM/PM`` label for an epoch timestamp."""
    return time.strftime(TIME_LABEL_FORMAT, time.localtime(timestamp))


def label_sort_key(label: str) -> float:
    """Seconds since midnight for the time of day in a bucket label."""
    parsed = datetime.strptime(label, TIME_LABEL_FORMAT)
    return float(parsed.hour * 3600 + parsed.minute * 60)


# ---------------- Merge ----------------

@dataclass
class MergedTable:
    """Chart rows plus which series returned any samples."""
    rows: List[Dict[str, Any]] = field(default_factory=list)
    present: Dict[str, bool] = field(default_factory=dict)

    @property
    def series_names(self) -> List[str]:
        return list(self.present.keys())


def merge_series(series: SeriesInput, transform: Transform = identity) -> MergedTable:
    """
    Merge named range-query results into one ordered table.

    Args:
        series: (series_name, response) pairs; a None response is a failed
            fetch and counts as "no data"
        transform: Applied to every sample value

    Returns:
        MergedTable whose rows hold ``time`` plus only the series that had a
        sample in that bucket, ordered by time of day.
    """
    rows: Dict[str, Dict[str, Any]] = {}
    present: Dict[str, bool] = {}

    for name, response in series:
        if name == TIME_COLUMN:
            # The label column is reserved; such a series cannot be charted
            logger.warning(f"Skipping series named '{TIME_COLUMN}': clashes with the bucket label column")
            present[name] = False
            continue

        results = response.data.result if response is not None else []
        present[name] = any(result.values for result in results)

        for result in results:
            for timestamp, value in result.values:
                # Prometheus encodes gaps as "NaN"
                if not math.isfinite(value):
                    continue
                label = bucket_label(timestamp)
                row = rows.get(label)
                if row is None:
                    row = rows[label] = {TIME_COLUMN: label}
                row[name] = transform(value)

    ordered = [row for _, row in sorted(rows.items(), key=lambda item: label_sort_key(item[0]))]
    return MergedTable(rows=ordered, present=present)


# ---------------- Summaries ----------------

def rows_to_frame(rows: List[Dict[str, Any]]) -> pd.DataFrame:
    """Chart rows as a DataFrame indexed by time label (absent columns are NaN)."""
    if not rows:
        return pd.DataFrame()
    return pd.DataFrame(rows).set_index(TIME_COLUMN)


def latest_values(rows: List[Dict[str, Any]]) -> Dict[str, float]:
    """Most recent sample of every column, skipping buckets where it is absent."""
    df = rows_to_frame(rows)
    if df.empty:
        return {}
    latest = df.ffill().iloc[-1].dropna()
    return {str(name): float(value) for name, value in latest.items()}


def column_stats(rows: List[Dict[str, Any]]) -> Dict[str, Dict[str, float]]:
    """min/max/mean per column over the buckets where the column is present."""
    df = rows_to_frame(rows)
    if df.empty:
        return {}
    stats = {}
    for name in df.columns:
        values = df[name].dropna().to_numpy(dtype=float)
        if values.size == 0:
            continue
        stats[str(name)] = {
            "min": float(np.min(values)),
            "max": float(np.max(values)),
            "mean": float(np.round(np.mean(values), 3)),
        }
    return stats
