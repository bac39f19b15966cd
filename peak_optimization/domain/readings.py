"""
Reading and transfer value objects.

Converts already-decoded (timestamp, usage) pairs into the usage series the
optimization engine works on, and back.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Tuple, Union

import pandas as pd

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"

RecordLike = Union[Mapping[str, Any], Tuple[Any, Any]]


@dataclass(frozen=True)
class Reading:
    """Single interval consumption measurement."""
    timestamp: pd.Timestamp
    usage: float  # kWh for the interval


@dataclass(frozen=True)
class Transfer:
    """Energy moved from a peak slot to a receiving slot."""
    from_timestamp: pd.Timestamp
    to_timestamp: pd.Timestamp
    amount_kwh: float


def _parse_timestamp(value: Any) -> pd.Timestamp:
    """
    Parse a timestamp value.

    Accepts datetime/Timestamp objects or strings in 'YYYY-MM-DD HH:MM' form.

    Raises:
        ValueError: If the value cannot be interpreted
    """
    if isinstance(value, (pd.Timestamp, datetime)):
        return pd.Timestamp(value)

    if not isinstance(value, str):
        raise ValueError(f"Unsupported timestamp type: {type(value).__name__}")

    parts = value.strip().split(" ")
    if len(parts) != 2:
        raise ValueError(f"Invalid timestamp format, expected date and time: {value!r}")

    try:
        return pd.Timestamp(datetime.strptime(value.strip(), TIMESTAMP_FORMAT))
    except ValueError:
        raise ValueError(f"Could not parse timestamp: {value!r}") from None


def _parse_usage(value: Any) -> float:
    try:
        usage = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Usage must be numeric, got {value!r}") from None

    if not math.isfinite(usage):
        raise ValueError(f"Usage must be finite, got {usage}")
    if usage < 0:
        raise ValueError(f"Usage cannot be negative, got {usage}")
    return usage


def parse_energy_data(records: Iterable[RecordLike]) -> List[Reading]:
    """
    Turn decoded (timestamp, usage) pairs into readings.

    Args:
        records: Iterable of (timestamp, usage) tuples or mappings with
            'timestamp' and 'usage' keys

    Returns:
        List of Reading objects in input order

    Raises:
        ValueError: If a record is malformed or a timestamp or usage
            value is invalid
    """
    readings = []
    for record in records:
        if isinstance(record, Mapping):
            if "timestamp" not in record or "usage" not in record:
                raise ValueError(f"Missing field in record: {record}")
            raw_timestamp, raw_usage = record["timestamp"], record["usage"]
        elif isinstance(record, (tuple, list)) and len(record) == 2:
            raw_timestamp, raw_usage = record
        else:
            raise ValueError(f"Record must be a (timestamp, usage) pair or mapping, got {record!r}")

        readings.append(Reading(
            timestamp=_parse_timestamp(raw_timestamp),
            usage=_parse_usage(raw_usage),
        ))
    return readings


def readings_to_series(readings: Iterable[Reading]) -> pd.Series:
    """
    Build a usage series from readings.

    Order is kept as given; the series is never re-sorted.
    """
    readings = list(readings)
    index = pd.DatetimeIndex([r.timestamp for r in readings], name="timestamp")
    return pd.Series(
        [float(r.usage) for r in readings],
        index=index,
        name="usage_kwh",
        dtype=float,
    )


def series_to_readings(usage: pd.Series) -> List[Reading]:
    """Convert a usage series back into readings."""
    return [
        Reading(timestamp=pd.Timestamp(ts), usage=float(value))
        for ts, value in zip(usage.index, usage.to_numpy())
    ]


def transfers_to_dataframe(transfers: Iterable[Transfer]) -> pd.DataFrame:
    """
    Convert a transfer log to a DataFrame.

    Returns:
        DataFrame with columns from_timestamp, to_timestamp, amount_kwh
    """
    rows = [
        {
            "from_timestamp": t.from_timestamp,
            "to_timestamp": t.to_timestamp,
            "amount_kwh": t.amount_kwh,
        }
        for t in transfers
    ]
    return pd.DataFrame(rows, columns=["from_timestamp", "to_timestamp", "amount_kwh"])
