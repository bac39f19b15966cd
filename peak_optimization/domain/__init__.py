"""
Domain module: readings, transfers and series conversion.
"""

from .readings import (
    Reading,
    Transfer,
    parse_energy_data,
    readings_to_series,
    series_to_readings,
    transfers_to_dataframe,
)

__all__ = [
    "Reading",
    "Transfer",
    "parse_energy_data",
    "readings_to_series",
    "series_to_readings",
    "transfers_to_dataframe",
]
