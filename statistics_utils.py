"""
Statistics Utilities
Shared descriptive statistics and z-score lookups used by forecasting and inventory policy.
"""

import numpy as np

from business_rules import (
    CONFIDENCE_Z_BANDS,
    CONFIDENCE_Z_FALLBACK,
    SERVICE_LEVEL_Z_BANDS,
    SERVICE_LEVEL_Z_FALLBACK
)


def round_half_up(value):
    """
    Round to the nearest integer with halves rounded up (2.5 -> 3, -2.5 -> -2).
    Unlike the built-in round(), halves never round to even.
    """
    return int(np.floor(value + 0.5))


def mean(values) -> float:
    """Arithmetic mean, 0 for an empty input"""
    values = np.asarray(values, dtype=np.float64)
    if len(values) == 0:
        return 0.0
    return float(values.mean())


def standard_deviation(values) -> float:
    """
    Population standard deviation (divides by N, not N-1).

    Args:
        values: Sequence of numbers

    Returns:
        float: Standard deviation, 0 for an empty input
    """
    values = np.asarray(values, dtype=np.float64)
    if len(values) == 0:
        return 0.0
    return float(np.std(values, ddof=0))


def confidence_z_multiplier(confidence_level: float) -> float:
    """
    Map a confidence percentage (e.g. 95) to the z-multiplier used for forecast bands.

    Bands are inclusive lower bounds evaluated from highest to lowest.
    """
    for threshold, z in CONFIDENCE_Z_BANDS:
        if confidence_level >= threshold:
            return z
    return CONFIDENCE_Z_FALLBACK


def service_level_z_score(service_level: float) -> float:
    """
    Map a fractional service level (e.g. 0.95) to the z-score used for safety stock.
    """
    for threshold, z in SERVICE_LEVEL_Z_BANDS:
        if service_level >= threshold:
            return z
    return SERVICE_LEVEL_Z_FALLBACK
