"""
Demand Forecasting Module

Generates monthly demand forecasts from an aggregated sales history.
The four methods extrapolate differently (seasonal, seasonal with amplified trend,
mean-reverting, trend-only), so backtesting them side by side compares distinct behaviours.

Key Features:
- Z-score anomaly cleaning of raw observations
- Holt-Winters triple exponential smoothing (seasonal-persistent)
- Prophet-inspired additive seasonal simulation (seasonal + amplified trend)
- ARIMA-inspired autoregressive simulation (mean-reverting)
- Linear regression (trend only)
- Confidence bands that widen with the square root of the horizon
- Observation filtering and per-date aggregation
"""

from enum import Enum

import numpy as np
import pandas as pd
from scipy.stats import linregress

from business_rules import ANOMALY_RULES, FORECAST_RULES
from statistics_utils import (
    confidence_z_multiplier,
    mean,
    round_half_up,
    standard_deviation
)

FORECAST_COLUMNS = ['date', 'historical', 'forecast', 'lower_bound', 'upper_bound', 'is_forecast']


class ForecastMethod(Enum):
    """Closed set of forecasting strategies, valued by their display label"""

    HOLT_WINTERS = 'Holt-Winters (Triple Exponential)'
    PROPHET = 'Prophet-Inspired (Additive)'
    ARIMA = 'ARIMA (Auto-Regressive)'
    LINEAR = 'Linear Regression'

    @classmethod
    def from_label(cls, value):
        """
        Resolve a method from an enum member, its label, or its member name.

        Raises:
            ValueError: If the value names no known method
        """
        if isinstance(value, cls):
            return value
        for method in cls:
            if value == method.value or value == method.name:
                return method
        raise ValueError(f"Unknown forecast method: {value!r}")


METHOD_DESCRIPTIONS = {
    ForecastMethod.HOLT_WINTERS: "Triple exponential smoothing (Level, Trend, Seasonality). Best for distinct seasonal patterns.",
    ForecastMethod.PROPHET: "Additive model decomposition. Robust against missing data and outliers.",
    ForecastMethod.ARIMA: "Focuses on autocorrelation and moving averages. Best for stable, trending demand.",
    ForecastMethod.LINEAR: "Simple regression fitting a straight line. Ideal for long-term structural drift identification."
}


# ===== ANOMALY CLEANING =====

def detect_anomalies(values, z_threshold: float = ANOMALY_RULES['z_score_threshold']) -> np.ndarray:
    """
    Flag values further than z_threshold standard deviations from the mean.

    Args:
        values: Array of numerical values
        z_threshold: Number of standard deviations tolerated

    Returns:
        np.ndarray: Boolean array where True indicates an anomaly
    """
    values = np.asarray(values, dtype=np.float64)
    if len(values) == 0:
        return np.zeros(0, dtype=bool)

    avg = mean(values)
    std = standard_deviation(values)
    return np.abs(values - avg) > z_threshold * std


def clean_anomalies(observations_df: pd.DataFrame,
                    z_threshold: float = ANOMALY_RULES['z_score_threshold']) -> pd.DataFrame:
    """
    Replace outlying quantities with the rounded mean of all quantities.

    Only the quantity column changes; row count, order, dates and identifiers are kept.
    The input frame is not modified.

    Args:
        observations_df: DataFrame with a 'quantity' column
        z_threshold: Number of standard deviations tolerated before a value is smoothed

    Returns:
        pd.DataFrame: Cleaned copy of the input
    """
    cleaned = observations_df.copy()
    if cleaned.empty:
        return cleaned

    values = cleaned['quantity'].to_numpy(dtype=np.float64)
    is_anomaly = detect_anomalies(values, z_threshold)
    if is_anomaly.any():
        replacement = round_half_up(mean(values))
        cleaned['quantity'] = np.where(is_anomaly, replacement, cleaned['quantity'])
    return cleaned


def find_outliers(series_df: pd.DataFrame,
                  threshold: float = ANOMALY_RULES['outlier_review_threshold'],
                  limit: int = ANOMALY_RULES['outlier_review_limit']) -> pd.DataFrame:
    """
    List the most recent aggregated points that deviate noticeably from the mean.

    Used to hand a short list of suspicious periods to root-cause review.

    Returns:
        pd.DataFrame: At most `limit` rows, latest last
    """
    if series_df.empty:
        return series_df.copy()

    mask = detect_anomalies(series_df['quantity'].to_numpy(dtype=np.float64), threshold)
    return series_df[mask].tail(limit).reset_index(drop=True)


# ===== FORECAST METHODS =====
# Each takes the cleaned quantity series (length >= 3) and returns `horizon` non-negative floats.

def run_holt_winters(values, horizon: int, season_length: int = FORECAST_RULES['seasonality_period']) -> list:
    """
    Multiplicative Holt-Winters smoothing with fixed constants.

    Level starts at the first value and trend at the first difference. Seasonal
    indices are seeded from the first cycle relative to the initial level.
    """
    params = FORECAST_RULES['holt_winters']
    alpha, beta, gamma = params['alpha'], params['beta'], params['gamma']
    values = [float(v) for v in values]
    n = len(values)

    level = values[0]
    trend = values[1] - values[0]
    seasonal = [1.0] * season_length
    for i in range(min(n, season_length)):
        seasonal[i] = values[i] / (level or 1)

    for i, value in enumerate(values):
        idx = i % season_length
        prev_level = level
        level = alpha * (value / (seasonal[idx] or 1)) + (1 - alpha) * (level + trend)
        trend = beta * (level - prev_level) + (1 - beta) * trend
        seasonal[idx] = gamma * (value / (level or 1)) + (1 - gamma) * seasonal[idx]

    forecast = []
    for step in range(1, horizon + 1):
        projected = (level + step * trend) * seasonal[(n + step - 1) % season_length]
        forecast.append(max(0.0, projected))
    return forecast


def run_prophet_simulation(values, horizon: int, season_length: int = FORECAST_RULES['seasonality_period']) -> list:
    """
    Additive seasonal simulation: repeat the last seasonal cycle and add an amplified linear growth.
    """
    amplification = FORECAST_RULES['prophet_simulation']['growth_amplification']
    values = [float(v) for v in values]
    n = len(values)

    template = values[-season_length:]
    growth_rate = (values[-1] - values[0]) / n

    forecast = []
    for step in range(1, horizon + 1):
        projected = template[(step - 1) % len(template)] + growth_rate * amplification * step
        forecast.append(max(0.0, projected))
    return forecast


def run_arima_simulation(values, horizon: int) -> list:
    """
    Mean-reverting AR(1)-style simulation from the last observation toward the history mean.

    Not a fitted ARIMA model: the coefficient is fixed.
    """
    coefficient = FORECAST_RULES['arima_simulation']['ar_coefficient']
    avg = mean(values)
    current = float(values[-1])

    forecast = []
    for _ in range(horizon):
        current = avg + coefficient * (current - avg)
        forecast.append(max(0.0, current))
    return forecast


def run_linear_regression(values, horizon: int) -> list:
    """Ordinary least squares over period index 0..N-1, extrapolated past the last period"""
    values = np.asarray(values, dtype=np.float64)
    n = len(values)
    slope, intercept, _, _, _ = linregress(np.arange(n, dtype=np.float64), values)

    return [max(0.0, float(slope * (n + step - 1) + intercept)) for step in range(1, horizon + 1)]


FORECAST_METHODS = {
    ForecastMethod.HOLT_WINTERS: run_holt_winters,
    ForecastMethod.PROPHET: run_prophet_simulation,
    ForecastMethod.ARIMA: run_arima_simulation,
    ForecastMethod.LINEAR: run_linear_regression
}


# ===== FORECAST ORCHESTRATION =====

def calculate_forecast(history_df: pd.DataFrame, horizon: int,
                       confidence_level: float = FORECAST_RULES['default_confidence_level'],
                       method=ForecastMethod.HOLT_WINTERS) -> pd.DataFrame:
    """
    Build the historical + forecast series for an aggregated monthly history.

    Historical rows echo the actual quantity in both 'historical' and 'forecast'.
    Forecast rows continue one calendar month at a time from the last historical date
    and carry confidence bounds of z * std * sqrt(step) * damping.

    Args:
        history_df: DataFrame with 'date' and 'quantity', sorted by date
        horizon: Number of future months
        confidence_level: Confidence percentage for the bands (e.g. 95)
        method: ForecastMethod member or its label

    Returns:
        pd.DataFrame: FORECAST_COLUMNS rows, empty if fewer than 3 historical points
    """
    if len(history_df) < FORECAST_RULES['min_history_points']:
        return pd.DataFrame(columns=FORECAST_COLUMNS)

    method = ForecastMethod.from_label(method)
    values = history_df['quantity'].to_numpy(dtype=np.float64)
    forecast_values = FORECAST_METHODS[method](values, horizon)

    rows = [
        {
            'date': pd.Timestamp(date),
            'historical': qty,
            'forecast': qty,
            'lower_bound': np.nan,
            'upper_bound': np.nan,
            'is_forecast': False
        }
        for date, qty in zip(history_df['date'], history_df['quantity'])
    ]

    multiplier = confidence_z_multiplier(confidence_level)
    std_dev = standard_deviation(values)
    damping = FORECAST_RULES['uncertainty_damping']
    last_date = pd.Timestamp(history_df['date'].iloc[-1])

    for step, value in enumerate(forecast_values, start=1):
        uncertainty = multiplier * std_dev * np.sqrt(step) * damping
        rows.append({
            'date': last_date + pd.DateOffset(months=step),
            'historical': np.nan,
            'forecast': round_half_up(value),
            'lower_bound': max(0, round_half_up(value - uncertainty)),
            'upper_bound': round_half_up(value + uncertainty),
            'is_forecast': True
        })

    result = pd.DataFrame(rows, columns=FORECAST_COLUMNS)
    result['is_forecast'] = result['is_forecast'].astype(bool)
    return result


def apply_market_adjustment(forecast_df: pd.DataFrame, multiplier: float) -> pd.DataFrame:
    """
    Scale forecast rows by an external market-trend multiplier.

    Historical rows and confidence bounds are left as they are.
    """
    adjusted = forecast_df.copy()
    if adjusted.empty or multiplier == 1:
        return adjusted

    mask = adjusted['is_forecast'].astype(bool)
    adjusted.loc[mask, 'forecast'] = [round_half_up(v * multiplier) for v in adjusted.loc[mask, 'forecast']]
    return adjusted


# ===== HISTORY PREPARATION =====

def filter_observations(observations_df: pd.DataFrame, skus=None, start_date=None, end_date=None,
                        category: str = 'All') -> pd.DataFrame:
    """
    Filter raw observations by SKU set, inclusive date range and category.

    Args:
        observations_df: DataFrame with date, sku, category, quantity
        skus: Iterable of SKUs to keep; empty or None keeps all
        start_date: Inclusive lower date bound, None for open
        end_date: Inclusive upper date bound, None for open
        category: Category to keep, 'All' keeps every category

    Returns:
        pd.DataFrame: Filtered rows sorted by date (stable)
    """
    if observations_df.empty:
        return observations_df.copy()

    mask = pd.Series(True, index=observations_df.index)
    if start_date is not None:
        mask &= observations_df['date'] >= pd.Timestamp(start_date)
    if end_date is not None:
        mask &= observations_df['date'] <= pd.Timestamp(end_date)
    if skus:
        mask &= observations_df['sku'].isin(list(skus))
    if category and category != 'All':
        mask &= observations_df['category'] == category

    return observations_df[mask].sort_values('date', kind='stable').reset_index(drop=True)


def aggregate_demand(observations_df: pd.DataFrame) -> pd.DataFrame:
    """
    Sum quantities per distinct date into a single series.

    Returns:
        pd.DataFrame: 'date' and 'quantity', strictly increasing by date
    """
    if observations_df.empty:
        return pd.DataFrame(columns=['date', 'quantity'])

    series = observations_df.groupby('date', as_index=False)['quantity'].sum()
    return series.sort_values('date').reset_index(drop=True)


def get_demand_statistics(series_df: pd.DataFrame) -> dict:
    """
    Mean and population standard deviation of an aggregated series.

    Returns:
        dict: {'avg': float, 'std': float}
    """
    if series_df.empty:
        return {'avg': 0.0, 'std': 0.0}

    values = series_df['quantity'].to_numpy(dtype=np.float64)
    return {'avg': mean(values), 'std': standard_deviation(values)}
