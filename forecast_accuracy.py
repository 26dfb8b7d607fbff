"""
Forecast Accuracy Module

Error statistics for actual vs. forecast series and holdout backtesting.

Metrics:
- MAPE over periods with non-zero actual demand
- RMSE, MAD over all aligned periods
- Bias as a percentage of total actual demand (positive = over-forecast)
- Financial exposure: holding cost of overstock, lost margin of stockouts
"""

import numpy as np
import pandas as pd

from business_rules import ACCURACY_RULES, BACKTEST_RULES, FORECAST_RULES
from demand_forecasting import ForecastMethod, calculate_forecast

METRIC_KEYS = ['mape', 'rmse', 'bias', 'mad', 'accuracy', 'holding_cost_risk', 'stockout_revenue_risk']


def _empty_metrics() -> dict:
    return {key: 0.0 for key in METRIC_KEYS}


def calculate_metrics(actual, forecast,
                      unit_cost: float = ACCURACY_RULES['default_unit_cost'],
                      selling_price: float = ACCURACY_RULES['default_selling_price']) -> dict:
    """
    Compare an actual and a forecast series aligned by index.

    Only the first min(len(actual), len(forecast)) pairs are used. Periods with zero
    actual demand are left out of the MAPE sum, and MAPE divides by the number of
    non-zero actuals rather than by the number of aligned pairs.

    Args:
        actual: Sequence of actual quantities
        forecast: Sequence of forecast quantities
        unit_cost: Cost per unit, prices the holding-cost risk
        selling_price: Price per unit, prices the stockout margin risk

    Returns:
        dict: METRIC_KEYS, all zero when nothing aligns
    """
    n = min(len(actual), len(forecast))
    if n == 0:
        return _empty_metrics()

    actual = np.asarray(actual, dtype=np.float64)[:n]
    forecast = np.asarray(forecast, dtype=np.float64)[:n]
    error = forecast - actual

    nonzero = actual != 0
    pct_count = int(nonzero.sum())
    sum_abs_pct_error = float(np.abs(error[nonzero] / actual[nonzero]).sum())
    sum_actual = float(actual.sum())

    mape = (sum_abs_pct_error / pct_count) * 100 if pct_count > 0 else 0.0

    overstock_units = float(error[error > 0].sum())
    stockout_units = float(np.abs(error[error < 0]).sum())

    return {
        'mape': mape,
        'rmse': float(np.sqrt((error ** 2).sum() / n)),
        'bias': (float(error.sum()) / sum_actual) * 100 if sum_actual != 0 else 0.0,
        'mad': float(np.abs(error).sum() / n),
        'accuracy': max(0.0, 100 - mape),
        'holding_cost_risk': overstock_units * unit_cost * ACCURACY_RULES['holding_rate'],
        'stockout_revenue_risk': stockout_units * (selling_price - unit_cost)
    }


def compare_forecast_methods(train_df: pd.DataFrame, actual_values, horizon: int,
                             confidence_level: float = FORECAST_RULES['default_confidence_level'],
                             unit_cost: float = 1.0, selling_price: float = 1.0) -> pd.DataFrame:
    """
    Forecast the holdout with every method and score each against the actuals.

    Returns:
        pd.DataFrame: One row per method (method, mape, accuracy, rmse, bias),
                      sorted by accuracy descending
    """
    rows = []
    for method in ForecastMethod:
        forecast_df = calculate_forecast(train_df, horizon, confidence_level, method)
        values = forecast_df.loc[forecast_df['is_forecast'].astype(bool), 'forecast'].tolist()
        metrics = calculate_metrics(actual_values, values, unit_cost, selling_price)
        rows.append({
            'method': method.value,
            'mape': metrics['mape'],
            'accuracy': metrics['accuracy'],
            'rmse': metrics['rmse'],
            'bias': metrics['bias']
        })

    comparison = pd.DataFrame(rows, columns=['method', 'mape', 'accuracy', 'rmse', 'bias'])
    return comparison.sort_values('accuracy', ascending=False, kind='stable').reset_index(drop=True)


def run_backtest(series_df: pd.DataFrame, method=ForecastMethod.HOLT_WINTERS,
                 confidence_level: float = FORECAST_RULES['default_confidence_level'],
                 holdout_periods: int = BACKTEST_RULES['holdout_periods'],
                 unit_cost: float = 1.0, selling_price: float = 1.0) -> dict:
    """
    Hold out the last periods of the series and measure how well each method predicts them.

    Args:
        series_df: Aggregated series with 'date' and 'quantity'
        method: Method whose metrics are reported as the headline
        confidence_level: Confidence percentage for the forecast bands
        holdout_periods: Number of trailing periods held out
        unit_cost, selling_price: Financial basis for the risk metrics

    Returns:
        dict: {
            'comparison_df': forecast rows over the holdout with an 'actual' column,
            'metrics': headline metrics dict or None,
            'model_comparison_df': per-method scores,
            'backtest_forecast_df': full forecast built from the training prefix
        }
    """
    result = {
        'comparison_df': pd.DataFrame(),
        'metrics': None,
        'model_comparison_df': pd.DataFrame(),
        'backtest_forecast_df': pd.DataFrame()
    }

    if len(series_df) < BACKTEST_RULES['min_history_points']:
        return result

    method = ForecastMethod.from_label(method)
    split_index = len(series_df) - holdout_periods
    train_df = series_df.iloc[:split_index].reset_index(drop=True)
    actual_values = series_df['quantity'].iloc[split_index:].tolist()

    backtest_forecast = calculate_forecast(train_df, holdout_periods, confidence_level, method)
    comparison = backtest_forecast[backtest_forecast['is_forecast'].astype(bool)].reset_index(drop=True)
    comparison['actual'] = pd.Series(actual_values, dtype='float64').reindex(comparison.index)

    forecast_values = comparison['forecast'].tolist()
    result['comparison_df'] = comparison
    result['metrics'] = calculate_metrics(actual_values, forecast_values, unit_cost, selling_price)
    result['model_comparison_df'] = compare_forecast_methods(
        train_df, actual_values, holdout_periods, confidence_level, unit_cost, selling_price
    )
    result['backtest_forecast_df'] = backtest_forecast
    return result
