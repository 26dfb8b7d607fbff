"""
Demand Planning Analysis Run

Runs one complete analysis for a fully-resolved settings dict:
filter -> aggregate -> forecast -> inventory policy -> backtest -> ABC classification.

The dashboard owns when a run happens (draft vs. committed settings); this module
only turns explicit inputs into a fresh result set plus a run log.
"""

import pandas as pd

from business_rules import get_default_settings
from demand_forecasting import (
    ForecastMethod,
    aggregate_demand,
    apply_market_adjustment,
    calculate_forecast,
    clean_anomalies,
    filter_observations,
    find_outliers,
    get_demand_statistics
)
from forecast_accuracy import run_backtest
from pareto_analysis import aggregate_sku_volumes, get_pareto_summary, run_pareto_analysis
from replenishment_planning import (
    average_financials,
    calculate_supply_chain_metrics,
    find_duplicate_scenario_months,
    get_financial_summary,
    resolve_planning_parameters
)
from statistics_utils import round_half_up


def run_demand_analysis(observations_df: pd.DataFrame, attributes_df: pd.DataFrame = None,
                        inventory_df: pd.DataFrame = None, settings: dict = None, scenarios=None):
    """
    Produce every dashboard result for one set of committed settings.

    Args:
        observations_df: Raw observations (date, sku, category, quantity)
        attributes_df: Product attributes, optional
        inventory_df: Inventory levels, optional
        settings: Overrides for business_rules.DEFAULT_SETTINGS
        scenarios: List of scenario dicts (id, name, month, multiplier)

    Returns:
        tuple: (logs, results) where results holds series_df, stats, forecast_df, plan_df,
               planning_params, financials, backtest, pareto_df, outliers_df
    """
    logs = []
    logs.append("--- Demand Analysis ---")

    resolved = get_default_settings()
    resolved.update(settings or {})
    method = ForecastMethod.from_label(resolved['method'])
    scenarios = list(scenarios or [])

    # Anomaly cleaning runs on the raw observations, before any filtering
    data = observations_df
    if resolved['apply_anomaly_cleaning'] and not observations_df.empty:
        data = clean_anomalies(observations_df)
        changed = int((data['quantity'] != observations_df['quantity']).sum())
        logs.append(f"INFO: Anomaly cleaning smoothed {changed} observations.")

    filtered = filter_observations(
        data,
        skus=resolved['skus'],
        start_date=resolved['start_date'],
        end_date=resolved['end_date'],
        category=resolved['category']
    )
    series_df = aggregate_demand(filtered)
    stats = get_demand_statistics(series_df)
    logs.append(f"INFO: {len(filtered)} observations aggregated into {len(series_df)} periods.")

    params = resolve_planning_parameters(
        attributes_df,
        inventory_df,
        skus=resolved['skus'],
        lead_time_days=resolved['lead_time_days'],
        service_level=resolved['service_level']
    )
    logs.append(
        f"INFO: Planning with lead time {params['lead_time_days']:.1f} days, "
        f"service level {params['service_level']:.1%}, on hand {params['on_hand']:,} units."
    )

    forecast_df = calculate_forecast(series_df, resolved['horizon'], resolved['confidence_level'], method)
    if forecast_df.empty:
        logs.append(f"WARNING: Only {len(series_df)} periods after filtering. At least 3 are needed to forecast.")
    else:
        logs.append(f"INFO: {method.value} forecast generated for {resolved['horizon']} months.")

    if resolved['market_multiplier'] != 1 and not forecast_df.empty:
        forecast_df = apply_market_adjustment(forecast_df, resolved['market_multiplier'])
        logs.append(f"INFO: Market trend multiplier {resolved['market_multiplier']:.2f} applied to forecast periods.")

    for month in find_duplicate_scenario_months(scenarios):
        logs.append(f"WARNING: Multiple scenarios target forecast month {month}. The last one listed applies.")

    plan_df = calculate_supply_chain_metrics(
        forecast_df,
        stats['std'],
        params['lead_time_days'],
        params['service_level'],
        params['on_hand'],
        scenarios=scenarios,
        show_lead_time_offset=resolved['show_lead_time_offset'],
        volatility_multiplier=resolved['supplier_volatility'],
        attributes_df=params['attributes_df']
    )

    avg_price, avg_cost = average_financials(params['attributes_df'])
    backtest = run_backtest(
        series_df, method, resolved['confidence_level'],
        unit_cost=avg_cost, selling_price=avg_price
    )
    if backtest['metrics'] is None:
        logs.append("INFO: Backtest skipped. More than 8 periods are needed for a 6-month holdout.")
    else:
        logs.append(f"INFO: Backtest accuracy {backtest['metrics']['accuracy']:.1f}% over the holdout.")

    pareto_df = run_pareto_analysis(aggregate_sku_volumes(observations_df, resolved['category']))

    results = {
        'settings': resolved,
        'series_df': series_df,
        'stats': stats,
        'forecast_df': forecast_df,
        'plan_df': plan_df,
        'planning_params': params,
        'financials': get_financial_summary(plan_df, resolved['supplier_volatility']),
        'backtest': backtest,
        'pareto_df': pareto_df,
        'outliers_df': find_outliers(series_df)
    }
    return logs, results


def build_narrative_context(results: dict) -> dict:
    """
    Scalar summaries handed to external narrative generators.

    Returns:
        dict: historical_avg, forecast_avg, horizon, accuracy (None without a backtest),
              safety_stock, reorder_point, top_a_skus, total_revenue, total_margin,
              value_at_risk, outlier_count
    """
    plan_df = results['plan_df']
    forecast_only = plan_df[plan_df['is_forecast'].astype(bool)] if not plan_df.empty else plan_df
    forecast_avg = forecast_only['forecast'].mean() if not forecast_only.empty else 0
    metrics = results['backtest']['metrics']

    return {
        'historical_avg': round_half_up(results['stats']['avg']),
        'forecast_avg': round_half_up(forecast_avg),
        'horizon': len(forecast_only),
        'accuracy': round(metrics['accuracy'], 1) if metrics else None,
        'safety_stock': int(plan_df['safety_stock'].iloc[0]) if not plan_df.empty else 0,
        'reorder_point': int(plan_df['reorder_point'].iloc[0]) if not plan_df.empty else 0,
        'top_a_skus': get_pareto_summary(results['pareto_df'])['top_a_skus'],
        'total_revenue': results['financials']['total_revenue'],
        'total_margin': results['financials']['total_margin'],
        'value_at_risk': results['financials']['value_at_risk'],
        'outlier_count': len(results['outliers_df'])
    }


def build_dashboard_context(results: dict, business_name: str) -> str:
    """One-line description of the current dashboard state for chat and report prompts"""
    context = build_narrative_context(results)
    accuracy = f"{context['accuracy']:.1f}%" if context['accuracy'] is not None else "n/a"
    return (
        f'Dashboard state: Business "{business_name}". Accuracy: {accuracy}. '
        f"Revenue: ${context['total_revenue']:,}. Risk: ${context['value_at_risk']:,}."
    )
