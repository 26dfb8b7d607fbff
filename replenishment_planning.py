"""
Replenishment Planning Module
=============================
Turns a demand forecast into decision-ready inventory policy numbers.

Key Features:
- Safety stock using the Z-score method over the (volatility-stressed) lead time
- Reorder point = lead-time demand + safety stock
- Demand scenarios: one multiplier per forecast month
- Running projected inventory, revenue, margin and inventory value
- Optional "order-by" view shifting forecast dates back by the lead time
- Portfolio averaging of lead time, service level, cost and price across selected SKUs
"""

import numpy as np
import pandas as pd

from business_rules import SUPPLY_CHAIN_RULES
from statistics_utils import round_half_up, service_level_z_score

DAYS_PER_PERIOD = SUPPLY_CHAIN_RULES['days_per_period']


def adjust_lead_time(lead_time_days: float, volatility_multiplier: float = 0.0) -> float:
    """
    Stretch the lead time for a supplier-volatility stress test.

    A multiplier of 0 leaves the lead time unchanged, 0.5 adds 50%.
    """
    return lead_time_days * (1 + volatility_multiplier)


def calculate_safety_stock(
    demand_std: float,
    lead_time_days: float,
    service_level: float,
    volatility_multiplier: float = 0.0
) -> int:
    """
    Calculate safety stock using the Z-score method.

    Formula: Safety Stock = Z * sigma * sqrt(adjusted lead time in periods)

    sigma is the standard deviation of period (monthly) demand, so the lead time is
    converted to periods of DAYS_PER_PERIOD days before taking the square root.

    Args:
        demand_std: Standard deviation of historical period demand
        lead_time_days: Unstressed supplier lead time in days
        service_level: Target service level as a fraction (e.g. 0.95)
        volatility_multiplier: Supplier volatility stress, 0 for none

    Returns:
        Safety stock quantity in units
    """
    z_score = service_level_z_score(service_level)
    lead_time_periods = adjust_lead_time(lead_time_days, volatility_multiplier) / DAYS_PER_PERIOD
    return round_half_up(z_score * demand_std * np.sqrt(lead_time_periods))


def calculate_average_daily_demand(forecast_df: pd.DataFrame) -> float:
    """Average forecast-period demand converted to a daily rate (0 if there are no forecast rows)"""
    if forecast_df.empty:
        return 0.0

    forecast_only = forecast_df.loc[forecast_df['is_forecast'].astype(bool), 'forecast']
    forecast_avg = forecast_only.sum() / (len(forecast_only) or 1)
    return float(forecast_avg) / DAYS_PER_PERIOD


def calculate_reorder_point(
    daily_demand: float,
    lead_time_days: float,
    safety_stock: float
) -> int:
    """
    Calculate the reorder point (ROP).

    Formula: ROP = (Daily Demand * Lead Time) + Safety Stock

    Args:
        daily_demand: Average daily demand (units/day)
        lead_time_days: Lead time in days, already volatility-adjusted
        safety_stock: Pre-calculated safety stock

    Returns:
        Reorder point in units
    """
    return round_half_up(daily_demand * lead_time_days + safety_stock)


def build_scenario_lookup(scenarios) -> dict:
    """
    Map forecast month (1-based) to demand multiplier.

    When several scenarios target the same month the last one listed wins.
    """
    lookup = {}
    for scenario in scenarios or []:
        lookup[int(scenario['month'])] = float(scenario['multiplier'])
    return lookup


def find_duplicate_scenario_months(scenarios) -> list:
    """Return the forecast months targeted by more than one scenario, ascending"""
    months = [int(s['month']) for s in scenarios or []]
    return sorted({m for m in months if months.count(m) > 1})


def average_financials(attributes_df: pd.DataFrame = None) -> tuple:
    """
    Average selling price and unit cost over the supplied product attributes.

    Returns:
        tuple: (avg_price, avg_cost), falling back to the configured defaults
    """
    if attributes_df is None or attributes_df.empty:
        return SUPPLY_CHAIN_RULES['default_selling_price'], SUPPLY_CHAIN_RULES['default_unit_cost']
    return float(attributes_df['selling_price'].mean()), float(attributes_df['unit_cost'].mean())


def calculate_supply_chain_metrics(
    forecast_df: pd.DataFrame,
    historical_std: float,
    lead_time_days: float,
    service_level: float,
    on_hand: float,
    scenarios=None,
    show_lead_time_offset: bool = False,
    volatility_multiplier: float = 0.0,
    attributes_df: pd.DataFrame = None
) -> pd.DataFrame:
    """
    Enrich a forecast series with inventory policy and financial projections.

    Safety stock and reorder point are computed once and repeated on every row.
    Historical rows keep the on-hand stock; each forecast row draws the
    (scenario-adjusted) forecast down from a running inventory.

    Args:
        forecast_df: Output of calculate_forecast()
        historical_std: Standard deviation of historical period demand
        lead_time_days: Supplier lead time in days
        service_level: Target service level as a fraction
        on_hand: Current stock across the selected SKUs
        scenarios: List of {'id', 'name', 'month', 'multiplier'} dicts
        show_lead_time_offset: Shift forecast dates back by the unstressed lead time
        volatility_multiplier: Supplier volatility stress, 0 for none
        attributes_df: Product attributes used for price and cost averages

    Returns:
        pd.DataFrame: Input columns plus period_date, scenario_forecast, safety_stock,
                      reorder_point, projected_inventory, projected_revenue,
                      projected_margin and inventory_value
    """
    if forecast_df.empty:
        return forecast_df.copy()

    adjusted_lead_time = adjust_lead_time(lead_time_days, volatility_multiplier)
    safety_stock = calculate_safety_stock(historical_std, lead_time_days, service_level, volatility_multiplier)
    reorder_point = calculate_reorder_point(
        calculate_average_daily_demand(forecast_df), adjusted_lead_time, safety_stock
    )

    avg_price, avg_cost = average_financials(attributes_df)
    scenario_lookup = build_scenario_lookup(scenarios)

    running_inventory = on_hand
    forecast_counter = 0
    rows = []

    for record in forecast_df.to_dict('records'):
        is_forecast = bool(record['is_forecast'])
        record['period_date'] = record['date']
        record['safety_stock'] = safety_stock
        record['reorder_point'] = reorder_point

        if is_forecast:
            forecast_counter += 1
            scenario_val = record['forecast']
            if forecast_counter in scenario_lookup:
                scenario_val = round_half_up(scenario_val * scenario_lookup[forecast_counter])
            running_inventory -= scenario_val

            record['scenario_forecast'] = scenario_val
            record['projected_inventory'] = running_inventory
            record['projected_revenue'] = round_half_up(scenario_val * avg_price)
            record['projected_margin'] = round_half_up(scenario_val * (avg_price - avg_cost))
            record['inventory_value'] = round_half_up(running_inventory * avg_cost)

            if show_lead_time_offset:
                record['date'] = pd.Timestamp(record['date']) - pd.Timedelta(days=int(lead_time_days))
        else:
            record['scenario_forecast'] = np.nan
            record['projected_inventory'] = on_hand
            record['projected_revenue'] = np.nan
            record['projected_margin'] = np.nan
            record['inventory_value'] = round_half_up(on_hand * avg_cost)

        rows.append(record)

    return pd.DataFrame(rows)


def resolve_planning_parameters(
    attributes_df: pd.DataFrame,
    inventory_df: pd.DataFrame,
    skus=None,
    lead_time_days: float = None,
    service_level: float = None
) -> dict:
    """
    Resolve portfolio-level planning inputs for the selected SKUs.

    Explicit lead time and service level win; otherwise they are averaged over the
    selected SKUs' attributes, then fall back to the configured defaults.
    On-hand stock is summed over the selected SKUs. An empty selection means all SKUs.

    Returns:
        dict: lead_time_days, service_level, on_hand, attributes_df (selected rows)
    """
    selected_attributes = pd.DataFrame() if attributes_df is None else attributes_df
    if skus and not selected_attributes.empty:
        selected_attributes = selected_attributes[selected_attributes['sku'].isin(list(skus))]

    if lead_time_days is None:
        lead_time_days = (float(selected_attributes['lead_time_days'].mean())
                          if not selected_attributes.empty
                          else SUPPLY_CHAIN_RULES['default_lead_time_days'])
    if service_level is None:
        service_level = (float(selected_attributes['service_level'].mean())
                         if not selected_attributes.empty
                         else SUPPLY_CHAIN_RULES['default_service_level'])

    on_hand = 0
    if inventory_df is not None and not inventory_df.empty:
        selected_inventory = inventory_df[inventory_df['sku'].isin(list(skus))] if skus else inventory_df
        on_hand = int(selected_inventory['on_hand'].sum())

    return {
        'lead_time_days': lead_time_days,
        'service_level': service_level,
        'on_hand': on_hand,
        'attributes_df': selected_attributes.reset_index(drop=True)
    }


def get_financial_summary(plan_df: pd.DataFrame, volatility_multiplier: float = 0.0) -> dict:
    """
    Summarise the forecast rows of a supply-chain plan.

    Returns:
        dict: total_revenue, total_margin, avg_inventory_value, value_at_risk
    """
    if plan_df.empty:
        return {'total_revenue': 0, 'total_margin': 0, 'avg_inventory_value': 0, 'value_at_risk': 0}

    forecast_only = plan_df[plan_df['is_forecast'].astype(bool)]
    total_revenue = round_half_up(forecast_only['projected_revenue'].fillna(0).sum())
    total_margin = round_half_up(forecast_only['projected_margin'].fillna(0).sum())
    avg_inventory_value = round_half_up(forecast_only['inventory_value'].fillna(0).sum() / (len(forecast_only) or 1))
    value_at_risk = round_half_up(
        total_revenue * volatility_multiplier * SUPPLY_CHAIN_RULES['value_at_risk_factor']
    )

    return {
        'total_revenue': total_revenue,
        'total_margin': total_margin,
        'avg_inventory_value': avg_inventory_value,
        'value_at_risk': value_at_risk
    }
