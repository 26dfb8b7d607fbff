"""
Tests for replenishment planning module
"""

import pytest
import pandas as pd
import numpy as np

from conftest import assert_columns_exist
from demand_forecasting import ForecastMethod, calculate_forecast, get_demand_statistics
from replenishment_planning import (
    adjust_lead_time,
    average_financials,
    build_scenario_lookup,
    calculate_average_daily_demand,
    calculate_reorder_point,
    calculate_safety_stock,
    calculate_supply_chain_metrics,
    find_duplicate_scenario_months,
    get_financial_summary,
    resolve_planning_parameters
)


@pytest.fixture
def linear_forecast_df(linear_history_df):
    """History 100..210 plus forecast rows 220, 230, 240"""
    return calculate_forecast(linear_history_df, 3, 95, ForecastMethod.LINEAR)


@pytest.fixture
def linear_std(linear_history_df):
    return get_demand_statistics(linear_history_df)['std']


class TestSafetyStock:
    """Test safety stock and reorder point formulas"""

    def test_one_period_lead_time(self):
        # 1.645 * 10 * sqrt(30 / 30)
        assert calculate_safety_stock(10, 30, 0.95) == 16

    def test_lead_time_converted_to_periods(self):
        # 1.645 * 10 * sqrt(60 / 30) = 23.26
        assert calculate_safety_stock(10, 60, 0.95) == 23

    def test_zero_std_gives_zero(self):
        assert calculate_safety_stock(0, 45, 0.99) == 0

    def test_volatility_increases_safety_stock(self):
        base = calculate_safety_stock(50, 30, 0.95, volatility_multiplier=0)
        stressed = calculate_safety_stock(50, 30, 0.95, volatility_multiplier=0.5)
        assert stressed > base

    def test_higher_service_level_needs_more_stock(self):
        assert calculate_safety_stock(50, 30, 0.99) > calculate_safety_stock(50, 30, 0.90)

    def test_adjust_lead_time(self):
        assert adjust_lead_time(30, 0) == 30
        assert adjust_lead_time(30, 0.5) == pytest.approx(45)

    def test_reorder_point(self):
        # 10 units/day over 14 days plus 25 safety stock
        assert calculate_reorder_point(10, 14, 25) == 165

    def test_average_daily_demand_uses_forecast_rows(self, linear_forecast_df):
        assert calculate_average_daily_demand(linear_forecast_df) == pytest.approx(230 / 30)

    def test_average_daily_demand_empty(self):
        assert calculate_average_daily_demand(pd.DataFrame()) == 0


class TestSupplyChainMetrics:
    """Test the enriched plan series"""

    def test_policy_values_repeat_on_every_row(self, linear_forecast_df, linear_std):
        plan = calculate_supply_chain_metrics(linear_forecast_df, linear_std, 30, 0.95, 1000)

        assert_columns_exist(plan, [
            'period_date', 'scenario_forecast', 'safety_stock', 'reorder_point',
            'projected_inventory', 'projected_revenue', 'projected_margin', 'inventory_value'
        ])
        assert plan['safety_stock'].nunique() == 1
        assert plan['safety_stock'].iloc[0] == 57
        assert plan['reorder_point'].iloc[0] == 287

    def test_running_inventory(self, linear_forecast_df, linear_std):
        plan = calculate_supply_chain_metrics(linear_forecast_df, linear_std, 30, 0.95, 1000)
        future = plan[plan['is_forecast'].astype(bool)]

        assert future['projected_inventory'].tolist() == [780, 550, 310]
        assert future['scenario_forecast'].tolist() == [220, 230, 240]

    def test_inventory_may_go_negative(self, linear_forecast_df, linear_std):
        plan = calculate_supply_chain_metrics(linear_forecast_df, linear_std, 30, 0.95, 300)
        future = plan[plan['is_forecast'].astype(bool)]
        assert future['projected_inventory'].tolist() == [80, -150, -390]

    def test_historical_rows(self, linear_forecast_df, linear_std):
        plan = calculate_supply_chain_metrics(linear_forecast_df, linear_std, 30, 0.95, 1000)
        history = plan[~plan['is_forecast'].astype(bool)]

        assert (history['projected_inventory'] == 1000).all()
        assert (history['inventory_value'] == 100000).all()
        assert history['scenario_forecast'].isna().all()
        assert history['projected_revenue'].isna().all()

    def test_default_financials(self, linear_forecast_df, linear_std):
        """Without attributes, price 150 and cost 100 apply"""
        plan = calculate_supply_chain_metrics(linear_forecast_df, linear_std, 30, 0.95, 1000)
        first = plan[plan['is_forecast'].astype(bool)].iloc[0]

        assert first['projected_revenue'] == 33000
        assert first['projected_margin'] == 11000
        assert first['inventory_value'] == 78000

    def test_attribute_financials(self, linear_forecast_df, linear_std, attributes_df):
        """Average price 30 and cost 20 across the attribute rows"""
        plan = calculate_supply_chain_metrics(linear_forecast_df, linear_std, 30, 0.95, 1000,
                                              attributes_df=attributes_df)
        first = plan[plan['is_forecast'].astype(bool)].iloc[0]

        assert first['projected_revenue'] == 220 * 30
        assert first['projected_margin'] == 220 * 10
        assert first['inventory_value'] == 780 * 20

    def test_scenario_multiplies_target_month_only(self, linear_forecast_df, linear_std):
        scenarios = [{'id': 's1', 'name': 'Promo', 'month': 2, 'multiplier': 1.5}]
        plan = calculate_supply_chain_metrics(linear_forecast_df, linear_std, 30, 0.95, 1000, scenarios=scenarios)
        future = plan[plan['is_forecast'].astype(bool)]

        assert future['scenario_forecast'].tolist() == [220, 345, 240]
        assert future['forecast'].tolist() == [220, 230, 240]
        assert future['projected_inventory'].tolist() == [780, 435, 195]

    def test_scenario_beyond_horizon_ignored(self, linear_forecast_df, linear_std):
        scenarios = [{'id': 's1', 'name': 'Late', 'month': 9, 'multiplier': 3.0}]
        plan = calculate_supply_chain_metrics(linear_forecast_df, linear_std, 30, 0.95, 1000, scenarios=scenarios)
        assert plan[plan['is_forecast'].astype(bool)]['scenario_forecast'].tolist() == [220, 230, 240]

    def test_duplicate_scenario_last_wins(self, linear_forecast_df, linear_std):
        scenarios = [
            {'id': 's1', 'name': 'First', 'month': 1, 'multiplier': 1.5},
            {'id': 's2', 'name': 'Second', 'month': 1, 'multiplier': 2.0}
        ]
        plan = calculate_supply_chain_metrics(linear_forecast_df, linear_std, 30, 0.95, 1000, scenarios=scenarios)
        assert plan[plan['is_forecast'].astype(bool)]['scenario_forecast'].iloc[0] == 440

    def test_volatility_raises_policy(self, linear_forecast_df, linear_std):
        base = calculate_supply_chain_metrics(linear_forecast_df, linear_std, 30, 0.95, 1000)
        stressed = calculate_supply_chain_metrics(linear_forecast_df, linear_std, 30, 0.95, 1000,
                                                  volatility_multiplier=0.5)

        assert stressed['safety_stock'].iloc[0] > base['safety_stock'].iloc[0]
        assert stressed['reorder_point'].iloc[0] > base['reorder_point'].iloc[0]

    def test_lead_time_offset_only_moves_forecast_dates(self, linear_forecast_df, linear_std):
        base = calculate_supply_chain_metrics(linear_forecast_df, linear_std, 30, 0.95, 1000)
        shifted = calculate_supply_chain_metrics(linear_forecast_df, linear_std, 30, 0.95, 1000,
                                                 show_lead_time_offset=True)
        mask = shifted['is_forecast'].astype(bool)

        assert shifted.loc[mask, 'date'].iloc[0] == pd.Timestamp('2023-12-02')
        assert shifted.loc[mask, 'period_date'].iloc[0] == pd.Timestamp('2024-01-01')
        assert shifted.loc[~mask, 'date'].tolist() == base.loc[~mask, 'date'].tolist()

        for column in ['forecast', 'scenario_forecast', 'safety_stock', 'reorder_point', 'projected_inventory']:
            assert shifted[column].equals(base[column])

    def test_offset_uses_unstressed_lead_time(self, linear_forecast_df, linear_std):
        shifted = calculate_supply_chain_metrics(linear_forecast_df, linear_std, 30, 0.95, 1000,
                                                 show_lead_time_offset=True, volatility_multiplier=1.0)
        first = shifted[shifted['is_forecast'].astype(bool)].iloc[0]
        assert first['period_date'] - first['date'] == pd.Timedelta(days=30)

    def test_fractional_lead_time_shifts_whole_days(self, linear_forecast_df, linear_std):
        shifted = calculate_supply_chain_metrics(linear_forecast_df, linear_std, 33.4, 0.95, 1000,
                                                 show_lead_time_offset=True)
        first = shifted[shifted['is_forecast'].astype(bool)].iloc[0]

        assert first['date'] == pd.Timestamp('2023-11-29')
        assert first['date'] == first['date'].normalize()

    def test_empty_forecast(self):
        assert calculate_supply_chain_metrics(pd.DataFrame(), 10, 30, 0.95, 100).empty


class TestScenarioHelpers:

    def test_lookup_last_wins(self):
        lookup = build_scenario_lookup([
            {'month': 3, 'multiplier': 1.2},
            {'month': 3, 'multiplier': 0.8},
            {'month': 1, 'multiplier': 1.1}
        ])
        assert lookup == {3: 0.8, 1: 1.1}

    def test_lookup_empty(self):
        assert build_scenario_lookup(None) == {}
        assert build_scenario_lookup([]) == {}

    def test_duplicate_months(self):
        scenarios = [{'month': 2}, {'month': 5}, {'month': 2}, {'month': 5}, {'month': 7}]
        assert find_duplicate_scenario_months(scenarios) == [2, 5]
        assert find_duplicate_scenario_months([{'month': 1}]) == []


class TestPlanningParameters:
    """Test portfolio resolution of planning inputs"""

    def test_empty_selection_averages_all(self, attributes_df, inventory_df):
        params = resolve_planning_parameters(attributes_df, inventory_df, skus=[])

        assert params['lead_time_days'] == pytest.approx(60.0)
        assert params['service_level'] == pytest.approx((0.95 + 0.99 + 0.90) / 3)
        assert params['on_hand'] == 1000
        assert len(params['attributes_df']) == 3

    def test_selected_skus(self, attributes_df, inventory_df):
        params = resolve_planning_parameters(attributes_df, inventory_df, skus=['SKU-A', 'SKU-C'])

        assert params['lead_time_days'] == pytest.approx(60.0)
        assert params['service_level'] == pytest.approx(0.925)
        assert params['on_hand'] == 700
        assert params['attributes_df']['sku'].tolist() == ['SKU-A', 'SKU-C']

    def test_explicit_values_win(self, attributes_df, inventory_df):
        params = resolve_planning_parameters(attributes_df, inventory_df, lead_time_days=14, service_level=0.8)

        assert params['lead_time_days'] == 14
        assert params['service_level'] == 0.8

    def test_defaults_without_data(self):
        params = resolve_planning_parameters(None, None)

        assert params['lead_time_days'] == 30
        assert params['service_level'] == 0.95
        assert params['on_hand'] == 0
        assert params['attributes_df'].empty

    def test_average_financials(self, attributes_df):
        assert average_financials(attributes_df) == (30.0, 20.0)
        assert average_financials(None) == (150.0, 100.0)


class TestFinancialSummary:

    def test_totals_over_forecast_rows(self, linear_forecast_df, linear_std):
        plan = calculate_supply_chain_metrics(linear_forecast_df, linear_std, 30, 0.95, 1000)
        summary = get_financial_summary(plan, volatility_multiplier=0.2)

        assert summary['total_revenue'] == 103500
        assert summary['total_margin'] == 34500
        assert summary['avg_inventory_value'] == 54667
        assert summary['value_at_risk'] == 5175

    def test_no_volatility_no_value_at_risk(self, linear_forecast_df, linear_std):
        plan = calculate_supply_chain_metrics(linear_forecast_df, linear_std, 30, 0.95, 1000)
        assert get_financial_summary(plan)['value_at_risk'] == 0

    def test_empty_plan(self):
        summary = get_financial_summary(pd.DataFrame())
        assert all(value == 0 for value in summary.values())
