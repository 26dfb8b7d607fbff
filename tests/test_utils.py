"""
Tests for utils module
Tests plan CSV export and Excel export functionality
"""

import pytest
import pandas as pd
import numpy as np

from utils import export_plan_to_csv, get_filtered_data_as_excel

CSV_HEADER = "Date,Historical,Forecast,Lower Bound,Upper Bound,Safety Stock,Reorder Point,Projected Inventory"


@pytest.fixture
def small_plan_df():
    """One historical and one forecast decision point"""
    return pd.DataFrame([
        {
            'date': pd.Timestamp('2024-01-01'), 'historical': 100.0, 'forecast': 100,
            'lower_bound': np.nan, 'upper_bound': np.nan, 'is_forecast': False,
            'safety_stock': 5, 'reorder_point': 20, 'projected_inventory': 50
        },
        {
            'date': pd.Timestamp('2024-02-01'), 'historical': np.nan, 'forecast': 110,
            'lower_bound': 90.0, 'upper_bound': 130.0, 'is_forecast': True,
            'safety_stock': 5, 'reorder_point': 20, 'projected_inventory': -60
        }
    ])


class TestPlanCsvExport:
    """Test export_plan_to_csv()"""

    def test_header_and_rows(self, small_plan_df):
        lines = export_plan_to_csv(small_plan_df).split('\n')

        assert lines[0] == CSV_HEADER
        assert lines[1] == "2024-01-01,100,100,,,5,20,50"
        assert lines[2] == "2024-02-01,,110,90,130,5,20,-60"

    def test_missing_policy_columns_render_empty(self):
        forecast_only = pd.DataFrame([{'date': pd.Timestamp('2024-03-01'), 'forecast': 7}])
        lines = export_plan_to_csv(forecast_only).split('\n')

        assert lines[1] == "2024-03-01,,7,,,,,"

    def test_empty_plan_is_header_only(self):
        assert export_plan_to_csv(pd.DataFrame()) == CSV_HEADER

    def test_one_line_per_point(self, small_plan_df):
        assert len(export_plan_to_csv(small_plan_df).split('\n')) == len(small_plan_df) + 1


class TestExcelExport:
    """Test Excel export functionality"""

    def test_get_filtered_data_as_excel_returns_bytes(self):
        """Test that Excel export returns an xlsx (zip) payload"""
        df = pd.DataFrame({
            'col1': [1, 2, 3],
            'col2': ['a', 'b', 'c']
        })

        result = get_filtered_data_as_excel({"Test Sheet": (df, False)})
        assert isinstance(result, bytes)
        assert result[:2] == b'PK'

    def test_get_filtered_data_as_excel_empty_dataframe(self, capsys):
        """Empty frames are skipped"""
        result = get_filtered_data_as_excel({"Empty Sheet": (pd.DataFrame(), False)})

        assert isinstance(result, bytes)
        assert "Skipping Empty Sheet" in capsys.readouterr().out

    def test_non_dataframe_skipped(self, capsys, small_plan_df):
        result = get_filtered_data_as_excel({
            "Plan": (small_plan_df, False),
            "Placeholder": (None, False)
        })

        assert len(result) > 0
        assert "Skipping Placeholder: Not a DataFrame." in capsys.readouterr().out

    def test_datetime_columns_not_mutated(self, small_plan_df):
        get_filtered_data_as_excel({"Plan": (small_plan_df, False)})
        assert pd.api.types.is_datetime64_any_dtype(small_plan_df['date'])

    def test_plan_from_sample_analysis_exports(self):
        """Historical rows carry NaN bounds; widths must still be measurable"""
        from demand_planning import run_demand_analysis
        from sample_data import generate_sample_attributes, generate_sample_data, generate_sample_inventory

        _, results = run_demand_analysis(generate_sample_data(), generate_sample_attributes(),
                                         generate_sample_inventory())
        plan_df = results['plan_df']
        assert plan_df['lower_bound'].isna().any()

        result = get_filtered_data_as_excel({
            "Plan": (plan_df, False),
            "ABC": (results['pareto_df'], False)
        })
        assert result[:2] == b'PK'

    def test_missing_values_in_object_column(self):
        df = pd.DataFrame({'note': ['short', None, np.nan], 'value': [1.0, np.nan, 3.0]})
        assert get_filtered_data_as_excel({"Notes": (df, False)})[:2] == b'PK'
