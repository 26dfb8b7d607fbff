"""
Pytest configuration and shared fixtures for all tests
Centralized mock data and utilities
"""

import pytest
import pandas as pd
import io
import os
import sys

import streamlit as st

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# ===== SHARED MOCK DATA FIXTURES =====

@pytest.fixture
def mock_sales_csv():
    """
    Creates mock sales history CSV with:
    - Two SKUs in two categories over four months
    - Whitespace around values (test trimming)
    - Non-numeric quantity (clamped to 0)
    - Negative quantity (clamped to 0)
    - Invalid date (moved to the error frame)
    """
    csv_data = (
        "date,sku,category,quantity\n"
        "2024-01-01, SKU-A ,Electronics,100\n"
        "2024-01-01,SKU-B,Industrial,50\n"
        "2024-02-01,SKU-A,Electronics,110\n"
        "2024-02-01,SKU-B,Industrial,abc\n"
        "2024-03-01,SKU-A,Electronics,120\n"
        "2024-03-01,SKU-B,Industrial,-5\n"
        "NOT-A-DATE,SKU-A,Electronics,999\n"
        "2024-04-01,SKU-A,Electronics,130\n"
    )
    return "SALES_HISTORY.csv", io.StringIO(csv_data)

@pytest.fixture
def mock_attributes_csv():
    """
    Creates mock product attributes CSV using camelCase headers with:
    - Blank and zero values (fall back to defaults)
    - Duplicate SKU (first kept)
    """
    csv_data = (
        "sku,category,leadTimeDays,unitCost,sellingPrice,serviceLevel\n"
        "SKU-A,Electronics,45,20,30,0.98\n"
        "SKU-B,Industrial,,0,12,\n"
        "SKU-A,Electronics,10,1,2,0.5\n"
    )
    return "PRODUCT_ATTRIBUTES.csv", io.StringIO(csv_data)

@pytest.fixture
def mock_inventory_csv():
    """Creates mock inventory CSV with one non-numeric on-hand value"""
    csv_data = (
        "sku,onHand\n"
        "SKU-A,1000\n"
        "SKU-B,250\n"
        "SKU-C,n/a\n"
    )
    return "INVENTORY.csv", io.StringIO(csv_data)

# ===== MOCK CSV READER FIXTURE =====

@pytest.fixture(autouse=True)
def mock_read_csv(monkeypatch, mock_sales_csv, mock_attributes_csv, mock_inventory_csv):
    """
    Auto-used fixture that intercepts pd.read_csv calls for the known upload
    file names and returns the mock data instead. Other paths read normally.
    """
    mocks = {
        "SALES_HISTORY.csv": mock_sales_csv[1],
        "PRODUCT_ATTRIBUTES.csv": mock_attributes_csv[1],
        "INVENTORY.csv": mock_inventory_csv[1],
    }

    original_read_csv = pd.read_csv

    def new_read_csv(filepath_or_buffer, *args, **kwargs):
        if isinstance(filepath_or_buffer, str):
            filename = os.path.basename(filepath_or_buffer)
            if filename in mocks:
                mocks[filename].seek(0)
                return original_read_csv(mocks[filename], *args, **kwargs)

        return original_read_csv(filepath_or_buffer, *args, **kwargs)

    monkeypatch.setattr(pd, "read_csv", new_read_csv)

@pytest.fixture(autouse=True)
def empty_session_state(monkeypatch):
    """Replace Streamlit session state with a plain dict so no upload buffers leak between tests"""
    monkeypatch.setattr(st, "session_state", {})

# ===== SERIES FIXTURES =====

@pytest.fixture
def linear_history_df():
    """12 months of perfectly linear demand: 100, 110, ..., 210"""
    return pd.DataFrame({
        'date': pd.date_range('2023-01-01', periods=12, freq='MS'),
        'quantity': [100 + 10 * i for i in range(12)]
    })

@pytest.fixture
def seasonal_history_df():
    """24 months with a repeating seasonal shape and mild growth"""
    shape = [80, 85, 95, 110, 120, 130, 135, 125, 110, 100, 140, 160]
    quantities = [q + year * 10 for year in range(2) for q in shape]
    return pd.DataFrame({
        'date': pd.date_range('2022-01-01', periods=24, freq='MS'),
        'quantity': quantities
    })

@pytest.fixture
def observations_df():
    """Raw observations: three SKUs, two categories, 12 months"""
    dates = pd.date_range('2023-01-01', periods=12, freq='MS')
    rows = []
    for i, date in enumerate(dates):
        rows.append({'date': date, 'sku': 'SKU-A', 'category': 'Electronics', 'quantity': 100 + 5 * i})
        rows.append({'date': date, 'sku': 'SKU-B', 'category': 'Electronics', 'quantity': 40 + i})
        rows.append({'date': date, 'sku': 'SKU-C', 'category': 'Industrial', 'quantity': 10})
    return pd.DataFrame(rows)

@pytest.fixture
def attributes_df():
    """Product attributes for the observation SKUs"""
    return pd.DataFrame({
        'sku': ['SKU-A', 'SKU-B', 'SKU-C'],
        'category': ['Electronics', 'Electronics', 'Industrial'],
        'lead_time_days': [30, 60, 90],
        'unit_cost': [10.0, 20.0, 30.0],
        'selling_price': [20.0, 30.0, 40.0],
        'service_level': [0.95, 0.99, 0.90]
    })

@pytest.fixture
def inventory_df():
    """On-hand stock for the observation SKUs"""
    return pd.DataFrame({
        'sku': ['SKU-A', 'SKU-B', 'SKU-C'],
        'on_hand': [500, 300, 200],
        'last_updated': pd.Timestamp('2023-12-31')
    })

# ===== UTILITY FUNCTIONS FOR TESTS =====

def assert_log_contains(logs, expected_message):
    """
    Helper to assert that a log message contains expected text

    Args:
        logs: List of log messages
        expected_message: Text expected to be in one of the logs
    """
    log_text = " ".join(logs)
    assert expected_message in log_text, f"Expected '{expected_message}' not found in logs: {log_text}"

def assert_columns_exist(df, columns):
    """
    Helper to assert that DataFrame contains required columns

    Args:
        df: Pandas DataFrame
        columns: List of column names that should exist
    """
    missing = set(columns) - set(df.columns)
    assert not missing, f"Missing required columns: {missing}"

def assert_no_nulls(df, columns):
    """
    Helper to assert that specified columns have no null values

    Args:
        df: Pandas DataFrame
        columns: List of column names to check
    """
    for col in columns:
        null_count = df[col].isna().sum()
        assert null_count == 0, f"Column '{col}' has {null_count} null values"
