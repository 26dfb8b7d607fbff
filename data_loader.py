import pandas as pd
import numpy as np
import time
from file_loader import safe_read_csv
from business_rules import DATA_FIELD_DEFINITIONS

# === Helper Functions ===

def clean_string_column(series: pd.Series) -> pd.Series:
    """
    Strip whitespace and collapse internal runs of spaces.

    Args:
        series: Pandas Series with string data

    Returns:
        Cleaned Series with normalized whitespace
    """
    return series.astype(str).str.strip().str.replace(r'\s+', ' ', regex=True)

def safe_numeric_column(series: pd.Series, remove_commas: bool = False) -> pd.Series:
    """
    Convert a column to numeric, turning unparseable values into 0.

    Args:
        series: Pandas Series to convert
        remove_commas: If True, remove thousands separators before conversion

    Returns:
        Numeric Series with NaN filled as 0
    """
    if remove_commas:
        series = series.astype(str).str.replace(',', '', regex=False)
    return pd.to_numeric(series, errors='coerce').fillna(0)

def normalize_header(name) -> str:
    """Header key that matches 'leadTimeDays', 'Lead Time Days' and 'lead_time_days' alike"""
    return str(name).strip().lower().replace('_', '').replace(' ', '')

def standardize_columns(df: pd.DataFrame, expected_cols) -> pd.DataFrame:
    """Rename columns whose normalized header matches one of expected_cols"""
    lookup = {normalize_header(col): col for col in expected_cols}
    renames = {}
    for col in df.columns:
        key = normalize_header(col)
        if key in lookup:
            renames[col] = lookup[key]
    return df.rename(columns=renames)

def check_columns(df, required_cols, filename, logs):
    """Helper function to check for missing columns."""
    missing_cols = [col for col in required_cols if col not in df.columns]
    if missing_cols:
        logs.append(f"ERROR: '{filename}' is missing required columns: {', '.join(missing_cols)}")
        return False
    return True

# === Loaders ===

def load_sales_history(sales_path=None, file_key='sales'):
    """
    Loads historical sales observations (date, sku, category, quantity).

    Args:
        sales_path: file path (used if no uploaded file exists)
        file_key: session state key for uploaded file (default 'sales')

    Returns: logs (list), dataframe, error_dataframe
    """
    logs = []
    start_time = time.time()
    logs.append("--- Sales History Loader ---")
    definition = DATA_FIELD_DEFINITIONS['sales']
    sales_path = sales_path or definition['file']

    try:
        df = safe_read_csv(file_key, sales_path, skipinitialspace=True)
        logs.append(f"INFO: Found and loaded {len(df)} rows from {definition['file']}.")
    except Exception as e:
        logs.append(f"ERROR: Failed to read '{definition['file']}': {e}")
        return logs, pd.DataFrame(), pd.DataFrame()

    df = standardize_columns(df, definition['columns'])
    if not check_columns(df, definition['columns'], definition['file'], logs):
        return logs, pd.DataFrame(), pd.DataFrame()

    df = df[definition['columns']].copy()
    for col in ['sku', 'category']:
        df[col] = clean_string_column(df[col])

    df['date'] = pd.to_datetime(clean_string_column(df['date']), errors='coerce')
    bad_dates = df['date'].isna()
    error_df = df[bad_dates].copy()
    if bad_dates.any():
        logs.append(f"WARNING: {int(bad_dates.sum())} rows have missing/invalid dates and were skipped.")
    df = df[~bad_dates]

    raw_qty = pd.to_numeric(df['quantity'], errors='coerce')
    non_numeric = int(raw_qty.isna().sum())
    if non_numeric > 0:
        logs.append(f"WARNING: {non_numeric} rows have non-numeric quantities. Set to 0.")
    negative = int((raw_qty < 0).sum())
    if negative > 0:
        logs.append(f"WARNING: {negative} rows have negative quantities. Clamped to 0.")
    df['quantity'] = np.trunc(raw_qty.fillna(0).clip(lower=0)).astype(int)

    df = df.sort_values('date', kind='stable').reset_index(drop=True)

    if df.empty:
        logs.append("WARNING: Sales History Loader: No data remained after processing.")

    logs.append(f"INFO: Sales History Loader finished in {time.time() - start_time:.2f} seconds.")
    return logs, df, error_df

def load_product_attributes(attributes_path=None, file_key='attributes'):
    """
    Loads per-SKU lead time, cost, price and service level.

    Missing or non-numeric values fall back to the defaults in DATA_FIELD_DEFINITIONS.

    Returns: logs (list), dataframe, error_dataframe
    """
    logs = []
    logs.append("--- Product Attributes Loader ---")
    definition = DATA_FIELD_DEFINITIONS['attributes']
    attributes_path = attributes_path or definition['file']
    defaults = definition['defaults']

    try:
        df = safe_read_csv(file_key, attributes_path, skipinitialspace=True)
        logs.append(f"INFO: Found and loaded {len(df)} rows from {definition['file']}.")
    except Exception as e:
        logs.append(f"ERROR: Failed to read '{definition['file']}': {e}")
        return logs, pd.DataFrame(), pd.DataFrame()

    df = standardize_columns(df, definition['columns'])
    if not check_columns(df, ['sku'], definition['file'], logs):
        return logs, pd.DataFrame(), pd.DataFrame()

    df = df.copy()
    df['sku'] = clean_string_column(df['sku'])
    df['category'] = clean_string_column(df['category']) if 'category' in df.columns else 'Unknown'

    for col, default in defaults.items():
        if col not in df.columns:
            logs.append(f"INFO: Column '{col}' not provided. Using default {default}.")
            df[col] = default
            continue
        values = pd.to_numeric(df[col], errors='coerce')
        # Zero is treated as "not provided" like a blank cell
        invalid = values.isna() | (values == 0)
        if invalid.any():
            logs.append(f"WARNING: {int(invalid.sum())} rows have missing/invalid '{col}'. Using default {default}.")
        df[col] = values.where(~invalid, default)

    df['lead_time_days'] = df['lead_time_days'].astype(int)

    duplicates = df[df.duplicated(subset=['sku'], keep=False)]
    error_df = pd.DataFrame()
    if not duplicates.empty:
        logs.append(f"WARNING: Found {len(duplicates)} duplicated SKUs in {definition['file']}. Keeping first instance.")
        error_df = duplicates.copy()
    df = df.drop_duplicates(subset=['sku'])

    return logs, df[definition['columns']].reset_index(drop=True), error_df

def load_inventory_levels(inventory_path=None, file_key='inventory'):
    """
    Loads current on-hand stock per SKU.

    Returns: logs (list), dataframe, error_dataframe
    """
    logs = []
    logs.append("--- Inventory Loader ---")
    definition = DATA_FIELD_DEFINITIONS['inventory']
    inventory_path = inventory_path or definition['file']

    try:
        df = safe_read_csv(file_key, inventory_path, skipinitialspace=True)
        logs.append(f"INFO: Found and loaded {len(df)} rows from {definition['file']}.")
    except Exception as e:
        logs.append(f"ERROR: Failed to read '{definition['file']}': {e}")
        return logs, pd.DataFrame(), pd.DataFrame()

    df = standardize_columns(df, definition['columns'] + ['last_updated'])
    if not check_columns(df, definition['columns'], definition['file'], logs):
        return logs, pd.DataFrame(), pd.DataFrame()

    df = df.copy()
    df['sku'] = clean_string_column(df['sku'])
    raw_on_hand = pd.to_numeric(df['on_hand'].astype(str).str.replace(',', '', regex=False), errors='coerce')
    error_df = df[raw_on_hand.isna()].copy()
    if not error_df.empty:
        logs.append(f"WARNING: {len(error_df)} rows have non-numeric on-hand quantities. Set to 0.")
    df['on_hand'] = np.trunc(safe_numeric_column(df['on_hand'], remove_commas=True)).astype(int)

    if 'last_updated' in df.columns:
        df['last_updated'] = pd.to_datetime(df['last_updated'], errors='coerce')
    else:
        df['last_updated'] = pd.Timestamp.now().normalize()

    total_on_hand = int(df['on_hand'].sum())
    logs.append(f"INFO: {df['sku'].nunique()} SKUs with {total_on_hand:,} units on hand.")

    return logs, df[['sku', 'on_hand', 'last_updated']].reset_index(drop=True), error_df
