import pandas as pd
import io # Required for Excel export

# --- Constants ---
EXPORT_COLUMNS = [
    ('Date', 'date'),
    ('Historical', 'historical'),
    ('Forecast', 'forecast'),
    ('Lower Bound', 'lower_bound'),
    ('Upper Bound', 'upper_bound'),
    ('Safety Stock', 'safety_stock'),
    ('Reorder Point', 'reorder_point'),
    ('Projected Inventory', 'projected_inventory')
]

# --- Data Export Functions ---

def _format_export_value(value):
    """Render one cell: dates as YYYY-MM-DD, whole numbers without decimals, missing as ''"""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ''
    if isinstance(value, pd.Timestamp):
        return value.strftime('%Y-%m-%d')
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def export_plan_to_csv(plan_df: pd.DataFrame) -> str:
    """
    Serialize supply-chain decision points as CSV text.

    One header row followed by one comma-joined row per point. Optional
    fields that are absent on a row render as empty strings.
    """
    header = ','.join(label for label, _ in EXPORT_COLUMNS)
    rows = [header]
    for record in plan_df.to_dict('records'):
        rows.append(','.join(_format_export_value(record.get(col)) for _, col in EXPORT_COLUMNS))
    return '\n'.join(rows)


def _sheet_ready(df: pd.DataFrame) -> pd.DataFrame:
    """Copy with datetime columns as YYYY-MM-DD strings (only copies when needed)"""
    datetime_cols = [col for col in df.columns if pd.api.types.is_datetime64_any_dtype(df[col])]
    if not datetime_cols:
        return df
    df = df.copy()
    for col in datetime_cols:
        df[col] = df[col].dt.strftime('%Y-%m-%d')
    return df


def get_filtered_data_as_excel(dfs_to_export_dict):
    """
    Build a multi-sheet Excel workbook for download.

    Args:
        dfs_to_export_dict: {"sheet_name": (dataframe, include_index_bool)}.
                            Entries that are not DataFrames, or are empty, are skipped.

    Returns:
        bytes: The .xlsx file
    """
    output = io.BytesIO()

    with pd.ExcelWriter(output, engine='xlsxwriter') as writer:
        header_format = writer.book.add_format({'bold': True, 'bg_color': '#EEF2FF', 'border': 1})

        for sheet_name, (df, include_index) in dfs_to_export_dict.items():
            if not isinstance(df, pd.DataFrame):
                print(f"Skipping {sheet_name}: Not a DataFrame.")
                continue
            if df.empty:
                print(f"Skipping {sheet_name}: DataFrame is empty.")
                continue

            sheet_df = _sheet_ready(df)
            sheet_df.to_excel(writer, sheet_name=sheet_name, index=include_index)

            worksheet = writer.sheets[sheet_name]
            worksheet.freeze_panes(1, 0)
            offset = 1 if include_index else 0
            for idx, col in enumerate(sheet_df.columns):
                worksheet.write(0, idx + offset, str(col), header_format)
                width = max(sheet_df[col].map(lambda v: len(str(v))).max(), len(str(col))) + 2
                worksheet.set_column(idx + offset, idx + offset, width)

    return output.getvalue()
