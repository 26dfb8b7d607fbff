"""
UI Components Module
Shared Streamlit building blocks for the demand planning pages.
Pages compose these helpers; none of them compute business figures.
"""

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

BAND_COLOR = 'rgba(255, 127, 14, {alpha})'

# ===== UI LAYOUT HELPERS =====

def render_page_header(title, icon="📈", subtitle=None):
    """Page title with an optional caption line under it"""
    st.title(f"{icon} {title}")
    if subtitle:
        st.caption(subtitle)
    st.divider()

def render_kpi_row(metrics_dict):
    """
    Render one row of st.metric cards

    Args:
        metrics_dict: {"Label": {"value": "123", "delta": "+5%", "help": "Help text"}}
                      Missing or blank values show as N/A.
    """
    if not metrics_dict:
        return

    for col, (label, data) in zip(st.columns(len(metrics_dict)), metrics_dict.items()):
        value = data.get("value")
        if value is None or str(value).strip() == "":
            value = "N/A"
        col.metric(label=label, value=value, delta=data.get("delta"), help=data.get("help"))

def render_data_table(df, title=None, max_rows=100, downloadable=True, download_filename="data.csv"):
    """
    Show a DataFrame with dates rendered as YYYY-MM-DD

    Args:
        df: Pandas DataFrame
        title: Optional subheader
        max_rows: Rows shown on screen (the download holds every row)
        downloadable: Add a CSV download button
        download_filename: File name offered for the download
    """
    if title:
        st.subheader(title)

    if df.empty:
        render_empty_state()
        return

    display_df = df.head(max_rows).copy()
    for col in display_df.columns:
        if pd.api.types.is_datetime64_any_dtype(display_df[col]):
            display_df[col] = display_df[col].map(format_date)

    st.dataframe(display_df, width='stretch', hide_index=True)
    if len(df) > max_rows:
        st.caption(f"Showing {max_rows} of {len(df)} rows")

    if downloadable:
        st.download_button(
            label="📥 Download CSV",
            data=df.to_csv(index=False).encode('utf-8'),
            file_name=download_filename,
            mime="text/csv",
            key=f"download_{download_filename}"
        )

def render_chart(fig, title=None, height=400):
    """
    Apply the shared plotly layout and draw the figure

    Args:
        fig: Plotly figure object
        title: Optional subheader
        height: Chart height in pixels
    """
    if title:
        st.subheader(title)

    fig.update_layout(
        height=height,
        margin=dict(l=20, r=20, t=40, b=20),
        template="plotly_white",
        hovermode='x unified',
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1)
    )
    st.plotly_chart(fig, width='stretch')

def add_confidence_band(fig, forecast_df):
    """
    Add dashed upper/lower bound lines with the area between them shaded.

    The lower trace fills to the upper one, so the upper trace is added first.
    """
    for column, label, fill in (('upper_bound', 'Upper Bound', None), ('lower_bound', 'Lower Bound', 'tonexty')):
        fig.add_trace(go.Scatter(
            x=forecast_df['date'],
            y=forecast_df[column],
            mode='lines',
            name=label,
            line=dict(color=BAND_COLOR.format(alpha=0.5), width=1, dash='dash'),
            fill=fill,
            fillcolor=BAND_COLOR.format(alpha=0.1) if fill else None,
            hovertemplate=f'<b>{label}</b><br>Month: %{{x|%b %Y}}<br>Value: %{{y:,.0f}} units<extra></extra>'
        ))
    return fig

def render_info_box(message, type="info"):
    """
    Render a message box; type is one of info, warning, error, success
    """
    boxes = {
        "info": st.info,
        "warning": st.warning,
        "error": st.error,
        "success": st.success
    }
    boxes.get(type, st.info)(message)

def render_empty_state(message="No data available"):
    st.info(f"ℹ️ {message}")

# ===== NAVIGATION HELPERS =====

def get_main_navigation():
    """Menu entries in display order: id (dispatch key), label, description"""
    return [
        {
            "id": "forecast",
            "label": "📈 Demand Forecast",
            "description": "Historical demand and projected forecast with confidence bands"
        },
        {
            "id": "backtest",
            "label": "🎯 Forecast Accuracy",
            "description": "6-month holdout backtest and model comparison"
        },
        {
            "id": "supply_chain",
            "label": "📦 Inventory Policy",
            "description": "Safety stock, reorder point and projected inventory"
        },
        {
            "id": "pareto",
            "label": "🏷️ ABC Analysis",
            "description": "Pareto classification of SKUs by volume"
        },
        {
            "id": "data_upload",
            "label": "📤 Data Upload",
            "description": "Upload sales history, attributes and inventory"
        }
    ]

def render_navigation():
    """
    Sidebar page selector
    Returns the selected page id
    """
    st.sidebar.title("📈 Demand Planner")
    st.sidebar.divider()

    menu_items = {item["label"]: item for item in get_main_navigation()}
    selected = menu_items.get(st.sidebar.radio("Navigation", options=list(menu_items), key="main_nav"))

    if selected is None:
        return "forecast"

    st.sidebar.caption(selected["description"])
    st.sidebar.divider()
    return selected["id"]

# ===== UTILITY FORMATTERS =====

def format_number(value, format_type="integer"):
    """Format numbers consistently"""
    if value is None:
        return "N/A"

    formats = {
        'integer': '{:,.0f}',
        'currency': '${:,.0f}',
        'percentage': '{:.1f}%',
        'decimal': '{:.2f}'
    }

    try:
        return formats.get(format_type, '{}').format(value)
    except (TypeError, ValueError):
        return str(value)

def format_date(date_value, format_str='%Y-%m-%d'):
    """Format dates consistently; strings pass through, missing values show as N/A"""
    if date_value is None or date_value is pd.NaT:
        return "N/A"

    if isinstance(date_value, str):
        return date_value
    try:
        return date_value.strftime(format_str)
    except AttributeError:
        return str(date_value)
