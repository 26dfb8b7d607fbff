"""
Forecast Accuracy Page
6-month holdout backtest of the selected model and a comparison of all models
"""

import streamlit as st
import plotly.graph_objects as go

from ui_components import (
    add_confidence_band,
    format_number,
    render_chart,
    render_data_table,
    render_empty_state,
    render_kpi_row,
    render_page_header
)


def render_backtest_page(results):
    """
    Render the forecast accuracy page

    Args:
        results: Output dict of demand_planning.run_demand_analysis()
    """
    render_page_header("Forecast Accuracy", icon="🎯", subtitle="Confidence against a 6-month holdout")

    backtest = results['backtest']
    metrics = backtest['metrics']
    if metrics is None:
        render_empty_state("Backtesting needs more than 8 periods of history.")
        return

    render_kpi_row({
        "Accuracy (Backtest)": {"value": format_number(metrics['accuracy'], 'percentage'), "help": "100 - MAPE, floored at 0"},
        "MAPE": {"value": format_number(metrics['mape'], 'percentage'), "help": "Mean Absolute Percentage Error"},
        "RMSE": {"value": format_number(metrics['rmse']), "help": "Root Mean Square Error"},
        "Bias Score": {
            "value": format_number(metrics['bias'], 'percentage'),
            "help": "Positive = over-forecasting, negative = under-forecasting"
        }
    })

    render_kpi_row({
        "MAD": {"value": format_number(metrics['mad']), "help": "Mean Absolute Deviation in units"},
        "Holding Cost Risk": {"value": format_number(metrics['holding_cost_risk'], 'currency'), "help": "Carrying cost of over-forecast units"},
        "Stockout Revenue Risk": {"value": format_number(metrics['stockout_revenue_risk'], 'currency'), "help": "Lost margin on under-forecast units"}
    })

    comparison = backtest['comparison_df']
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=comparison['date'],
        y=comparison['actual'],
        name='Actual',
        marker_color='#6366f1',
        hovertemplate='<b>Actual</b><br>Month: %{x|%b %Y}<br>Demand: %{y:,.0f} units<extra></extra>'
    ))
    add_confidence_band(fig, comparison)
    fig.add_trace(go.Scatter(
        x=comparison['date'],
        y=comparison['forecast'],
        mode='lines+markers',
        name='Backtest Forecast',
        line=dict(color='#ff7f0e', width=2),
        hovertemplate='<b>Forecast</b><br>Month: %{x|%b %Y}<br>Forecast: %{y:,.0f} units<extra></extra>'
    ))
    render_chart(fig, title="Holdout: Actual vs. Forecast", height=400)

    st.subheader("Model Comparison")
    model_df = backtest['model_comparison_df'].copy()
    model_df['method'] = model_df['method'].str.split(' \\(').str[0]
    render_data_table(model_df.round(1), downloadable=False)
