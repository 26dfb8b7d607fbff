"""
Demand Forecast Page
Historical demand, projected forecast, confidence bands and scenario-adjusted demand
"""

import streamlit as st
import pandas as pd
import plotly.graph_objects as go

from demand_forecasting import METHOD_DESCRIPTIONS, ForecastMethod
from ui_components import (
    add_confidence_band,
    format_number,
    render_chart,
    render_data_table,
    render_empty_state,
    render_kpi_row,
    render_page_header
)


def render_forecast_page(results):
    """
    Render the demand forecast page

    Args:
        results: Output dict of demand_planning.run_demand_analysis()
    """
    settings = results['settings']
    method = ForecastMethod.from_label(settings['method'])

    render_page_header(
        "Demand Forecast",
        subtitle=f"Model: {method.value} · Horizon: {settings['horizon']} months · Confidence: {settings['confidence_level']}%"
    )
    st.caption(METHOD_DESCRIPTIONS[method])

    plan_df = results['plan_df']
    if plan_df.empty:
        render_empty_state("Not enough history to forecast. Select a wider date range or more SKUs (minimum 3 periods).")
        return

    forecast_only = plan_df[plan_df['is_forecast']]
    stats = results['stats']

    render_kpi_row({
        "Historical Avg": {"value": format_number(stats['avg']), "help": "Mean demand per period"},
        "Forecast Avg": {"value": format_number(forecast_only['forecast'].mean()), "help": "Mean projected demand per period"},
        "Demand Std Dev": {"value": format_number(stats['std']), "help": "Population standard deviation of historical demand"},
        "Forecast Total": {"value": format_number(forecast_only['scenario_forecast'].sum()), "help": "Scenario-adjusted demand over the horizon"}
    })

    _render_forecast_chart(plan_df)

    outliers_df = results['outliers_df']
    if not outliers_df.empty:
        with st.expander(f"⚠️ {len(outliers_df)} periods deviate more than 1.5σ from the mean"):
            st.dataframe(outliers_df, width='stretch')

    render_data_table(
        forecast_only[['date', 'forecast', 'lower_bound', 'upper_bound', 'scenario_forecast']],
        title="Forecast Detail",
        download_filename="forecast_detail.csv"
    )


def _render_forecast_chart(plan_df: pd.DataFrame):
    """Historical line, forecast line with shaded confidence band, scenario overlay"""
    history = plan_df[~plan_df['is_forecast']]
    forecast = plan_df[plan_df['is_forecast']]

    fig = go.Figure()

    fig.add_trace(go.Scatter(
        x=history['date'],
        y=history['historical'],
        mode='lines+markers',
        name='Historical',
        line=dict(color='#6366f1', width=2),
        hovertemplate='<b>Historical</b><br>Month: %{x|%b %Y}<br>Demand: %{y:,.0f} units<extra></extra>'
    ))

    add_confidence_band(fig, forecast)

    fig.add_trace(go.Scatter(
        x=forecast['date'],
        y=forecast['forecast'],
        mode='lines+markers',
        name='Forecast',
        line=dict(color='#ff7f0e', width=2),
        hovertemplate='<b>Forecast</b><br>Month: %{x|%b %Y}<br>Forecast: %{y:,.0f} units<extra></extra>'
    ))

    if (forecast['scenario_forecast'] != forecast['forecast']).any():
        fig.add_trace(go.Bar(
            x=forecast['date'],
            y=forecast['scenario_forecast'],
            name='Scenario Demand',
            marker_color='#10b981',
            opacity=0.5,
            hovertemplate='<b>Scenario</b><br>Month: %{x|%b %Y}<br>Demand: %{y:,.0f} units<extra></extra>'
        ))

    fig.update_layout(xaxis_title="Month", yaxis_title="Demand (Units)")
    render_chart(fig, title="Demand Trend & Forecast", height=480)
