"""
Inventory Policy Page
Safety stock, reorder point, projected inventory and financial projections
"""

import streamlit as st
import plotly.graph_objects as go

from replenishment_planning import adjust_lead_time
from ui_components import (
    format_number,
    render_chart,
    render_data_table,
    render_empty_state,
    render_kpi_row,
    render_page_header
)
from utils import export_plan_to_csv, get_filtered_data_as_excel


def render_replenishment_page(results):
    """
    Render the inventory policy page

    Args:
        results: Output dict of demand_planning.run_demand_analysis()
    """
    settings = results['settings']
    params = results['planning_params']
    volatility = settings['supplier_volatility']

    render_page_header(
        "Inventory Policy",
        icon="📦",
        subtitle=(
            f"Lead time {params['lead_time_days']:.0f} days"
            f" (stressed {adjust_lead_time(params['lead_time_days'], volatility):.0f})"
            f" · Service level {params['service_level']:.1%}"
        )
    )

    plan_df = results['plan_df']
    if plan_df.empty:
        render_empty_state("No forecast available to plan against.")
        return

    if settings['show_lead_time_offset']:
        st.info("Forecast dates are shifted back by the lead time to show order-by dates.")

    financials = results['financials']
    render_kpi_row({
        "Safety Stock": {"value": format_number(plan_df['safety_stock'].iloc[0]), "help": "Z × σ × √(lead time in months)"},
        "Reorder Point": {"value": format_number(plan_df['reorder_point'].iloc[0]), "help": "Lead-time demand + safety stock"},
        "On-Hand": {"value": format_number(params['on_hand']), "help": "Current stock aggregation"},
        "Value at Risk": {"value": format_number(financials['value_at_risk'], 'currency'), "help": "Revenue exposed to supplier volatility"}
    })
    render_kpi_row({
        "Projected Revenue": {"value": format_number(financials['total_revenue'], 'currency')},
        "Projected Margin": {"value": format_number(financials['total_margin'], 'currency')},
        "Avg Inventory Value": {"value": format_number(financials['avg_inventory_value'], 'currency')}
    })

    forecast = plan_df[plan_df['is_forecast']]
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=forecast['date'],
        y=forecast['scenario_forecast'],
        name='Demand',
        marker_color='#6366f1',
        opacity=0.6,
        hovertemplate='<b>Demand</b><br>Month: %{x|%b %Y}<br>Units: %{y:,.0f}<extra></extra>'
    ))
    fig.add_trace(go.Scatter(
        x=forecast['date'],
        y=forecast['projected_inventory'],
        mode='lines+markers',
        name='Projected Inventory',
        line=dict(color='#10b981', width=2),
        hovertemplate='<b>Inventory</b><br>Month: %{x|%b %Y}<br>Units: %{y:,.0f}<extra></extra>'
    ))
    fig.add_trace(go.Scatter(
        x=forecast['date'],
        y=forecast['reorder_point'],
        mode='lines',
        name='Reorder Point',
        line=dict(color='#f59e0b', width=2, dash='dash')
    ))
    fig.add_trace(go.Scatter(
        x=forecast['date'],
        y=forecast['safety_stock'],
        mode='lines',
        name='Safety Stock',
        line=dict(color='#ef4444', width=2, dash='dot')
    ))
    fig.update_layout(xaxis_title="Month", yaxis_title="Units")
    render_chart(fig, title="Projected Inventory Trajectory", height=450)

    below_rop = forecast[forecast['projected_inventory'] <= forecast['reorder_point']]
    if not below_rop.empty:
        first = below_rop.iloc[0]
        st.warning(f"Projected inventory reaches the reorder point in {first['date']:%b %Y}.")

    render_data_table(
        forecast[['date', 'scenario_forecast', 'projected_inventory', 'projected_revenue',
                  'projected_margin', 'inventory_value']],
        title="Projection Detail",
        downloadable=False
    )

    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            label="📥 Export Plan (CSV)",
            data=export_plan_to_csv(plan_df).encode('utf-8'),
            file_name="demand_plan.csv",
            mime="text/csv"
        )
    with col2:
        st.download_button(
            label="📥 Export Workbook (Excel)",
            data=get_filtered_data_as_excel({
                "Plan": (plan_df, False),
                "History": (results['series_df'], False),
                "ABC": (results['pareto_df'], False)
            }),
            file_name="demand_plan.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
