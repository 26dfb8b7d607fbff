"""
ABC Analysis Page
Pareto ranking of SKUs by total volume
"""

import plotly.graph_objects as go

from pareto_analysis import get_pareto_summary
from ui_components import (
    format_number,
    render_chart,
    render_data_table,
    render_empty_state,
    render_kpi_row,
    render_page_header
)

GRADE_COLORS = {'A': '#6366f1', 'B': '#f59e0b', 'C': '#94a3b8'}


def render_pareto_page(results, max_bars=15):
    """
    Render the ABC analysis page

    Args:
        results: Output dict of demand_planning.run_demand_analysis()
        max_bars: Number of SKUs shown in the chart
    """
    render_page_header("ABC Analysis", icon="🏷️", subtitle="A: top 80% of volume · B: next 15% · C: remaining 5%")

    pareto_df = results['pareto_df']
    if pareto_df.empty:
        render_empty_state("No SKU volumes for the selected category.")
        return

    summary = get_pareto_summary(pareto_df)
    render_kpi_row({
        f"Class {grade}": {
            "value": f"{format_number(info['sku_count'])} SKUs",
            "help": f"{info['share']:.1f}% of volume"
        }
        for grade, info in summary['grades'].items()
    })

    top = pareto_df.head(max_bars)
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=top['sku'],
        y=top['total_volume'],
        name='Volume',
        marker_color=[GRADE_COLORS[g] for g in top['grade']],
        hovertemplate='<b>%{x}</b><br>Volume: %{y:,.0f} units<extra></extra>'
    ))
    fig.add_trace(go.Scatter(
        x=top['sku'],
        y=top['cumulative_percent'],
        mode='lines+markers',
        name='Cumulative %',
        yaxis='y2',
        line=dict(color='#10b981', width=2)
    ))
    fig.update_layout(
        yaxis=dict(title="Units"),
        yaxis2=dict(title="Cumulative %", overlaying='y', side='right', range=[0, 105])
    )
    render_chart(fig, title="Pareto Chart", height=420)

    render_data_table(pareto_df.round({'cumulative_percent': 1, 'share': 1}), title="SKU Classification",
                      download_filename="abc_classification.csv")
