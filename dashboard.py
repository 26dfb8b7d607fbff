"""
Demand Planning Dashboard
Forecast demand, size inventory policy, backtest accuracy and classify SKUs.

Run with: streamlit run dashboard.py
"""

import streamlit as st
import pandas as pd

from business_rules import SUPPLY_CHAIN_RULES, get_default_settings
from data_loader import load_inventory_levels, load_product_attributes, load_sales_history
from file_loader import has_uploaded_file
from demand_forecasting import ForecastMethod
from demand_planning import build_dashboard_context, run_demand_analysis
from sample_data import generate_sample_attributes, generate_sample_data, generate_sample_inventory
from ui_components import render_navigation

from pages.forecast_page import render_forecast_page
from pages.backtest_page import render_backtest_page
from pages.replenishment_page import render_replenishment_page
from pages.pareto_page import render_pareto_page
from pages.data_upload_page import render_data_upload_page

# ===== PAGE CONFIGURATION =====
st.set_page_config(
    page_title="Demand Planning Dashboard",
    page_icon="📈",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
    <style>
        [data-testid="stMetric"] {
            background-color: #f8f9fa;
            padding: 1rem;
            border-radius: 0.5rem;
            border: 1px solid #e9ecef;
        }

        /* Hide automatic Streamlit page navigation */
        [data-testid="stSidebarNav"] {
            display: none;
        }
    </style>
""", unsafe_allow_html=True)

SCENARIO_TEMPLATE = pd.DataFrame({
    'id': pd.Series(dtype='str'),
    'name': pd.Series(dtype='str'),
    'month': pd.Series(dtype='Int64'),
    'multiplier': pd.Series(dtype='float')
})

# ===== DATA LOADING =====

def load_all_data():
    """
    Load the uploaded files. Without an uploaded sales history the whole sample dataset is used;
    with one, attributes and inventory are only taken from their own uploads.

    Returns:
        dict: observations, attributes, inventory DataFrames and the loader logs
    """
    if not has_uploaded_file('sales'):
        observations = generate_sample_data()
        return {
            'observations': observations,
            'attributes': generate_sample_attributes(),
            'inventory': generate_sample_inventory(),
            'logs': [f"INFO: Using sample dataset ({len(observations)} sales rows)."]
        }

    logs, observations, _ = load_sales_history()
    bundle = {'observations': observations, 'attributes': pd.DataFrame(), 'inventory': pd.DataFrame()}

    for key, loader in (('attributes', load_product_attributes), ('inventory', load_inventory_levels)):
        if has_uploaded_file(key):
            loader_logs, bundle[key], _ = loader()
            logs += loader_logs
        else:
            logs.append(f"INFO: No {key} file uploaded. Planning uses default parameters.")

    bundle['logs'] = logs
    return bundle


def render_settings_sidebar(observations):
    """
    Draft settings live in the sidebar form; they only take effect on 'Run Analysis'.

    Returns:
        dict or None: Submitted settings, None until the form is submitted
    """
    committed = st.session_state.get('committed_settings', get_default_settings())
    sku_options = sorted(observations['sku'].unique()) if not observations.empty else []
    category_options = ['All'] + (sorted(observations['category'].unique()) if not observations.empty else [])
    method_labels = [m.value for m in ForecastMethod]

    with st.sidebar.form("analysis_settings"):
        st.markdown("**⚙️ Analysis Settings**")
        skus = st.multiselect("SKUs (empty = all)", sku_options, default=[s for s in committed['skus'] if s in sku_options])
        category = st.selectbox("Category", category_options,
                                index=category_options.index(committed['category']) if committed['category'] in category_options else 0)

        if not observations.empty:
            min_date, max_date = observations['date'].min().date(), observations['date'].max().date()
            date_range = st.date_input("Date range", value=(min_date, max_date), min_value=min_date, max_value=max_date)
        else:
            date_range = ()

        method = st.selectbox("Forecast model", method_labels, index=method_labels.index(committed['method']))
        horizon = st.slider("Horizon (months)", 1, 24, committed['horizon'])
        confidence_level = st.select_slider("Confidence level (%)", options=[80, 90, 95, 99], value=committed['confidence_level'])
        apply_cleaning = st.checkbox("Clean anomalies", value=committed['apply_anomaly_cleaning'])

        st.markdown("**📦 Inventory Policy**")
        use_attributes = st.checkbox("Lead time & service level from product attributes",
                                     value=committed['lead_time_days'] is None)
        lead_time = st.number_input("Lead time (days)", 1, 365, int(committed['lead_time_days'] or SUPPLY_CHAIN_RULES['default_lead_time_days']))
        service_level = st.slider("Service level", 0.50, 0.999, float(committed['service_level'] or SUPPLY_CHAIN_RULES['default_service_level']), step=0.005)
        volatility = st.slider("Supplier volatility stress", 0.0, 1.0, float(committed['supplier_volatility']), step=0.05)
        show_offset = st.checkbox("Show order-by dates (lead-time offset)", value=committed['show_lead_time_offset'])
        market_multiplier = st.number_input("Market trend multiplier", 0.5, 2.0, float(committed['market_multiplier']), step=0.05)

        submitted = st.form_submit_button("▶️ Run Analysis", width='stretch')

    if not submitted:
        return None

    start_date, end_date = (date_range if len(date_range) == 2 else (None, None))
    return {
        'skus': skus,
        'category': category,
        'start_date': start_date,
        'end_date': end_date,
        'method': method,
        'horizon': horizon,
        'confidence_level': confidence_level,
        'apply_anomaly_cleaning': apply_cleaning,
        'lead_time_days': None if use_attributes else lead_time,
        'service_level': None if use_attributes else service_level,
        'supplier_volatility': volatility,
        'show_lead_time_offset': show_offset,
        'market_multiplier': market_multiplier
    }


def render_scenario_editor():
    """Editable table of demand scenarios (month = 1-based forecast period)"""
    with st.sidebar.expander("🧪 Demand Scenarios"):
        scenarios_df = st.data_editor(
            SCENARIO_TEMPLATE,
            num_rows="dynamic",
            column_config={
                "month": st.column_config.NumberColumn("Month", min_value=1, step=1),
                "multiplier": st.column_config.NumberColumn("Multiplier", min_value=0.0, step=0.05)
            },
            key="scenario_editor"
        )
    scenarios_df = scenarios_df.dropna(subset=['month', 'multiplier'])
    return scenarios_df.to_dict('records')


# ===== MAIN =====

def main():
    if 'data_bundle' not in st.session_state:
        st.session_state.data_bundle = load_all_data()
    bundle = st.session_state.data_bundle

    page = render_navigation()

    submitted = render_settings_sidebar(bundle['observations'])
    if submitted is not None:
        st.session_state.committed_settings = {**get_default_settings(), **submitted}
    st.session_state.scenarios = render_scenario_editor()

    if page == "data_upload":
        render_data_upload_page()
        return

    if 'committed_settings' not in st.session_state:
        st.info("Select your entities and click **Run Analysis** to calculate projections.")
        return

    logs, results = run_demand_analysis(
        bundle['observations'],
        bundle['attributes'],
        bundle['inventory'],
        settings=st.session_state.committed_settings,
        scenarios=st.session_state.scenarios
    )

    if page == "forecast":
        render_forecast_page(results)
    elif page == "backtest":
        render_backtest_page(results)
    elif page == "supply_chain":
        render_replenishment_page(results)
    elif page == "pareto":
        render_pareto_page(results)

    with st.expander("🔧 Run Log"):
        st.code("\n".join(bundle['logs'] + logs))
        st.caption(build_dashboard_context(results, "Demand Planning"))


main()
