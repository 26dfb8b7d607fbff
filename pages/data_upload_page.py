"""
Data Upload & Management Page
Allow users to upload their own data files with validation and template export
"""

import streamlit as st
import pandas as pd
from datetime import datetime
from io import BytesIO

from business_rules import DATA_FIELD_DEFINITIONS
from data_loader import normalize_header
from ui_components import render_page_header, render_info_box

# ===== FILE CONFIGURATIONS =====

FILE_CONFIGS = {
    "sales": {
        "display_name": "Sales History",
        "required": True,
        "description": "One row per SKU per month with quantity sold",
        "sample_data": {
            "date": ["2024-01-01", "2024-02-01"],
            "sku": ["SKU-101", "SKU-101"],
            "category": ["Electronics", "Electronics"],
            "quantity": [420, 455]
        }
    },
    "attributes": {
        "display_name": "Product Attributes",
        "required": False,
        "description": "Lead time, unit cost, selling price and service level per SKU",
        "sample_data": {
            "sku": ["SKU-101", "SKU-102"],
            "category": ["Electronics", "Automotive"],
            "lead_time_days": [30, 45],
            "unit_cost": [25.0, 80.0],
            "selling_price": [37.5, 120.0],
            "service_level": [0.95, 0.98]
        }
    },
    "inventory": {
        "display_name": "Inventory Levels",
        "required": False,
        "description": "Current on-hand stock per SKU",
        "sample_data": {
            "sku": ["SKU-101", "SKU-102"],
            "on_hand": [1200, 640]
        }
    }
}


def validate_upload(file_key, df):
    """
    Check an uploaded frame for the columns its loader needs.

    Returns:
        list: Missing column names (empty when valid)
    """
    required = DATA_FIELD_DEFINITIONS[file_key]['columns']
    if file_key == 'attributes':
        required = ['sku']
    present = {normalize_header(col) for col in df.columns}
    return [col for col in required if normalize_header(col) not in present]


def render_data_upload_page():
    """Render the upload page. Uploaded buffers are picked up by file_loader.safe_read_csv."""
    render_page_header("Data Upload", icon="📤", subtitle="Upload CSV files to replace the sample dataset")

    if 'uploaded_files' not in st.session_state:
        st.session_state.uploaded_files = {}

    if 'upload_history' not in st.session_state:
        st.session_state.upload_history = []

    for file_key, config in FILE_CONFIGS.items():
        status = '✅' if file_key in st.session_state.uploaded_files else '⭕'
        with st.expander(f"{status} {config['display_name']}", expanded=config['required']):
            st.caption(config['description'])

            template = pd.DataFrame(config['sample_data']).to_csv(index=False).encode('utf-8')
            st.download_button(
                label="📄 Download Template",
                data=template,
                file_name=DATA_FIELD_DEFINITIONS[file_key]['file'],
                mime="text/csv",
                key=f"template_{file_key}"
            )

            uploaded_file = st.file_uploader(f"Upload {config['display_name']}", type=['csv'], key=f"upload_{file_key}")
            if uploaded_file is None:
                continue

            content = uploaded_file.getvalue()
            try:
                preview = pd.read_csv(BytesIO(content), nrows=5, skipinitialspace=True)
            except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
                render_info_box(f"Could not read file: {e}", "error")
                st.session_state.upload_history.append({
                    'file': config['display_name'],
                    'status': 'Failed',
                    'time': datetime.now().strftime('%Y-%m-%d %H:%M:%S')
                })
                continue

            missing = validate_upload(file_key, preview)
            if missing:
                render_info_box(f"Missing required columns: {', '.join(missing)}", "error")
                continue

            st.session_state.uploaded_files[file_key] = BytesIO(content)
            st.session_state.upload_history.append({
                'file': config['display_name'],
                'status': 'Uploaded',
                'time': datetime.now().strftime('%Y-%m-%d %H:%M:%S')
            })
            st.dataframe(preview, width='stretch')
            render_info_box("File accepted. Click 'Reload Data' to use it.", "success")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("🔄 Reload Data", width='stretch'):
            st.session_state.pop('data_bundle', None)
            st.rerun()
    with col2:
        if st.button("🗑️ Clear All Uploads", width='stretch'):
            st.session_state.uploaded_files = {}
            st.session_state.pop('data_bundle', None)
            st.rerun()

    if st.session_state.upload_history:
        st.subheader("Upload History")
        st.dataframe(pd.DataFrame(st.session_state.upload_history[-10:]), width='stretch')
