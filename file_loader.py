"""
Resolves where a CSV comes from: a buffer uploaded on the Data Upload page, or a file on disk.
"""
import os

import pandas as pd
import streamlit as st


def _uploaded_files() -> dict:
    # st.session_state is unavailable when running outside a Streamlit script
    try:
        return st.session_state.get('uploaded_files', {})
    except (AttributeError, RuntimeError):
        return {}


def has_uploaded_file(file_key: str) -> bool:
    """True when the user uploaded a file for this key ('sales', 'attributes', 'inventory')"""
    return file_key in _uploaded_files()


def get_file_source(file_key: str, file_path: str):
    """
    Pick the source to read a CSV from.

    An uploaded buffer wins and is rewound so reruns read it from the start.
    Otherwise the file on disk is used if it exists.

    Args:
        file_key: key in st.session_state.uploaded_files
        file_path: fallback path on disk

    Returns:
        tuple: (source, is_uploaded); source is None when neither exists
    """
    buffer = _uploaded_files().get(file_key)
    if buffer is not None:
        if hasattr(buffer, 'seek'):
            buffer.seek(0)
        return buffer, True

    if os.path.isfile(os.path.abspath(file_path)):
        return file_path, False
    return None, False


def safe_read_csv(file_key: str, file_path: str, **kwargs) -> pd.DataFrame:
    """
    Read a CSV from the uploaded buffer or from disk.

    Args:
        file_key: key in st.session_state.uploaded_files
        file_path: fallback path on disk
        **kwargs: passed to pd.read_csv()

    Raises:
        FileNotFoundError: If there is no upload and no file at file_path
    """
    source, _ = get_file_source(file_key, file_path)
    try:
        # Unresolved paths still go through pd.read_csv so it reports the missing file
        return pd.read_csv(file_path if source is None else source, **kwargs)
    except FileNotFoundError:
        raise FileNotFoundError(f"File not found: {file_path} (and no uploaded file)")
