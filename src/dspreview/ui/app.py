"""Streamlit entry point: ``streamlit run src/dspreview/ui/app.py``."""
import streamlit as st

from dspreview.config import settings
from dspreview.logging import logger
from dspreview.ui.state import init_session
from dspreview.ui.validation import run_all_checks

st.set_page_config(page_title="Dataset Preview", layout="wide")
init_session()

st.title("Dataset Preview")
st.caption(f"Backend: {settings.DATASET_API_URL}")

errors = run_all_checks()
if errors:
    logger.warning(f"UI pre-flight checks failed: {errors}")
    for err in errors:
        st.error(err)
else:
    st.success("Backend reachable. Open the Preview page to load a dataset.")
