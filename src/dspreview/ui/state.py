"""Session-state helpers for the Streamlit UI.

Only reads/writes ``st.session_state``. Each session owns exactly one
DatasetClient and one PreviewService.
"""
import streamlit as st
from typing import Optional

from dspreview.api_client import DatasetClient
from dspreview.config import settings
from dspreview.services.preview_service import PreviewService
from dspreview.services.sources import ClientSchemaSource, build_source

DEFAULT_SOURCE = "preview"


def init_session() -> None:
    """Initialize session state variables."""
    if "dataset_id" not in st.session_state:
        st.session_state["dataset_id"] = None
    if "preview_source" not in st.session_state:
        st.session_state["preview_source"] = DEFAULT_SOURCE


def get_dataset_id() -> Optional[str]:
    """Get currently selected dataset ID."""
    return st.session_state.get("dataset_id")


def set_dataset_id(dataset_id: str) -> None:
    st.session_state["dataset_id"] = dataset_id


def get_client() -> DatasetClient:
    """Return the ``DatasetClient`` cached for the current session."""
    if "dspreview_api_client" not in st.session_state:
        base_url = st.session_state.get("dspreview_api_url", settings.DATASET_API_URL)
        st.session_state["dspreview_api_client"] = DatasetClient(base_url=base_url)
    return st.session_state["dspreview_api_client"]


def get_preview_service(source: Optional[str] = None) -> PreviewService:
    """Return the session's PreviewService, rebuilt when the source kind changes."""
    source = source or st.session_state.get("preview_source", DEFAULT_SOURCE)
    service = st.session_state.get("preview_service")
    if service is None or st.session_state.get("preview_service_source") != source:
        client = get_client()
        service = PreviewService.from_settings(build_source(source, client), ClientSchemaSource(client))
        st.session_state["preview_service"] = service
        st.session_state["preview_service_source"] = source
        st.session_state["preview_source"] = source
    return service
