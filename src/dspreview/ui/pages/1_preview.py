import streamlit as st

from dspreview.api_client import APIError
from dspreview.api.schemas.operations import SplitRequest
from dspreview.engine.annotations import AnnotationKind
from dspreview.engine.table import format_cell
from dspreview.services.sources import SOURCE_KINDS
from dspreview.ui.state import get_client, get_dataset_id, get_preview_service, init_session, set_dataset_id

init_session()
st.title("Dataset Preview")

# --- Select dataset ---
with st.form("dataset_form"):
    dataset_id = st.text_input("Dataset ID", value=get_dataset_id() or "")
    source = st.selectbox(
        "Source",
        list(SOURCE_KINDS),
        index=list(SOURCE_KINDS).index(st.session_state.get("preview_source", "preview")),
    )
    submitted = st.form_submit_button("Load")

service = get_preview_service(source)

if submitted and dataset_id:
    set_dataset_id(dataset_id)
    with st.spinner("Loading preview..."):
        service.load(dataset_id)

if service.dataset_id is None:
    st.info("Enter a dataset ID to load its preview.")
    st.stop()

table = service.table

# --- Status ---
if table.is_fallback:
    st.warning(f"Showing fallback data: {table.error or 'preview unavailable'}")
elif table.is_empty_result:
    st.info("The dataset returned no rows.")
else:
    st.caption(f"{table.row_count} rows loaded of {table.total_rows} (shape: {table.shape})")

# --- Controls ---
col1, col2, col3, col4 = st.columns([2, 2, 2, 2])
if col1.button("Refresh"):
    service.refresh()
    st.rerun()

page_size = col2.selectbox(
    "Rows per page",
    [5, 10, 25, 50, 100],
    index=[5, 10, 25, 50, 100].index(service.paginator.page_size)
    if service.paginator.page_size in (5, 10, 25, 50, 100) else 1,
)
if page_size != service.paginator.page_size:
    service.set_page_size(page_size)
    st.rerun()

page = col3.number_input(
    f"Page (of {service.paginator.total_pages})",
    min_value=1,
    max_value=service.paginator.total_pages,
    value=service.paginator.current_page,
)
if page != service.paginator.current_page:
    service.change_page(int(page))
    st.rerun()

with col4:
    if st.button("Validate"):
        try:
            service.apply_validation_result(get_client().validate_dataset(service.dataset_id))
            st.rerun()
        except APIError as e:
            st.error(f"Validation failed: {e.detail}")

# --- Rows ---
table = service.table
st.dataframe(
    [{h: format_cell(row.get(h)) for h in table.headers} for row in service.paged_rows],
    use_container_width=True,
)

# --- Schema ---
st.subheader("Schema")
if table.schema:
    st.dataframe(
        [
            {
                "column": col.name,
                "type": col.type.value,
                "nullable": col.nullable,
                "samples": ", ".join(format_cell(v) for v in col.sample_values),
            }
            for col in table.schema
        ],
        use_container_width=True,
    )
else:
    st.info("No schema available.")

# --- Split ---
with st.expander("Train/test split"):
    train_pct = st.slider("Train %", min_value=5, max_value=95, value=80, step=5)
    summary_columns = {kind.value for kind in AnnotationKind}
    stratify = st.selectbox(
        "Stratify by", ["(none)"] + [h for h in table.headers if h not in summary_columns],
    )
    if st.button("Split"):
        request = SplitRequest(
            train_ratio=train_pct / 100,
            test_ratio=(100 - train_pct) / 100,
            shuffle=True,
            stratify_by=None if stratify == "(none)" else stratify,
        )
        try:
            service.apply_split_result(get_client().split_dataset(service.dataset_id, request))
            st.rerun()
        except APIError as e:
            st.error(f"Split failed: {e.detail}")
