# viewer_app.py
import logging

import streamlit as st

import config
from preferences import DARK, ThemeStore
from presentation import SORT_INDICATORS, UNSORTED_INDICATOR, table_view_to_html
from table_engine import sort_direction
from upload_client import UploadClient
from viewer_session import ViewerSession

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

st.set_page_config(page_title="Excel Viewer Pro", page_icon="📊", layout="wide")

# -------------------------
# Session
# -------------------------
theme_store = ThemeStore()

if "viewer" not in st.session_state:
    st.session_state.viewer = ViewerSession(date_format=config.DATE_FORMAT)
if "theme" not in st.session_state:
    st.session_state.theme = theme_store.resolve()
if "upload_round" not in st.session_state:
    st.session_state.upload_round = 0

viewer: ViewerSession = st.session_state.viewer


@st.cache_resource(show_spinner=False)
def get_upload_client() -> UploadClient:
    return UploadClient(config.UPLOAD_URL, config.UPLOAD_TIMEOUT_SECONDS)


def toggle_theme():
    st.session_state.theme = theme_store.toggle(st.session_state.theme)


def start_over():
    viewer.reset()
    # new widget keys, so filters of the previous file do not linger
    st.session_state.upload_round += 1


def on_global_filter_change():
    viewer.set_global_filter(st.session_state[f"global_filter_{st.session_state.upload_round}"])


def on_column_filter_change(column: str, key: str):
    viewer.set_column_filter(column, st.session_state[key])


def on_clear_filters():
    viewer.clear_filters()
    round_id = st.session_state.upload_round
    st.session_state[f"global_filter_{round_id}"] = ""
    for index in range(len(viewer.columns)):
        st.session_state[f"column_filter_{round_id}_{index}"] = ""


if st.session_state.theme == DARK:
    st.markdown(
        "<style>.stApp{background:#0b1120;color:#f3f4f6} .stApp h1,.stApp h2,.stApp p,.stApp label{color:#f3f4f6}</style>",
        unsafe_allow_html=True,
    )

# -------------------------
# Header
# -------------------------
title_col, theme_col = st.columns([6, 1])
with title_col:
    st.title("📊 Excel Viewer Pro")
with theme_col:
    st.button("🌙" if st.session_state.theme == DARK else "☀️", on_click=toggle_theme, help="Toggle theme")

for note in viewer.pop_notifications():
    if note.level == "error":
        st.error(f"**{note.title}** {note.description}")
        if note.detail:
            st.caption(note.detail)
    else:
        st.toast(f"{note.title} {note.description}")

# -------------------------
# Upload
# -------------------------
if not viewer.has_data:
    st.subheader("Upload Your Excel File")
    st.write(
        "Transform your Excel data into an interactive, sortable, and filterable table. "
        "Simply upload your .xlsx or .xls file to get started."
    )
    uploaded_file = st.file_uploader(
        "Drop your Excel file here, or browse",
        type=[ext.lstrip(".") for ext in config.ACCEPTED_EXTENSIONS],
        key=f"uploader_{st.session_state.upload_round}",
    )
    if uploaded_file is not None and st.button("Upload", type="primary"):
        with st.spinner("Processing your file..."):
            loaded = viewer.load_file(get_upload_client(), uploaded_file.name, uploaded_file.getvalue())
        if loaded:
            st.session_state.upload_round += 1
        st.rerun()
    st.stop()

# -------------------------
# Table
# -------------------------
st.button("← Upload New File", on_click=start_over)

sheet = viewer.raw_sheet
st.caption(f"{viewer.file_name} · sheet '{sheet.sheet_name}' · {sheet.num_of_sheets} sheet(s) in workbook")

if viewer.issues:
    st.warning(f"{len(viewer.issues)} row(s) do not match the header columns.")

round_id = st.session_state.upload_round
search_col, clear_col = st.columns([5, 1])
with search_col:
    st.text_input(
        "Search all columns...",
        key=f"global_filter_{round_id}",
        on_change=on_global_filter_change,
        label_visibility="collapsed",
        placeholder="Search all columns...",
    )
with clear_col:
    st.button("Clear Filters", on_click=on_clear_filters)

if viewer.columns:
    header_cols = st.columns(len(viewer.columns))
    for index, (column, header_col) in enumerate(zip(viewer.columns, header_cols)):
        with header_col:
            direction = sort_direction(viewer.table_state, column)
            indicator = SORT_INDICATORS.get(direction, UNSORTED_INDICATOR)
            st.button(
                f"{column} {indicator}",
                key=f"sort_{round_id}_{index}",
                on_click=viewer.toggle_sort,
                args=(column,),
            )
            filter_key = f"column_filter_{round_id}_{index}"
            st.text_input(
                "Filter...",
                key=filter_key,
                on_change=on_column_filter_change,
                args=(column, filter_key),
                label_visibility="collapsed",
                placeholder="Filter...",
            )

view = viewer.view()
st.markdown(table_view_to_html(view, st.session_state.theme), unsafe_allow_html=True)
st.caption(f"Showing {view.visible_records} of {view.total_records} rows")
