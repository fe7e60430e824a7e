"""
Streamlit entry point — Sales File Upload UI.

Wires the column engine into a 5-step user flow:
  1. File upload (CSV or Excel)
  2. Business type (auto-detected, user may override)
  3. Column mapping (automatic; manual form when confidence is low)
  4. Data health report with optional one-click cleaning
  5. Preview and CSV download

Contains NO business logic — only calls processing modules and displays results.
"""

import logging
from datetime import datetime

import pandas as pd
import streamlit as st

from config.business_types import BUSINESS_TYPES
from config.schema import HEALTH_REQUIRED_ROLES, Role
from processing.business_type import detect_business_type
from processing.column_mapper import map_columns
from processing.data_cleaner import clean_data
from processing.file_reader import read_sales_file
from processing.mapping import ColumnMapping
from processing.quality_checker import check_quality, upload_health_score
from processing.role_allocator import complete_mapping

logger = logging.getLogger(__name__)

# Roles offered in the manual mapping form, in display order.
MANUAL_MAPPING_ROLES: list[Role] = [
    Role.PRODUCT,
    Role.REVENUE,
    Role.DATE,
    Role.TIME,
    Role.QUANTITY,
    Role.CATEGORY,
    Role.SIZE,
    Role.STORE_LOCATION,
]

_NOT_MAPPED = "— not mapped —"


# ═══════════════════════════════════════════════════════════════════════════
# Page configuration
# ═══════════════════════════════════════════════════════════════════════════

st.set_page_config(
    page_title="Sales File Upload",
    page_icon="📊",
    layout="wide",
)


# ═══════════════════════════════════════════════════════════════════════════
# Session state initialisation
# ═══════════════════════════════════════════════════════════════════════════

def _init_session_state() -> None:
    """Ensure all required session state keys exist with sensible defaults."""
    defaults: dict = {
        "manual_mapping": None,
        "cleaning_result": None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


_init_session_state()


# ═══════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════

def _validate_manual_mapping(selection: dict[Role, str | None]) -> list[str]:
    """
    Check a manual mapping form submission.

    Returns:
        Error messages; empty when the selection can be used.
    """
    errors: list[str] = []
    for role in HEALTH_REQUIRED_ROLES:
        if not selection.get(role):
            errors.append(f"Please map the required '{role.value}' column.")

    chosen = [header for header in selection.values() if header]
    duplicates = sorted({header for header in chosen if chosen.count(header) > 1})
    for header in duplicates:
        errors.append(f"Column '{header}' is mapped to more than one field.")
    return errors


# ═══════════════════════════════════════════════════════════════════════════
# Title
# ═══════════════════════════════════════════════════════════════════════════

st.title("📊 Sales File Upload")
st.caption("Upload a sales export; columns are recognised automatically.")


# ═══════════════════════════════════════════════════════════════════════════
# Section 1: File Upload
# ═══════════════════════════════════════════════════════════════════════════

st.header("📁 Upload File")

uploaded_file = st.file_uploader(
    "Sales file",
    type=["csv", "xlsx", "xlsm"],
    accept_multiple_files=False,
    help="CSV or Excel file with one header row.",
)

# Reset downstream state when the uploaded file changes
uploaded_name = uploaded_file.name if uploaded_file is not None else None
if uploaded_name != st.session_state.get("_prev_uploaded_name"):
    st.session_state["_prev_uploaded_name"] = uploaded_name
    st.session_state["manual_mapping"] = None
    st.session_state["cleaning_result"] = None

if uploaded_file is None:
    st.stop()

read_result = read_sales_file(uploaded_file, filename=uploaded_file.name)
if read_result.errors:
    for error in read_result.errors:
        st.error(error)
    st.stop()

st.success(
    f"Read {read_result.total_rows_read} rows and "
    f"{len(read_result.headers)} columns from {read_result.filename}."
)
if read_result.empty_rows_skipped:
    st.caption(f"{read_result.empty_rows_skipped} empty rows were skipped.")


# ═══════════════════════════════════════════════════════════════════════════
# Section 2: Business Type
# ═══════════════════════════════════════════════════════════════════════════

st.divider()
st.header("🏪 Step 1: Business Type")

detected_type = detect_business_type(read_result.filename, read_result.headers)
business_type = st.selectbox(
    "Business type",
    options=BUSINESS_TYPES,
    index=BUSINESS_TYPES.index(detected_type),
    help="Detected from the file name and headers. Change it if it is wrong.",
)


# ═══════════════════════════════════════════════════════════════════════════
# Section 3: Column Mapping
# ═══════════════════════════════════════════════════════════════════════════

st.divider()
st.header("🧭 Step 2: Column Mapping")

mapping_result = map_columns(read_result.rows, business_type)
mapping: ColumnMapping = mapping_result.mapping

metric_cols = st.columns(3)
metric_cols[0].metric("Mapping confidence", f"{mapping_result.confidence:.0%}")
metric_cols[1].metric(
    "Upload health", f"{upload_health_score(read_result.dataframe, mapping)}%"
)
metric_cols[2].metric("Unmapped columns", len(mapping_result.unmapped_headers))

if mapping_result.needs_manual_mapping:
    st.warning(
        "We could not recognise all important columns. "
        "Please tell us which column holds what."
    )

    header_options = [_NOT_MAPPED] + read_result.headers
    with st.form("manual_mapping_form"):
        selection: dict[Role, str | None] = {}
        for role in MANUAL_MAPPING_ROLES:
            current = mapping.product_header() if role is Role.PRODUCT else mapping.get(role)
            required = " *" if role in HEALTH_REQUIRED_ROLES else ""
            choice = st.selectbox(
                f"{role.value}{required}",
                options=header_options,
                index=header_options.index(current) if current in header_options else 0,
                key=f"map_{role.value}",
            )
            selection[role] = None if choice == _NOT_MAPPED else choice
        submitted = st.form_submit_button("Confirm Mapping ▶", type="primary")

    if submitted:
        form_errors = _validate_manual_mapping(selection)
        if form_errors:
            for error in form_errors:
                st.error(error)
        else:
            st.session_state["manual_mapping"] = ColumnMapping.from_dict(selection)
            st.session_state["cleaning_result"] = None
            logger.info(f"Manual mapping confirmed: {st.session_state['manual_mapping'].as_dict()}")

    if st.session_state["manual_mapping"] is None:
        st.stop()
    mapping = st.session_state["manual_mapping"]

mapping = complete_mapping(mapping, read_result.rows)

mapping_table = pd.DataFrame(
    [{"Field": role.value, "Column": header} for role, header in mapping.items()]
)
st.dataframe(mapping_table, use_container_width=True, hide_index=True)


# ═══════════════════════════════════════════════════════════════════════════
# Section 4: Data Health
# ═══════════════════════════════════════════════════════════════════════════

st.divider()
st.header("🩺 Step 3: Data Health")

quality_report = check_quality(read_result.dataframe, mapping)

health_cols = st.columns(3)
health_cols[0].metric("Health score", f"{quality_report.health_score}/100")
health_cols[1].metric("Status", quality_report.health_label)
health_cols[2].metric("Rows", quality_report.total_rows)

if quality_report.is_clean:
    st.success("No issues found.")
else:
    for issue in quality_report.issues:
        message = f"**{issue.severity.upper()}** — {issue.description}"
        if issue.severity == "high":
            st.error(message)
        elif issue.severity == "medium":
            st.warning(message)
        else:
            st.info(message)

    if st.button("🧹 Clean Data", type="primary", use_container_width=True):
        st.session_state["cleaning_result"] = clean_data(read_result.dataframe, mapping)

cleaning_result = st.session_state["cleaning_result"]
final_df = read_result.dataframe
if cleaning_result is not None:
    final_df = cleaning_result.dataframe
    st.success(
        f"Cleaning done: {cleaning_result.rows_removed} rows removed, "
        f"{len(final_df)} rows remain."
    )
    with st.expander("Cleaning log"):
        st.dataframe(
            pd.DataFrame(cleaning_result.changes_log),
            use_container_width=True,
            hide_index=True,
        )


# ═══════════════════════════════════════════════════════════════════════════
# Section 5: Preview & Download
# ═══════════════════════════════════════════════════════════════════════════

st.divider()
st.header("💾 Preview & Download")

preview_row_limit = 200
if len(final_df) > preview_row_limit:
    st.caption(f"Showing first {preview_row_limit} of {len(final_df)} rows.")
st.dataframe(final_df.head(preview_row_limit), use_container_width=True, hide_index=True)

timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
st.download_button(
    label="📥 Download CSV",
    data=final_df.to_csv(index=False).encode("utf-8"),
    file_name=f"sales_{timestamp}.csv",
    mime="text/csv",
    type="primary",
    use_container_width=True,
)
