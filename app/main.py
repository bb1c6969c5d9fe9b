"""
Streamlit Frontend for the Finance Ledger

This is the screen the user works with day to day.

DESIGN PRINCIPLES:
1. Add form first; records, search and dashboard once data exists
2. Inline error next to each failing field
3. Explicit confirmation before any delete
4. Everything rendered from records goes through the escaping highlighter

All ledger logic lives in the ledger package; this module only wires
widgets to RecordFlow, SearchFlow and TransferFlow.
"""

from datetime import date

import streamlit as st

from ledger.audit import configure_logging
from ledger.config import get_settings, validate_settings
from ledger.models.transaction import FlowResult, TransactionDraft
from ledger.orchestrator import (
    RecordFlow,
    SearchFlow,
    TransferFlow,
    create_app_components,
)
from ledger.search import escape_html
from ledger.services.storage import RecordNotFoundError, StorageError


RECENT_EVENTS = 20


# Page configuration
st.set_page_config(
    page_title="Finance Ledger",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for record cards and highlights
st.markdown("""
<style>
    .record-card {
        padding: 16px;
        border-radius: 10px;
        border: 1px solid #444;
        margin: 8px 0;
    }
    .record-card h3 {
        margin: 0 0 8px 0;
    }
    .record-meta div {
        color: #aaa;
    }
    mark {
        background-color: #ffe066;
        color: #222;
        padding: 0 2px;
    }
    .over-cap {
        color: #ff8080;
    }
    .under-cap {
        color: #8fe78f;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    settings = get_settings()
    configure_logging(settings.debug_mode)
    return create_app_components(settings=settings, keep_history=True)


def main():
    """Main application entry point."""
    record_flow, search_flow, transfer_flow, store = get_components()
    settings = get_settings()

    st.sidebar.title("💰 Finance Ledger")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["➕ Add Transaction", "📋 Records", "📊 Dashboard", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(f"**Transactions:** {len(store)}")

    if page == "➕ Add Transaction":
        render_add_page(record_flow)
    elif page == "📋 Records":
        render_records_page(record_flow, search_flow, settings.case_insensitive_search)
    elif page == "📊 Dashboard":
        render_dashboard_page(search_flow)
    elif page == "⚙️ Settings":
        render_settings_page(transfer_flow, record_flow)


def _show_field_errors(result: FlowResult) -> None:
    for field in ("description", "amount", "category", "date"):
        if field in result.errors:
            st.error(f"{field.capitalize()}: {result.errors[field]}")


def _show_warnings(result: FlowResult) -> None:
    for issue in result.warnings:
        st.warning(issue.message)


def render_add_page(record_flow: RecordFlow):
    """Render the add-transaction form."""
    st.title("➕ Add Transaction")

    with st.form("add_form", clear_on_submit=False):
        description = st.text_input("Description *")
        amount = st.text_input("Amount *", placeholder="12.34")
        category = st.text_input("Category *", placeholder="Food")
        tx_date = st.date_input("Date *", value=date.today())
        submitted = st.form_submit_button("Add", type="primary")

    if not submitted:
        return

    draft = TransactionDraft(
        description=description,
        amount=amount,
        category=category,
        date=tx_date.isoformat() if tx_date else "",
    )
    try:
        result = record_flow.add(draft)
    except StorageError as e:
        st.error(f"Could not save: {e}")
        return

    if not result.ok:
        _show_field_errors(result)
        return

    _show_warnings(result)
    st.success(f"Saved: {result.record.description}")


def render_records_page(
    record_flow: RecordFlow,
    search_flow: SearchFlow,
    case_insensitive_default: bool,
):
    """Render the search box and the newest-first record list."""
    st.title("📋 Records")

    col1, col2 = st.columns([4, 1])
    with col1:
        pattern = st.text_input(
            "Search (regular expression)",
            placeholder="e.g. caf|coffee",
        )
    with col2:
        case_insensitive = st.checkbox(
            "Case-insensitive",
            value=case_insensitive_default,
        )

    results = search_flow.search(pattern, case_insensitive)
    if not results:
        st.info("No transactions yet.")
        return

    editing = st.session_state.get("editing_key")
    # A bare "$" would start a LaTeX span in st.markdown
    symbol = escape_html(search_flow.currency_symbol).replace("$", "&#36;")

    # Ids repeat after an export/import round trip, so widget keys also
    # carry the display position
    for position, item in enumerate(results):
        record = item.record
        row_key = f"{position}_{record.id}"
        if editing == row_key:
            render_edit_form(record_flow, record.id, row_key)
            continue

        st.markdown(f"""
        <article class="record-card">
            <h3>{item.description_html}</h3>
            <div class="record-meta">
                <div>Amount: {symbol}{item.amount_html}</div>
                <div>Category: {item.category_html}</div>
                <div>Date: {item.date_html}</div>
            </div>
        </article>
        """, unsafe_allow_html=True)

        col1, col2, col3 = st.columns([1, 1, 4])
        with col1:
            if st.button("Edit", key=f"edit_{row_key}"):
                st.session_state.editing_key = row_key
                st.rerun()
        with col2:
            if st.button("Delete", key=f"delete_{row_key}"):
                st.session_state.pending_delete = row_key
                st.rerun()

        if st.session_state.get("pending_delete") == row_key:
            st.warning("Delete this record?")
            c1, c2 = st.columns(2)
            with c1:
                if st.button("Yes, delete", key=f"confirm_{row_key}"):
                    record_flow.delete(record.id, confirmed=True)
                    st.session_state.pending_delete = None
                    st.rerun()
            with c2:
                if st.button("Cancel", key=f"cancel_{row_key}"):
                    record_flow.delete(record.id, confirmed=False)
                    st.session_state.pending_delete = None
                    st.rerun()


def render_edit_form(record_flow: RecordFlow, record_id: str, row_key: str):
    """Inline edit form for one record."""
    try:
        current = record_flow.draft_for(record_id)
    except RecordNotFoundError:
        st.session_state.editing_key = None
        return

    with st.form(f"edit_form_{row_key}"):
        description = st.text_input("Description", value=current.description)
        amount = st.text_input("Amount", value=current.amount)
        category = st.text_input("Category", value=current.category)
        tx_date = st.text_input("Date (YYYY-MM-DD)", value=current.date)

        col1, col2 = st.columns(2)
        with col1:
            save = st.form_submit_button("Save", type="primary")
        with col2:
            cancel = st.form_submit_button("Cancel")

    if cancel:
        st.session_state.editing_key = None
        st.rerun()

    if save:
        draft = TransactionDraft(
            description=description,
            amount=amount,
            category=category,
            date=tx_date,
        )
        try:
            result = record_flow.edit(record_id, draft)
        except (RecordNotFoundError, StorageError) as e:
            st.error(f"Could not save: {e}")
            return

        if not result.ok:
            st.error("Fix: " + ", ".join(result.errors.values()))
            return

        _show_warnings(result)
        st.session_state.editing_key = None
        st.rerun()


def render_dashboard_page(search_flow: SearchFlow):
    """Render totals, top category and the spending cap."""
    st.title("📊 Dashboard")

    cap = st.number_input(
        "Spending cap",
        value=float(search_flow.spending_cap),
        min_value=0.0,
        step=10.0,
        format="%.2f",
    )
    summary = search_flow.dashboard(cap=cap)

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Transactions", summary.total_count)
    with col2:
        st.metric("Total", f"{search_flow.currency_symbol}{summary.total_amount:.2f}")
    with col3:
        st.metric("Top category", summary.top_category)

    if summary.cap_status:
        css = "over-cap" if summary.over_cap else "under-cap"
        st.markdown(
            f'<p class="{css}">{escape_html(summary.cap_status).replace("$", "&#36;")}</p>',
            unsafe_allow_html=True,
        )


def render_settings_page(transfer_flow: TransferFlow, record_flow: RecordFlow):
    """Render export/import and configuration status."""
    st.title("⚙️ Settings")

    st.markdown("### Export")
    st.download_button(
        "⬇️ Export JSON",
        data=transfer_flow.export_json(),
        file_name=transfer_flow.export_filename,
        mime="application/json",
    )

    st.markdown("### Import")
    uploaded = st.file_uploader("Import JSON", type=["json"])
    if uploaded is not None and st.button("Import", type="primary"):
        result, message = transfer_flow.import_text(uploaded.getvalue())
        if result is None:
            st.error(message)
        else:
            st.success(f"{message} ({result.accepted_count} added, {result.skipped} skipped)")

    st.markdown("---")
    st.markdown("### Configuration")

    status = validate_settings()
    if status.get("data_dir", False):
        st.success(f"✅ Data file: {get_settings().data_file}")
    else:
        error = status.get("data_dir_error") or status.get("settings_error", "Not configured")
        st.error(f"❌ {error}")
    st.markdown(f"**Import policy:** {transfer_flow.policy.value}")

    st.markdown("---")
    st.markdown("### Recent Activity")
    audit_logger = record_flow.audit_logger
    events = audit_logger.history[:RECENT_EVENTS] if audit_logger else []
    if events:
        st.code("\n".join(event.to_json_line() for event in events), language="json")
    else:
        st.caption("No activity yet.")


if __name__ == "__main__":
    main()
