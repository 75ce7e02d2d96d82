"""
Streamlit Frontend for Life Manager

Three pages: Expenses, Todos and Settings.

DESIGN PRINCIPLES:
1. Every page fetches the dataset once per run and derives all figures
   from it
2. Any failed operation is shown as an error and nothing else changes
3. Mode (local or cloud) is visible in the sidebar at all times

Run with:
    streamlit run app/main.py
"""

import asyncio
from datetime import date

import streamlit as st

from lifemanager.config import validate_all_settings
from lifemanager.models.records import AppData, TransactionType
from lifemanager.orchestrator import (
    ExpenseFlow,
    SettingsFlow,
    TodoFlow,
    create_app_components,
)
from lifemanager.queries import format_signed_amount
from lifemanager.services.currency import CURRENCIES
from lifemanager.services.storage import StorageError


PAGES = ["💸 Expenses", "✅ Todos", "⚙️ Settings"]


# Page configuration
st.set_page_config(
    page_title="Life Manager",
    page_icon="🌿",
    layout="centered",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .big-number {
        font-size: 2.2em;
        font-weight: bold;
        color: #2c3e50;
    }
    .income { color: #5b8a72; }
    .expense { color: #b5838d; }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def load_data(expense_flow: ExpenseFlow) -> AppData:
    """Fetch the dataset; stops the page on failure."""
    try:
        result = run_async(expense_flow.load())
    except StorageError as e:
        st.error(f"Local data could not be read: {e}")
        st.stop()
    if not result.success:
        st.error(result.message or "Failed to load data")
        st.stop()
    return result.data


def go_to_expense(note: str):
    """Button callback: open the expense page with a pre-filled note."""
    st.session_state.page = PAGES[0]
    st.session_state.expense_note = note
    st.session_state.pending_expense_note = None


def confirm_button(container, key: str, label: str = "🗑️", confirm_label: str = "Confirm") -> bool:
    """
    Two-click button.

    The first click arms it and swaps in a confirm button; returns True
    only when that confirm button is clicked.
    """
    armed_key = f"confirm_{key}"
    if st.session_state.get(armed_key):
        if container.button(confirm_label, key=f"{key}_yes", type="primary"):
            st.session_state[armed_key] = False
            return True
        return False
    if container.button(label, key=key):
        st.session_state[armed_key] = True
        st.rerun()
    return False


def main():
    """Main application entry point."""
    expense_flow, todo_flow, settings_flow, data_service = get_components()

    if "page" not in st.session_state:
        st.session_state.page = PAGES[0]

    st.sidebar.title(f"🌿 {settings_flow.get_app_title()}")
    st.sidebar.markdown("---")
    page = st.sidebar.radio("Navigate to:", PAGES, key="page")
    st.sidebar.markdown("---")
    if data_service.is_remote:
        st.sidebar.success("☁️ Cloud mode")
    else:
        st.sidebar.info("💾 Local mode")

    if page == PAGES[0]:
        render_expense_page(expense_flow)
    elif page == PAGES[1]:
        render_todo_page(todo_flow, expense_flow)
    else:
        render_settings_page(settings_flow, expense_flow)


def render_expense_page(expense_flow: ExpenseFlow):
    """Render the expense page: summary, breakdown, form and recent list."""
    st.title("💸 Expenses")
    data = load_data(expense_flow)

    month = st.text_input("Month (YYYY-MM)", value=date.today().isoformat()[:7])
    try:
        dashboard = expense_flow.dashboard(data, month=month)
    except ValueError:
        st.error("Month must look like 2024-05")
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Income", f"{dashboard.summary.income:,.2f}")
    col2.metric("Expense", f"{dashboard.summary.expense:,.2f}")
    col3.metric("Balance", f"{dashboard.summary.balance:,.2f}")

    if dashboard.breakdown:
        st.subheader("By category")
        st.bar_chart(
            {total.label: total.amount for total in dashboard.breakdown},
            horizontal=True,
        )

    st.markdown("---")
    st.subheader("➕ New entry")

    categories = data.categories
    with st.form("transaction_form", clear_on_submit=True):
        tx_type = st.radio(
            "Type",
            options=list(TransactionType),
            format_func=lambda t: t.value.title(),
            horizontal=True,
        )
        col1, col2 = st.columns([2, 1])
        with col1:
            amount = st.text_input("Amount")
        with col2:
            currency = st.selectbox(
                "Currency",
                options=[c.code for c in CURRENCIES],
                index=[c.code for c in CURRENCIES].index(expense_flow.base_currency)
                if expense_flow.base_currency in [c.code for c in CURRENCIES] else 0,
            )
        category_id = st.selectbox(
            "Category",
            options=[c.id for c in categories],
            format_func=lambda cid: next(c.label for c in categories if c.id == cid),
        )
        tx_date = st.date_input("Date", value=date.today())
        note = st.text_input("Note", value=st.session_state.get("expense_note", ""))
        submitted = st.form_submit_button("Save", type="primary")

    if submitted:
        with st.spinner("Saving..."):
            result = run_async(expense_flow.add_transaction(
                amount=amount,
                tx_type=tx_type,
                category_id=category_id,
                tx_date=tx_date,
                categories=categories,
                note=note,
                currency=currency,
            ))
        if result.success:
            st.session_state.expense_note = ""
            st.success("Saved")
            st.rerun()
        else:
            st.error(result.message)

    st.markdown("---")
    st.subheader("🕒 Recent")
    if not dashboard.recent:
        st.info("No transactions yet.")
    for tx in dashboard.recent:
        category = data.category_by_id(tx.category_id)
        col1, col2, col3 = st.columns([3, 2, 1])
        col1.markdown(
            f"**{category.label if category else 'Other'}** · {tx.date.isoformat()}"
            + (f"  \n{tx.note}" if tx.note else "")
        )
        css = "income" if tx.type == TransactionType.INCOME else "expense"
        col2.markdown(
            f'<span class="{css}">{format_signed_amount(tx)}</span>',
            unsafe_allow_html=True,
        )
        if confirm_button(col3, f"del_tx_{tx.id}"):
            result = run_async(expense_flow.delete_transaction(tx.id))
            if result.success:
                st.rerun()
            else:
                st.error(result.message)


def render_todo_page(todo_flow: TodoFlow, expense_flow: ExpenseFlow):
    """Render the todo page, grouped by target date."""
    st.title("✅ Todos")
    data = load_data(expense_flow)
    todos = data.todos

    with st.form("todo_form", clear_on_submit=True):
        text = st.text_input("What needs doing?")
        with_date = st.checkbox("Schedule for a day")
        target_date = st.date_input("Day", value=date.today())
        submitted = st.form_submit_button("Add", type="primary")

    if submitted:
        result = run_async(todo_flow.add_todo(text, target_date if with_date else None))
        if result.success:
            st.rerun()
        else:
            st.error(result.message)

    pending = st.session_state.get("pending_expense_note")
    if pending:
        st.info(f"Done: {pending}. Record it as an expense?")
        col1, col2 = st.columns(2)
        col1.button("Yes", on_click=go_to_expense, args=(pending,))
        if col2.button("No"):
            st.session_state.pending_expense_note = None
            st.rerun()

    if not todos:
        st.info("Nothing to do. Enjoy!")
        return

    for group_date, items in todo_flow.group_by_date(todos):
        st.subheader(group_date.isoformat() if group_date else "Someday")
        for todo in items:
            render_todo_row(todo_flow, todos, todo)


def render_todo_row(todo_flow: TodoFlow, todos, todo):
    index = next(i for i, t in enumerate(todos) if t.id == todo.id)
    col1, col2, col3, col4, col5 = st.columns([1, 6, 1, 1, 1])

    checked = col1.checkbox(
        "done",
        value=todo.is_completed,
        key=f"toggle_{todo.id}",
        label_visibility="collapsed",
    )
    label = f"~~{todo.text}~~" if todo.is_completed else todo.text
    col2.markdown(label)

    if checked != todo.is_completed:
        result, suggestion = run_async(todo_flow.toggle_todo(todo))
        if not result.success:
            st.error(result.message)
            return
        st.session_state.pending_expense_note = suggestion
        st.rerun()

    if col3.button("⬆️", key=f"up_{todo.id}", disabled=index == 0):
        result = run_async(todo_flow.move_todo(todos, todo.id, index - 1))
        if not result.success:
            st.error(result.message)
        else:
            st.rerun()
    if col4.button("⬇️", key=f"down_{todo.id}", disabled=index == len(todos) - 1):
        result = run_async(todo_flow.move_todo(todos, todo.id, index + 1))
        if not result.success:
            st.error(result.message)
        else:
            st.rerun()
    if confirm_button(col5, f"del_todo_{todo.id}"):
        result = run_async(todo_flow.delete_todo(todo.id))
        if not result.success:
            st.error(result.message)
        else:
            st.rerun()

    with st.expander("📅 Day", expanded=False):
        new_date = st.date_input(
            "Day",
            value=todo.target_date,
            key=f"date_{todo.id}",
        )
        col_a, col_b = st.columns(2)
        if col_a.button("Set day", key=f"set_date_{todo.id}"):
            result = run_async(todo_flow.set_target_date(todos, todo.id, new_date))
            if result.success:
                st.rerun()
            st.error(result.message)
        if col_b.button("Clear day", key=f"clear_date_{todo.id}"):
            result = run_async(todo_flow.set_target_date(todos, todo.id, None))
            if result.success:
                st.rerun()
            st.error(result.message)


def render_settings_page(settings_flow: SettingsFlow, expense_flow: ExpenseFlow):
    """Render the settings page."""
    st.title("⚙️ Settings")

    with st.expander("📖 App guide"):
        st.markdown(settings_flow.guide())

    st.markdown("### Cloud sync (Google Sheets)")
    st.caption("Paste the endpoint URL. Leave it empty to keep data on this machine.")
    with st.form("settings_form"):
        remote_url = st.text_input("Script URL", value=settings_flow.get_remote_url())
        app_title = st.text_input("App title", value=settings_flow.get_app_title())
        saved = st.form_submit_button("Save settings", type="primary")
    if saved:
        result = run_async(settings_flow.save_settings(remote_url, app_title))
        st.success(result.message)
        st.rerun()

    if st.session_state.get("confirm_sync"):
        st.warning(
            "Every local transaction is uploaded as a new cloud record. "
            "Syncing twice creates duplicates."
        )
    if confirm_button(st, "sync", label="⬆️ Sync local data to cloud", confirm_label="Start sync"):
        with st.spinner("Uploading..."):
            result = run_async(settings_flow.sync_local_to_cloud())
        if result.success:
            st.success(result.message)
        else:
            st.error(result.message)

    st.markdown("---")
    st.markdown("### Categories")
    data = load_data(expense_flow)
    categories = data.categories

    for category in categories:
        col1, col2 = st.columns([5, 1])
        col1.markdown(f"■ {category.label}")
        if confirm_button(col2, f"remove_{category.id}"):
            result = run_async(settings_flow.remove_category(category.id, categories))
            if result.success:
                st.rerun()
            st.error(result.message)

    with st.form("category_form", clear_on_submit=True):
        label = st.text_input("New category")
        added = st.form_submit_button("Add category")
    if added:
        result = run_async(settings_flow.add_category(label, categories))
        if result.success:
            st.rerun()
        st.error(result.message)

    st.markdown("---")
    st.markdown("### Connection Status")
    status = validate_all_settings()
    for name, key in [("Google Sheets endpoint", "google_sheets"), ("Currency rates", "currency")]:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.warning(f"⚠️ {name} - {error}")


if __name__ == "__main__":
    main()
