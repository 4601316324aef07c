"""
Streamlit Frontend for Smart Spends

This is the review surface: type a phrase, check the draft, save it.

DESIGN PRINCIPLES:
1. The draft is always editable before saving
2. Nothing is saved without an explicit "Save" action
3. A wrong parse can be reported through the debug-feedback form
"""

import asyncio
from decimal import Decimal

import streamlit as st

from src.audit import create_correlation_id
from src.models.expense import Currency, DraftConfirmation, SummaryWindow
from src.orchestrator import create_app_components
from src.services.storage import StorageError


# Page configuration
st.set_page_config(
    page_title="Smart Spends",
    page_icon="💸",
    layout="centered",
)


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
    quick_add_flow, summary_executor, settings_store = create_app_components(use_file_storage=True)
    run_async(quick_add_flow.initialize())
    return quick_add_flow, summary_executor, settings_store


def main():
    """Main application entry point."""
    quick_add_flow, summary_executor, settings_store = get_components()

    st.sidebar.title("💸 Smart Spends")
    page = st.sidebar.radio(
        "Navigate to:",
        ["➕ Quick add", "📜 History", "📊 Summary", "⚙️ Settings"],
        index=0,
    )

    if page == "➕ Quick add":
        render_quick_add_page(quick_add_flow)
    elif page == "📜 History":
        render_history_page(quick_add_flow)
    elif page == "📊 Summary":
        render_summary_page(summary_executor)
    elif page == "⚙️ Settings":
        render_settings_page(settings_store)


def render_quick_add_page(quick_add_flow):
    """Render the quick-add page."""
    st.title("➕ Quick add")

    if "correlation_id" not in st.session_state:
        st.session_state.correlation_id = create_correlation_id()
    if "input_version" not in st.session_state:
        st.session_state.input_version = 0

    text = st.text_input(
        "What did you spend?",
        placeholder='e.g. "bbq hogfather 1200 baht ribs with Dasha"',
        key=f"phrase_{st.session_state.input_version}",
    )
    quick_add_flow.set_text(text)

    parsed = run_async(quick_add_flow.preview(correlation_id=st.session_state.correlation_id))

    if not text:
        st.info('Tip: type "bbq hogfather 1200 baht ribs with Dasha".')
    elif parsed is None:
        st.warning("Couldn't find an amount or a merchant in that phrase.")
    else:
        render_draft_form(quick_add_flow, parsed)

    render_feedback_form(quick_add_flow, parsed)

    st.markdown("---")
    st.subheader("Last spends")
    expenses = quick_add_flow.recent_expenses(limit=5)
    if not expenses:
        st.caption("No spends yet. Your last 5 will appear here once you add them.")
    for expense in expenses:
        render_expense_row(quick_add_flow, expense)


def render_history_page(quick_add_flow):
    """All spends, newest first."""
    st.title("📜 History")

    expenses = quick_add_flow.history()
    if not expenses:
        st.info("No spends yet. Add your first expense to see it here.")
        return

    st.caption(f"{len(expenses)} spends")
    for expense in expenses:
        st.markdown(f"**{expense.merchant or 'Unknown merchant'}** · {expense.amount:,.2f} {expense.currency.value}")
        st.caption(f"{expense.occurred_at:%d %b %Y} · {expense.note or 'No note'}")


def render_expense_row(quick_add_flow, expense):
    """One recent expense: merchant and amount, then time · category · note."""
    category = quick_add_flow.categories.get_by_id(expense.category_id)
    label = category.label if category else "Uncategorized"
    st.markdown(f"**{expense.merchant}** · {expense.amount:,.2f} {expense.currency.value}")
    st.caption(f"{expense.occurred_at:%d %b %Y %H:%M} · {label} · {expense.note or 'No note'}")


def render_draft_form(quick_add_flow, parsed):
    """Draft preview, pre-filled from the parse and fully editable."""
    validation, message = quick_add_flow.validate(parsed)

    st.subheader("📋 Draft")
    st.progress(parsed.confidence, text=f"Confidence {parsed.confidence:.0%}")
    if validation.is_valid and not validation.warnings:
        st.success(message)
    else:
        st.warning(message)

    category_keys = [c.key for c in quick_add_flow.categories.list_categories()]
    currencies = [c.value for c in Currency]

    with st.form("draft_form"):
        amount = st.number_input(
            "Amount",
            min_value=0.0,
            value=float(parsed.amount) if parsed.amount is not None else 0.0,
            step=1.0,
        )
        currency = st.selectbox(
            "Currency",
            currencies,
            index=currencies.index(parsed.currency.value) if parsed.currency else 0,
        )
        merchant = st.text_input("Merchant", value=parsed.merchant or "")
        note = st.text_input("Note", value=parsed.note or "")
        options = ["(none)"] + [str(getattr(k, "value", k)) for k in category_keys]
        guess = str(getattr(parsed.group_guess, "value", parsed.group_guess or "(none)"))
        category_key = st.selectbox(
            "Category",
            options,
            index=options.index(guess) if guess in options else 0,
        )

        col1, col2 = st.columns(2)
        save = col1.form_submit_button("💾 Save", type="primary")
        cancel = col2.form_submit_button("✖ Cancel")

    if save:
        if amount <= 0 or not merchant.strip():
            st.error("An expense needs an amount above zero and a merchant.")
            return
        try:
            expense = run_async(quick_add_flow.confirm(
                DraftConfirmation(
                    amount=Decimal(str(amount)),
                    currency=currency,
                    merchant=merchant,
                    note=note,
                    category_key=None if category_key == "(none)" else category_key,
                ),
                correlation_id=st.session_state.correlation_id,
            ))
        except StorageError as e:
            st.error(f"Could not save the expense: {e}")
            return
        st.success(f"Saved {expense.merchant}: {expense.amount} {expense.currency.value}")
        reset_quick_add()

    if cancel:
        run_async(quick_add_flow.discard(parsed, correlation_id=st.session_state.correlation_id))
        reset_quick_add()


def render_feedback_form(quick_add_flow, parsed):
    """Debug feedback: what the user meant to say."""
    with st.expander("🐞 Parse looks wrong?"):
        st.caption(f"Recognized phrase: {quick_add_flow.current_text or '(empty)'}")
        with st.form("feedback_form", clear_on_submit=True):
            user_prompt = st.text_area("What did you mean to say?")
            send = st.form_submit_button("Send")
        if send:
            try:
                entry = run_async(quick_add_flow.record_feedback(
                    user_prompt=user_prompt,
                    parsed=parsed,
                    correlation_id=st.session_state.correlation_id,
                ))
            except StorageError as e:
                st.error(f"Failed to save debug entry: {e}")
                return
            if entry is None:
                st.warning("Please describe what you meant first.")
            else:
                st.success("Thanks! Feedback saved.")


def reset_quick_add():
    """Start a fresh interaction with an empty input box."""
    st.session_state.input_version += 1
    st.session_state.correlation_id = create_correlation_id()
    st.rerun()


def render_summary_page(summary_executor):
    """Render totals for the last 7 or 30 days."""
    st.title("📊 Summary")

    window = st.radio(
        "Window",
        [w.value for w in SummaryWindow],
        format_func=lambda w: f"Last {SummaryWindow(w).days} days",
        horizontal=True,
    )
    summary = summary_executor.summarize(window)

    st.metric(f"Total ({summary.currency.value})", f"{summary.total:,.2f}")
    st.caption(f"{summary.expense_count} expenses")
    for label, amount in sorted(summary.by_group.items(), key=lambda item: item[1], reverse=True):
        st.markdown(f"- **{label}**: {amount:,.2f}")


def render_settings_page(settings_store):
    """Render the settings page."""
    st.title("⚙️ Settings")

    currencies = [c.value for c in Currency]
    current = settings_store.main_currency.value
    choice = st.selectbox("Main currency", currencies, index=currencies.index(current))
    if choice != current and st.button("Save currency"):
        try:
            run_async(settings_store.set_main_currency(choice))
        except StorageError as e:
            st.error(f"Could not save settings: {e}")
            return
        st.success(f"Main currency set to {choice}")

    st.subheader("Categories")
    for category in settings_store.settings.categories:
        st.markdown(f"- {category.label} (`{getattr(category.key, 'value', category.key)}`)")


if __name__ == "__main__":
    main()
