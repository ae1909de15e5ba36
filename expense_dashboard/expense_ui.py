"""Streamlit components for the expense dashboard.

Render helpers shared by the entry page and the overview page. Widgets
write through to the :class:`DashboardController` with ``on_click`` and
``on_change`` callbacks, which Streamlit runs before the next script pass.
"""

from __future__ import annotations

import html
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence

import streamlit as st

from .analytics import BudgetSummary, CategoryUtilization, Summary
from .auth import AuthSession, IdentityProvider
from .config import MissingConfigError, STORE_KEY_ENVS, STORE_URL_ENV
from .dashboard_state import DashboardController
from .db import ExpenseGateway
from .expense_entry import SAVED_MESSAGE, ExpenseForm, submit_expense
from .formatting import category_hue, format_currency, month_label
from .models import Category
from .visualization import create_category_budget_chart, create_income_expense_pie

BRAND = "Regnskap"
HOME_PAGE = "Home.py"
OVERVIEW_PAGE = "pages/1_📊_Oversikt.py"

CREDENTIALS_REQUIRED_MESSAGE = "Email and password are required."

YEAR_KEY = "period_year"
MONTH_KEY = "period_month"
DRAFT_KEY = "budget_draft_value"

ENTRY_KEYS = {
    "item": "entry_item",
    "price": "entry_price",
    "category": "entry_category",
    "tag": "entry_tag",
    "date": "entry_date",
}
ENTRY_RESET_KEY = "entry_reset"
ENTRY_STATUS_KEY = "entry_status"


# Boot and sign-in


def render_config_error(error: MissingConfigError) -> None:
    """Blocking screen shown when the store settings are missing."""
    with st.container(border=True):
        st.header("Missing Supabase config")
        st.caption(
            f"Set {STORE_URL_ENV} and {STORE_KEY_ENVS[0]} in .env "
            f"(missing: {', '.join(error.missing)})."
        )


def sign_in(identity: IdentityProvider, email: str, password: str) -> Optional[str]:
    """Try a password sign-in; returns an error message or ``None``."""
    trimmed = (email or "").strip()
    if not trimmed or not password:
        return CREDENTIALS_REQUIRED_MESSAGE
    result = identity.sign_in_with_password(trimmed, password)
    return None if result.ok else result.message


def render_auth_panel(identity: IdentityProvider) -> None:
    _, center, _ = st.columns([1, 2, 1])
    with center.container(border=True):
        st.caption(BRAND)
        st.header("Velkommen tilbake")
        st.write("Logg inn for å holde utgiftene dine ryddige og søkbare.")
        with st.form("sign_in_form"):
            email = st.text_input("e-post", placeholder="you@example.com", autocomplete="email")
            password = st.text_input("passord", type="password", autocomplete="current-password")
            submitted = st.form_submit_button("Logg inn", type="primary")
        if submitted:
            with st.spinner("Laster..."):
                message = sign_in(identity, email, password)
            if message:
                st.error(message)
            else:
                st.rerun()


def render_top_nav(identity: IdentityProvider, session: AuthSession) -> None:
    st.sidebar.markdown(f"### {BRAND}")
    st.sidebar.page_link(HOME_PAGE, label="Legg til", icon="➕")
    st.sidebar.page_link(OVERVIEW_PAGE, label="Oversikt", icon="📊")
    st.sidebar.caption(session.email or "Signed in")
    if st.sidebar.button("Logg ut"):
        identity.sign_out()
        st.rerun()


# Overview page


def _stat_card(column, label: str, value: str, color: Optional[str] = None) -> None:
    with column.container(border=True):
        st.caption(label)
        st.markdown(f"### :{color}[{value}]" if color else f"### {value}")


def render_summary_cards(summary: Summary) -> None:
    income_col, expense_col, net_col, count_col = st.columns(4)
    _stat_card(income_col, "Inntekter", format_currency(summary.income), "green")
    _stat_card(expense_col, "Utgifter", format_currency(summary.expenses_total))
    _stat_card(net_col, "Netto", format_currency(summary.net), "green" if summary.net >= 0 else "red")
    _stat_card(count_col, "Transaksjoner", str(summary.count))


def render_budget_summary(
    budget: BudgetSummary,
    label: str = "Budsjett",
    empty_label: str = "Ingen budsjett",
) -> None:
    with st.container(border=True):
        st.caption(label)
        text_col, percent_col = st.columns([3, 1])
        text_col.write(f"Brukt {format_currency(budget.spent_total)} av {format_currency(budget.budget_total)}")
        if budget.budget_total > 0:
            percent = f"{budget.percent_used:.0f}%"
            percent_col.markdown(f":red[{percent}]" if budget.is_over else percent)
        else:
            percent_col.caption(empty_label)
        st.progress(max(budget.clamped_percent, 0.0) / 100)


def _on_year_change(controller: DashboardController) -> None:
    controller.select_year(st.session_state[YEAR_KEY])


def _on_month_change(controller: DashboardController) -> None:
    controller.select_month(st.session_state[MONTH_KEY])


def render_period_filters(controller: DashboardController) -> None:
    navigator = controller.navigator
    selection = controller.selection
    with st.container(border=True):
        st.subheader("Filtere")
        label_col, prev_col, next_col = st.columns([3, 1, 1])
        label_col.caption("Periode")
        label_col.markdown(f"**{navigator.label}**")
        prev_col.button("Forrige", key="period_prev", on_click=controller.step_backward, disabled=not navigator.can_step)
        next_col.button("Neste", key="period_next", on_click=controller.step_forward, disabled=not navigator.can_step)

        year_options: List[Optional[int]] = [None, *navigator.year_options]
        if selection.year not in year_options:
            year_options.append(selection.year)
        month_options: List[Optional[int]] = [None, *navigator.month_options]
        if selection.month not in month_options:
            month_options.append(selection.month)

        # Widget state follows the controller, not the other way round
        st.session_state[YEAR_KEY] = selection.year
        st.session_state[MONTH_KEY] = selection.month

        year_col, month_col = st.columns(2)
        year_col.selectbox(
            "År",
            year_options,
            key=YEAR_KEY,
            format_func=lambda year: "Alle år" if year is None else str(year),
            on_change=_on_year_change,
            args=(controller,),
        )
        month_col.selectbox(
            "Måned",
            month_options,
            key=MONTH_KEY,
            format_func=lambda month: "Alle måneder" if month is None else month_label(month),
            on_change=_on_month_change,
            args=(controller,),
            disabled=selection.year is None,
        )


def _on_draft_change(controller: DashboardController) -> None:
    if controller.draft is not None:
        controller.draft.value = st.session_state[DRAFT_KEY]


def render_budget_editor(controller: DashboardController) -> None:
    draft = controller.draft
    if draft is None:
        return
    st.session_state[DRAFT_KEY] = draft.value
    with st.container(border=True):
        st.text_input(
            f"Budsjett for {draft.month_label}",
            key=DRAFT_KEY,
            on_change=_on_draft_change,
            args=(controller,),
        )
        if not draft.has_value:
            label_col, action_col = st.columns([2, 1])
            label_col.caption(
                f"Forrige periode: {draft.previous_label}" if draft.previous_label else "Forrige periode"
            )
            if draft.previous_value is not None:
                action_col.button(
                    f"Kopier {format_currency(draft.previous_value)}",
                    key="budget_copy_previous",
                    on_click=controller.copy_previous_budget,
                )
            else:
                action_col.caption("Ingen budsjett funnet")
        cancel_col, save_col = st.columns(2)
        cancel_col.button("Avbryt", key="budget_cancel", on_click=controller.close_budget_editor)
        save_col.button(
            "Lagrer..." if controller.budget_saving else "Lagre",
            key="budget_save",
            type="primary",
            on_click=controller.save_budget,
            disabled=controller.budget_saving,
        )


def _category_heading(row: CategoryUtilization) -> str:
    name = row.name.replace("[", "(").replace("]", ")")
    return f"**:green[{name}]**" if row.is_income else f"**{name}**"


def render_categories(controller: DashboardController, rows: Sequence[CategoryUtilization]) -> None:
    selection = controller.selection
    can_edit = selection.has_month
    with st.container(border=True):
        st.subheader("Kategorier")
        if controller.budget_status:
            st.warning(controller.budget_status)
        if not rows:
            st.info("Ingen kategorier")
            return
        for row in rows:
            name_col, amount_col, edit_col = st.columns([4, 3, 1])
            name_col.markdown(_category_heading(row))
            amount = format_currency(row.total)
            if selection.year is not None and row.budget > 0:
                amount = f"{amount} / {format_currency(row.budget)}"
            amount_col.caption(amount)
            edit_col.button(
                "✎",
                key=f"edit_budget_{row.name}",
                on_click=controller.open_budget_editor,
                args=(row.name,),
                disabled=not can_edit,
                help="Edit budget" if can_edit else "Select a year and month",
            )
            if controller.draft is not None and controller.draft.category.name == row.name:
                render_budget_editor(controller)
            st.progress(row.fill_width / 100)
            if row.is_over:
                st.caption(":red[Over budsjett]")


def render_category_chart(rows: Sequence[CategoryUtilization], summary: Summary) -> None:
    chart_col, pie_col = st.columns([2, 1])
    chart_col.plotly_chart(create_category_budget_chart(rows), use_container_width=True)
    pie_col.plotly_chart(create_income_expense_pie(summary.income, summary.expenses_total), use_container_width=True)


def category_pill_html(name: str) -> str:
    hue = category_hue(name)
    return (
        f'<span style="background: hsl({hue}, 70%, 90%); color: hsl({hue}, 45%, 30%); '
        f'padding: 2px 10px; border-radius: 999px; font-size: 0.85em;">{html.escape(name)}</span>'
    )


def render_activity(controller: DashboardController) -> None:
    with st.container(border=True):
        st.subheader("Aktivitet")
        if controller.status:
            st.error(controller.status)
        if controller.loading:
            st.caption("Laster transaksjoner...")

        pending = controller.pending_delete
        if pending is not None:
            st.warning(f"Delete {pending.item}? This cannot be undone.")
            confirm_col, cancel_col, _ = st.columns([1, 1, 4])
            confirm_col.button("✅ Confirm", key="confirm_delete_btn", on_click=controller.confirm_delete)
            cancel_col.button("❌ Cancel", key="cancel_delete_btn", on_click=controller.cancel_delete)

        if controller.empty_state:
            st.info("Ingen transaksjoner matcher de nåværende filterene.")
            return

        frame = controller.analytics.expenses_frame()
        for expense, row in zip(controller.expenses, frame.itertuples(index=False)):
            date_col, tag_col, item_col, amount_col, category_col, delete_col = st.columns([1, 1, 3, 2, 2, 1])
            date_col.write(row.Dato)
            tag_col.write(row.Tag)
            item_col.markdown(f"**{html.escape(row.Beskrivelse)}**")
            amount_col.markdown(f"**:green[{row.Beløp}]**" if row.Beløp.startswith("+") else f"**{row.Beløp}**")
            category_col.markdown(category_pill_html(row.Kategori), unsafe_allow_html=True)
            delete_col.button(
                "X",
                key=f"delete_expense_{expense.id}",
                on_click=controller.request_delete,
                args=(expense.id,),
                disabled=controller.deleting_id == expense.id,
                help="Delete",
            )


# Entry page


def _reset_entry_widgets() -> None:
    for name in ("item", "price", "tag"):
        st.session_state[ENTRY_KEYS[name]] = ""
    st.session_state[ENTRY_KEYS["date"]] = date.today()


def render_entry_form(
    gateway: ExpenseGateway,
    session: AuthSession,
    categories: Sequence[Category],
    category_status: Optional[str] = None,
    on_saved: Optional[Callable[[], None]] = None,
) -> None:
    st.header("Legg til en ny utgift")

    if st.session_state.pop(ENTRY_RESET_KEY, False):
        _reset_entry_widgets()
    st.session_state.setdefault(ENTRY_KEYS["date"], date.today())

    names: Dict[int, str] = {category.id: category.name for category in categories}
    with st.form("expense_form"):
        item = st.text_input("Beskrivelse", placeholder="Øl på skyggesiden", key=ENTRY_KEYS["item"])
        price = st.text_input("Pris", placeholder="123", key=ENTRY_KEYS["price"])
        category_id = st.selectbox(
            "Kategori",
            options=list(names),
            format_func=lambda value: names.get(value, str(value)),
            index=None,
            placeholder="Velg kategori",
            key=ENTRY_KEYS["category"],
        )
        if category_status:
            st.caption(category_status)
        elif not categories:
            st.caption("Ingen kategorier tilgjengelig")
        tag = st.text_input("Tag", placeholder="Tanzania", key=ENTRY_KEYS["tag"])
        entry_date = st.date_input("Dato", key=ENTRY_KEYS["date"], format="DD.MM.YYYY")
        submitted = st.form_submit_button("Save expense", type="primary")

    if submitted:
        form = ExpenseForm(
            item=item,
            price=price,
            category_id=category_id,
            tag=tag,
            date=entry_date.isoformat() if entry_date else "",
        )
        with st.spinner("Saving..."):
            result = submit_expense(gateway, session.user_id, form)
        if result.ok:
            st.session_state[ENTRY_STATUS_KEY] = SAVED_MESSAGE
            st.session_state[ENTRY_RESET_KEY] = True
            if on_saved is not None:
                on_saved()
            st.rerun()
        st.error(result.message)

    saved = st.session_state.pop(ENTRY_STATUS_KEY, None)
    if saved:
        st.success(saved)
