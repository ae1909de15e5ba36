"""Main entry point for the Streamlit multi-page app.

Home is the expense entry page. Pages in the pages/ directory appear in
the sidebar next to it.
"""

from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

# Add project root to path for imports
project_root = Path(__file__).parent.parent.resolve()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from expense_dashboard.app_context import (  # noqa: E402
    CONTROLLER_KEY,
    get_app_context,
    require_session,
)
from expense_dashboard.expense_ui import render_entry_form, render_top_nav  # noqa: E402


def _mark_overview_stale() -> None:
    controller = st.session_state.get(CONTROLLER_KEY)
    if controller is not None:
        controller.mark_stale()


def main() -> None:
    st.set_page_config(page_title="Regnskap", page_icon="➕", layout="centered")
    context = get_app_context()
    session = require_session(context)
    render_top_nav(context.identity, session)

    result = context.gateway.list_categories()
    categories = result.data if result.ok else []
    render_entry_form(
        context.gateway,
        session,
        categories,
        category_status=None if result.ok else result.message,
        on_saved=_mark_overview_stale,
    )


if __name__ == "__main__":
    main()
