"""Per-browser-session wiring of settings, store client and identity.

Every Streamlit session gets its own :class:`AppContext`, kept in
``st.session_state``, so one visitor's access token never leaks into
another visitor's requests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, MutableMapping, Optional

import streamlit as st

from .auth import SIGNED_IN, SIGNED_OUT, AuthSession, IdentityProvider, Subscription
from .config import MissingConfigError, Settings, load_settings
from .dashboard_state import DashboardController
from .db import ExpenseGateway
from .expense_ui import render_auth_panel, render_config_error
from .logging_setup import setup_logging
from .rest_client import StoreClient

logger = logging.getLogger(__name__)

CONTEXT_KEY = "app_context"
CONTROLLER_KEY = "dashboard_controller"


@dataclass
class AppContext:
    settings: Settings
    client: StoreClient
    identity: IdentityProvider
    gateway: ExpenseGateway
    subscription: Optional[Subscription] = field(default=None, repr=False)


def _on_auth_change(state: MutableMapping[str, Any], event: str, session: Optional[AuthSession]) -> None:
    if event in (SIGNED_IN, SIGNED_OUT):
        controller = state.pop(CONTROLLER_KEY, None)
        if controller is not None:
            controller.reset()
        logger.info("Auth event %s for %s", event, session.email if session else "anonymous")


def build_context(settings: Settings, state: MutableMapping[str, Any]) -> AppContext:
    """Create the client stack for one browser session."""
    client = StoreClient(settings.store_url, settings.store_key, timeout=settings.request_timeout)
    identity = IdentityProvider(client)
    context = AppContext(
        settings=settings,
        client=client,
        identity=identity,
        gateway=ExpenseGateway(client),
    )
    context.subscription = identity.on_auth_state_change(
        lambda event, session: _on_auth_change(state, event, session)
    )
    return context


def get_app_context() -> AppContext:
    """Return this session's context, showing the config screen if unset."""
    context = st.session_state.get(CONTEXT_KEY)
    if context is not None:
        return context
    try:
        settings = load_settings()
    except MissingConfigError as exc:
        render_config_error(exc)
        st.stop()
    setup_logging(settings.log_level)
    context = build_context(settings, st.session_state)
    st.session_state[CONTEXT_KEY] = context
    return context


def require_session(context: AppContext) -> AuthSession:
    """Auth gate: render the sign-in panel and stop when signed out."""
    with st.spinner("Laster inn sesjonen din..."):
        result = context.identity.get_session()
    if not result.ok:
        st.warning(result.message)
    session = result.data
    if session is None:
        render_auth_panel(context.identity)
        st.stop()
    return session


def get_dashboard_controller(context: AppContext, session: AuthSession) -> DashboardController:
    controller = st.session_state.get(CONTROLLER_KEY)
    if controller is None or controller.owner != session.user_id:
        controller = DashboardController(context.gateway, session.user_id)
        st.session_state[CONTROLLER_KEY] = controller
    return controller
