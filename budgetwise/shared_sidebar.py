"""Shared sidebar components for the multi-page dashboard.

This module provides the sidebar every page renders and the objects every
page needs: the signed-in :class:`SessionContext`, an API client bound to
it, and a :class:`DataLoader` for fetching.  Pages receive these from
:func:`render_shared_sidebar` instead of looking up credentials themselves.
"""

from __future__ import annotations

from typing import Any, Dict

import streamlit as st

try:
    from . import config
    from .analytics import TimeRange
    from .api_client import AuthenticationError, BudgetWiseClient
    from .fetching import DataLoader
    from .session import SessionContext, clear_session, get_session
except ImportError:
    # Fallback for when running as script
    import sys
    from pathlib import Path
    parent_dir = Path(__file__).parent
    if str(parent_dir) not in sys.path:
        sys.path.insert(0, str(parent_dir))
    import config
    from analytics import TimeRange
    from api_client import AuthenticationError, BudgetWiseClient
    from fetching import DataLoader
    from session import SessionContext, clear_session, get_session

CLIENT_KEY = '_budgetwise_client'
TIME_RANGE_KEY = 'time_range'


def get_client(session: SessionContext) -> BudgetWiseClient:
    """Return the per-session API client, rebound to ``session``."""
    client = st.session_state.get(CLIENT_KEY)
    if not isinstance(client, BudgetWiseClient):
        client = BudgetWiseClient(config.API_BASE_URL, session=session)
        st.session_state[CLIENT_KEY] = client
    elif client.session != session:
        client.with_session(session)
    return client


def render_shared_sidebar(*, show_time_range: bool = False) -> Dict[str, Any]:
    """Render shared sidebar elements available on all pages.

    Returns:
        Dict with keys: 'session', 'client', 'loader', 'time_range'
    """
    session = get_session(st.session_state)
    client = get_client(session)
    loader = DataLoader(st.session_state)

    st.sidebar.title("💰 BudgetWise")
    if session.is_authenticated:
        st.sidebar.markdown(f"Signed in as **{session.username or 'user'}**")
        if session.is_admin:
            st.sidebar.caption("Administrator")
        if st.sidebar.button("🚪 Logout"):
            logout()
            st.rerun()
    else:
        st.sidebar.info("Sign in on the Home page to load your data.")

    time_range = TimeRange.parse(config.DEFAULT_TIME_RANGE)
    if show_time_range:
        options = list(TimeRange)
        current = TimeRange.parse(st.session_state.get(TIME_RANGE_KEY), default=time_range)
        time_range = st.sidebar.selectbox(
            "Time range",
            options=options,
            index=options.index(current),
            format_func=lambda item: item.label,
        )
        st.session_state[TIME_RANGE_KEY] = time_range.value

    return {
        'session': session,
        'client': client,
        'loader': loader,
        'time_range': time_range,
    }


def require_login(sidebar_data: Dict[str, Any]) -> bool:
    """Show a sign-in prompt when nobody is logged in; returns True when signed in."""
    session: SessionContext = sidebar_data['session']
    if session.is_authenticated:
        return True
    st.warning("Please log in from the Home page to continue.")
    return False


def require_admin(sidebar_data: Dict[str, Any]) -> bool:
    if not require_login(sidebar_data):
        return False
    if sidebar_data['session'].is_admin:
        return True
    st.error("This page is only available to administrators.")
    return False


def handle_auth_error(error: AuthenticationError) -> None:
    """Drop an expired or rejected session and ask the user to sign in again."""
    logout()
    st.error(f"Your session is no longer valid: {error.message}. Please log in again.")


def logout() -> None:
    clear_session(st.session_state)
    DataLoader(st.session_state).invalidate_all()
    client = st.session_state.get(CLIENT_KEY)
    if isinstance(client, BudgetWiseClient):
        client.with_session(get_session(st.session_state))
