"""Main entry point for the BudgetWise Streamlit multi-page app.

This page handles sign in, sign up, and password recovery.  Pages in the
pages/ directory appear in the sidebar automatically.
"""

from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

# Add project root to path for imports
project_root = Path(__file__).parent.parent.resolve()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from budgetwise import config
from budgetwise.api_client import ApiError
from budgetwise.session import ROLE_BANNED, store_session
from budgetwise.shared_sidebar import render_shared_sidebar


def main() -> None:
    """Render the sign-in screen or the welcome screen."""
    st.set_page_config(
        page_title="BudgetWise",
        page_icon="💰",
        layout="wide",
        initial_sidebar_state="expanded",
    )
    config.configure_logging()

    sidebar_data = render_shared_sidebar()
    session = sidebar_data['session']

    if session.is_authenticated:
        _render_welcome_screen(session.username, session.is_admin)
        return

    st.title("💰 BudgetWise")
    st.markdown("Track your spending, plan budgets, and reach your savings goals.")

    login_tab, signup_tab, forgot_tab, reset_tab = st.tabs(
        ["🔐 Login", "📝 Sign up", "❓ Forgot password", "🔁 Reset password"]
    )
    with login_tab:
        _render_login_form(sidebar_data['client'])
    with signup_tab:
        _render_signup_form(sidebar_data['client'])
    with forgot_tab:
        _render_forgot_password_form(sidebar_data['client'])
    with reset_tab:
        _render_reset_password_form(sidebar_data['client'])


def _render_login_form(client) -> None:
    with st.form("login_form"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Login")

    if not submitted:
        return
    if not username or not password:
        st.error("Username and password are required.")
        return
    try:
        session = client.login(username, password)
    except ApiError as e:
        st.error(e.message or "Invalid credentials!")
        return
    if session.role == ROLE_BANNED:
        st.error("Your account has been banned by admin.")
        return
    store_session(st.session_state, session)
    st.success(f"Welcome back, {session.username}!")
    st.rerun()


def _render_signup_form(client) -> None:
    with st.form("signup_form"):
        username = st.text_input("Username", key="signup_username")
        email = st.text_input("Email", key="signup_email")
        password = st.text_input("Password", type="password", key="signup_password")
        submitted = st.form_submit_button("Create account")

    if not submitted:
        return
    if not username or not email or not password:
        st.error("Username, email, and password are required.")
        return
    try:
        client.signup(username, email, password)
    except ApiError as e:
        st.error(e.message)
        return
    st.success("Account created! You can now log in.")


def _render_forgot_password_form(client) -> None:
    with st.form("forgot_password_form"):
        email = st.text_input("Registered email", key="forgot_email")
        submitted = st.form_submit_button("Send reset link")

    if not submitted:
        return
    try:
        response = client.forgot_password(email)
    except ApiError as e:
        st.error(e.message)
        return
    message = response.get('message') if isinstance(response, dict) else None
    st.success(message or "If the email is registered, a reset link has been sent.")


def _render_reset_password_form(client) -> None:
    default_token = st.query_params.get("token", "")
    with st.form("reset_password_form"):
        token = st.text_input("Reset token", value=default_token, key="reset_token")
        password = st.text_input("New password", type="password", key="reset_password")
        confirm = st.text_input("Confirm password", type="password", key="reset_confirm")
        submitted = st.form_submit_button("Reset password")

    if not submitted:
        return
    if password != confirm:
        st.error("Passwords do not match.")
        return
    try:
        client.reset_password(token, password)
    except ApiError as e:
        st.error(e.message)
        return
    st.success("Password reset successfully. You can now log in.")


def _render_welcome_screen(username: str | None, is_admin: bool) -> None:
    """Render welcome screen for a signed-in user."""
    st.markdown(f"""
    # Welcome, {username or 'User'} 👋

    Use the pages in the sidebar to navigate:
    - 📊 **Dashboard**: your financial summary at a glance
    - 📈 **Analytics**: charts, forecast, and personalised advice
    - 💳 **Transactions**: add, edit, and delete income and expenses
    - 📋 **Budgets**: monthly limits per category
    - 🎯 **Goals**: savings targets and progress
    - 💬 **Forum**: share tips with the community
    - 🤖 **Assistant**: ask the AI finance assistant
    - 📄 **Reports**: export your data as PDF or CSV
    - 👤 **Profile**: account details and password
    """)
    if is_admin:
        st.markdown("- 🛡️ **Admin**: manage users")


if __name__ == "__main__":
    main()
