"""HTTP client for the BudgetWise REST backend.

Every page talks to the backend through :class:`BudgetWiseClient`.  It
wraps a synchronous :class:`httpx.Client`, attaches the bearer token of the
explicit :class:`~budgetwise.session.SessionContext`, and turns transport
failures and non-2xx answers into :class:`ApiError`.  There is no retry
logic here; pages decide how to present a failure.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

try:
    from . import config
    from .analytics import (
        CategorySummary,
        ExpenseForecast,
        MonthlySummary,
        coerce_categories,
        coerce_forecast,
        coerce_monthly,
    )
    from .session import ANONYMOUS, SessionContext
except ImportError:
    import config
    from analytics import (
        CategorySummary,
        ExpenseForecast,
        MonthlySummary,
        coerce_categories,
        coerce_forecast,
        coerce_monthly,
    )
    from session import ANONYMOUS, SessionContext

logger = logging.getLogger(__name__)

REPORT_KINDS = {
    'pdf': ('/reports/export-pdf', 'application/pdf', 'BudgetWise_Report.pdf'),
    'csv': ('/reports/export-csv', 'text/csv', 'BudgetWise_Report.csv'),
}


class ApiError(Exception):
    """A backend call failed (transport error or non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthenticationError(ApiError):
    """The backend rejected the credentials (401/403)."""


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, Mapping):
        for key in ('error', 'message'):
            if body.get(key):
                return str(body[key])
    text = (response.text or '').strip()
    if text:
        return text[:200]
    return f"Request failed with status {response.status_code}"


class BudgetWiseClient:
    """HTTP client wrapper for the BudgetWise API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: SessionContext = ANONYMOUS,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._base_url = (base_url or config.API_BASE_URL).rstrip('/')
        self._session = session
        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=timeout if timeout is not None else config.API_TIMEOUT,
            headers={'Accept': 'application/json'},
            transport=transport,
        )

    @property
    def session(self) -> SessionContext:
        return self._session

    def with_session(self, session: SessionContext) -> None:
        """Use ``session`` credentials for subsequent requests."""
        self._session = session

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> 'BudgetWiseClient':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _request(self, method: str, path: str, *, json: Any = None) -> httpx.Response:
        try:
            response = self._client.request(
                method,
                path,
                json=json,
                headers=self._session.authorization_header,
            )
        except httpx.TimeoutException as e:
            logger.warning("BudgetWise API timeout on %s %s: %s", method, path, e)
            raise ApiError("The server took too long to respond.") from e
        except httpx.RequestError as e:
            logger.warning("BudgetWise API connection failed on %s %s: %s", method, path, e)
            raise ApiError("Could not reach the BudgetWise server.") from e

        if response.is_success:
            return response

        message = _error_message(response)
        logger.warning(
            "BudgetWise API returned %d for %s %s: %s",
            response.status_code,
            method,
            path,
            message,
        )
        if response.status_code in (401, 403):
            raise AuthenticationError(message, response.status_code)
        raise ApiError(message, response.status_code)

    def _json(self, method: str, path: str, *, json: Any = None) -> Any:
        response = self._request(method, path, json=json)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def _list(self, path: str) -> List[Dict[str, Any]]:
        data = self._json('GET', path)
        return data if isinstance(data, list) else []

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    def signup(self, username: str, email: str, password: str) -> Any:
        return self._json('POST', '/auth/signup', json={
            'username': username,
            'email': email,
            'password': password,
        })

    def login(self, username: str, password: str) -> SessionContext:
        """Authenticate and switch this client to the new session."""
        data = self._json('POST', '/auth/login', json={'username': username, 'password': password})
        if not isinstance(data, Mapping) or not data.get('token'):
            raise AuthenticationError("Login response did not include a token.")
        session = SessionContext.from_login_response(data)
        self._session = session
        logger.info("Signed in as %s (%s)", session.username, session.role)
        return session

    def change_password(self, old_password: str, new_password: str, confirm_password: Optional[str] = None) -> Any:
        return self._json('POST', '/auth/change-password', json={
            'oldPassword': old_password,
            'newPassword': new_password,
            'confirmPassword': confirm_password if confirm_password is not None else new_password,
        })

    def forgot_password(self, email: str) -> Any:
        return self._json('POST', '/auth/forgot-password', json={'email': email})

    def reset_password(self, token: str, password: str) -> Any:
        return self._json('POST', '/auth/reset-password', json={'token': token, 'newPassword': password})

    def get_profile(self) -> Dict[str, Any]:
        data = self._json('GET', '/user/profile')
        return data if isinstance(data, dict) else {}

    # -------------------------------------------------------------------------
    # Transactions / budgets / goals
    # -------------------------------------------------------------------------

    def list_transactions(self) -> List[Dict[str, Any]]:
        return self._list('/transactions')

    def create_transaction(self, transaction: Mapping[str, Any]) -> Any:
        return self._json('POST', '/transactions', json=dict(transaction))

    def update_transaction(self, transaction_id: Any, transaction: Mapping[str, Any]) -> Any:
        return self._json('PUT', f'/transactions/{transaction_id}', json=dict(transaction))

    def delete_transaction(self, transaction_id: Any) -> None:
        self._request('DELETE', f'/transactions/{transaction_id}')

    def list_budgets(self) -> List[Dict[str, Any]]:
        return self._list('/budgets')

    def save_budget(self, budget: Mapping[str, Any]) -> Any:
        # The backend upserts on POST when an id is present
        return self._json('POST', '/budgets', json=dict(budget))

    def delete_budget(self, budget_id: Any) -> None:
        self._request('DELETE', f'/budgets/{budget_id}')

    def list_goals(self) -> List[Dict[str, Any]]:
        return self._list('/goals')

    def save_goal(self, goal: Mapping[str, Any]) -> Any:
        return self._json('POST', '/goals', json=dict(goal))

    def delete_goal(self, goal_id: Any) -> None:
        self._request('DELETE', f'/goals/{goal_id}')

    # -------------------------------------------------------------------------
    # Analytics and AI
    # -------------------------------------------------------------------------

    def monthly_summary(self) -> List[MonthlySummary]:
        return coerce_monthly(self._json('GET', '/analytics/monthly-summary'))

    def category_summary(self) -> List[CategorySummary]:
        return coerce_categories(self._json('GET', '/analytics/category-summary'))

    def expense_forecast(self) -> Optional[ExpenseForecast]:
        """Next-month prediction, or ``None`` when the backend has too little data."""
        data = self._json('GET', '/ai/predict-expenses')
        if isinstance(data, Mapping) and data.get('error'):
            logger.info("No expense forecast available: %s", data['error'])
        return coerce_forecast(data)

    def chat(self, message: str) -> str:
        data = self._json('POST', '/ai/chat', json={'message': message})
        if isinstance(data, Mapping):
            return str(data.get('response') or '')
        return str(data or '')

    # -------------------------------------------------------------------------
    # Forum
    # -------------------------------------------------------------------------

    def list_posts(self) -> List[Dict[str, Any]]:
        return self._list('/forum/posts')

    def create_post(self, content: str, title: str = 'Discussion') -> Any:
        return self._json('POST', '/forum/posts', json={'title': title, 'content': content})

    def add_comment(self, post_id: Any, content: str) -> Any:
        return self._json('POST', f'/forum/comments/{post_id}', json={'content': content})

    def like_post(self, post_id: Any) -> Any:
        return self._json('POST', f'/forum/like/{post_id}')

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def export_report(self, kind: str) -> bytes:
        """Download the PDF or CSV report as raw bytes."""
        if kind not in REPORT_KINDS:
            raise ValueError(f"Unsupported report type '{kind}'.")
        path = REPORT_KINDS[kind][0]
        return self._request('GET', path).content

    # -------------------------------------------------------------------------
    # Admin
    # -------------------------------------------------------------------------

    def list_users(self) -> List[Dict[str, Any]]:
        return self._list('/admin/users')

    def ban_user(self, user_id: Any) -> Any:
        return self._json('PUT', f'/admin/ban/{user_id}')

    def unban_user(self, user_id: Any) -> Any:
        return self._json('PUT', f'/admin/unban/{user_id}')

    def user_transactions(self, username: str) -> List[Dict[str, Any]]:
        return self._list(f'/admin/transactions/{username}')
