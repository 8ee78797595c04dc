"""Explicit session context for authenticated pages.

The login response (token, role, username) lives in one immutable object
kept under a single ``st.session_state`` key.  Pages read it once through
:func:`get_session` and hand it to the API client; nothing else looks the
token up on its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, MutableMapping, Optional

SESSION_KEY = '_budgetwise_session'

ROLE_USER = 'USER'
ROLE_ADMIN = 'ADMIN'
ROLE_BANNED = 'BANNED'


@dataclass(frozen=True)
class SessionContext:
    """Credentials and identity of the signed-in user."""

    token: Optional[str] = None
    role: Optional[str] = None
    username: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and (self.role or '').upper() == ROLE_ADMIN

    @property
    def is_banned(self) -> bool:
        return (self.role or '').upper() == ROLE_BANNED

    @property
    def authorization_header(self) -> dict:
        if not self.token:
            return {}
        return {'Authorization': f'Bearer {self.token}'}

    @classmethod
    def from_login_response(cls, payload: Mapping[str, Any]) -> 'SessionContext':
        token = payload.get('token')
        return cls(
            token=str(token) if token else None,
            role=payload.get('role'),
            username=payload.get('username'),
        )


ANONYMOUS = SessionContext()


def get_session(state: Mapping[str, Any]) -> SessionContext:
    """Return the stored session, or an anonymous one."""
    session = state.get(SESSION_KEY)
    if isinstance(session, SessionContext):
        return session
    return ANONYMOUS


def store_session(state: MutableMapping[str, Any], session: SessionContext) -> None:
    state[SESSION_KEY] = session


def clear_session(state: MutableMapping[str, Any]) -> None:
    state.pop(SESSION_KEY, None)
