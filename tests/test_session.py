import sys
from pathlib import Path

project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root))

from budgetwise.session import (
    ANONYMOUS,
    SESSION_KEY,
    SessionContext,
    clear_session,
    get_session,
    store_session,
)


def test_anonymous_session_has_no_header():
    assert not ANONYMOUS.is_authenticated
    assert ANONYMOUS.authorization_header == {}
    assert not ANONYMOUS.is_admin


def test_from_login_response():
    session = SessionContext.from_login_response({'token': 'xyz', 'username': 'ravi', 'role': 'ADMIN'})
    assert session.is_authenticated
    assert session.is_admin
    assert session.authorization_header == {'Authorization': 'Bearer xyz'}


def test_banned_role():
    session = SessionContext(token='t', role='banned', username='x')
    assert session.is_banned
    assert not session.is_admin


def test_store_get_clear_round_trip():
    state = {}
    assert get_session(state) is ANONYMOUS
    session = SessionContext(token='t', role='USER', username='u')
    store_session(state, session)
    assert state[SESSION_KEY] is session
    assert get_session(state) == session
    clear_session(state)
    assert get_session(state) is ANONYMOUS
    clear_session(state)  # clearing twice is harmless


def test_get_session_ignores_foreign_values():
    assert get_session({SESSION_KEY: {'token': 'raw'}}) is ANONYMOUS
