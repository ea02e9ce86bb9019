"""Shared sidebar and session helpers for the multi-page app.

Every page calls :func:`render_shared_sidebar` first; it returns the
logged-in user or stops the page with a prompt to sign in on Home.
"""

from __future__ import annotations

from typing import Optional

import streamlit as st

try:
    from .db import RecordStore, get_store as _get_store
    from .models import User
except ImportError:
    # Fallback for when running as script
    import sys
    from pathlib import Path
    parent_dir = Path(__file__).resolve().parents[1]
    if str(parent_dir) not in sys.path:
        sys.path.insert(0, str(parent_dir))
    from finance_tracker.db import RecordStore, get_store as _get_store
    from finance_tracker.models import User

SESSION_USER_KEY = 'current_user'


@st.cache_resource
def get_store() -> RecordStore:
    return _get_store()


def current_user() -> Optional[User]:
    return st.session_state.get(SESSION_USER_KEY)


def sign_in(user: User) -> None:
    st.session_state[SESSION_USER_KEY] = user


def sign_out() -> None:
    st.session_state.pop(SESSION_USER_KEY, None)


def render_shared_sidebar(require_login: bool = True) -> Optional[User]:
    """Render the account box and return the signed-in user.

    Args:
        require_login: Stop the page when nobody is signed in.

    Returns:
        The signed-in user, or None when ``require_login`` is False and
        nobody is signed in.
    """
    user = current_user()
    st.sidebar.title("💰 Finance Tracker")
    if user is None:
        if require_login:
            st.warning("Please log in on the Home page first.")
            st.stop()
        return None

    st.sidebar.write(f"Welcome, **{user.username}**!")
    if st.sidebar.button("🚪 Logout"):
        sign_out()
        st.rerun()
    return user
