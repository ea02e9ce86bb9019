"""Main entry point for the Streamlit multi-page app.

This page handles login and registration.  Pages in the pages/ directory
appear in the sidebar and require a signed-in user.
"""

from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

# Add project root to path for imports
project_root = Path(__file__).parent.parent.resolve()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from finance_tracker import auth
from finance_tracker.config import configure_logging
from finance_tracker.db import DuplicateUsernameError
from finance_tracker.shared_sidebar import get_store, render_shared_sidebar, sign_in


def main() -> None:
    configure_logging()
    st.set_page_config(page_title="Finance Tracker", page_icon="💰")
    st.title("💰 Personal Finance Tracker")

    user = render_shared_sidebar(require_login=False)
    if user is not None:
        st.success(f"Signed in as {user.username}. Open a page from the sidebar.")
        return

    store = get_store()
    login_tab, register_tab = st.tabs(["🔐 Login", "📝 Register"])

    with login_tab:
        with st.form("login_form"):
            username = st.text_input("Username")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Login")
        if submitted:
            if not username.strip() or not password:
                st.warning("Please enter both username and password.")
            else:
                found = auth.authenticate(store, username, password)
                if found is None:
                    st.error("Invalid username or password.")
                else:
                    sign_in(found)
                    st.rerun()

    with register_tab:
        with st.form("register_form"):
            new_username = st.text_input("Choose a username")
            new_password = st.text_input("Choose a password", type="password")
            confirm = st.text_input("Confirm password", type="password")
            created = st.form_submit_button("Create account")
        if created:
            if not new_username.strip():
                st.warning("Username is required.")
            elif new_password != confirm:
                st.error("Passwords do not match.")
            else:
                try:
                    auth.register_user(store, new_username, new_password)
                except (ValueError, DuplicateUsernameError) as exc:
                    st.error(str(exc))
                else:
                    st.success("Account created. You can log in now.")


if __name__ == "__main__":
    main()
