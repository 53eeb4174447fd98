# xiaohonghua/core/state.py
import streamlit as st

from xiaohonghua.core.draft import TransactionDraft


def init_session_state():
    if "show_settings" not in st.session_state:
        st.session_state.show_settings = False
    if "show_add_tx" not in st.session_state:
        st.session_state.show_add_tx = False
    if "show_export" not in st.session_state:
        st.session_state.show_export = False
    if "draft" not in st.session_state:
        st.session_state.draft = TransactionDraft()
    # flash support after rerun
    if st.session_state.get("_flash_success"):
        st.success(st.session_state._flash_success)
        del st.session_state["_flash_success"]


def new_draft() -> TransactionDraft:
    """Throw away the current draft (if any) and start a fresh one."""
    old = st.session_state.get("draft")
    if old is not None and not old.closed:
        old.discard()
    st.session_state.draft = TransactionDraft()
    return st.session_state.draft
