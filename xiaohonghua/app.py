# xiaohonghua/app.py
import sys, os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import atexit
from concurrent.futures import ThreadPoolExecutor

import streamlit as st

from xiaohonghua.logging_setup import configure_logging
from xiaohonghua.services.db import init_db, get_session
from xiaohonghua.services.settings import load_settings, save_settings
from xiaohonghua.services.backup import BackupTrigger
from xiaohonghua.services.ledger import list_transactions
from xiaohonghua.services import file_handler

from xiaohonghua.core.lifecycle import AppPhase, LifecycleMonitor
from xiaohonghua.core.state import init_session_state
from xiaohonghua.ui.modals import show_add_tx, show_export, show_settings
from xiaohonghua.ui.table import render_table
from xiaohonghua.ui.summary import render_summary
from xiaohonghua.ui.reports import render_reports


@st.cache_resource
def _lifecycle():
    """One monitor + backup observer per server process."""
    monitor = LifecycleMonitor()
    backup_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="xiaohonghua-backup")
    trigger = BackupTrigger(load_settings()["backup_dir"], executor=backup_executor)
    monitor.subscribe(trigger)

    def _on_shutdown():
        monitor.transition(AppPhase.BACKGROUND)
        backup_executor.shutdown(wait=True)

    atexit.register(_on_shutdown)
    return monitor, trigger


@st.cache_resource
def _photo_executor():
    return ThreadPoolExecutor(max_workers=2, thread_name_prefix="xiaohonghua-photo")


# -----------------------
# Bootstrap
# -----------------------
st.set_page_config(page_title="小红花", page_icon="🌺", layout="wide")
configure_logging()
init_db()
session = get_session()
_settings_file = load_settings()

# session state defaults + flash handler
init_session_state()

monitor, backup_trigger = _lifecycle()
backup_trigger.apply_settings(_settings_file)
monitor.transition(AppPhase.ACTIVE)

# Modal support
DIALOG_DECORATOR = getattr(st, "dialog", None) or getattr(st, "experimental_dialog", None)
HAS_MODAL = DIALOG_DECORATOR is not None

# -----------------------
# Top bar
# -----------------------
col_left, col_right = st.columns([3, 1])
with col_left:
    st.title("🌺 小红花")
with col_right:
    # Mutually exclusive buttons -> only one dialog flag at a time
    if st.button("➕ 添加"):
        st.session_state.show_add_tx = True
        st.session_state.show_settings = False
        st.session_state.show_export = False

    if st.button("手动导出CSV"):
        st.session_state.show_export = True
        st.session_state.show_add_tx = False
        st.session_state.show_settings = False

    if st.button("⚙️ Settings"):
        st.session_state.show_settings = True
        st.session_state.show_add_tx = False
        st.session_state.show_export = False

show_add_tx(session, _photo_executor(), HAS_MODAL, DIALOG_DECORATOR)
show_export(session, HAS_MODAL, DIALOG_DECORATOR)
show_settings(_settings_file, save_settings, HAS_MODAL, DIALOG_DECORATOR)

# -----------------------
# Sidebar backup / restore
# -----------------------
st.sidebar.header("Backup / restore")

if st.sidebar.button("Back up now"):
    path = backup_trigger.run()
    if path is not None:
        st.sidebar.success(f"Saved {path.name}")
    else:
        st.sidebar.error("Backup failed (see logs).")

uploaded_csv = st.sidebar.file_uploader("Restore from backup CSV", type=["csv"])
if uploaded_csv is not None and st.session_state.get("_restored_file_id") != uploaded_csv.file_id:
    st.session_state._restored_file_id = uploaded_csv.file_id
    inserted, skipped, errors = file_handler.import_transactions_from_csv_filelike(uploaded_csv, session)
    st.sidebar.success(f"Inserted: {inserted}, Skipped: {skipped}")
    if errors:
        st.sidebar.error("Some rows had errors (see details).")
        for e in errors:
            st.sidebar.write("-", e)

# -----------------------
# Main content
# -----------------------
st.markdown("---")
rows = list_transactions(session, newest_first=True)
left_col, right_col = st.columns([2, 1])

with left_col:
    all_df = render_table(session, rows)

with right_col:
    render_summary(rows)

# Reports
render_reports(all_df)
