# xiaohonghua/ui/modals.py
import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from xiaohonghua.core.state import new_draft
from xiaohonghua.models.transaction import InvalidTransaction, TransactionType
from xiaohonghua.services import file_handler
from xiaohonghua.services.backup import list_backups

_DRAFT_WIDGET_KEYS = ("draft_kind", "draft_amount", "draft_reason", "draft_photo", "_draft_photo_id")


def _reset_draft_widgets():
    for key in _DRAFT_WIDGET_KEYS:
        st.session_state.pop(key, None)


def _open_dialog(flag, title, body, has_modal, DIALOG_DECORATOR):
    """Open as dialog only if no other dialog is open; expander fallback for old Streamlit."""
    others = [f for f in ("show_add_tx", "show_settings", "show_export") if f != flag]
    if not st.session_state.get(flag) or any(st.session_state.get(f) for f in others):
        return
    if has_modal:
        @DIALOG_DECORATOR(title)
        def _dlg():
            body()
        _dlg()
    else:
        with st.expander(title, expanded=True):
            body()


def show_add_tx(session, photo_executor, has_modal, DIALOG_DECORATOR):
    """Add-transaction dialog driven by the session's TransactionDraft."""
    def body():
        draft = st.session_state.draft
        st.subheader("记录详情")

        draft.kind = st.radio(
            "类型",
            options=list(TransactionType),
            format_func=lambda k: k.label,
            horizontal=True,
            key="draft_kind",
        )
        draft.amount_text = st.text_input("🌺 数量", key="draft_amount")
        draft.reason = st.text_area("原因", key="draft_reason", height=100)

        st.markdown("**照片 (可选)**")
        uploaded = st.file_uploader(
            "选择照片", type=["png", "jpg", "jpeg", "gif", "webp", "heic"], key="draft_photo"
        )
        if uploaded is not None and st.session_state.get("_draft_photo_id") != uploaded.file_id:
            st.session_state._draft_photo_id = uploaded.file_id
            draft.load_photo(uploaded.getvalue, executor=photo_executor)

        if draft.photo is not None:
            st.image(draft.photo, width=200)
            if st.button("删除照片"):
                draft.clear_photo()
                st.session_state.pop("draft_photo", None)
                st.session_state.pop("_draft_photo_id", None)
                st.rerun()
        elif uploaded is not None:
            st.caption("照片加载中…")

        c1, c2 = st.columns(2)
        with c1:
            if st.button("取消"):
                new_draft()
                _reset_draft_widgets()
                st.session_state.show_add_tx = False
                st.rerun()
        with c2:
            # save stays disabled until amount and reason are valid
            if st.button("保存", type="primary", disabled=not draft.can_save):
                try:
                    draft.commit(session)
                except (InvalidTransaction, SQLAlchemyError) as exc:
                    st.error(f"Failed to save transaction: {exc}")
                    return
                new_draft()
                _reset_draft_widgets()
                st.session_state._flash_success = "已保存 ✅"
                st.session_state.show_add_tx = False
                st.rerun()

    _open_dialog("show_add_tx", "添加记录", body, has_modal, DIALOG_DECORATOR)


def show_export(session, has_modal, DIALOG_DECORATOR):
    """Manual export: CSV shown for copy-to-clipboard plus a download."""
    def body():
        csv_text = file_handler.export_transactions_to_csv_text(session)
        st.caption("复制下面的内容并粘贴到 Google Sheets")
        # st.code renders a copy-to-clipboard control
        st.code(csv_text, language=None)
        st.download_button(
            "Download CSV",
            data=csv_text.encode("utf-8"),
            file_name="xiaohonghua_export.csv",
            mime="text/csv",
        )
        if st.button("完成"):
            st.session_state.show_export = False
            st.rerun()

    _open_dialog("show_export", "导出 CSV", body, has_modal, DIALOG_DECORATOR)


def show_settings(_settings_file, save_settings_fn, has_modal, DIALOG_DECORATOR):
    """Settings dialog: auto-backup toggle and backup location."""
    def body():
        st.subheader("Settings")
        with st.form("settings_form", clear_on_submit=False):
            auto_backup = st.checkbox(
                "Back up the ledger when the app goes to the background",
                value=bool(_settings_file.get("auto_backup", True)),
            )
            backup_dir = st.text_input("Backup directory", value=_settings_file.get("backup_dir", ""))
            save_btn = st.form_submit_button("Save Settings")

        backups = list_backups(_settings_file.get("backup_dir", ""))
        st.markdown(f"**Recent backups** ({len(backups)})")
        for path in backups[:10]:
            st.write("-", path.name)

        if save_btn:
            _settings_file["auto_backup"] = auto_backup
            _settings_file["backup_dir"] = backup_dir.strip() or _settings_file.get("backup_dir")
            save_settings_fn(_settings_file)
            st.session_state._flash_success = "Settings saved"
            st.session_state.show_settings = False
            st.rerun()

    _open_dialog("show_settings", "⚙️ Settings", body, has_modal, DIALOG_DECORATOR)
