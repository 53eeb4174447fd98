# xiaohonghua/ui/table.py
import streamlit as st
import pandas as pd

from xiaohonghua.core.balance import contribution
from xiaohonghua.services.ledger import delete_transaction


def transactions_frame(rows) -> pd.DataFrame:
    """Ledger rows -> DataFrame used by the report panel."""
    return pd.DataFrame([{
        "id": r.id,
        "date": r.date,
        "kind": r.kind.name.lower(),
        "label": r.kind.label,
        "amount": int(r.amount),
        "signed": contribution(r),
        "reason": r.reason,
        "has_photo": r.photo is not None,
    } for r in rows], columns=["id", "date", "kind", "label", "amount", "signed", "reason", "has_photo"])


def render_table(session, rows) -> pd.DataFrame:
    st.subheader("记录")
    all_df = transactions_frame(rows)

    if not rows:
        st.info("还没有记录。点击 ➕ 添加第一条。")
        return all_df

    for r in rows:
        with st.container(border=True):
            c_text, c_photo, c_del = st.columns([5, 1, 1])
            with c_text:
                st.markdown(
                    f":{r.kind.color}[**{r.kind.label}**  {r.kind.symbol}{r.amount}]"
                )
                st.write(r.reason)
                st.caption(r.date.strftime("%Y-%m-%d %H:%M:%S"))
            with c_photo:
                if r.photo is not None:
                    st.image(r.photo, width=60)
            with c_del:
                if st.button("🗑", key=f"del_{r.id}", help="删除这条记录"):
                    delete_transaction(session, r.id)
                    st.rerun()
    return all_df
