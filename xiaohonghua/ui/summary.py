# xiaohonghua/ui/summary.py
import streamlit as st

from xiaohonghua.core.balance import compute_balance, totals_by_kind


def render_summary(rows) -> None:
    """Dashboard panel: balance plus unsigned totals per type."""
    balance = compute_balance(rows)
    st.subheader("当前数量")
    color = "green" if balance >= 0 else "red"
    st.markdown(f"<h1 style='color:{color};margin:0'>🌺 {balance}</h1>", unsafe_allow_html=True)

    if not rows:
        st.caption("No transactions yet.")
        return

    for kind, total in totals_by_kind(rows).items():
        st.write(f"- {kind.label}: {kind.symbol}{total}")
