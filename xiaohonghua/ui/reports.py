# xiaohonghua/ui/reports.py
import streamlit as st
import pandas as pd
import plotly.express as px

from xiaohonghua.models.transaction import TransactionType


def running_balance(all_df: pd.DataFrame) -> pd.DataFrame:
    """Oldest-first frame with a cumulative `balance` column."""
    df = all_df.sort_values("date").reset_index(drop=True)
    df["balance"] = df["signed"].cumsum()
    return df


def render_reports(all_df):
    st.markdown("---")
    st.subheader("Reports")

    if all_df is None or all_df.empty:
        st.info("Add transactions to see reports.")
        return

    col1, col2 = st.columns(2)

    with col1:
        df_run = running_balance(all_df)
        fig_line = px.line(
            df_run,
            x="date",
            y="balance",
            markers=True,
            title="Balance over time",
        )
        st.plotly_chart(fig_line, use_container_width=True)

    with col2:
        df_kind = all_df.groupby("label", as_index=False)["amount"].sum()
        colors = {k.label: k.color for k in TransactionType}
        fig_bar = px.bar(
            df_kind,
            x="label",
            y="amount",
            color="label",
            color_discrete_map=colors,
            title="Totals by type",
        )
        st.plotly_chart(fig_bar, use_container_width=True)
