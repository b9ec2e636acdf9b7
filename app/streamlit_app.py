"""
Liquidity Forecast | Deal Cash-Flow Dashboard
=============================================

Upload a CRM deal export and get:
  1. Liquidity forecast:  won deals paid 50% three weeks after winning and
                          50% three weeks after the event, per month or week
  2. Cumulative balance:  running total across the current and future periods
  3. Deal statistics:     won/lost counts, values and win rate per period
  4. Revenue manager:     partnership and prior-year revenue blended into the
                          weekly view

Run: streamlit run app/streamlit_app.py   (or: liquidity-forecast)
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import pandas as pd
import streamlit as st

try:
    import altair as alt
    _HAS_ALTAIR = True
except Exception:
    alt = None
    _HAS_ALTAIR = False

# ---------------------------------------------------------------------------
# Make project root importable
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import ForecastConfig
from core.formatting import EUR_DE
from core.schema import AdjustmentKind

from data_prep.deals import total_deal_value, won_deals
from data_prep.loader import load_deals_csv
from data_prep.validators import validate_deals

from engine.forecast import compute_monthly_forecast, compute_weekly_forecast

from reporting.deal_stats import (
    compute_monthly_deal_stats,
    compute_weekly_deal_stats,
    deal_stats_to_dataframe,
)
from reporting.export import forecast_to_excel
from reporting.payload import summarize_adjustments

from store.revenue_store import AdjustmentStore, load_adjustments

# ---------------------------------------------------------------------------
# Logging / storage
# ---------------------------------------------------------------------------
if not logging.getLogger().handlers:
    logging.basicConfig(
        level=os.environ.get("LIQUIDITY_LOG_LEVEL", "INFO"),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
logger = logging.getLogger("liquidity-forecast")

STORE_PATH = Path(os.environ.get("LIQUIDITY_STORE_PATH", PROJECT_ROOT / "data" / "revenue_store.db"))

VIEW_LABELS = {"Monthly": "month", "Weekly": "week"}
KIND_LABELS = {
    AdjustmentKind.PARTNERSHIP: "Partnership",
    AdjustmentKind.PRIOR_YEAR: "Prior-year revenue",
}
MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


@st.cache_resource
def _get_store(path: str):
    try:
        return AdjustmentStore(path)
    except Exception as e:
        logger.warning("Revenue store unavailable at %s: %s", path, e)
        return None


# ---------------------------------------------------------------------------
# Cached loaders
# ---------------------------------------------------------------------------
@st.cache_data(show_spinner="Reading deal export...")
def _load_deals(data: bytes) -> pd.DataFrame:
    return load_deals_csv(data)


# ---------------------------------------------------------------------------
# Chart helpers
# ---------------------------------------------------------------------------
def _fmt_eur(val):
    return EUR_DE(val)


def _fmt_pct(val):
    return f"{val:d}%"


def _plot_forecast(df, *, x, title, height=320):
    """Bars for the period amount, line for the cumulative balance."""
    if not isinstance(df, pd.DataFrame) or len(df) == 0:
        st.info("No data to plot.")
        return
    d = df.sort_values(x)
    if not _HAS_ALTAIR:
        st.markdown(f"**{title}**")
        st.bar_chart(d.set_index(x)["amount"])
        st.line_chart(d.set_index(x)["cumulative_balance"])
        return
    base = alt.Chart(d).encode(x=alt.X(f"{x}:O", title="Period", sort=None))
    bars = base.mark_bar(opacity=0.8).encode(
        y=alt.Y("amount:Q", title="Amount (€)", axis=alt.Axis(format=",.0f")),
        tooltip=[x, "amount", "cumulative_balance"],
    )
    line = base.mark_line(color="darkorange", point=True).encode(
        y=alt.Y("cumulative_balance:Q", title="Cumulative balance (€)"),
    )
    chart = alt.layer(bars, line).resolve_scale(y="independent").properties(title=title, height=height)
    st.altair_chart(chart, use_container_width=True)


def _plot_components(df, *, title, height=280):
    cols = ["deal_amount", "partnership_amount", "prior_year_amount"]
    if not _HAS_ALTAIR or len(df) == 0 or any(c not in df.columns for c in cols):
        return
    long = df.sort_values("period").melt(
        id_vars=["period"], value_vars=cols, var_name="source", value_name="value"
    )
    chart = (
        alt.Chart(long).mark_bar()
        .encode(
            x=alt.X("period:O", title="Week"),
            y=alt.Y("value:Q", title="Amount (€)", stack="zero"),
            color=alt.Color("source:N", title="Source"),
        )
        .properties(title=title, height=height)
    )
    st.altair_chart(chart, use_container_width=True)


def _plot_win_rate(stats_df, *, title, height=240):
    if not _HAS_ALTAIR or len(stats_df) == 0:
        return
    chart = (
        alt.Chart(stats_df.sort_values("period")).mark_line(point=True)
        .encode(
            x=alt.X("period:O", title="Period"),
            y=alt.Y("win_rate:Q", title="Win rate (%)", scale=alt.Scale(domain=[0, 100])),
        )
        .properties(title=title, height=height)
    )
    st.altair_chart(chart, use_container_width=True)


# ═══════════════════════════════════════════════════════════════════════════
# PAGE CONFIG
# ═══════════════════════════════════════════════════════════════════════════
st.set_page_config(page_title="Liquidity Forecast", layout="wide")
st.title("Liquidity Forecast")
st.caption("Cash-flow planning from won deals: 50% three weeks after winning, 50% three weeks after the event")

store = _get_store(str(STORE_PATH))

# ═══════════════════════════════════════════════════════════════════════════
# SIDEBAR | Upload & View
# ═══════════════════════════════════════════════════════════════════════════
with st.sidebar:
    st.header("Deal Export")
    uploaded = st.file_uploader("CSV file", type=["csv"])
    view_label = st.radio("View", options=list(VIEW_LABELS), index=0, horizontal=True)
    granularity = VIEW_LABELS[view_label]
    week_year = st.selectbox(
        "Week labels",
        options=["iso", "calendar"],
        index=0,
        help="'calendar' reproduces the legacy labels (ISO week number with calendar year).",
    )

cfg = ForecastConfig(week_year=week_year)
tab_forecast, tab_stats, tab_revenue = st.tabs(["Forecast", "Deal Statistics", "Revenue Manager"])

deals = None
if uploaded is not None:
    try:
        deals = _load_deals(uploaded.getvalue())
    except Exception as e:
        st.error(f"Failed to process CSV: {e}")
        deals = None

    if deals is not None:
        vr = validate_deals(deals)
        if not vr.is_valid:
            st.error("Deal file validation failed:\n" + vr.summary())
            deals = None
        elif vr.warnings:
            with st.sidebar.expander("Data warnings", expanded=False):
                st.text(vr.summary())

# ═══════════════════════════════════════════════════════════════════════════
# FORECAST
# ═══════════════════════════════════════════════════════════════════════════
with tab_forecast:
    if deals is None:
        st.info("Upload a deal export to build the forecast.")
    else:
        won = won_deals(deals)
        if granularity == "week":
            adjustments = load_adjustments(store)
            result = compute_weekly_forecast(deals, adjustments, config=cfg)
        else:
            result = compute_monthly_forecast(deals, config=cfg)
        table = result.to_dataframe()

        k1, k2, k3, k4 = st.columns(4)
        k1.metric("Won Deals", f"{len(won):,}")
        k2.metric("Total Deal Value", _fmt_eur(total_deal_value(won)))
        k3.metric("Forecast Liquidity", result.summary.formatted_final_balance)
        k4.metric("Forecast Periods", str(result.summary.period_count))

        _plot_forecast(table, x="period", title=f"{view_label} Liquidity Forecast")
        if granularity == "week":
            _plot_components(table, title="Weekly Amount by Source")

        st.markdown(f"**{view_label} Overview** (from {result.current_period}, newest first)")
        shown = table.drop(columns=["formatted_amount", "formatted_cumulative_balance"])
        st.dataframe(
            shown.style.format({c: _fmt_eur for c in shown.columns if c != "period"}),
            use_container_width=True,
            hide_index=True,
        )

# ═══════════════════════════════════════════════════════════════════════════
# DEAL STATISTICS
# ═══════════════════════════════════════════════════════════════════════════
with tab_stats:
    if deals is None:
        st.info("Upload a deal export to see win/loss statistics.")
    else:
        if granularity == "week":
            stats = compute_weekly_deal_stats(deals, config=cfg)
        else:
            stats = compute_monthly_deal_stats(deals, config=cfg)
        stats_df = deal_stats_to_dataframe(stats)

        if len(stats_df):
            s1, s2, s3 = st.columns(3)
            total = int(stats_df["total_deals"].sum())
            won_n = int(stats_df["won_deals"].sum())
            s1.metric("Resolved Deals", f"{total:,}")
            s2.metric("Won", f"{won_n:,}")
            s3.metric("Overall Win Rate", f"{round(won_n / total * 100) if total else 0}%")

        _plot_win_rate(stats_df, title=f"{view_label} Win Rate")
        st.dataframe(
            stats_df.style.format({
                "total_value": _fmt_eur, "won_value": _fmt_eur, "lost_value": _fmt_eur,
                "win_rate": _fmt_pct,
            }),
            use_container_width=True,
            hide_index=True,
        )

# ═══════════════════════════════════════════════════════════════════════════
# REVENUE MANAGER
# ═══════════════════════════════════════════════════════════════════════════
with tab_revenue:
    st.caption(
        "Partnership revenue is booked in full in the last week of its month. "
        "Prior-year revenue is weighted and spread over every week of its month. "
        "Both only affect the weekly view."
    )
    if store is None:
        st.warning(f"Revenue store unavailable ({STORE_PATH}); forecasts run without adjustments.")
    else:
        with st.form("add_revenue", clear_on_submit=True):
            c1, c2, c3 = st.columns(3)
            with c1:
                kind = st.radio(
                    "Type", options=list(KIND_LABELS), format_func=KIND_LABELS.get, horizontal=True
                )
            this_year = pd.Timestamp.today().year
            with c2:
                year = st.selectbox("Year", options=list(range(this_year - 2, this_year + 4)), index=2)
            with c3:
                month = st.selectbox(
                    "Month", options=list(range(1, 13)), format_func=lambda m: MONTH_NAMES[m - 1]
                )
            c4, c5 = st.columns(2)
            with c4:
                amount = st.number_input("Amount (€)", min_value=0.0, step=100.0, format="%.2f")
            with c5:
                weight = st.number_input(
                    "Weight (prior-year only)", min_value=0.0, max_value=1.0, value=1.0, step=0.05
                )
            submitted = st.form_submit_button("Add", type="primary")

        if submitted:
            record = {"kind": kind.value, "year": int(year), "month": int(month), "amount": float(amount)}
            if kind is AdjustmentKind.PRIOR_YEAR:
                record["weight"] = float(weight)
            try:
                store.add_adjustment(record)
                st.success("Revenue entry added.")
            except ValueError as e:
                st.error(f"Could not add entry: {e}")

        entries = load_adjustments(store)
        if not entries:
            st.info("No revenue entries yet.")
        else:
            st.markdown("**Totals per Year**")
            st.dataframe(
                summarize_adjustments(entries).style.format(
                    {c: _fmt_eur for c in ["partnership", "prior-year", "total"]}
                ),
                use_container_width=True,
                hide_index=True,
            )

            st.markdown("**Entries**")
            for adj in sorted(entries, key=lambda a: (a.year, a.month), reverse=True):
                r1, r2, r3, r4 = st.columns([2, 2, 2, 1])
                r1.write(f"{MONTH_NAMES[adj.month - 1]} {adj.year}")
                r2.write(KIND_LABELS[adj.kind])
                weight_txt = f" × {adj.effective_weight:.2f}" if adj.kind is AdjustmentKind.PRIOR_YEAR else ""
                r3.write(f"{_fmt_eur(adj.amount)}{weight_txt}")
                if r4.button("Delete", key=f"del_{adj.id}"):
                    if not store.delete_adjustment(adj.id):
                        st.error("Revenue entry not found.")
                    st.rerun()
