# path: app.py
import datetime as dt
import logging
from typing import Dict, List, Optional

import pandas as pd
import streamlit as st

from fiscal_calendar import current_fiscal_year, recent_fiscal_years
from partner_tiering import PartnerSummary, summarize_partners, tier_board, tier_distribution
from records import RecordError, load_assignments, read_assignments_csv, sample_assignments
from settings import ConfigError, EngineConfig, load_config
from tiers import TierConfigurationError, TierLadder

PROGRAM_NAME = "Partner Awards – Revenue Tiers"
ALL_FISCAL_YEARS = "All Fiscal Years"
MONTHS = ["January", "February", "March", "April", "May", "June", "July",
          "August", "September", "October", "November", "December"]

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


def money(value: float) -> str:
    return f"${value:,.0f}"


def ladder_frame(ladder: TierLadder) -> pd.DataFrame:
    return pd.DataFrame([
        {"name": t.name, "min_revenue": t.min_revenue, "description": t.description, "rewards": t.rewards,
         "accent": t.accent}
        for t in ladder
    ])


def summary_frame(summaries: List[PartnerSummary]) -> pd.DataFrame:
    rows = []
    for s in summaries:
        ev = s.result.evaluation
        rows.append({
            "Partner": s.partner_name,
            "Fiscal Year": s.result.fiscal_year_label,
            "Revenue": s.result.current_year_revenue,
            "Tier": ev.tier.name,
            "Next Tier": ev.next_tier.name if ev.next_tier else "—",
            "Progress": round(ev.progress_to_next * 100),
            "Active Projects": s.active_projects,
            "Completed Projects": s.completed_projects,
        })
    return pd.DataFrame(rows)


st.set_page_config(
    page_title="Partner Awards Dashboard",
    page_icon="🏆",
    layout="wide",
)

if "config" not in st.session_state:
    try:
        st.session_state.config = load_config()
    except (ConfigError, TierConfigurationError) as e:
        st.error(f"Configuration error: {e}")
        st.stop()

cfg: EngineConfig = st.session_state.config

st.markdown("<h1 style='margin:0;'>Partner Awards Dashboard</h1>", unsafe_allow_html=True)
st.caption("Completed project budgets credited per fiscal year.")

with st.sidebar:
    st.subheader("Assignments")
    upload = st.file_uploader("Partner project assignments (CSV)", type=["csv"])
    frame: Optional[pd.DataFrame] = None
    if upload is not None:
        try:
            frame = read_assignments_csv(upload)
        except (RecordError, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            st.error(str(e))
    if frame is None:
        frame = sample_assignments()
        st.caption("Showing sample data.")

    fy_options = [ALL_FISCAL_YEARS] + [fy.label for fy in recent_fiscal_years(5, cfg.fiscal_year_start_month)]
    selected_fy = st.selectbox("Fiscal Year", fy_options)
    target_fy = None if selected_fy == ALL_FISCAL_YEARS else selected_fy

assignments = load_assignments(frame)
summaries = summarize_partners(assignments, cfg.ladder, target_fy, start_month=cfg.fiscal_year_start_month)
current_fy = current_fiscal_year(cfg.fiscal_year_start_month)

tab_partners, tab_awards, tab_config = st.tabs(["Partners", "Partner Awards", "Configuration"])

with tab_partners:
    st.subheader("Partners")
    search = st.text_input("Search partners", placeholder="Name or ID")
    shown = [s for s in summaries
             if not search or search.lower() in s.partner_name.lower() or search.lower() in s.partner_id.lower()]

    m1, m2, m3 = st.columns(3)
    m1.metric("Partners", len(shown))
    m2.metric("Credited Revenue", money(sum(s.result.current_year_revenue for s in shown)))
    m3.metric("Active Projects", sum(s.active_projects for s in shown))

    if shown:
        st.dataframe(
            summary_frame(shown),
            use_container_width=True,
            column_config={
                "Revenue": st.column_config.NumberColumn(format="$%d"),
                "Progress": st.column_config.ProgressColumn(min_value=0, max_value=100, format="%d%%"),
            },
        )
        dist = tier_distribution(shown, cfg.ladder)
        st.bar_chart(pd.DataFrame({"Partners": list(dist.values())}, index=list(dist.keys())))
    else:
        st.info("No partners match.")

with tab_awards:
    if not summaries:
        st.info("No partners loaded.")
    else:
        by_name: Dict[str, PartnerSummary] = {f"{s.partner_name} ({s.partner_id})": s for s in summaries}
        choice = st.selectbox("Partner", sorted(by_name))
        summary = by_name[choice]
        result = summary.result
        tier, next_tier = result.evaluation.tier, result.evaluation.next_tier

        st.markdown(f"### {tier.name} Partner")
        st.caption(tier.description)

        c1, c2, c3 = st.columns(3)
        c1.metric(f"{result.fiscal_year_label} Revenue", money(result.current_year_revenue))
        c2.metric("Tier Threshold", f"{money(tier.min_revenue)}+")
        c3.metric("Next Tier", f"{next_tier.name} ({money(next_tier.min_revenue)})" if next_tier else "Top tier unlocked")

        pct = round(result.evaluation.progress_to_next * 100) if next_tier else 100
        st.progress(pct, text=f"{pct}% toward {next_tier.name}" if next_tier else "Top tier unlocked")
        st.write(f"**Current rewards:** {tier.rewards}")
        if next_tier:
            st.write(f"Unlock **{next_tier.name}** by reaching {money(next_tier.min_revenue)}: {next_tier.rewards}")
        if target_fy and target_fy != result.fiscal_year_label:
            st.warning(f"No completed projects in {target_fy}; showing {current_fy.label}.")

        st.subheader("Tier Board")
        for row in tier_board(cfg.ladder, result.current_year_revenue):
            b1, b2 = st.columns([3, 1])
            b1.markdown(f"**{row.tier.name}** · {row.tier.description}")
            b2.caption(f"{money(row.tier.min_revenue)}+ · {'Unlocked' if row.unlocked else 'In progress'}")
            st.progress(round(row.progress * 100))

        st.subheader("Fiscal Record")
        if result.ledger:
            st.dataframe(
                pd.DataFrame([{"Fiscal Year": e.fiscal_year_label, "Revenue": e.amount} for e in result.ledger]),
                use_container_width=True,
            )
        else:
            st.info("No completed projects yet.")

with tab_config:
    st.subheader("Fiscal Calendar")
    month = st.selectbox("Fiscal year starts in", MONTHS, index=cfg.fiscal_year_start_month - 1)
    cfg.fiscal_year_start_month = MONTHS.index(month) + 1
    st.caption(f"Current fiscal year: {current_fiscal_year(cfg.fiscal_year_start_month).label}")

    st.subheader("Revenue Tiers")
    edited = st.data_editor(ladder_frame(cfg.ladder), num_rows="dynamic", use_container_width=True)
    try:
        new_ladder = TierLadder.from_records(edited.to_dict("records"))
    except TierConfigurationError as e:
        st.warning(f"Tier changes not applied: {e}")
    else:
        if new_ladder != cfg.ladder:
            logger.info("Tier ladder updated: %s", new_ladder)
            cfg.ladder = new_ladder

st.divider()
st.caption(f"{PROGRAM_NAME}. Only completed projects are credited; a project counts toward the fiscal year of its "
           f"last update. Generated {dt.date.today().isoformat()}.")
