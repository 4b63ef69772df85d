import calendar
from contextlib import contextmanager
from typing import Any, Dict, List

import pandas as pd
import streamlit as st

from core.charts import (
    GROUPING_TITLES,
    breakdown_chart,
    chart_rows,
    chart_type_options,
    resolve_chart_type,
)
from core.data import coerce_cost
from core.errors import SpendViewerError
from core.filters import ALL, CLOUD_PROVIDERS, parse_query
from core.response import build_spend_response

TEAM_OPTIONS = ["All", "Core", "Web", "Data"]
ENV_OPTIONS = ["All", "prod", "staging", "dev"]
YEAR_OPTIONS = ["", "2024", "2025"]
MONTH_OPTIONS = [""] + [str(m) for m in range(1, 13)]
PAGE_SIZES = [5, 10, 20, 50]
GROUPINGS = ["month", "team", "cloud"]
CHART_LABELS = {"bar": "Bar Chart", "line": "Line Chart", "pie": "Pie Chart"}

FILTER_DEFAULTS: Dict[str, Any] = {
    "cloud_provider": ALL,
    "team": ALL,
    "env": ALL,
    "year": "",
    "month": "",
    "sort_by": None,
    "sort_order": "desc",
    "page": 1,
    "limit": 10,
}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #eff6ff;border: 1px solid #bfdbfe;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #1e40af;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body


def format_currency(value: object) -> str:
    return f"${coerce_cost(value):,.2f}"


def init_state():
    for key, value in FILTER_DEFAULTS.items():
        st.session_state.setdefault(key, value)


def reset_page():
    st.session_state["page"] = 1


def clear_filter(key: str):
    if key == "sort":
        st.session_state["sort_by"] = None
        st.session_state["sort_order"] = "desc"
    else:
        st.session_state[key] = FILTER_DEFAULTS[key]
    reset_page()


def clear_all_filters():
    for key, value in FILTER_DEFAULTS.items():
        if key != "limit":
            st.session_state[key] = value


def toggle_sort(key: str):
    if st.session_state["sort_by"] == key:
        st.session_state["sort_order"] = "asc" if st.session_state["sort_order"] == "desc" else "desc"
    else:
        st.session_state["sort_by"] = key
        st.session_state["sort_order"] = "desc"
    reset_page()


def active_filters() -> List[Dict[str, str]]:
    state = st.session_state
    chips = []
    if state["cloud_provider"] != ALL:
        chips.append({"key": "cloud_provider", "label": "Cloud", "value": state["cloud_provider"]})
    if state["team"] != ALL:
        chips.append({"key": "team", "label": "Team", "value": state["team"]})
    if state["env"] != ALL:
        chips.append({"key": "env", "label": "Env", "value": state["env"]})
    if state["year"]:
        chips.append({"key": "year", "label": "Year", "value": state["year"]})
    if state["month"]:
        chips.append({"key": "month", "label": "Month", "value": calendar.month_name[int(state["month"])]})
    if state["sort_by"]:
        chips.append({"key": "sort", "label": "Sort", "value": f"{state['sort_by']} ({state['sort_order']})"})
    return chips


def current_params() -> Dict[str, Any]:
    state = st.session_state
    return {
        "page": state["page"],
        "limit": state["limit"],
        "sortBy": state["sort_by"],
        "sortOrder": state["sort_order"],
        "cloud_provider": state["cloud_provider"],
        "team": state["team"],
        "env": state["env"],
        "month": state["month"] or None,
        "year": state["year"] or None,
    }


def record_description(record: Dict[str, Any]) -> str:
    if record.get("description"):
        return str(record["description"])
    return (
        f"This is {record.get('cloud_provider')} {record.get('service')} spend from the "
        f"{record.get('team')} team in {record.get('env')} environment."
    )


# ---------- Sections ----------
def render_sidebar():
    with st.sidebar:
        st.markdown("### Filters")
        st.selectbox("Cloud Provider", list(CLOUD_PROVIDERS), key="cloud_provider", on_change=reset_page)
        st.selectbox("Team", TEAM_OPTIONS, key="team", on_change=reset_page)
        st.selectbox("Environment", ENV_OPTIONS, key="env", on_change=reset_page)
        st.selectbox("Year", YEAR_OPTIONS, key="year", format_func=lambda y: y or "All Years", on_change=reset_page)
        st.selectbox(
            "Month",
            MONTH_OPTIONS,
            key="month",
            format_func=lambda m: calendar.month_name[int(m)] if m else "All Months",
            on_change=reset_page,
        )

        st.markdown("---")
        st.markdown("### Sort")
        sort_cols = st.columns(2)
        for col, key in zip(sort_cols, ["cost", "date"]):
            arrow = ""
            if st.session_state["sort_by"] == key:
                arrow = " ↑" if st.session_state["sort_order"] == "asc" else " ↓"
            col.button(f"{key.title()}{arrow}", key=f"sort_{key}", on_click=toggle_sort, args=(key,))

        chips = active_filters()
        if chips:
            st.markdown("---")
            st.markdown("### Active filters")
            for chip in chips:
                st.button(f"✕ {chip['label']}: {chip['value']}", key=f"clear_{chip['key']}", on_click=clear_filter, args=(chip["key"],))
            st.button("Clear all", on_click=clear_all_filters)


def render_summary(summary: Dict[str, Any]):
    cols = st.columns(3)
    with cols[0]:
        with card("Total Spend"):
            st.metric("Total", format_currency(summary.get("total")))
    with cols[1]:
        with card("By Cloud"):
            by_cloud = summary.get("byCloud") or {}
            if not by_cloud:
                st.caption("No data")
            for cloud, cost in by_cloud.items():
                st.markdown(f"**{cloud}**: {format_currency(cost)}")
    with cols[2]:
        with card("Top Services"):
            top = summary.get("topServices") or []
            if not top:
                st.caption("No data")
            for idx, item in enumerate(top, start=1):
                st.markdown(f"{idx}. **{item['service']}**: {format_currency(item['cost'])}")


def render_table(rows: List[Dict[str, Any]], meta: Dict[str, Any]):
    with card(f"Detailed Spending ({meta.get('total', 0)} records found)"):
        st.selectbox("Rows per page", PAGE_SIZES, key="limit", on_change=reset_page)
        if not rows:
            st.info("No spending records match the selected filters.")
            return
        table = pd.DataFrame(rows)
        columns = [c for c in ["date", "cloud_provider", "service", "team", "env", "cost_usd"] if c in table.columns]
        st.dataframe(table[columns], hide_index=True, use_container_width=True)

        labels = [f"{r.get('date')} · {r.get('service')} · {format_currency(r.get('cost_usd'))}" for r in rows]
        choice = st.selectbox("Record details", options=list(range(len(rows))), format_func=lambda i: labels[i])
        record = rows[choice]
        with st.expander("Spending Details", expanded=False):
            st.write(record_description(record))
            detail = {k: v for k, v in record.items() if k != "tags"}
            st.json(detail)
            if record.get("tags"):
                st.markdown("**Tags**")
                st.table(pd.DataFrame(sorted(record["tags"].items()), columns=["key", "value"]))

        render_pagination(meta)


def render_pagination(meta: Dict[str, Any]):
    cols = st.columns([4, 1, 1])
    cols[0].caption(f"Showing page {meta.get('page', 1)} of {meta.get('totalPages', 1)}")
    if cols[1].button("Previous", disabled=not meta.get("hasPrev")):
        st.session_state["page"] = max(1, int(meta.get("page", 1)) - 1)
        st.rerun()
    if cols[2].button("Next", disabled=not meta.get("hasNext")):
        st.session_state["page"] = int(meta.get("page", 1)) + 1
        st.rerun()


def render_charts(charts: Dict[str, Any]):
    with card("Spending Trends & Analysis"):
        cols = st.columns(2)
        group_by = cols[0].selectbox("Group by", GROUPINGS, format_func=str.title, key="chart_group_by")
        # A type the new grouping cannot draw falls back to its first option.
        st.session_state["chart_type"] = resolve_chart_type(group_by, st.session_state.get("chart_type", "bar"))
        chart_type = cols[1].selectbox(
            "Chart type",
            list(chart_type_options(group_by)),
            format_func=lambda t: CHART_LABELS[t],
            key="chart_type",
        )
        rows = chart_rows(charts, group_by)
        st.markdown(f"**{GROUPING_TITLES[group_by]}**")
        if not rows:
            st.info(f"No data available for {group_by} grouping")
            return
        st.altair_chart(breakdown_chart(rows, group_by, chart_type), use_container_width=True)


# ---------- UI setup ----------
st.set_page_config(page_title="Cloud Spend Viewer", layout="wide")
inject_base_styles()
init_state()
st.title("Cloud Spend Viewer")
st.caption("Monitor and analyze cloud spending across teams and services")

render_sidebar()

payload: Dict[str, Any] = {"meta": {}, "summary": {}, "data": []}
try:
    payload = build_spend_response(parse_query(current_params()))
except SpendViewerError as exc:
    st.error(f"Error: {exc.message}")

chips = active_filters()
if chips:
    st.markdown(
        "<div class='chip-row'>" + "".join(f"<span class='chip'>{c['label']}: {c['value']}</span>" for c in chips) + "</div>",
        unsafe_allow_html=True,
    )

render_summary(payload["summary"])
render_table(payload["data"], payload["meta"])
render_charts(payload["summary"].get("charts") or {})
st.caption("Summary and charts reflect every matching record, not only the current page.")
