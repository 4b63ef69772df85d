from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence, Tuple

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

# Line charts only make sense over time, so only the monthly grouping offers one.
CHART_TYPES_BY_GROUPING: Dict[str, Tuple[str, ...]] = {
    "month": ("bar", "line", "pie"),
    "team": ("bar", "pie"),
    "cloud": ("bar", "pie"),
}

# Chart-data key in ``summary.charts`` and label column for each grouping.
GROUPING_SOURCES: Dict[str, Tuple[str, str]] = {
    "month": ("monthly", "month"),
    "team": ("byTeam", "team"),
    "cloud": ("byCloud", "cloud"),
}

GROUPING_TITLES = {
    "month": "Monthly Spending Trend",
    "team": "Spending by Team",
    "cloud": "Spending by Cloud Provider",
}


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def chart_type_options(group_by: str) -> Tuple[str, ...]:
    try:
        return CHART_TYPES_BY_GROUPING[group_by]
    except KeyError:
        raise ValueError(f"Unknown grouping: {group_by!r}") from None


def resolve_chart_type(group_by: str, requested: str) -> str:
    options = chart_type_options(group_by)
    return requested if requested in options else options[0]


def chart_rows(charts: Mapping[str, Sequence[Mapping[str, Any]]], group_by: str) -> List[Mapping[str, Any]]:
    key, _ = GROUPING_SOURCES[group_by]
    return list(charts.get(key) or [])


def breakdown_chart(rows: Sequence[Mapping[str, Any]], group_by: str, chart_type: str) -> alt.Chart:
    """Build the bar, line or pie chart for one grouping of ``summary.charts``."""
    if chart_type not in chart_type_options(group_by):
        raise ValueError(f"{chart_type!r} chart is not available when grouping by {group_by}")
    _, label = GROUPING_SOURCES[group_by]
    df = pd.DataFrame(list(rows), columns=[label, "total"])
    # Keep the API order (chronological or ranked) instead of alphabetical.
    order = df[label].astype(str).tolist()
    tooltip = [alt.Tooltip(f"{label}:N", title=label.title()), alt.Tooltip("total:Q", title="Total", format="$,.2f")]

    if chart_type == "pie":
        return (
            alt.Chart(df)
            .mark_arc()
            .encode(
                theta=alt.Theta("total:Q"),
                color=alt.Color(f"{label}:N", sort=order, title=label.title()),
                tooltip=tooltip,
            )
        )
    if chart_type == "line":
        return (
            alt.Chart(df)
            .mark_line(point={"filled": True, "size": 60})
            .encode(
                x=alt.X(f"{label}:O", sort=order, title=label.title(), axis=alt.Axis(grid=False)),
                y=alt.Y("total:Q", title="Spend (USD)", axis=alt.Axis(format="$~s", gridDash=[4, 4])),
                tooltip=tooltip,
            )
        )
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X(f"{label}:N", sort=order, title=label.title(), axis=alt.Axis(labelAngle=0 if group_by == "month" else -45)),
            y=alt.Y("total:Q", title="Spend (USD)", axis=alt.Axis(format="$~s")),
            tooltip=tooltip,
        )
    )
