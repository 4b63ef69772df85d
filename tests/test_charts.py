"""Tests for chart capability rules and Altair chart construction."""

from __future__ import annotations

import pytest

from core.charts import breakdown_chart, chart_rows, chart_type_options, resolve_chart_type, to_vega_spec


CHARTS = {
    "monthly": [{"month": "Jan 2024", "total": 10.0, "count": 1}, {"month": "Feb 2024", "total": 50.0, "count": 2}],
    "byTeam": [{"team": "Core", "total": 60.0, "count": 3}],
    "byCloud": [{"cloud": "AWS", "total": 60.0}],
}


def _mark_type(spec):
    mark = spec["mark"]
    return mark["type"] if isinstance(mark, dict) else mark


def test_line_charts_are_only_offered_for_monthly_grouping() -> None:
    assert "line" in chart_type_options("month")
    assert chart_type_options("team") == ("bar", "pie")
    assert chart_type_options("cloud") == ("bar", "pie")


def test_unknown_grouping_is_rejected() -> None:
    with pytest.raises(ValueError):
        chart_type_options("service")


def test_resolve_chart_type_falls_back_when_grouping_changes() -> None:
    assert resolve_chart_type("month", "line") == "line"
    assert resolve_chart_type("team", "line") == "bar"
    assert resolve_chart_type("cloud", "pie") == "pie"


def test_chart_rows_pick_the_matching_series() -> None:
    assert chart_rows(CHARTS, "team") == CHARTS["byTeam"]
    assert chart_rows({}, "month") == []


@pytest.mark.parametrize(
    "group_by, chart_type, mark",
    [("month", "bar", "bar"), ("month", "line", "line"), ("team", "pie", "arc"), ("cloud", "bar", "bar")],
)
def test_breakdown_chart_marks(group_by, chart_type, mark) -> None:
    spec = to_vega_spec(breakdown_chart(chart_rows(CHARTS, group_by), group_by, chart_type))
    assert _mark_type(spec) == mark


def test_breakdown_chart_rejects_line_for_non_time_grouping() -> None:
    with pytest.raises(ValueError, match="not available"):
        breakdown_chart(CHARTS["byTeam"], "team", "line")
