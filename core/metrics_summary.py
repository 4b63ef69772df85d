from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

import pandas as pd

from core.data import SpendRecord, round_half_up, to_frame


TOP_SERVICES = 5


def _money(value: object) -> float:
    return round_half_up(value, 2) or 0.0


def calculate_summary(records: Sequence[SpendRecord]) -> Dict[str, Any]:
    """Totals over every matching record; ``byCloud`` is left unrounded for the chart data."""
    df = to_frame(records)
    if df.empty:
        return {"total": 0.0, "byCloud": {}, "topServices": []}

    by_cloud = df.groupby("cloud_provider", sort=False)["cost"].sum()
    services = df[df["service"] != ""]
    top = (
        services.groupby("service", sort=False)["cost"]
        .sum()
        .sort_values(ascending=False, kind="stable")
        .head(TOP_SERVICES)
    )
    return {
        "total": float(df["cost"].sum()),
        "byCloud": {str(k): float(v) for k, v in by_cloud.items()},
        "topServices": [{"service": str(k), "cost": _money(v)} for k, v in top.items()],
    }


def _monthly(df: pd.DataFrame) -> List[Dict[str, Any]]:
    # Undated records are skipped here rather than failing the request.
    dated = df.dropna(subset=["date"])
    if dated.empty:
        return []
    grouped = (
        dated.assign(period=dated["date"].dt.to_period("M"))
        .groupby("period", sort=True)
        .agg(total=("cost", "sum"), count=("cost", "size"))
    )
    return [
        {"month": period.strftime("%b %Y"), "total": _money(row["total"]), "count": int(row["count"])}
        for period, row in grouped.iterrows()
    ]


def _by_team(df: pd.DataFrame) -> List[Dict[str, Any]]:
    if df.empty:
        return []
    grouped = (
        df.groupby("team_bucket", sort=False)
        .agg(total=("cost", "sum"), count=("cost", "size"))
        .sort_values("total", ascending=False, kind="stable")
    )
    return [
        {"team": str(team), "total": _money(row["total"]), "count": int(row["count"])}
        for team, row in grouped.iterrows()
    ]


def _by_cloud(by_cloud: Mapping[str, float]) -> List[Dict[str, Any]]:
    if not by_cloud:
        return []
    ranked = pd.Series(dict(by_cloud), dtype=float).sort_values(ascending=False, kind="stable")
    return [{"cloud": str(cloud), "total": _money(total)} for cloud, total in ranked.items()]


def calculate_chart_data(records: Sequence[SpendRecord], by_cloud: Mapping[str, float]) -> Dict[str, List[Dict[str, Any]]]:
    df = to_frame(records)
    return {
        "monthly": _monthly(df),
        "byTeam": _by_team(df),
        "byCloud": _by_cloud(by_cloud),
    }
