from __future__ import annotations

from typing import Any, Dict, Optional

from core.data import load_dataset, round_half_up
from core.filters import SpendQuery, apply_filters
from core.metrics_summary import calculate_chart_data, calculate_summary
from core.pagination import apply_pagination
from core.settings import Settings, get_settings
from core.sorting import apply_sorting


def build_spend_response(query: SpendQuery, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Run load, filter, sort, aggregate and paginate for one request.

    Summary and charts cover every matching record, not just the returned page.
    """
    settings = settings or get_settings()
    dataset = load_dataset(query.cloud_provider, settings)
    filtered = apply_filters(dataset, query)
    ordered = apply_sorting(filtered, query.sort_by, query.sort_order)

    summary = calculate_summary(ordered)
    charts = calculate_chart_data(ordered, summary["byCloud"])
    page_rows, page_meta = apply_pagination(ordered, query.page, query.limit)

    return {
        "meta": {
            **page_meta,
            "appliedFilters": query.applied_filters(),
            "sorting": query.sorting(),
        },
        "summary": {
            "total": round_half_up(summary["total"], 2),
            "byCloud": {k: round_half_up(v, 2) for k, v in summary["byCloud"].items()},
            "topServices": summary["topServices"],
            "charts": charts,
        },
        "data": [r.to_dict() for r in page_rows],
    }
