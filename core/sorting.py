from __future__ import annotations

from typing import List, Optional, Sequence

from core.data import SpendRecord, to_frame


SORT_COLUMNS = {"cost": "cost", "date": "date"}


def apply_sorting(records: Sequence[SpendRecord], sort_by: Optional[str], sort_order: str = "desc") -> List[SpendRecord]:
    """Return a new, stably ordered list. Records without a parseable date always sort last."""
    ordered = list(records)
    column = SORT_COLUMNS.get(sort_by or "")
    if column is None or not ordered:
        return ordered
    df = to_frame(ordered)
    index = df.sort_values(
        column,
        ascending=(sort_order == "asc"),
        kind="stable",
        na_position="last",
    ).index
    return [ordered[i] for i in index]
