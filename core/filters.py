from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from core.data import SpendRecord, to_frame
from core.errors import ValidationError


logger = logging.getLogger(__name__)

ALL = "All"
SORT_FIELDS = ("cost", "date")
SORT_ORDERS = ("asc", "desc")
CLOUD_PROVIDERS = ("All", "AWS", "GCP")
MAX_LIMIT = 100

_INT_RE = re.compile(r"[+-]?\d+")


@dataclass(frozen=True)
class SpendQuery:
    page: int = 1
    limit: int = 10
    sort_by: Optional[str] = None
    sort_order: str = "desc"
    cloud_provider: str = ALL
    team: str = ALL
    env: str = ALL
    month: Optional[int] = None
    year: Optional[int] = None

    def applied_filters(self) -> Dict[str, Any]:
        return {
            "cloud_provider": self.cloud_provider,
            "team": self.team,
            "env": self.env,
            "month": self.month,
            "year": self.year,
        }

    def sorting(self) -> Optional[Dict[str, str]]:
        if not self.sort_by:
            return None
        return {"sortBy": self.sort_by, "sortOrder": self.sort_order}


def _param(raw: Mapping[str, Any], key: str, default: Optional[str] = None) -> Optional[str]:
    value = raw.get(key)
    if value is None:
        return default
    value = str(value)
    return value if value.strip() else default


def _as_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    s = value.strip()
    if not _INT_RE.fullmatch(s):
        return None
    return int(s)


def _reject(param: str, message: str) -> ValidationError:
    logger.info("Rejected query parameter %s: %s", param, message)
    return ValidationError(param, message)


def parse_query(raw: Mapping[str, Any]) -> SpendQuery:
    """Apply defaults to raw request parameters and validate them.

    Raises ValidationError naming the first offending parameter.
    """
    page = _as_int(_param(raw, "page", "1"))
    if page is None or page < 1:
        raise _reject("page", "page must be a positive integer")

    limit = _as_int(_param(raw, "limit", "10"))
    if limit is None or limit < 1 or limit > MAX_LIMIT:
        raise _reject("limit", f"limit must be an integer between 1 and {MAX_LIMIT}")

    sort_by = _param(raw, "sortBy")
    if sort_by is not None and sort_by not in SORT_FIELDS:
        raise _reject("sortBy", "sortBy must be 'cost' or 'date'")

    sort_order = _param(raw, "sortOrder", "desc")
    if sort_order not in SORT_ORDERS:
        raise _reject("sortOrder", "sortOrder must be 'asc' or 'desc'")

    cloud_provider = _param(raw, "cloud_provider", ALL)
    if cloud_provider not in CLOUD_PROVIDERS:
        raise _reject("cloud_provider", "cloud_provider must be 'All', 'AWS', or 'GCP'")

    month_raw = _param(raw, "month")
    month = _as_int(month_raw)
    if month_raw is not None and (month is None or month < 1 or month > 12):
        raise _reject("month", "month must be an integer between 1 and 12")

    year_raw = _param(raw, "year")
    year = _as_int(year_raw)
    if year_raw is not None and (year is None or year < 1):
        raise _reject("year", "year must be a positive integer")

    return SpendQuery(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order or "desc",
        cloud_provider=cloud_provider or ALL,
        team=_param(raw, "team", ALL) or ALL,
        env=_param(raw, "env", ALL) or ALL,
        month=month,
        year=year,
    )


def _text_match(column: pd.Series, wanted: str) -> pd.Series:
    # Blank values never match an active filter.
    folded = column.str.casefold()
    return folded.ne("") & folded.eq(wanted.strip().casefold())


def apply_filters(records: Sequence[SpendRecord], query: SpendQuery) -> List[SpendRecord]:
    """Keep the records matching team, env, month and year. Provider is chosen at load time."""
    if not records:
        return []
    df = to_frame(records)
    mask = pd.Series(True, index=df.index)

    if query.team != ALL:
        mask &= _text_match(df["team"], query.team)
    if query.env != ALL:
        mask &= _text_match(df["env"], query.env)
    if query.month is not None:
        mask &= df["date"].dt.month.eq(query.month)
    if query.year is not None:
        mask &= df["date"].dt.year.eq(query.year)

    return [records[i] for i in df.index[mask]]
