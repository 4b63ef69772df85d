from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from core.errors import DataLoadError
from core.settings import Settings, get_settings


logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"

# Words pandas resolves against the current clock rather than a written date.
_RELATIVE_DATE_WORDS = frozenset({"today", "now"})

FRAME_COLUMNS = ["cloud_provider", "service", "team", "env", "team_bucket", "cost", "date"]


def _text(value: object) -> str:
    if value is None:
        return ""
    return str(value)


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def coerce_cost(value: object) -> float:
    """Read a cost amount, falling back to 0.0 for anything that is not a finite number."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(out) or math.isinf(out):
        return 0.0
    return out


def parse_record_date(value: object) -> Optional[pd.Timestamp]:
    """Parse a record date as a naive calendar date.

    Offsets are dropped without conversion so the date reads as written.
    Returns None for non-strings, blanks, "today"/"now" and anything pandas
    cannot parse.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.casefold() in _RELATIVE_DATE_WORDS:
        return None
    ts = pd.to_datetime(text, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.normalize()


@dataclass(frozen=True)
class SpendRecord:
    date: Optional[str] = None
    cloud_provider: Optional[str] = None
    service: Optional[str] = None
    team: Optional[str] = None
    env: Optional[str] = None
    cost_usd: Any = None
    account_id: Optional[str] = None
    project_id: Optional[str] = None
    tags: Dict[str, str] = field(default_factory=dict)
    description: Optional[str] = None
    source: Optional[Mapping[str, Any]] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "SpendRecord":
        tags = raw.get("tags")
        return cls(
            date=raw.get("date"),
            cloud_provider=raw.get("cloud_provider"),
            service=raw.get("service"),
            team=raw.get("team"),
            env=raw.get("env"),
            cost_usd=raw.get("cost_usd"),
            account_id=raw.get("account_id"),
            project_id=raw.get("project_id"),
            tags={str(k): _text(v) for k, v in tags.items()} if isinstance(tags, dict) else {},
            description=raw.get("description"),
            source=dict(raw),
        )

    @cached_property
    def cost(self) -> float:
        return coerce_cost(self.cost_usd)

    @cached_property
    def parsed_date(self) -> Optional[pd.Timestamp]:
        return parse_record_date(self.date)

    @property
    def provider_bucket(self) -> str:
        return _text(self.cloud_provider) or UNKNOWN

    @property
    def team_bucket(self) -> str:
        return _text(self.team) or UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        if self.source is not None:
            return dict(self.source)
        out: Dict[str, Any] = {
            "date": self.date,
            "cloud_provider": self.cloud_provider,
            "service": self.service,
            "team": self.team,
            "env": self.env,
            "cost_usd": self.cost_usd,
        }
        for key in ("account_id", "project_id", "description"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        if self.tags:
            out["tags"] = dict(self.tags)
        return out


def to_frame(records: Sequence[SpendRecord]) -> pd.DataFrame:
    """Project records onto a frame whose index is each record's position in ``records``."""
    rows = [
        {
            "cloud_provider": r.provider_bucket,
            "service": _text(r.service),
            "team": _text(r.team),
            "env": _text(r.env),
            "team_bucket": r.team_bucket,
            "cost": r.cost,
            "date": r.parsed_date,
        }
        for r in records
    ]
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    df["cost"] = pd.to_numeric(df["cost"], errors="coerce").fillna(0.0).astype(float)
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    return df


# ---------------- Loaders ----------------
def load_json_file(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise DataLoadError(path, f"Dataset file not found: {path.name}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise DataLoadError(path, f"Unable to read dataset {path.name}: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DataLoadError(path, f"Dataset {path.name} is not valid JSON: {exc.msg} (line {exc.lineno})") from exc


def load_dataset(cloud_provider: Optional[str], settings: Optional[Settings] = None) -> List[SpendRecord]:
    """Read the dataset for a provider selector from disk. Nothing is cached between calls."""
    settings = settings or get_settings()
    path = settings.dataset_path(cloud_provider)
    payload = load_json_file(path)
    if not isinstance(payload, list):
        raise DataLoadError(path, f"Dataset {path.name} must contain a JSON array of records")

    records: List[SpendRecord] = []
    for idx, raw in enumerate(payload):
        if not isinstance(raw, dict):
            logger.warning("Skipping entry %d in %s: expected an object, got %s", idx, path.name, type(raw).__name__)
            continue
        records.append(SpendRecord.from_mapping(raw))
    logger.debug("Loaded %d records from %s", len(records), path)
    return records
