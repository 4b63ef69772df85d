"""Shared fixtures: temporary datasets, settings and an API client."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.data import SpendRecord  # noqa: E402
from core.settings import Settings, get_settings  # noqa: E402


AWS_RECORDS: List[Dict[str, Any]] = [
    {"date": "2024-01-10", "cloud_provider": "AWS", "service": "EC2", "team": "Core", "env": "prod", "cost_usd": 10},
    {"date": "2024-02-05", "cloud_provider": "AWS", "service": "S3", "team": "Core", "env": "prod", "cost_usd": 20},
    {"date": "2024-02-20", "cloud_provider": "AWS", "service": "EC2", "team": "Core", "env": "dev", "cost_usd": 30},
]

GCP_RECORDS: List[Dict[str, Any]] = [
    {"date": "2024-01-15", "cloud_provider": "GCP", "service": "BigQuery", "team": "Data", "env": "prod", "cost_usd": 40.5},
    {"date": "2024-03-01", "cloud_provider": "GCP", "service": "GKE", "team": "Web", "env": "staging", "cost_usd": 12.25},
]


def make_records(rows: List[Dict[str, Any]]) -> List[SpendRecord]:
    return [SpendRecord.from_mapping(r) for r in rows]


@pytest.fixture
def write_datasets(tmp_path: Path) -> Callable[..., Path]:
    def factory(
        aws: Optional[Any] = None,
        gcp: Optional[Any] = None,
        combined: Optional[Any] = None,
    ) -> Path:
        aws = AWS_RECORDS if aws is None else aws
        gcp = GCP_RECORDS if gcp is None else gcp
        combined = list(aws) + list(gcp) if combined is None else combined
        for name, payload in [("aws_data.json", aws), ("gcp_data.json", gcp), ("all_cloud_data.json", combined)]:
            (tmp_path / name).write_text(json.dumps(payload), encoding="utf-8")
        return tmp_path

    return factory


@pytest.fixture
def settings(tmp_path: Path, write_datasets) -> Settings:
    write_datasets()
    return Settings(data_dir=tmp_path)


@pytest.fixture
def app(settings: Settings):
    import api.main as main_module

    fastapi_app = main_module.app
    fastapi_app.dependency_overrides[main_module.provide_settings] = lambda: settings
    try:
        yield fastapi_app
    finally:
        fastapi_app.dependency_overrides.pop(main_module.provide_settings, None)
        get_settings.cache_clear()


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app) as test_client:
        yield test_client
