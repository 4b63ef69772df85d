"""Tests for record defaults and the dataset loader."""

from __future__ import annotations

import json

import pandas as pd
import pytest

from core.data import SpendRecord, coerce_cost, load_dataset, parse_record_date
from core.errors import DataLoadError
from core.settings import Settings


@pytest.mark.parametrize(
    "value, expected",
    [
        (12.5, 12.5),
        (3, 3.0),
        ("7.25", 7.25),
        (None, 0.0),
        ("", 0.0),
        ("n/a", 0.0),
        (True, 0.0),
        (float("nan"), 0.0),
        ("Infinity", 0.0),
        ({"amount": 4}, 0.0),
    ],
)
def test_coerce_cost(value, expected) -> None:
    assert coerce_cost(value) == expected


def test_parse_record_date_accepts_dates_and_datetimes() -> None:
    assert parse_record_date("2024-03-09") == pd.Timestamp(2024, 3, 9)
    assert parse_record_date("2024-03-09T18:30:00") == pd.Timestamp(2024, 3, 9)


def test_parse_record_date_keeps_the_written_calendar_date_for_offsets() -> None:
    # 23:30 at -05:00 is already the next day in UTC; the written date wins.
    assert parse_record_date("2024-01-31T23:30:00-05:00") == pd.Timestamp(2024, 1, 31)


@pytest.mark.parametrize("value", [None, "", "   ", "not-a-date", "2024-13-45", 20240101, "today", " NOW "])
def test_parse_record_date_rejects_unparseable_values(value) -> None:
    assert parse_record_date(value) is None


def test_record_defaults_for_missing_fields() -> None:
    record = SpendRecord.from_mapping({"service": "EC2"})
    assert record.cost == 0.0
    assert record.provider_bucket == "Unknown"
    assert record.team_bucket == "Unknown"
    assert record.parsed_date is None
    assert record.tags == {}


def test_record_to_dict_echoes_the_source_mapping() -> None:
    raw = {"date": "2024-01-01", "cost_usd": "9.5", "tags": {"owner": "core"}, "extra": 1}
    record = SpendRecord.from_mapping(raw)
    out = record.to_dict()
    assert out == raw
    out["cost_usd"] = 0
    assert record.to_dict()["cost_usd"] == "9.5"


def test_empty_record_to_dict_stays_empty() -> None:
    assert SpendRecord.from_mapping({}).to_dict() == {}
    assert SpendRecord(service="EC2").to_dict()["service"] == "EC2"


@pytest.mark.parametrize(
    "selector, expected",
    [("AWS", "aws_data.json"), ("gcp", "gcp_data.json"), ("All", "all_cloud_data.json"), (None, "all_cloud_data.json"), ("azure", "all_cloud_data.json")],
)
def test_dataset_path_selection(tmp_path, selector, expected) -> None:
    settings = Settings(data_dir=tmp_path)
    assert settings.dataset_path(selector) == tmp_path / expected


def test_load_dataset_reads_the_selected_file(settings) -> None:
    aws = load_dataset("AWS", settings)
    combined = load_dataset("All", settings)
    assert [r.cloud_provider for r in aws] == ["AWS", "AWS", "AWS"]
    assert len(combined) == 5
    assert combined[0].date == "2024-01-10"


def test_load_dataset_missing_file(tmp_path) -> None:
    with pytest.raises(DataLoadError) as excinfo:
        load_dataset("AWS", Settings(data_dir=tmp_path))
    assert "aws_data.json" in excinfo.value.message
    assert excinfo.value.details["path"].endswith("aws_data.json")


def test_load_dataset_invalid_json(tmp_path) -> None:
    (tmp_path / "gcp_data.json").write_text("[{oops", encoding="utf-8")
    with pytest.raises(DataLoadError, match="not valid JSON"):
        load_dataset("GCP", Settings(data_dir=tmp_path))


def test_load_dataset_requires_an_array(tmp_path) -> None:
    (tmp_path / "all_cloud_data.json").write_text(json.dumps({"records": []}), encoding="utf-8")
    with pytest.raises(DataLoadError, match="JSON array"):
        load_dataset("All", Settings(data_dir=tmp_path))


def test_load_dataset_skips_non_object_entries(tmp_path, caplog) -> None:
    payload = [{"service": "EC2", "cost_usd": 1}, "garbage", 3, {"service": "S3", "cost_usd": 2}]
    (tmp_path / "all_cloud_data.json").write_text(json.dumps(payload), encoding="utf-8")
    with caplog.at_level("WARNING"):
        records = load_dataset("All", Settings(data_dir=tmp_path))
    assert [r.service for r in records] == ["EC2", "S3"]
    assert "Skipping entry 1" in caplog.text


def test_load_dataset_reads_fresh_on_every_call(tmp_path, write_datasets) -> None:
    write_datasets()
    settings = Settings(data_dir=tmp_path)
    assert len(load_dataset("AWS", settings)) == 3
    write_datasets(aws=[{"service": "EC2", "cost_usd": 1}])
    assert len(load_dataset("AWS", settings)) == 1
