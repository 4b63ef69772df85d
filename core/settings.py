"""Runtime configuration read from environment variables."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field, field_validator


REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_ORIGINS = ["http://localhost:5173", "http://localhost:8501"]


class Settings(BaseModel):
    app_title: str = Field(default="Cloud Spend API")
    app_version: str = Field(default="0.1.0")

    data_dir: Path = Field(default=REPO_ROOT / "data")
    aws_file: str = Field(default="aws_data.json")
    gcp_file: str = Field(default="gcp_data.json")
    all_file: str = Field(default="all_cloud_data.json")

    allowed_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_ORIGINS))
    log_level: str = Field(default="info")

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: Iterable[str] | str | None) -> List[str]:
        if value is None:
            return list(DEFAULT_ORIGINS)
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return list(value)

    @field_validator("data_dir", mode="before")
    @classmethod
    def _parse_data_dir(cls, value: str | Path) -> Path:
        path = value if isinstance(value, Path) else Path(value)
        if not path.is_absolute():
            path = REPO_ROOT.joinpath(path).resolve()
        return path

    def dataset_path(self, cloud_provider: Optional[str]) -> Path:
        """Pick the dataset file for a provider selector; unknown selectors get the combined file."""
        selector = str(cloud_provider or "").strip().lower()
        if selector == "aws":
            return self.data_dir / self.aws_file
        if selector == "gcp":
            return self.data_dir / self.gcp_file
        return self.data_dir / self.all_file

    @classmethod
    def from_environment(cls) -> "Settings":
        env = os.environ
        fields = cls.model_fields
        data = {
            "app_title": env.get("API_TITLE", fields["app_title"].default),
            "app_version": env.get("API_VERSION", fields["app_version"].default),
            "data_dir": env.get("SPEND_DATA_DIR", fields["data_dir"].default),
            "aws_file": env.get("SPEND_AWS_FILE", fields["aws_file"].default),
            "gcp_file": env.get("SPEND_GCP_FILE", fields["gcp_file"].default),
            "all_file": env.get("SPEND_ALL_FILE", fields["all_file"].default),
            "allowed_origins": env.get("CORS_ORIGINS"),
            "log_level": env.get("LOG_LEVEL", fields["log_level"].default),
        }
        return cls.model_validate(data)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()


__all__ = ["Settings", "get_settings", "REPO_ROOT"]
