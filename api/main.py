from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.schemas import ErrorModel, SpendResponseModel
from core.errors import DataLoadError, ValidationError, error_response
from core.filters import parse_query
from core.logging_config import configure_logging
from core.response import build_spend_response
from core.settings import Settings, get_settings


settings = get_settings()
configure_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_title, version=settings.app_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


def provide_settings() -> Settings:
    return get_settings()


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        ),
    )


@app.get("/")
def root():
    return {"message": settings.app_title}


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get(
    "/api/data",
    response_model=SpendResponseModel,
    responses={400: {"model": ErrorModel}, 500: {"model": ErrorModel}},
)
def get_cloud_data(
    page: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    sort_order: Optional[str] = Query(default=None, alias="sortOrder"),
    cloud_provider: Optional[str] = Query(default=None),
    team: Optional[str] = Query(default=None),
    env: Optional[str] = Query(default=None),
    month: Optional[str] = Query(default=None),
    year: Optional[str] = Query(default=None),
    settings: Settings = Depends(provide_settings),
):
    raw = {
        "page": page,
        "limit": limit,
        "sortBy": sort_by,
        "sortOrder": sort_order,
        "cloud_provider": cloud_provider,
        "team": team,
        "env": env,
        "month": month,
        "year": year,
    }
    try:
        query = parse_query(raw)
    except ValidationError as exc:
        return _json(error_response(exc), status_code=400)

    try:
        return _json(build_spend_response(query, settings))
    except DataLoadError as exc:
        logger.error("Dataset load failed for %s: %s", query.cloud_provider, exc)
        return _json(error_response(exc), status_code=500)
    except Exception as exc:
        logger.exception("get_cloud_data failed")
        return _json(error_response(exc), status_code=500)
