from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AppliedFiltersModel(BaseModel):
    cloud_provider: str = "All"
    team: str = "All"
    env: str = "All"
    month: Optional[int] = None
    year: Optional[int] = None


class SortingModel(BaseModel):
    sortBy: str
    sortOrder: str


class MetaModel(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int
    hasNext: bool
    hasPrev: bool
    appliedFilters: AppliedFiltersModel
    sorting: Optional[SortingModel] = None


class TopServiceModel(BaseModel):
    service: str
    cost: float


class MonthlyPointModel(BaseModel):
    month: str
    total: float
    count: int


class TeamPointModel(BaseModel):
    team: str
    total: float
    count: int


class CloudPointModel(BaseModel):
    cloud: str
    total: float


class ChartDataModel(BaseModel):
    monthly: List[MonthlyPointModel] = Field(default_factory=list)
    byTeam: List[TeamPointModel] = Field(default_factory=list)
    byCloud: List[CloudPointModel] = Field(default_factory=list)


class SummaryModel(BaseModel):
    total: float
    byCloud: Dict[str, float] = Field(default_factory=dict)
    topServices: List[TopServiceModel] = Field(default_factory=list)
    charts: ChartDataModel = Field(default_factory=ChartDataModel)


class SpendRecordModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    date: Optional[str] = None
    cloud_provider: Optional[str] = None
    service: Optional[str] = None
    team: Optional[str] = None
    env: Optional[str] = None
    cost_usd: Any = None
    account_id: Optional[str] = None
    project_id: Optional[str] = None
    tags: Optional[Dict[str, str]] = None
    description: Optional[str] = None


class SpendResponseModel(BaseModel):
    meta: MetaModel
    summary: SummaryModel
    data: List[SpendRecordModel]


class ErrorModel(BaseModel):
    error: str
    message: str
