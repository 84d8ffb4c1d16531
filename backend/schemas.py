"""Pydantic schemas for API request/response."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from models import OnPageFacts, PageFacts, SeoReport, TechnicalFacts, TrustFacts


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyzeRequest(_ApiModel):
    """Request body for POST /analyze."""

    url: str

    @field_validator("url", mode="before")
    @classmethod
    def normalize_url_field(cls, value: object) -> str:
        return str(value or "").strip()


class AnalyzeResponse(_ApiModel):
    """Response for POST /analyze: the raw extracted facts."""

    url: str
    status: Literal["ok"] = "ok"
    onpage: OnPageFacts
    technical: TechnicalFacts
    trust: TrustFacts
    warnings: list[str]


class CompareRequest(_ApiModel):
    """Request body for POST /compare and POST /compare/ai."""

    user_url: str
    competitor_url: str

    @field_validator("user_url", "competitor_url", mode="before")
    @classmethod
    def normalize_text_fields(cls, value: object) -> str:
        return str(value or "").strip()


class MetricSnapshot(_ApiModel):
    """One column of the comparison table."""

    title: str
    isTitleGood: bool
    desc: str
    isDescGood: bool
    headings: str
    isHeadingsGood: bool
    wc: int
    mob: str
    isMobGood: bool


class SiteResponse(_ApiModel):
    """Everything the UI shows for one side of the duel."""

    url: str
    facts: PageFacts
    report: SeoReport
    warnings: list[str]
    snapshot: MetricSnapshot


class CompareResponse(_ApiModel):
    """Response for POST /compare."""

    user_score: int
    comp_score: int
    user_wins: bool
    user: SiteResponse
    competitor: SiteResponse


class SnapshotPair(_ApiModel):
    user: MetricSnapshot
    comp: MetricSnapshot


class AICompareResponse(_ApiModel):
    """Response for POST /compare/ai."""

    user_score: int
    comp_score: int
    user_wins: bool
    metrics: SnapshotPair
    source: Literal["ai", "fallback"]
