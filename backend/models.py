"""Data models and types used across the backend.

Page facts (input to the interpreter) and the SEO report (its output)
are frozen pydantic models. JSON uses camelCase keys; Python code uses
the snake_case attribute names.

Types for the AI comparison output live here too.
"""

import logging
from collections.abc import Mapping
from typing import Annotated, Any, Literal, TypedDict

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

Status = Literal["good", "warning", "critical", "unknown"]
Priority = Literal["good", "warning", "critical"]

_TRUE_STRINGS = {"1", "true", "yes", "on"}


def _as_count(value: object) -> int:
    """Coerce any extractor value into a non-negative integer count."""
    if isinstance(value, bool):
        return int(value)
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, number)


def _as_flag(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if isinstance(value, (bool, int, float)):
        return bool(value)
    return False


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return str(value)


def _as_record(value: object) -> object:
    if isinstance(value, BaseModel):
        # re-validated field by field, so a record of another class still fits
        return value.model_dump()
    if isinstance(value, Mapping):
        return value
    return {}


Count = Annotated[int, BeforeValidator(_as_count)]
Flag = Annotated[bool, BeforeValidator(_as_flag)]
Text = Annotated[str, BeforeValidator(_as_text)]
Record = BeforeValidator(_as_record)


class _FactRecord(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


# --- Page facts -------------------------------------------------------------


class TitleFacts(_FactRecord):
    text: Text = ""
    length: Count = 0
    exists: Flag = False


class MetaFacts(TitleFacts):
    """Meta description; same shape as the title record."""


class HeadingFacts(_FactRecord):
    h1_count: Count = 0
    h2_count: Count = 0
    h3_count: Count = 0
    h1_exists: Flag = False
    h1_unique: Flag = False


class OgFacts(_FactRecord):
    has_og: Flag = False


class AltStats(_FactRecord):
    total: Count = 0
    missing: Count = 0


class ImageFacts(_FactRecord):
    alt_stats: Annotated[AltStats, Record] = Field(default_factory=AltStats)


class ContentFacts(_FactRecord):
    word_count: Count = 0


class Keyword(_FactRecord):
    word: Text = ""
    count: Count = 0
    density: Text = "0.00%"


class OnPageFacts(_FactRecord):
    title: Annotated[TitleFacts, Record] = Field(default_factory=TitleFacts)
    meta: Annotated[MetaFacts, Record] = Field(default_factory=MetaFacts)
    headings: Annotated[HeadingFacts, Record] = Field(default_factory=HeadingFacts)
    og: Annotated[OgFacts, Record] = Field(default_factory=OgFacts)
    images: Annotated[ImageFacts, Record] = Field(default_factory=ImageFacts)
    content: Annotated[ContentFacts, Record] = Field(default_factory=ContentFacts)
    keywords: tuple[Keyword, ...] = ()

    @field_validator("keywords", mode="before")
    @classmethod
    def keep_keyword_records(cls, value: object) -> list:
        if not isinstance(value, (list, tuple)):
            return []
        return [item for item in value if isinstance(item, (Mapping, BaseModel))]


class TechnicalFacts(_FactRecord):
    https: Flag = False
    mobile_friendly: Flag = False
    noindex: Flag = False
    sitemap: Flag = False
    canonical: Flag = False
    robots_txt: Flag = False


class TrustFacts(_FactRecord):
    internal_links: Count = 0
    has_schema: Flag = False


class PageFacts(_FactRecord):
    """Everything the extractor learned about one page."""

    onpage: Annotated[OnPageFacts, Record] = Field(default_factory=OnPageFacts)
    technical: Annotated[TechnicalFacts, Record] = Field(default_factory=TechnicalFacts)
    trust: Annotated[TrustFacts, Record] = Field(default_factory=TrustFacts)


def normalize_facts(raw: object) -> PageFacts:
    """
    Turn whatever the extractor (or an API client) handed us into PageFacts.
    Missing or malformed fields become 0, False or "". Never raises.
    """
    if isinstance(raw, PageFacts):
        return raw
    if not isinstance(raw, Mapping):
        return PageFacts()
    try:
        return PageFacts.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Discarding malformed page facts: %s", exc)
        return PageFacts()


# --- Report -----------------------------------------------------------------


class _ReportRecord(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class MetricResult(_ReportRecord):
    title: str
    status: Status
    plain_explanation: str
    why_it_matters: str
    action: str


class SeoSection(_ReportRecord):
    name: str
    metrics: tuple[MetricResult, ...]


class SeoBreakdownCategory(_ReportRecord):
    score: int
    label: str
    description: str
    passed: int
    total: int
    priority: Priority


class BreakdownSummary(_ReportRecord):
    weakest_area: str
    strongest_area: str
    recommended_focus: str


class SeoBreakdown(_ReportRecord):
    on_page: SeoBreakdownCategory
    technical: SeoBreakdownCategory
    authority: SeoBreakdownCategory
    summary: BreakdownSummary


class ReportSummary(_ReportRecord):
    actions: tuple[str, ...]


class SeoReport(_ReportRecord):
    sections: tuple[SeoSection, ...]
    summary: ReportSummary
    score: int
    seo_breakdown: SeoBreakdown

    def section(self, name: str) -> SeoSection | None:
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# --- AI comparison ----------------------------------------------------------


class SnapshotData(TypedDict):
    """One row of the side-by-side comparison table."""

    title: str
    isTitleGood: bool
    desc: str
    isDescGood: bool
    headings: str
    isHeadingsGood: bool
    wc: int
    mob: str
    isMobGood: bool


class AIComparisonResult(TypedDict):
    """Structured JSON returned by the AI comparison service."""

    userScore: int
    compScore: int
    userWins: bool
    metrics: dict[str, SnapshotData]
    source: str
