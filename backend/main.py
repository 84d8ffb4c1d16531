"""SEOduel API – FastAPI app: analyze, interpret and compare two pages."""

import logging
import os
from typing import Any

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from ai_service import compare_with_ai
from comparison import SiteResult, compare_sites
from interpreter import interpret_seo_metrics
from models import SeoReport
from schemas import (
    AICompareResponse,
    AnalyzeRequest,
    AnalyzeResponse,
    CompareRequest,
    CompareResponse,
    SiteResponse,
)
from scraper import FetchError, InvalidURLError, analyze_page

logging.basicConfig(
    level=os.getenv("SEODUEL_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="SEOduel API",
    description="Side-by-side SEO comparison of two web pages",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _site_response(site: SiteResult) -> SiteResponse:
    return SiteResponse(
        url=site.url,
        facts=site.facts,
        report=site.report,
        warnings=site.warnings,
        snapshot=site.snapshot,
    )


@app.post("/analyze", response_model=AnalyzeResponse)
def analyze(body: AnalyzeRequest) -> AnalyzeResponse:
    """Fetch one page and return the extracted facts and warnings."""
    try:
        analysis = analyze_page(body.url)
    except InvalidURLError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except FetchError as e:
        logger.warning("Analysis failed for %s: %s", e.url, e)
        raise HTTPException(status_code=502, detail=str(e)) from e

    return AnalyzeResponse(
        url=analysis.url,
        onpage=analysis.facts.onpage,
        technical=analysis.facts.technical,
        trust=analysis.facts.trust,
        warnings=analysis.warnings,
    )


@app.post("/interpret", response_model=SeoReport)
def interpret(facts: dict[str, Any] | None = Body(default=None)) -> SeoReport:
    """Score an already-extracted facts payload. Missing fields default to 0/false."""
    return interpret_seo_metrics(facts)


@app.post("/compare", response_model=CompareResponse)
def compare(body: CompareRequest) -> CompareResponse:
    """
    Pipeline: fetch both pages -> extract facts -> interpret each -> pick winner.
    """
    if not body.user_url or not body.competitor_url:
        raise HTTPException(status_code=400, detail="Both URLs are required.")

    try:
        duel = compare_sites(body.user_url, body.competitor_url)
    except InvalidURLError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except FetchError as e:
        logger.warning("Comparison failed for %s: %s", e.url, e)
        raise HTTPException(status_code=502, detail=str(e)) from e

    return CompareResponse(
        user_score=duel.user_score,
        comp_score=duel.comp_score,
        user_wins=duel.user_wins,
        user=_site_response(duel.user),
        competitor=_site_response(duel.competitor),
    )


@app.post("/compare/ai", response_model=AICompareResponse)
def compare_ai(body: CompareRequest) -> AICompareResponse:
    """Domain-only estimate from Claude; falls back to mock data, never errors."""
    if not body.user_url or not body.competitor_url:
        raise HTTPException(status_code=400, detail="Both URLs are required.")

    result = compare_with_ai(body.user_url, body.competitor_url)
    return AICompareResponse.model_validate(result)


@app.get("/health")
def health() -> dict:
    """Health check for deployment."""
    return {"status": "ok"}
