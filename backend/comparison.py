"""Side-by-side duel: analyze two sites, score both, pick a winner."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from interpreter import interpret_seo_metrics
from models import PageFacts, SeoReport, SnapshotData
from scraper import PageAnalysis, analyze_page

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SiteResult:
    url: str
    facts: PageFacts
    report: SeoReport
    warnings: list[str]
    snapshot: SnapshotData


@dataclass(frozen=True)
class DuelResult:
    user: SiteResult
    competitor: SiteResult

    @property
    def user_score(self) -> int:
        return self.user.report.score

    @property
    def comp_score(self) -> int:
        return self.competitor.report.score

    @property
    def user_wins(self) -> bool:
        # A draw goes to the user.
        return self.user_score >= self.comp_score


def build_snapshot(facts: PageFacts) -> SnapshotData:
    """Condense facts into one row of the comparison table."""
    title = facts.onpage.title
    headings = facts.onpage.headings

    if not headings.h1_exists:
        heading_label = "Missing H1"
    elif headings.h1_unique:
        heading_label = "Well Structured"
    else:
        heading_label = "Multiple H1s"

    return {
        "title": f"{title.length} chars" if title.exists else "Missing",
        "isTitleGood": title.exists and 30 <= title.length <= 60,
        "desc": "Optimized" if facts.onpage.meta.exists else "Missing",
        "isDescGood": facts.onpage.meta.exists,
        "headings": heading_label,
        "isHeadingsGood": headings.h1_exists and headings.h1_unique,
        "wc": facts.onpage.content.word_count,
        "mob": "Yes" if facts.technical.mobile_friendly else "Issues Found",
        "isMobGood": facts.technical.mobile_friendly,
    }


def score_site(analysis: PageAnalysis) -> SiteResult:
    return SiteResult(
        url=analysis.url,
        facts=analysis.facts,
        report=interpret_seo_metrics(analysis.facts),
        warnings=list(analysis.warnings),
        snapshot=build_snapshot(analysis.facts),
    )


def compare_sites(user_url: str, competitor_url: str) -> DuelResult:
    """
    Fetch both pages concurrently and interpret each one independently.
    InvalidURLError / FetchError from either side propagate to the caller.
    """
    with ThreadPoolExecutor(max_workers=2) as pool:
        user_future = pool.submit(analyze_page, user_url)
        competitor_future = pool.submit(analyze_page, competitor_url)
        user_analysis = user_future.result()
        competitor_analysis = competitor_future.result()

    duel = DuelResult(user=score_site(user_analysis), competitor=score_site(competitor_analysis))
    logger.info(
        "Duel %s (%d) vs %s (%d): %s",
        duel.user.url,
        duel.user_score,
        duel.competitor.url,
        duel.comp_score,
        "user wins" if duel.user_wins else "competitor wins",
    )
    return duel
