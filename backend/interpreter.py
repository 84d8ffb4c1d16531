"""Turn extracted page facts into a plain-language, scored SEO report.

Each check is an ordered list of (predicate, builder) branches. The first
predicate that holds decides the status and copy, so branch order is the
tie-break (e.g. "too long" is checked before "too short"). Every rule
ends with a catch-all branch and emits exactly one MetricResult.

The interpreter is pure: same facts in, identical report out.
"""

import logging
import math
from collections.abc import Callable, Iterable, Sequence
from typing import NamedTuple

from models import (
    BreakdownSummary,
    MetricResult,
    PageFacts,
    Priority,
    ReportSummary,
    SeoBreakdown,
    SeoBreakdownCategory,
    SeoReport,
    SeoSection,
    Status,
    normalize_facts,
)

logger = logging.getLogger(__name__)

Predicate = Callable[[PageFacts], bool]
Builder = Callable[[PageFacts], MetricResult]

SEARCH_VISIBILITY = "Search visibility"
CONTENT_STRENGTH = "Content strength"
TECHNICAL_HEALTH = "Technical health"
TRUST_CREDIBILITY = "Trust & credibility"
GROWTH_SIGNALS = "Growth signals"

STATUS_POINTS: dict[str, int] = {
    "good": 100,
    "warning": 50,
    "critical": 0,
    "unknown": 70,
}

MAX_ACTIONS = 4
FALLBACK_ACTION = "Focus on getting more high-quality links from other websites."

CATEGORY_MIN_SCORE = 15
CATEGORY_MAX_SCORE = 95

# Breakdown key -> (sections, label, description). Order is the tie-break order.
CATEGORIES: dict[str, tuple[tuple[str, ...], str, str]] = {
    "onPage": (
        (SEARCH_VISIBILITY, CONTENT_STRENGTH),
        "On-page SEO",
        "Content and keyword optimization",
    ),
    "technical": (
        (TECHNICAL_HEALTH,),
        "Technical SEO",
        "Speed, crawlability, and indexability",
    ),
    "authority": (
        (TRUST_CREDIBILITY, GROWTH_SIGNALS),
        "Authority",
        "Links, trust, and domain strength",
    ),
}


def _always(_facts: PageFacts) -> bool:
    return True


class Rule(NamedTuple):
    branches: tuple[tuple[Predicate, Builder], ...]
    applies: Predicate = _always


def _fixed(
    title: str,
    status: Status,
    plain_explanation: str,
    why_it_matters: str,
    action: str,
) -> Builder:
    result = MetricResult(
        title=title,
        status=status,
        plain_explanation=plain_explanation,
        why_it_matters=why_it_matters,
        action=action,
    )
    return lambda _facts: result


def _first_match(rule: Rule, facts: PageFacts) -> MetricResult:
    for predicate, build in rule.branches:
        if predicate(facts):
            return build(facts)
    raise ValueError("rule has no catch-all branch")


# --- Search visibility ------------------------------------------------------


def _title_too_long(facts: PageFacts) -> MetricResult:
    length = facts.onpage.title.length
    return MetricResult(
        title="Title Length",
        status="critical",
        plain_explanation=f"Your title is too long ({length} characters).",
        why_it_matters=(
            "Google will cut off the end of long titles, making your link look messy "
            "and unprofessional to searchers."
        ),
        action="Shorten the title to under 60 characters.",
    )


TITLE_RULE = Rule(
    branches=(
        (
            lambda f: not f.onpage.title.exists,
            _fixed(
                "Page Title",
                "critical",
                "Your page doesn't have a title defined in the code.",
                "Google uses this title to show your page in search results. "
                "Without it, you look invisible or broken.",
                "Add a clear, short title between 30 and 60 characters.",
            ),
        ),
        (lambda f: f.onpage.title.length > 60, _title_too_long),
        (
            lambda f: f.onpage.title.length < 30,
            _fixed(
                "Title Length",
                "warning",
                "Your title is a bit too short.",
                "Short titles don't give Google enough context to rank you for different search terms.",
                "Add a few more descriptive words or your brand name to the title.",
            ),
        ),
        (
            _always,
            _fixed(
                "Title Length",
                "good",
                "Your title length is perfect.",
                "It will display fully on most screens, ensuring people see your full message.",
                "Keep it as is.",
            ),
        ),
    )
)

META_RULE = Rule(
    branches=(
        (
            lambda f: not f.onpage.meta.exists,
            _fixed(
                "Search Snippet (Meta)",
                "critical",
                "There is no description for this page in the search results.",
                "Google has to guess what your page is about, which often leads to less "
                "clicks from potential visitors.",
                "Add a compelling description of 120-160 characters.",
            ),
        ),
        (
            lambda f: f.onpage.meta.length < 100 or f.onpage.meta.length > 160,
            _fixed(
                "Search Snippet (Meta)",
                "warning",
                "The description of your page is either too short or too long.",
                "If it's too long, it gets cut off. If it's too short, it's not convincing "
                "enough for users to click.",
                "Aim for a length between 120 and 160 characters.",
            ),
        ),
        (
            _always,
            _fixed(
                "Search Snippet (Meta)",
                "good",
                "Your search result description is well-balanced.",
                "It helps you stand out and encourages more people to click on your link.",
                "No changes needed.",
            ),
        ),
    )
)

_SOCIAL_WHY = (
    "When people share your link on Facebook or Twitter, these signals ensure it "
    "looks beautiful with an image and title."
)

SOCIAL_PREVIEW_RULE = Rule(
    branches=(
        (
            lambda f: f.onpage.og.has_og,
            _fixed(
                "Social Media Preview",
                "good",
                "Social media preview signals are present.",
                _SOCIAL_WHY,
                "Check if the images look good.",
            ),
        ),
        (
            _always,
            _fixed(
                "Social Media Preview",
                "warning",
                "Missing specific signals for social media sharing.",
                _SOCIAL_WHY,
                "Add 'Open Graph' tags to control how your site looks on social media.",
            ),
        ),
    )
)


# --- Content strength -------------------------------------------------------


def _thin_content(facts: PageFacts) -> MetricResult:
    return MetricResult(
        title="Content Depth",
        status="critical",
        plain_explanation=f"This page is very 'thin' with only {facts.onpage.content.word_count} words.",
        why_it_matters=(
            "Google prefers pages that provide thorough answers. Short pages rarely rank "
            "on the first page."
        ),
        action="Expand your content with more helpful details, examples, or data.",
    )


def _missing_alt_text(facts: PageFacts) -> MetricResult:
    return MetricResult(
        title="Image accessibility",
        status="warning",
        plain_explanation=(
            f"{facts.onpage.images.alt_stats.missing} images on your site have no text descriptions."
        ),
        why_it_matters=(
            "Google cannot 'see' images. It uses these descriptions to understand what's "
            "in the picture and rank you in Image Search."
        ),
        action="Add descriptive 'alt text' to every image on your page.",
    )


H1_RULE = Rule(
    branches=(
        (
            lambda f: f.onpage.headings.h1_count == 0,
            _fixed(
                "Main Headline (H1)",
                "critical",
                "Google can't quickly understand what this specific page is about because "
                "the main headline is missing.",
                "The H1 is the primary signal to Google and visitors about the page's topic. "
                "Without it, your message is lost.",
                "Add one clear main headline (H1 tag) to the top of the page.",
            ),
        ),
        (
            lambda f: f.onpage.headings.h1_count > 1,
            _fixed(
                "Main Headlines (H1)",
                "warning",
                "You have multiple main headlines on this page.",
                "It's like reading a book with two different titles on the same cover; it "
                "confuses Google about your main focus.",
                "Keep only one main headline and turn the others into sub-headlines.",
            ),
        ),
        (
            _always,
            _fixed(
                "Main Headline (H1)",
                "good",
                "You have a clear, single main headline.",
                "Google knows exactly what the topic of this page is.",
                "Good job, no action needed.",
            ),
        ),
    )
)

CONTENT_DEPTH_RULE = Rule(
    branches=(
        (lambda f: f.onpage.content.word_count < 300, _thin_content),
        (
            lambda f: f.onpage.content.word_count < 600,
            _fixed(
                "Content Depth",
                "warning",
                "The content is okay, but it might not be enough to beat competitors.",
                "The top results in Google usually have between 1000 and 2000 words.",
                "Consider adding more value or answering common questions people have about this topic.",
            ),
        ),
        (
            _always,
            _fixed(
                "Content Depth",
                "good",
                "You have a solid amount of content on this page.",
                "This shows Google you are covering the topic seriously.",
                "Ensure the content stays updated and relevant.",
            ),
        ),
    )
)

IMAGE_ALT_RULE = Rule(
    branches=(
        (lambda f: f.onpage.images.alt_stats.missing > 0, _missing_alt_text),
        (
            _always,
            _fixed(
                "Image accessibility",
                "good",
                "All your images have text descriptions.",
                "This helps blind users and gives Google more keywords to rank you for.",
                "Perfect. No action needed.",
            ),
        ),
    ),
    applies=lambda f: f.onpage.images.alt_stats.total > 0,
)


# --- Technical health -------------------------------------------------------


def _binary_rule(
    passes: Predicate,
    title: str,
    failed_status: Status,
    why_it_matters: str,
    good_copy: tuple[str, str],
    failed_copy: tuple[str, str],
) -> Rule:
    """A yes/no check: good when `passes` holds, `failed_status` otherwise."""
    return Rule(
        branches=(
            (passes, _fixed(title, "good", good_copy[0], why_it_matters, good_copy[1])),
            (_always, _fixed(title, failed_status, failed_copy[0], why_it_matters, failed_copy[1])),
        )
    )


HTTPS_RULE = _binary_rule(
    lambda f: f.technical.https,
    "Connection Security",
    "critical",
    "Google downranks non-secure websites and browsers show a scary warning to your visitors.",
    ("Your connection is secure.", "No action needed."),
    (
        "Your website is flagged as 'Not Secure' by Google.",
        "Enable HTTPS (SSL certificate) immediately.",
    ),
)

MOBILE_RULE = _binary_rule(
    lambda f: f.technical.mobile_friendly,
    "Mobile Friendliness",
    "critical",
    "Over 60% of searches happen on mobile. Google uses the mobile version of your site to rank you.",
    ("Your site is built for mobile users.", "No action needed."),
    (
        "Your site might be hard to use on a phone.",
        "Check your 'viewport' settings and ensure text isn't too small.",
    ),
)

INDEXABILITY_RULE = _binary_rule(
    lambda f: not f.technical.noindex,
    "Search Visibility Lock",
    "critical",
    "If this is 'on', you will NEVER rank in Google, no matter how good your content is.",
    ("Google is allowed to show your site in results.", "Keep it as is."),
    ("Your site is currently hidden from Google.", "Remove the 'noindex' tag from your code."),
)

SITEMAP_RULE = _binary_rule(
    lambda f: f.technical.sitemap,
    "Google's Map (Sitemap)",
    "warning",
    "A sitemap helps Google find and crawl and index all your important pages faster.",
    ("You have a map for Google to follow.", "No action needed."),
    (
        "Google doesn't have an easy sitemap to find all your pages.",
        "Create a sitemap.xml file and submit it to Google.",
    ),
)


# --- Trust & credibility ----------------------------------------------------

_LINKING_WHY = (
    "Linking to your other pages helps Google understand your expertise and spreads "
    "'ranking power' throughout your site."
)


def _linked(status: Status, action: str) -> Builder:
    def build(facts: PageFacts) -> MetricResult:
        return MetricResult(
            title="Topic Connection",
            status=status,
            plain_explanation=f"You have {facts.trust.internal_links} internal links.",
            why_it_matters=_LINKING_WHY,
            action=action,
        )

    return build


INTERNAL_LINKS_RULE = Rule(
    branches=(
        (lambda f: f.trust.internal_links > 5, _linked("good", "Keep linking to relevant pages.")),
        (
            lambda f: f.trust.internal_links > 0,
            _linked("warning", "Add links to 5-10 other relevant pages on your website."),
        ),
        (
            _always,
            _fixed(
                "Topic Connection",
                "warning",
                "No links to other pages on your site found.",
                _LINKING_WHY,
                "Add links to 5-10 other relevant pages on your website.",
            ),
        ),
    )
)

SCHEMA_RULE = _binary_rule(
    lambda f: f.trust.has_schema,
    "Rich Search Results",
    "warning",
    "This code helps you get 'rich results' like star ratings, prices, or FAQ snippets that stand out.",
    ("You are using special code to speak to Google.", "Ensure the data is accurate."),
    (
        "You aren't using 'Schema' code on this page.",
        "Add 'LD+JSON' schema markup for your business or product.",
    ),
)


# --- Growth signals ---------------------------------------------------------
# Backlinks and domain history can't be read from the page itself. These stay
# "unknown" until an off-page data source is wired in.

REFERRING_DOMAINS_RULE = Rule(
    branches=(
        (
            _always,
            _fixed(
                "Other Sites Recommending You",
                "unknown",
                "We couldn't determine the number of websites linking to you.",
                "Getting links from other sites is the #1 way to build authority and outrank "
                "big competitors.",
                "Register for a free service like Google Search Console to see your backlinks.",
            ),
        ),
    )
)

DOMAIN_AUTHORITY_RULE = Rule(
    branches=(
        (
            _always,
            _fixed(
                "Domain Authority",
                "unknown",
                "Domain age and history could not be verified.",
                "Older, well-established sites often have an easier time ranking than brand new ones.",
                "Focus on creating high-quality, unique content to build your site's reputation over time.",
            ),
        ),
    )
)


SECTION_RULES: tuple[tuple[str, tuple[Rule, ...]], ...] = (
    (SEARCH_VISIBILITY, (TITLE_RULE, META_RULE, SOCIAL_PREVIEW_RULE)),
    (CONTENT_STRENGTH, (H1_RULE, CONTENT_DEPTH_RULE, IMAGE_ALT_RULE)),
    (TECHNICAL_HEALTH, (HTTPS_RULE, MOBILE_RULE, INDEXABILITY_RULE, SITEMAP_RULE)),
    (TRUST_CREDIBILITY, (INTERNAL_LINKS_RULE, SCHEMA_RULE)),
    (GROWTH_SIGNALS, (REFERRING_DOMAINS_RULE, DOMAIN_AUTHORITY_RULE)),
)


# --- Scoring helpers --------------------------------------------------------


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def status_points(status: str) -> int:
    # Anything that isn't good/warning/critical scores as unknown.
    return STATUS_POINTS.get(status, STATUS_POINTS["unknown"])


def priority_for(score: int) -> Priority:
    if score < 30:
        return "critical"
    if score < 70:
        return "warning"
    return "good"


def _all_metrics(sections: Iterable[SeoSection]) -> list[MetricResult]:
    return [metric for section in sections for metric in section.metrics]


def aggregate_score(sections: Sequence[SeoSection]) -> int:
    """Mean status points over every emitted metric, 0..100."""
    metrics = _all_metrics(sections)
    if not metrics:
        return 0
    total = sum(status_points(metric.status) for metric in metrics)
    return round_half_up(total / len(metrics))


def calculate_category(
    metrics: Sequence[MetricResult],
    label: str,
    description: str,
) -> SeoBreakdownCategory:
    total = len(metrics)
    passed = sum(1 for metric in metrics if metric.status == "good")
    if total > 0:
        score = clamp(round_half_up(passed * 100 / total), CATEGORY_MIN_SCORE, CATEGORY_MAX_SCORE)
    else:
        score = CATEGORY_MIN_SCORE
    return SeoBreakdownCategory(
        score=score,
        label=label,
        description=description,
        passed=passed,
        total=total,
        priority=priority_for(score),
    )


def collect_actions(sections: Sequence[SeoSection]) -> tuple[str, ...]:
    """Actions of the first few critical metrics, in section order."""
    critical = [metric for metric in _all_metrics(sections) if metric.status == "critical"]
    actions = tuple(metric.action for metric in critical[:MAX_ACTIONS])
    return actions or (FALLBACK_ACTION,)


def rank_areas(scores: Sequence[tuple[str, int]]) -> BreakdownSummary:
    """
    Pick weakest and strongest category from (key, score) pairs.
    sorted() is stable, so equal scores keep the input order.
    """
    ranked = sorted(scores, key=lambda item: item[1])
    weakest = ranked[0][0]
    return BreakdownSummary(
        weakest_area=weakest,
        strongest_area=ranked[-1][0],
        recommended_focus=weakest,
    )


def build_breakdown(sections: Sequence[SeoSection]) -> SeoBreakdown:
    by_name = {section.name: section for section in sections}
    categories: dict[str, SeoBreakdownCategory] = {}
    for key, (section_names, label, description) in CATEGORIES.items():
        metrics = [
            metric
            for name in section_names
            if name in by_name
            for metric in by_name[name].metrics
        ]
        categories[key] = calculate_category(metrics, label, description)

    summary = rank_areas([(key, category.score) for key, category in categories.items()])
    return SeoBreakdown(
        on_page=categories["onPage"],
        technical=categories["technical"],
        authority=categories["authority"],
        summary=summary,
    )


def interpret_seo_metrics(data: object) -> SeoReport:
    """
    Evaluate every rule against the page facts and assemble the report.
    Accepts PageFacts, a facts mapping (camelCase or snake_case), or None.
    Never raises on bad input: missing data is defaulted first.
    """
    facts = normalize_facts(data)

    sections = tuple(
        SeoSection(
            name=name,
            metrics=tuple(_first_match(rule, facts) for rule in rules if rule.applies(facts)),
        )
        for name, rules in SECTION_RULES
    )

    report = SeoReport(
        sections=sections,
        summary=ReportSummary(actions=collect_actions(sections)),
        score=aggregate_score(sections),
        seo_breakdown=build_breakdown(sections),
    )
    logger.debug(
        "Interpreted page facts: score=%s weakest=%s",
        report.score,
        report.seo_breakdown.summary.weakest_area,
    )
    return report


interpret = interpret_seo_metrics
