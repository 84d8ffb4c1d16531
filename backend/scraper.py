"""Page scraper: fetch one URL and extract the facts the interpreter scores.

Extracts title, meta description, headings, Open Graph, image alt text,
structured data, word count, keywords, internal links and the technical
flags (HTTPS, viewport, noindex, canonical, robots.txt, sitemap.xml).
Does NOT crawl subpages.
"""

import logging
import os
import re
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup
from dotenv import load_dotenv

from models import PageFacts

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

logger = logging.getLogger(__name__)

USER_AGENT = os.getenv("SEODUEL_USER_AGENT", "SEOduel-Bot/1.0").strip() or "SEOduel-Bot/1.0"
FETCH_TIMEOUT_SECONDS = float(os.getenv("SEODUEL_FETCH_TIMEOUT_SECONDS", "10"))
PROBE_TIMEOUT_SECONDS = float(os.getenv("SEODUEL_PROBE_TIMEOUT_SECONDS", "5"))

_REQUEST_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

STOP_WORDS = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "has", "he",
        "in", "is", "it", "its", "of", "on", "that", "the", "to", "was", "were",
        "will", "with", "i", "you", "your", "we", "they", "this", "or", "but", "not",
    }
)
TOP_KEYWORDS = 5

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")
_NON_CONTENT_TAGS = ["script", "style", "noscript", "iframe"]


class SeoDuelError(Exception):
    """Base error for page analysis."""


class InvalidURLError(SeoDuelError, ValueError):
    """The submitted URL is empty or unusable."""


class FetchError(SeoDuelError):
    """The page itself could not be downloaded."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url


@dataclass
class PageAnalysis:
    """Facts for one page plus the quick-look warnings shown next to them."""

    url: str
    facts: PageFacts
    warnings: list[str] = field(default_factory=list)


def normalize_url(url: str) -> str:
    target = str(url or "").strip()
    if not target:
        raise InvalidURLError("URL is required")
    if urlparse(target).scheme.lower() not in ("http", "https"):
        target = f"https://{target}"
    if not urlparse(target).netloc:
        raise InvalidURLError(f"Invalid URL: {url}")
    return target


def _meta_content(soup: BeautifulSoup, **attrs: object) -> str:
    tag = soup.find("meta", attrs=attrs)
    if tag and tag.get("content"):
        return (tag["content"] or "").strip()
    return ""


def extract_keywords(text: str, limit: int = TOP_KEYWORDS) -> list[dict]:
    """
    Top keywords by frequency, ignoring stop words and words of 2 chars or less.
    Density is relative to the meaningful words only.
    """
    words = [
        word
        for word in _PUNCTUATION.sub("", text.lower()).split()
        if len(word) > 2 and word not in STOP_WORDS
    ]
    if not words:
        return []

    total = len(words)
    # most_common keeps first-seen order for equal counts
    return [
        {"word": word, "count": count, "density": f"{count / total * 100:.2f}%"}
        for word, count in Counter(words).most_common(limit)
    ]


def _count_internal_links(soup: BeautifulSoup, page_url: str) -> int:
    parsed = urlparse(page_url)
    base_domain = (parsed.netloc or "").lower()
    internal = 0
    for a in soup.find_all("a", href=True):
        href = (a["href"] or "").strip()
        if not href or href.startswith("#") or href.lower().startswith(("javascript:", "mailto:", "tel:")):
            continue
        if href.startswith("/") and not href.startswith("//"):
            internal += 1
            continue
        resolved_host = (urlparse(urljoin(page_url, href)).netloc or "").lower()
        if resolved_host == base_domain:
            internal += 1
    return internal


def _alt_stats(soup: BeautifulSoup) -> dict:
    images = soup.find_all("img")
    missing = 0
    for img in images:
        alt = img.get("alt")
        if alt is None or (isinstance(alt, str) and alt.strip() == ""):
            missing += 1
    return {"total": len(images), "missing": missing}


def _has_structured_data(soup: BeautifulSoup) -> bool:
    for script_tag in soup.find_all("script", attrs={"type": re.compile(r"^application/ld\+json$", re.I)}):
        if (script_tag.string or "").strip():
            return True
    return False


def extract_onpage(soup: BeautifulSoup) -> dict:
    """On-page facts. Strips script/style/noscript/iframe from `soup` while counting words."""
    title_text = ""
    if soup.title:
        title_text = soup.title.get_text().strip()

    meta_desc = _meta_content(soup, name=re.compile(r"^description$", re.I)) or _meta_content(
        soup, property=re.compile(r"^og:description$", re.I)
    )

    h1_count = len(soup.find_all("h1"))
    h2_count = len(soup.find_all("h2"))
    h3_count = len(soup.find_all("h3"))

    has_og = any(
        _meta_content(soup, property=prop) for prop in ("og:title", "og:image", "og:description")
    )
    alt_stats = _alt_stats(soup)

    for tag in soup.find_all(_NON_CONTENT_TAGS):
        tag.decompose()

    body = soup.body
    if body is None:
        # no <body> tag: everything outside <head> is content
        if soup.head:
            soup.head.decompose()
        if soup.title:
            soup.title.decompose()
        body = soup
    body_text = _WHITESPACE.sub(" ", body.get_text(separator=" ")).strip()
    word_count = len(body_text.split()) if body_text else 0

    return {
        "title": {"text": title_text, "length": len(title_text), "exists": len(title_text) > 0},
        "meta": {"text": meta_desc, "length": len(meta_desc), "exists": len(meta_desc) > 0},
        "headings": {
            "h1Count": h1_count,
            "h2Count": h2_count,
            "h3Count": h3_count,
            "h1Exists": h1_count > 0,
            "h1Unique": h1_count == 1,
        },
        "og": {"hasOg": has_og},
        "images": {"altStats": alt_stats},
        "content": {"wordCount": word_count},
        "keywords": extract_keywords(body_text),
    }


def _probe(session: requests.Session, url: str) -> bool:
    try:
        response = session.head(
            url,
            headers=_REQUEST_HEADERS,
            timeout=PROBE_TIMEOUT_SECONDS,
            allow_redirects=True,
        )
    except requests.RequestException as exc:
        logger.warning("Auxiliary check failed for %s: %s", url, exc)
        return False
    return response.status_code == 200


def probe_robots_and_sitemap(session: requests.Session, page_url: str) -> tuple[bool, bool]:
    """HEAD /robots.txt and /sitemap.xml at the page's origin, in parallel."""
    parsed = urlparse(page_url)
    origin = f"{parsed.scheme}://{parsed.netloc}"
    with ThreadPoolExecutor(max_workers=2) as pool:
        robots = pool.submit(_probe, session, f"{origin}/robots.txt")
        sitemap = pool.submit(_probe, session, f"{origin}/sitemap.xml")
        return robots.result(), sitemap.result()


def extract_technical(soup: BeautifulSoup, page_url: str, session: requests.Session) -> dict:
    robots_meta = _meta_content(soup, name=re.compile(r"^robots$", re.I)).lower()
    viewport = _meta_content(soup, name=re.compile(r"^viewport$", re.I)).lower()
    canonical_tag = soup.find("link", attrs={"rel": "canonical"})

    has_robots_txt, has_sitemap = probe_robots_and_sitemap(session, page_url)
    return {
        "https": urlparse(page_url).scheme == "https",
        "mobileFriendly": "width=" in viewport,
        "noindex": "noindex" in robots_meta,
        "canonical": bool(canonical_tag and canonical_tag.get("href")),
        "robotsTxt": has_robots_txt,
        "sitemap": has_sitemap,
    }


def extract_trust(soup: BeautifulSoup, page_url: str) -> dict:
    return {
        "internalLinks": _count_internal_links(soup, page_url),
        "hasSchema": _has_structured_data(soup),
    }


def build_warnings(facts: PageFacts) -> list[str]:
    onpage = facts.onpage
    technical = facts.technical
    warnings: list[str] = []
    if not onpage.title.exists:
        warnings.append("Missing Title tag")
    if onpage.title.exists and (onpage.title.length < 30 or onpage.title.length > 60):
        warnings.append("Title length should be between 30-60 characters")
    if not onpage.meta.exists:
        warnings.append("Missing Meta Description")
    if not onpage.headings.h1_exists:
        warnings.append("Missing H1 tag")
    if onpage.headings.h1_count > 1:
        warnings.append("Multiple H1 tags found")
    if onpage.content.word_count < 300:
        warnings.append("Low word count (less than 300 words)")
    if not technical.https:
        warnings.append("Site is not using HTTPS")
    if technical.noindex:
        warnings.append("Page is blocked from indexing (noindex)")
    return warnings


def _fetch_html(session: requests.Session, url: str) -> tuple[str, str]:
    try:
        response = session.get(url, headers=_REQUEST_HEADERS, timeout=FETCH_TIMEOUT_SECONDS)
    except requests.RequestException as exc:
        raise FetchError(url, f"Failed to fetch URL: {exc}") from exc

    if not response.ok:
        raise FetchError(url, f"Failed to fetch URL: {response.status_code} {response.reason}")

    response.encoding = response.apparent_encoding or "utf-8"
    return response.text, response.url or url


def parse_page(html: str, page_url: str, session: requests.Session) -> PageFacts:
    """Build PageFacts from already-downloaded HTML."""
    soup = BeautifulSoup(html, "html.parser")
    # Trust and technical read tags that extract_onpage strips.
    trust = extract_trust(soup, page_url)
    technical = extract_technical(soup, page_url, session)
    onpage = extract_onpage(soup)
    return PageFacts.model_validate({"onpage": onpage, "technical": technical, "trust": trust})


def analyze_page(url: str, session: requests.Session | None = None) -> PageAnalysis:
    """
    Fetch `url` and return its facts and warnings.
    Raises InvalidURLError for an empty URL and FetchError when the page
    can't be downloaded. robots.txt/sitemap.xml failures only count as absent.
    """
    target = normalize_url(url)
    owns_session = session is None
    http = session or requests.Session()
    try:
        html, final_url = _fetch_html(http, target)
        facts = parse_page(html, final_url, http)
    finally:
        if owns_session:
            http.close()

    warnings = build_warnings(facts)
    logger.info("Analyzed %s: %d warning(s)", target, len(warnings))
    return PageAnalysis(url=target, facts=facts, warnings=warnings)
