"""
Claude API key must be defined in a .env file in the backend root:

ANTHROPIC_API_KEY=your_real_key_here

The app loads environment variables automatically using python-dotenv.

This is the alternate comparison path: Claude estimates both sites from
their domains alone. Without a key, or on any failure, a fixed mock
comparison is returned so the UI keeps working.
"""

import json
import logging
import os
import random
import time
from pathlib import Path

from anthropic import Anthropic
from dotenv import load_dotenv

from models import AIComparisonResult, SnapshotData

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

logger = logging.getLogger(__name__)

MODEL_CANDIDATES = [
    os.getenv("CLAUDE_MODEL", "").strip(),
    "claude-3-5-sonnet-latest",
    "claude-3-haiku-20240307",
]
MODEL_CANDIDATES = [m for m in MODEL_CANDIDATES if m]
TEMPERATURE = 0.2
MAX_TOKENS = int(os.getenv("CLAUDE_MAX_TOKENS", "1200"))
MAX_RETRIES = int(os.getenv("CLAUDE_MAX_RETRIES", "3"))
RETRY_BASE_SECONDS = float(os.getenv("CLAUDE_RETRY_BASE_SECONDS", "1.0"))

SYSTEM_MESSAGE = """You are an SEO expert. Analyze the provided websites (simulated based on their domain names and typical performance) and return a comparison JSON.

Return strictly valid JSON with this structure:
{
  "userScore": number (0-100),
  "compScore": number (0-100),
  "metrics": {
    "user": {
      "title": string (e.g. "55 chars"),
      "isTitleGood": boolean,
      "desc": string ("Optimized" or "Missing"),
      "isDescGood": boolean,
      "headings": string ("Well Structured" or "Unstructured"),
      "isHeadingsGood": boolean,
      "wc": number (estimated word count),
      "mob": string ("Yes" or "Issues Found"),
      "isMobGood": boolean
    },
    "comp": { ... same structure ... }
  }
}

Rule: If a site looks like a major brand (google, apple, etc.), give it high scores. If it looks like a test or small site, vary the scores.
Do not include markdown, code fences, or text outside JSON."""

USER_TEMPLATE = """Compare these two websites:
1. User Site: {user_url}
2. Competitor Site: {competitor_url}"""

_FALLBACK_USER: SnapshotData = {
    "title": "60 chars",
    "isTitleGood": True,
    "desc": "Optimized",
    "isDescGood": True,
    "headings": "Well Structured",
    "isHeadingsGood": True,
    "wc": 1500,
    "mob": "Yes",
    "isMobGood": True,
}

_FALLBACK_COMP: SnapshotData = {
    "title": "40 chars",
    "isTitleGood": False,
    "desc": "Missing",
    "isDescGood": False,
    "headings": "Unstructured",
    "isHeadingsGood": False,
    "wc": 800,
    "mob": "Issues Found",
    "isMobGood": False,
}


def _fallback_result() -> AIComparisonResult:
    return {
        "userScore": 75,
        "compScore": 60,
        "userWins": True,
        "metrics": {"user": dict(_FALLBACK_USER), "comp": dict(_FALLBACK_COMP)},  # type: ignore[dict-item]
        "source": "fallback",
    }


def _extract_json(text: str) -> dict | None:
    if not text:
        return None

    text = text.strip()

    # Remove markdown fences
    if text.startswith("```"):
        text = text.replace("```json", "").replace("```", "").strip()

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1:
        return None

    json_str = (
        text[start : end + 1]
        .replace("“", '"')
        .replace("”", '"')
        .replace("‘", "'")
        .replace("’", "'")
    )
    try:
        parsed = json.loads(json_str)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def _extract_response_text(response: object) -> str:
    content = ""
    for block in getattr(response, "content", []) or []:
        text = getattr(block, "text", None)
        if text:
            content += text
    return content.strip()


def _is_retryable_error(exc: Exception) -> bool:
    msg = str(exc).lower()
    retry_tokens = (
        "overloaded",
        "529",
        "rate limit",
        "rate_limit",
        "429",
        "500",
        "502",
        "503",
        "504",
        "timeout",
    )
    return any(token in msg for token in retry_tokens)


def _retry_delay(attempt: int) -> float:
    return RETRY_BASE_SECONDS * (2 ** attempt) + random.uniform(0, 0.35)


def _call_claude(client: Anthropic, user_message: str) -> str:
    last_error: Exception | None = None

    for model in MODEL_CANDIDATES:
        for attempt in range(MAX_RETRIES):
            try:
                response = client.messages.create(
                    model=model,
                    max_tokens=MAX_TOKENS,
                    system=SYSTEM_MESSAGE,
                    messages=[{"role": "user", "content": user_message}],
                    temperature=TEMPERATURE,
                )
                content = _extract_response_text(response)
                if getattr(response, "stop_reason", None) == "max_tokens":
                    logger.warning("Claude output hit max_tokens for model=%s", model)
                if content:
                    return content

                last_error = RuntimeError("Empty Claude response content.")
                if attempt < MAX_RETRIES - 1:
                    delay = _retry_delay(attempt)
                    logger.warning("Claude retry: model=%s empty-content wait=%.2fs", model, delay)
                    time.sleep(delay)
                    continue
            except Exception as e:
                last_error = e
                if _is_retryable_error(e) and attempt < MAX_RETRIES - 1:
                    delay = _retry_delay(attempt)
                    logger.warning("Claude retry: model=%s attempt=%d wait=%.2fs", model, attempt + 1, delay)
                    time.sleep(delay)
                    continue
            break

    if last_error is not None:
        raise last_error
    return ""


def _normalize_snapshot(raw: object, fallback: SnapshotData) -> SnapshotData:
    if not isinstance(raw, dict):
        return dict(fallback)  # type: ignore[return-value]

    def text(key: str) -> str:
        value = raw.get(key)
        return str(value).strip() if value is not None else fallback[key]  # type: ignore[literal-required]

    def flag(key: str) -> bool:
        value = raw.get(key)
        return value if isinstance(value, bool) else fallback[key]  # type: ignore[literal-required]

    wc = raw.get("wc")
    return {
        "title": text("title"),
        "isTitleGood": flag("isTitleGood"),
        "desc": text("desc"),
        "isDescGood": flag("isDescGood"),
        "headings": text("headings"),
        "isHeadingsGood": flag("isHeadingsGood"),
        "wc": max(0, int(wc)) if isinstance(wc, (int, float)) and not isinstance(wc, bool) else 0,
        "mob": text("mob"),
        "isMobGood": flag("isMobGood"),
    }


def _normalize_result(raw: dict) -> AIComparisonResult | None:
    """Shape Claude's JSON into AIComparisonResult; None when scores are unusable."""

    def score(v: object) -> int | None:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return None
        return int(min(100, max(0, round(v))))

    user_score = score(raw.get("userScore"))
    comp_score = score(raw.get("compScore"))
    if user_score is None or comp_score is None:
        return None

    metrics = raw.get("metrics") if isinstance(raw.get("metrics"), dict) else {}
    return {
        "userScore": user_score,
        "compScore": comp_score,
        "userWins": user_score >= comp_score,
        "metrics": {
            "user": _normalize_snapshot(metrics.get("user"), _FALLBACK_USER),
            "comp": _normalize_snapshot(metrics.get("comp"), _FALLBACK_COMP),
        },
        "source": "ai",
    }


def compare_with_ai(user_url: str, competitor_url: str) -> AIComparisonResult:
    """
    Ask Claude for a rough comparison of two sites.
    On API/key/network/JSON failure, returns the mock comparison. Never raises.
    """
    try:
        api_key = os.getenv("ANTHROPIC_API_KEY", "").strip()
        if not api_key:
            logger.error("ANTHROPIC_API_KEY not found in environment; using mock comparison.")
            return _fallback_result()

        client = Anthropic(api_key=api_key)
        content = _call_claude(
            client,
            USER_TEMPLATE.format(user_url=user_url.strip(), competitor_url=competitor_url.strip()),
        )
        logger.debug("Raw Claude comparison response: %s", content)

        parsed = _extract_json(content)
        if parsed is None:
            logger.warning("Claude comparison was not valid JSON; using mock comparison.")
            return _fallback_result()

        normalized = _normalize_result(parsed)
        if normalized is None:
            logger.warning("Claude comparison had no usable scores; using mock comparison.")
            return _fallback_result()
        return normalized
    except Exception as e:
        logger.error("Claude comparison failed: %s", e)
        return _fallback_result()
