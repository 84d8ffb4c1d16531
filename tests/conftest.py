"""
Pytest Configuration and Shared Fixtures

Fact payloads are plain dicts shaped like the extractor's JSON output.
"""

import copy
from typing import Any, Callable, Dict

import pytest


# ============================================================================
# Fact Payloads
# ============================================================================

GOOD_FACTS: Dict[str, Any] = {
    "onpage": {
        "title": {"text": "t" * 45, "length": 45, "exists": True},
        "meta": {"text": "m" * 130, "length": 130, "exists": True},
        "headings": {"h1Count": 1, "h2Count": 4, "h3Count": 2, "h1Exists": True, "h1Unique": True},
        "og": {"hasOg": True},
        "images": {"altStats": {"total": 4, "missing": 0}},
        "content": {"wordCount": 1200},
    },
    "technical": {"https": True, "mobileFriendly": True, "noindex": False, "sitemap": True},
    "trust": {"internalLinks": 12, "hasSchema": True},
}


@pytest.fixture
def good_facts() -> Dict[str, Any]:
    """A page that passes every on-page and technical check."""
    return copy.deepcopy(GOOD_FACTS)


@pytest.fixture
def make_facts() -> Callable[..., Dict[str, Any]]:
    """
    Build a variant of GOOD_FACTS. Keyword names are paths joined by
    double underscores, e.g. make_facts(onpage__title__length=61).
    """

    def _make(**changes: Any) -> Dict[str, Any]:
        facts = copy.deepcopy(GOOD_FACTS)
        for path, value in changes.items():
            *parents, leaf = path.split("__")
            node = facts
            for key in parents:
                node = node.setdefault(key, {})
            node[leaf] = value
        return facts

    return _make
