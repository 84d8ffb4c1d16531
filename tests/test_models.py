"""
Test Suite for Page Fact Normalization

Missing or malformed extractor output must resolve to 0 / False / "".
"""

import pytest
from pydantic import ValidationError

from models import AltStats, MetaFacts, PageFacts, TitleFacts, normalize_facts


class TestNormalizeFacts:
    """normalize_facts never raises and always fills defaults."""

    @pytest.mark.parametrize("raw", [None, {}, [], "facts", 42])
    def test_non_mapping_gives_defaults(self, raw):
        facts = normalize_facts(raw)

        assert facts == PageFacts()
        assert facts.onpage.title.exists is False
        assert facts.onpage.content.word_count == 0
        assert facts.onpage.images.alt_stats == AltStats(total=0, missing=0)
        assert facts.trust.internal_links == 0

    def test_page_facts_passthrough(self, good_facts):
        facts = PageFacts.model_validate(good_facts)

        assert normalize_facts(facts) is facts

    def test_camel_case_keys(self, good_facts):
        facts = normalize_facts(good_facts)

        assert facts.onpage.headings.h1_count == 1
        assert facts.onpage.og.has_og is True
        assert facts.onpage.images.alt_stats.total == 4
        assert facts.technical.mobile_friendly is True
        assert facts.trust.has_schema is True

    def test_null_sub_records(self):
        facts = normalize_facts({"onpage": {"title": None, "images": {"altStats": None}}, "trust": None})

        assert facts.onpage.title.text == ""
        assert facts.onpage.images.alt_stats.total == 0
        assert facts.trust.has_schema is False

    @pytest.mark.parametrize(
        "value,expected",
        [("17", 17), (17.9, 17), (-3, 0), ("many", 0), (None, 0), (float("nan"), 0), (True, 1)],
    )
    def test_counts_are_coerced(self, value, expected):
        facts = normalize_facts({"onpage": {"content": {"wordCount": value}}})

        assert facts.onpage.content.word_count == expected

    @pytest.mark.parametrize(
        "value,expected",
        [(True, True), (1, True), ("true", True), ("Yes", True), ("no", False), ("", False), (None, False), ([1], False)],
    )
    def test_flags_are_coerced(self, value, expected):
        assert normalize_facts({"technical": {"https": value}}).technical.https is expected

    def test_keywords_skip_junk(self):
        facts = normalize_facts(
            {"onpage": {"keywords": [{"word": "oak", "count": 4, "density": "26.67%"}, "junk", None]}}
        )

        assert len(facts.onpage.keywords) == 1
        assert facts.onpage.keywords[0].word == "oak"

    def test_facts_are_frozen(self, good_facts):
        facts = normalize_facts(good_facts)

        with pytest.raises(ValidationError):
            facts.trust.internal_links = 99

    def test_dump_uses_camel_case(self, good_facts):
        data = normalize_facts(good_facts).model_dump(by_alias=True)

        assert data["onpage"]["headings"]["h1Count"] == 1
        assert data["onpage"]["images"]["altStats"] == {"total": 4, "missing": 0}
        assert data["technical"]["robotsTxt"] is False

    def test_record_of_another_class_is_revalidated(self, good_facts):
        raw = {**good_facts, "onpage": {**good_facts["onpage"], "meta": TitleFacts(text="Blurb", length=5, exists=True)}}

        facts = normalize_facts(raw)

        assert facts.onpage.meta == MetaFacts(text="Blurb", length=5, exists=True)
        assert facts.technical.https is True
        assert facts.onpage.headings.h1_count == 1

    def test_foreign_record_type_keeps_siblings(self, good_facts):
        raw = {**good_facts, "trust": AltStats(total=3, missing=1)}

        facts = normalize_facts(raw)

        assert facts.trust.internal_links == 0
        assert facts.technical.https is True
