from __future__ import annotations

import pytest

from webrag.errors import ValidationError
from webrag.services.topics import (
    TopicExtractionOptions,
    analyze_topic_relevance,
    extract_topics,
    generate_search_variants,
    score_topic,
    tokenize,
)


def test_tokenize_keeps_internal_hyphens_and_drops_edge_ones():
    assert tokenize("State-of-the-art, -design- 'tools'!") == [
        "state-of-the-art",
        "design",
        "tools",
    ]


def test_extract_topics_french_question():
    analysis = extract_topics(
        "pourquoi le ciel est bleu",
        TopicExtractionOptions(min_word_length=3),
    )

    assert analysis.topics == ("ciel", "bleu")
    assert analysis.cleaned_query == "ciel bleu"
    assert analysis.removed_words == ("pourquoi", "le", "est")
    assert analysis.stats.original_word_count == 5
    assert analysis.stats.final_word_count == 2
    assert analysis.stats.stop_words_removed == len(analysis.removed_words)


def test_all_stop_word_query_yields_empty_topics():
    analysis = extract_topics("the and of what")

    assert analysis.topics == ()
    assert analysis.cleaned_query == ""
    assert analysis.stats.stop_words_removed == 4


def test_capitalized_words_keep_original_casing():
    analysis = extract_topics("visit Paris, France in spring")

    assert analysis.topics == ("visit", "Paris", "France", "spring")


def test_preserve_capitalized_off_lowercases_everything():
    analysis = extract_topics(
        "visit Paris", TopicExtractionOptions(preserve_capitalized=False)
    )

    assert analysis.topics == ("visit", "paris")


def test_max_topics_caps_final_word_count():
    analysis = extract_topics(
        "alpha beta gamma delta", TopicExtractionOptions(max_topics=2)
    )

    assert analysis.topics == ("alpha", "beta")
    assert analysis.stats.final_word_count == 2
    assert analysis.stats.original_word_count == 4


def test_custom_stop_words_are_case_insensitive():
    analysis = extract_topics(
        "quick brown fox",
        TopicExtractionOptions(custom_stop_words=frozenset({"Brown"})),
    )

    assert analysis.topics == ("quick", "fox")
    assert "brown" in analysis.removed_words


def test_language_selection_limits_stop_words():
    analysis = extract_topics("le chat and the dog", TopicExtractionOptions(language="en"))

    assert analysis.topics == ("le", "chat", "dog")


def test_unknown_language_raises():
    with pytest.raises(ValidationError):
        extract_topics("anything here", TopicExtractionOptions(language="de"))


def test_extraction_is_idempotent_on_cleaned_query():
    first = extract_topics("the quick brown fox jumps over the lazy dog")
    second = extract_topics(first.cleaned_query)

    assert second.topics == first.topics


def test_merged_overrides_fields():
    options = TopicExtractionOptions().merged({"max_topics": 3, "custom_stop_words": ["x"]})

    assert options.max_topics == 3
    assert options.custom_stop_words == frozenset({"x"})
    assert options.language == "both"


def test_relevance_orders_by_score():
    entries = analyze_topic_relevance(["ai", "Python3", "NASA-X"])

    assert [e.topic for e in entries] == ["NASA-X", "Python3", "ai"]
    assert entries[0].relevance_score == pytest.approx(88)
    assert entries[0].category == "high"
    assert entries[1].relevance_score == pytest.approx(76)
    assert entries[2].relevance_score == pytest.approx(16)
    assert entries[2].category == "low"


def test_relevance_is_stable_for_ties():
    entries = analyze_topic_relevance(["alpha", "gamma"])

    assert [e.topic for e in entries] == ["alpha", "gamma"]


def test_score_is_capped_at_100():
    assert score_topic("ABCDEFGHIJ-1") == 100
    assert 0 <= score_topic("x") <= 100


def test_medium_category_boundary():
    entries = analyze_topic_relevance(["Python"])

    assert entries[0].relevance_score == pytest.approx(53)
    assert entries[0].category == "medium"


def test_generate_search_variants():
    variants = generate_search_variants(["machine", "learning", "python"])

    assert variants == [
        "machine learning python",
        "machine learning",
        "machine python",
        "learning python",
        "machine",
    ]


def test_generate_search_variants_two_topics():
    assert generate_search_variants(["deep", "learning"]) == ["deep learning", "learning"]
    assert generate_search_variants([]) == []
