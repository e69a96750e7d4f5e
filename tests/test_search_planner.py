from __future__ import annotations

from webrag.services.search_planner import (
    REASON_OPTIMIZED,
    REASON_ORIGINAL_CONTEXT,
    REASON_ORIGINAL_KEPT,
    REASON_PRIORITY_TOPIC,
    REASON_STOP_WORD_FREE,
    build_search_plan,
    should_fallback_to_original,
)
from webrag.services.topics import TopicExtractionOptions, extract_topics

OPTS = TopicExtractionOptions(min_word_length=3)


def test_question_with_many_stop_words_falls_back_to_original():
    query = "pourquoi le ciel est bleu"
    analysis = extract_topics(query, OPTS)

    assert should_fallback_to_original(query, analysis) is True

    plan = build_search_plan(query, analysis, [], desired_results=10)

    assert plan[0].query == query
    assert plan[0].reason == REASON_ORIGINAL_KEPT
    assert plan[0].optional is False
    assert plan[1].query == "ciel bleu"
    assert plan[1].reason == REASON_STOP_WORD_FREE
    assert plan[1].optional is True
    assert plan[1].limit == 5


def test_short_topic_list_with_high_removal_falls_back():
    query = "the cat and the dog"
    analysis = extract_topics(query, OPTS)

    assert analysis.stats.final_word_count == 2
    assert should_fallback_to_original(query, analysis) is True


def test_empty_cleaned_query_falls_back():
    query = "what is the"
    analysis = extract_topics(query, OPTS)

    assert should_fallback_to_original(query, analysis) is True
    plan = build_search_plan(query, analysis, [], desired_results=4)
    assert [step.query for step in plan] == ["what is the"]


def test_optimized_query_comes_first_with_original_as_context():
    query = "the best Python frameworks for web development"
    analysis = extract_topics(query, OPTS)

    assert should_fallback_to_original(query, analysis) is False

    plan = build_search_plan(query, analysis, [], desired_results=10)

    assert plan[0].query == "best Python frameworks web development"
    assert plan[0].reason == REASON_OPTIMIZED
    assert plan[0].limit is None
    assert plan[1].query == query
    assert plan[1].reason == REASON_ORIGINAL_CONTEXT
    assert plan[1].optional is True
    assert plan[1].limit == 5


def test_query_without_stop_words_has_single_primary_step():
    query = "machine learning python tutorial"
    analysis = extract_topics(query, OPTS)

    plan = build_search_plan(query, analysis, ["python"], desired_results=10)

    assert [step.query for step in plan] == [query, "python"]
    assert plan[1].reason == REASON_PRIORITY_TOPIC
    assert plan[1].optional is True
    assert plan[1].limit == 4


def test_priority_topics_skip_duplicates_and_respect_cap():
    query = "python"
    analysis = extract_topics(query, OPTS)

    plan = build_search_plan(
        query,
        analysis,
        ["", "python", "asyncio", "httpx", "pytest"],
        desired_results=3,
        max_priority_topics=2,
    )

    assert [step.query for step in plan] == ["python", "asyncio", "httpx"]
    assert all(step.limit == 1 for step in plan[1:])


def test_zero_priority_cap_adds_no_topic_steps():
    query = "python asyncio"
    analysis = extract_topics(query, OPTS)

    plan = build_search_plan(query, analysis, ["python"], desired_results=3, max_priority_topics=0)

    assert [step.query for step in plan] == ["python asyncio"]


def test_secondary_limit_has_a_floor_of_two():
    query = "pourquoi le ciel est bleu"
    analysis = extract_topics(query, OPTS)

    plan = build_search_plan(query, analysis, [], desired_results=1)

    assert plan[1].limit == 2


def test_original_query_is_trimmed():
    query = "  machine learning  "
    analysis = extract_topics(query, OPTS)

    plan = build_search_plan(query, analysis, [], desired_results=2)

    assert [step.query for step in plan] == ["machine learning"]
