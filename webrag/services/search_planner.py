"""Turns an analyzed query into an ordered list of search steps."""
from __future__ import annotations

import math
from collections.abc import Sequence

from webrag.models.web_search import SearchPlanStep, TopicAnalysis

QUESTION_WORDS = ("comment", "pourquoi", "quel", "quelle", "quels", "quelles", "où", "qui", "combien")

REASON_ORIGINAL_KEPT = "original query kept"
REASON_STOP_WORD_FREE = "stop-word-free variant"
REASON_OPTIMIZED = "optimized query"
REASON_ORIGINAL_CONTEXT = "original query (context)"
REASON_PRIORITY_TOPIC = "priority topic"
REASON_COMBINED_VARIANT = "combined variant"


def removal_ratio(topic_analysis: TopicAnalysis) -> float:
    stats = topic_analysis.stats
    if stats.original_word_count <= 0:
        return 0.0
    return stats.stop_words_removed / stats.original_word_count


def should_fallback_to_original(original_query: str, topic_analysis: TopicAnalysis) -> bool:
    """Decide whether stripping stop words destroyed too much of the query."""
    normalized = original_query.strip()
    if not normalized:
        return True

    if not topic_analysis.cleaned_query.strip():
        return True

    ratio = removal_ratio(topic_analysis)
    lowered = normalized.lower()
    starts_with_question = any(lowered.startswith(f"{word} ") for word in QUESTION_WORDS)

    if starts_with_question and ratio > 0.4:
        return True

    if topic_analysis.stats.final_word_count <= 2 and ratio >= 0.5:
        return True

    return False


def secondary_limit(desired_results: int) -> int:
    return max(2, math.ceil(desired_results / 2))


def topic_limit(desired_results: int) -> int:
    return max(1, math.ceil(desired_results / 3))


def build_search_plan(
    original_query: str,
    topic_analysis: TopicAnalysis,
    prioritized_topics: Sequence[str],
    desired_results: int,
    max_priority_topics: int = 2,
) -> list[SearchPlanStep]:
    """Build the execution-ordered plan for one acquisition run.

    The first step is never optional. The secondary step (whichever of the
    original and cleaned query was not chosen first) and the priority topic
    steps are optional and carry a result limit.
    """
    normalized = original_query.strip()
    cleaned = topic_analysis.cleaned_query.strip()
    plan: list[SearchPlanStep] = []

    if should_fallback_to_original(normalized, topic_analysis):
        plan.append(SearchPlanStep(query=normalized, reason=REASON_ORIGINAL_KEPT))
        if cleaned and cleaned != normalized:
            plan.append(
                SearchPlanStep(
                    query=cleaned,
                    reason=REASON_STOP_WORD_FREE,
                    optional=True,
                    limit=secondary_limit(desired_results),
                )
            )
    else:
        plan.append(SearchPlanStep(query=cleaned, reason=REASON_OPTIMIZED))
        if cleaned != normalized:
            plan.append(
                SearchPlanStep(
                    query=normalized,
                    reason=REASON_ORIGINAL_CONTEXT,
                    optional=True,
                    limit=secondary_limit(desired_results),
                )
            )

    cap = max(0, max_priority_topics)
    if cap:
        candidates = [
            topic
            for topic in prioritized_topics
            if topic and topic != cleaned and topic != normalized
        ]
        for topic in candidates[:cap]:
            plan.append(
                SearchPlanStep(
                    query=topic,
                    reason=REASON_PRIORITY_TOPIC,
                    optional=True,
                    limit=topic_limit(desired_results),
                )
            )

    return plan
