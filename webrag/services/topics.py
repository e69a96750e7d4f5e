"""Topic extraction and relevance scoring for raw search queries.

`extract_topics` turns a noisy natural-language query into the list of terms
worth searching for, `analyze_topic_relevance` ranks those terms by how
specific they look, and `generate_search_variants` derives extra queries from
them for the comprehensive search mode.
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace

from webrag.models.web_search import RelevanceEntry, TopicAnalysis, TopicStats
from webrag.services.stopwords import STOP_WORDS_BY_LANGUAGE, build_stop_words

_NON_WORD = re.compile(r"[^\w\s\-']")
_NON_WORD_OR_SPACE = re.compile(r"[^\w\-']")
_EDGE_CHARS = "-'"
_DIGIT = re.compile(r"\d")
_ACRONYM = re.compile(r"[A-Z]{2,}")

MAX_SEARCH_VARIANTS = 5


@dataclass(frozen=True, slots=True)
class TopicExtractionOptions:
    language: str = "both"
    min_word_length: int = 2
    max_topics: int = 10
    custom_stop_words: frozenset[str] = field(default_factory=frozenset)
    preserve_capitalized: bool = True

    def merged(self, overrides: Mapping[str, object] | None) -> TopicExtractionOptions:
        """Return a copy with the given fields replaced."""
        if not overrides:
            return self
        values = dict(overrides)
        if "custom_stop_words" in values:
            values["custom_stop_words"] = frozenset(values["custom_stop_words"] or ())
        return replace(self, **values)


def tokenize(query: str) -> list[str]:
    """Lowercase and split a query, keeping internal hyphens and apostrophes."""
    normalized = _NON_WORD.sub(" ", query.lower())
    tokens: list[str] = []
    for raw in normalized.split():
        token = raw.strip(_EDGE_CHARS)
        if token:
            tokens.append(token)
    return tokens


def _original_form(query: str, token: str) -> str | None:
    # First whitespace-separated word whose normalized form equals the token.
    for word in query.split():
        if _NON_WORD.sub("", word.lower()).strip(_EDGE_CHARS) == token:
            return _NON_WORD_OR_SPACE.sub("", word).strip(_EDGE_CHARS)
    return None


def extract_topics(
    query: str,
    options: TopicExtractionOptions | None = None,
    *,
    stop_word_registry: Mapping[str, frozenset[str]] = STOP_WORDS_BY_LANGUAGE,
) -> TopicAnalysis:
    """Remove stop words from a query and return the surviving topics.

    Words shorter than `min_word_length` and stop words are recorded in
    `removed_words`. When `preserve_capitalized` is set, a topic whose source
    word started with an uppercase letter keeps its original casing.
    An all-stop-word query gives an empty topic list, which is a valid result.
    """
    opts = options or TopicExtractionOptions()
    stop_words = build_stop_words(
        opts.language,
        opts.custom_stop_words,
        registry=stop_word_registry,
    )

    tokens = tokenize(query)
    removed_words: list[str] = []
    topics: list[str] = []

    for token in tokens:
        if len(token) < opts.min_word_length:
            removed_words.append(token)
            continue

        if token in stop_words:
            removed_words.append(token)
            continue

        if opts.preserve_capitalized:
            original = _original_form(query, token)
            if original and original[0].isupper():
                topics.append(original)
                continue

        topics.append(token)

    final_topics = tuple(topics[: max(opts.max_topics, 0)])

    return TopicAnalysis(
        topics=final_topics,
        cleaned_query=" ".join(final_topics),
        removed_words=tuple(removed_words),
        stats=TopicStats(
            original_word_count=len(tokens),
            final_word_count=len(final_topics),
            stop_words_removed=len(removed_words),
        ),
    )


def score_topic(topic: str) -> float:
    score = min(len(topic) / 10, 1) * 30

    if topic[:1].isupper():
        score += 25  # proper noun
    if _DIGIT.search(topic):
        score += 20
    if "-" in topic or "_" in topic:
        score += 15  # compound word
    if _ACRONYM.search(topic):
        score += 20

    score += 10
    return min(score, 100.0)


def _category(score: float) -> str:
    if score >= 70:
        return "high"
    if score >= 40:
        return "medium"
    return "low"


def analyze_topic_relevance(topics: Iterable[str]) -> list[RelevanceEntry]:
    """Score topics by specificity, highest first (stable for ties)."""
    entries = []
    for topic in topics:
        score = score_topic(topic)
        entries.append(
            RelevanceEntry(topic=topic, relevance_score=score, category=_category(score))
        )
    return sorted(entries, key=lambda entry: -entry.relevance_score)


def generate_search_variants(topics: Sequence[str]) -> list[str]:
    """Build up to five alternative queries from extracted topics."""
    if not topics:
        return []

    variants: list[str] = [" ".join(topics)]

    if len(topics) > 2:
        for i in range(len(topics) - 1):
            for j in range(i + 1, len(topics)):
                variants.append(f"{topics[i]} {topics[j]}")

    variants.extend(topic for topic in topics if len(topic) > 4)

    return list(dict.fromkeys(variants))[:MAX_SEARCH_VARIANTS]
