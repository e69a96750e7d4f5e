from __future__ import annotations

from dataclasses import dataclass, field

NO_INFORMATION_ANSWER = "I could not find relevant information to answer your question."

# Lowercase phrases that mean the model had nothing to go on.
NO_INFORMATION_MARKERS = (
    "i could not find",
    "i couldn't find",
    "i was unable to find",
    "je n'ai pas trouvé",
)


@dataclass(frozen=True, slots=True)
class SufficiencyDecision:
    needs_enrichment: bool
    reasons: tuple[str, ...] = field(default_factory=tuple)


def assess_sufficiency(
    answer: str,
    source_count: int,
    *,
    min_sources: int = 3,
    min_answer_length: int = 200,
) -> SufficiencyDecision:
    """Decide whether a locally grounded answer needs a web enrichment pass."""
    reasons: list[str] = []
    if source_count < min_sources:
        reasons.append(f"only {source_count} sources (< {min_sources})")
    normalized = answer.lower().replace("\u2019", "'")
    if any(marker in normalized for marker in NO_INFORMATION_MARKERS):
        reasons.append("answer reports no information")
    if len(answer) < min_answer_length:
        reasons.append(f"answer has {len(answer)} chars (< {min_answer_length})")
    return SufficiencyDecision(needs_enrichment=bool(reasons), reasons=tuple(reasons))
