from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Sequence

from loguru import logger

from webrag.errors import ValidationError, WebRagError
from webrag.models.web_search import (
    ExtractedContent,
    SearchPlanStep,
    SearchRunResult,
    StepOutcome,
)
from webrag.services.logger import log_search_step

SearchStep = Callable[[str, int], Awaitable[list[ExtractedContent]]]


def filter_new_results(
    results: Iterable[ExtractedContent],
    seen_urls: set[str],
) -> list[ExtractedContent]:
    """Keep results whose URL is non-empty and not in `seen_urls`, in order."""
    fresh: list[ExtractedContent] = []
    batch_urls: set[str] = set()
    for result in results:
        url = (result.url or "").strip()
        if not url or url in seen_urls or url in batch_urls:
            continue
        batch_urls.add(url)
        fresh.append(result)
    return fresh


async def run_search_plan(
    plan: Sequence[SearchPlanStep],
    search_step: SearchStep,
    desired_results: int,
) -> SearchRunResult:
    """Execute plan steps in order until `desired_results` unique results are held.

    Optional steps are skipped once the target is met. A step whose search
    call raises is recorded as failed and the run moves on to the next step.
    """
    if desired_results < 1:
        raise ValidationError("desired_results must be at least 1")

    run = SearchRunResult()
    seen_urls: set[str] = set()

    for step in plan:
        if step.optional and len(run.results) >= desired_results:
            log_search_step(step.query, step.reason, "skipped")
            continue

        remaining = desired_results - len(run.results)
        if remaining <= 0:
            break

        fetch_limit = min(step.limit, remaining) if step.limit else remaining
        outcome = StepOutcome(step=step)

        try:
            raw_results = await search_step(step.query, max(fetch_limit, 1))
        except WebRagError as e:
            outcome.error = str(e)
            run.failed_queries.append(step.query)
            log_search_step(step.query, step.reason, "failed", {"error": outcome.error})
        else:
            outcome.failures = [r for r in raw_results if not r.success]
            successes = [r for r in raw_results if r.success]
            outcome.results = filter_new_results(successes, seen_urls)[:remaining]
            seen_urls.update(r.url.strip() for r in outcome.results)
            run.results.extend(outcome.results)
            log_search_step(
                step.query,
                step.reason,
                "done",
                {
                    "limit": fetch_limit,
                    "accepted": len(outcome.results),
                    "failed_urls": len(outcome.failures),
                },
            )

        run.executed_queries.append(step.query)
        run.step_results.append(outcome)

        if len(run.results) >= desired_results:
            break

    logger.info(
        f"Search plan finished: {len(run.results)}/{desired_results} results "
        f"from {len(run.executed_queries)} queries"
    )
    return run
