"""Tracking Orchestrator: runs one tracking job for one business.

Job lifecycle:
  1. generating_queries: de-duplicate by text, truncate to max_queries
  2. dispatching: one query × one run → all platforms in parallel
  3. parsing: every answer parsed as soon as its batch returns
  4. aggregating: job summary + daily VisibilityMetrics
  5. done

Queries are processed sequentially, so results come back in
(query, run, platform) enumeration order for a fixed input. A failed
platform call is logged, counted and skipped; it never aborts the job.

Usage:
    orchestrator = TrackingOrchestrator(config=TrackingJobConfig(platforms=["chatgpt"]))
    job = await orchestrator.run(business, competitors, queries)
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Iterable

from geotrack.analysis.metrics import aggregate_parse_results, calculate_metrics
from geotrack.analysis.parser import parse_response
from geotrack.core.metrics import PARSED_RESULTS, TRACKING_JOBS
from geotrack.gateway.client import PlatformQueryClient
from geotrack.gateway.types import Platform, PlatformResponse
from geotrack.tracking.types import (
    Business,
    Competitor,
    JobState,
    Query,
    TrackingJobConfig,
    TrackingJobResult,
    TrackingResult,
    UnitError,
)

logger = logging.getLogger(__name__)


def prepare_queries(queries: Iterable[Query | str], max_queries: int) -> list[Query]:
    """Drop repeated query texts (first occurrence wins) and keep at most ``max_queries``."""
    seen: set[str] = set()
    prepared: list[Query] = []
    for q in queries:
        if isinstance(q, str):
            q = Query(text=q)
        text = q.text.strip()
        if not text or text in seen:
            continue
        seen.add(text)
        prepared.append(q)
        if len(prepared) >= max_queries:
            break
    return prepared


class TrackingOrchestrator:
    """Runs tracking jobs against a PlatformQueryClient.

    One orchestrator runs one job at a time; ``state`` reflects the
    current (or last) job.
    """

    def __init__(
        self,
        client: PlatformQueryClient | None = None,
        config: TrackingJobConfig | None = None,
    ):
        self.config = config or TrackingJobConfig()
        self.client = client or PlatformQueryClient(timeout_seconds=self.config.per_call_timeout)
        self.state = JobState.PENDING

    def _transition(self, state: JobState, job_id: str) -> None:
        if state != self.state:
            logger.debug("Job %s: %s → %s", job_id, self.state.value, state.value, extra={"job_id": job_id})
            self.state = state

    @staticmethod
    def _should_stop(cancel_event: asyncio.Event | None, deadline: float | None) -> bool:
        if cancel_event is not None and cancel_event.is_set():
            return True
        return deadline is not None and time.monotonic() >= deadline

    async def run(
        self,
        business: Business,
        competitors: Iterable[Competitor] = (),
        queries: Iterable[Query | str] = (),
        cancel_event: asyncio.Event | None = None,
        deadline: float | None = None,
    ) -> TrackingJobResult:
        """Run every (query, run, platform) unit and aggregate the results.

        Args:
            business: Business being tracked.
            competitors: Competitors looked up in the same answers.
            queries: Query batch from the upstream producer.
            cancel_event: When set, no further platform calls are issued.
            deadline: ``time.monotonic()`` value after which no further calls are issued.

        Returns:
            TrackingJobResult with every successfully parsed unit, in
            enumeration order. ``cancelled`` is True when the job stopped early.
        """
        job_id = uuid.uuid4().hex[:8]
        start = time.monotonic()
        self.state = JobState.PENDING

        self._transition(JobState.GENERATING_QUERIES, job_id)
        batch = prepare_queries(queries, self.config.max_queries)
        competitor_names = [c.name for c in competitors]
        platforms = self.config.platforms

        logger.info(
            "Tracking job %s started: business=%s, queries=%d, runs=%d, platforms=%s",
            job_id,
            business.name,
            len(batch),
            self.config.runs_per_query,
            ",".join(p.value for p in platforms),
            extra={"job_id": job_id},
        )

        results: list[TrackingResult] = []
        errors: list[UnitError] = []
        cancelled = False

        for query in batch:
            for run_index in range(self.config.runs_per_query):
                if self._should_stop(cancel_event, deadline):
                    cancelled = True
                    break

                self._transition(JobState.DISPATCHING, job_id)
                responses = await self.client.query_multiple(
                    platforms, query.text, timeout=self.config.per_call_timeout
                )

                self._transition(JobState.PARSING, job_id)
                for response in responses:
                    unit = self._parse_unit(business, competitor_names, query, run_index, response, job_id)
                    if isinstance(unit, UnitError):
                        errors.append(unit)
                    else:
                        results.append(unit)
            if cancelled:
                break

        if cancelled:
            logger.warning(
                "Tracking job %s cancelled after %d results",
                job_id,
                len(results),
                extra={"job_id": job_id},
            )

        self._transition(JobState.AGGREGATING, job_id)
        parsed = [r.parsed for r in results]
        summary = aggregate_parse_results(parsed)
        metrics = calculate_metrics(business.id, parsed)

        self._transition(JobState.DONE, job_id)
        duration_ms = int((time.monotonic() - start) * 1000)
        TRACKING_JOBS.labels(outcome="cancelled" if cancelled else "completed").inc()

        logger.info(
            "Tracking job %s complete: business=%s, results=%d, failed=%d, "
            "mention_rate=%.1f, visibility=%d, duration=%dms",
            job_id,
            business.name,
            len(results),
            len(errors),
            summary.mention_rate,
            metrics.visibility_score,
            duration_ms,
            extra={"job_id": job_id},
        )

        return TrackingJobResult(
            business=business,
            results=tuple(results),
            summary=summary,
            metrics=metrics,
            failed_calls=len(errors),
            errors=tuple(errors),
            duration_ms=duration_ms,
            cancelled=cancelled,
        )

    @staticmethod
    def _parse_unit(
        business: Business,
        competitor_names: list[str],
        query: Query,
        run_index: int,
        response: PlatformResponse,
        job_id: str,
    ) -> TrackingResult | UnitError:
        """Turn one platform response into a TrackingResult, or the reason it was skipped."""
        if not response.ok:
            logger.warning(
                "Skipping %s / run %d / %s: %s",
                query.text,
                run_index,
                response.platform.value,
                response.error,
                extra={"job_id": job_id, "platform": response.platform.value},
            )
            return UnitError(query.text, run_index, response.platform, response.error or "unknown error")

        try:
            parsed = parse_response(
                response.raw_text,
                business.name,
                aliases=business.aliases,
                website_url=business.website_url,
                competitor_names=competitor_names,
            )
        except Exception as e:
            logger.exception(
                "Parse failed for %s / run %d / %s",
                query.text,
                run_index,
                response.platform.value,
                extra={"job_id": job_id, "platform": response.platform.value},
            )
            return UnitError(query.text, run_index, response.platform, f"parse failed: {e}")

        PARSED_RESULTS.labels(mentioned=str(parsed.is_mentioned).lower()).inc()
        return TrackingResult(
            query=query,
            run_index=run_index,
            platform=response.platform,
            raw_text=response.raw_text,
            elapsed_ms=response.elapsed_ms,
            timestamp=response.timestamp,
            parsed=parsed,
        )


# ---------------------------------------------------------------------------
# Convenience runners & display helpers
# ---------------------------------------------------------------------------


async def run_quick_test(
    business: Business,
    competitors: Iterable[Competitor] = (),
    queries: Iterable[Query | str] = (),
    client: PlatformQueryClient | None = None,
) -> TrackingJobResult:
    """Small smoke run: ChatGPT only, first 5 queries, one run each."""
    config = TrackingJobConfig(platforms=[Platform.CHATGPT], max_queries=5, runs_per_query=1)
    return await TrackingOrchestrator(client=client, config=config).run(business, competitors, queries)


def group_by_platform(results: Iterable[TrackingResult]) -> dict[Platform, list[TrackingResult]]:
    grouped: dict[Platform, list[TrackingResult]] = {}
    for result in results:
        grouped.setdefault(result.platform, []).append(result)
    return grouped


def split_by_mention(results: Iterable[TrackingResult]) -> tuple[list[TrackingResult], list[TrackingResult]]:
    """(mentioned, not mentioned), each in input order."""
    mentioned: list[TrackingResult] = []
    not_mentioned: list[TrackingResult] = []
    for result in results:
        (mentioned if result.parsed.is_mentioned else not_mentioned).append(result)
    return mentioned, not_mentioned
