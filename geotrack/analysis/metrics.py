"""Metrics Aggregator: visibility score and trend helpers.

Computes:
  - Visibility Score (0–100):
      positionScore = max(0, 100 − (avgPosition − 1) × 20), 0 when no position
      score = mentionRate×0.4 + positionScore×0.3 + sentimentScore×0.2 + citationRate×0.1

  - Job summary (rates over parsed results, sentiment from scores)
  - Daily VisibilityMetrics (sentiment from labels, share of voice = mention rate)
  - Period-over-period change in percent

Rates are only ever computed over the results they describe: citation
rate over mentioned results, average position over results that have a
position.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import date as date_type
from datetime import datetime, timezone
from typing import Iterable

from geotrack.analysis.types import (
    JobSummary,
    ParsedResult,
    SentimentLabel,
    VisibilityMetrics,
)

logger = logging.getLogger(__name__)

MENTION_WEIGHT = 0.4
POSITION_WEIGHT = 0.3
SENTIMENT_WEIGHT = 0.2
CITATION_WEIGHT = 0.1

_LABEL_SCORES = {
    SentimentLabel.POSITIVE: 100,
    SentimentLabel.NEUTRAL: 50,
    SentimentLabel.NEGATIVE: 0,
}


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves up toward +inf (2.5 → 3, -2.5 → -2), unlike built-in round()."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def position_score(avg_position: float) -> float:
    """1st = 100, 2nd = 80, 3rd = 60, ... never below 0; 0 when unknown."""
    if avg_position <= 0:
        return 0.0
    return max(0.0, 100 - (avg_position - 1) * 20)


def calculate_visibility_score(
    mention_rate: float,
    avg_position: float,
    sentiment_score: float,
    citation_rate: float,
) -> int:
    """Weighted 0–100 composite of mention, position, sentiment and citation."""
    score = (
        mention_rate * MENTION_WEIGHT
        + position_score(avg_position) * POSITION_WEIGHT
        + sentiment_score * SENTIMENT_WEIGHT
        + citation_rate * CITATION_WEIGHT
    )
    return int(round_half_up(min(100.0, max(0.0, score))))


def _positions(mentioned: list[ParsedResult]) -> list[int]:
    return [r.position for r in mentioned if r.position is not None]


def aggregate_parse_results(results: Iterable[ParsedResult]) -> JobSummary:
    """Job-level summary: rates in percent, sentiment as mean score × 100."""
    results = list(results)
    mentioned = [r for r in results if r.is_mentioned]
    cited = [r for r in mentioned if r.has_citation]
    positions = _positions(mentioned)
    scores = [r.sentiment_score for r in mentioned if r.sentiment_score is not None]

    return JobSummary(
        mention_rate=len(mentioned) / len(results) * 100 if results else 0.0,
        avg_position=sum(positions) / len(positions) if positions else 0.0,
        citation_rate=len(cited) / len(mentioned) * 100 if mentioned else 0.0,
        sentiment_score=sum(scores) / len(scores) * 100 if scores else 50.0,
        total_queries=len(results),
        total_mentions=len(mentioned),
    )


def calculate_metrics(
    business_id: str,
    results: Iterable[ParsedResult],
    date: date_type | str | None = None,
) -> VisibilityMetrics:
    """Reduce parsed results for one business into a daily VisibilityMetrics.

    Args:
        business_id: Business the results belong to.
        results: Successfully parsed results only (failed calls excluded).
        date: Measurement day; defaults to today (UTC).
    """
    results = list(results)
    total = len(results)
    mentioned = [r for r in results if r.is_mentioned]
    mention_count = len(mentioned)

    mention_rate = mention_count / total * 100 if total else 0.0

    positions = _positions(mentioned)
    avg_position = sum(positions) / len(positions) if positions else 0.0

    cited = [r for r in mentioned if r.citation_url]
    citation_rate = len(cited) / mention_count * 100 if mention_count else 0.0

    label_scores = [_LABEL_SCORES[r.sentiment_label] for r in mentioned if r.sentiment_label is not None]
    sentiment_score = sum(label_scores) / len(label_scores) if label_scores else 50.0

    visibility = calculate_visibility_score(mention_rate, avg_position, sentiment_score, citation_rate)

    if date is None:
        date = datetime.now(timezone.utc).date()
    day = date if isinstance(date, str) else date.isoformat()

    metrics = VisibilityMetrics(
        business_id=business_id,
        date=day,
        visibility_score=visibility,
        share_of_voice=round_half_up(mention_rate, 1),
        average_position=round_half_up(avg_position, 1),
        mention_count=mention_count,
        total_queries=total,
        citation_rate=int(round_half_up(citation_rate)),
        sentiment_score=int(round_half_up(sentiment_score)),
        competitor_gap=0.0,
    )

    logger.debug(
        "Metrics for %s on %s: score=%d, mentions=%d/%d, avg_pos=%.1f",
        business_id,
        day,
        visibility,
        mention_count,
        total,
        avg_position,
    )
    return metrics


def with_competitor_gap(metrics: VisibilityMetrics, gap: float) -> VisibilityMetrics:
    """New metrics snapshot with ``competitor_gap`` filled in; the input is unchanged."""
    return replace(metrics, competitor_gap=gap)


def calculate_change(current: float, previous: float) -> int:
    """Change from ``previous`` to ``current`` in whole percent."""
    if previous == 0:
        return 100 if current > 0 else 0
    return int(round_half_up((current - previous) / previous * 100))


def format_change(value: float) -> str:
    """'+12%', '-5%' or '0%'."""
    if value > 0:
        return f"+{value}%"
    if value < 0:
        return f"{value}%"
    return "0%"
