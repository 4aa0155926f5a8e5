"""
run_tracking.py: End-to-end visibility tracking run for one restaurant

Runs the whole pipeline in one go:
  1. Builds the query batch
  2. Sends every query to the configured platforms
  3. Parses every answer (mention, position, citation, sentiment)
  4. Prints per-platform results and the visibility metrics

Platforms answer with canned responses unless USE_MOCK_RESPONSES=false
and the matching API keys are set in .env.

Usage:
    python run_tracking.py
    USE_MOCK_RESPONSES=false OPENAI_API_KEY=sk-... python run_tracking.py
"""

import asyncio

from geotrack.core.config import settings
from geotrack.core.logging import setup_logging
from geotrack.tracking.orchestrator import TrackingOrchestrator, group_by_platform, split_by_mention
from geotrack.tracking.types import Business, Competitor, Query, QueryType, TrackingJobConfig

BUSINESS = Business(
    id="demo-marios",
    name="Mario's Italian Kitchen",
    aliases=("Marios Italian",),
    website_url="mariositalian.com",
    cuisine_type="Italian",
    city="San Francisco",
)

COMPETITORS = [
    Competitor(id="c1", name="Tony's Pizza Napoletana"),
    Competitor(id="c2", name="Flour + Water"),
    Competitor(id="c3", name="Caffe Sport"),
]

QUERIES = [
    Query("best Italian restaurants in San Francisco", QueryType.BEST_IN_CITY, 1),
    Query("top rated Italian food in San Francisco", QueryType.TOP_RATED, 1),
    Query("where to eat pasta near North Beach", QueryType.WHERE_TO_EAT, 2),
    Query("best Italian restaurant for a date night in San Francisco", QueryType.OCCASION, 3),
    Query("best tacos in San Francisco", QueryType.CUSTOM, 3),
]


def _print_header(title: str) -> None:
    print("\n" + "=" * 60)
    print(f"  {title}")
    print("=" * 60)


async def main():
    setup_logging()

    config = TrackingJobConfig(platforms=settings.default_platform_list)
    orchestrator = TrackingOrchestrator(config=config)

    _print_header(f"Tracking {BUSINESS.name} ({'mock' if orchestrator.client.use_mock else 'live'})")
    job = await orchestrator.run(BUSINESS, COMPETITORS, QUERIES)

    _print_header("Results by platform")
    for platform, results in group_by_platform(job.results).items():
        mentioned, _ = split_by_mention(results)
        print(f"  {platform.value}: {len(mentioned)}/{len(results)} mentioned")
        for r in results:
            mark = "✓" if r.parsed.is_mentioned else "✗"
            position = f"#{r.parsed.position}" if r.parsed.position else "-"
            print(f"    {mark} {position:>4}  {r.query.text}")

    if job.errors:
        _print_header(f"Skipped units ({job.failed_calls})")
        for err in job.errors:
            print(f"  {err.platform.value}: {err.query} → {err.message}")

    _print_header("Visibility metrics")
    m = job.metrics
    print(f"  Visibility score: {m.visibility_score}/100")
    print(f"  Share of voice:   {m.share_of_voice}%")
    print(f"  Avg position:     {m.average_position}")
    print(f"  Citation rate:    {m.citation_rate}%")
    print(f"  Sentiment score:  {m.sentiment_score}")
    print(f"  Mentions:         {m.mention_count}/{m.total_queries}")
    print(f"  Duration:         {job.duration_ms}ms")


if __name__ == "__main__":
    asyncio.run(main())
