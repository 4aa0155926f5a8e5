"""Core types and DTOs for tracking jobs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from geotrack.analysis.types import JobSummary, ParsedResult, VisibilityMetrics
from geotrack.core.config import ConfigurationError, settings
from geotrack.gateway.types import Platform


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class QueryType(str, Enum):
    """Kind of search intent a query represents."""

    BEST_IN_CITY = "best_in_city"
    TOP_RATED = "top_rated"
    WHERE_TO_EAT = "where_to_eat"
    REVIEWS = "reviews"
    DIETARY = "dietary"
    OCCASION = "occasion"
    DISH_TYPE = "dish_type"
    CUSTOM = "custom"


class JobState(str, Enum):
    """Lifecycle of one tracking job."""

    PENDING = "pending"
    GENERATING_QUERIES = "generating_queries"
    DISPATCHING = "dispatching"
    PARSING = "parsing"
    AGGREGATING = "aggregating"
    DONE = "done"


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Query:
    """A natural-language query from the upstream query producer."""

    text: str
    type: QueryType = QueryType.CUSTOM
    priority: int = 0


@dataclass(frozen=True)
class Business:
    id: str
    name: str
    aliases: tuple[str, ...] = ()
    website_url: str | None = None
    cuisine_type: str = ""
    city: str = ""


@dataclass(frozen=True)
class Competitor:
    id: str
    name: str
    website_url: str | None = None


@dataclass
class TrackingJobConfig:
    """Job parameters. Validated on construction; invalid values raise ConfigurationError.

    ``per_call_timeout`` bounds every platform call of the job, including
    calls made through a client passed to the orchestrator.
    """

    platforms: list[Platform] = field(
        default_factory=lambda: list(settings.default_platform_list),
    )
    max_queries: int = field(default_factory=lambda: settings.max_queries)
    runs_per_query: int = field(default_factory=lambda: settings.runs_per_query)
    per_call_timeout: float = field(default_factory=lambda: settings.platform_timeout_seconds)

    def __post_init__(self):
        if not self.platforms:
            raise ConfigurationError("At least one platform is required")

        platforms: list[Platform] = []
        for p in self.platforms:
            try:
                platform = Platform(p)
            except ValueError:
                raise ConfigurationError(f"Unknown platform: {p!r}") from None
            if platform not in platforms:
                platforms.append(platform)
        self.platforms = platforms

        if self.max_queries <= 0:
            raise ConfigurationError(f"max_queries must be positive, got {self.max_queries}")
        if self.runs_per_query < 1:
            raise ConfigurationError(f"runs_per_query must be at least 1, got {self.runs_per_query}")
        if self.per_call_timeout <= 0:
            raise ConfigurationError(f"per_call_timeout must be positive, got {self.per_call_timeout}")


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TrackingResult:
    """One successfully parsed (query, run, platform) unit."""

    query: Query
    run_index: int
    platform: Platform
    raw_text: str
    elapsed_ms: int
    timestamp: datetime
    parsed: ParsedResult

    def to_dict(self) -> dict:
        return {
            "query": self.query.text,
            "query_type": self.query.type.value,
            "run_index": self.run_index,
            "platform": self.platform.value,
            "raw_text": self.raw_text,
            "elapsed_ms": self.elapsed_ms,
            "timestamp": self.timestamp.isoformat(),
            **self.parsed.to_dict(),
        }


@dataclass(frozen=True)
class UnitError:
    """A (query, run, platform) unit that was skipped."""

    query: str
    run_index: int
    platform: Platform
    message: str


@dataclass(frozen=True)
class TrackingJobResult:
    """Everything one job produced. Returned exactly once, never mutated."""

    business: Business
    results: tuple[TrackingResult, ...]
    summary: JobSummary
    metrics: VisibilityMetrics
    failed_calls: int = 0
    errors: tuple[UnitError, ...] = ()
    duration_ms: int = 0
    cancelled: bool = False

    @property
    def parsed_results(self) -> list[ParsedResult]:
        return [r.parsed for r in self.results]
