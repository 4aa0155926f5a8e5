"""Core types and DTOs for response analysis and visibility scoring."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class SentimentLabel(str, Enum):
    """Coarse sentiment bucket."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


# ---------------------------------------------------------------------------
# Findings: atomic extractor results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MentionFinding:
    """Whether a name appears in a response, and where."""

    is_mentioned: bool = False
    position: int | None = None  # 1-based list rank; 1 when mentioned outside a list
    context_text: str = ""


@dataclass(frozen=True)
class CitationFinding:
    has_citation: bool = False
    url: str | None = None


@dataclass(frozen=True)
class SentimentFinding:
    label: SentimentLabel = SentimentLabel.NEUTRAL
    score: float = 0.5  # 0.0 (negative) .. 1.0 (positive)


@dataclass(frozen=True)
class CompetitorFinding:
    """A competitor that was mentioned at a known position."""

    name: str
    position: int
    context_text: str = ""
    sentiment: SentimentFinding | None = None


# ---------------------------------------------------------------------------
# ParsedResult: output of the Response Parser
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParsedResult:
    """Structured view of one raw answer, from the tracked business's perspective.

    ``sentiment`` is only present when the business is mentioned.
    """

    mention: MentionFinding = MentionFinding()
    citation: CitationFinding = CitationFinding()
    sentiment: SentimentFinding | None = None
    competitors: tuple[CompetitorFinding, ...] = ()

    @property
    def is_mentioned(self) -> bool:
        return self.mention.is_mentioned

    @property
    def position(self) -> int | None:
        return self.mention.position

    @property
    def context_text(self) -> str:
        return self.mention.context_text

    @property
    def has_citation(self) -> bool:
        return self.citation.has_citation

    @property
    def citation_url(self) -> str | None:
        return self.citation.url

    @property
    def sentiment_label(self) -> SentimentLabel | None:
        return self.sentiment.label if self.sentiment else None

    @property
    def sentiment_score(self) -> float | None:
        return self.sentiment.score if self.sentiment else None

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dict for storage/API."""
        return {
            "is_mentioned": self.is_mentioned,
            "position": self.position,
            "context_text": self.context_text,
            "has_citation": self.has_citation,
            "citation_url": self.citation_url,
            "sentiment": self.sentiment_label.value if self.sentiment_label else None,
            "sentiment_score": self.sentiment_score,
            "competitors": [
                {
                    "name": c.name,
                    "position": c.position,
                    "context_text": c.context_text,
                    "sentiment": c.sentiment.label.value if c.sentiment else None,
                }
                for c in self.competitors
            ],
        }


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JobSummary:
    """Job-level summary over parsed results (rates in percent, 0–100)."""

    mention_rate: float = 0.0
    avg_position: float = 0.0  # 0 when no mention has a position
    citation_rate: float = 0.0
    sentiment_score: float = 50.0
    total_queries: int = 0
    total_mentions: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class VisibilityMetrics:
    """Per-business, per-day visibility snapshot.

    ``competitor_gap`` is filled downstream by whoever joins competitor
    metrics; use ``with_competitor_gap`` to get an updated copy.
    """

    business_id: str
    date: str  # ISO date, YYYY-MM-DD
    visibility_score: int = 0
    share_of_voice: float = 0.0
    average_position: float = 0.0
    mention_count: int = 0
    total_queries: int = 0
    citation_rate: int = 0
    sentiment_score: int = 50
    competitor_gap: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)
