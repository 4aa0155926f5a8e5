"""Response Parser: combines the extractors for one raw answer.

  1. Mention Extractor (business name + aliases)
  2. Citation Extractor (business website)
  3. Sentiment Classifier (only when mentioned)
  4. Mention + Sentiment for every competitor name

Input:  raw answer text
Output: ParsedResult

Pure function of its inputs; safe to call concurrently. An extractor that
fails falls back to its default (not mentioned / no citation / no
sentiment) without affecting the other steps.
"""

from __future__ import annotations

import logging

from geotrack.analysis.citation_extractor import find_citation
from geotrack.analysis.mention_extractor import find_mention
from geotrack.analysis.sentiment import classify_sentiment
from geotrack.analysis.types import (
    CitationFinding,
    CompetitorFinding,
    MentionFinding,
    ParsedResult,
    SentimentFinding,
)

logger = logging.getLogger(__name__)


def _safe_mention(text: str, names: list[str]) -> MentionFinding:
    try:
        return find_mention(text, names)
    except Exception:
        logger.exception("Mention extraction failed for %r", names[:1])
        return MentionFinding()


def _safe_citation(text: str, website_url: str | None) -> CitationFinding:
    try:
        return find_citation(text, website_url)
    except Exception:
        logger.exception("Citation extraction failed")
        return CitationFinding()


def _safe_sentiment(text: str) -> SentimentFinding | None:
    try:
        return classify_sentiment(text)
    except Exception:
        logger.exception("Sentiment classification failed")
        return None


def parse_response(
    raw_text: str,
    business_name: str,
    aliases: list[str] | tuple[str, ...] = (),
    website_url: str | None = None,
    competitor_names: list[str] | tuple[str, ...] = (),
) -> ParsedResult:
    """Parse one raw answer from the tracked business's perspective.

    Args:
        raw_text: Answer text from a platform.
        business_name: Canonical business name.
        aliases: Alternative names, tried after the canonical name.
        website_url: Business website used to attribute citations.
        competitor_names: Competitors to look for in the same answer.

    Returns:
        ParsedResult. Competitors without a position are omitted.
    """
    text = raw_text or ""
    names = [n for n in [business_name, *aliases] if n]

    mention = _safe_mention(text, names)
    citation = _safe_citation(text, website_url)
    sentiment = _safe_sentiment(mention.context_text or text) if mention.is_mentioned else None

    competitors: list[CompetitorFinding] = []
    for name in competitor_names:
        if not name:
            continue
        comp = _safe_mention(text, [name])
        if comp.position is None:
            continue
        competitors.append(
            CompetitorFinding(
                name=name,
                position=comp.position,
                context_text=comp.context_text,
                sentiment=_safe_sentiment(comp.context_text),
            )
        )

    logger.debug(
        "Parsed response: business=%s, mentioned=%s, position=%s, citation=%s, competitors=%d",
        business_name,
        mention.is_mentioned,
        mention.position,
        citation.url,
        len(competitors),
    )

    return ParsedResult(
        mention=mention,
        citation=citation,
        sentiment=sentiment,
        competitors=tuple(competitors),
    )
