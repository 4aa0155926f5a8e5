"""Sentiment Classifier: Pipeline Step 3.

Lexicon-based, best-effort sentiment for the text around a mention.
Each lexicon entry counts once if it occurs anywhere in the text (substring
containment, so "bad" also fires inside "badge"):

    score = (positive − negative) / (positive + negative + neutral)
    remapped from −1..1 to 0..1
    ≥ 0.6 → positive, ≤ 0.4 → negative, otherwise neutral

No lexicon hit at all → neutral, 0.5.
"""

from __future__ import annotations

from geotrack.analysis.metrics import round_half_up
from geotrack.analysis.types import SentimentFinding, SentimentLabel

POSITIVE_WORDS = frozenset({
    "best", "excellent", "amazing", "fantastic", "great", "wonderful",
    "outstanding", "superb", "delicious", "authentic", "favorite",
    "highly recommended", "must-visit", "top-notch", "incredible",
    "perfect", "love", "loved", "standout", "gem", "exceptional",
    "award-winning", "renowned", "famous", "popular", "beloved",
})

NEGATIVE_WORDS = frozenset({
    "worst", "terrible", "awful", "bad", "poor", "disappointing",
    "avoid", "overpriced", "mediocre", "underwhelming", "slow",
    "rude", "dirty", "cold", "bland", "stale", "not recommended",
    "skip", "pass", "overrated", "inconsistent",
})

NEUTRAL_WORDS = frozenset({
    "okay", "decent", "average", "fair", "alright", "fine",
    "reasonable", "typical", "standard", "basic",
})

POSITIVE_THRESHOLD = 0.6
NEGATIVE_THRESHOLD = 0.4


def _count_hits(text: str, lexicon: frozenset[str]) -> int:
    return sum(1 for word in lexicon if word in text)


def _label_from_score(score: float) -> SentimentLabel:
    if score >= POSITIVE_THRESHOLD:
        return SentimentLabel.POSITIVE
    if score <= NEGATIVE_THRESHOLD:
        return SentimentLabel.NEGATIVE
    return SentimentLabel.NEUTRAL


def classify_sentiment(text: str) -> SentimentFinding:
    """Classify ``text`` as positive / neutral / negative with a 0..1 score."""
    lowered = (text or "").lower()
    positive = _count_hits(lowered, POSITIVE_WORDS)
    negative = _count_hits(lowered, NEGATIVE_WORDS)
    neutral = _count_hits(lowered, NEUTRAL_WORDS)

    total = positive + negative + neutral
    if total == 0:
        return SentimentFinding(label=SentimentLabel.NEUTRAL, score=0.5)

    raw = (positive - negative) / total
    score = (raw + 1) / 2
    return SentimentFinding(label=_label_from_score(score), score=round_half_up(score, 2))
