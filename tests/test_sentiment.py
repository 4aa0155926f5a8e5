"""Tests for the lexicon-based Sentiment Classifier."""

import pytest

from geotrack.analysis.sentiment import (
    NEGATIVE_WORDS,
    NEUTRAL_WORDS,
    POSITIVE_WORDS,
    classify_sentiment,
)
from geotrack.analysis.types import SentimentLabel


class TestClassifySentiment:
    def test_no_hits_is_neutral_half(self):
        s = classify_sentiment("A restaurant on Main Street")
        assert s.label == SentimentLabel.NEUTRAL
        assert s.score == 0.5

    def test_empty_text(self):
        s = classify_sentiment("")
        assert s.label == SentimentLabel.NEUTRAL
        assert s.score == 0.5

    def test_positive(self):
        s = classify_sentiment("An excellent and authentic spot")
        assert s.label == SentimentLabel.POSITIVE
        assert s.score == 1.0

    def test_negative(self):
        s = classify_sentiment("Terrible service and bland food")
        assert s.label == SentimentLabel.NEGATIVE
        assert s.score == 0.0

    def test_balanced_is_neutral(self):
        s = classify_sentiment("Great pasta but slow service")
        assert s.label == SentimentLabel.NEUTRAL
        assert s.score == 0.5

    def test_neutral_words_dilute(self):
        s = classify_sentiment("Best pasta, decent prices")
        assert s.label == SentimentLabel.POSITIVE
        assert s.score == 0.75

    def test_score_rounded_to_two_decimals(self):
        s = classify_sentiment("Great food, average room, okay staff")
        assert s.score == 0.67
        assert s.label == SentimentLabel.POSITIVE

    def test_half_rounds_up(self):
        s = classify_sentiment("great but okay, decent, average")
        assert s.score == 0.63

    def test_case_insensitive(self):
        assert classify_sentiment("EXCELLENT").label == SentimentLabel.POSITIVE

    def test_multi_word_phrase(self):
        assert classify_sentiment("Honestly, not recommended").label == SentimentLabel.NEGATIVE

    @pytest.mark.parametrize("text", ["a hidden gem", "locals love it", "award-winning chef"])
    def test_substring_containment(self, text):
        assert classify_sentiment(text).label == SentimentLabel.POSITIVE

    def test_score_in_unit_interval(self):
        for text in ["best worst okay", "bad", "great", "fine"]:
            assert 0.0 <= classify_sentiment(text).score <= 1.0


class TestLexicons:
    def test_lexicons_are_disjoint(self):
        assert not POSITIVE_WORDS & NEGATIVE_WORDS
        assert not POSITIVE_WORDS & NEUTRAL_WORDS
        assert not NEGATIVE_WORDS & NEUTRAL_WORDS

    def test_lexicons_are_frozen(self):
        assert isinstance(POSITIVE_WORDS, frozenset)
