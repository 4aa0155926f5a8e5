"""Tests for the Response Parser."""

from unittest.mock import patch

from geotrack.analysis.parser import parse_response
from geotrack.analysis.types import ParsedResult, SentimentLabel

NAME = "Mario's Italian Kitchen"

LIST_ANSWER = """Here are some of the best Italian restaurants in San Francisco:

1. **Tony's Pizza Napoletana** - Award-winning pizzeria
2. **Mario's Italian Kitchen** - excellent homemade pasta
3. **Caffe Sport** - Classic Sicilian-style dishes

More: https://mariositalian.com/menu and https://yelp.com/sf"""


class TestParseResponse:
    def test_business_fields(self):
        r = parse_response(LIST_ANSWER, NAME, website_url="mariositalian.com")
        assert r.is_mentioned is True
        assert r.position == 2
        assert r.context_text == "Mario's Italian Kitchen - excellent homemade pasta"
        assert r.has_citation is True
        assert r.citation_url == "https://mariositalian.com/menu"
        assert r.sentiment_label == SentimentLabel.POSITIVE
        assert r.sentiment_score == 1.0

    def test_sentiment_score_half_rounds_up(self):
        r = parse_response("Mario's Italian Kitchen is great but okay, decent, average.", NAME)
        assert r.sentiment_score == 0.63

    def test_not_mentioned_has_no_sentiment(self):
        r = parse_response("1. Tony's Pizza\n2. Caffe Sport", NAME)
        assert r.is_mentioned is False
        assert r.position is None
        assert r.sentiment is None
        assert r.sentiment_label is None

    def test_citation_independent_of_mention(self):
        r = parse_response("See https://yelp.com/sf", NAME)
        assert r.is_mentioned is False
        assert r.has_citation is True

    def test_alias_match(self):
        r = parse_response("1. Tony's\n2. Marios Italian - cozy", NAME, aliases=["Marios Italian"])
        assert r.is_mentioned is True
        assert r.position == 2

    def test_competitors_found_and_dropped(self):
        r = parse_response(
            LIST_ANSWER,
            NAME,
            competitor_names=["Tony's Pizza Napoletana", "Flour + Water", "Caffe Sport"],
        )
        names = [c.name for c in r.competitors]
        assert names == ["Tony's Pizza Napoletana", "Caffe Sport"]
        assert r.competitors[0].position == 1
        assert r.competitors[1].position == 3
        assert r.competitors[0].sentiment.label == SentimentLabel.POSITIVE
        assert isinstance(r.competitors, tuple)

    def test_sentiment_uses_mention_line_only(self):
        text = "Terrible options nearby.\nExcellent choice: Mario's Italian Kitchen."
        r = parse_response(text, NAME)
        assert r.context_text == "Excellent choice: Mario's Italian Kitchen."
        assert r.sentiment_label == SentimentLabel.POSITIVE

    def test_pure_function(self):
        a = parse_response(LIST_ANSWER, NAME, competitor_names=["Caffe Sport"])
        b = parse_response(LIST_ANSWER, NAME, competitor_names=["Caffe Sport"])
        assert a == b

    def test_empty_text(self):
        r = parse_response("", NAME)
        assert r == ParsedResult()


class TestExtractorFailures:
    """A failing extractor degrades to its default without touching the others."""

    def test_citation_failure(self):
        with patch("geotrack.analysis.parser.find_citation", side_effect=RuntimeError("boom")):
            r = parse_response(LIST_ANSWER, NAME, website_url="mariositalian.com")
        assert r.has_citation is False
        assert r.is_mentioned is True
        assert r.position == 2

    def test_mention_failure(self):
        with patch("geotrack.analysis.parser.find_mention", side_effect=RuntimeError("boom")):
            r = parse_response(LIST_ANSWER, NAME, competitor_names=["Caffe Sport"])
        assert r.is_mentioned is False
        assert r.sentiment is None
        assert r.competitors == ()
        assert r.has_citation is True

    def test_sentiment_failure(self):
        with patch("geotrack.analysis.parser.classify_sentiment", side_effect=RuntimeError("boom")):
            r = parse_response(LIST_ANSWER, NAME)
        assert r.is_mentioned is True
        assert r.sentiment is None


class TestToDict:
    def test_serializes_enums(self):
        d = parse_response(LIST_ANSWER, NAME, competitor_names=["Caffe Sport"]).to_dict()
        assert d["is_mentioned"] is True
        assert d["position"] == 2
        assert d["sentiment"] == "positive"
        assert d["competitors"][0]["name"] == "Caffe Sport"
        assert d["competitors"][0]["position"] == 3
