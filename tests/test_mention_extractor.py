"""Tests for Mention Extractor."""

from geotrack.analysis.mention_extractor import (
    LINE_DETECTORS,
    _bold_line_rank,
    _bullet_rank,
    _numbered_rank,
    _ScanState,
    extract_context,
    find_mention,
    find_position,
    fuzzy_match,
)

NAME = "Mario's Italian Kitchen"


class TestExactMatch:
    """Case-insensitive substring matching over candidate names."""

    def test_numbered_list_example(self):
        text = "1. Tony's Pizza\n2. Mario's Italian Kitchen - excellent pasta"
        m = find_mention(text, [NAME])
        assert m.is_mentioned is True
        assert m.position == 2
        assert m.context_text == "Mario's Italian Kitchen - excellent pasta"

    def test_not_mentioned(self):
        m = find_mention("1. Tony's Pizza\n2. Caffe Sport", [NAME])
        assert m.is_mentioned is False
        assert m.position is None
        assert m.context_text == ""

    def test_case_insensitive(self):
        m = find_mention("1. MARIO'S ITALIAN KITCHEN", [NAME])
        assert m.is_mentioned is True
        assert m.position == 1

    def test_alias_tried_after_name(self):
        m = find_mention("Top picks:\n1. Tony's\n2. Marios on Main", [NAME, "Marios"])
        assert m.is_mentioned is True
        assert m.position == 2
        assert m.context_text == "Marios on Main"

    def test_first_candidate_wins(self):
        text = "1. Marios\n2. Mario's Italian Kitchen"
        m = find_mention(text, [NAME, "Marios"])
        assert m.position == 2

    def test_empty_text(self):
        assert find_mention("", [NAME]).is_mentioned is False

    def test_empty_names_skipped(self):
        assert find_mention("Mario's Italian Kitchen", ["", "  "]).is_mentioned is False


class TestFuzzyMatch:
    """Apostrophe and whitespace variants."""

    def test_missing_apostrophe_in_text(self):
        m = find_mention("1. Tony's\n2. Marios Italian Kitchen - great", [NAME])
        assert m.is_mentioned is True
        assert m.position == 2
        assert m.context_text == "Marios Italian Kitchen - great"

    def test_curly_apostrophe_in_text(self):
        m = find_mention("1. Tony's\n2. Mario’s Italian Kitchen", [NAME])
        assert m.is_mentioned is True
        assert m.position == 2

    def test_apostrophe_in_text_but_not_in_name(self):
        m = find_mention("3. Mario's Italian Kitchen", ["Marios Italian Kitchen"])
        assert m.is_mentioned is True
        assert m.position == 3

    def test_collapsed_whitespace(self):
        m = find_mention("3. Mario's   Italian Kitchen", [NAME])
        assert m.is_mentioned is True
        assert m.position == 3

    def test_surface_form_returned(self):
        assert fuzzy_match("Try Mario’s Italian Kitchen today", NAME) == "Mario’s Italian Kitchen"

    def test_no_fuzzy_match(self):
        assert fuzzy_match("Tony's Pizza", NAME) is None


class TestPositionDetection:
    """Ordered line detectors: numbered, bullets, bold, fallback."""

    def test_bold_numbered_marker(self):
        assert find_position("**1.** Tony's\n**2.** Mario's Italian Kitchen", NAME) == 2

    def test_hash_marker(self):
        assert find_position("#1 Tony's\n#3 Mario's Italian Kitchen", NAME) == 3

    def test_paren_marker(self):
        assert find_position("1) Tony's\n2) Mario's Italian Kitchen", NAME) == 2

    def test_bullet_count(self):
        text = "Options:\n- Tony's\n- Flour + Water\n- Mario's Italian Kitchen"
        assert find_position(text, NAME) == 3

    def test_bold_wrapped_bullet(self):
        text = "**-** Tony's\n**-** Mario's Italian Kitchen"
        assert find_position(text, NAME) == 2

    def test_bold_span_uses_line_number(self):
        text = "Intro line\nAlso consider\nFor pasta, **Mario's Italian Kitchen** is great"
        assert find_position(text, NAME) == 3

    def test_line_starting_with_bold_counts_as_bullet(self):
        text = "Here you go:\n\n**Mario's Italian Kitchen** is a standout."
        assert find_position(text, NAME) == 1

    def test_prose_defaults_to_one(self):
        assert find_position("I recommend Mario's Italian Kitchen for pasta.", NAME) == 1

    def test_absent_is_none(self):
        assert find_position("Nothing here", NAME) is None

    def test_two_names_on_one_line_share_rank(self):
        text = "1. Tony's and Mario's Italian Kitchen"
        assert find_position(text, "Tony's") == 1
        assert find_position(text, NAME) == 1


class TestDetectors:
    """Each detector in isolation."""

    def test_detector_order(self):
        assert LINE_DETECTORS == (_numbered_rank, _bullet_rank, _bold_line_rank)

    def test_numbered_requires_name(self):
        assert _numbered_rank("4. Foo", 1, True, _ScanState()) == 4
        assert _numbered_rank("4. Foo", 1, False, _ScanState()) is None

    def test_bullet_counts_lines_without_name(self):
        state = _ScanState()
        assert _bullet_rank("- Foo", 1, False, state) is None
        assert _bullet_rank("• Bar", 2, True, state) == 2
        assert state.bullet_count == 2

    def test_bullet_ignores_plain_lines(self):
        state = _ScanState()
        assert _bullet_rank("Plain text", 1, True, state) is None
        assert state.bullet_count == 0

    def test_bold_line(self):
        assert _bold_line_rank("see **Foo** here", 5, True, _ScanState()) == 5
        assert _bold_line_rank("see Foo here", 5, True, _ScanState()) is None


class TestContext:
    """Context line extraction."""

    def test_strips_list_and_bold_markers(self):
        text = "- **Mario's Italian Kitchen** - homemade pasta"
        assert extract_context(text, NAME) == "Mario's Italian Kitchen - homemade pasta"

    def test_first_matching_line(self):
        text = "Mario's Italian Kitchen is first.\nMario's Italian Kitchen again."
        assert extract_context(text, NAME) == "Mario's Italian Kitchen is first."

    def test_missing_name(self):
        assert extract_context("nothing", NAME) == ""

    def test_window_fallback_for_multiline_match(self):
        text = "Try Mario's\nItalian Kitchen tonight"
        ctx = extract_context(text, "Mario's\nItalian Kitchen")
        assert ctx == text
