import pytest

from text_metrics import FontSpec, fit_text, lines_height, max_lines_for, measure, truncate_lines, wrap_lines

FONT = FontSpec("Helvetica", 9)


class TestWrapLines:

    @pytest.mark.parametrize("text", ["", "   ", None, "\n"])
    def test_empty_input_gives_no_lines(self, text):
        assert wrap_lines(text, FONT, 200) == []

    def test_short_text_stays_on_one_line(self):
        assert wrap_lines("Rack server", FONT, 200) == ["Rack server"]

    def test_forced_breaks_are_kept(self):
        assert wrap_lines("first\nsecond", FONT, 200) == ["first", "second"]

    def test_blank_segment_becomes_blank_line(self):
        assert wrap_lines("first\n\nthird", FONT, 200) == ["first", "", "third"]

    def test_every_line_fits_width(self):
        text = "word " * 80
        lines = wrap_lines(text, FONT, 120)
        assert len(lines) > 1
        assert all(FONT.width_of(line) <= 120 for line in lines)

    def test_long_token_is_split(self):
        token = "x" * 200
        lines = wrap_lines(token, FONT, 50)
        assert "".join(lines) == token
        assert all(FONT.width_of(line) <= 50 for line in lines)


class TestMeasure:

    def test_empty_text_measures_zero(self):
        m = measure("", FONT, 100)
        assert m.line_count == 0
        assert m.height == 0

    def test_height_is_lines_times_line_height(self):
        m = measure("a\nb\nc", FONT, 100)
        assert m.line_count == 3
        assert m.height == pytest.approx(3 * FONT.line_height)
        assert lines_height(3, FONT) == pytest.approx(m.height)

    def test_line_height_defaults_to_one_and_a_quarter_size(self):
        assert FONT.line_height == pytest.approx(11.25)
        assert FontSpec("Helvetica", 9, leading=13).line_height == 13


class TestTruncation:

    def test_max_lines_tolerates_exact_fit(self):
        assert max_lines_for(3 * FONT.line_height, FONT) == 3
        assert max_lines_for(0, FONT) == 0
        assert max_lines_for(-5, FONT) == 0

    def test_truncate_adds_ellipsis(self):
        lines = truncate_lines(["one", "two", "three"], 2, FONT, 100)
        assert lines == ["one", "two..."]

    def test_truncate_keeps_short_lists(self):
        assert truncate_lines(["one"], 3, FONT, 100) == ["one"]

    def test_fit_text_respects_height(self):
        text = "word " * 200
        lines = fit_text(text, FONT, 100, 2 * FONT.line_height)
        assert len(lines) == 2
        assert lines[-1].endswith("...")
