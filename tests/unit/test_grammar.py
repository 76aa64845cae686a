"""Unit tests for the grammar tables."""

from wavelayout.grammar import (
    DATA_CHARS,
    WAVE_CHARS,
    SegmentKind,
    count_data_chars,
    is_extension,
    lookup,
)


class TestWaveChars:
    """Tests for the wave character table."""

    def test_alphabet_is_complete(self):
        """Every character of the WaveJSON alphabet has an entry."""
        assert set(WAVE_CHARS) == set("pnPN01.=2345xzud|")

    def test_unknown_character(self):
        """Characters outside the alphabet have no entry."""
        assert lookup("q") is None
        assert lookup("h") is None
        assert lookup(" ") is None

    def test_data_characters(self):
        """Only = and 2-5 carry data."""
        assert DATA_CHARS == frozenset("=2345")

    def test_data_color_indices_distinct(self):
        """Each data variant selects its own color index."""
        colors = [WAVE_CHARS[c].color_index for c in "=2345"]
        assert colors == [0, 1, 2, 3, 4]

    def test_clock_characters(self):
        """Clock characters are pulses; capitals carry an arrow."""
        for char in "pnPN":
            info = WAVE_CHARS[char]
            assert info.category is SegmentKind.EDGE
            assert info.is_clock_pulse is True
        assert WAVE_CHARS["P"].has_arrow is True
        assert WAVE_CHARS["N"].has_arrow is True
        assert WAVE_CHARS["p"].has_arrow is False

    def test_clock_polarity(self):
        """Positive clocks start high, negative clocks start low."""
        assert WAVE_CHARS["p"].level == 1
        assert WAVE_CHARS["n"].level == 0

    def test_states(self):
        """Levels, undefined, high-z and pulled states."""
        assert WAVE_CHARS["0"].category is SegmentKind.LEVEL
        assert WAVE_CHARS["1"].level == 1
        assert WAVE_CHARS["x"].category is SegmentKind.UNDEFINED
        assert WAVE_CHARS["z"].category is SegmentKind.HIGH_Z
        assert WAVE_CHARS["u"].category is SegmentKind.PULL
        assert WAVE_CHARS["d"].level == 0

    def test_extensions(self):
        """'.' and '|' extend, nothing else does."""
        assert is_extension(".")
        assert is_extension("|")
        assert not is_extension("x")
        assert WAVE_CHARS["|"].category is SegmentKind.GAP
        assert WAVE_CHARS["|"].is_data_carrying is False

    def test_count_data_chars(self):
        """Counting ignores extensions and non-data characters."""
        assert count_data_chars("x.2.x") == 1
        assert count_data_chars("=3|4.5") == 4
        assert count_data_chars("p...") == 0
