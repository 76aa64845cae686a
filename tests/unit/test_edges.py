"""Unit tests for edge parsing and resolution."""

import pytest

from wavelayout.edges import parse_edge, resolve_edge
from wavelayout.errors import InvalidEdgeSyntaxError, UnknownNodeError
from wavelayout.models import LabelAnchor, ShapeSegment


class TestEdgeParser:
    """Tests for EdgeParser.parse."""

    def test_curvy_arrow_with_label(self, edge_parser):
        """The common '~>' form with a start-anchored label."""
        edge = edge_parser.parse("a~>b Setup")
        assert edge.source == "a"
        assert edge.dest == "b"
        assert edge.shape == (ShapeSegment.CURVY,)
        assert edge.has_arrow_head is True
        assert edge.has_start_arrow is False
        assert edge.label_anchor is LabelAnchor.START
        assert edge.label == "Setup"
        assert edge.text == "a~>b Setup"

    def test_mid_label(self, edge_parser):
        """'#' anchors the label mid-path."""
        edge = edge_parser.parse("a-#>b 10 ns")
        assert edge.label_anchor is LabelAnchor.MID
        assert edge.label == "10 ns"
        assert edge.shape == (ShapeSegment.STRAIGHT,)

    def test_no_label(self, edge_parser):
        """Edges without a label anchor nowhere."""
        edge = edge_parser.parse("a-b")
        assert edge.label is None
        assert edge.label_anchor is LabelAnchor.NONE
        assert edge.has_arrow_head is False

    def test_orthogonal_shape(self, edge_parser):
        """Multi-leg shapes keep their order."""
        edge = edge_parser.parse("a-|->b")
        assert edge.shape == (
            ShapeSegment.STRAIGHT,
            ShapeSegment.VERTICAL,
            ShapeSegment.STRAIGHT,
        )

    def test_straight_repeats_collapse(self, edge_parser):
        """Repeated straight and diagonal characters make one leg."""
        assert edge_parser.parse("a--->b").shape == (ShapeSegment.STRAIGHT,)
        assert edge_parser.parse("a//b").shape == (ShapeSegment.DIAGONAL_UP,)

    def test_vertical_and_curvy_repeats_stack(self, edge_parser):
        """Each | and ~ contributes a leg of its own."""
        assert edge_parser.parse("a~~>b").shape == (
            ShapeSegment.CURVY,
            ShapeSegment.CURVY,
        )
        assert edge_parser.parse("a~|~>b").shape == (
            ShapeSegment.CURVY,
            ShapeSegment.VERTICAL,
            ShapeSegment.CURVY,
        )
        assert edge_parser.parse("a||b").shape == (
            ShapeSegment.VERTICAL,
            ShapeSegment.VERTICAL,
        )

    def test_diagonals(self, edge_parser):
        """Both diagonal directions are recognised."""
        assert edge_parser.parse("a/b").shape == (ShapeSegment.DIAGONAL_UP,)
        assert edge_parser.parse("a\\b").shape == (ShapeSegment.DIAGONAL_DOWN,)

    def test_start_arrow(self, edge_parser):
        """'<' at the start of the run puts an arrow on the source."""
        edge = edge_parser.parse("a<->b")
        assert edge.has_start_arrow is True
        assert edge.has_arrow_head is True
        assert edge.shape == (ShapeSegment.STRAIGHT,)

    def test_label_verbatim(self, edge_parser):
        """Label text after the first whitespace run is kept as written."""
        edge = edge_parser.parse("a->b  t  hold  ")
        assert edge.label == "t  hold  "

    def test_whitespace_only_label(self, edge_parser):
        """Trailing whitespace alone is not a label."""
        edge = edge_parser.parse("a->b   ")
        assert edge.label is None
        assert edge.label_anchor is LabelAnchor.NONE

    def test_missing_shape(self, edge_parser):
        """Two letters with no shape between them are rejected."""
        with pytest.raises(InvalidEdgeSyntaxError):
            edge_parser.parse("a>b")

    def test_bad_shape_character(self, edge_parser):
        """Characters outside the shape alphabet are rejected."""
        with pytest.raises(InvalidEdgeSyntaxError):
            edge_parser.parse("a-=b")

    def test_missing_destination(self, edge_parser):
        """An edge needs a destination letter."""
        with pytest.raises(InvalidEdgeSyntaxError):
            edge_parser.parse("a->")

    def test_not_a_string(self, edge_parser):
        """Non-string edges are rejected."""
        with pytest.raises(InvalidEdgeSyntaxError):
            edge_parser.parse(["a", "b"])

    def test_parse_edge_function(self):
        """The module-level shortcut parses too."""
        assert parse_edge("x|y").shape == (ShapeSegment.VERTICAL,)


class TestResolveEdge:
    """Tests for resolve_edge."""

    def test_resolves_both_ends(self, registry):
        """Both ends map to their registered positions."""
        registry.bind("a", 0, 1)
        registry.bind("b", 1, 3)
        resolved = resolve_edge(parse_edge("a~>b"), registry)
        assert resolved.source == (0, 1)
        assert resolved.dest == (1, 3)

    def test_unknown_destination(self, registry):
        """The missing letter is named in the error."""
        registry.bind("a", 0, 1)
        with pytest.raises(UnknownNodeError) as exc_info:
            resolve_edge(parse_edge("a~>z"), registry)
        assert exc_info.value.letter == "z"
        assert "Unknown node 'z'" in str(exc_info.value)

    def test_unknown_source_reported_first(self, registry):
        """When both ends are missing the source is reported."""
        with pytest.raises(UnknownNodeError) as exc_info:
            resolve_edge(parse_edge("p->q"), registry)
        assert exc_info.value.letter == "p"
