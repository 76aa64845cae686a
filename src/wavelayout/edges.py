"""
Edge parser and resolver.

Edge strings connect two node letters, e.g. ``"a~>b Setup"``:

    a      source letter
    ~      shape run over - ~ | / \\ (repeats of - / \\ collapse)
    <      optional, first in the run: arrowhead at the source
    #      optional, anywhere in the run: label anchored mid-path
    >      optional, last in the run: arrowhead at the destination
    b      destination letter
    Setup  label, everything after the first whitespace run
"""

import re
from typing import List, Optional

from .errors import InvalidEdgeSyntaxError, UnknownNodeError
from .models import Edge, LabelAnchor, ResolvedEdge, ShapeSegment
from .nodes import NodeRegistry

SHAPE_CHARS = {segment.value: segment for segment in ShapeSegment}

# Legs that repeat instead of collapsing
STACKING = frozenset({ShapeSegment.VERTICAL, ShapeSegment.CURVY})


class EdgeParser:
    """Parses WaveJSON edge strings."""

    # source letter, connector run, destination letter, optional label
    EDGE_PATTERN = re.compile(
        r"^(?P<source>[A-Za-z])(?P<connector>[^A-Za-z\s]+)(?P<dest>[A-Za-z])"
        r"(?:\s+(?P<label>.*))?$",
        re.DOTALL,
    )

    def parse(self, text: str) -> Edge:
        """
        Parse one edge string.

        Args:
            text: Edge string such as "a-|>b label".

        Returns:
            The parsed Edge.

        Raises:
            InvalidEdgeSyntaxError: If the string does not follow the grammar.
        """
        if not isinstance(text, str):
            raise InvalidEdgeSyntaxError(f"Edge must be a string, got {text!r}")

        stripped = text.lstrip()
        match = self.EDGE_PATTERN.match(stripped)
        if not match:
            raise InvalidEdgeSyntaxError(
                "Expected <letter><shape><letter> [label]", entity=text
            )

        connector = match.group("connector")
        has_start_arrow = connector.startswith("<")
        if has_start_arrow:
            connector = connector[1:]
        has_arrow_head = connector.endswith(">")
        if has_arrow_head:
            connector = connector[:-1]

        mid_anchor = "#" in connector
        shape = self._parse_shape(connector.replace("#", ""), text)

        label = match.group("label")
        if not label:
            label = None
            anchor = LabelAnchor.NONE
        elif mid_anchor:
            anchor = LabelAnchor.MID
        else:
            anchor = LabelAnchor.START

        return Edge(
            source=match.group("source"),
            dest=match.group("dest"),
            shape=shape,
            has_arrow_head=has_arrow_head,
            has_start_arrow=has_start_arrow,
            label_anchor=anchor,
            label=label,
            text=text,
        )

    def _parse_shape(self, run: str, text: str) -> tuple:
        """Map a shape run onto path legs.

        Every | and ~ is a leg of its own; a run of repeated -, / or \\ is one
        leg, so "a--->b" is a single straight line.
        """
        if not run:
            raise InvalidEdgeSyntaxError("Edge has no shape between its nodes", text)

        shape: List[ShapeSegment] = []
        for char in run:
            segment = SHAPE_CHARS.get(char)
            if segment is None:
                raise InvalidEdgeSyntaxError(
                    f"Unexpected character {char!r} in edge shape", text
                )
            if not shape or shape[-1] is not segment or segment in STACKING:
                shape.append(segment)
        return tuple(shape)


def parse_edge(text: str) -> Edge:
    """
    Convenience function to parse an edge string.

    Args:
        text: Edge string such as "a~>b Setup".

    Returns:
        The parsed Edge.
    """
    return EdgeParser().parse(text)


def resolve_edge(edge: Edge, registry: NodeRegistry) -> ResolvedEdge:
    """
    Look both ends of ``edge`` up in the registry.

    Raises:
        UnknownNodeError: Naming the first letter that is not registered.
    """
    source = _lookup(edge.source, registry, edge)
    dest = _lookup(edge.dest, registry, edge)
    return ResolvedEdge(edge=edge, source=source, dest=dest)


def _lookup(letter: str, registry: NodeRegistry, edge: Edge) -> tuple:
    position: Optional[tuple] = registry.resolve(letter)
    if position is None:
        raise UnknownNodeError(letter, entity=edge.text)
    return position
