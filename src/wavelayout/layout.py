"""
Layout module turning a compiled Diagram into Geometry.

Handles:
- Row bands and the name gutter (indented by group depth)
- Group brackets spanning all descendant rows
- Wave bricks per signal: levels, clock pulses, data boxes, undefined,
  high-impedance and pulled states, gap markers
- Edge paths between node cells with arrowheads and labels
- Head/foot captions
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .geometry import Geometry, Line, Path, PathCommand, Point, Polygon, Primitive, Text
from .grammar import SegmentKind
from .models import (
    CompiledSignal,
    Config,
    Diagram,
    GroupNode,
    LabelAnchor,
    ResolvedEdge,
    Row,
    RowKind,
    Segment,
    ShapeSegment,
)

logger = logging.getLogger(__name__)

# Base dimensions in abstract units
COLUMN_WIDTH = 40
ROW_HEIGHT = 30
WAVE_HEIGHT = 20
TRANSITION_WIDTH = 4
GROUP_INDENT = 12
BRACKET_TICK = 4
CHAR_WIDTH = 7
NAME_GAP = 10
CAPTION_HEIGHT = 24
MARGIN = 10
ARROW_SIZE = 6
GAP_WIDTH = 6
LABEL_OFFSET = 4


@dataclass
class _Grid:
    """Coordinate helpers for one layout call."""

    origin_x: float
    origin_y: float
    column_width: float
    row_height: float
    wave_height: float

    def x(self, column: float) -> float:
        return self.origin_x + column * self.column_width

    def top(self, row: int) -> float:
        return self.origin_y + row * self.row_height

    def high(self, row: int) -> float:
        return self.top(row) + (self.row_height - self.wave_height) / 2

    def low(self, row: int) -> float:
        return self.high(row) + self.wave_height

    def mid(self, row: int) -> float:
        return self.top(row) + self.row_height / 2

    def center(self, row: int, column: int) -> Point:
        return (self.x(column) + self.column_width / 2, self.mid(row))


@dataclass
class _Brick:
    """Consecutive columns drawn as one unit."""

    start: int
    end: int  # inclusive
    segment: Optional[Segment]


class WaveLayout:
    """
    Lays out compiled diagrams.

    Column width is ``hscale`` times the base column width; nothing else
    depends on hscale. The engine keeps no state between calls.
    """

    def __init__(
        self,
        column_width: float = COLUMN_WIDTH,
        row_height: float = ROW_HEIGHT,
        wave_height: float = WAVE_HEIGHT,
    ):
        """
        Initialize the layout engine.

        Args:
            column_width: Width of one column at hscale 1
            row_height: Height of each row band
            wave_height: Distance between the low and high wave levels
        """
        if wave_height > row_height:
            raise ValueError("wave_height must not exceed row_height")
        self.column_width = column_width
        self.row_height = row_height
        self.wave_height = wave_height

    def layout(self, diagram: Diagram, config: Optional[Config] = None) -> Geometry:
        """
        Compute geometry for a compiled diagram.

        Args:
            diagram: Result of the document compiler
            config: Overrides ``diagram.config`` when given

        Returns:
            Geometry with primitives in drawing order
        """
        config = config or diagram.config
        rows = diagram.rows

        name_width = max(
            (row.depth * GROUP_INDENT + len(row.name) * CHAR_WIDTH for row in rows),
            default=0,
        )
        caption_top = CAPTION_HEIGHT if diagram.head_text else 0
        caption_bottom = CAPTION_HEIGHT if diagram.foot_text else 0

        grid = _Grid(
            origin_x=MARGIN + name_width + NAME_GAP,
            origin_y=MARGIN + caption_top,
            column_width=self.column_width * config.hscale,
            row_height=self.row_height,
            wave_height=self.wave_height,
        )

        geometry = Geometry(
            width=grid.x(diagram.column_count) + MARGIN,
            height=grid.top(len(rows)) + caption_bottom + MARGIN,
            column_width=grid.column_width,
            row_height=grid.row_height,
            wave_origin_x=grid.origin_x,
            wave_origin_y=grid.origin_y,
            column_count=diagram.column_count,
            row_count=len(rows),
            hscale=config.hscale,
            head_text=diagram.head_text,
            foot_text=diagram.foot_text,
        )
        out = geometry.primitives

        self._layout_groups(diagram.root.children, rows, 0, 0, grid, out)

        for row in rows:
            self._layout_row(row, diagram.column_count, grid, out)

        for resolved in diagram.resolved_edges:
            self._layout_edge(resolved, grid, out)

        if diagram.head_text:
            out.append(
                Text(grid.origin_x, MARGIN + CAPTION_HEIGHT / 2, diagram.head_text, "head")
            )
        if diagram.foot_text:
            out.append(
                Text(
                    grid.origin_x,
                    grid.top(len(rows)) + CAPTION_HEIGHT / 2,
                    diagram.foot_text,
                    "foot",
                )
            )

        logger.debug(
            "Laid out %d row(s) x %d column(s) into %d primitive(s)",
            len(rows),
            diagram.column_count,
            len(out),
        )
        return geometry

    # ------------------------------------------------------------------
    # Groups

    def _layout_groups(
        self,
        children: Sequence,
        rows: List[Row],
        cursor: int,
        depth: int,
        grid: _Grid,
        out: List[Primitive],
    ) -> int:
        """
        Walk the tree in row order, emitting a bracket for every group.

        Returns the row cursor after ``children``.
        """
        for child in children:
            if not isinstance(child, GroupNode):
                cursor += 1
                continue

            start = cursor
            label_row: Optional[Row] = None
            if (
                cursor < len(rows)
                and rows[cursor].kind is RowKind.GROUP_LABEL
                and rows[cursor].group is child
            ):
                label_row = rows[cursor]
                cursor += 1
            cursor = self._layout_groups(child.children, rows, cursor, depth + 1, grid, out)

            if cursor == start:
                continue
            x = MARGIN + depth * GROUP_INDENT + 2
            y0 = grid.top(start) + 2
            y1 = grid.top(cursor) - 2
            out.append(
                Line(
                    [(x + BRACKET_TICK, y0), (x, y0), (x, y1), (x + BRACKET_TICK, y1)],
                    "bracket",
                )
            )
            if label_row is not None and label_row.name:
                out.append(
                    Text(
                        x + BRACKET_TICK + 2,
                        grid.mid(label_row.row_index),
                        label_row.name,
                        "group_label",
                    )
                )
        return cursor

    # ------------------------------------------------------------------
    # Signal rows

    def _layout_row(
        self, row: Row, column_count: int, grid: _Grid, out: List[Primitive]
    ) -> None:
        if row.kind is RowKind.GROUP_LABEL:
            return
        if row.name:
            role = "signal_name" if row.kind is RowKind.SIGNAL else "spacer_name"
            x = MARGIN + row.depth * GROUP_INDENT
            out.append(Text(x, grid.mid(row.row_index), row.name, role))
        if row.kind is RowKind.SIGNAL and row.compiled is not None:
            self._layout_wave(row.compiled, row.row_index, column_count, grid, out)

    def _bricks(self, compiled: CompiledSignal, column_count: int) -> List[_Brick]:
        """Split a row into bricks; columns without a segment become padding."""
        cells: List[Optional[Segment]] = [None] * column_count
        if compiled.ok:
            for segment in compiled.segments:
                if 0 <= segment.column < column_count:
                    cells[segment.column] = segment

        def key(segment: Optional[Segment]):
            if segment is None:
                return ("pad",)
            if segment.kind is SegmentKind.DATA:
                return ("data", segment.data_index)
            return ("char", segment.char_index)

        bricks: List[_Brick] = []
        for column, segment in enumerate(cells):
            if bricks and key(bricks[-1].segment) == key(segment):
                bricks[-1].end = column
            else:
                bricks.append(_Brick(column, column, segment))
        return bricks

    def _layout_wave(
        self,
        compiled: CompiledSignal,
        row: int,
        column_count: int,
        grid: _Grid,
        out: List[Primitive],
    ) -> None:
        high, low, mid = grid.high(row), grid.low(row), grid.mid(row)
        previous_y: Optional[float] = None

        for brick in self._bricks(compiled, column_count):
            x0 = grid.x(brick.start)
            x1 = grid.x(brick.end + 1)
            segment = brick.segment
            kind = SegmentKind.UNDEFINED if segment is None else segment.kind

            if kind is SegmentKind.EDGE:
                first = high if segment.level == 1 else low
                second = low if segment.level == 1 else high
                points: List[Point] = []
                if previous_y is not None and previous_y != first:
                    points.append((x0, previous_y))
                xm = (x0 + x1) / 2
                points += [(x0, first), (xm, first), (xm, second), (x1, second)]
                out.append(Line(points, "clock"))
                if segment.has_arrow:
                    out.append(_clock_arrow(x0, mid, rising=segment.level == 1))
                previous_y = second
                continue

            if kind in (SegmentKind.LEVEL, SegmentKind.PULL):
                start_y = high if segment.level == 1 else low
            else:
                start_y = mid
            if previous_y is not None and previous_y != start_y:
                out.append(Line([(x0, previous_y), (x0, start_y)], "transition"))

            if kind is SegmentKind.LEVEL:
                out.append(Line([(x0, start_y), (x1, start_y)], "level"))
            elif kind is SegmentKind.PULL:
                out.append(Line([(x0, start_y), (x1, start_y)], "pull", stroke="dashed"))
            elif kind is SegmentKind.HIGH_Z:
                out.append(Line([(x0, mid), (x1, mid)], "high_z"))
            elif kind is SegmentKind.DATA:
                fill = f"data{segment.color_index}"
                out.append(Polygon(_hexagon(x0, x1, high, low), "data", fill=fill))
                out.append(
                    Text((x0 + x1) / 2, mid, segment.label, "data_label", anchor="middle")
                )
            else:
                role = "undefined" if segment is not None else "padding"
                out.append(Polygon(_hexagon(x0, x1, high, low), role, fill="hatch"))
            previous_y = start_y

        if compiled.ok:
            for segment in compiled.segments:
                if segment.gap and 0 <= segment.column < column_count:
                    x = grid.x(segment.column) + grid.column_width / 2
                    out.extend(_gap_marker(x, high, low))

    # ------------------------------------------------------------------
    # Edges

    def _layout_edge(
        self, resolved: ResolvedEdge, grid: _Grid, out: List[Primitive]
    ) -> None:
        edge = resolved.edge
        start = grid.center(*resolved.source)
        end = grid.center(*resolved.dest)
        path = route(edge.shape, start, end)
        out.append(path)

        if edge.has_arrow_head:
            out.append(_arrowhead(_approach(path), path.end))
        if edge.has_start_arrow:
            out.append(_arrowhead(_departure(path), path.start))

        if edge.label and edge.label_anchor is LabelAnchor.MID:
            x, y = _midpoint(path.waypoints())
            out.append(Text(x, y - LABEL_OFFSET, edge.label, "edge_label", anchor="middle"))
        elif edge.label:
            x, y = start[0] + LABEL_OFFSET, start[1] - LABEL_OFFSET
            out.append(Text(x, y, edge.label, "edge_label"))


def route(shape: Sequence[ShapeSegment], start: Point, end: Point) -> Path:
    """
    Route an edge path from ``start`` to ``end``.

    Vertical legs share the vertical distance; every other leg shares the
    horizontal distance (and, when there are no vertical legs, the vertical
    distance too). Curvy legs are cubic beziers whose control points sit
    halfway along the leg's horizontal extent.
    """
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    vertical = sum(1 for s in shape if s is ShapeSegment.VERTICAL)
    other = len(shape) - vertical

    commands: List[PathCommand] = []
    x, y = start
    for segment in shape:
        if segment is ShapeSegment.VERTICAL:
            nx, ny = x, y + dy / vertical
        elif vertical:
            nx, ny = x + dx / other, y
        else:
            nx, ny = x + dx / other, y + dy / other

        if segment is ShapeSegment.CURVY:
            half = (nx - x) / 2
            commands.append(PathCommand("C", [(x + half, y), (nx - half, ny), (nx, ny)]))
        else:
            commands.append(PathCommand("L", [(nx, ny)]))
        x, y = nx, ny

    if other == 0 and dx != 0:
        commands.append(PathCommand("L", [end]))
    if commands:
        # Pin the end exactly; the shares above accumulate float error
        commands[-1].points[-1] = end
    return Path(start, commands, "edge")


def _approach(path: Path) -> Point:
    """Point the path arrives at its end from."""
    points = [path.start]
    for command in path.commands:
        points.extend(command.points)
    for point in reversed(points[:-1]):
        if point != path.end:
            return point
    return path.start


def _departure(path: Path) -> Point:
    """First point after the start that differs from it."""
    for command in path.commands:
        for point in command.points:
            if point != path.start:
                return point
    return path.end


def _arrowhead(origin: Point, tip: Point) -> Polygon:
    dx, dy = tip[0] - origin[0], tip[1] - origin[1]
    length = math.hypot(dx, dy) or 1.0
    ux, uy = dx / length, dy / length
    bx, by = tip[0] - ux * ARROW_SIZE, tip[1] - uy * ARROW_SIZE
    px, py = -uy * ARROW_SIZE / 2, ux * ARROW_SIZE / 2
    return Polygon(
        [tip, (bx + px, by + py), (bx - px, by - py)], "arrowhead", fill="stroke"
    )


def _clock_arrow(x: float, y: float, rising: bool) -> Polygon:
    direction = -1 if rising else 1
    half = ARROW_SIZE / 2
    tip = (x, y + direction * half)
    return Polygon(
        [tip, (x - half, y - direction * half), (x + half, y - direction * half)],
        "clock_arrow",
        fill="stroke",
    )


def _hexagon(x0: float, x1: float, high: float, low: float) -> List[Point]:
    slant = min(TRANSITION_WIDTH, (x1 - x0) / 2)
    mid = (high + low) / 2
    return [
        (x0, mid),
        (x0 + slant, high),
        (x1 - slant, high),
        (x1, mid),
        (x1 - slant, low),
        (x0 + slant, low),
    ]


def _gap_marker(x: float, high: float, low: float) -> List[Primitive]:
    """Two parallel slashes with the wave masked out between them."""
    top, bottom = high - 2, low + 2
    slant = GAP_WIDTH / 2
    left = [(x - GAP_WIDTH / 2, bottom), (x - GAP_WIDTH / 2 + slant, top)]
    right = [(x + GAP_WIDTH / 2 - slant, bottom), (x + GAP_WIDTH / 2, top)]
    mask = Polygon(
        [left[0], left[1], right[1], right[0]], "gap", fill="background", stroke="none"
    )
    return [mask, Line(left, "gap"), Line(right, "gap")]


def _midpoint(points: List[Point]) -> Point:
    """Point halfway along a polyline."""
    lengths = [math.dist(a, b) for a, b in zip(points, points[1:])]
    remaining = sum(lengths) / 2
    for (a, b), length in zip(zip(points, points[1:]), lengths):
        if remaining <= length and length > 0:
            t = remaining / length
            return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)
        remaining -= length
    return points[-1]


def compute_layout(diagram: Diagram, config: Optional[Config] = None) -> Geometry:
    """
    Convenience function to lay out a compiled diagram.

    Args:
        diagram: Result of the document compiler
        config: Optional config override

    Returns:
        Geometry for the diagram
    """
    return WaveLayout().layout(diagram, config)
