"""
Geometry primitives produced by the layout engine.

A Geometry is a flat, ordered list of declarative shapes in abstract units
(x grows right, y grows down). Renderers map it onto a concrete surface;
nothing here draws.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

Point = Tuple[float, float]


@dataclass
class Line:
    """An open polyline."""

    points: List[Point]
    role: str
    stroke: str = "solid"


@dataclass
class Polygon:
    """A closed, optionally filled shape."""

    points: List[Point]
    role: str
    fill: Optional[str] = None
    stroke: str = "solid"


@dataclass
class PathCommand:
    """
    One drawing command of a Path.

    Attributes:
        op: "L" (line to the last point) or "C" (cubic bezier; points are
            control 1, control 2, end).
        points: Points consumed by the command.
    """

    op: str
    points: List[Point]


@dataclass
class Path:
    """A path made of straight and cubic legs starting at ``start``."""

    start: Point
    commands: List[PathCommand]
    role: str
    stroke: str = "solid"

    @property
    def end(self) -> Point:
        if not self.commands:
            return self.start
        return self.commands[-1].points[-1]

    def waypoints(self) -> List[Point]:
        """Start point followed by the end point of every command."""
        return [self.start] + [command.points[-1] for command in self.commands]


@dataclass
class Text:
    """A text label anchored at (x, y)."""

    x: float
    y: float
    text: str
    role: str
    anchor: str = "start"


Primitive = Union[Line, Polygon, Path, Text]


@dataclass
class Geometry:
    """
    Laid-out diagram.

    Attributes:
        width: Total width in abstract units.
        height: Total height in abstract units.
        column_width: Width of one column (hscale times the base width).
        row_height: Height of one row band.
        wave_origin_x: X where column 0 starts.
        wave_origin_y: Y where row 0 starts.
        column_count: Columns in the diagram.
        row_count: Rows in the diagram.
        hscale: Horizontal scale that was applied.
        head_text: Caption above the diagram, passed through.
        foot_text: Caption below the diagram, passed through.
        primitives: Shapes in drawing order.
    """

    width: float
    height: float
    column_width: float
    row_height: float
    wave_origin_x: float
    wave_origin_y: float
    column_count: int
    row_count: int
    hscale: int = 1
    head_text: Optional[str] = None
    foot_text: Optional[str] = None
    primitives: List[Primitive] = field(default_factory=list)

    def by_role(self, role: str) -> List[Primitive]:
        """Primitives with the given role, in drawing order."""
        return [p for p in self.primitives if p.role == role]

    def texts(self) -> List[Text]:
        return [p for p in self.primitives if isinstance(p, Text)]

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data form, each primitive tagged with its type."""
        result = asdict(self)
        result["primitives"] = [
            dict(asdict(p), type=type(p).__name__.lower()) for p in self.primitives
        ]
        return result
