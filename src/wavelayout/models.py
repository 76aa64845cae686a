"""
Data models for WaveJSON compilation.

This module contains the dataclasses that flow through the compile and
layout pipeline: the normalized signal tree built from a document, the
per-column segments produced by the signal compiler, the flattened rows,
parsed and resolved edges, and the Diagram aggregate that owns them all.

Classes:
    Signal: One named wave with its data, period, phase and node markers.
    Spacer: A blank row.
    GroupNode: A (possibly untitled) group of signals, spacers and groups.
    Segment: One compiled column of a signal.
    DataSpan: A run of segments sharing one data label.
    Row: One horizontal band of the flattened diagram.
    Edge / ResolvedEdge: Timing arrows between nodes.
    Config: Document-level configuration.
    Diagram: The compiled document.
"""

from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Tuple, Union

from .errors import InvalidEntryError, InvalidPeriodError, WaveJSONError
from .grammar import SegmentKind

if TYPE_CHECKING:
    from .nodes import NodeRegistry


def to_fraction(value: Any, field_name: str, entity: Optional[str] = None) -> Fraction:
    """Convert a JSON number (or "n/d" string) into an exact Fraction."""
    if isinstance(value, bool):
        raise InvalidPeriodError(f"{field_name} must be a number, got {value!r}", entity)
    if isinstance(value, Fraction):
        return value
    if isinstance(value, int):
        return Fraction(value)
    if isinstance(value, (float, str)):
        try:
            # str() keeps 0.1 as 1/10 instead of its binary expansion
            return Fraction(str(value))
        except (ValueError, ZeroDivisionError):
            pass
    raise InvalidPeriodError(f"{field_name} must be a number, got {value!r}", entity)


@dataclass(frozen=True)
class Signal:
    """
    A single named wave, immutable once built.

    Attributes:
        name: Label shown to the left of the wave.
        wave: Raw wave string, one character per cycle.
        data: Labels consumed in order by data-carrying characters.
        period: Columns occupied by each wave character.
        phase: Column offset; positive moves the wave later.
        node: Optional node-marker string aligned with the wave.
    """

    name: str
    wave: str
    data: Tuple[str, ...] = ()
    period: Fraction = Fraction(1)
    phase: Fraction = Fraction(0)
    node: Optional[str] = None

    @classmethod
    def from_dict(cls, entry: Mapping[str, Any]) -> "Signal":
        """Build a Signal from a WaveJSON signal object."""
        name = entry.get("name", "")
        name = "" if name is None else str(name)

        wave = entry.get("wave", "")
        if not isinstance(wave, str):
            raise InvalidEntryError(f"wave must be a string, got {wave!r}", name)

        data = entry.get("data", ())
        if data is None:
            data = ()
        elif isinstance(data, str):
            data = data.split()
        elif not isinstance(data, (list, tuple)):
            raise InvalidEntryError(f"data must be a list or string, got {data!r}", name)

        node = entry.get("node")
        if node is not None and not isinstance(node, str):
            raise InvalidEntryError(f"node must be a string, got {node!r}", name)

        period = to_fraction(entry.get("period", 1), "period", name)
        if period <= 0:
            raise InvalidPeriodError(f"period must be positive, got {period}", name)
        phase = to_fraction(entry.get("phase", 0), "phase", name)

        return cls(
            name=name,
            wave=wave,
            data=tuple(str(label) for label in data),
            period=period,
            phase=phase,
            node=node,
        )


@dataclass(frozen=True)
class Spacer:
    """A blank row (an empty object in the signal list)."""

    name: str = ""


@dataclass
class GroupNode:
    """
    A group of entries drawn with a bracket and an optional label.

    Attributes:
        label: Group title, or None for an untitled group.
        children: Signals, spacers and nested groups in document order.
    """

    label: Optional[str] = None
    children: List[Union[Signal, Spacer, "GroupNode"]] = field(default_factory=list)

    @property
    def is_untitled(self) -> bool:
        return not self.label


@dataclass(frozen=True)
class Segment:
    """
    One compiled column of a signal.

    Attributes:
        column: Absolute column on the diagram grid.
        kind: Resolved kind of the cycle.
        char: Wave character as written ('.' and '|' are kept).
        state: Character whose semantics this column carries.
        char_index: Index of the source character in the wave string.
        level: 0/1 for levels and pulls; first-half level for clocks.
        data_index: Index into the signal's data for data cycles.
        label: Resolved data label for data cycles.
        color_index: Render color for data cycles (0-4).
        spans_from_previous: True when this column continues the previous one.
        gap: True when a '|' gap marker sits on this column.
        has_arrow: True for arrowed clock variants.
    """

    column: int
    kind: SegmentKind
    char: str
    state: str
    char_index: int
    level: Optional[int] = None
    data_index: Optional[int] = None
    label: Optional[str] = None
    color_index: Optional[int] = None
    spans_from_previous: bool = False
    gap: bool = False
    has_arrow: bool = False


@dataclass(frozen=True)
class DataSpan:
    """Columns covered by one data label (inclusive on both ends)."""

    start_column: int
    end_column: int
    label: str
    data_index: int
    color_index: int


@dataclass
class CompiledSignal:
    """A signal together with its compile result or the error it raised."""

    signal: Signal
    row_index: int
    segments: List[Segment] = field(default_factory=list)
    error: Optional[WaveJSONError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def end_column(self) -> int:
        """Column just past the signal's last expanded cycle."""
        return int(len(self.signal.wave) * self.signal.period + self.signal.phase)


class RowKind(Enum):
    """What a row of the diagram shows."""

    SIGNAL = "signal"
    SPACER = "spacer"
    GROUP_LABEL = "group_label"


@dataclass
class Row:
    """
    One horizontal band of the flattened diagram.

    Attributes:
        depth: Group nesting depth (0 for top-level entries).
        kind: Signal, spacer or group label.
        row_index: Position from the top, counting every row.
        name: Signal name, spacer name or group label.
        compiled: Compile result for signal rows.
        group: Owning group for group-label rows.
    """

    depth: int
    kind: RowKind
    row_index: int
    name: str = ""
    compiled: Optional[CompiledSignal] = None
    group: Optional[GroupNode] = None


class ShapeSegment(Enum):
    """One leg of an edge path."""

    STRAIGHT = "-"
    CURVY = "~"
    VERTICAL = "|"
    DIAGONAL_UP = "/"
    DIAGONAL_DOWN = "\\"


class LabelAnchor(Enum):
    """Where an edge label is placed along its path."""

    START = "start"
    MID = "mid"
    NONE = "none"


@dataclass(frozen=True)
class Edge:
    """
    A parsed edge string.

    Attributes:
        source: Source node letter.
        dest: Destination node letter.
        shape: Path legs in drawing order.
        has_arrow_head: Arrowhead at the destination ('>').
        has_start_arrow: Arrowhead at the source ('<').
        label_anchor: Label placement, NONE when there is no label.
        label: Label text, verbatim.
        text: The original edge string.
    """

    source: str
    dest: str
    shape: Tuple[ShapeSegment, ...]
    has_arrow_head: bool = False
    has_start_arrow: bool = False
    label_anchor: LabelAnchor = LabelAnchor.NONE
    label: Optional[str] = None
    text: str = ""


@dataclass(frozen=True)
class ResolvedEdge:
    """An edge whose endpoints were found in the node registry."""

    edge: Edge
    source: Tuple[int, int]
    dest: Tuple[int, int]


@dataclass
class EdgeEntry:
    """One entry of the document's edge list and what became of it."""

    text: Any
    edge: Optional[Edge] = None
    resolved: Optional[ResolvedEdge] = None
    error: Optional[WaveJSONError] = None


def positive_int(value: Any) -> Optional[int]:
    """Return ``value`` as a positive int (2.0 counts as 2), or None."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return None
    return value


@dataclass(frozen=True)
class Config:
    """Document configuration (the WaveJSON 'config' object)."""

    hscale: int = 1


@dataclass
class Diagram:
    """
    A compiled WaveJSON document.

    Holds everything the layout engine needs. Errors found while compiling
    individual signals and edges are collected in ``errors``; the diagram is
    still usable for everything that did compile.
    """

    root: GroupNode
    rows: List[Row]
    signals: List[CompiledSignal]
    registry: "NodeRegistry"
    edges: List[EdgeEntry] = field(default_factory=list)
    config: Config = field(default_factory=Config)
    column_count: int = 0
    head_text: Optional[str] = None
    foot_text: Optional[str] = None
    errors: List[WaveJSONError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def resolved_edges(self) -> List[ResolvedEdge]:
        return [entry.resolved for entry in self.edges if entry.resolved is not None]
