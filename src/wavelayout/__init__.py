"""
WaveLayout - WaveJSON timing diagrams as vector geometry

A Python library that compiles WaveJSON documents (signals, data, nodes,
edges, config) into a structured diagram and lays it out as declarative
vector primitives.

Example:
    >>> from wavelayout import WaveDiagramGenerator
    >>> generator = WaveDiagramGenerator()
    >>> geometry = generator.generate({
    ...     "signal": [
    ...         {"name": "clk", "wave": "p.....", "node": ".a...."},
    ...         {"name": "req", "wave": "0.1..0", "node": "..b..."},
    ...     ],
    ...     "edge": ["a~>b setup"],
    ... })
    >>> len(geometry.by_role("edge"))
    1

Debug Mode Example:
    >>> geometry = generator.generate(document, debug=True)
    >>> print(generator.get_trace().summary())
"""

from .document import DocumentCompiler, compile_document
from .edges import EdgeParser, parse_edge, resolve_edge
from .errors import (
    DanglingExtensionError,
    DataMismatchError,
    DuplicateNodeError,
    EmptyDocumentError,
    InvalidConfigError,
    InvalidEdgeSyntaxError,
    InvalidEntryError,
    InvalidPeriodError,
    InvalidWaveCharError,
    NodeLengthMismatchError,
    UnknownNodeError,
    WaveJSONError,
)
from .generator import WaveDiagramGenerator
from .geometry import Geometry, Line, Path, PathCommand, Polygon, Text
from .grammar import WAVE_CHARS, CharInfo, SegmentKind
from .layout import WaveLayout, compute_layout
from .models import (
    Config,
    DataSpan,
    Diagram,
    Edge,
    GroupNode,
    LabelAnchor,
    ResolvedEdge,
    Row,
    RowKind,
    Segment,
    ShapeSegment,
    Signal,
    Spacer,
)
from .nodes import NodeRegistry
from .png_renderer import PNGRenderer, render_to_png
from .tracer import CompileTrace, PipelineStage
from .wave_parser import compile_signal, data_spans, serialize_segments

__version__ = "0.1.0"

__all__ = [
    # Main API
    "WaveDiagramGenerator",
    # Grammar
    "WAVE_CHARS",
    "CharInfo",
    "SegmentKind",
    # Models
    "Signal",
    "Spacer",
    "GroupNode",
    "Segment",
    "DataSpan",
    "Row",
    "RowKind",
    "Edge",
    "ResolvedEdge",
    "ShapeSegment",
    "LabelAnchor",
    "Config",
    "Diagram",
    # Compilers
    "compile_signal",
    "data_spans",
    "serialize_segments",
    "DocumentCompiler",
    "compile_document",
    "NodeRegistry",
    "EdgeParser",
    "parse_edge",
    "resolve_edge",
    # Layout
    "WaveLayout",
    "compute_layout",
    "Geometry",
    "Line",
    "Polygon",
    "Path",
    "PathCommand",
    "Text",
    # Rendering
    "PNGRenderer",
    "render_to_png",
    # Debug/Tracing
    "CompileTrace",
    "PipelineStage",
    # Errors
    "WaveJSONError",
    "InvalidWaveCharError",
    "DanglingExtensionError",
    "DataMismatchError",
    "InvalidPeriodError",
    "NodeLengthMismatchError",
    "DuplicateNodeError",
    "UnknownNodeError",
    "InvalidEdgeSyntaxError",
    "InvalidEntryError",
    "InvalidConfigError",
    "EmptyDocumentError",
]
