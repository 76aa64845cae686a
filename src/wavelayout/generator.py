"""
Main timing-diagram generator module.

Combines compiling, layout and (optionally) rasterizing to go from a
WaveJSON document to geometry or a PNG image.
"""

import logging
from typing import Any, Mapping, Optional, Union

from PIL import Image

from .document import DocumentCompiler
from .geometry import Geometry
from .layout import COLUMN_WIDTH, ROW_HEIGHT, WAVE_HEIGHT, WaveLayout
from .models import Config, Diagram, positive_int
from .png_renderer import PNGRenderer
from .tracer import CompileTrace

logger = logging.getLogger(__name__)

Document = Union[str, Mapping[str, Any]]


class WaveDiagramGenerator:
    """
    Generate timing-diagram geometry from WaveJSON documents.

    Example:
        >>> generator = WaveDiagramGenerator()
        >>> geometry = generator.generate({
        ...     "signal": [
        ...         {"name": "clk", "wave": "p...."},
        ...         {"name": "bus", "wave": "x.=.x", "data": ["head"]},
        ...     ]
        ... })
        >>> geometry.column_count
        5
    """

    def __init__(
        self,
        column_width: float = COLUMN_WIDTH,
        row_height: float = ROW_HEIGHT,
        wave_height: float = WAVE_HEIGHT,
        reserve_untitled_group_rows: bool = False,
        hscale: Optional[int] = None,
    ):
        """
        Initialize the generator.

        Args:
            column_width: Width of one column at hscale 1
            row_height: Height of each row band
            wave_height: Distance between the low and high wave levels
            reserve_untitled_group_rows: Give untitled groups a label row
            hscale: Overrides the document's config.hscale when given
        """
        if hscale is not None:
            checked = positive_int(hscale)
            if checked is None:
                raise ValueError(f"hscale must be a positive integer, got {hscale!r}")
            hscale = checked

        self.column_width = column_width
        self.row_height = row_height
        self.wave_height = wave_height
        self.reserve_untitled_group_rows = reserve_untitled_group_rows
        self.hscale = hscale

        self.compiler = DocumentCompiler(
            reserve_untitled_group_rows=reserve_untitled_group_rows
        )
        self.layout_engine = WaveLayout(
            column_width=column_width, row_height=row_height, wave_height=wave_height
        )
        self._trace: Optional[CompileTrace] = None

    def compile(self, document: Document) -> Diagram:
        """Compile a document without laying it out."""
        return self.compiler.compile(document)

    def layout(self, diagram: Diagram) -> Geometry:
        """Lay out an already compiled diagram."""
        config = Config(hscale=self.hscale) if self.hscale else diagram.config
        return self.layout_engine.layout(diagram, config)

    def generate(self, document: Document, debug: bool = False) -> Geometry:
        """
        Compile and lay out a WaveJSON document.

        Args:
            document: Parsed document, or its JSON text
            debug: Record a CompileTrace, available from get_trace()

        Returns:
            Geometry for the diagram. Errors for individual signals and edges
            are logged; use compile() to inspect them.

        Raises:
            EmptyDocumentError: If the document has no signals
        """
        self._trace = CompileTrace() if debug else None

        diagram = self.compile(document)
        for error in diagram.errors:
            logger.info("WaveJSON problem: %s", error)
        if self._trace is not None:
            self._trace.record_diagram(diagram)

        geometry = self.layout(diagram)
        if self._trace is not None:
            self._trace.record_geometry(geometry)
        return geometry

    def get_trace(self) -> Optional[CompileTrace]:
        """Trace of the last generate(debug=True) call, if any."""
        return self._trace

    def render_png(self, document: Document, scale: int = 2, **kwargs) -> Image.Image:
        """
        Generate the diagram and rasterize it.

        Args:
            document: Parsed document, or its JSON text
            scale: Resolution multiplier
            **kwargs: Additional arguments for PNGRenderer

        Returns:
            An RGB Pillow image
        """
        geometry = self.generate(document)
        return PNGRenderer(scale=scale, **kwargs).render(geometry)

    def save_png(
        self, document: Document, filename: str, scale: int = 2, **kwargs
    ) -> str:
        """
        Generate the diagram and save it as a PNG image.

        Args:
            document: Parsed document, or its JSON text
            filename: Output filename (should end in .png)
            scale: Resolution multiplier
            **kwargs: Additional arguments for PNGRenderer

        Returns:
            Path to the saved PNG file
        """
        geometry = self.generate(document)
        return PNGRenderer(scale=scale, **kwargs).save(geometry, filename)
