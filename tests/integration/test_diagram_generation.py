"""
Integration tests for full diagram generation.

These tests run realistic WaveJSON documents through the whole pipeline
(compile, layout, rasterize) and check the result hangs together.
"""

import os
import tempfile

import pytest

from wavelayout import WaveDiagramGenerator, compile_document
from wavelayout.models import RowKind
from wavelayout.wave_parser import serialize_segments

SPI_DOCUMENT = {
    "signal": [
        {"name": "sclk", "wave": "0.p.......|..", "node": "..a.........."},
        {"name": "cs", "wave": "10........|.1", "node": "............b"},
        [
            "data",
            {"name": "mosi", "wave": "x.3.4.5.x..|x", "data": "D7 D6 D5"},
            {"name": "miso", "wave": "z.=.=.=.z..|z", "data": ["Q7", "Q6", "Q5"]},
        ],
    ],
    "edge": ["a~>b transfer"],
    "head": {"text": "SPI transfer"},
}

PIPELINE_DOCUMENT = {
    "signal": [
        {"name": "clk", "wave": "P......."},
        {"name": "stage1", "wave": "x2345x..", "data": ["a", "b", "c", "d"]},
        {"name": "stage2", "wave": "x2345x..", "data": ["a", "b", "c", "d"], "phase": 1},
        {"name": "stage3", "wave": "x2345x..", "data": ["a", "b", "c", "d"], "phase": 2},
        {},
        {"name": "valid", "wave": "0.1...0.", "node": "..p...q."},
    ],
    "edge": ["p<-#>q burst"],
    "config": {"hscale": 2},
    "foot": {"text": "Three-stage pipeline"},
}


class TestSPITransfer:
    """A small SPI transaction."""

    def test_compiles_cleanly(self):
        """No errors, one group, one edge."""
        diagram = compile_document(SPI_DOCUMENT)
        assert diagram.is_valid, [str(e) for e in diagram.errors]
        assert [row.kind for row in diagram.rows] == [
            RowKind.SIGNAL,
            RowKind.SIGNAL,
            RowKind.GROUP_LABEL,
            RowKind.SIGNAL,
            RowKind.SIGNAL,
        ]
        assert len(diagram.resolved_edges) == 1

    def test_geometry(self):
        """Every data value is drawn once."""
        geometry = WaveDiagramGenerator().generate(SPI_DOCUMENT)
        labels = [t.text for t in geometry.by_role("data_label")]
        assert labels == ["D7", "D6", "D5", "Q7", "Q6", "Q5"]
        assert len(geometry.by_role("gap")) == 4 * 3
        assert len(geometry.by_role("bracket")) == 1
        assert geometry.by_role("head")[0].text == "SPI transfer"

    def test_round_trip(self):
        """Compiled segments serialize back to their source."""
        diagram = compile_document(SPI_DOCUMENT)
        for compiled in diagram.signals:
            wave, data = serialize_segments(compiled.segments)
            assert wave == compiled.signal.wave
            assert tuple(data) == compiled.signal.data


class TestPipeline:
    """A pipeline with phase-shifted stages."""

    def test_phase_shifts_data(self):
        """Each stage's first value starts one column later."""
        diagram = compile_document(PIPELINE_DOCUMENT)
        assert diagram.is_valid
        starts = []
        for compiled in diagram.signals[1:4]:
            first = next(s for s in compiled.segments if s.label == "a")
            starts.append(first.column)
        assert starts == [1, 2, 3]
        assert diagram.column_count == 10

    def test_hscale_applied(self):
        """The document's hscale widens columns."""
        geometry = WaveDiagramGenerator().generate(PIPELINE_DOCUMENT)
        assert geometry.column_width == 80
        assert geometry.width == geometry.wave_origin_x + 10 * 80 + 10

    def test_double_arrow_with_mid_label(self):
        """'<-#>' gives two arrowheads and a centred label."""
        geometry = WaveDiagramGenerator().generate(PIPELINE_DOCUMENT)
        (path,) = geometry.by_role("edge")
        assert len(geometry.by_role("arrowhead")) == 2
        (label,) = geometry.by_role("edge_label")
        assert label.text == "burst"
        assert label.x == (path.start[0] + path.end[0]) / 2

    def test_short_signals_padded(self):
        """Columns a signal does not cover are padded."""
        geometry = WaveDiagramGenerator().generate(PIPELINE_DOCUMENT)
        # trailing: clk, stage1, stage2, valid; leading: stage2, stage3
        assert len(geometry.by_role("padding")) == 6

    @pytest.mark.parametrize("scale", [1, 2])
    def test_png_export(self, scale):
        """The pipeline renders to a PNG file."""
        generator = WaveDiagramGenerator()
        with tempfile.TemporaryDirectory() as tmpdir:
            filepath = os.path.join(tmpdir, "pipeline.png")
            generator.save_png(PIPELINE_DOCUMENT, filepath, scale=scale)
            assert os.path.getsize(filepath) > 0


class TestBrokenDocument:
    """A document with several independent problems."""

    DOCUMENT = {
        "signal": [
            {"name": "ok", "wave": "01.0", "node": ".a.."},
            {"name": "bad_char", "wave": "01k0"},
            {"name": "bad_data", "wave": "=.=.", "data": ["only"]},
            {"name": "dangling", "wave": ".010"},
            {"name": "bad_node", "wave": "0101", "node": ".a"},
        ],
        "edge": ["a->z", "a?b"],
        "config": {"hscale": -1},
    }

    def test_all_problems_reported(self):
        """Every problem is collected; nothing is raised."""
        diagram = compile_document(self.DOCUMENT)
        names = sorted(type(e).__name__ for e in diagram.errors)
        assert names == [
            "DanglingExtensionError",
            "DataMismatchError",
            "InvalidConfigError",
            "InvalidEdgeSyntaxError",
            "InvalidWaveCharError",
            "NodeLengthMismatchError",
            "UnknownNodeError",
        ]

    def test_still_renders(self):
        """The good signal is drawn and the rest padded."""
        geometry = WaveDiagramGenerator().generate(self.DOCUMENT)
        assert geometry.row_count == 5
        assert geometry.hscale == 1
        assert len(geometry.by_role("padding")) == 4
