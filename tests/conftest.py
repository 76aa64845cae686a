"""Pytest configuration and shared fixtures for WaveLayout tests."""

import pytest

from wavelayout import DocumentCompiler, NodeRegistry, WaveDiagramGenerator, WaveLayout
from wavelayout.edges import EdgeParser


@pytest.fixture
def simple_document():
    """Clock plus a bus carrying one value."""
    return {
        "signal": [
            {"name": "clk", "wave": "p...."},
            {"name": "bus", "wave": "x.2.x", "data": ["A"]},
        ]
    }


@pytest.fixture
def edge_document():
    """Two signals with nodes and a labelled curvy arrow between them."""
    return {
        "signal": [
            {"name": "req", "wave": "01..0", "node": ".a..."},
            {"name": "ack", "wave": "0..10", "node": "...b."},
        ],
        "edge": ["a~>b Setup"],
    }


@pytest.fixture
def grouped_document():
    """Nested groups, a spacer and captions."""
    return {
        "signal": [
            {"name": "clk", "wave": "p......"},
            {},
            [
                "Master",
                ["ctrl", {"name": "write", "wave": "01.0..."}, {"name": "read", "wave": "0...10."}],
                {"name": "addr", "wave": "x3.x...", "data": "A1"},
            ],
            [
                "Slave",
                {"name": "ack", "wave": "x01x0.1", "node": "..a...."},
                {"name": "rdata", "wave": "x.....4", "data": ["Q2"], "node": "......b"},
            ],
        ],
        "edge": ["a-|>b response"],
        "head": {"text": "Bus read/write"},
        "foot": {"text": "Figure 1"},
        "config": {"hscale": 1},
    }


@pytest.fixture
def compiler():
    """Default DocumentCompiler instance."""
    return DocumentCompiler()


@pytest.fixture
def registry():
    """Empty node registry."""
    return NodeRegistry()


@pytest.fixture
def edge_parser():
    """EdgeParser instance."""
    return EdgeParser()


@pytest.fixture
def layout_engine():
    """Default WaveLayout instance."""
    return WaveLayout()


@pytest.fixture
def generator():
    """Default WaveDiagramGenerator instance."""
    return WaveDiagramGenerator()
