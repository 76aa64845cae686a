"""Unit tests for the compile trace."""

from wavelayout import compile_document, compute_layout
from wavelayout.tracer import CompileTrace, PipelineStage


class TestPipelineStage:
    """Tests for PipelineStage."""

    def test_str(self):
        """Stages print their name and data."""
        stage = PipelineStage("layout", {"width": 120})
        text = str(stage)
        assert "=== Stage: layout ===" in text
        assert "width: 120" in text

    def test_long_values_truncated(self):
        """Very long values are cut off."""
        stage = PipelineStage("big", {"value": "x" * 500})
        assert "..." in str(stage)
        assert len(str(stage)) < 200


class TestCompileTrace:
    """Tests for CompileTrace."""

    def test_stages_recorded(self, edge_document):
        """Recording a diagram and its geometry adds four stages."""
        diagram = compile_document(edge_document)
        trace = CompileTrace()
        trace.record_diagram(diagram)
        trace.record_geometry(compute_layout(diagram))

        names = [stage.name for stage in trace.stages]
        assert names == ["compile_signals", "register_nodes", "resolve_edges", "layout"]
        assert trace.get_stage("register_nodes").data["nodes"] == {
            "a": (0, 1),
            "b": (1, 3),
        }
        assert trace.get_stage("resolve_edges").data["resolved"] == ["a~>b Setup"]
        assert trace.role_counts["edge"] == 1

    def test_errors_and_warnings(self):
        """Errors and warnings are copied from the diagram."""
        diagram = compile_document(
            {
                "signal": [[{"name": "a", "wave": "0q"}]],
                "edge": ["a->b"],
            }
        )
        trace = CompileTrace()
        trace.record_diagram(diagram)
        assert len(trace.errors) == 2
        assert trace.warnings == ["Untitled group at row 0"]
        assert trace.get_stage("compile_signals").data["failed"] == ["a"]
        assert trace.get_stage("resolve_edges").data["failed"] == ["a->b"]

    def test_missing_stage(self):
        """Unknown stages are None."""
        assert CompileTrace().get_stage("nope") is None

    def test_summary_and_dump(self, simple_document):
        """The summary lists stages and roles; dump adds details."""
        diagram = compile_document(simple_document)
        trace = CompileTrace()
        trace.record_diagram(diagram)
        trace.record_geometry(compute_layout(diagram))

        summary = trace.summary()
        assert "COMPILE TRACE SUMMARY" in summary
        assert "Pipeline stages: 4" in summary
        assert "clock: 5" in summary

        dump = trace.dump()
        assert "DETAILED TRACE" in dump
        assert "=== Stage: layout ===" in dump
