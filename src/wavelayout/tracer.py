"""
Debug tracing for the compile/layout pipeline.

When debug mode is enabled, the generator records a snapshot of every
pipeline stage together with a count of the primitives the layout emitted
per role. This is primarily useful for:
1. Seeing which signals and edges failed, and why
2. Checking row/column assignment and node positions
3. Writing targeted tests against intermediate state

Usage:
    >>> generator = WaveDiagramGenerator()
    >>> geometry = generator.generate(document, debug=True)
    >>> trace = generator.get_trace()
    >>> print(trace.summary())

The trace captures:
- Pipeline stages (compile_signals, register_nodes, resolve_edges, layout)
- Errors and warnings collected while compiling
- Primitive counts by role
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .geometry import Geometry
from .models import Diagram


@dataclass
class PipelineStage:
    """
    Snapshot of state at a pipeline stage.

    Attributes:
        name: Name of this pipeline stage
        data: Dictionary of relevant data at this stage
    """

    name: str
    data: Dict[str, Any]

    def __str__(self) -> str:
        lines = [f"=== Stage: {self.name} ==="]
        for key, value in self.data.items():
            # Truncate long values
            str_val = str(value)
            if len(str_val) > 100:
                str_val = str_val[:100] + "..."
            lines.append(f"  {key}: {str_val}")
        return "\n".join(lines)


@dataclass
class CompileTrace:
    """
    Complete trace of a generate() call.

    Attributes:
        stages: Pipeline stages in execution order
        role_counts: Number of layout primitives per role
        errors: String form of every collected error
        warnings: Collected warnings
    """

    stages: List[PipelineStage] = field(default_factory=list)
    role_counts: Dict[str, int] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_stage(self, name: str, data: Dict[str, Any]) -> None:
        """Add a pipeline stage snapshot."""
        self.stages.append(PipelineStage(name, data.copy()))

    def get_stage(self, name: str) -> Optional[PipelineStage]:
        """Get a specific pipeline stage by name."""
        for stage in self.stages:
            if stage.name == name:
                return stage
        return None

    def record_diagram(self, diagram: Diagram) -> None:
        """Snapshot the compile stages of a diagram."""
        self.add_stage(
            "compile_signals",
            {
                "rows": len(diagram.rows),
                "columns": diagram.column_count,
                "signals": len(diagram.signals),
                "failed": [c.signal.name for c in diagram.signals if not c.ok],
            },
        )
        self.add_stage("register_nodes", {"nodes": diagram.registry.positions()})
        self.add_stage(
            "resolve_edges",
            {
                "resolved": [r.edge.text for r in diagram.resolved_edges],
                "failed": [e.text for e in diagram.edges if e.error is not None],
            },
        )
        self.errors = [str(e) for e in diagram.errors]
        self.warnings = list(diagram.warnings)

    def record_geometry(self, geometry: Geometry) -> None:
        """Snapshot the layout stage."""
        counts: Dict[str, int] = {}
        for primitive in geometry.primitives:
            counts[primitive.role] = counts.get(primitive.role, 0) + 1
        self.role_counts = counts
        self.add_stage(
            "layout",
            {
                "width": geometry.width,
                "height": geometry.height,
                "column_width": geometry.column_width,
                "primitives": len(geometry.primitives),
            },
        )

    def summary(self) -> str:
        """
        Generate a human-readable summary of the trace.

        Returns a string with the stages run, errors, warnings and
        primitive counts by role.
        """
        lines = [
            "=" * 60,
            "COMPILE TRACE SUMMARY",
            "=" * 60,
            "",
            f"Pipeline stages: {len(self.stages)}",
        ]
        for stage in self.stages:
            lines.append(f"  {stage.name}")

        lines.extend(["", f"Errors: {len(self.errors)}"])
        lines.extend(f"  {error}" for error in self.errors)
        lines.extend(["", f"Warnings: {len(self.warnings)}"])
        lines.extend(f"  {warning}" for warning in self.warnings)

        lines.extend(["", "Primitives by role:"])
        for role, count in sorted(self.role_counts.items(), key=lambda x: -x[1]):
            lines.append(f"  {role}: {count}")

        return "\n".join(lines)

    def dump(self) -> str:
        """Summary followed by every stage in full."""
        lines = [self.summary(), "", "=" * 60, "DETAILED TRACE", "=" * 60, ""]
        for stage in self.stages:
            lines.append(str(stage))
            lines.append("")
        return "\n".join(lines)
