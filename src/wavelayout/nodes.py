"""
Node registry.

Collects node-letter bindings declared on signals and keeps them in a
networkx graph. Letters are graph nodes carrying their (row, column);
resolved edges are added as graph edges so timing relationships can be
queried once the document is compiled.
"""

import logging
from typing import Dict, List, Optional, Tuple

import networkx as nx

from .errors import DuplicateNodeError, InvalidEntryError, NodeLengthMismatchError
from .grammar import NODE_NONE
from .models import ResolvedEdge, Signal
from .wave_parser import expand_columns

logger = logging.getLogger(__name__)


class NodeRegistry:
    """
    Maps node letters to grid positions.

    A letter denotes exactly one (row, column) in a document. Binding the
    same letter to the same position again is a no-op.
    """

    def __init__(self):
        self.graph: nx.MultiDiGraph = nx.MultiDiGraph()

    def __contains__(self, letter: str) -> bool:
        return letter in self.graph

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def register(self, signal: Signal, row_index: int) -> None:
        """
        Bind every node letter declared on ``signal``.

        The node string is expanded in lockstep with the wave, so a letter
        lands on the first column of the wave character it sits under.

        Every letter is checked before any is bound, so a signal that fails
        registration leaves no letters behind.

        Raises:
            NodeLengthMismatchError: If node and wave lengths differ.
            DuplicateNodeError: If a letter is already bound elsewhere.
            InvalidEntryError: For markers that are not letters, or letters
                that a negative phase pushes before column 0.
            InvalidPeriodError: If period/phase put a boundary off the grid.
        """
        if signal.node is None:
            return

        name = signal.name or None
        wave_columns = expand_columns(len(signal.wave), signal.period, signal.phase, name)
        node_columns = expand_columns(len(signal.node), signal.period, signal.phase, name)
        if len(node_columns) != len(wave_columns):
            raise NodeLengthMismatchError(
                f"node string expands to {len(node_columns)} column(s) but wave "
                f"expands to {len(wave_columns)}",
                name,
            )

        pending: Dict[str, Tuple[int, int]] = {}
        for char_index, column, is_continuation in node_columns:
            if is_continuation:
                continue
            letter = signal.node[char_index]
            if letter == NODE_NONE:
                continue
            if not (letter.isascii() and letter.isalpha()):
                raise InvalidEntryError(
                    f"node marker {letter!r} at position {char_index} is not a letter",
                    name,
                )
            if column < 0:
                raise InvalidEntryError(
                    f"node {letter!r} falls on column {column}, before the diagram "
                    f"starts (phase {signal.phase})",
                    name,
                )
            requested = (row_index, column)
            existing = pending.get(letter) or self.resolve(letter)
            if existing is not None and existing != requested:
                raise DuplicateNodeError(letter, existing, requested, name)
            pending[letter] = requested

        for letter, (row, column) in pending.items():
            self.bind(letter, row, column, entity=name)

    def bind(
        self, letter: str, row: int, column: int, entity: Optional[str] = None
    ) -> None:
        """Bind one letter to (row, column)."""
        requested = (row, column)
        existing = self.resolve(letter)
        if existing is not None:
            if existing == requested:
                return
            raise DuplicateNodeError(letter, existing, requested, entity)

        self.graph.add_node(letter, row=row, column=column, signal=entity)
        logger.debug("Registered node %r at row %d, column %d", letter, row, column)

    def resolve(self, letter: str) -> Optional[Tuple[int, int]]:
        """Return the (row, column) bound to ``letter``, or None."""
        if letter not in self.graph:
            return None
        attrs = self.graph.nodes[letter]
        return attrs["row"], attrs["column"]

    def positions(self) -> Dict[str, Tuple[int, int]]:
        """All bindings as a plain dict."""
        return {
            letter: (attrs["row"], attrs["column"])
            for letter, attrs in self.graph.nodes(data=True)
        }

    def connect(self, resolved: ResolvedEdge) -> None:
        """Record a resolved edge between two registered letters."""
        edge = resolved.edge
        self.graph.add_edge(edge.source, edge.dest, edge=resolved)

    def edges_from(self, letter: str) -> List[ResolvedEdge]:
        """Resolved edges leaving ``letter``."""
        if letter not in self.graph:
            return []
        return [data["edge"] for _, _, data in self.graph.out_edges(letter, data=True)]

    def edges_to(self, letter: str) -> List[ResolvedEdge]:
        """Resolved edges arriving at ``letter``."""
        if letter not in self.graph:
            return []
        return [data["edge"] for _, _, data in self.graph.in_edges(letter, data=True)]

    def reachable_from(self, letter: str) -> List[str]:
        """Letters reachable from ``letter`` by following edges, sorted."""
        if letter not in self.graph:
            return []
        return sorted(nx.descendants(self.graph, letter))
