"""
Document compiler.

Normalizes a WaveJSON document into a signal tree, flattens it into rows,
compiles every signal, registers node letters and finally resolves edges.

Compilation runs in passes:
1. Build the tree: lists become groups, objects with a wave become
   signals, other objects become spacers.
2. Flatten the tree depth-first into rows and compile each signal.
3. Register node letters for every compiled signal.
4. Parse and resolve edges against the complete registry.

Errors in individual signals and edges are collected, not raised, so a
caller sees every problem of a document at once.
"""

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from .edges import EdgeParser, resolve_edge
from .errors import (
    EmptyDocumentError,
    InvalidConfigError,
    InvalidEntryError,
    WaveJSONError,
)
from .models import (
    CompiledSignal,
    Config,
    Diagram,
    EdgeEntry,
    GroupNode,
    Row,
    RowKind,
    Signal,
    Spacer,
    positive_int,
)
from .nodes import NodeRegistry
from .wave_parser import compile_signal

logger = logging.getLogger(__name__)

Entry = Union[Signal, Spacer, GroupNode]


class DocumentCompiler:
    """
    Compiles WaveJSON documents into Diagrams.

    Example:
        >>> compiler = DocumentCompiler()
        >>> diagram = compiler.compile({"signal": [{"name": "clk", "wave": "p..."}]})
        >>> diagram.column_count
        4
    """

    def __init__(self, reserve_untitled_group_rows: bool = False):
        """
        Initialize the compiler.

        Args:
            reserve_untitled_group_rows: Give untitled groups a (blank) label
                row like titled ones. By default only their children get rows.
        """
        self.reserve_untitled_group_rows = reserve_untitled_group_rows
        self.edge_parser = EdgeParser()

    def compile(self, document: Union[str, Mapping[str, Any]]) -> Diagram:
        """
        Compile a WaveJSON document.

        Args:
            document: Parsed document, or its JSON text.

        Returns:
            The compiled Diagram. Check ``diagram.errors`` for problems with
            individual signals, edges or config.

        Raises:
            EmptyDocumentError: If the document has no signals.
            InvalidEntryError: If the document itself is not an object.
        """
        if isinstance(document, str):
            try:
                document = json.loads(document)
            except json.JSONDecodeError as e:
                raise InvalidEntryError(f"Document is not valid JSON: {e}") from e

        if not isinstance(document, Mapping):
            raise InvalidEntryError(
                f"Document must be an object, got {type(document).__name__}"
            )

        entries = document.get("signal")
        if not entries:
            raise EmptyDocumentError("Document has no signals")
        if not isinstance(entries, list):
            raise InvalidEntryError("'signal' must be a list")

        errors: List[WaveJSONError] = []
        warnings: List[str] = []

        # Signals that could not be built, keyed by id of their placeholder
        failed: Dict[int, WaveJSONError] = {}
        root = GroupNode(
            label=None, children=self._build_children(entries, errors, failed)
        )

        rows: List[Row] = []
        signals: List[CompiledSignal] = []
        self._flatten(root.children, 0, rows, signals, warnings, failed)

        if not signals:
            raise EmptyDocumentError("Document has no signals")

        for compiled in signals:
            if not compiled.ok:
                continue
            try:
                compiled.segments = compile_signal(compiled.signal)
            except WaveJSONError as e:
                compiled.error = e
                errors.append(e)
                logger.warning("Signal %r failed to compile: %s", compiled.signal.name, e)

        column_count = max(
            (max(c.end_column, 0) for c in signals if c.ok), default=0
        )

        # All letters must be known before any edge is resolved.
        registry = NodeRegistry()
        for compiled in signals:
            if not compiled.ok:
                continue
            try:
                registry.register(compiled.signal, compiled.row_index)
            except WaveJSONError as e:
                compiled.error = e
                errors.append(e)
                logger.warning("Nodes of %r not registered: %s", compiled.signal.name, e)

        edges = self._resolve_edges(document.get("edge") or [], registry, errors)
        config = self._read_config(document.get("config"), errors)

        diagram = Diagram(
            root=root,
            rows=rows,
            signals=signals,
            registry=registry,
            edges=edges,
            config=config,
            column_count=column_count,
            head_text=_caption(document.get("head")),
            foot_text=_caption(document.get("foot")),
            errors=errors,
            warnings=warnings,
        )
        logger.debug(
            "Compiled document: %d row(s), %d column(s), %d edge(s), %d error(s)",
            len(rows),
            column_count,
            len(diagram.resolved_edges),
            len(errors),
        )
        return diagram

    def _build_children(
        self,
        items: List[Any],
        errors: List[WaveJSONError],
        failed: Dict[int, WaveJSONError],
    ) -> List[Entry]:
        """Normalize a list of raw entries into tree nodes."""
        children: List[Entry] = []
        for item in items:
            try:
                children.append(self._build_entry(item, errors, failed))
            except WaveJSONError as e:
                errors.append(e)
                logger.warning("Bad signal entry: %s", e)
                if isinstance(item, Mapping) and "wave" in item:
                    # Keep the row so the failure shows where it was declared
                    placeholder = _placeholder_signal(item)
                    failed[id(placeholder)] = e
                    children.append(placeholder)
        return children

    def _build_entry(
        self, item: Any, errors: List[WaveJSONError], failed: Dict[int, WaveJSONError]
    ) -> Entry:
        if isinstance(item, list):
            label: Optional[str] = None
            if item and isinstance(item[0], str):
                label, item = item[0], item[1:]
            children = self._build_children(item, errors, failed)
            return GroupNode(label=label or None, children=children)
        if isinstance(item, Mapping):
            if "wave" in item:
                return Signal.from_dict(item)
            name = item.get("name", "")
            return Spacer(name="" if name is None else str(name))
        raise InvalidEntryError(f"Unexpected entry in signal list: {item!r}")

    def _flatten(
        self,
        children: List[Entry],
        depth: int,
        rows: List[Row],
        signals: List[CompiledSignal],
        warnings: List[str],
        failed: Dict[int, WaveJSONError],
    ) -> None:
        """Assign rows depth-first, a label row before each group's children."""
        for child in children:
            if isinstance(child, GroupNode):
                if child.is_untitled:
                    warnings.append(f"Untitled group at row {len(rows)}")
                    logger.warning("Untitled group at row %d", len(rows))
                if not child.is_untitled or self.reserve_untitled_group_rows:
                    rows.append(
                        Row(
                            depth=depth,
                            kind=RowKind.GROUP_LABEL,
                            row_index=len(rows),
                            name=child.label or "",
                            group=child,
                        )
                    )
                self._flatten(child.children, depth + 1, rows, signals, warnings, failed)
            elif isinstance(child, Spacer):
                rows.append(
                    Row(
                        depth=depth,
                        kind=RowKind.SPACER,
                        row_index=len(rows),
                        name=child.name,
                    )
                )
            else:
                compiled = CompiledSignal(
                    signal=child, row_index=len(rows), error=failed.get(id(child))
                )
                signals.append(compiled)
                rows.append(
                    Row(
                        depth=depth,
                        kind=RowKind.SIGNAL,
                        row_index=len(rows),
                        name=child.name,
                        compiled=compiled,
                    )
                )

    def _resolve_edges(
        self, items: Any, registry: NodeRegistry, errors: List[WaveJSONError]
    ) -> List[EdgeEntry]:
        if not isinstance(items, list):
            items = [items]

        entries: List[EdgeEntry] = []
        for item in items:
            entry = EdgeEntry(text=item)
            try:
                entry.edge = self.edge_parser.parse(item)
                entry.resolved = resolve_edge(entry.edge, registry)
                registry.connect(entry.resolved)
            except WaveJSONError as e:
                entry.error = e
                errors.append(e)
                logger.warning("Edge %r dropped: %s", item, e)
            entries.append(entry)
        return entries

    def _read_config(self, raw: Any, errors: List[WaveJSONError]) -> Config:
        if raw is None:
            return Config()
        if not isinstance(raw, Mapping):
            errors.append(InvalidConfigError(f"config must be an object, got {raw!r}"))
            return Config()

        raw_hscale = raw.get("hscale", 1)
        hscale = positive_int(raw_hscale)
        if hscale is None:
            errors.append(
                InvalidConfigError(
                    f"hscale must be a positive integer, got {raw_hscale!r}"
                )
            )
            logger.warning("Ignoring hscale %r, using 1", raw_hscale)
            return Config()
        return Config(hscale=hscale)


def _caption(raw: Any) -> Optional[str]:
    """Pull the caption text out of a head/foot object."""
    if isinstance(raw, Mapping):
        text = raw.get("text")
        return None if text is None else str(text)
    return None


def _placeholder_signal(item: Mapping[str, Any]) -> Signal:
    """Bare Signal standing in for an entry that failed validation."""
    name = item.get("name", "")
    wave = item.get("wave", "")
    return Signal(
        name="" if name is None else str(name),
        wave=wave if isinstance(wave, str) else "",
    )


def compile_document(
    document: Union[str, Mapping[str, Any]], reserve_untitled_group_rows: bool = False
) -> Diagram:
    """
    Convenience function to compile a WaveJSON document.

    Args:
        document: Parsed document, or its JSON text.
        reserve_untitled_group_rows: See DocumentCompiler.

    Returns:
        The compiled Diagram.
    """
    return DocumentCompiler(reserve_untitled_group_rows).compile(document)
