"""
Signal compiler.

Turns one Signal's wave string into one Segment per diagram column,
applying period and phase and assigning data labels.
"""

import logging
from fractions import Fraction
from typing import List, Optional, Tuple

from .errors import (
    DanglingExtensionError,
    DataMismatchError,
    InvalidPeriodError,
    InvalidWaveCharError,
)
from .grammar import CharInfo, SegmentKind, count_data_chars, is_extension, lookup
from .models import DataSpan, Segment, Signal

logger = logging.getLogger(__name__)


def expand_columns(
    length: int, period: Fraction, phase: Fraction, entity: Optional[str] = None
) -> List[Tuple[int, int, bool]]:
    """
    Expand ``length`` characters onto the column grid.

    Args:
        length: Number of characters in the wave (or node) string.
        period: Columns per character.
        phase: Column offset; positive shifts later.
        entity: Name used in error messages.

    Returns:
        List of (char_index, column, is_continuation) tuples, including
        columns that fall before 0.

    Raises:
        InvalidPeriodError: If any character boundary is not a whole column.
    """
    if period <= 0:
        raise InvalidPeriodError(f"period must be positive, got {period}", entity)

    expanded: List[Tuple[int, int, bool]] = []
    for index in range(length):
        start = index * period + phase
        end = (index + 1) * period + phase
        if start.denominator != 1 or end.denominator != 1:
            raise InvalidPeriodError(
                f"character {index} spans columns {start}..{end}; "
                f"period {period} and phase {phase} must land on whole columns",
                entity,
            )
        for offset, column in enumerate(range(int(start), int(end))):
            expanded.append((index, column, offset > 0))
    return expanded


class _State:
    """Resolved state of one wave character."""

    def __init__(
        self,
        info: CharInfo,
        data_index: Optional[int] = None,
        label: Optional[str] = None,
    ):
        self.info = info
        self.data_index = data_index
        self.label = label


def _resolve_states(signal: Signal) -> List[Tuple[str, _State]]:
    """Resolve every wave character to the state it draws."""
    name = signal.name or None
    resolved: List[Tuple[str, _State]] = []
    previous: Optional[_State] = None
    cursor = 0
    expected = count_data_chars(signal.wave)

    for position, char in enumerate(signal.wave):
        info = lookup(char)
        if info is None:
            raise InvalidWaveCharError(char, position, name)

        if info.category in (SegmentKind.EXTEND, SegmentKind.GAP):
            if previous is None:
                raise DanglingExtensionError(
                    f"{char!r} at position 0 has no previous cycle to extend", name
                )
            resolved.append((char, previous))
            continue

        state = _State(info)
        if info.is_data_carrying:
            if cursor >= len(signal.data):
                raise DataMismatchError(expected, len(signal.data), name)
            state.data_index = cursor
            state.label = signal.data[cursor]
            cursor += 1
        resolved.append((char, state))
        previous = state

    if cursor != len(signal.data):
        raise DataMismatchError(expected, len(signal.data), name)

    return resolved


def compile_signal(signal: Signal) -> List[Segment]:
    """
    Compile a signal into one Segment per non-negative column.

    Args:
        signal: The signal to compile.

    Returns:
        Segments ordered by column.

    Raises:
        InvalidPeriodError: If period/phase put a boundary off the grid.
        InvalidWaveCharError: For characters outside the wave alphabet.
        DanglingExtensionError: If the wave starts with '.' or '|'.
        DataMismatchError: If data labels are under- or over-supplied.
    """
    name = signal.name or None
    expanded = expand_columns(len(signal.wave), signal.period, signal.phase, name)
    states = _resolve_states(signal)

    segments: List[Segment] = []
    for char_index, column, is_continuation in expanded:
        if column < 0:
            continue
        char, state = states[char_index]
        info = state.info
        extends = is_extension(char)
        segments.append(
            Segment(
                column=column,
                kind=info.category,
                char=char,
                state=info.char,
                char_index=char_index,
                level=info.level,
                data_index=state.data_index,
                label=state.label,
                color_index=info.color_index,
                spans_from_previous=extends or is_continuation,
                gap=char == "|" and not is_continuation,
                has_arrow=info.has_arrow,
            )
        )

    logger.debug(
        "Compiled signal %r: %d character(s) -> %d column(s)",
        signal.name,
        len(signal.wave),
        len(segments),
    )
    return segments


def data_spans(segments: List[Segment]) -> List[DataSpan]:
    """
    Group data segments into one span per data label.

    A span runs from the column of its data character up to the column
    before the next non-extension character.
    """
    spans: List[DataSpan] = []
    current: Optional[DataSpan] = None

    for segment in segments:
        if segment.kind is SegmentKind.DATA and current is not None:
            if segment.data_index == current.data_index:
                current = DataSpan(
                    start_column=current.start_column,
                    end_column=segment.column,
                    label=current.label,
                    data_index=current.data_index,
                    color_index=current.color_index,
                )
                continue
        if current is not None:
            spans.append(current)
            current = None
        if segment.kind is SegmentKind.DATA:
            current = DataSpan(
                start_column=segment.column,
                end_column=segment.column,
                label=segment.label,
                data_index=segment.data_index,
                color_index=segment.color_index,
            )

    if current is not None:
        spans.append(current)
    return spans


def serialize_segments(segments: List[Segment]) -> Tuple[str, List[str]]:
    """
    Rebuild the wave string and data list a segment sequence came from.

    Characters clipped away by a negative phase cannot be recovered.
    """
    wave: List[str] = []
    last_index: Optional[int] = None
    for segment in segments:
        if segment.char_index != last_index:
            wave.append(segment.char)
            last_index = segment.char_index
    return "".join(wave), [span.label for span in data_spans(segments)]
