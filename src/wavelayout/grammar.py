"""
Grammar tables for WaveJSON wave strings.

Every wave character maps to a CharInfo describing what it means:
a logic level, a clock pulse, a data span, an undefined/high-impedance/pulled
state, or an extension of the previous cycle. The signal compiler is a flat
dispatch over this table.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class SegmentKind(Enum):
    """Resolved kind of one compiled wave cycle."""

    LEVEL = "level"
    EDGE = "edge"
    DATA = "data"
    GAP = "gap"
    UNDEFINED = "undefined"
    HIGH_Z = "high_z"
    PULL = "pull"
    # Grammar-only category for '.', never stored on a Segment
    EXTEND = "extend"


@dataclass(frozen=True)
class CharInfo:
    """Semantics of a single wave character."""

    char: str
    category: SegmentKind
    level: Optional[int] = None
    draws_edge: bool = False
    is_clock_pulse: bool = False
    is_data_carrying: bool = False
    color_index: Optional[int] = None
    has_arrow: bool = False


def _clock(char: str, level: int, has_arrow: bool) -> CharInfo:
    return CharInfo(
        char=char,
        category=SegmentKind.EDGE,
        level=level,
        draws_edge=True,
        is_clock_pulse=True,
        has_arrow=has_arrow,
    )


def _data(char: str, color_index: int) -> CharInfo:
    return CharInfo(
        char=char,
        category=SegmentKind.DATA,
        draws_edge=True,
        is_data_carrying=True,
        color_index=color_index,
    )


# Clock levels give the first half of the pulse: p starts high, n starts low.
WAVE_CHARS: Dict[str, CharInfo] = {
    "p": _clock("p", 1, has_arrow=False),
    "n": _clock("n", 0, has_arrow=False),
    "P": _clock("P", 1, has_arrow=True),
    "N": _clock("N", 0, has_arrow=True),
    "0": CharInfo("0", SegmentKind.LEVEL, level=0, draws_edge=True),
    "1": CharInfo("1", SegmentKind.LEVEL, level=1, draws_edge=True),
    ".": CharInfo(".", SegmentKind.EXTEND),
    "=": _data("=", 0),
    "2": _data("2", 1),
    "3": _data("3", 2),
    "4": _data("4", 3),
    "5": _data("5", 4),
    "x": CharInfo("x", SegmentKind.UNDEFINED, draws_edge=True),
    "z": CharInfo("z", SegmentKind.HIGH_Z, draws_edge=True),
    "u": CharInfo("u", SegmentKind.PULL, level=1, draws_edge=True),
    "d": CharInfo("d", SegmentKind.PULL, level=0, draws_edge=True),
    "|": CharInfo("|", SegmentKind.GAP),
}

EXTENSION_CHARS = frozenset(".|")
DATA_CHARS = frozenset(c for c, info in WAVE_CHARS.items() if info.is_data_carrying)
NODE_NONE = "."


def lookup(char: str) -> Optional[CharInfo]:
    """Return the CharInfo for a wave character, or None if it is not valid."""
    return WAVE_CHARS.get(char)


def is_extension(char: str) -> bool:
    """True for characters that continue the previous cycle ('.' and '|')."""
    return char in EXTENSION_CHARS


def count_data_chars(wave: str) -> int:
    """Number of data-carrying characters in a wave string."""
    return sum(1 for char in wave if char in DATA_CHARS)
