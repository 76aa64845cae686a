"""
Error types for WaveJSON compilation.

Low-level compilers raise these exceptions. The document compiler catches
them per signal and per edge, attaches them to the offending entity and
returns them on the Diagram so every problem can be reported in one pass.
Only EmptyDocumentError, and InvalidEntryError for a document that is not
an object at all, propagate out of a document compile.
"""

from typing import Optional


class WaveJSONError(Exception):
    """Base class for all WaveJSON compilation errors."""

    def __init__(self, message: str, entity: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.entity = entity

    def __str__(self) -> str:
        if self.entity is not None:
            return f"{self.entity}: {self.message}"
        return self.message


class InvalidWaveCharError(WaveJSONError):
    """Raised when a wave string contains a character outside the alphabet."""

    def __init__(self, char: str, position: int, entity: Optional[str] = None):
        super().__init__(
            f"Invalid wave character {char!r} at position {position}", entity
        )
        self.char = char
        self.position = position


class DanglingExtensionError(WaveJSONError):
    """Raised when a wave starts with '.' or '|' and has nothing to extend."""


class DataMismatchError(WaveJSONError):
    """Raised when data labels and data-carrying characters do not match up."""

    def __init__(self, expected: int, supplied: int, entity: Optional[str] = None):
        super().__init__(
            f"Wave has {expected} data-carrying character(s) but "
            f"{supplied} data label(s) were supplied",
            entity,
        )
        self.expected = expected
        self.supplied = supplied


class InvalidPeriodError(WaveJSONError):
    """Raised when period/phase would put a character off the column grid."""


class NodeLengthMismatchError(WaveJSONError):
    """Raised when a node string and its wave expand to different lengths."""


class DuplicateNodeError(WaveJSONError):
    """Raised when a node letter is declared at two different positions."""

    def __init__(self, letter: str, existing, requested, entity: Optional[str] = None):
        super().__init__(
            f"Node {letter!r} already registered at {existing}, "
            f"cannot register again at {requested}",
            entity,
        )
        self.letter = letter
        self.existing = existing
        self.requested = requested


class UnknownNodeError(WaveJSONError):
    """Raised when an edge references a node letter nobody declared."""

    def __init__(self, letter: str, entity: Optional[str] = None):
        super().__init__(f"Unknown node {letter!r}", entity)
        self.letter = letter


class InvalidEdgeSyntaxError(WaveJSONError):
    """Raised when an edge string does not follow the edge grammar."""


class InvalidEntryError(WaveJSONError):
    """Raised for signal-list entries that are neither signal, spacer nor group."""


class InvalidConfigError(WaveJSONError):
    """Raised for unusable values in the document's config section."""


class EmptyDocumentError(WaveJSONError):
    """Raised when a document declares no signals at all."""
