"""TypeID exceptions.

Every validation failure maps to exactly one class below.  Each class
carries a stable ``code`` matching the condition name, so format
adapters can collapse them into their own error model while callers
that care can still branch on the precise cause.
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Codec errors (raised by ``typeids.core.base32`` when used directly)
# ---------------------------------------------------------------------------


class Base32Error(ValueError):
    """Base class for base32 codec failures."""

    code = "Base32Error"


class InvalidLength(Base32Error):
    """Raised when the codec input is not 16 bytes / 26 characters."""

    code = "InvalidLength"


class InvalidCharacter(Base32Error):
    """Raised when a decode input character is outside the alphabet."""

    code = "InvalidCharacter"

    def __init__(self, message: str, *, position: int) -> None:
        super().__init__(message)
        self.position = position


# ---------------------------------------------------------------------------
# TypeID errors
# ---------------------------------------------------------------------------


class TypeIDError(ValueError):
    """Base class for every TypeID construction or formatting failure."""

    code = "TypeIDError"


class PrefixError(TypeIDError):
    """The prefix violates the ``[a-z_]{0,63}`` grammar."""


class InvalidPrefixLength(PrefixError):
    code = "InvalidPrefixLength"


class InvalidPrefixStart(PrefixError):
    code = "InvalidPrefixStart"


class InvalidPrefixEnd(PrefixError):
    code = "InvalidPrefixEnd"


class InvalidPrefixChars(PrefixError):
    code = "InvalidPrefixChars"


class SuffixError(TypeIDError):
    """The suffix is not a valid 26-character base32 value."""


class EmptySuffix(SuffixError):
    code = "EmptySuffix"


class InvalidSuffixLength(SuffixError):
    code = "InvalidSuffixLength"


class InvalidSuffixOverflow(SuffixError):
    code = "InvalidSuffixOverflow"


class InvalidSuffixChars(SuffixError):
    code = "InvalidSuffixChars"


class EmptyPrefixWithSeparator(TypeIDError):
    """A separator was present but nothing precedes it."""

    code = "EmptyPrefixWithSeparator"


class BufferTooSmall(TypeIDError):
    """The destination buffer cannot hold the canonical string."""

    code = "BufferTooSmall"

    def __init__(self, message: str, *, required: int, available: int) -> None:
        super().__init__(message)
        self.required = required
        self.available = available


class InvalidUUID(TypeIDError):
    """The value is not a parseable UUID."""

    code = "InvalidUUID"


class InvalidUUIDLength(InvalidUUID):
    """Raw UUID bytes were not exactly 16 bytes long."""

    code = "InvalidUUIDLength"


class TimestampOverflow(TypeIDError):
    """The wall clock is outside the 48-bit millisecond range."""

    code = "TimestampOverflow"
