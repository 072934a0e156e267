"""TypeID core: UUIDv7 generation, base32 codec and the TypeID value.

Three layers, leaves first:

1. **uuid7** -- monotonic time-ordered 128-bit generator.  One
   ``Generator`` per thread by default; ``SharedGenerator`` adds a lock
   for callers that must share one instance.

2. **base32** -- fixed 16-byte <-> 26-character codec over the alphabet
   ``0123456789abcdefghjkmnpqrstvwxyz``.

3. **typeid** -- prefix grammar, suffix grammar, parsing and
   formatting of ``prefix_suffix`` strings.
"""

from .errors import (
    Base32Error,
    BufferTooSmall,
    EmptyPrefixWithSeparator,
    EmptySuffix,
    InvalidCharacter,
    InvalidLength,
    InvalidPrefixChars,
    InvalidPrefixEnd,
    InvalidPrefixLength,
    InvalidPrefixStart,
    InvalidSuffixChars,
    InvalidSuffixLength,
    InvalidSuffixOverflow,
    InvalidUUID,
    InvalidUUIDLength,
    PrefixError,
    SuffixError,
    TimestampOverflow,
    TypeIDError,
)
from .schema import TypeIDField
from .typeid import (
    MAX_LENGTH,
    MAX_PREFIX_LENGTH,
    TYPEID_PATTERN,
    TypeID,
    validate_prefix,
    validate_suffix,
)
from .uuid7 import (
    Generator,
    SharedGenerator,
    default_generator,
    format_uuid,
    get_shared_generator,
    new_generator,
    parse_uuid,
)

__all__ = [
    "Base32Error",
    "BufferTooSmall",
    "EmptyPrefixWithSeparator",
    "EmptySuffix",
    "Generator",
    "InvalidCharacter",
    "InvalidLength",
    "InvalidPrefixChars",
    "InvalidPrefixEnd",
    "InvalidPrefixLength",
    "InvalidPrefixStart",
    "InvalidSuffixChars",
    "InvalidSuffixLength",
    "InvalidSuffixOverflow",
    "InvalidUUID",
    "InvalidUUIDLength",
    "MAX_LENGTH",
    "MAX_PREFIX_LENGTH",
    "PrefixError",
    "SharedGenerator",
    "SuffixError",
    "TYPEID_PATTERN",
    "TimestampOverflow",
    "TypeID",
    "TypeIDError",
    "TypeIDField",
    "default_generator",
    "format_uuid",
    "get_shared_generator",
    "new_generator",
    "parse_uuid",
    "validate_prefix",
    "validate_suffix",
]
