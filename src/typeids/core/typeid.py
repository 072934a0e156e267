"""TypeID: a type prefix plus a base32-encoded UUIDv7.

Canonical string form::

    user_01h455vb4pex5vsknk084sn02q
    ^^^^ ^^^^^^^^^^^^^^^^^^^^^^^^^^
    prefix          suffix

- prefix: 0-63 characters of ``[a-z_]``, not starting or ending with
  ``_``.  Internal underscores are allowed (``pre_fix``).
- separator: ``_``, omitted entirely when the prefix is empty.
- suffix: 26 characters of the base32 alphabet, first one in ``0``-``7``
  so the value fits 128 bits.

Parsing splits on the *last* underscore, since the suffix is fixed
width and never contains one.

``TypeID`` is an immutable, hashable value.  Ordering is by
``(prefix, suffix)``; because the alphabet is in ascending ASCII order
and the suffix is fixed width, suffix order equals UUID order, so IDs
minted by one generator sort chronologically.

Usage::

    tid = TypeID.new("user")
    str(tid)                       # "user_01h455vb4pex5vsknk084sn02q"
    TypeID.from_string(str(tid)) == tid
    tid.to_uuid()                  # "01890a5d-ac96-774b-bcce-b302099a8057"
"""

from __future__ import annotations

import functools
import logging
import string
import uuid
from typing import TYPE_CHECKING, Any

from typeids.infra.metrics import PARSE_ERRORS_TOTAL, metrics_enabled

from . import base32
from .errors import (
    Base32Error,
    BufferTooSmall,
    EmptyPrefixWithSeparator,
    EmptySuffix,
    InvalidPrefixChars,
    InvalidPrefixEnd,
    InvalidPrefixLength,
    InvalidPrefixStart,
    InvalidSuffixChars,
    InvalidSuffixLength,
    InvalidSuffixOverflow,
    InvalidUUID,
    InvalidUUIDLength,
    TypeIDError,
)
from .uuid7 import UUID_BYTES, Generator, default_generator, format_uuid, parse_uuid

if TYPE_CHECKING:
    from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
    from pydantic.json_schema import JsonSchemaValue
    from pydantic_core import CoreSchema

logger = logging.getLogger(__name__)

SEPARATOR = "_"
MAX_PREFIX_LENGTH = 63
SUFFIX_LENGTH = base32.ENCODED_LENGTH
# prefix + separator + suffix
MAX_LENGTH = MAX_PREFIX_LENGTH + 1 + SUFFIX_LENGTH
ZERO_SUFFIX = "0" * SUFFIX_LENGTH

TYPEID_PATTERN = r"^(?:[a-z]([a-z_]{0,61}[a-z])?_)?[0-7][0-9a-hjkmnp-tv-z]{25}$"

_PREFIX_CHARS = frozenset(string.ascii_lowercase + SEPARATOR)


# ---------------------------------------------------------------------------
# Grammar
# ---------------------------------------------------------------------------


def validate_prefix(prefix: str) -> None:
    """Check ``prefix`` against the prefix grammar, failing on the first rule.

    Raises:
        InvalidPrefixLength: longer than 63 characters.
        InvalidPrefixStart: starts with ``_``.
        InvalidPrefixEnd: ends with ``_``.
        InvalidPrefixChars: any character outside ``[a-z_]``.
    """
    if len(prefix) > MAX_PREFIX_LENGTH:
        raise InvalidPrefixLength(
            f"Prefix must be at most {MAX_PREFIX_LENGTH} characters, "
            f"got {len(prefix)}"
        )
    if not prefix:
        return
    if prefix[0] == SEPARATOR:
        raise InvalidPrefixStart(f"Prefix cannot start with '_': {prefix!r}")
    if prefix[-1] == SEPARATOR:
        raise InvalidPrefixEnd(f"Prefix cannot end with '_': {prefix!r}")
    for char in prefix:
        if char not in _PREFIX_CHARS:
            raise InvalidPrefixChars(
                f"Prefix may only contain [a-z_], found {char!r} in {prefix!r}"
            )


def validate_suffix(suffix: str) -> None:
    """Check ``suffix`` against the suffix grammar, failing on the first rule.

    The overflow check compares the first character's code point with
    ``'7'``; any character above it (alphabet letters as well as
    strangers like ``o``) would need bits past 128.

    Raises:
        EmptySuffix: empty string.
        InvalidSuffixLength: not exactly 26 characters.
        InvalidSuffixOverflow: first character above ``'7'``.
        InvalidSuffixChars: a character outside the base32 alphabet.
    """
    if not suffix:
        raise EmptySuffix("Suffix cannot be empty")
    if len(suffix) != SUFFIX_LENGTH:
        raise InvalidSuffixLength(
            f"Suffix must be exactly {SUFFIX_LENGTH} characters, got {len(suffix)}"
        )
    if suffix[0] > "7":
        raise InvalidSuffixOverflow(
            f"Suffix must start with 0-7 to fit 128 bits: {suffix!r}"
        )
    try:
        base32.decode(suffix)
    except Base32Error as exc:
        raise InvalidSuffixChars(
            f"Suffix contains characters outside the base32 alphabet: {suffix!r}"
        ) from exc


def _record_rejection(text: str, exc: TypeIDError) -> None:
    logger.debug("Rejected TypeID %r: %s", text, exc.code)
    if metrics_enabled():
        PARSE_ERRORS_TOTAL.labels(code=exc.code).inc()


# ---------------------------------------------------------------------------
# Value type
# ---------------------------------------------------------------------------


@functools.total_ordering
class TypeID:
    """Immutable ``prefix_suffix`` identifier.

    ``TypeID(prefix)`` mints a fresh ID; ``TypeID(prefix, suffix)``
    validates and wraps an existing suffix.  Prefer the named
    constructors below for readability.
    """

    __slots__ = ("_prefix", "_suffix")

    _prefix: str
    _suffix: str

    def __init__(
        self,
        prefix: str = "",
        suffix: str | None = None,
        *,
        generator: Generator | None = None,
    ) -> None:
        if suffix is not None and generator is not None:
            raise TypeError("Pass either suffix or generator, not both")
        if suffix is not None:
            try:
                validate_prefix(prefix)
                validate_suffix(suffix)
            except TypeIDError as exc:
                _record_rejection(f"{prefix}{SEPARATOR}{suffix}", exc)
                raise
        else:
            validate_prefix(prefix)
            gen = generator if generator is not None else default_generator()
            suffix = base32.encode(gen.next_bytes())
        object.__setattr__(self, "_prefix", prefix)
        object.__setattr__(self, "_suffix", suffix)

    @classmethod
    def _trusted(cls, prefix: str, suffix: str) -> TypeID:
        """Build from parts already known to be valid."""
        self = cls.__new__(cls)
        object.__setattr__(self, "_prefix", prefix)
        object.__setattr__(self, "_suffix", suffix)
        return self

    # -- constructors -------------------------------------------------------

    @classmethod
    def new(cls, prefix: str = "", *, generator: Generator | None = None) -> TypeID:
        """Mint a TypeID with a fresh UUIDv7 suffix.

        Uses the calling thread's default generator unless ``generator``
        is given.
        """
        return cls(prefix, generator=generator)

    @classmethod
    def from_parts(cls, prefix: str, suffix: str) -> TypeID:
        """Validate and combine an explicit prefix and suffix.

        Nothing is generated: an empty ``suffix`` raises ``EmptySuffix``.
        """
        return cls(prefix, suffix)

    @classmethod
    def from_string(cls, text: str) -> TypeID:
        """Parse the canonical ``prefix_suffix`` (or bare ``suffix``) form.

        Raises:
            EmptyPrefixWithSeparator: the input starts with its only
                separator (``"_0000..."`` or ``"_"``).
            PrefixError: the prefix part violates the prefix grammar.
            SuffixError: the suffix part violates the suffix grammar.
        """
        try:
            split_at = text.rfind(SEPARATOR)
            if split_at == -1:
                prefix, suffix = "", text
            else:
                prefix, suffix = text[:split_at], text[split_at + 1 :]
                if not prefix:
                    raise EmptyPrefixWithSeparator(
                        "A separator requires a non-empty prefix"
                    )
            validate_prefix(prefix)
            validate_suffix(suffix)
        except TypeIDError as exc:
            _record_rejection(text, exc)
            raise
        return cls._trusted(prefix, suffix)

    @classmethod
    def from_uuid(cls, prefix: str, value: str | bytes | uuid.UUID) -> TypeID:
        """Wrap an existing UUID (string, 16 raw bytes or ``uuid.UUID``).

        Raises:
            InvalidUUIDLength: ``bytes`` input that is not 16 bytes long.
            InvalidUUID: a string that does not parse as a UUID.
        """
        validate_prefix(prefix)
        if isinstance(value, uuid.UUID):
            raw = value.bytes
        elif isinstance(value, (bytes, bytearray, memoryview)):
            raw = bytes(value)
            if len(raw) != UUID_BYTES:
                raise InvalidUUIDLength(
                    f"UUID must be {UUID_BYTES} bytes, got {len(raw)}"
                )
        elif isinstance(value, str):
            raw = parse_uuid(value)
        else:
            raise InvalidUUID(f"Unsupported UUID value: {value!r}")
        return cls._trusted(prefix, base32.encode(raw))

    @classmethod
    def zero(cls, prefix: str = "") -> TypeID:
        """The all-zero TypeID for ``prefix``; a sentinel, never generated."""
        validate_prefix(prefix)
        return cls._trusted(prefix, ZERO_SUFFIX)

    # -- accessors ----------------------------------------------------------

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def suffix(self) -> str:
        return self._suffix

    def is_zero(self) -> bool:
        return self._suffix == ZERO_SUFFIX

    def to_string(self) -> str:
        """Canonical string: ``prefix_suffix``, or bare ``suffix``."""
        if self._prefix:
            return f"{self._prefix}{SEPARATOR}{self._suffix}"
        return self._suffix

    def write(self, buf: Any) -> memoryview:
        """Write the canonical ASCII form into ``buf`` without allocating a str.

        ``buf`` is any writable bytes-like object (``bytearray``,
        ``memoryview``, ``array``...).  At most ``MAX_LENGTH`` (90) bytes
        are ever needed.

        Returns:
            A ``memoryview`` over the written bytes.

        Raises:
            BufferTooSmall: ``buf`` cannot hold the whole string; nothing
                is written.
        """
        view = memoryview(buf).cast("B")
        if view.readonly:
            raise TypeError("TypeID.write() needs a writable buffer")

        prefix_len = len(self._prefix)
        required = prefix_len + 1 + SUFFIX_LENGTH if prefix_len else SUFFIX_LENGTH
        if view.nbytes < required:
            raise BufferTooSmall(
                f"Buffer holds {view.nbytes} bytes, {required} needed",
                required=required,
                available=view.nbytes,
            )

        i = 0
        if prefix_len:
            view[:prefix_len] = self._prefix.encode("ascii")
            view[prefix_len] = ord(SEPARATOR)
            i = prefix_len + 1
        view[i : i + SUFFIX_LENGTH] = self._suffix.encode("ascii")
        return view[:required]

    def to_uuid_bytes(self) -> bytes:
        """Decode the suffix back into the 16 UUID bytes."""
        return base32.decode(self._suffix)

    def to_uuid(self) -> str:
        """The suffix as lowercase hyphenated UUID hex."""
        return format_uuid(self.to_uuid_bytes())

    @property
    def uuid(self) -> uuid.UUID:
        return uuid.UUID(bytes=self.to_uuid_bytes())

    def timestamp_ms(self) -> int:
        """Milliseconds since the epoch stored in the UUIDv7 timestamp field."""
        return int.from_bytes(self.to_uuid_bytes()[:6], "big")

    # -- protocol -----------------------------------------------------------

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_string()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeID):
            return NotImplemented
        return self._prefix == other._prefix and self._suffix == other._suffix

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, TypeID):
            return NotImplemented
        return (self._prefix, self._suffix) < (other._prefix, other._suffix)

    def __hash__(self) -> int:
        return hash((self._prefix, self._suffix))

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __copy__(self) -> TypeID:
        return self

    def __deepcopy__(self, memo: dict) -> TypeID:
        return self

    def __reduce__(self) -> tuple[Any, ...]:
        return (type(self).from_string, (self.to_string(),))

    # -- pydantic -----------------------------------------------------------

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        from .schema import typeid_core_schema

        return typeid_core_schema(cls)

    @classmethod
    def __get_pydantic_json_schema__(
        cls, schema: CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        from .schema import typeid_json_schema

        return typeid_json_schema(schema, handler)
