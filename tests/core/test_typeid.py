"""Unit tests for the TypeID value type: grammar, parsing and formatting."""

from __future__ import annotations

import copy
import pickle
import re
import uuid
from unittest.mock import MagicMock

import pytest

from typeids.core.errors import (
    BufferTooSmall,
    EmptyPrefixWithSeparator,
    EmptySuffix,
    InvalidCharacter,
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
from typeids.core.typeid import (
    MAX_LENGTH,
    TYPEID_PATTERN,
    TypeID,
    validate_prefix,
    validate_suffix,
)
from typeids.core.uuid7 import Generator

ZERO = "0" * 26
EXAMPLE = "prefix_01h455vb4pex5vsknk084sn02q"
EXAMPLE_UUID = "01890a5d-ac96-774b-bcce-b302099a8057"

# (typeid, prefix, uuid)
VALID = [
    ("00000000000000000000000000", "", "00000000-0000-0000-0000-000000000000"),
    ("00000000000000000000000001", "", "00000000-0000-0000-0000-000000000001"),
    ("0000000000000000000000000a", "", "00000000-0000-0000-0000-00000000000a"),
    ("0000000000000000000000000g", "", "00000000-0000-0000-0000-000000000010"),
    ("00000000000000000000000010", "", "00000000-0000-0000-0000-000000000020"),
    ("7zzzzzzzzzzzzzzzzzzzzzzzzz", "", "ffffffff-ffff-ffff-ffff-ffffffffffff"),
    (
        "prefix_0123456789abcdefghjkmnpqrs",
        "prefix",
        "0110c853-1d09-52d8-d73e-1194e95b5f19",
    ),
    (EXAMPLE, "prefix", EXAMPLE_UUID),
    (
        "pre_fix_00000000000000000000000000",
        "pre_fix",
        "00000000-0000-0000-0000-000000000000",
    ),
]

# (typeid, expected error)
INVALID = [
    ("PREFIX_" + ZERO, InvalidPrefixChars),
    ("12345_" + ZERO, InvalidPrefixChars),
    ("pre.fix_" + ZERO, InvalidPrefixChars),
    ("préfix_" + ZERO, InvalidPrefixChars),
    ("  prefix_" + ZERO, InvalidPrefixChars),
    ("abcdefghijklmnopqrstuvwxyz" * 2 + "abcdefghijkl_" + ZERO, InvalidPrefixLength),
    ("_" + ZERO, EmptyPrefixWithSeparator),
    ("_", EmptyPrefixWithSeparator),
    ("prefix_1234567890123456789012345", InvalidSuffixLength),
    ("prefix_123456789012345678901234567", InvalidSuffixLength),
    ("prefix_1234567890123456789012345 ", InvalidSuffixChars),
    ("prefix_0123456789ABCDEFGHJKMNPQRS", InvalidSuffixChars),
    ("prefix_123456789-123456789-123456", InvalidSuffixChars),
    ("prefix_0i23456789ol23456789oi2345", InvalidSuffixChars),
    ("prefix_ooooooiiiiiiuuuuuuulllllll", InvalidSuffixOverflow),
    ("prefix_i23456789ol23456789oi23456", InvalidSuffixOverflow),
    ("prefix_123456789-0123456789-0123456", InvalidSuffixLength),
    ("prefix_8" + "z" * 25, InvalidSuffixOverflow),
    ("_prefix_" + ZERO, InvalidPrefixStart),
    ("prefix__" + ZERO, InvalidPrefixEnd),
    ("prefix_", EmptySuffix),
    ("", EmptySuffix),
]


# =========================================================================
# Parsing
# =========================================================================


class TestFromString:
    @pytest.mark.parametrize("text,prefix,uuid_str", VALID)
    def test_valid(self, text, prefix, uuid_str):
        tid = TypeID.from_string(text)
        assert tid.prefix == prefix
        assert tid.to_string() == text
        assert str(tid) == text
        assert tid.to_uuid() == uuid_str

    @pytest.mark.parametrize("text,error", INVALID)
    def test_invalid_raises_specific_error(self, text, error):
        with pytest.raises(error) as exc_info:
            TypeID.from_string(text)
        assert type(exc_info.value) is error
        assert exc_info.value.code == error.__name__

    @pytest.mark.parametrize("text,error", INVALID)
    def test_errors_are_value_errors(self, text, error):
        with pytest.raises(ValueError):
            TypeID.from_string(text)
        with pytest.raises(TypeIDError):
            TypeID.from_string(text)

    def test_splits_on_last_separator(self):
        tid = TypeID.from_string("a_b_c_" + ZERO)
        assert tid.prefix == "a_b_c"
        assert tid.suffix == ZERO

    def test_bare_suffix_has_empty_prefix(self):
        tid = TypeID.from_string(ZERO)
        assert tid.prefix == ""
        assert tid.is_zero()

    def test_suffix_chars_chains_codec_error(self):
        with pytest.raises(InvalidSuffixChars) as exc_info:
            TypeID.from_string("prefix_0123456789ABCDEFGHJKMNPQRS")
        assert isinstance(exc_info.value.__cause__, InvalidCharacter)

    @pytest.mark.parametrize("text,prefix,uuid_str", VALID)
    def test_valid_match_wire_pattern(self, text, prefix, uuid_str):
        assert re.fullmatch(TYPEID_PATTERN, text)

    @pytest.mark.parametrize(
        "text",
        ["_" + ZERO, "prefix__" + ZERO, "prefix_8" + "z" * 25, "PREFIX_" + ZERO],
    )
    def test_invalid_miss_wire_pattern(self, text):
        assert re.fullmatch(TYPEID_PATTERN, text) is None

    def test_wire_pattern_bounds_prefix_length(self):
        longest = "a" * 63 + "_" + ZERO
        too_long = "a" * 64 + "_" + ZERO
        assert re.fullmatch(TYPEID_PATTERN, longest)
        assert TypeID.from_string(longest).prefix == "a" * 63
        assert re.fullmatch(TYPEID_PATTERN, too_long) is None
        with pytest.raises(InvalidPrefixLength):
            TypeID.from_string(too_long)


# =========================================================================
# Grammar helpers
# =========================================================================


class TestValidatePrefix:
    @pytest.mark.parametrize("prefix", ["", "a", "user", "pre_fix", "a" * 63])
    def test_accepts(self, prefix):
        validate_prefix(prefix)

    @pytest.mark.parametrize(
        "prefix,error",
        [
            ("a" * 64, InvalidPrefixLength),
            ("_" * 64, InvalidPrefixLength),
            ("_user", InvalidPrefixStart),
            ("_", InvalidPrefixStart),
            ("user_", InvalidPrefixEnd),
            ("User", InvalidPrefixChars),
            ("us3r", InvalidPrefixChars),
            ("us-er", InvalidPrefixChars),
        ],
    )
    def test_rejects_in_rule_order(self, prefix, error):
        with pytest.raises(error):
            validate_prefix(prefix)


class TestValidateSuffix:
    def test_accepts_max(self):
        validate_suffix("7" + "z" * 25)

    @pytest.mark.parametrize(
        "suffix,error",
        [
            ("", EmptySuffix),
            ("0" * 25, InvalidSuffixLength),
            ("8" * 27, InvalidSuffixLength),
            ("8" + "0" * 25, InvalidSuffixOverflow),
            ("z" * 26, InvalidSuffixOverflow),
            ("0" * 25 + "u", InvalidSuffixChars),
        ],
    )
    def test_rejects_in_rule_order(self, suffix, error):
        with pytest.raises(error):
            validate_suffix(suffix)


# =========================================================================
# Construction
# =========================================================================


class TestNew:
    def test_prefixed(self):
        tid = TypeID.new("test")
        assert tid.prefix == "test"
        assert len(str(tid)) == 31
        assert tid.suffix[0] in "01234567"
        assert tid.uuid.version == 7
        assert tid.uuid.variant == uuid.RFC_4122

    def test_longer_prefix(self):
        assert len(str(TypeID.new("longer_prefix"))) == 40

    def test_empty_prefix_has_no_separator(self):
        tid = TypeID.new()
        assert "_" not in str(tid)
        assert len(str(tid)) == 26

    def test_constructor_without_suffix_mints(self):
        tid = TypeID("user")
        assert tid.prefix == "user"
        assert not tid.is_zero()

    def test_round_trips_through_string(self):
        tid = TypeID.new("user")
        assert TypeID.from_string(str(tid)) == tid

    def test_invalid_prefix_skips_generation(self):
        gen = MagicMock(spec=Generator)
        with pytest.raises(InvalidPrefixEnd):
            TypeID.new("user_", generator=gen)
        gen.next_bytes.assert_not_called()

    def test_explicit_generator(self):
        gen = Generator(lambda bits: 0, clock=lambda: 1_700_000_000_000_000_000)
        tid = TypeID.new("user", generator=gen)
        assert tid.timestamp_ms() == 1_700_000_000_000
        assert tid.to_uuid_bytes()[-1] == 0

    def test_same_generator_sorts_chronologically(self):
        gen = Generator()
        ids = [TypeID.new("user", generator=gen) for _ in range(200)]
        assert sorted(ids) == ids
        assert sorted(str(t) for t in ids) == [str(t) for t in ids]

    def test_default_generator_is_monotonic(self):
        a = TypeID.new("user")
        b = TypeID.new("user")
        assert a < b
        assert a != b


class TestFromParts:
    def test_valid(self):
        tid = TypeID.from_parts("user", "01h455vb4pex5vsknk084sn02q")
        assert str(tid) == "user_01h455vb4pex5vsknk084sn02q"

    def test_empty_suffix_is_rejected(self):
        with pytest.raises(EmptySuffix):
            TypeID.from_parts("user", "")

    def test_prefix_checked_before_suffix(self):
        with pytest.raises(InvalidPrefixChars):
            TypeID.from_parts("User", "")

    def test_constructor_with_suffix_validates(self):
        assert TypeID("user", ZERO) == TypeID.zero("user")
        with pytest.raises(InvalidSuffixOverflow):
            TypeID("user", "8" + "0" * 25)

    def test_suffix_and_generator_are_exclusive(self):
        gen = MagicMock(spec=Generator)
        with pytest.raises(TypeError):
            TypeID("user", ZERO, generator=gen)
        gen.next_bytes.assert_not_called()


class TestFromUUID:
    def test_from_string(self):
        assert TypeID.from_uuid("prefix", EXAMPLE_UUID) == TypeID.from_string(EXAMPLE)

    def test_from_uppercase_string(self):
        tid = TypeID.from_uuid("prefix", EXAMPLE_UUID.upper())
        assert str(tid) == EXAMPLE

    def test_from_bytes(self):
        raw = bytes.fromhex(EXAMPLE_UUID.replace("-", ""))
        assert str(TypeID.from_uuid("prefix", raw)) == EXAMPLE
        assert str(TypeID.from_uuid("prefix", bytearray(raw))) == EXAMPLE

    def test_from_uuid_object(self):
        tid = TypeID.from_uuid("prefix", uuid.UUID(EXAMPLE_UUID))
        assert str(tid) == EXAMPLE
        assert tid.uuid == uuid.UUID(EXAMPLE_UUID)

    def test_max_uuid(self):
        tid = TypeID.from_uuid("", "ffffffff-ffff-ffff-ffff-ffffffffffff")
        assert str(tid) == "7" + "z" * 25

    def test_wrong_byte_length(self):
        with pytest.raises(InvalidUUIDLength):
            TypeID.from_uuid("prefix", bytes(15))

    def test_malformed_string(self):
        with pytest.raises(InvalidUUID):
            TypeID.from_uuid("prefix", "not-a-uuid")

    def test_unsupported_type(self):
        with pytest.raises(InvalidUUID):
            TypeID.from_uuid("prefix", 42)  # type: ignore[arg-type]

    def test_invalid_prefix(self):
        with pytest.raises(InvalidPrefixStart):
            TypeID.from_uuid("_prefix", EXAMPLE_UUID)


class TestZero:
    def test_zero(self):
        tid = TypeID.zero("test")
        assert tid.prefix == "test"
        assert tid.is_zero()
        assert str(tid) == "test_" + ZERO
        assert tid.to_uuid() == "00000000-0000-0000-0000-000000000000"

    def test_zero_without_prefix(self):
        assert str(TypeID.zero()) == ZERO

    def test_zero_validates_prefix(self):
        with pytest.raises(InvalidPrefixChars):
            TypeID.zero("Test")

    def test_zeros_are_equal(self):
        assert TypeID.zero("test") == TypeID.zero("test")
        assert TypeID.zero("test") != TypeID.zero("other")

    def test_generated_is_not_zero(self):
        assert not TypeID.new("test").is_zero()


# =========================================================================
# Formatting
# =========================================================================


class TestWrite:
    def test_writes_into_buffer(self):
        buf = bytearray(MAX_LENGTH)
        view = TypeID.from_string(EXAMPLE).write(buf)
        assert bytes(view) == EXAMPLE.encode()
        assert buf[: len(EXAMPLE)] == EXAMPLE.encode()

    def test_exact_size(self):
        buf = bytearray(len(EXAMPLE))
        assert bytes(TypeID.from_string(EXAMPLE).write(buf)) == EXAMPLE.encode()

    def test_buffer_reuse(self):
        buf = bytearray(MAX_LENGTH)
        assert len(TypeID.new("test").write(buf)) == 31
        assert len(TypeID.new("longer_prefix").write(buf)) == 40

    def test_empty_prefix(self):
        buf = bytearray(26)
        assert bytes(TypeID.zero().write(buf)) == ZERO.encode()

    def test_max_length_prefix_fits(self):
        tid = TypeID.zero("a" * 63)
        buf = bytearray(MAX_LENGTH)
        assert len(tid.write(buf)) == MAX_LENGTH == 90

    def test_too_small_never_truncates(self):
        buf = bytearray(len(EXAMPLE) - 1)
        with pytest.raises(BufferTooSmall) as exc_info:
            TypeID.from_string(EXAMPLE).write(buf)
        assert exc_info.value.required == len(EXAMPLE)
        assert exc_info.value.available == len(EXAMPLE) - 1
        assert buf == bytearray(len(EXAMPLE) - 1)

    def test_memoryview_target(self):
        buf = bytearray(MAX_LENGTH)
        view = TypeID.zero("x").write(memoryview(buf)[10:])
        assert bytes(view) == b"x_" + ZERO.encode()
        assert buf[10:38] == b"x_" + ZERO.encode()

    def test_readonly_buffer(self):
        with pytest.raises(TypeError):
            TypeID.zero("x").write(bytes(MAX_LENGTH))


class TestConversions:
    def test_uuid_bytes(self):
        tid = TypeID.from_string(EXAMPLE)
        assert tid.to_uuid_bytes() == bytes.fromhex(EXAMPLE_UUID.replace("-", ""))

    def test_timestamp(self):
        tid = TypeID.from_string(EXAMPLE)
        assert tid.timestamp_ms() == 0x01890A5DAC96

    def test_repr(self):
        assert repr(TypeID.zero("user")) == f"TypeID('user_{ZERO}')"


# =========================================================================
# Value semantics
# =========================================================================


class TestValueSemantics:
    def test_structural_equality_and_hash(self):
        a = TypeID.from_string(EXAMPLE)
        b = TypeID.from_parts("prefix", "01h455vb4pex5vsknk084sn02q")
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_different_random_ids_differ(self):
        assert TypeID.new("test") != TypeID.new("test")
        assert TypeID.new("test") != TypeID.new("other")

    def test_not_equal_to_string(self):
        tid = TypeID.from_string(EXAMPLE)
        assert tid != EXAMPLE

    def test_ordering_by_prefix_then_suffix(self):
        a = TypeID.from_string("a_" + ZERO)
        b = TypeID.from_string("b_" + ZERO)
        c = TypeID.from_string("b_" + "0" * 25 + "1")
        assert sorted([c, b, a]) == [a, b, c]
        assert a <= b <= c

    def test_ordering_with_other_types(self):
        with pytest.raises(TypeError):
            TypeID.zero("a") < "a"  # noqa: B015

    def test_immutable(self):
        tid = TypeID.zero("user")
        with pytest.raises(AttributeError):
            tid.prefix = "post"  # type: ignore[misc]
        with pytest.raises(AttributeError):
            tid._suffix = "x"  # type: ignore[misc]
        with pytest.raises(AttributeError):
            del tid._prefix

    def test_pickle(self):
        tid = TypeID.new("user")
        assert pickle.loads(pickle.dumps(tid)) == tid

    def test_copy_returns_same(self):
        tid = TypeID.new("user")
        assert copy.copy(tid) is tid
        assert copy.deepcopy(tid) is tid
