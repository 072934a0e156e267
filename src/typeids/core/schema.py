"""Pydantic integration for ``TypeID``.

``TypeID`` works directly as a model field type: strings are parsed
with ``TypeID.from_string`` and JSON output is the canonical string.
Every grammar failure surfaces as one pydantic error type,
``typeid_invalid``; the precise condition is kept in the error context
under ``code``.

``TypeIDField("user")`` narrows a field to a single prefix, so a
``post_...`` value cannot be passed where a ``user_...`` is expected.

Usage::

    class Post(BaseModel):
        id: TypeIDField("post")
        author: TypeIDField("user")
        parent: TypeID | None = None
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any

from pydantic import AfterValidator, WithJsonSchema
from pydantic_core import PydanticCustomError, core_schema

from .errors import TypeIDError
from .typeid import SEPARATOR, TYPEID_PATTERN, TypeID, validate_prefix

if TYPE_CHECKING:
    from pydantic import GetJsonSchemaHandler
    from pydantic.json_schema import JsonSchemaValue

_SUFFIX_PATTERN = "[0-7][0-9a-hjkmnp-tv-z]{25}"


def _parse(value: str) -> TypeID:
    try:
        return TypeID.from_string(value)
    except TypeIDError as exc:
        raise PydanticCustomError(
            "typeid_invalid",
            "Invalid TypeID: {reason}",
            {"reason": str(exc), "code": exc.code},
        ) from exc


def _validate_python(value: Any) -> TypeID:
    if isinstance(value, TypeID):
        return value
    if isinstance(value, str):
        return _parse(value)
    raise PydanticCustomError(
        "typeid_type", "TypeID must be a string or TypeID instance"
    )


def typeid_core_schema(cls: type[TypeID]) -> core_schema.CoreSchema:
    from_json = core_schema.chain_schema(
        [
            core_schema.str_schema(),
            core_schema.no_info_plain_validator_function(_parse),
        ]
    )
    return core_schema.json_or_python_schema(
        json_schema=from_json,
        python_schema=core_schema.no_info_plain_validator_function(_validate_python),
        serialization=core_schema.to_string_ser_schema(when_used="json-unless-none"),
    )


def typeid_json_schema(
    schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
) -> JsonSchemaValue:
    json_schema = handler(schema)
    json_schema = handler.resolve_ref_schema(json_schema)
    json_schema.update(
        type="string",
        pattern=TYPEID_PATTERN,
        examples=["user_01h455vb4pex5vsknk084sn02q"],
    )
    return json_schema


def TypeIDField(prefix: str) -> Any:
    """``Annotated[TypeID, ...]`` that only accepts ``prefix``.

    Raises:
        PrefixError: ``prefix`` itself is not a valid TypeID prefix.
    """
    validate_prefix(prefix)

    def _check_prefix(value: TypeID) -> TypeID:
        if value.prefix != prefix:
            raise PydanticCustomError(
                "typeid_prefix_mismatch",
                "Expected TypeID prefix '{expected}', got '{actual}'",
                {"expected": prefix, "actual": value.prefix},
            )
        return value

    head = f"{prefix}{SEPARATOR}" if prefix else ""
    return Annotated[
        TypeID,
        AfterValidator(_check_prefix),
        WithJsonSchema(
            {
                "type": "string",
                "pattern": f"^{head}{_SUFFIX_PATTERN}$",
                "examples": [f"{head}01h455vb4pex5vsknk084sn02q"],
            }
        ),
    ]
