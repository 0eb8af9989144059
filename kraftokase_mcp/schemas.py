from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

NonEmptyStr = Annotated[str, Field(min_length=1)]

MetafieldType = Literal[
    "single_line_text_field",
    "multi_line_text_field",
    "number_integer",
    "number_decimal",
    "url",
    "json_string",
    "boolean",
]


class UpdateProductTagsRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tags: list[NonEmptyStr] = Field(min_length=1)


class CreateCollectionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=255)
    rule_keywords: list[NonEmptyStr] = Field(min_length=1)
    description: str | None = Field(default=None, max_length=1000)


class UpdateMetafieldRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    namespace: str = Field(min_length=1, max_length=20)
    key: str = Field(min_length=1, max_length=30)
    value: str = Field(min_length=1, max_length=1000)
    type: MetafieldType = "single_line_text_field"


SCHEMAS: dict[str, type[BaseModel]] = {
    "updateProductTags": UpdateProductTagsRequest,
    "createCollection": CreateCollectionRequest,
    "updateMetafield": UpdateMetafieldRequest,
}


class PayloadValidationError(ValueError):
    def __init__(self, *, schema_name: str, message: str, details: list[dict[str, Any]]) -> None:
        super().__init__(message)
        self.schema_name = schema_name
        self.message = message
        self.details = details


def _format_location(error: dict[str, Any]) -> str:
    # JSON decode errors carry a byte offset where a field name would be.
    if error.get("type") == "json_invalid":
        return "body"
    parts = [str(part) for part in error.get("loc", ()) if part != "body"]
    return ".".join(parts) or "body"


def describe_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {
            "field": _format_location(error),
            "type": error.get("type"),
            "message": error.get("msg"),
        }
        for error in errors
    ]


def first_error_message(errors: list[dict[str, Any]]) -> str:
    if not errors:
        return "Invalid request body"
    first = errors[0]
    return f"{_format_location(first)}: {first.get('msg')}"


def validate_payload(schema_name: str, body: Any) -> BaseModel:
    schema = SCHEMAS.get(schema_name)
    if schema is None:
        raise KeyError(f"Validation schema not found: {schema_name}")
    try:
        return schema.model_validate(body)
    except ValidationError as exc:
        errors = exc.errors()
        raise PayloadValidationError(
            schema_name=schema_name,
            message=first_error_message(errors),
            details=describe_errors(errors),
        ) from exc
