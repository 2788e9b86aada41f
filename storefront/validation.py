"""
Storefront Backend — Payload Validation Helpers
=================================================

What:  Turns raw JSON payloads into schema instances, converting pydantic's
       exception into the application's ValidationError (→ 400 with
       field-level details).
"""

import uuid
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

import pydantic

from storefront.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


def parse_payload(model: Type[ModelT], data: Any) -> ModelT:
    """
    Validate `data` against `model`.

    Raises:
        ValidationError with pydantic's error list as details.
    """
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(
            message="Invalid input",
            errors=e.errors(include_url=False, include_context=False, include_input=False),
        ) from e


def parse_uuid(value: Optional[str], label: str) -> uuid.UUID:
    """
    Parse a required id.

    Raises:
        ValidationError: "<label> ID required" when missing, "Invalid <label> ID"
        when not a UUID.
    """
    if value is None or value == "":
        raise ValidationError(message=f"{label} ID required", field="id")
    try:
        return uuid.UUID(str(value))
    except ValueError as e:
        raise ValidationError(message=f"Invalid {label} ID", field="id") from e


def split_id(data: Any, label: str) -> Tuple[uuid.UUID, Dict[str, Any]]:
    """
    Separate `id` from the remaining fields of an update payload.

    Raises:
        ValidationError: payload not an object, or id missing/invalid.
    """
    if not isinstance(data, dict):
        raise ValidationError(message="Request body must be a JSON object", field="body")
    fields = dict(data)
    record_id = parse_uuid(fields.pop("id", None), label)
    return record_id, fields
