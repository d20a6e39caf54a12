"""Turn pydantic validation errors into ValidationException with a {field: message} map."""

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from helpdesk.domain.exceptions import ValidationException

SchemaT = TypeVar("SchemaT", bound=BaseModel)

_GENERIC_MESSAGE = "Datos inválidos"

# (field, pydantic error type) -> message shown to the user
_FIELD_MESSAGES: dict[tuple[str, str], str] = {
    ("username", "string_pattern_mismatch"): "Solo letras, números y guiones bajos",
    ("name", "string_pattern_mismatch"): "Solo letras minúsculas y guiones bajos",
    ("email", "value_error"): "Email inválido",
    ("author_email", "value_error"): "Email inválido",
}

_TYPE_MESSAGES: dict[str, str] = {
    "missing": "Campo requerido",
    "extra_forbidden": "Campo no editable",
    "string_too_short": "Debe tener al menos {min_length} caracteres",
    "string_too_long": "No puede exceder {max_length} caracteres",
    "string_type": "Debe ser texto",
    "bool_parsing": "Debe ser verdadero o falso",
}


def _message_for(field: str, error: Mapping[str, Any]) -> str:
    err_type = error.get("type", "")
    ctx = error.get("ctx") or {}
    override = _FIELD_MESSAGES.get((field, err_type))
    if override:
        return override
    if err_type == "value_error" and "error" in ctx:
        return str(ctx["error"])
    template = _TYPE_MESSAGES.get(err_type)
    if template:
        try:
            return template.format(**ctx)
        except (KeyError, IndexError):
            return template
    return error.get("msg") or _GENERIC_MESSAGE


def errors_from_pydantic(exc: ValidationError) -> dict[str, str]:
    """First message per field, keyed by dotted location."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        field = ".".join(str(part) for part in loc) or "__root__"
        errors.setdefault(field, _message_for(str(loc[-1]) if loc else field, error))
    return errors


def validate_payload(
    schema: type[SchemaT], data: Mapping[str, Any] | BaseModel
) -> SchemaT:
    """Validate data against schema.

    Raises:
        ValidationException: With details["errors"] as {field: message}; the
            first failing field is also set as details["field"].
    """
    if isinstance(data, schema):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return schema.model_validate(dict(data))
    except ValidationError as exc:
        errors = errors_from_pydantic(exc)
        field, message = next(iter(errors.items()))
        raise ValidationException(message, field=field, errors=errors) from None
