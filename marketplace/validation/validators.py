"""
Payload Validation

Runs a request schema against an untyped payload and returns a tagged result
instead of raising: either the typed value, or every violated constraint with
the path of the offending field.

Example:
    result = validate_payload(ProductCreate, {"name": "", "price": -1})
    if not result.valid:
        for error in result.errors:
            print(error.path, error.message)
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)


@dataclass
class FieldError:
    """Single violated constraint"""
    path: List[Union[str, int]]
    message: str
    code: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ValidationResult(Generic[T]):
    """Outcome of validating one payload"""
    valid: bool
    value: Optional[T] = None
    errors: List[FieldError] = field(default_factory=list)


def to_field_errors(exc: ValidationError) -> List[FieldError]:
    """Flatten a pydantic ValidationError into field errors."""
    return [
        FieldError(path=list(error["loc"]), message=error["msg"], code=error["type"])
        for error in exc.errors()
    ]


def validate_payload(schema: Type[T], payload: Any) -> ValidationResult[T]:
    """
    Validate ``payload`` against ``schema``.

    Args:
        schema: Request schema class
        payload: Decoded JSON body

    Returns:
        ValidationResult carrying the typed value or all field errors
    """
    try:
        value = schema.model_validate(payload)
    except ValidationError as exc:
        return ValidationResult(valid=False, errors=to_field_errors(exc))

    return ValidationResult(valid=True, value=value)


def provided_fields(value: BaseModel) -> Dict[str, Any]:
    """Fields explicitly present in the payload, keyed by attribute name."""
    return value.model_dump(exclude_unset=True)
