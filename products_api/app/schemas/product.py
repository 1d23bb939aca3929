"""
Pydantic models and validation for product data.

``ProductFields`` holds the four client-writable fields and the rules
every stored product must satisfy.  ``ProductRead`` is the response
shape, including the store-generated ``id`` and timestamps.  JSON
field names are camelCase (``inStock``, ``createdAt``) to stay
compatible with existing frontends; Python attributes are snake_case.

Validation is exposed as ``validate_product`` which returns a
``ValidationResult`` instead of raising, so the Create and Update
paths call the exact same function and decide themselves how to
report a failure.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

# Keys read from a request body; anything else is ignored.
WRITABLE_FIELDS = ("name", "price", "description", "inStock")

REQUIRED_MESSAGE = "is required"


class ProductFields(BaseModel):
    """Client-writable product fields.

    Strict mode is used so that ``"9.99"`` is not silently accepted as
    a price and ``1`` is not accepted as a stock flag.
    """

    name: str = Field(..., min_length=1, examples=["Widget"])
    price: float = Field(..., allow_inf_nan=False, examples=[9.99])
    description: Optional[str] = Field(None, examples=["A very useful widget"])
    in_stock: bool = Field(True, alias="inStock", examples=[True])

    model_config = {
        "strict": True,
        "populate_by_name": True,
        "extra": "ignore",
    }

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ProductRead(BaseModel):
    """Schema for reading a product from the API."""

    id: str = Field(..., examples=["66f1c2a9e4b0a1b2c3d4e5f6"])
    name: str
    price: float
    description: Optional[str] = None
    in_stock: bool = Field(True, alias="inStock")
    created_at: str = Field(..., alias="createdAt")
    updated_at: str = Field(..., alias="updatedAt")

    model_config = {
        "populate_by_name": True,
    }


class DeleteConfirmation(BaseModel):
    message: str = Field(..., examples=["Product deleted"])


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of ``validate_product``.

    Exactly one of ``value`` and ``errors`` is meaningful: ``value`` is
    set when validation succeeded, ``errors`` maps a field name to a
    short reason otherwise.
    """

    value: Optional[ProductFields] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.errors


def _collect_errors(exc: PydanticValidationError, candidate: Mapping[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ("body",)
        name = str(loc[0])
        if name in errors:
            continue
        if error["type"] in {"missing", "string_too_short"} or (name in candidate and candidate[name] is None):
            errors[name] = REQUIRED_MESSAGE
        else:
            errors[name] = error["msg"]
    return errors


def validate_product(payload: Any, current: Optional[Mapping[str, Any]] = None) -> ValidationResult:
    """Validate a product payload.

    Parameters
    ----------
    payload : Any
        Decoded JSON request body.  Must be an object; only
        ``WRITABLE_FIELDS`` are read from it.
    current : Optional[Mapping[str, Any]]
        The stored document when updating.  Keys present in
        ``payload`` overlay the stored values and the merged document
        is validated, so fields omitted from an update keep their
        value and defaults are not re-applied.  ``None`` when creating.

    Returns
    -------
    ValidationResult
        ``ok`` with the validated ``ProductFields``, or the per-field
        errors.
    """
    if not isinstance(payload, Mapping):
        return ValidationResult(errors={"body": "must be a JSON object"})

    candidate: Dict[str, Any] = {}
    if current is not None:
        candidate.update({key: current[key] for key in WRITABLE_FIELDS if key in current})
    candidate.update({key: payload[key] for key in WRITABLE_FIELDS if key in payload})

    try:
        value = ProductFields.model_validate(candidate)
    except PydanticValidationError as exc:
        return ValidationResult(errors=_collect_errors(exc, candidate))
    return ValidationResult(value=value)
