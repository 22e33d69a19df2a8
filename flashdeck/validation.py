"""
Input checks for deck and card mutations.

Raw form input is run through the pydantic models below. Each validator
returns a tagged result: ``Ok(value)`` with the cleaned input, or
``Invalid(field_errors)`` mapping field names to user-facing messages.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from .models import (
    CARD_TEXT_MAX_LENGTH,
    DECK_DESCRIPTION_MAX_LENGTH,
    DECK_NAME_MAX_LENGTH,
)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Invalid:
    field_errors: Dict[str, List[str]] = field(default_factory=dict)


ValidationResult = Union[Ok[T], Invalid]


class DeckInput(BaseModel):
    """Cleaned name and description for creating or editing a deck."""

    model_config = ConfigDict(
        str_strip_whitespace=True, extra="forbid", frozen=True
    )

    name: str = Field(..., min_length=1, max_length=DECK_NAME_MAX_LENGTH)
    description: Optional[str] = Field(
        default=None, max_length=DECK_DESCRIPTION_MAX_LENGTH
    )

    @field_validator("description", mode="before")
    @classmethod
    def blank_description_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class CardInput(BaseModel):
    """Cleaned front and back text of a card."""

    model_config = ConfigDict(
        str_strip_whitespace=True, extra="forbid", frozen=True
    )

    front: str = Field(..., min_length=1, max_length=CARD_TEXT_MAX_LENGTH)
    back: str = Field(..., min_length=1, max_length=CARD_TEXT_MAX_LENGTH)


_REQUIRED_ERRORS = {"missing", "string_type", "string_too_short"}
_TOO_LONG_ERRORS = {"string_too_long"}

_FIELD_MESSAGES: Dict[str, Dict[str, str]] = {
    "name": {"required": "Name is required", "too_long": "Name is too long"},
    "description": {"too_long": "Description is too long"},
    "front": {
        "required": "Front text is required",
        "too_long": "Front text is too long",
    },
    "back": {
        "required": "Back text is required",
        "too_long": "Back text is too long",
    },
}


def _field_errors(error: ValidationError) -> Dict[str, List[str]]:
    """Translate pydantic errors into per-field user-facing messages."""
    errors: Dict[str, List[str]] = {}
    for err in error.errors():
        field_name = ".".join(map(str, err["loc"]))
        if err["type"] in _REQUIRED_ERRORS:
            kind = "required"
        elif err["type"] in _TOO_LONG_ERRORS:
            kind = "too_long"
        else:
            kind = ""
        message = _FIELD_MESSAGES.get(field_name, {}).get(kind, err["msg"])
        errors.setdefault(field_name, []).append(message)
    return errors


def _validate(model: Type[BaseModel], data: Dict[str, Any]) -> ValidationResult:
    try:
        return Ok(model.model_validate(data))
    except ValidationError as e:
        return Invalid(_field_errors(e))


def validate_deck_input(
    name: Optional[str], description: Optional[str] = None
) -> "ValidationResult[DeckInput]":
    """
    Check a deck name and optional description.

    Surrounding whitespace is stripped; a blank description is normalised
    to ``None``. A description of ``None`` is left out of the input
    entirely, so ``model_fields_set`` on the result tells an edit which
    fields were supplied.
    """
    data: Dict[str, Any] = {"name": name}
    if description is not None:
        data["description"] = description
    return _validate(DeckInput, data)


def validate_card_input(
    front: Optional[str], back: Optional[str]
) -> "ValidationResult[CardInput]":
    """Check the front and back text of a card."""
    return _validate(CardInput, {"front": front, "back": back})
