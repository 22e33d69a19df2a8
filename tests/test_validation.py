import pytest
from pydantic import ValidationError

from flashdeck.models import Card, Deck
from flashdeck.validation import (
    CardInput,
    DeckInput,
    Invalid,
    Ok,
    validate_card_input,
    validate_deck_input,
)


class TestValidateDeckInput:
    def test_valid_input_is_ok(self):
        result = validate_deck_input("  Spanish  ", "  Verbs  ")
        assert isinstance(result, Ok)
        assert isinstance(result.value, DeckInput)
        assert result.value.name == "Spanish"
        assert result.value.description == "Verbs"

    def test_blank_description_becomes_none(self):
        result = validate_deck_input("Spanish", "   ")
        assert isinstance(result, Ok)
        assert result.value.description is None
        assert "description" in result.value.model_fields_set

    def test_omitted_description_is_not_set(self):
        result = validate_deck_input("Spanish")
        assert isinstance(result, Ok)
        assert result.value.description is None
        assert result.value.model_fields_set == {"name"}

    def test_missing_name(self):
        result = validate_deck_input("   ")
        assert isinstance(result, Invalid)
        assert result.field_errors == {"name": ["Name is required"]}

    def test_none_name(self):
        result = validate_deck_input(None)
        assert isinstance(result, Invalid)
        assert result.field_errors == {"name": ["Name is required"]}

    def test_name_too_long(self):
        result = validate_deck_input("n" * 101)
        assert isinstance(result, Invalid)
        assert result.field_errors == {"name": ["Name is too long"]}

    def test_name_at_limit_is_ok(self):
        assert isinstance(validate_deck_input("n" * 100), Ok)

    def test_name_is_measured_after_stripping(self):
        assert isinstance(validate_deck_input("  " + "n" * 100 + "  "), Ok)

    def test_reports_every_failing_field(self):
        result = validate_deck_input("", "d" * 501)
        assert isinstance(result, Invalid)
        assert result.field_errors == {
            "name": ["Name is required"],
            "description": ["Description is too long"],
        }


class TestValidateCardInput:
    def test_valid_input_is_ok(self):
        result = validate_card_input(" Hello ", "Hola")
        assert isinstance(result, Ok)
        assert isinstance(result.value, CardInput)
        assert (result.value.front, result.value.back) == ("Hello", "Hola")

    def test_missing_front_and_back(self):
        result = validate_card_input("", "  ")
        assert isinstance(result, Invalid)
        assert result.field_errors == {
            "front": ["Front text is required"],
            "back": ["Back text is required"],
        }

    def test_none_back(self):
        result = validate_card_input("Hello", None)
        assert isinstance(result, Invalid)
        assert result.field_errors == {"back": ["Back text is required"]}

    def test_text_too_long(self):
        result = validate_card_input("f" * 1025, "ok")
        assert isinstance(result, Invalid)
        assert result.field_errors == {"front": ["Front text is too long"]}


class TestInputModels:
    def test_extra_fields_are_rejected(self):
        with pytest.raises(ValidationError):
            DeckInput(name="Spanish", colour="red")

    def test_inputs_are_frozen(self):
        card = CardInput(front="Hello", back="Hola")
        with pytest.raises(ValidationError):
            card.front = "Hi"

    def test_limits_match_stored_models(self):
        assert (
            DeckInput.model_fields["name"].metadata
            == Deck.model_fields["name"].metadata
        )
        assert (
            CardInput.model_fields["front"].metadata
            == Card.model_fields["front"].metadata
        )
