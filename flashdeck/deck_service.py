"""
Authorized deck and card operations.

DeckService is the boundary the presentation layer talks to. Every call
takes the caller's Credential explicitly, validates its input before
touching the store, and tells a ViewInvalidator which listing and detail
views went stale after a mutation.
"""

import logging
import random
from typing import Dict, List, Optional

from .db.database import FlashcardDatabase
from .exceptions import (
    NotFoundOrUnauthorizedError,
    UnauthorizedError,
    ValidationFailedError,
)
from .models import Card, Credential, Deck
from .study_session import StudySession
from .validation import (
    CardInput,
    DeckInput,
    Invalid,
    ValidationResult,
    validate_card_input,
    validate_deck_input,
)

logger = logging.getLogger(__name__)

DECKS_VIEW = "/decks"
DASHBOARD_VIEW = "/dashboard"

DECK_NOT_FOUND = "Deck not found or unauthorized"
CARD_NOT_FOUND = "Card not found or unauthorized"


def deck_view(deck_id: int) -> str:
    return f"/decks/{deck_id}"


class ViewInvalidator:
    """
    Records which views must be re-fetched after a mutation.

    The default implementation only logs and remembers the paths; callers
    that cache rendered views can subclass it and override `invalidate`.
    """

    def __init__(self) -> None:
        self.invalidated: List[str] = []

    def invalidate(self, path: str) -> None:
        logger.debug(f"Invalidating view {path}")
        self.invalidated.append(path)


def _require_user(credential: Optional[Credential]) -> str:
    if credential is None or not credential.user_id:
        raise UnauthorizedError("Unauthorized")
    return credential.user_id


def _unwrap(result: "ValidationResult"):
    if isinstance(result, Invalid):
        raise ValidationFailedError(result.field_errors)
    return result.value


class DeckService:
    """
    Owner-checked, validated CRUD over decks and cards.

    Errors:
        UnauthorizedError: no credential was supplied.
        NotFoundOrUnauthorizedError: the target does not exist or belongs
            to another user.
        ValidationFailedError: the input violates a field constraint; the
            error carries per-field messages.
    """

    def __init__(
        self,
        db: FlashcardDatabase,
        invalidator: Optional[ViewInvalidator] = None,
    ):
        self.db = db
        self.invalidator = invalidator or ViewInvalidator()

    def _invalidate(self, *paths: str) -> None:
        for path in paths:
            self.invalidator.invalidate(path)

    # --- Decks ---

    def list_decks(self, credential: Optional[Credential]) -> List[Deck]:
        user_id = _require_user(credential)
        return self.db.list_decks(user_id)

    def card_counts(self, credential: Optional[Credential]) -> Dict[int, int]:
        """Number of cards in each of the caller's decks, keyed by deck id."""
        user_id = _require_user(credential)
        return self.db.get_card_counts(user_id)

    def get_deck(
        self, credential: Optional[Credential], deck_id: int
    ) -> Deck:
        user_id = _require_user(credential)
        deck = self.db.get_deck(deck_id, user_id)
        if deck is None:
            raise NotFoundOrUnauthorizedError(DECK_NOT_FOUND)
        return deck

    def create_deck(
        self,
        credential: Optional[Credential],
        name: str,
        description: Optional[str] = None,
    ) -> Deck:
        user_id = _require_user(credential)
        data: DeckInput = _unwrap(validate_deck_input(name, description))
        deck = self.db.insert_deck(data.name, data.description, user_id)
        self._invalidate(DECKS_VIEW, DASHBOARD_VIEW)
        return deck

    def update_deck(
        self,
        credential: Optional[Credential],
        deck_id: int,
        name: str,
        description: Optional[str] = None,
    ) -> Deck:
        """
        Rename a deck. A `description` of None keeps the stored one; a
        blank string clears it.
        """
        user_id = _require_user(credential)
        data: DeckInput = _unwrap(validate_deck_input(name, description))
        deck = self.db.update_deck(
            deck_id, user_id, **data.model_dump(exclude_unset=True)
        )
        if deck is None:
            raise NotFoundOrUnauthorizedError(DECK_NOT_FOUND)
        self._invalidate(DECKS_VIEW, deck_view(deck_id), DASHBOARD_VIEW)
        return deck

    def delete_deck(
        self, credential: Optional[Credential], deck_id: int
    ) -> Deck:
        user_id = _require_user(credential)
        deck = self.db.delete_deck(deck_id, user_id)
        if deck is None:
            raise NotFoundOrUnauthorizedError(DECK_NOT_FOUND)
        self._invalidate(DECKS_VIEW, DASHBOARD_VIEW)
        return deck

    # --- Cards ---

    def list_cards(
        self, credential: Optional[Credential], deck_id: int
    ) -> List[Card]:
        """Cards of a deck in store order; the deck must be the caller's."""
        deck = self.get_deck(credential, deck_id)
        return self.db.get_deck_cards(deck.id, deck.user_id)

    def get_card(
        self, credential: Optional[Credential], deck_id: int, card_id: int
    ) -> Card:
        user_id = _require_user(credential)
        card = self.db.get_card(card_id, deck_id, user_id)
        if card is None:
            raise NotFoundOrUnauthorizedError(CARD_NOT_FOUND)
        return card

    def create_card(
        self,
        credential: Optional[Credential],
        deck_id: int,
        front: str,
        back: str,
    ) -> Card:
        user_id = _require_user(credential)
        data: CardInput = _unwrap(validate_card_input(front, back))
        card = self.db.insert_card(deck_id, data.front, data.back, user_id)
        if card is None:
            raise NotFoundOrUnauthorizedError(DECK_NOT_FOUND)
        self._invalidate(deck_view(deck_id))
        return card

    def update_card(
        self,
        credential: Optional[Credential],
        deck_id: int,
        card_id: int,
        front: str,
        back: str,
    ) -> Card:
        user_id = _require_user(credential)
        data: CardInput = _unwrap(validate_card_input(front, back))
        card = self.db.update_card(
            card_id, deck_id, user_id, front=data.front, back=data.back
        )
        if card is None:
            raise NotFoundOrUnauthorizedError(CARD_NOT_FOUND)
        self._invalidate(deck_view(deck_id))
        return card

    def delete_card(
        self, credential: Optional[Credential], deck_id: int, card_id: int
    ) -> Card:
        user_id = _require_user(credential)
        card = self.db.delete_card(card_id, deck_id, user_id)
        if card is None:
            raise NotFoundOrUnauthorizedError(CARD_NOT_FOUND)
        self._invalidate(deck_view(deck_id))
        return card

    # --- Study ---

    def open_study_session(
        self,
        credential: Optional[Credential],
        deck_id: int,
        rng: Optional[random.Random] = None,
    ) -> StudySession:
        """
        Load a deck and its cards and start a fresh study session over them.
        """
        deck = self.get_deck(credential, deck_id)
        cards = self.db.get_deck_cards(deck.id, deck.user_id)
        logger.info(
            f"Opening study session for deck {deck.id} with {len(cards)} cards"
        )
        return StudySession(deck, cards, rng=rng)
