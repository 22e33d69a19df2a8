"""
Pydantic models for decks, cards and the credential used to access them.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DECK_NAME_MAX_LENGTH = 100
DECK_DESCRIPTION_MAX_LENGTH = 500
CARD_TEXT_MAX_LENGTH = 1024


class Deck(BaseModel):
    """
    A named, user-owned collection of flashcards.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    id: int = Field(..., ge=1, description="Auto-incrementing PK.")
    name: str = Field(
        ...,
        min_length=1,
        max_length=DECK_NAME_MAX_LENGTH,
        description="Display name of the deck.",
    )
    description: Optional[str] = Field(
        default=None,
        max_length=DECK_DESCRIPTION_MAX_LENGTH,
        description="Optional free-text description.",
    )
    user_id: str = Field(
        ...,
        min_length=1,
        description="Identifier of the owning user.",
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC timestamp when the deck was created.",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC timestamp of the last change to the deck or its cards.",
    )


class Card(BaseModel):
    """
    A front/back text pair belonging to exactly one deck.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    id: int = Field(..., ge=1, description="Auto-incrementing PK.")
    deck_id: int = Field(..., ge=1, description="PK of the owning deck.")
    front: str = Field(
        ...,
        min_length=1,
        max_length=CARD_TEXT_MAX_LENGTH,
        description="Question side of the card.",
    )
    back: str = Field(
        ...,
        min_length=1,
        max_length=CARD_TEXT_MAX_LENGTH,
        description="Answer side of the card.",
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC timestamp when the card was created.",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC timestamp of last modification.",
    )


class Credential(BaseModel):
    """
    The authenticated principal on whose behalf a deck operation runs.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_id: str = Field(
        ...,
        min_length=1,
        description="Identifier of the signed-in user.",
    )
