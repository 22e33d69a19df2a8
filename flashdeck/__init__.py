"""Flashdeck - flashcard decks and interactive study sessions."""

from .models import Card, Credential, Deck
from .db import FlashcardDatabase
from .deck_service import DeckService, ViewInvalidator
from .study_session import StudyIntent, StudySession, StudyState

__all__ = [
    "Card",
    "Credential",
    "Deck",
    "FlashcardDatabase",
    "DeckService",
    "ViewInvalidator",
    "StudyIntent",
    "StudySession",
    "StudyState",
]
