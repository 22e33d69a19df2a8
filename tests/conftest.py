import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, List

import pytest

from flashdeck.db import FlashcardDatabase
from flashdeck.deck_service import DeckService, ViewInvalidator
from flashdeck.models import Card, Credential, Deck


# --- Database Fixtures ---
@pytest.fixture
def db_path_memory() -> str:
    return ":memory:"


@pytest.fixture
def db_path_file(tmp_path: Path) -> Path:
    return tmp_path / "test_flashdeck.db"


@pytest.fixture(params=["memory", "file"])
def db_manager(
    request, db_path_memory: str, db_path_file: Path
) -> Generator[FlashcardDatabase, None, None]:
    """
    Provide a FlashcardDatabase, either in-memory or file-backed, and close it
    (deleting the file for the file-backed variant) on teardown.
    """
    if request.param == "memory":
        db_man = FlashcardDatabase(db_path_memory)
    else:
        db_man = FlashcardDatabase(db_path_file)
    try:
        yield db_man
    finally:
        db_man.close_connection()
        if request.param == "file" and db_path_file.exists():
            try:
                db_path_file.unlink()
            except OSError as e:
                logging.warning(
                    f"Error removing temporary DB file in test fixture teardown: {e}"  # noqa: E501
                )


@pytest.fixture
def initialized_db_manager(db_manager: FlashcardDatabase) -> FlashcardDatabase:
    db_manager.initialize_schema()
    return db_manager


# --- Service Fixtures ---
@pytest.fixture
def alice() -> Credential:
    return Credential(user_id="user_alice")


@pytest.fixture
def bob() -> Credential:
    return Credential(user_id="user_bob")


@pytest.fixture
def invalidator() -> ViewInvalidator:
    return ViewInvalidator()


@pytest.fixture
def service(
    initialized_db_manager: FlashcardDatabase, invalidator: ViewInvalidator
) -> DeckService:
    return DeckService(initialized_db_manager, invalidator=invalidator)


# --- Model Fixtures ---
@pytest.fixture
def sample_deck() -> Deck:
    return Deck(
        id=1,
        name="Spanish Basics",
        description="Greetings and farewells",
        user_id="user_alice",
        created_at=datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc),
        updated_at=datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def make_cards():
    """Factory for `count` cards numbered 1..count in one deck."""

    def _make(count: int, deck_id: int = 1) -> List[Card]:
        return [
            Card(id=i, deck_id=deck_id, front=f"Front {i}", back=f"Back {i}")
            for i in range(1, count + 1)
        ]

    return _make


@pytest.fixture
def greeting_cards() -> List[Card]:
    return [
        Card(id=1, deck_id=1, front="Hello", back="Hola"),
        Card(id=2, deck_id=1, front="Bye", back="Adiós"),
    ]
