from unittest.mock import MagicMock, patch

import duckdb
import pytest

from flashdeck.db import FlashcardDatabase
from flashdeck.exceptions import (
    CardOperationError,
    DatabaseConnectionError,
    DeckOperationError,
    MarshallingError,
    SchemaInitializationError,
)


def failing_queries(sql, *args, **kwargs):
    """Let session setup through and fail every real query."""
    if sql.startswith("SET "):
        return MagicMock()
    raise duckdb.Error("boom")


@patch("flashdeck.db.connection.duckdb.connect")
def test_get_connection_raises_custom_error_on_duckdb_error(mock_connect):
    """get_connection wraps duckdb.Error in DatabaseConnectionError."""
    mock_connect.side_effect = duckdb.Error("Connection failed")
    db = FlashcardDatabase(db_path=":memory:")

    with pytest.raises(
        DatabaseConnectionError, match="Failed to connect to database"
    ) as exc_info:
        db.get_connection()
    assert isinstance(exc_info.value.original_exception, duckdb.Error)


@patch("flashdeck.db.connection.duckdb.connect")
def test_session_setup_failure_closes_connection(mock_connect):
    mock_connection = MagicMock()
    mock_connection.execute.side_effect = duckdb.Error("bad setting")
    mock_connect.return_value = mock_connection
    db = FlashcardDatabase(db_path=":memory:")

    with pytest.raises(DatabaseConnectionError, match="bad setting"):
        db.get_connection()
    mock_connection.close.assert_called_once()


@patch("flashdeck.db.connection.duckdb.connect")
def test_initialize_schema_raises_custom_error_on_duckdb_error(mock_connect):
    mock_cursor = MagicMock()
    mock_cursor.execute.side_effect = duckdb.Error("Schema creation failed")
    mock_connection = MagicMock()
    mock_connection.cursor.return_value.__enter__.return_value = mock_cursor
    mock_connect.return_value = mock_connection

    db = FlashcardDatabase(db_path=":memory:")

    with pytest.raises(
        SchemaInitializationError, match="Failed to initialize schema"
    ):
        db.initialize_schema()
    mock_cursor.rollback.assert_called_once()
    mock_cursor.commit.assert_not_called()


@patch("flashdeck.db.schema_manager.logger.error")
@patch("flashdeck.db.connection.logger.error")
@patch("flashdeck.db.connection.duckdb.connect")
def test_initialize_schema_handles_rollback_error(
    mock_connect, mock_connection_logger_error, mock_schema_logger_error
):
    """A failing rollback is logged and the original error still surfaces."""
    mock_cursor = MagicMock()
    mock_cursor.execute.side_effect = duckdb.Error("Initial schema error")
    mock_cursor.rollback.side_effect = duckdb.Error("Rollback failed!")
    mock_connection = MagicMock()
    mock_connection.cursor.return_value.__enter__.return_value = mock_cursor
    mock_connect.return_value = mock_connection

    db = FlashcardDatabase(db_path=":memory:")

    with pytest.raises(
        SchemaInitializationError,
        match="Failed to initialize schema: Initial schema error",
    ):
        db.initialize_schema()

    mock_connection_logger_error.assert_called_once()
    assert "Failed to rollback transaction: Rollback failed!" in str(
        mock_connection_logger_error.call_args
    )
    mock_schema_logger_error.assert_called_once()


@patch("flashdeck.db.connection.duckdb.connect")
def test_list_decks_wraps_query_error(mock_connect):
    mock_connection = MagicMock()
    mock_connection.execute.side_effect = failing_queries
    mock_connect.return_value = mock_connection

    db = FlashcardDatabase(db_path=":memory:")
    with pytest.raises(DeckOperationError, match="Failed to fetch decks"):
        db.list_decks("user_alice")


@patch("flashdeck.db.connection.duckdb.connect")
def test_count_cards_wraps_query_error(mock_connect):
    mock_connection = MagicMock()
    mock_connection.execute.side_effect = failing_queries
    mock_connect.return_value = mock_connection

    db = FlashcardDatabase(db_path=":memory:")
    with pytest.raises(CardOperationError, match="Failed to count cards"):
        db.count_cards(1, "user_alice")

def test_unparseable_deck_row_raises_operation_error(initialized_db_manager):
    conn = initialized_db_manager.get_connection()
    conn.execute(
        "INSERT INTO decks (name, description, user_id, created_at, updated_at) "  # noqa: E501
        "VALUES ('', NULL, 'user_alice', now(), now());"
    )

    with pytest.raises(DeckOperationError) as exc_info:
        initialized_db_manager.list_decks("user_alice")
    assert isinstance(exc_info.value.original_exception, MarshallingError)


def test_unparseable_card_row_raises_operation_error(initialized_db_manager):
    deck = initialized_db_manager.insert_deck("Deck", None, "user_alice")
    conn = initialized_db_manager.get_connection()
    conn.execute(
        "INSERT INTO cards (deck_id, front, back, created_at, updated_at) "
        "VALUES (?, '', 'back', now(), now());",
        [deck.id],
    )

    with pytest.raises(CardOperationError) as exc_info:
        initialized_db_manager.get_deck_cards(deck.id, "user_alice")
    assert isinstance(exc_info.value.original_exception, MarshallingError)


def test_card_mutation_error_is_wrapped(initialized_db_manager):
    deck = initialized_db_manager.insert_deck("Deck", None, "user_alice")
    initialized_db_manager.get_connection().execute("DROP TABLE cards;")

    with pytest.raises(CardOperationError):
        initialized_db_manager.insert_card(deck.id, "q", "a", "user_alice")
