"""
DuckDB database interactions for flashdeck.

Every read and write is scoped to an owning user: a deck is only visible to
the user who created it, and a card is only visible through a deck its
caller owns. Operations on records the caller cannot see return None (or an
empty list), never raise.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union, cast

import duckdb

from ..exceptions import (
    CardOperationError,
    DeckOperationError,
    MarshallingError,
)
from ..models import Card, Deck
from . import db_utils
from .connection import ConnectionHandler
from .schema_manager import SchemaManager

logger = logging.getLogger(__name__)

DECK_EDITABLE_COLUMNS = frozenset({"name", "description"})


class FlashcardDatabase:
    """
    Acts as a Facade for the database subsystem, providing a simple,
    high-level interface for all deck and card data operations.

    It coordinates the ConnectionHandler, SchemaManager, and data marshalling
    utilities. Intended for use as a context manager.
    """

    def __init__(self, db_path: Union[str, Path], read_only: bool = False):
        """
        Create a FlashcardDatabase backed by the given DuckDB path.

        Args:
            db_path (str | Path): Path to the database file. Use ':memory:'
                for an in-memory database.
            read_only (bool): If True, open the database in read-only mode.
        """
        self._handler = ConnectionHandler(db_path=db_path, read_only=read_only)
        self._schema_manager = SchemaManager(self._handler)
        logger.info(
            f"FlashcardDatabase initialized for DB at: {self._handler.db_path_resolved}"  # noqa: E501
        )

    @property
    def db_path_resolved(self) -> Path:
        return self._handler.db_path_resolved

    @property
    def read_only(self) -> bool:
        return self._handler.read_only

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        return self._handler.get_connection()

    def close_connection(self) -> None:
        self._handler.close_connection()

    def __enter__(self) -> "FlashcardDatabase":
        """
        Open the database connection and initialize the schema if a new
        writable database was created.
        """
        self.get_connection()
        if self._handler.is_new_db and not self._handler.read_only:
            self.initialize_schema()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Ensures the connection is closed on exiting the context."""
        self.close_connection()

    def initialize_schema(self, force_recreate_tables: bool = False) -> None:
        """
        Ensure the database schema exists; optionally drop and recreate the
        tables first.
        """
        self._schema_manager.initialize_schema(
            force_recreate_tables=force_recreate_tables
        )

    # --- Deck Operations ---

    def _fetch_decks(self, sql: str, params: List[Any]) -> List[Deck]:
        conn = self.get_connection()
        try:
            cursor = conn.execute(sql, params)
            rows = db_utils.rows_to_dicts(cursor)
        except duckdb.Error as e:
            logger.error(f"Error fetching decks: {e}")
            raise DeckOperationError(
                f"Failed to fetch decks: {e}", original_exception=e
            ) from e
        try:
            return [
                db_utils.db_row_to_deck(cast(Dict[str, Any], row))
                for row in rows
            ]
        except MarshallingError as e:
            raise DeckOperationError(
                "Failed to parse decks from database.", original_exception=e
            ) from e

    def list_decks(self, user_id: str) -> List[Deck]:
        """
        Return every deck owned by `user_id`, most recently updated first.

        Raises:
            DeckOperationError: If the query fails or a row cannot be parsed.
        """
        sql = """
            SELECT * FROM decks
            WHERE user_id = $1
            ORDER BY updated_at DESC, id;
        """
        return self._fetch_decks(sql, [user_id])

    def get_deck(self, deck_id: int, user_id: str) -> Optional[Deck]:
        """
        Fetch a single deck if it exists and is owned by `user_id`.

        Returns:
            Deck | None: The deck, or None when missing or owned by someone
            else.
        """
        sql = "SELECT * FROM decks WHERE id = $1 AND user_id = $2 LIMIT 1;"
        decks = self._fetch_decks(sql, [deck_id, user_id])
        if not decks:
            return None
        logger.debug(f"Fetched deck {deck_id} for user {user_id}")
        return decks[0]

    def count_decks(self, user_id: str) -> int:
        """Number of decks owned by `user_id`."""
        conn = self.get_connection()
        try:
            result = conn.execute(
                "SELECT COUNT(*) FROM decks WHERE user_id = $1;", [user_id]
            ).fetchone()
            return result[0] if result else 0
        except duckdb.Error as e:
            logger.error(f"Error counting decks for user {user_id}: {e}")
            raise DeckOperationError(
                f"Failed to count decks: {e}", original_exception=e
            ) from e

    def insert_deck(
        self, name: str, description: Optional[str], user_id: str
    ) -> Deck:
        """
        Create a deck owned by `user_id`.

        Returns:
            Deck: The stored deck including its generated id and timestamps.

        Raises:
            DeckOperationError: If the insert fails.
        """
        now = db_utils.utc_now()
        sql = """
            INSERT INTO decks (name, description, user_id, created_at, updated_at)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING *;
        """  # noqa: E501
        decks = self._fetch_decks(sql, [name, description, user_id, now, now])
        logger.info(f"Created deck {decks[0].id} for user {user_id}")
        return decks[0]

    def update_deck(
        self, deck_id: int, user_id: str, **changes: Any
    ) -> Optional[Deck]:
        """
        Apply a partial update to a deck. Only the columns passed as keyword
        arguments (`name`, `description`) are written; passing
        `description=None` clears the description, omitting it keeps it.

        Returns:
            Deck | None: The updated deck, or None if `user_id` does not own
            a deck with this id.

        Raises:
            ValueError: If a keyword is not an editable deck column.
        """
        unknown = set(changes) - DECK_EDITABLE_COLUMNS
        if unknown:
            raise ValueError(
                f"Cannot update deck columns: {', '.join(sorted(unknown))}"
            )
        if not changes:
            return self.get_deck(deck_id, user_id)

        columns = sorted(changes)
        assignments = ", ".join(
            f"{column} = ${i}" for i, column in enumerate(columns, start=1)
        )
        n = len(columns)
        sql = f"""
            UPDATE decks
            SET {assignments}, updated_at = ${n + 1}
            WHERE id = ${n + 2} AND user_id = ${n + 3}
            RETURNING *;
        """
        params = [changes[column] for column in columns]
        decks = self._fetch_decks(
            sql, params + [db_utils.utc_now(), deck_id, user_id]
        )
        if not decks:
            logger.info(f"Deck {deck_id} not found for user {user_id}")
            return None
        logger.info(f"Updated deck {deck_id}")
        return decks[0]

    def delete_deck(self, deck_id: int, user_id: str) -> Optional[Deck]:
        """
        Delete a deck together with all of its cards, in one transaction.

        Returns:
            Deck | None: The deleted deck, or None if `user_id` does not own
            a deck with this id.

        Raises:
            DeckOperationError: If the transaction fails; it is rolled back.
        """
        deck = self.get_deck(deck_id, user_id)
        if deck is None:
            return None

        try:
            with self._handler.transaction("deck delete") as cursor:
                cursor.execute(
                    "DELETE FROM cards WHERE deck_id = $1;", [deck_id]
                )
                cursor.execute(
                    "DELETE FROM decks WHERE id = $1 AND user_id = $2;",
                    [deck_id, user_id],
                )
        except duckdb.Error as e:
            logger.error(f"Error deleting deck {deck_id}: {e}")
            raise DeckOperationError(
                f"Failed to delete deck: {e}", original_exception=e
            ) from e

        logger.info(f"Deleted deck {deck_id} and its cards")
        return deck

    # --- Card Operations ---

    def _fetch_cards(
        self,
        sql: str,
        params: List[Any],
        conn: Optional[duckdb.DuckDBPyConnection] = None,
    ) -> List[Card]:
        conn = conn or self.get_connection()
        try:
            cursor = conn.execute(sql, params)
            rows = db_utils.rows_to_dicts(cursor)
        except duckdb.Error as e:
            logger.error(f"Error fetching cards: {e}")
            raise CardOperationError(
                f"Failed to fetch cards: {e}", original_exception=e
            ) from e
        try:
            return [
                db_utils.db_row_to_card(cast(Dict[str, Any], row))
                for row in rows
            ]
        except MarshallingError as e:
            raise CardOperationError(
                "Failed to parse cards from database.", original_exception=e
            ) from e

    def _owns_deck(self, deck_id: int, user_id: str) -> bool:
        return self.get_deck(deck_id, user_id) is not None

    def get_deck_cards(self, deck_id: int, user_id: str) -> List[Card]:
        """
        Return the cards of a deck in the order they were added.

        Returns an empty list when the deck does not exist or is owned by
        another user.
        """
        sql = """
            SELECT c.* FROM cards c
            JOIN decks d ON c.deck_id = d.id
            WHERE c.deck_id = $1 AND d.user_id = $2
            ORDER BY c.id;
        """
        return self._fetch_cards(sql, [deck_id, user_id])

    def count_cards(self, deck_id: int, user_id: str) -> int:
        """Number of cards in a deck owned by `user_id` (0 otherwise)."""
        conn = self.get_connection()
        sql = """
            SELECT COUNT(*) FROM cards c
            JOIN decks d ON c.deck_id = d.id
            WHERE c.deck_id = $1 AND d.user_id = $2;
        """
        try:
            result = conn.execute(sql, [deck_id, user_id]).fetchone()
            return result[0] if result else 0
        except duckdb.Error as e:
            logger.error(f"Error counting cards for deck {deck_id}: {e}")
            raise CardOperationError(
                f"Failed to count cards: {e}", original_exception=e
            ) from e

    def get_card_counts(self, user_id: str) -> Dict[int, int]:
        """
        Map each deck owned by `user_id` to its number of cards. Decks
        without cards map to 0.
        """
        conn = self.get_connection()
        sql = """
            SELECT d.id AS deck_id, COUNT(c.id) AS card_count
            FROM decks d
            LEFT JOIN cards c ON c.deck_id = d.id
            WHERE d.user_id = $1
            GROUP BY d.id;
        """
        try:
            rows = db_utils.rows_to_dicts(conn.execute(sql, [user_id]))
        except duckdb.Error as e:
            logger.error(f"Error counting cards for user {user_id}: {e}")
            raise CardOperationError(
                f"Failed to count cards: {e}", original_exception=e
            ) from e
        return {row["deck_id"]: row["card_count"] for row in rows}

    def get_card(
        self, card_id: int, deck_id: int, user_id: str
    ) -> Optional[Card]:
        """Fetch a card by id, scoped to a deck owned by `user_id`."""
        sql = """
            SELECT c.* FROM cards c
            JOIN decks d ON c.deck_id = d.id
            WHERE c.id = $1 AND c.deck_id = $2 AND d.user_id = $3
            LIMIT 1;
        """
        cards = self._fetch_cards(sql, [card_id, deck_id, user_id])
        return cards[0] if cards else None

    def _run_card_mutation(
        self, deck_id: int, sql: str, params: List[Any], action: str
    ) -> List[Card]:
        """
        Execute a card INSERT/UPDATE/DELETE ... RETURNING statement and touch
        the parent deck's `updated_at`, in one transaction.
        """
        try:
            with self._handler.transaction(f"card {action}") as cursor:
                cards = self._fetch_cards(sql, params, conn=cursor)
                if cards:
                    cursor.execute(
                        "UPDATE decks SET updated_at = $1 WHERE id = $2;",
                        [db_utils.utc_now(), deck_id],
                    )
        except duckdb.Error as e:
            logger.error(f"Error during card {action} in deck {deck_id}: {e}")
            raise CardOperationError(
                f"Card {action} failed: {e}", original_exception=e
            ) from e
        return cards

    def insert_card(
        self, deck_id: int, front: str, back: str, user_id: str
    ) -> Optional[Card]:
        """
        Add a card to a deck owned by `user_id`.

        Returns:
            Card | None: The stored card, or None if the deck is missing or
            owned by someone else.
        """
        if not self._owns_deck(deck_id, user_id):
            return None
        now = db_utils.utc_now()
        sql = """
            INSERT INTO cards (deck_id, front, back, created_at, updated_at)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING *;
        """
        cards = self._run_card_mutation(
            deck_id, sql, [deck_id, front, back, now, now], "insert"
        )
        logger.info(f"Added card {cards[0].id} to deck {deck_id}")
        return cards[0]

    def update_card(
        self,
        card_id: int,
        deck_id: int,
        user_id: str,
        front: str,
        back: str,
    ) -> Optional[Card]:
        """
        Replace the text of a card.

        Returns:
            Card | None: The updated card, or None if it is not in a deck
            owned by `user_id`.
        """
        if not self._owns_deck(deck_id, user_id):
            return None
        sql = """
            UPDATE cards
            SET front = $1, back = $2, updated_at = $3
            WHERE id = $4 AND deck_id = $5
            RETURNING *;
        """
        cards = self._run_card_mutation(
            deck_id,
            sql,
            [front, back, db_utils.utc_now(), card_id, deck_id],
            "update",
        )
        if not cards:
            return None
        logger.info(f"Updated card {card_id} in deck {deck_id}")
        return cards[0]

    def delete_card(
        self, card_id: int, deck_id: int, user_id: str
    ) -> Optional[Card]:
        """
        Delete a card.

        Returns:
            Card | None: The deleted card, or None if it is not in a deck
            owned by `user_id`.
        """
        if not self._owns_deck(deck_id, user_id):
            return None
        sql = """
            DELETE FROM cards
            WHERE id = $1 AND deck_id = $2
            RETURNING *;
        """
        cards = self._run_card_mutation(
            deck_id, sql, [card_id, deck_id], "delete"
        )
        if not cards:
            return None
        logger.info(f"Deleted card {card_id} from deck {deck_id}")
        return cards[0]
