"""
Utility functions for data marshalling between Pydantic models and database
rows. Keeps the SQL in database.py free of conversion details.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List

import duckdb
from pydantic import ValidationError

from ..exceptions import MarshallingError
from ..models import Card, Deck


def rows_to_dicts(cursor: duckdb.DuckDBPyConnection) -> List[Dict[str, Any]]:
    """Convert cursor results to list of dictionaries using column names."""
    rows = cursor.fetchall()
    if not rows:
        return []
    description = cursor.description
    if description is None:
        return []
    columns = [desc[0] for desc in description]
    return [dict(zip(columns, row, strict=True)) for row in rows]


def _as_utc(value: Any) -> Any:
    """
    Normalise a timestamp read back from DuckDB to a `timezone.utc` datetime.

    Connections run in UTC, so aware values only swap pytz's UTC for the
    standard library's; naive values are taken to be UTC.
    """
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _transform_timestamps(row_dict: Dict[str, Any]) -> Dict[str, Any]:
    data = row_dict.copy()
    for key in ("created_at", "updated_at"):
        if key in data:
            data[key] = _as_utc(data[key])
    return data


def db_row_to_deck(row_dict: Dict[str, Any]) -> Deck:
    """
    Create a Deck model from a database row dictionary.

    Raises:
        MarshallingError: If the row cannot be validated into a Deck.
    """
    try:
        return Deck(**_transform_timestamps(row_dict))
    except ValidationError as e:
        raise MarshallingError(
            f"Failed to parse deck from DB row: {row_dict}. Error: {e}",
            original_exception=e,
        ) from e


def db_row_to_card(row_dict: Dict[str, Any]) -> Card:
    """
    Create a Card model from a database row dictionary.

    Raises:
        MarshallingError: If the row cannot be validated into a Card.
    """
    try:
        return Card(**_transform_timestamps(row_dict))
    except ValidationError as e:
        raise MarshallingError(
            f"Failed to parse card from DB row: {row_dict}. Error: {e}",
            original_exception=e,
        ) from e


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
