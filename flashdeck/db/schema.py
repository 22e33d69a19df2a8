"""
Defines the database schema for flashdeck using a SQL string constant.
"""

DB_SCHEMA_SQL = """
    CREATE SEQUENCE IF NOT EXISTS deck_seq;
    CREATE SEQUENCE IF NOT EXISTS card_seq;

    CREATE TABLE IF NOT EXISTS decks (
        id INTEGER PRIMARY KEY DEFAULT nextval('deck_seq'),
        name VARCHAR NOT NULL,
        description VARCHAR,
        user_id VARCHAR NOT NULL,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL
    );

    CREATE TABLE IF NOT EXISTS cards (
        id INTEGER PRIMARY KEY DEFAULT nextval('card_seq'),
        deck_id INTEGER NOT NULL,
        front VARCHAR NOT NULL,
        back VARCHAR NOT NULL,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL
    );

    CREATE INDEX IF NOT EXISTS idx_decks_user_id ON decks (user_id);
    CREATE INDEX IF NOT EXISTS idx_cards_deck_id ON cards (deck_id);
"""
