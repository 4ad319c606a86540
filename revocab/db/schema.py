"""
Defines the database schema for revocab using a SQL string constant.
This keeps the schema definition separate from the database connection and
operation logic.

Timestamps are stored as naive UTC TIMESTAMP values; db_utils converts
them back to timezone-aware datetimes.

vocab_sets and vocab_items carry no key constraints: a library is always
rewritten as a whole by VocabDatabase.save_sets, which checks id
uniqueness before writing.
"""

DB_SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS vocab_sets (
        owner_id VARCHAR NOT NULL,
        id VARCHAR NOT NULL,
        sort_order INTEGER NOT NULL,
        title VARCHAR NOT NULL,
        metadata_language VARCHAR NOT NULL DEFAULT '',
        metadata_grade VARCHAR NOT NULL DEFAULT '',
        metadata_chapter VARCHAR NOT NULL DEFAULT '',
        metadata_page VARCHAR NOT NULL DEFAULT '',
        created_at TIMESTAMP NOT NULL,
        last_score INTEGER CHECK (last_score >= 0 AND last_score <= 100)
    );

    CREATE TABLE IF NOT EXISTS vocab_items (
        owner_id VARCHAR NOT NULL,
        set_id VARCHAR NOT NULL,
        id VARCHAR NOT NULL,
        sort_order INTEGER NOT NULL,
        original VARCHAR NOT NULL,
        translation VARCHAR NOT NULL,
        correct_count INTEGER NOT NULL DEFAULT 0 CHECK (correct_count >= 0),
        wrong_count INTEGER NOT NULL DEFAULT 0 CHECK (wrong_count >= 0)
    );

    CREATE TABLE IF NOT EXISTS streaks (
        owner_id VARCHAR PRIMARY KEY,
        current_streak INTEGER NOT NULL DEFAULT 0,
        best_streak INTEGER NOT NULL DEFAULT 0,
        last_activity_date DATE
    );
"""
