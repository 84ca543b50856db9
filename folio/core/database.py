import os
import sqlite3


class Database:
    """Thin SQLite access layer shared by every Folio module."""

    @staticmethod
    def connect(path):
        return sqlite3.connect(path)

    @staticmethod
    def ensure_parent_dir(path):
        """Create the directory holding a database file if it is missing."""
        db_dir = os.path.dirname(path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    @staticmethod
    def add_missing_columns(cursor, table, columns):
        """
        Additive migration: add any (name, type) column not yet on the table.
        Returns the list of column names that were added.
        """
        cursor.execute(f"PRAGMA table_info({table})")
        existing = [column[1] for column in cursor.fetchall()]

        added = []
        for col_name, col_type in columns:
            if col_name not in existing:
                cursor.execute(f'ALTER TABLE {table} ADD COLUMN {col_name} {col_type}')
                added.append(col_name)
        return added
