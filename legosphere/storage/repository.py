"""
Repository pattern for data access.

Handles database operations and data persistence logic.
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional

from .db import DEFAULT_DB_PATH, get_connection
from .models import UsageLogEntry


class UsageRepository:
    """Read-side access to recorded word usage.

    Used for reporting only; the ledger writes through ``SqliteUsageStore``.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        """Initialize the repository with a database path.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path

    def get_feature_totals(
        self,
        user_id: Optional[int] = None,
        days: Optional[int] = None
    ) -> Dict[str, int]:
        """Sum charged words per feature tag.

        Args:
            user_id: Optional filter for a specific user
            days: Optional number of days to look back

        Returns:
            Mapping of feature tag to total words, largest first
        """
        conn = get_connection(self.db_path)
        try:
            query = "SELECT feature, SUM(units) FROM usage_log"
            params: list = []
            conditions = []

            if user_id is not None:
                conditions.append("user_id = ?")
                params.append(user_id)
            if days is not None:
                cutoff = (datetime.now() - timedelta(days=days)).isoformat()
                conditions.append("timestamp >= ?")
                params.append(cutoff)

            if conditions:
                query += " WHERE " + " AND ".join(conditions)
            query += " GROUP BY feature ORDER BY SUM(units) DESC"

            cursor = conn.execute(query, params)
            return {row[0]: int(row[1] or 0) for row in cursor.fetchall()}
        finally:
            conn.close()


class SqliteUsageStore:
    """Durable storage for one user's consumed word count.

    Binds a database path and user id; this is the persistence port the
    usage ledger reads once at startup and writes on every deduction.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH, user_id: int = 1):
        self.db_path = db_path
        self.user_id = user_id
        initialize_schema(db_path)

    def load(self) -> Optional[int]:
        """Return the persisted used-units value, or None if never saved."""
        return load_used_units(self.user_id, self.db_path)

    def persist(self, used_units: int, feature: str, units: int) -> None:
        """Store the new total and log the deduction in one transaction."""
        conn = get_connection(self.db_path)
        try:
            now = datetime.now()
            _upsert_used_units(conn, self.user_id, used_units, now)
            _insert_log(conn, UsageLogEntry(
                timestamp=now,
                user_id=self.user_id,
                feature=feature,
                units=units
            ))
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


def initialize_schema(db_path: str = DEFAULT_DB_PATH) -> None:
    """Create the usage tables if they don't exist.

    ``usage_account`` holds one running total per user. ``usage_log`` is
    append-only: no UPDATE or DELETE is ever performed on it.

    Args:
        db_path: Path to SQLite database file
    """
    conn = get_connection(db_path)
    try:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS usage_account (
                user_id INTEGER PRIMARY KEY,
                used_units INTEGER NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS usage_log (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                user_id INTEGER NOT NULL,
                feature TEXT NOT NULL,
                units INTEGER NOT NULL
            )
        """)
        conn.commit()
    finally:
        conn.close()


def load_used_units(user_id: int, db_path: str = DEFAULT_DB_PATH) -> Optional[int]:
    """Read the persisted used-units value for a user.

    Args:
        user_id: User whose total to read
        db_path: Path to SQLite database file

    Returns:
        Used units, or None if nothing has been saved for the user
    """
    conn = get_connection(db_path)
    try:
        cursor = conn.execute(
            "SELECT used_units FROM usage_account WHERE user_id = ?", (user_id,)
        )
        row = cursor.fetchone()
        return None if row is None else int(row[0])
    finally:
        conn.close()


def save_used_units(user_id: int, used_units: int, db_path: str = DEFAULT_DB_PATH) -> None:
    """Insert or replace the used-units total for a user.

    Args:
        user_id: User whose total to write
        used_units: New running total
        db_path: Path to SQLite database file
    """
    conn = get_connection(db_path)
    try:
        _upsert_used_units(conn, user_id, used_units, datetime.now())
        conn.commit()
    finally:
        conn.close()


def insert_usage_log(entry: UsageLogEntry, db_path: str = DEFAULT_DB_PATH) -> None:
    """Append a single entry to the usage log.

    Args:
        entry: The deduction to record
        db_path: Path to SQLite database file
    """
    conn = get_connection(db_path)
    try:
        _insert_log(conn, entry)
        conn.commit()
    finally:
        conn.close()


def fetch_recent_usage_logs(
    feature: Optional[str] = None,
    user_id: Optional[int] = None,
    limit: int = 100,
    db_path: str = DEFAULT_DB_PATH
) -> List[UsageLogEntry]:
    """Fetch recent usage log entries, newest first.

    Args:
        feature: Optional filter for specific feature tag
        user_id: Optional filter for specific user
        limit: Maximum number of entries to return
        db_path: Path to SQLite database file

    Returns:
        List of log entries ordered by timestamp (newest first)
    """
    conn = get_connection(db_path)
    try:
        query = "SELECT timestamp, user_id, feature, units FROM usage_log"
        params: list = []
        conditions = []

        if feature:
            conditions.append("feature = ?")
            params.append(feature)
        if user_id is not None:
            conditions.append("user_id = ?")
            params.append(user_id)
        if conditions:
            query += " WHERE " + " AND ".join(conditions)

        query += " ORDER BY timestamp DESC, id DESC LIMIT ?"
        params.append(limit)

        cursor = conn.execute(query, params)
        return [
            UsageLogEntry(
                timestamp=datetime.fromisoformat(row[0]),
                user_id=row[1],
                feature=row[2],
                units=row[3]
            )
            for row in cursor.fetchall()
        ]
    finally:
        conn.close()


def _upsert_used_units(conn, user_id: int, used_units: int, when: datetime) -> None:
    conn.execute("""
        INSERT INTO usage_account (user_id, used_units, updated_at)
        VALUES (?, ?, ?)
        ON CONFLICT(user_id) DO UPDATE SET
            used_units = excluded.used_units,
            updated_at = excluded.updated_at
    """, (user_id, used_units, when.isoformat()))


def _insert_log(conn, entry: UsageLogEntry) -> None:
    conn.execute("""
        INSERT INTO usage_log (timestamp, user_id, feature, units)
        VALUES (?, ?, ?, ?)
    """, (
        entry.timestamp.isoformat(),
        entry.user_id,
        entry.feature,
        entry.units
    ))
