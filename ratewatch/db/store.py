"""SQLite data store for RateWatch."""

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from ratewatch.models import Alert, NotificationRecord, RateSnapshot

_ALERT_COLUMNS = (
    "id, owner, from_currency, to_currency, target_rate, condition, "
    "is_active, notified, created_at, updated_at"
)


class DataStore:
    """SQLite-based data store for RateWatch.

    Holds the alert records, the locally cached rate snapshots and the
    in-app notification inbox.
    """

    REQUIRED_TABLES = [
        "alerts",
        "rate_snapshots",
        "notifications",
    ]

    # Fields that may be changed through update_alert().
    UPDATABLE_ALERT_FIELDS = {"is_active", "notified", "target_rate", "condition"}

    def __init__(self, db_path: Path):
        """Initialize the data store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            # Alerts table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS alerts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner TEXT NOT NULL,
                    from_currency TEXT NOT NULL,
                    to_currency TEXT NOT NULL,
                    target_rate REAL NOT NULL CHECK (target_rate > 0),
                    condition TEXT NOT NULL CHECK (condition IN ('above', 'below')),
                    is_active INTEGER NOT NULL DEFAULT 1,
                    notified INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    CHECK (NOT (notified = 1 AND is_active = 1))
                )
            """)

            # Rate snapshots table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS rate_snapshots (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    base_currency TEXT NOT NULL,
                    rates TEXT NOT NULL,
                    fetched_at TEXT NOT NULL
                )
            """)

            # Notifications inbox table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS notifications (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner TEXT NOT NULL,
                    alert_id INTEGER,
                    channel TEXT NOT NULL,
                    title TEXT NOT NULL,
                    body TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            conn.commit()
        finally:
            conn.close()

    # ==================== Alerts ====================

    @staticmethod
    def _row_to_alert(row: sqlite3.Row) -> Alert:
        return Alert(
            id=row["id"],
            owner=row["owner"],
            from_currency=row["from_currency"],
            to_currency=row["to_currency"],
            target_rate=row["target_rate"],
            condition=row["condition"],
            is_active=bool(row["is_active"]),
            notified=bool(row["notified"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def save_alert(self, alert: Alert) -> int:
        """Save a new alert to the database.

        Args:
            alert: Alert to save. Its ``id`` is ignored.

        Returns:
            The ID of the saved alert.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO alerts
                (owner, from_currency, to_currency, target_rate, condition,
                 is_active, notified, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    alert.owner,
                    alert.from_currency,
                    alert.to_currency,
                    alert.target_rate,
                    alert.condition,
                    1 if alert.is_active else 0,
                    1 if alert.notified else 0,
                    alert.created_at.isoformat(),
                    alert.updated_at.isoformat(),
                ),
            )
            conn.commit()
            return cursor.lastrowid or 0
        finally:
            conn.close()

    def get_alerts(self, owner: Optional[str] = None) -> list[Alert]:
        """Get all alerts, optionally for a single owner.

        Args:
            owner: Owner to filter by. If None, returns every owner's alerts.

        Returns:
            List of alerts, oldest first.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            if owner is not None:
                cursor.execute(
                    f"SELECT {_ALERT_COLUMNS} FROM alerts WHERE owner = ? ORDER BY id",
                    (owner,),
                )
            else:
                cursor.execute(f"SELECT {_ALERT_COLUMNS} FROM alerts ORDER BY id")
            return [self._row_to_alert(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def get_active_alerts(self, owner: Optional[str] = None) -> list[Alert]:
        """Get alerts that are active and have not fired yet.

        Args:
            owner: Owner to filter by. If None, returns every owner's alerts.

        Returns:
            Candidate alerts in store order.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            query = (
                f"SELECT {_ALERT_COLUMNS} FROM alerts "
                "WHERE is_active = 1 AND notified = 0"
            )
            params: tuple = ()
            if owner is not None:
                query += " AND owner = ?"
                params = (owner,)
            cursor.execute(query + " ORDER BY id", params)
            return [self._row_to_alert(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def get_alert_by_id(self, alert_id: int) -> Optional[Alert]:
        """Get an alert by ID.

        Args:
            alert_id: Alert ID.

        Returns:
            Alert if found, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {_ALERT_COLUMNS} FROM alerts WHERE id = ?",
                (alert_id,),
            )
            row = cursor.fetchone()
            if row:
                return self._row_to_alert(row)
            return None
        finally:
            conn.close()

    def update_alert(self, alert_id: int, **fields: Any) -> bool:
        """Apply a partial update to an alert.

        Args:
            alert_id: Alert ID.
            **fields: Columns to change. Only ``UPDATABLE_ALERT_FIELDS``
                are accepted.

        Returns:
            True if a row was updated, False if the alert does not exist.

        Raises:
            ValueError: If an unknown field is passed or no field is given,
                or if the update violates a constraint such as a notified
                alert being active.
        """
        if not fields:
            raise ValueError("update_alert requires at least one field")
        unknown = set(fields) - self.UPDATABLE_ALERT_FIELDS
        if unknown:
            raise ValueError(f"Cannot update alert fields: {sorted(unknown)}")

        values: dict[str, Any] = {}
        for name, value in fields.items():
            values[name] = (1 if value else 0) if isinstance(value, bool) else value
        values["updated_at"] = datetime.now().isoformat()

        assignments = ", ".join(f"{name} = ?" for name in values)
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            try:
                cursor.execute(
                    f"UPDATE alerts SET {assignments} WHERE id = ?",
                    (*values.values(), alert_id),
                )
            except sqlite3.IntegrityError as e:
                # Covers the notified/active rule and the column CHECKs.
                raise ValueError(f"Invalid update for alert {alert_id}: {e}") from e
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def set_alert_active(self, alert_id: int, active: bool) -> bool:
        """Pause or resume an alert.

        A fired alert is terminal and cannot be resumed.

        Args:
            alert_id: Alert ID.
            active: New active flag.

        Returns:
            True if the alert was changed, False otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE alerts SET is_active = ?, updated_at = ? WHERE id = ? AND notified = 0",
                (1 if active else 0, datetime.now().isoformat(), alert_id),
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def delete_alert(self, alert_id: int) -> None:
        """Delete an alert.

        Args:
            alert_id: ID of the alert to delete.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM alerts WHERE id = ?", (alert_id,))
            conn.commit()
        finally:
            conn.close()

    # ==================== Rate Snapshots ====================

    def save_snapshot(self, snapshot: RateSnapshot) -> None:
        """Save a rate snapshot.

        Args:
            snapshot: Snapshot to cache.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO rate_snapshots (base_currency, rates, fetched_at)
                VALUES (?, ?, ?)
                """,
                (
                    snapshot.base_currency,
                    json.dumps(snapshot.rates),
                    snapshot.fetched_at.isoformat(),
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def get_latest_snapshot(self) -> Optional[RateSnapshot]:
        """Get the most recently saved rate snapshot.

        Returns:
            Snapshot if one has been saved, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT base_currency, rates, fetched_at
                FROM rate_snapshots
                ORDER BY id DESC
                LIMIT 1
                """
            )
            row = cursor.fetchone()
            if row:
                return RateSnapshot(
                    base_currency=row["base_currency"],
                    rates=json.loads(row["rates"]),
                    fetched_at=datetime.fromisoformat(row["fetched_at"]),
                )
            return None
        finally:
            conn.close()

    # ==================== Notifications ====================

    def log_notification(self, record: NotificationRecord) -> int:
        """Record a delivered notification in the inbox.

        Args:
            record: Notification to store.

        Returns:
            The ID of the stored record.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO notifications
                (owner, alert_id, channel, title, body, payload, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.owner,
                    record.alert_id,
                    record.channel,
                    record.title,
                    record.body,
                    json.dumps(record.payload),
                    record.created_at.isoformat(),
                ),
            )
            conn.commit()
            return cursor.lastrowid or 0
        finally:
            conn.close()

    def get_notifications(
        self, owner: Optional[str] = None, limit: int = 50
    ) -> list[NotificationRecord]:
        """Get inbox notifications, newest first.

        Args:
            owner: Optional owner filter.
            limit: Maximum number of records.

        Returns:
            List of notification records.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            if owner is not None:
                cursor.execute(
                    """
                    SELECT id, owner, alert_id, channel, title, body, payload, created_at
                    FROM notifications
                    WHERE owner = ?
                    ORDER BY id DESC
                    LIMIT ?
                    """,
                    (owner, limit),
                )
            else:
                cursor.execute(
                    """
                    SELECT id, owner, alert_id, channel, title, body, payload, created_at
                    FROM notifications
                    ORDER BY id DESC
                    LIMIT ?
                    """,
                    (limit,),
                )
            return [
                NotificationRecord(
                    id=row["id"],
                    owner=row["owner"],
                    alert_id=row["alert_id"],
                    channel=row["channel"],
                    title=row["title"],
                    body=row["body"],
                    payload=json.loads(row["payload"]),
                    created_at=datetime.fromisoformat(row["created_at"]),
                )
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()

    # ==================== Stats ====================

    def get_stats(self) -> dict:
        """Get database statistics.

        Returns:
            Dictionary with table record counts.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            stats = {}
            for table in self.REQUIRED_TABLES:
                cursor.execute(f"SELECT COUNT(*) as count FROM {table}")
                stats[table] = cursor.fetchone()["count"]
            return stats
        finally:
            conn.close()
