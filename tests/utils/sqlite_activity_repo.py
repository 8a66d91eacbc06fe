import json
import sqlite3
from datetime import datetime
from typing import Any, Dict, List

from eduai.models.activity import Activity

# SQLite Schema (subset of the Postgres history schema)
SQLITE_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT UNIQUE NOT NULL
);

CREATE TABLE IF NOT EXISTS activities (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER REFERENCES users(id),
    type TEXT NOT NULL,
    title TEXT NOT NULL,
    input_text TEXT,
    result TEXT,
    status TEXT NOT NULL,
    duration INTEGER,
    metadata TEXT,
    created_at TEXT NOT NULL
);
"""


class SQLiteActivityRepository:
    """SQLite stand-in for ActivityRepository, for route tests without Postgres."""

    def __init__(self, db_path: str = ":memory:"):
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")

    def ensure_schema(self) -> None:
        self.conn.executescript(SQLITE_SCHEMA_SQL)
        self.conn.commit()

    def create_activity(self, activity: Activity) -> int:
        cur = self.conn.cursor()
        cur.execute("INSERT OR IGNORE INTO users (email) VALUES (?)", (activity.user_email,))
        cur.execute("SELECT id FROM users WHERE email = ?", (activity.user_email,))
        user_id = cur.fetchone()["id"]

        cur.execute(
            """
            INSERT INTO activities (user_id, type, title, input_text, result, status, duration, metadata, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                activity.type,
                activity.title,
                activity.input_text,
                json.dumps(activity.result),
                activity.status,
                activity.duration,
                json.dumps(activity.metadata),
                datetime.utcnow().isoformat(),
            ),
        )
        self.conn.commit()
        return cur.lastrowid

    def list_activities_by_user(self, email: str) -> List[Dict[str, Any]]:
        rows = self.conn.execute(
            """
            SELECT a.* FROM activities a JOIN users u ON a.user_id = u.id
            WHERE u.email = ?
            ORDER BY a.id DESC
            """,
            (email,),
        ).fetchall()
        return [
            {
                "id": row["id"],
                "type": row["type"],
                "title": row["title"],
                "inputText": row["input_text"],
                "result": json.loads(row["result"]) if row["result"] else None,
                "status": row["status"],
                "duration": row["duration"],
                "metadata": json.loads(row["metadata"]) if row["metadata"] else None,
                "timestamp": row["created_at"],
            }
            for row in rows
        ]
