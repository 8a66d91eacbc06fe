import json
import logging
from typing import Any, Dict, List, Optional

from psycopg.rows import dict_row

from eduai.db import get_conn
from eduai.models.activity import Activity

logger = logging.getLogger(__name__)

# Schema for activity history
ACTIVITY_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    email VARCHAR(255) UNIQUE NOT NULL,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS activities (
    id SERIAL PRIMARY KEY,
    user_id INTEGER REFERENCES users(id),
    type VARCHAR(50) NOT NULL,
    title TEXT NOT NULL,
    input_text TEXT,
    result JSONB,
    status VARCHAR(20) NOT NULL,
    duration INTEGER,
    metadata JSONB,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_activities_user_id ON activities(user_id);

CREATE TABLE IF NOT EXISTS summaries (
    id SERIAL PRIMARY KEY,
    activity_id INTEGER REFERENCES activities(id),
    summary_text TEXT NOT NULL,
    key_points JSONB,
    word_count INTEGER,
    original_word_count INTEGER,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS quizzes (
    id SERIAL PRIMARY KEY,
    activity_id INTEGER REFERENCES activities(id),
    questions JSONB NOT NULL,
    difficulty VARCHAR(20),
    score INTEGER,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS mindmaps (
    id SERIAL PRIMARY KEY,
    activity_id INTEGER REFERENCES activities(id),
    nodes JSONB NOT NULL,
    connections JSONB,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS videos (
    id SERIAL PRIMARY KEY,
    activity_id INTEGER REFERENCES activities(id),
    video_url TEXT,
    transcript TEXT,
    duration INTEGER,
    style VARCHAR(50),
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS pictures (
    id SERIAL PRIMARY KEY,
    activity_id INTEGER REFERENCES activities(id),
    image_url TEXT NOT NULL,
    prompt TEXT,
    style VARCHAR(50),
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);
"""

LIST_ACTIVITIES_SQL = """
SELECT
    a.id, a.type, a.title, a.input_text, a.result, a.status, a.duration, a.metadata, a.created_at,
    CASE
        WHEN a.type = 'summary' THEN json_build_object(
            'summary', s.summary_text,
            'keyPoints', s.key_points,
            'wordCount', s.word_count,
            'originalWordCount', s.original_word_count
        )
        WHEN a.type = 'quiz' THEN json_build_object(
            'questions', q.questions,
            'difficulty', q.difficulty,
            'score', q.score
        )
        WHEN a.type = 'mindmap' THEN json_build_object(
            'nodes', m.nodes,
            'connections', m.connections
        )
        WHEN a.type = 'video' THEN json_build_object(
            'videoUrl', v.video_url,
            'transcript', v.transcript,
            'duration', v.duration,
            'style', v.style
        )
        WHEN a.type = 'picture' THEN json_build_object(
            'imageUrl', p.image_url,
            'prompt', p.prompt,
            'style', p.style
        )
    END AS type_specific_data
FROM activities a
JOIN users u ON a.user_id = u.id
LEFT JOIN summaries s ON a.id = s.activity_id
LEFT JOIN quizzes q ON a.id = q.activity_id
LEFT JOIN mindmaps m ON a.id = m.activity_id
LEFT JOIN videos v ON a.id = v.activity_id
LEFT JOIN pictures p ON a.id = p.activity_id
WHERE u.email = %s
ORDER BY a.created_at DESC;
"""


def _dumps(value: Any) -> Optional[str]:
    return None if value is None else json.dumps(value)


class ActivityRepository:
    """
    Append-only store for user activity history in Postgres.
    Connections come from eduai.db.get_conn(); each call uses its own connection.
    """

    def ensure_schema(self) -> None:
        """Ensures the history tables exist."""
        with get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute(ACTIVITY_SCHEMA_SQL)
            conn.commit()

    def create_activity(self, activity: Activity) -> int:
        """
        Inserts an activity (creating the user row if needed) and returns its id.
        Type-specific rows are written in the same transaction.
        """
        with get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO users (email) VALUES (%s)
                    ON CONFLICT (email) DO UPDATE SET email = EXCLUDED.email
                    RETURNING id;
                    """,
                    (activity.user_email,),
                )
                user_id = cur.fetchone()[0]

                cur.execute(
                    """
                    INSERT INTO activities (user_id, type, title, input_text, result, status, duration, metadata)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING id;
                    """,
                    (
                        user_id,
                        activity.type,
                        activity.title,
                        activity.input_text,
                        _dumps(activity.result),
                        activity.status,
                        activity.duration,
                        _dumps(activity.metadata),
                    ),
                )
                activity_id = cur.fetchone()[0]

                self._insert_type_specific(cur, activity_id, activity)
            conn.commit()

        logger.info("Recorded %s activity %s for %s", activity.type, activity_id, activity.user_email)
        return activity_id

    def _insert_type_specific(self, cur, activity_id: int, activity: Activity) -> None:
        result = activity.result if isinstance(activity.result, dict) else {}
        metadata = activity.metadata or {}

        if activity.type == "summary" and result.get("summary"):
            cur.execute(
                """
                INSERT INTO summaries (activity_id, summary_text, key_points, word_count, original_word_count)
                VALUES (%s, %s, %s, %s, %s);
                """,
                (
                    activity_id,
                    result["summary"],
                    _dumps(result.get("keyPoints")),
                    result.get("wordCount"),
                    result.get("originalWordCount"),
                ),
            )
        elif activity.type == "quiz" and result.get("questions"):
            cur.execute(
                "INSERT INTO quizzes (activity_id, questions, difficulty, score) VALUES (%s, %s, %s, %s);",
                (activity_id, _dumps(result["questions"]), metadata.get("difficulty"), metadata.get("score")),
            )
        elif activity.type == "mindmap" and result.get("nodes"):
            cur.execute(
                "INSERT INTO mindmaps (activity_id, nodes, connections) VALUES (%s, %s, %s);",
                (activity_id, _dumps(result["nodes"]), _dumps(result.get("connections"))),
            )
        elif activity.type == "video" and result.get("videoUrl"):
            cur.execute(
                """
                INSERT INTO videos (activity_id, video_url, transcript, duration, style)
                VALUES (%s, %s, %s, %s, %s);
                """,
                (activity_id, result["videoUrl"], result.get("transcript"), result.get("duration"), metadata.get("style")),
            )
        elif activity.type == "picture" and result.get("imageUrl"):
            cur.execute(
                "INSERT INTO pictures (activity_id, image_url, prompt, style) VALUES (%s, %s, %s, %s);",
                (activity_id, result["imageUrl"], result.get("prompt"), metadata.get("style")),
            )

    def list_activities_by_user(self, email: str) -> List[Dict[str, Any]]:
        """
        Returns a user's activities, newest first, with type-specific data merged into `result`.
        """
        with get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(LIST_ACTIVITIES_SQL, (email,))
                rows = cur.fetchall()

        return [self._map_row(row) for row in rows]

    @staticmethod
    def _map_row(row: Dict[str, Any]) -> Dict[str, Any]:
        result = row.get("result")
        extra = row.get("type_specific_data")
        if extra:
            result = {**(result if isinstance(result, dict) else {}), **extra}

        created_at = row.get("created_at")
        return {
            "id": row["id"],
            "type": row["type"],
            "title": row["title"],
            "inputText": row.get("input_text"),
            "result": result,
            "status": row["status"],
            "duration": row.get("duration"),
            "metadata": row.get("metadata"),
            "timestamp": created_at.isoformat() if created_at else None,
        }


def get_activity_repository() -> ActivityRepository:
    return ActivityRepository()
