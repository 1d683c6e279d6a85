"""SQLite persistence layer for Daily Check-In."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from .errors import StoreUnavailable
from .models import Answer, ScheduledQuestion

Connection = sqlite3.Connection
Row = sqlite3.Row


class Database:
    """Lightweight wrapper around SQLite operations.

    Backs both the question store and the answer store. Every public method
    opens its own connection so each call runs as one transaction.
    """

    def __init__(self, path: Path, timeout: float = 5.0) -> None:
        self._path = path
        self._timeout = timeout
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize()

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        try:
            conn = sqlite3.connect(self._path, timeout=self._timeout)
        except sqlite3.DatabaseError as exc:
            raise StoreUnavailable(f"cannot open database: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        except (sqlite3.IntegrityError, sqlite3.ProgrammingError):
            raise
        except sqlite3.DatabaseError as exc:
            # Locked, unreadable or corrupt files all surface as store outages.
            conn.rollback()
            raise StoreUnavailable(f"database unavailable: {exc}") from exc
        finally:
            conn.close()

    def _initialize(self) -> None:
        with self.connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS questions (
                    id TEXT PRIMARY KEY,
                    text TEXT NOT NULL,
                    author_id TEXT NOT NULL,
                    scheduled_date TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            cursor.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_questions_scheduled_date
                ON questions (scheduled_date, id)
                """
            )
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS answers (
                    question_id TEXT NOT NULL,
                    user_id TEXT NOT NULL,
                    text TEXT NOT NULL,
                    submitted_at TEXT NOT NULL,
                    PRIMARY KEY (question_id, user_id),
                    FOREIGN KEY(question_id) REFERENCES questions(id)
                )
                """
            )
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_answers_user ON answers (user_id)"
            )
            conn.commit()

    # region Questions
    def insert_question(self, record: Dict[str, Any]) -> None:
        with self.connect() as conn:
            conn.execute(
                """
                INSERT INTO questions (id, text, author_id, scheduled_date, created_at, updated_at)
                VALUES (:id, :text, :author_id, :scheduled_date, :created_at, :updated_at)
                """,
                record,
            )
            conn.commit()

    def update_question(self, record: Dict[str, Any]) -> bool:
        """Update text and date of an existing question; False if it is unknown."""

        with self.connect() as conn:
            cursor = conn.execute(
                """
                UPDATE questions
                SET text = :text,
                    scheduled_date = :scheduled_date,
                    updated_at = :updated_at
                WHERE id = :id
                """,
                record,
            )
            conn.commit()
            return cursor.rowcount == 1

    def get_question(self, question_id: str) -> Optional[Row]:
        with self.connect() as conn:
            cursor = conn.execute("SELECT * FROM questions WHERE id = ?", (question_id,))
            return cursor.fetchone()

    def get_questions(self) -> List[Row]:
        with self.connect() as conn:
            cursor = conn.execute("SELECT * FROM questions ORDER BY scheduled_date, id")
            return cursor.fetchall()

    def get_latest_questions_on_or_before(self, day: date) -> List[Row]:
        """Questions sharing the most recent scheduled date not after ``day``."""

        with self.connect() as conn:
            cursor = conn.execute(
                """
                SELECT * FROM questions
                WHERE scheduled_date = (
                    SELECT MAX(scheduled_date) FROM questions WHERE scheduled_date <= ?
                )
                ORDER BY id
                """,
                (day.isoformat(),),
            )
            return cursor.fetchall()

    def get_questions_on(self, day: date) -> List[Row]:
        with self.connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM questions WHERE scheduled_date = ? ORDER BY id",
                (day.isoformat(),),
            )
            return cursor.fetchall()

    def get_questions_before(self, day: date) -> List[Row]:
        with self.connect() as conn:
            cursor = conn.execute(
                """
                SELECT * FROM questions
                WHERE scheduled_date < ?
                ORDER BY scheduled_date DESC, id ASC
                """,
                (day.isoformat(),),
            )
            return cursor.fetchall()

    # endregion

    # region Answers
    def insert_answer(self, record: Dict[str, Any]) -> bool:
        """Insert an answer unless one exists for the pair; True if written."""

        with self.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO answers (question_id, user_id, text, submitted_at)
                VALUES (:question_id, :user_id, :text, :submitted_at)
                ON CONFLICT(question_id, user_id) DO NOTHING
                """,
                record,
            )
            conn.commit()
            return cursor.rowcount == 1

    def get_answers(self, question_id: str, user_ids: Iterable[str]) -> List[Row]:
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return []
        placeholders = ", ".join("?" for _ in ids)
        with self.connect() as conn:
            # One statement so the pair is read from a single snapshot.
            cursor = conn.execute(
                f"SELECT * FROM answers WHERE question_id = ? AND user_id IN ({placeholders})",
                (question_id, *ids),
            )
            return cursor.fetchall()

    def get_answers_for_user(self, user_id: str) -> List[Row]:
        with self.connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM answers WHERE user_id = ? ORDER BY submitted_at DESC",
                (user_id,),
            )
            return cursor.fetchall()

    # endregion


def question_from_row(row: Row) -> ScheduledQuestion:
    return ScheduledQuestion(
        id=row["id"],
        text=row["text"],
        author_id=row["author_id"],
        scheduled_date=date.fromisoformat(row["scheduled_date"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def answer_from_row(row: Row) -> Answer:
    return Answer(
        question_id=row["question_id"],
        user_id=row["user_id"],
        text=row["text"],
        submitted_at=datetime.fromisoformat(row["submitted_at"]),
    )


__all__ = ["Database", "question_from_row", "answer_from_row"]
