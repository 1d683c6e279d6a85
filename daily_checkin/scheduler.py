"""Admin-side scheduling of daily questions."""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone, tzinfo
from typing import Dict, List

from .db import Database, question_from_row
from .errors import InvalidInput, QuestionNotFound, Unauthorized
from .models import ScheduledQuestion
from .roster import AdminCapability, Roster
from .schedule import parse_schedule_date

logger = logging.getLogger("daily_checkin.scheduler")


class AdminScheduler:
    """Creates and edits scheduled questions on behalf of an admin."""

    def __init__(self, database: Database, roster: Roster, tz: tzinfo = timezone.utc) -> None:
        self.database = database
        self.roster = roster
        self.timezone = tz

    def create_question(
        self,
        text: str,
        scheduled_date: object,
        author_id: str,
        capability: AdminCapability,
        now: datetime | None = None,
    ) -> str:
        self._authorize(capability, author_id)
        day = parse_schedule_date(scheduled_date, self.timezone)
        cleaned = _require_text(text)

        now = now or datetime.now(timezone.utc)
        question_id = uuid.uuid4().hex
        clashes = self.database.get_questions_on(day)
        if clashes:
            logger.warning(
                "Question %s shares %s with %d other question(s)",
                question_id,
                day.isoformat(),
                len(clashes),
            )
        self.database.insert_question(
            {
                "id": question_id,
                "text": cleaned,
                "author_id": author_id,
                "scheduled_date": day.isoformat(),
                "created_at": now.isoformat(),
                "updated_at": now.isoformat(),
            }
        )
        logger.info("Scheduled question %s for %s", question_id, day.isoformat())
        return question_id

    def update_question(
        self,
        question_id: str,
        text: str,
        scheduled_date: object,
        author_id: str,
        capability: AdminCapability,
        now: datetime | None = None,
    ) -> ScheduledQuestion:
        self._authorize(capability, author_id)
        day = parse_schedule_date(scheduled_date, self.timezone)
        cleaned = _require_text(text)

        row = self.database.get_question(question_id)
        if row is None:
            raise QuestionNotFound(question_id)
        existing = question_from_row(row)
        if existing.author_id != author_id:
            logger.warning("%s tried to edit question %s owned by %s", author_id, question_id, existing.author_id)
            raise Unauthorized("only the author can change a scheduled question")

        now = now or datetime.now(timezone.utc)
        updated = self.database.update_question(
            {
                "id": question_id,
                "text": cleaned,
                "scheduled_date": day.isoformat(),
                "updated_at": now.isoformat(),
            }
        )
        if not updated:
            raise QuestionNotFound(question_id)
        logger.info("Updated question %s (now %s)", question_id, day.isoformat())
        refreshed = self.database.get_question(question_id)
        if refreshed is None:
            raise QuestionNotFound(question_id)
        return question_from_row(refreshed)

    def list_questions(self, today: date) -> Dict[str, List[ScheduledQuestion]]:
        """All scheduled questions, split around ``today`` and sorted by date."""

        questions = [question_from_row(row) for row in self.database.get_questions()]
        return {
            "upcoming": [q for q in questions if q.scheduled_date >= today],
            "past": [q for q in questions if q.scheduled_date < today],
        }

    def _authorize(self, capability: AdminCapability, author_id: str) -> None:
        if not self.roster.verify(capability) or capability.user_id != author_id:
            raise Unauthorized("a valid admin capability for the author is required")


def _require_text(text: str) -> str:
    if not isinstance(text, str) or not text.strip():
        raise InvalidInput("question text must not be empty")
    return text.strip()


__all__ = ["AdminScheduler"]
