"""Core orchestration logic for Daily Check-In."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import date, datetime, timezone
from itertools import islice
from typing import Dict, List, Optional

from .config import Settings
from .db import Database, answer_from_row, question_from_row
from .errors import DuplicateSubmission, InvalidInput, QuestionNotFound
from .models import Answer, RevealView, ScheduledQuestion
from .reveal import compute_view
from .roster import AdminCapability, Roster
from .schedule import calendar_day, resolve_past, resolve_today
from .scheduler import AdminScheduler

logger = logging.getLogger("daily_checkin.service")

Clock = Callable[[], datetime]


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


class CheckInService:
    """High-level service behind the REST and MCP surfaces.

    Owns the only write path for answers. Reads go through the schedule
    resolver and the reveal gate.
    """

    def __init__(
        self,
        settings: Settings,
        database: Database,
        roster: Roster,
        clock: Clock = now_utc,
    ) -> None:
        self.settings = settings
        self.database = database
        self.roster = roster
        self.clock = clock
        self.scheduler = AdminScheduler(database, roster, settings.timezone)

    def today(self, now: Optional[datetime] = None) -> date:
        return calendar_day(now or self.clock(), self.settings.timezone)

    # region Schedule
    def get_todays_question(self, now: Optional[datetime] = None) -> Optional[ScheduledQuestion]:
        today = self.today(now)
        candidates = [
            question_from_row(row)
            for row in self.database.get_latest_questions_on_or_before(today)
        ]
        return resolve_today(today, candidates)

    def get_past_questions(
        self, now: Optional[datetime] = None, limit: Optional[int] = None
    ) -> List[ScheduledQuestion]:
        now = now or self.clock()
        today = self.today(now)
        active = self.get_todays_question(now)
        history = resolve_past(
            (question_from_row(row) for row in self.database.get_questions_before(today)),
            active.id if active else None,
            today,
        )
        window = self.settings.past_questions_limit if limit is None else limit
        return list(islice(history, window))

    def get_past_question_ids(
        self, now: Optional[datetime] = None, limit: Optional[int] = None
    ) -> List[str]:
        return [question.id for question in self.get_past_questions(now, limit)]

    def get_question(self, question_id: str) -> Optional[ScheduledQuestion]:
        row = self.database.get_question(question_id)
        return question_from_row(row) if row else None

    # endregion

    # region Answers
    def get_answers_for_question(self, question_id: str, user_id: str) -> Optional[RevealView]:
        partner = self.roster.partner_of(user_id)
        if self.database.get_question(question_id) is None:
            return None
        return compute_view(question_id, user_id, partner.user_id, self._answer_lookup)

    def submit_answer(
        self,
        question_id: str,
        user_id: str,
        text: str,
        now: Optional[datetime] = None,
    ) -> RevealView:
        partner = self.roster.partner_of(user_id)
        if not isinstance(text, str) or not text.strip():
            raise InvalidInput("answer text must not be empty")
        if self.database.get_question(question_id) is None:
            raise QuestionNotFound(question_id)

        submitted_at = now or self.clock()
        written = self.database.insert_answer(
            {
                "question_id": question_id,
                "user_id": user_id,
                "text": text.strip(),
                "submitted_at": submitted_at.isoformat(),
            }
        )
        if not written:
            logger.info("Rejected repeat answer from %s for question %s", user_id, question_id)
            raise DuplicateSubmission(question_id, user_id)

        view = compute_view(question_id, user_id, partner.user_id, self._answer_lookup)
        logger.info(
            "Answer recorded for question %s by %s (%s)", question_id, user_id, view.state.value
        )
        return view

    def has_submitted_answer(self, question_id: str, user_id: str) -> bool:
        self.roster.require_participant(user_id)
        return bool(self.database.get_answers(question_id, [user_id]))

    def get_answered_days(self, user_id: str) -> List[date]:
        """Calendar days on which ``user_id`` answered, most recent first."""

        self.roster.require_participant(user_id)
        days: Dict[date, None] = {}
        for row in self.database.get_answers_for_user(user_id):
            answer = answer_from_row(row)
            days.setdefault(calendar_day(answer.submitted_at, self.settings.timezone), None)
        return sorted(days, reverse=True)

    def _answer_lookup(self, question_id: str, user_ids: Sequence[str]) -> Mapping[str, Answer]:
        rows = self.database.get_answers(question_id, user_ids)
        return {row["user_id"]: answer_from_row(row) for row in rows}

    # endregion

    # region Admin
    def admin_capability(self, user_id: str) -> AdminCapability:
        return self.roster.admin_capability(user_id)

    def create_scheduled_question(
        self,
        text: str,
        scheduled_date: object,
        author_id: str,
        capability: AdminCapability,
    ) -> str:
        return self.scheduler.create_question(
            text, scheduled_date, author_id, capability, now=self.clock()
        )

    def update_scheduled_question(
        self,
        question_id: str,
        text: str,
        scheduled_date: object,
        author_id: str,
        capability: AdminCapability,
    ) -> ScheduledQuestion:
        return self.scheduler.update_question(
            question_id, text, scheduled_date, author_id, capability, now=self.clock()
        )

    def list_scheduled_questions(
        self, now: Optional[datetime] = None
    ) -> Dict[str, List[ScheduledQuestion]]:
        return self.scheduler.list_questions(self.today(now))

    # endregion


__all__ = ["CheckInService", "now_utc"]
