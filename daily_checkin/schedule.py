"""Resolution of today's question and the past-question history."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timezone, tzinfo
from typing import Iterator, Optional

from .errors import InvalidInput
from .models import ScheduledQuestion

NANOS_PER_SECOND = 1_000_000_000


def calendar_day(instant: datetime, tz: tzinfo) -> date:
    """Return the calendar day of ``instant`` in the deployment timezone.

    Naive datetimes are taken to be UTC.
    """

    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(tz).date()


def parse_schedule_date(value: object, tz: tzinfo) -> date:
    """Normalise a boundary date value to a calendar day.

    Accepts a ``date``, an aware or naive ``datetime``, an ISO ``YYYY-MM-DD``
    string, or an epoch instant in nanoseconds (the unit clients send for
    scheduled dates).
    """

    if isinstance(value, datetime):
        return calendar_day(value, tz)
    if isinstance(value, date):
        return value
    if isinstance(value, bool):
        raise InvalidInput("scheduled date must be a date or an epoch instant")
    if isinstance(value, (int, float)):
        try:
            instant = datetime.fromtimestamp(value / NANOS_PER_SECOND, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise InvalidInput(f"scheduled date out of range: {value}") from exc
        return calendar_day(instant, tz)
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), "%Y-%m-%d").date()
        except ValueError as exc:
            raise InvalidInput("Invalid date format. Use YYYY-MM-DD") from exc
    raise InvalidInput("scheduled date is required")


def _recency_key(question: ScheduledQuestion) -> tuple[int, str]:
    return (-question.scheduled_date.toordinal(), question.id)


def resolve_today(today: date, questions: Iterable[ScheduledQuestion]) -> Optional[ScheduledQuestion]:
    """Pick the question active on ``today``.

    The latest scheduled date not after ``today`` wins; questions sharing that
    date are ordered by id and the smallest id is chosen.
    """

    candidates = [q for q in questions if q.scheduled_date <= today]
    if not candidates:
        return None
    return min(candidates, key=_recency_key)


class PastQuestions:
    """Questions whose day has gone by, most recent first.

    Evaluation is deferred to iteration and every ``iter()`` starts over, so
    callers can ``islice`` a window without consuming the history.
    """

    def __init__(
        self,
        questions: Iterable[ScheduledQuestion],
        today: date,
        exclude_id: Optional[str] = None,
    ) -> None:
        self._questions = tuple(questions)
        self._today = today
        self._exclude_id = exclude_id

    def __iter__(self) -> Iterator[ScheduledQuestion]:
        eligible = [
            q
            for q in self._questions
            if q.scheduled_date < self._today and q.id != self._exclude_id
        ]
        eligible.sort(key=_recency_key)
        return iter(eligible)


def resolve_past(
    questions: Iterable[ScheduledQuestion],
    exclude_id: Optional[str],
    today: date,
) -> PastQuestions:
    return PastQuestions(questions, today, exclude_id)


__all__ = [
    "calendar_day",
    "parse_schedule_date",
    "resolve_today",
    "resolve_past",
    "PastQuestions",
]
