"""Dataclasses representing Daily Check-In domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"
    GUEST = "guest"


class RevealState(str, Enum):
    """What the requesting participant is allowed to see for a question."""

    WITHHELD = "withheld"
    WAITING = "waiting"
    REVEALED = "revealed"


@dataclass(slots=True, frozen=True)
class Participant:
    user_id: str
    display_name: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


@dataclass(slots=True, frozen=True)
class ScheduledQuestion:
    id: str
    text: str
    author_id: str
    scheduled_date: date
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "author_id": self.author_id,
            "scheduled_date": self.scheduled_date.isoformat(),
        }


@dataclass(slots=True, frozen=True)
class Answer:
    question_id: str
    user_id: str
    text: str
    submitted_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_id": self.question_id,
            "user_id": self.user_id,
            "text": self.text,
            "submitted_at": self.submitted_at.isoformat(),
        }


@dataclass(slots=True, frozen=True)
class RevealView:
    """Answers visible to one participant for one question.

    ``partner_answer`` is only ever set when ``self_answer`` is set too.
    """

    question_id: str
    self_answer: Optional[Answer] = None
    partner_answer: Optional[Answer] = None

    @property
    def state(self) -> RevealState:
        if self.self_answer is None:
            return RevealState.WITHHELD
        if self.partner_answer is None:
            return RevealState.WAITING
        return RevealState.REVEALED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_id": self.question_id,
            "state": self.state.value,
            "self_answer": self.self_answer.to_dict() if self.self_answer else None,
            "partner_answer": self.partner_answer.to_dict() if self.partner_answer else None,
        }


__all__ = ["Role", "RevealState", "Participant", "ScheduledQuestion", "Answer", "RevealView"]
