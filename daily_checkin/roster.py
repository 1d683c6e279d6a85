"""Two-person roster and admin capabilities."""

from __future__ import annotations

import csv
import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .errors import Unauthorized
from .models import Participant, Role

logger = logging.getLogger("daily_checkin.roster")


@dataclass(slots=True, frozen=True)
class AdminCapability:
    """Proof, issued by a :class:`Roster`, that ``user_id`` may edit the schedule."""

    user_id: str
    signature: str


class Roster:
    """The two participants of a check-in exchange, keyed by user id."""

    def __init__(self, members: Iterable[Participant], secret: Optional[str] = None) -> None:
        self._members: Dict[str, Participant] = {}
        for member in members:
            if member.user_id in self._members:
                raise ValueError(f"duplicate roster entry: {member.user_id}")
            self._members[member.user_id] = member

        participants = [m for m in self._members.values() if m.role is not Role.GUEST]
        if len(participants) != 2:
            raise ValueError(
                f"roster must list exactly two participants, found {len(participants)}"
            )
        self._participants = participants
        self._secret = (secret or secrets.token_hex(32)).encode("utf-8")

    @classmethod
    def from_csv(cls, path: Path, secret: Optional[str] = None) -> "Roster":
        if not path.exists():
            raise RuntimeError(f"participants file not found: {path}")
        return cls(load_roster_csv(path), secret=secret)

    @property
    def participants(self) -> List[Participant]:
        return list(self._participants)

    def get(self, user_id: str) -> Optional[Participant]:
        return self._members.get(user_id)

    def require_participant(self, user_id: str) -> Participant:
        member = self._members.get(user_id)
        if member is None or member.role is Role.GUEST:
            raise Unauthorized("only check-in participants can perform this action")
        return member

    def partner_of(self, user_id: str) -> Participant:
        member = self.require_participant(user_id)
        first, second = self._participants
        return second if member.user_id == first.user_id else first

    # region Capabilities
    def admin_capability(self, user_id: str) -> AdminCapability:
        member = self._members.get(user_id)
        if member is None or not member.is_admin:
            logger.warning("Admin capability refused for %s", user_id)
            raise Unauthorized("only admins can schedule questions")
        return AdminCapability(user_id=user_id, signature=self._sign(user_id))

    def verify(self, capability: object) -> bool:
        if not isinstance(capability, AdminCapability):
            return False
        member = self._members.get(capability.user_id)
        if member is None or not member.is_admin:
            return False
        return hmac.compare_digest(capability.signature, self._sign(capability.user_id))

    def _sign(self, user_id: str) -> str:
        return hmac.new(self._secret, user_id.encode("utf-8"), hashlib.sha256).hexdigest()

    # endregion


def load_roster_csv(path: Path) -> Iterable[Participant]:
    with path.open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        for row in reader:
            user_id = (row.get("user_id") or "").strip()
            if not user_id:
                continue
            role_name = (row.get("role") or Role.USER.value).strip().lower()
            try:
                role = Role(role_name)
            except ValueError as exc:
                raise ValueError(f"unknown role {role_name!r} for {user_id}") from exc
            yield Participant(
                user_id=user_id,
                display_name=(row.get("display_name") or "").strip() or user_id,
                role=role,
            )


__all__ = ["AdminCapability", "Roster", "load_roster_csv"]
