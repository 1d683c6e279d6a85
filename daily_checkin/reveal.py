"""Visibility rules for a two-person answer exchange."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

from .models import Answer, RevealView

AnswerLookup = Callable[[str, Sequence[str]], Mapping[str, Answer]]


def compute_view(
    question_id: str,
    requesting_user_id: str,
    other_user_id: str,
    lookup: AnswerLookup,
) -> RevealView:
    """Return what ``requesting_user_id`` may see for ``question_id``.

    The partner's answer is included only when both participants have
    answered. A participant who has not answered learns nothing, not even
    whether the partner has. ``lookup`` must read both answers in one call so
    the decision is made against a single snapshot.
    """

    if requesting_user_id == other_user_id:
        # A lone participant never sees their own answer twice.
        answers = lookup(question_id, (requesting_user_id,))
        return RevealView(question_id=question_id, self_answer=answers.get(requesting_user_id))

    answers = lookup(question_id, (requesting_user_id, other_user_id))
    self_answer = answers.get(requesting_user_id)
    if self_answer is None:
        return RevealView(question_id=question_id)

    return RevealView(
        question_id=question_id,
        self_answer=self_answer,
        partner_answer=answers.get(other_user_id),
    )


__all__ = ["AnswerLookup", "compute_view"]
