"""FastAPI application exposing the Daily Check-In REST API."""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .config import Settings, load_settings
from .db import Database
from .errors import CheckInError, DuplicateSubmission, InvalidInput, QuestionNotFound, Unauthorized
from .models import Participant, ScheduledQuestion
from .roster import AdminCapability, Roster
from .service import CheckInService

ERROR_STATUS = {
    InvalidInput: status.HTTP_400_BAD_REQUEST,
    Unauthorized: status.HTTP_403_FORBIDDEN,
    QuestionNotFound: status.HTTP_404_NOT_FOUND,
    DuplicateSubmission: status.HTTP_409_CONFLICT,
}


class AnswerSubmission(BaseModel):
    text: str


class QuestionPayload(BaseModel):
    text: str
    date: Union[int, str]  # epoch nanoseconds or YYYY-MM-DD


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[CheckInService] = None,
) -> FastAPI:
    settings = settings or load_settings()
    if service is None:
        database = Database(settings.database_path)
        roster = Roster.from_csv(settings.participants_path, secret=settings.capability_secret)
        service = CheckInService(settings, database, roster)

    async def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")) -> None:
        if x_api_key != settings.api_key:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid api key")

    def current_participant(x_user_id: str = Header(..., alias="X-User-Id")) -> Participant:
        return service.roster.require_participant(x_user_id)

    def admin_capability(
        participant: Participant = Depends(current_participant),
    ) -> AdminCapability:
        return service.admin_capability(participant.user_id)

    def get_service() -> CheckInService:
        return service

    app = FastAPI(title="Daily Check-In API", version="1.0.0")

    @app.exception_handler(CheckInError)
    async def checkin_error_handler(request: Request, exc: CheckInError) -> JSONResponse:
        headers = None
        status_code = status.HTTP_400_BAD_REQUEST
        for error_type, error_status in ERROR_STATUS.items():
            if isinstance(exc, error_type):
                status_code = error_status
                break
        if exc.retryable:
            status_code = status.HTTP_503_SERVICE_UNAVAILABLE
            headers = {"Retry-After": str(settings.poll_interval_seconds)}
        return JSONResponse(
            status_code=status_code,
            content={"error": {"code": exc.code, "message": exc.message}},
            headers=headers,
        )

    @app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/me", dependencies=[Depends(verify_api_key)])
    async def get_me(
        participant: Participant = Depends(current_participant),
        svc: CheckInService = Depends(get_service),
    ) -> Dict[str, Any]:
        partner = svc.roster.partner_of(participant.user_id)
        return {
            "user_id": participant.user_id,
            "display_name": participant.display_name,
            "role": participant.role.value,
            "is_admin": participant.is_admin,
            "partner": {"user_id": partner.user_id, "display_name": partner.display_name},
            "poll_interval_seconds": settings.poll_interval_seconds,
        }

    @app.get("/api/questions/today", dependencies=[Depends(verify_api_key)])
    async def get_todays_question(
        _: Participant = Depends(current_participant),
        svc: CheckInService = Depends(get_service),
    ) -> Dict[str, Any]:
        question = svc.get_todays_question()
        return {"date": svc.today().isoformat(), "question": _question_payload(question)}

    @app.get("/api/questions/past", dependencies=[Depends(verify_api_key)])
    async def get_past_questions(
        limit: Optional[int] = Query(None, ge=1, le=365),
        _: Participant = Depends(current_participant),
        svc: CheckInService = Depends(get_service),
    ) -> Dict[str, Any]:
        return {"question_ids": svc.get_past_question_ids(limit=limit)}

    @app.get("/api/questions/{question_id}", dependencies=[Depends(verify_api_key)])
    async def get_question(
        question_id: str,
        _: Participant = Depends(current_participant),
        svc: CheckInService = Depends(get_service),
    ) -> Dict[str, Any]:
        question = svc.get_question(question_id)
        if question is None:
            raise QuestionNotFound(question_id)
        return {"question": _question_payload(question)}

    @app.get("/api/questions/{question_id}/answers", dependencies=[Depends(verify_api_key)])
    async def get_answers(
        question_id: str,
        participant: Participant = Depends(current_participant),
        svc: CheckInService = Depends(get_service),
    ) -> Dict[str, Any]:
        view = svc.get_answers_for_question(question_id, participant.user_id)
        return {"answers": view.to_dict() if view else None}

    @app.get("/api/questions/{question_id}/submitted", dependencies=[Depends(verify_api_key)])
    async def has_submitted(
        question_id: str,
        participant: Participant = Depends(current_participant),
        svc: CheckInService = Depends(get_service),
    ) -> Dict[str, Any]:
        return {"submitted": svc.has_submitted_answer(question_id, participant.user_id)}

    @app.post(
        "/api/questions/{question_id}/answers",
        status_code=status.HTTP_201_CREATED,
        dependencies=[Depends(verify_api_key)],
    )
    async def submit_answer(
        question_id: str,
        body: AnswerSubmission,
        participant: Participant = Depends(current_participant),
        svc: CheckInService = Depends(get_service),
    ) -> Dict[str, Any]:
        view = svc.submit_answer(question_id, participant.user_id, body.text)
        return {"answers": view.to_dict()}

    @app.get("/api/answered-days", dependencies=[Depends(verify_api_key)])
    async def get_answered_days(
        participant: Participant = Depends(current_participant),
        svc: CheckInService = Depends(get_service),
    ) -> Dict[str, Any]:
        days = svc.get_answered_days(participant.user_id)
        return {"days": [day.isoformat() for day in days]}

    # region Admin
    @app.get("/api/admin/questions", dependencies=[Depends(verify_api_key)])
    async def list_scheduled_questions(
        _: AdminCapability = Depends(admin_capability),
        svc: CheckInService = Depends(get_service),
    ) -> Dict[str, Any]:
        grouped = svc.list_scheduled_questions()
        return {key: [q.to_dict() for q in questions] for key, questions in grouped.items()}

    @app.post(
        "/api/admin/questions",
        status_code=status.HTTP_201_CREATED,
        dependencies=[Depends(verify_api_key)],
    )
    async def create_scheduled_question(
        body: QuestionPayload,
        capability: AdminCapability = Depends(admin_capability),
        svc: CheckInService = Depends(get_service),
    ) -> Dict[str, Any]:
        question_id = svc.create_scheduled_question(
            body.text, body.date, capability.user_id, capability
        )
        return {"id": question_id}

    @app.put("/api/admin/questions/{question_id}", dependencies=[Depends(verify_api_key)])
    async def update_scheduled_question(
        question_id: str,
        body: QuestionPayload,
        capability: AdminCapability = Depends(admin_capability),
        svc: CheckInService = Depends(get_service),
    ) -> Dict[str, Any]:
        question = svc.update_scheduled_question(
            question_id, body.text, body.date, capability.user_id, capability
        )
        return {"question": _question_payload(question)}

    # endregion

    return app


def _question_payload(question: Optional[ScheduledQuestion]) -> Optional[Dict[str, Any]]:
    return question.to_dict() if question else None


__all__ = ["create_app"]
