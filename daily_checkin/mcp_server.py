"""MCP server exposing Daily Check-In tools."""

from __future__ import annotations

import logging
import os
from typing import Optional

from mcp.server.fastmcp import FastMCP

from .config import load_settings
from .db import Database
from .roster import Roster
from .service import CheckInService


def create_mcp_server(service: CheckInService) -> FastMCP:
    mcp = FastMCP("daily-checkin")

    @mcp.tool()
    async def get_todays_question() -> dict:
        """Return the question active today, if one has been scheduled."""

        question = service.get_todays_question()
        return {
            "date": service.today().isoformat(),
            "question": question.to_dict() if question else None,
        }

    @mcp.tool()
    async def get_past_questions(limit: Optional[int] = None) -> dict:
        """Return ids of earlier questions, most recent first."""

        return {"question_ids": service.get_past_question_ids(limit=limit)}

    @mcp.tool()
    async def get_answers_for_question(question_id: str, user_id: str) -> dict:
        """Return the answers ``user_id`` is allowed to see for a question."""

        view = service.get_answers_for_question(question_id, user_id)
        return {"answers": view.to_dict() if view else None}

    @mcp.tool()
    async def submit_answer(question_id: str, user_id: str, text: str) -> dict:
        """Submit ``user_id``'s one answer to a question."""

        view = service.submit_answer(question_id, user_id, text)
        return {"answers": view.to_dict()}

    return mcp


def run() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        handlers=[logging.StreamHandler()],
    )
    settings = load_settings(os.getenv("DAILY_CHECKIN_ENV"))
    database = Database(settings.database_path)
    roster = Roster.from_csv(settings.participants_path, secret=settings.capability_secret)
    create_mcp_server(CheckInService(settings, database, roster)).run()


if __name__ == "__main__":  # pragma: no cover
    run()


__all__ = ["create_mcp_server", "run"]
