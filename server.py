# Deploy on Replit: Set secrets and run 'uvicorn server:app --host=0.0.0.0 --port=8000'
import logging
import os

from daily_checkin.api import create_app
from daily_checkin.config import load_settings

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper(), handlers=[logging.StreamHandler()])
logger = logging.getLogger("daily_checkin")

settings = load_settings()
logger.info(
    "Serving check-ins from %s in timezone %s", settings.database_path, settings.timezone.key
)

app = create_app(settings)


__all__ = ["app"]
