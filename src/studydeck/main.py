import logging

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from studydeck.api import collections_router, documents_router, exports_router, status_router
from studydeck.config import get_settings
from studydeck.logging_config import configure_logging
from studydeck.telemetry import emit_app_startup_event

configure_logging(get_settings().log_dir, get_settings().log_level)

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="StudyDeck API")
app.include_router(collections_router)
app.include_router(documents_router)
app.include_router(exports_router)
app.include_router(status_router)


@app.on_event("startup")
async def _startup() -> None:
    emit_app_startup_event()
    if not get_settings().openai_api_key:
        LOGGER.warning("OPENAI_API_KEY is not set; generation endpoints will return 503")


@app.get("/", response_class=PlainTextResponse)
def read_root() -> str:
    """Healthcheck endpoint for the service."""
    return "ok"
