import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from chatcore.api.routes.groups import router as groups_router
from chatcore.api.routes.messages import router as messages_router
from chatcore.core.config import settings
from chatcore.core.errors import ChatError
from chatcore.core.logging_config import configure_logging
from chatcore.db.init_db import init_db

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Fanout Chat", version="0.1.0")

app.include_router(groups_router)
app.include_router(messages_router)


@app.exception_handler(ChatError)
async def chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.detail},
    )


@app.on_event("startup")
def _startup() -> None:
    init_db()
    logger.info("%s started (%s)", settings.app_name, settings.app_env)


@app.get("/health")
def health():
    return {"status": "ok"}
