from contextlib import asynccontextmanager

from fastapi import FastAPI

from tempmail.api import health, ingest, mailboxes, messages, receive, reprocess, sent
from tempmail.core.config import get_settings
from tempmail.core.logging import configure_logging
from tempmail.db.session import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    if get_settings().AUTO_CREATE_SCHEMA:
        init_db()
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    app = FastAPI(title="Temp Mail", version="0.1.0", lifespan=lifespan)

    # Routers
    app.include_router(health.router, tags=["health"])
    app.include_router(mailboxes.router, prefix="/api", tags=["mailboxes"])
    app.include_router(messages.router, prefix="/api", tags=["messages"])
    app.include_router(sent.router, prefix="/api", tags=["sent"])
    app.include_router(receive.router, prefix="/receive", tags=["receive"])
    app.include_router(ingest.router, prefix="/ingest", tags=["ingest"])
    app.include_router(reprocess.router, prefix="/reprocess", tags=["reprocess"])

    return app


app = create_app()
