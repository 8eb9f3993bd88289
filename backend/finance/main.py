"""FastAPI application entrypoint and HTTP controllers.

The HTTP surface is a placeholder while the domain API is designed.
Startup opens the database (running pending migrations); a failure there
aborts startup.

Endpoints implemented:
- GET /
- GET /health
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
import logging
import os
import time
import uuid
from .config import get_settings
from .database import Database, open_database
from .errors import DatabaseError
from .schemas import HealthOut, MessageOut

logger = logging.getLogger("finance.api")
if not logger.handlers:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    db = open_database(settings.database_config())
    app.state.db = db
    try:
        yield
    finally:
        db.close()


app = FastAPI(title="Personal Finance API", lifespan=lifespan)

# Wide-open CORS keeps local frontends working without extra config in dev.
if get_settings().ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    started = time.perf_counter()
    response = await call_next(request)
    response.headers["X-Request-ID"] = req_id
    logger.info(
        "%s %s -> %d in %.1fms (request_id=%s)",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000.0,
        req_id,
    )
    return response


def get_db(request: Request) -> Database:
    """FastAPI dependency returning the application's `Database` handle."""
    return request.app.state.db


@app.get("/", response_model=MessageOut)
def home():
    return {"message": "Hello, World!"}


@app.get("/health", response_model=HealthOut)
def health(db: Database = Depends(get_db)):
    """Liveness probe plus the applied-migration count.

    Returns 503 when the database does not respond.
    """
    try:
        db.health()
        version = db.version()
    except DatabaseError as exc:
        logger.error("health check failed: %s", exc)
        raise HTTPException(status_code=503, detail=str(exc))
    return {"status": "ok", "schema_version": version}
