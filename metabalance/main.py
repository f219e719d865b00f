import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from metabalance.auth_router import router as auth_router
from metabalance.config import settings
from metabalance.db import Database, DatabaseUnavailable
from metabalance.tracking.coach_router import router as coach_router
from metabalance.tracking.logs_router import router as logs_router
from metabalance.tracking.router import router as tracking_router

logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database
    if settings.auto_create_tables:
        await database.create_all()
        logger.info("Database tables ensured")
    yield
    await database.dispose()


app = FastAPI(title="MetaBalance", version="0.1.0", lifespan=lifespan)
app.state.database = Database(settings.database_url)
app.include_router(auth_router)
app.include_router(tracking_router)
app.include_router(logs_router)
app.include_router(coach_router)


@app.exception_handler(DatabaseUnavailable)
async def database_unavailable(request: Request, exc: DatabaseUnavailable) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": "Database not available"})


@app.exception_handler(OperationalError)
async def database_error(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error("Database error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Database not available"})


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "api": {
            "auth": "/auth/register, /auth/login, /auth/me",
            "profile": "/profile, /profile/nutrition-goals",
            "meals": "/meals, /meals/totals, /meals/range",
            "food": "/food/search, /food/{id}/nutrition",
            "fasting": "/fasting/active, /fasting/schedules, /fasting/logs",
            "supplements": "/supplements, /supplements/logs",
            "progress": "/progress, /progress/latest, /progress/export",
            "water": "/water, /water/today, /water/range",
            "goals": "/goals/daily, /goals/daily/toggle, /goals/week, /goals/summary",
            "achievements": "/achievements, /achievements/unviewed, /achievements/check",
            "coach": "/insights/today, /chat, /chat/history, /reflections",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
