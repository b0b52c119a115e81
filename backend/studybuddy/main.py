# studybuddy/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from studybuddy.api import (
    routes_catalog,
    routes_discussions,
    routes_quiz,
    routes_resources,
    routes_schedule,
    routes_scholar,
)
from studybuddy.config import settings
from studybuddy.logging_config import configure_logging
from studybuddy.services.db import get_session, init_db

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="StudyBuddy API")


@app.on_event("startup")
def _startup():
    logger.info("[APP] startup: calling init_db() …")
    init_db()
    logger.info("[APP] startup: init_db() done.")


@app.on_event("shutdown")
def _shutdown():
    logger.info("[APP] shutdown")


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True, allow_methods=["*"], allow_headers=["*"],
)


def _ping():
    try:
        with get_session() as s:
            s.execute(text("SELECT 1"))
        return {"ok": True}
    except Exception as e:
        logger.error("[APP] db ping failed: %s", e)
        return {"ok": False, "error": str(e)}


@app.get("/health")
def health():
    return _ping()


@app.get("/db/health")
def db_health():
    return _ping()


app.include_router(routes_catalog.router, tags=["Catalog"])
app.include_router(routes_resources.router, prefix="/resources", tags=["Resources"])
app.include_router(routes_discussions.router, prefix="/discussions", tags=["Discussions"])
app.include_router(routes_schedule.router, prefix="/schedule", tags=["Schedule"])
app.include_router(routes_quiz.router, prefix="/quiz", tags=["Quiz"])
app.include_router(routes_scholar.router, prefix="/scholar", tags=["Scholar"])
logger.info("[APP] Routers mounted: /departments, /courses, /resources, /discussions, /schedule, /quiz, /scholar")
