# studybuddy/config.py
import os
from pathlib import Path
from dotenv import load_dotenv

ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(dotenv_path=ENV_PATH)


def _csv(value: str):
    return [v.strip() for v in value.split(",") if v.strip()]


class Settings:
    # DATABASE_URL wins over the DB_* parts when set (e.g. sqlite:// for tests)
    DATABASE_URL = os.getenv("DATABASE_URL", "")
    DB_HOST = os.getenv("DB_HOST", "127.0.0.1")
    DB_PORT = int(os.getenv("DB_PORT", "5432"))
    DB_NAME = os.getenv("DB_NAME", "studybuddy")
    DB_USER = os.getenv("DB_USER", "studybuddy")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "studybuddy_pwd")
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    CORS_ORIGINS = _csv(os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000"))

    # Literature search (SerpAPI, Google Scholar engine)
    SERP_API_KEY = os.getenv("SERP_API_KEY", "")
    SERPAPI_URL = os.getenv("SERPAPI_URL", "https://serpapi.com/search.json")
    SCHOLAR_TIMEOUT = float(os.getenv("SCHOLAR_TIMEOUT", "15"))

    # Quiz generation
    QGEN_MODEL_ID = os.getenv("QGEN_MODEL_ID", "Qwen/Qwen2.5-1.5B-Instruct")
    QGEN_MAX_NEW_TOKENS = int(os.getenv("QGEN_MAX_NEW_TOKENS", "1500"))
    QUIZ_MAX_QUESTIONS = int(os.getenv("QUIZ_MAX_QUESTIONS", "20"))
    # idle quiz sessions are dropped after this many seconds (0 keeps them forever)
    QUIZ_SESSION_TTL = float(os.getenv("QUIZ_SESSION_TTL", "3600"))


settings = Settings()
