"""
Shared fixtures: an in-memory SQLite database and a TestClient with the
quiz generator swapped for a canned one.
"""
import json
import os

# must be set before studybuddy.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from studybuddy.main import app
from studybuddy.services.db import Base, engine, init_db
from studybuddy.services.qgen_service import QuizGenerator, get_quiz_generator
from studybuddy.services.quiz_store import store

CANNED_QUESTIONS = [
    {
        "question": "Which data structure gives O(1) average lookup by key?",
        "options": ["Linked list", "Hash table", "Binary heap", "Stack"],
        "correctAnswer": 0,
        "explanation": "Listed first on purpose for easy scoring in tests.",
    },
    {
        "question": "What does SQL stand for?",
        "options": ["Simple Query List", "Structured Query Language", "Sequential Query Logic", "Set Query Layer"],
        "correctAnswer": 1,
        "explanation": "SQL is the Structured Query Language.",
    },
    {
        "question": "Which layer does TCP belong to?",
        "options": ["Physical", "Network", "Transport", "Application"],
        "correctAnswer": 2,
    },
]


def canned_output(questions=None) -> str:
    return "```json\n" + json.dumps(CANNED_QUESTIONS if questions is None else questions) + "\n```"


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    init_db()
    yield
    store.clear()


@pytest.fixture
def prompts():
    return []


@pytest.fixture
def client(prompts):
    def _fake_model(prompt: str) -> str:
        prompts.append(prompt)
        return canned_output()

    app.dependency_overrides[get_quiz_generator] = lambda: QuizGenerator(text_generator=_fake_model)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def course(client):
    dept = client.post("/departments", json={"name": "Computer Science", "code": "CS"}).json()
    return client.post("/courses", json={
        "departmentId": dept["id"],
        "name": "Data Structures",
        "code": "CS201",
        "semester": 3,
    }).json()
