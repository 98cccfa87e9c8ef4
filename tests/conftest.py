"""
Shared fixtures.

The environment is prepared before anything from ``duell`` is imported:
constants are read at import time, so storage, database and admin password
must be in place first.
"""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="duell-tests-")
os.environ["DUELL_STORAGE_PATH"] = _TMP_DIR
os.environ["DUELL_DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test.db"
os.environ["DUELL_ADMIN_USERNAME"] = "admin"
os.environ["DUELL_ADMIN_PASSWORD"] = "test-password-123"
os.environ["DUELL_SECRET_KEY"] = "test-secret-key"
os.environ["DUELL_SEED_QUESTIONS"] = "0"

import pytest
from fastapi.testclient import TestClient

from duell.core import crud, models
from duell.core.database import engine, SessionLocal
from duell.core.models import Category, QuestionStatus
from duell.core.rate_limit import login_guard

ADMIN_PASSWORD = os.environ["DUELL_ADMIN_PASSWORD"]


@pytest.fixture
def db():
    """Fresh schema for every test."""
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)
    login_guard.store.clear()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    from duell.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_headers(client):
    response = client.post("/api/auth/login", json={"username": "admin", "password": ADMIN_PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def make_question(db):
    counter = {"n": 0}

    def _make(status=QuestionStatus.APPROVED, rating_sum=0, rating_count=0, text=None,
              category=Category.SCIENCE):
        counter["n"] += 1
        question = crud.create_question(
            db,
            category=category,
            question_text=text or f"Wie viele Dinge gibt es? #{counter['n']}",
            answer_value=42.0,
            answer_unit="Stück",
            source_url="https://example.org",
            status=status,
            hints=[(1, "Mehr als zehn."), (2, "Weniger als hundert.")],
        )
        if rating_count:
            question.rating_sum = rating_sum
            question.rating_count = rating_count
            db.commit()
            db.refresh(question)
        return question

    return _make
