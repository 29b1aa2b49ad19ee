from __future__ import annotations

import os

os.environ["API_KEY"] = "test-key"
os.environ["MAIL_DOMAINS"] = "temp.example.com,mail.example.org"
os.environ["RESEND_API_KEY"] = ""
os.environ["AUTO_CREATE_SCHEMA"] = "false"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tempmail.db.session import init_db


@pytest.fixture()
def db_session():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    init_db(engine)
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def client(db_session):
    from fastapi.testclient import TestClient

    from tempmail.db.session import get_db
    from tempmail.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app, headers={"X-API-Key": "test-key"})
    finally:
        app.dependency_overrides.clear()
