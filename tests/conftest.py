"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402

SUPER_ADMIN_EMAIL = "owner@shop.example"
SUPER_ADMIN_PASSWORD = "OwnerPass1"


class _BaseTestConfig(Config):
    TESTING = True
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    JWT_SECRET_KEY = SECRET_KEY
    SUPER_ADMIN_EMAIL = "Owner@Shop.example"
    SUPER_ADMIN_PASSWORD = SUPER_ADMIN_PASSWORD
    SUPER_ADMIN_NAME = "Shop Owner"
    SUPER_ADMIN_PHONE = "01000000000"
    SUPER_ADMIN_ID = 1
    SEED_SUPER_ADMIN = True
    ENABLE_SUPER_ADMIN_RESET = False
    SUPER_ADMIN_RESET_SECRET = None
    PASSWORD_HASH_COST = 4
    TOKEN_SCHEME = "legacy"
    RATE_LIMIT = "1000 per minute"
    LOG_LEVEL = "DEBUG"


def build_app(tmp_path: Path, **overrides) -> Flask:
    """Create an application backed by a SQLite file under ``tmp_path``."""

    class TestConfig(_BaseTestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'storefront.db'}"

    for key, value in overrides.items():
        setattr(TestConfig, key, value)

    return create_app(TestConfig)


@pytest.fixture()
def app(tmp_path) -> Flask:
    """Create a Flask application instance for tests."""

    application = build_app(tmp_path)

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def login(client: FlaskClient, email: str, password: str) -> str:
    response = client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.get_json()
    return response.get_json()["accessToken"]


def register(client: FlaskClient, email: str, password: str = "secret1", name: str = "Ann", **extra):
    return client.post(
        "/register",
        json={"email": email, "password": password, "name": name, **extra},
    )


@pytest.fixture()
def super_admin_token(client: FlaskClient) -> str:
    """Log in as the seeded super-admin."""

    return login(client, SUPER_ADMIN_EMAIL, SUPER_ADMIN_PASSWORD)
