"""Shared fixtures: in-memory SQLite app client, user factories and token helpers."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import jwt
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings
from app.core.database import get_db
from app.main import app
from app.models import Base, User
from app.services.users import create_user

DEFAULT_PASSWORD = "correct-horse-battery"


def make_token(user_id: int | str, issued_ago_sec: int = 0, expires_in_sec: int = 600) -> str:
    """Encode a session token with a chosen iat/exp, signed with the test secret."""
    settings = get_settings()
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "iat": now - timedelta(seconds=issued_ago_sec),
        "exp": now + timedelta(seconds=expires_in_sec),
    }
    return jwt.encode(
        payload, settings.JWT_SECRET.get_secret_value(), algorithm=settings.JWT_ALGORITHM
    )


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class ApiTestCase(unittest.TestCase):
    """Runs the real app against a fresh in-memory database per test."""

    def setUp(self) -> None:
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(self.engine)
        self.addCleanup(self.engine.dispose)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

        # Cheap bcrypt cost keeps the suite fast.
        rounds = patch("app.core.security.BCRYPT_ROUNDS", 4)
        rounds.start()
        self.addCleanup(rounds.stop)

        mailer = patch("app.services.email.send_email")
        self.send_email = mailer.start()
        self.addCleanup(mailer.stop)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.client.close()

    def db(self) -> Session:
        session = self.SessionLocal()
        self.addCleanup(session.close)
        return session

    def make_user(
        self,
        email: str = "user@example.com",
        name: str = "Test User",
        password: str = DEFAULT_PASSWORD,
        role: str = "user",
    ) -> User:
        return create_user(
            self.db(),
            name=name,
            email=email,
            password=password,
            password_confirm=password,
            role=role,
        )

    def login(self, email: str, password: str = DEFAULT_PASSWORD) -> str:
        """Log in and return the token; the cookie jar is cleared so later calls use headers only."""
        resp = self.client.post("/api/v1/users/login", json={"email": email, "password": password})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.client.cookies.clear()
        return resp.json()["token"]

    def user_with_token(self, email: str = "user@example.com", role: str = "user") -> tuple[User, str]:
        user = self.make_user(email=email, role=role)
        return user, self.login(email)

    def get_user(self, user_id: int) -> User:
        return self.db().get(User, user_id)
