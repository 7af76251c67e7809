import os
import uuid
from collections.abc import Callable, Generator
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import close_pool, get_connection, init_pool
from app.database.exceptions import PersistenceError

USERS_DDL = """
CREATE TABLE IF NOT EXISTS users (
    user_id SERIAL PRIMARY KEY,
    username VARCHAR(50) NOT NULL UNIQUE,
    email VARCHAR(255) NOT NULL UNIQUE,
    role VARCHAR(20) NOT NULL DEFAULT 'user',
    is_verified BOOLEAN NOT NULL DEFAULT FALSE,
    verification_document_path VARCHAR(500),
    created_at TIMESTAMP NOT NULL DEFAULT NOW()
)
"""

SeedUser = Callable[..., int]


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "plantbnb_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    init_pool(test_settings)
    try:
        with get_connection() as conn:
            conn.execute(USERS_DDL)
            conn.commit()
    except PersistenceError as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env vars.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def seed_user(db_conn: psycopg.Connection[Any]) -> Generator[SeedUser, None, None]:
    """Insert throwaway users; every one of them is deleted after the test."""
    created: list[int] = []

    def _seed(
        role: str = "user",
        is_verified: bool = False,
        document_path: str | None = None,
    ) -> int:
        suffix = uuid.uuid4().hex[:12]
        with db_conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO users (username, email, role, is_verified, verification_document_path)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING user_id
                """,
                (f"it_{suffix}", f"it_{suffix}@example.com", role, is_verified, document_path),
            )
            row = cur.fetchone()
            assert row is not None
        db_conn.commit()
        created.append(row[0])
        return row[0]

    yield _seed

    with db_conn.cursor() as cur:
        for user_id in created:
            cur.execute("DELETE FROM users WHERE user_id = %s", (user_id,))
    db_conn.commit()
