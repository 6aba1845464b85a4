import os
import uuid
from collections.abc import Generator
from importlib.resources import files
from typing import Any

import psycopg
import pytest

from newsdesk.config.settings import Settings
from newsdesk.database.connection import close_pool, get_connection, init_pool


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "newsdesk_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(files("newsdesk.database").joinpath("schema.sql").read_text())
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def user_id(db_conn: psycopg.Connection[Any]) -> Generator[str, None, None]:
    """A fresh user id whose rows are removed after the test."""
    new_id = str(uuid.uuid4())
    yield new_id
    with db_conn.cursor() as cur:
        cur.execute("DELETE FROM audio_jobs WHERE user_id = %s", (new_id,))
        cur.execute("DELETE FROM profiles WHERE id = %s", (new_id,))
    db_conn.commit()


@pytest.fixture
def seed_profile(db_conn: psycopg.Connection[Any], user_id: str) -> str:
    with db_conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO profiles (id, gemini_api_key, is_admin, is_active)
            VALUES (%s, %s, %s, %s)
            """,
            (user_id, "sk-profile", True, True),
        )
    db_conn.commit()
    return user_id


@pytest.fixture
def global_api_key(db_conn: psycopg.Connection[Any]) -> Generator[str, None, None]:
    with db_conn.cursor() as cur:
        cur.execute("SELECT value FROM app_settings WHERE id = 'gemini_api_key'")
        previous = cur.fetchone()
        cur.execute(
            """
            INSERT INTO app_settings (id, value) VALUES ('gemini_api_key', %s)
            ON CONFLICT (id) DO UPDATE SET value = EXCLUDED.value
            """,
            ("sk-global",),
        )
    db_conn.commit()
    try:
        yield "sk-global"
    finally:
        with db_conn.cursor() as cur:
            if previous is None:
                cur.execute("DELETE FROM app_settings WHERE id = 'gemini_api_key'")
            else:
                cur.execute(
                    "UPDATE app_settings SET value = %s WHERE id = 'gemini_api_key'",
                    (previous[0],),
                )
        db_conn.commit()
