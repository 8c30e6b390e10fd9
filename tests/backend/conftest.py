import os
import uuid

TEST_DB_URL = "sqlite://:memory:?cache=shared"
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ.setdefault("JWT_SECRET", "test-secret-for-the-suite-0123456789abcdef")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from todosync.core import db as db_module
from todosync.core.pubsub import hub
from todosync.core.security import hash_password
from todosync.main import app
from todosync.models.user import User


db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest_asyncio.fixture
async def db():
    """
    Fresh database for service-level tests that do not need HTTP.
    """
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def client(db):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest.fixture(autouse=True)
def clean_hub():
    """
    The hub is process-global; drop any channel a test left registered.
    """
    yield
    hub._subscribers.clear()
    hub._held.clear()


@pytest_asyncio.fixture
async def create_user(db):
    """
    Factory fixture to create users directly via the ORM.
    """

    async def _create_user(password: str = "UserPass!23") -> tuple[User, str]:
        name = f"user_{uuid.uuid4().hex[:6]}"
        user = await User.create(
            username=name,
            email=f"{name}@example.com",
            password_hash=hash_password(password),
        )
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def login_factory(client):
    """
    Helper fixture: register a fresh account through the API and log it in.
    Returns (headers, token, user_json).
    """

    async def _login(password: str = "secret1", user_agent: str = "pytest") -> tuple[dict[str, str], str, dict]:
        username = f"user_{uuid.uuid4().hex[:6]}"
        reg = await client.post(
            "/api/auth/register",
            json={"username": username, "email": f"{username}@example.com", "password": password},
        )
        assert reg.status_code == 201, reg.text
        resp = await client.post(
            "/api/auth/login",
            json={"username": username, "password": password},
            headers={"User-Agent": user_agent},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["token"]
        return {"Authorization": f"Bearer {token}"}, token, resp.json()["user"]

    return _login
