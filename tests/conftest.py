import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from expense_tracker.core.config import Settings
from expense_tracker.core.context import AppContext
from expense_tracker.main import create_app

TEST_SECRET = "test-secret-key-0123456789"


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "DATABASE_URL": f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        "SECRET_KEY": TEST_SECRET,
        # Lowest bcrypt cost keeps the suite fast
        "BCRYPT_ROUNDS": 4,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture()
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest_asyncio.fixture()
async def context(settings):
    ctx = AppContext(settings)
    await ctx.startup()
    yield ctx
    await ctx.shutdown()


@pytest_asyncio.fixture()
async def db(context):
    async with context.database.sessionmaker() as session:
        yield session


@pytest.fixture()
def signup(client):
    """Register and log in through the API; the client keeps the session cookie."""
    def _signup(username="alice", email="a@x.com", password="secret1"):
        r = client.post("/api/register", json={"username": username, "email": email, "password": password})
        assert r.status_code == 201, r.text
        r = client.post("/api/login", json={"username": username, "password": password})
        assert r.status_code == 200, r.text
        return r.json()["user"]

    return _signup
