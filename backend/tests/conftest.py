import asyncio
import inspect
import os
import sys
import tempfile
from pathlib import Path

# Configure the environment before anything imports app.config
_test_tmp_dir = tempfile.mkdtemp(prefix="taskflow_test_")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_test_tmp_dir}/taskflow.db")
os.environ.setdefault("JWT_ACCESS_SECRET", "kP9vX2mQ7rL4nZ8wB1cF6hJ3tY5uA0eS")
os.environ.setdefault("JWT_REFRESH_SECRET", "Wq3Zr8Lm1Nx6Vb9Ct4Ky7Hp2Js5Gd0Fa")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_DIR", os.path.join(_test_tmp_dir, "logs"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app import models  # noqa: E402,F401
from app.api.dependencies import get_token_service  # noqa: E402
from app.database import AsyncSessionLocal, Base, engine  # noqa: E402
from app.limiter import limiter  # noqa: E402
from app.main import app  # noqa: E402

PASSWORD = "Secure123"


async def _reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture(autouse=True)
def fresh_database():
    asyncio.run(_reset_schema())
    limiter.reset()
    yield


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def tokens():
    return get_token_service()


@pytest.fixture
def db_session_factory():
    return AsyncSessionLocal


def register(client, name="Alice Doe", email="alice@example.com", password=PASSWORD):
    return client.post(
        "/api/v1/auth/register",
        json={
            "name": name,
            "email": email,
            "password": password,
            "confirmPassword": password,
        },
    )


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user():
    """Register a user on its own client (own cookie jar) and return (client, access_token)."""

    def _make(email="alice@example.com", name="Alice Doe"):
        c = TestClient(app)
        resp = register(c, name=name, email=email)
        assert resp.status_code == 201, resp.text
        return c, resp.json()["data"]["accessToken"]

    return _make


def pytest_pyfunc_call(pyfuncitem):
    if inspect.iscoroutinefunction(pyfuncitem.obj):
        call_kwargs = {
            name: pyfuncitem.funcargs[name]
            for name in pyfuncitem._fixtureinfo.argnames
            if name in pyfuncitem.funcargs
        }
        asyncio.run(pyfuncitem.obj(**call_kwargs))
        return True
    return None


def pytest_configure(config):
    config.addinivalue_line("markers", "asyncio: mark test as async")
