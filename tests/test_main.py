import logging

import pytest
from fastapi import FastAPI
from httpx import AsyncClient

from app import main as main_module
from app.core.config import Settings
from app.core.logging_config import SERVER_LOGGER
from app.main import create_app, run_server
from app.schemas.user import User


@pytest.fixture
def fake_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(main_module.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.setattr(main_module, "configure_logging", lambda settings: None)
    return calls


def test_create_app_does_not_bind(monkeypatch, settings: Settings):
    def fail(*args, **kwargs):
        raise AssertionError("create_app must not start a server")

    monkeypatch.setattr(main_module.uvicorn, "run", fail)

    app = create_app(settings)

    assert isinstance(app, FastAPI)
    assert app.state.settings is settings


def test_create_app_stores_seed_users_as_tuple(settings: Settings):
    seed = [User(id=7, name="Grace", role="Architect")]

    app = create_app(settings, seed_users=seed)

    assert app.state.seed_users == (seed[0],)


ROUTES = [
    ("GET", "/", 200),
    ("GET", "/health", 200),
    ("GET", "/api/users", 200),
    ("POST", "/api/users", 400),
]

UNROUTED = [
    ("PUT", "/"),
    ("POST", "/health"),
    ("DELETE", "/api/users"),
    ("PATCH", "/api/users"),
    ("PUT", "/api/users"),
    ("GET", "/api/users/1"),
    ("GET", "/api"),
    ("GET", "/users"),
]


@pytest.mark.anyio
@pytest.mark.parametrize("method, path, status", ROUTES)
async def test_routed_requests(client: AsyncClient, method: str, path: str, status: int):
    response = await client.request(method, path)

    assert response.status_code == status


@pytest.mark.anyio
@pytest.mark.parametrize("method, path", UNROUTED)
async def test_everything_else_is_not_found(client: AsyncClient, method: str, path: str):
    response = await client.request(method, path)

    assert response.status_code == 404
    assert response.json() == {"error": "Route not found", "path": path}


def test_run_server_binds_configured_port(fake_uvicorn, caplog):
    settings = Settings(_env_file=None, PORT=4321, LISTEN_HOST="127.0.0.1", ENVIRONMENT="production")

    with caplog.at_level(logging.INFO, logger=SERVER_LOGGER):
        run_server(settings)

    app, kwargs = fake_uvicorn[0]
    assert isinstance(app, FastAPI)
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 4321
    assert kwargs["access_log"] is False

    lines = [r.getMessage() for r in caplog.records if r.name == SERVER_LOGGER]
    assert lines == [
        "🚀 Server running on port 4321",
        "📊 Environment: production",
        "🔗 Health check: http://localhost:4321/health",
    ]


def test_run_server_loads_settings_when_none_given(fake_uvicorn, monkeypatch):
    monkeypatch.setattr(main_module, "load_settings", lambda: Settings(_env_file=None, PORT=5555))

    run_server()

    assert fake_uvicorn[0][1]["port"] == 5555
