"""Shared fixtures for the HTTP API tests."""

from __future__ import annotations

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from cyclesense.main import create_app

TEST_USER_ID = "12345678-1234-5678-1234-567812345678"


@pytest.fixture
def app() -> FastAPI:
    app = create_app()

    # stands in for the upstream auth layer, which sets request.state.user_id
    @app.middleware("http")
    async def inject_user(request: Request, call_next):
        user_id = request.headers.get("x-test-user")
        if user_id:
            request.state.user_id = user_id
        return await call_next(request)

    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"x-test-user": TEST_USER_ID}
