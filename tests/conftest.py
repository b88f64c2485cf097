"""Shared fixtures for gatekeeper tests."""
from __future__ import annotations

import pytest
from fastapi import FastAPI

from lancer.core.gatekeeper import Lancer

SECRET = "whsec_test_secret"


@pytest.fixture
def secret() -> str:
    return SECRET


@pytest.fixture
def gate() -> Lancer:
    return Lancer(signing_secret=SECRET)


@pytest.fixture
def session_body() -> dict:
    return {
        "chunk_size": 5 * 1024 * 1024,
        "file_name": "report.pdf",
        "file_size": 12 * 1024 * 1024,
        "max_chunk": 3,
        "mime_type": "application/pdf",
        "provider": "s3",
    }


def build_app(**routes) -> FastAPI:
    """Mount endpoints as POST routes keyed by path."""
    app = FastAPI()
    for path, endpoint in routes.items():
        app.add_api_route(f"/{path}", endpoint, methods=["POST"])
    return app


@pytest.fixture
def make_app():
    return build_app
