"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Any

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from fastapi_view import Reply, ViewRenderer, ViewSettings, get_reply, setup_views

TEMPLATES = {
    "index.html": "<p>{{ text }}</p>",
    "index-layout-content.html": "{{ content }}",
    "index-layout-body.html": "{{ body }}",
    "layout.html": "<html><body>{{ body }}</body></html>",
    "greeting.html": "<p>{{ greeting }}, {{ name }}</p>",
    "with-partial.html": '{% include "header" %}<p>{{ text }}</p>',
    "helper.html": "<p>{{ shout(text) }}</p>",
    "broken.html": "{% if %}",
    "partials/header.html": "<h1>{{ title }}</h1>",
    "partials/footer.html": "<footer>{{ year }}</footer>",
    "pages/about.html": "<h2>About {{ name }}</h2>",
}


class RecordingSink:
    """In-memory sink recording every header and delivery."""

    def __init__(self, requested_path: str | None = "/", locals_: dict[str, Any] | None = None):
        self.headers: dict[str, str] = {}
        self.header_calls: list[tuple[str, str]] = []
        self.locals = locals_ or {}
        self.requested_path = requested_path
        self.sent: list[Any] = []

    def get_header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def header(self, name: str, value: str) -> None:
        self.header_calls.append((name, value))
        self.headers[name.lower()] = value

    async def send(self, result: Any) -> None:
        self.sent.append(result)

    @property
    def result(self) -> Any:
        assert len(self.sent) == 1, f"expected exactly one delivery, got {self.sent!r}"
        return self.sent[0]


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    """Template root populated with the test templates."""
    root = tmp_path / "templates"
    for name, source in TEMPLATES.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
    return root


@pytest.fixture
def make_settings(templates_dir: Path):
    """Build ViewSettings rooted at the test templates."""

    def _make(**overrides: Any) -> ViewSettings:
        return ViewSettings(_env_file=None, root=templates_dir, **overrides)

    return _make


@pytest.fixture
def renderer(make_settings) -> ViewRenderer:
    return ViewRenderer(make_settings())


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_sink():
    """Factory for RecordingSink instances."""
    return RecordingSink


@pytest.fixture
def make_app(make_settings):
    """Build a FastAPI app with views set up and a few rendering routes."""

    def _make(**overrides: Any) -> FastAPI:
        app = FastAPI()
        setup_views(app, make_settings(**overrides))

        async def set_locals(reply: Reply = Depends(get_reply)) -> None:
            reply.locals = {"content": "ok"}

        @app.get("/")
        async def index(reply: Reply = Depends(get_reply)):
            return await reply.render("index", {"text": "text"})

        @app.get("/locals", dependencies=[Depends(set_locals)])
        async def with_locals(reply: Reply = Depends(get_reply)):
            return await reply.render("index-layout-content")

        @app.get("/missing-page")
        async def missing_page(reply: Reply = Depends(get_reply)):
            return await reply.render()

        @app.get("/layout-on-render")
        async def layout_on_render(reply: Reply = Depends(get_reply)):
            return await reply.render("index", {"text": "text"}, {"layout": "layout"})

        @app.get("/plain")
        async def plain(reply: Reply = Depends(get_reply)):
            reply.header("Content-Type", "text/plain; charset=utf-8")
            return await reply.render("index", {"text": "plain"})

        return app

    return _make


@pytest.fixture
def test_client(make_app):
    """FastAPI test client for an app without a global layout."""
    with TestClient(make_app()) as client:
        yield client
