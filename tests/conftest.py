from __future__ import annotations

import pytest

from project_viewer.app import create_app
from project_viewer.config import Settings
from project_viewer.resolver import ProjectResolver
from project_viewer.rewrite import RewriteStrategy
from project_viewer.storage import StorageError


class FakeStore:
    """In-memory object store that records every key it is asked for."""

    def __init__(self, objects: dict[str, bytes] | None = None) -> None:
        self.objects = dict(objects or {})
        self.failing: set[str] = set()
        self.raising: dict[str, Exception] = {}
        self.requested: list[str] = []

    def get(self, key: str) -> bytes | None:
        self.requested.append(key)
        if key in self.raising:
            raise self.raising[key]
        if key in self.failing:
            raise StorageError(key, "connection reset")
        return self.objects.get(key)


@pytest.fixture()
def store() -> FakeStore:
    return FakeStore(
        {
            "main/abc123/index.html": (
                b'<html><head><title>t</title></head>'
                b'<body><img src="/logo.png"></body></html>'
            ),
            "main/abc123/assets/app.js": b"console.log('hi');",
            "main/abc123/styles/site.css": b"body { color: red; }",
            "main/abc123/logo.png": b"\x89PNG\r\n\x1a\n\x00\x01",
        }
    )


@pytest.fixture()
def settings() -> Settings:
    return Settings(bucket="projects-test", cors_allow_origin="")


@pytest.fixture()
def base_tag_settings() -> Settings:
    return Settings(
        bucket="projects-test",
        rewrite_strategy=RewriteStrategy.BASE_TAG,
        cors_allow_origin="",
    )


@pytest.fixture()
def resolver(settings: Settings, store: FakeStore) -> ProjectResolver:
    return ProjectResolver(settings, store)


@pytest.fixture()
def client(settings: Settings, store: FakeStore):
    app = create_app(settings, store)
    app.testing = True
    return app.test_client()
