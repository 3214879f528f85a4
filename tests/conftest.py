"""Shared pytest fixtures for mongopeek tests."""

import logging

import pytest

from mongopeek.documents.values import ObjectId, document
from mongopeek.services.store import InMemoryStore

OID_HEX = "507f1f77bcf86cd799439011"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config directory at a temporary path for every test."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("MONGOPEEK_CONFIG_DIR", str(config_dir))
    yield config_dir
    package_logger = logging.getLogger("mongopeek")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def oid():
    return ObjectId.from_hex(OID_HEX)


@pytest.fixture
def people():
    """A handful of person documents with fixed ids."""
    return [
        document({"_id": ObjectId.from_hex(f"{i:024x}"), "name": name, "age": age, "tags": tags})
        for i, (name, age, tags) in enumerate(
            [
                ("Alice", 34, ["admin", "dev"]),
                ("bob", 27, ["dev"]),
                ("Carol", 45, []),
                ("alfred", 19, ["ops"]),
            ],
            start=1,
        )
    ]


@pytest.fixture
def store(people):
    return InMemoryStore(people)


class FakeEditor:
    """Editor stand-in that records what it was given."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.seen = []

    def edit(self, text: str) -> str:
        self.seen.append(text)
        if self.error is not None:
            raise self.error
        if callable(self.result):
            return self.result(text)
        return text if self.result is None else self.result


class FakeClipboard:
    def __init__(self):
        self.text = None

    def write(self, text: str) -> None:
        self.text = text


@pytest.fixture
def clipboard():
    return FakeClipboard()


@pytest.fixture
def make_editor():
    """Factory for editors returning fixed text, a transform, or an error."""
    return FakeEditor
