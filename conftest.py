"""Shared pytest fixtures for Qt application lifecycle and canvas fakes."""

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QCoreApplication  # noqa: E402
from PySide6.QtGui import QGuiApplication  # noqa: E402

from ideacanvas.errors import IdeaNotFoundError, IdeaStorageError  # noqa: E402


@pytest.fixture(scope="session")
def app():
    """Provide a single QGuiApplication for all tests."""
    instance = QGuiApplication.instance()
    if instance is None:
        instance = QGuiApplication(sys.argv)

    yield instance

    QCoreApplication.processEvents()


class FakeIdeaRepository:
    """In-memory idea store that records writes and can be told to fail."""

    def __init__(self, ideas=None):
        self.ideas = {idea_id: dict(doc) for idea_id, doc in (ideas or {}).items()}
        self.updates = []
        self.fail_with = None

    def get_idea(self, idea_id):
        if idea_id not in self.ideas:
            raise IdeaNotFoundError(f"Idea not found: {idea_id}")
        return {"id": idea_id, **self.ideas[idea_id]}

    def update_idea(self, idea_id, updates):
        if self.fail_with is not None:
            raise self.fail_with
        if idea_id not in self.ideas:
            raise IdeaStorageError(f"No such idea: {idea_id}")
        self.updates.append((idea_id, dict(updates)))
        self.ideas[idea_id].update(updates)


@pytest.fixture
def repository():
    return FakeIdeaRepository({"idea_1": {"title": "Coffee app", "notes": []}})
