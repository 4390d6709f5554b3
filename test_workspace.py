"""Tests for the workspace controller and the note editor session."""

import pytest
from PySide6.QtQml import QQmlApplicationEngine

from ideacanvas import (
    CanvasConfig,
    IdeaStorageError,
    IdeaWorkspace,
    NoteCategory,
    create_workspace_window,
)


STORED_NOTES = [
    {
        "id": "note_0",
        "title": "Subscription tiers",
        "category": "feature",
        "content": "Basic and pro",
        "position": {"x": 100.0, "y": 100.0},
        "categoryData": {"priority": "high"},
    },
    {
        "id": "note_1",
        "title": "Who pays shipping?",
        "category": "question",
        "content": "",
        "position": {"x": 400.0, "y": 100.0},
        "categoryData": {"urgency": "low", "blocking": True, "whoToAsk": "Ops"},
    },
]


@pytest.fixture
def workspace(app, repository):
    repository.ideas["idea_1"]["notes"] = [dict(note) for note in STORED_NOTES]
    workspace = IdeaWorkspace(repository, CanvasConfig())
    workspace.viewport.setViewportSize(1000.0, 800.0)
    return workspace


@pytest.fixture
def signals(workspace):
    received = {"errors": [], "close": [], "loaded": []}
    workspace.errorOccurred.connect(received["errors"].append)
    workspace.closeRequested.connect(lambda: received["close"].append(True))
    workspace.ideaLoaded.connect(received["loaded"].append)
    return received


def tap(gestures, x, y, timestamp):
    gestures.touchPressed([{"id": 0, "x": x, "y": y}], timestamp)
    gestures.touchReleased([{"id": 0, "x": x, "y": y}], timestamp + 40)


class TestOpenIdea:
    def test_open_hydrates_without_flush(self, workspace, repository, signals):
        workspace.viewport.setTransform(2.0, 30.0, 40.0)
        assert workspace.openIdea("idea_1") is True
        assert [note.id for note in workspace.model.allNotes()] == ["note_0", "note_1"]
        assert workspace.ideaId == "idea_1"
        assert workspace.ideaTitle == "Coffee app"
        assert signals["loaded"] == ["idea_1"]
        assert repository.updates == []
        assert workspace.sync.dirty is False
        assert workspace.sync.isFlushPending() is False
        assert (workspace.viewport.scale, workspace.viewport.offsetX) == (1.0, 0.0)

    def test_missing_id(self, workspace, signals):
        assert workspace.openIdea("  ") is False
        assert signals["errors"] == ["No idea ID provided"]
        assert signals["close"] == [True]

    def test_missing_idea(self, workspace, signals):
        assert workspace.openIdea("idea_404") is False
        assert signals["errors"] == ["Idea not found"]
        assert signals["close"] == [True]

    def test_load_failure(self, workspace, repository, signals, monkeypatch):
        def broken(idea_id):
            raise IdeaStorageError("unreadable")

        monkeypatch.setattr(repository, "get_idea", broken)
        assert workspace.openIdea("idea_1") is False
        assert signals["errors"] == ["Failed to load idea"]
        assert signals["close"] == [True]

    def test_switching_ideas_saves_previous_changes(self, workspace, repository):
        repository.ideas["idea_2"] = {"title": "Second", "notes": []}
        workspace.openIdea("idea_1")
        workspace.model.updateNotePosition("note_0", 5.0, 5.0)
        workspace.openIdea("idea_2")
        assert repository.updates[-1][0] == "idea_1"
        assert repository.ideas["idea_1"]["notes"][0]["position"] == {"x": 5.0, "y": 5.0}
        assert workspace.model.count == 0

    def test_close_flushes_pending_changes(self, workspace, repository, signals):
        workspace.openIdea("idea_1")
        workspace.model.createNote("Late thought", "insight", 0.0, 0.0)
        assert workspace.sync.isFlushPending()
        assert workspace.close() is True
        assert len(repository.updates) == 1
        assert len(repository.updates[0][1]["notes"]) == 3
        assert signals["close"] == [True]


class TestNewNotes:
    def test_new_note_is_centered_in_viewport(self, workspace):
        workspace.openIdea("idea_1")
        workspace.viewport.setTransform(2.0, 100.0, 50.0)
        workspace.requestNewNote()
        editor = workspace.editor
        assert editor.isOpen and editor.isNew
        editor.title = "Loyalty program"
        assert editor.save() is True

        note = workspace.model.allNotes()[-1]
        # Screen (400, 330) maps to logical (150, 140) at scale 2, offset (100, 50).
        assert (note.x, note.y) == (150.0, 140.0)
        assert note.category == NoteCategory.FEATURE
        assert note.category_data == {"priority": "medium"}
        assert editor.isOpen is False

    def test_tap_on_empty_canvas_opens_new_note_editor(self, workspace):
        workspace.openIdea("idea_1")
        tap(workspace.gestures, 800.0, 600.0, 0.0)
        assert workspace.gestures._tap_timer.fire()
        editor = workspace.editor
        assert editor.isOpen and editor.isNew

        editor.title = "Pop-up stores"
        editor.category = "todo"
        editor.todoPriority = "low"
        assert editor.save()
        note = workspace.model.allNotes()[-1]
        assert (note.x, note.y) == (800.0, 600.0)
        assert note.category_data == {"priority": "low"}

    def test_blank_title_reports_error_and_keeps_editor_open(self, workspace, repository, signals):
        workspace.openIdea("idea_1")
        workspace.requestNewNote()
        workspace.editor.title = "   "
        assert workspace.editor.save() is False
        assert signals["errors"] == ["Please enter a note title"]
        assert workspace.editor.isOpen is True
        assert workspace.model.count == 2
        assert workspace.sync.isFlushPending() is False
        assert repository.updates == []


class TestEditExisting:
    def test_double_tap_loads_note_into_editor(self, workspace):
        workspace.openIdea("idea_1")
        tap(workspace.gestures, 450.0, 150.0, 0.0)
        tap(workspace.gestures, 450.0, 150.0, 100.0)
        editor = workspace.editor
        assert editor.isOpen and editor.noteId == "note_1"
        assert editor.title == "Who pays shipping?"
        assert editor.category == "question"
        assert editor.questionUrgency == "low"
        assert editor.questionBlocking is True
        assert editor.questionWhoToAsk == "Ops"
        assert editor.featurePriority == "medium"

    def test_edit_switches_category_and_keeps_other_fields(self, workspace):
        workspace.openIdea("idea_1")
        editor = workspace.editor
        assert editor.openExisting("note_0")
        assert editor.featurePriority == "high"
        editor.category = "question"
        editor.questionUrgency = "high"
        editor.content = "Ask finance"
        assert editor.save()

        note = workspace.model.getNote("note_0")
        assert note.category == NoteCategory.QUESTION
        assert note.content == "Ask finance"
        assert note.category_data == {
            "priority": "high",
            "urgency": "high",
            "blocking": False,
            "whoToAsk": "",
        }
        assert workspace.sync.pendingDelay() == 500

    def test_missing_category_data_uses_defaults(self, workspace, repository):
        repository.ideas["idea_1"]["notes"] = [
            {"id": "note_5", "title": "Bare", "category": "todo", "position": {"x": 0, "y": 0}}
        ]
        workspace.openIdea("idea_1")
        assert workspace.editor.openExisting("note_5")
        assert workspace.editor.todoPriority == "medium"

    def test_open_unknown_note_reports_error(self, workspace, signals):
        workspace.openIdea("idea_1")
        assert workspace.editor.openExisting("note_99") is False
        assert signals["errors"] == ["Note not found: note_99"]

    def test_cancel_resets_fields(self, workspace):
        workspace.openIdea("idea_1")
        editor = workspace.editor
        editor.openExisting("note_1")
        editor.cancel()
        assert editor.isOpen is False
        assert editor.title == ""
        assert editor.category == "feature"
        assert editor.questionBlocking is False
        assert workspace.model.getNote("note_1").title == "Who pays shipping?"

    def test_delete_note(self, workspace, repository):
        workspace.openIdea("idea_1")
        editor = workspace.editor
        editor.openExisting("note_0")
        assert editor.deleteNote() is True
        assert editor.isOpen is False
        assert workspace.model.getNote("note_0") is None
        assert workspace.sync._task.fire()
        assert [note["id"] for note in repository.ideas["idea_1"]["notes"]] == ["note_1"]

    def test_delete_requires_existing_note(self, workspace):
        workspace.openIdea("idea_1")
        workspace.requestNewNote()
        assert workspace.editor.deleteNote() is False


class TestDragThroughWorkspace:
    def test_drag_release_flushes_immediately(self, workspace, repository):
        workspace.openIdea("idea_1")
        gestures = workspace.gestures
        gestures.touchPressed([{"id": 0, "x": 150.0, "y": 150.0}], 0.0)
        gestures.touchMoved([{"id": 0, "x": 190.0, "y": 130.0}], 16.0)
        assert workspace.sync.isFlushPending() is False
        gestures.touchReleased([{"id": 0, "x": 190.0, "y": 130.0}], 32.0)
        assert workspace.sync.pendingDelay() == 0
        assert workspace.sync._task.fire()
        assert repository.ideas["idea_1"]["notes"][0]["position"] == {"x": 140.0, "y": 80.0}


class TestCreateWorkspaceWindow:
    def test_create_window(self, workspace):
        engine = create_workspace_window(workspace)
        assert isinstance(engine, QQmlApplicationEngine)
        assert engine.rootObjects()

    def test_reset_view_animates_layer(self, workspace):
        engine = create_workspace_window(workspace)
        root = engine.rootObjects()[0]
        workspace.viewport.setTransform(2.0, 120.0, -40.0)
        assert root.property("shownScale") == pytest.approx(2.0)
        assert root.property("animatingReset") is False

        workspace.viewport.resetView()
        assert root.property("animatingReset") is True
        assert workspace.viewport.scale == 1.0
