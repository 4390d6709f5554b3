"""Tests for debounced persistence of the note collection."""

import pytest

from ideacanvas import IdeaStorageError, NoteModel, NoteValidationError, PersistenceSynchronizer


@pytest.fixture
def model(app):
    return NoteModel()


@pytest.fixture
def sync(model, repository):
    synchronizer = PersistenceSynchronizer(model, repository)
    synchronizer.attach("idea_1")
    return synchronizer


class TestDebounce:
    def test_mutation_arms_debounced_flush(self, sync, model, repository):
        model.createNote("First", "feature", 0.0, 0.0)
        assert sync.dirty is True
        assert sync.pendingDelay() == 500
        assert repository.updates == []

    def test_each_mutation_rearms_single_task(self, sync, model, repository):
        first = model.createNote("First", "feature", 0.0, 0.0)
        model.createNote("Second", "todo", 10.0, 10.0)
        model.updateNote(first.id, {"content": "more"})
        assert sync.pendingDelay() == 500
        assert repository.updates == []

        assert sync._task.fire()
        assert len(repository.updates) == 1
        assert repository.updates[0] == ("idea_1", {"notes": model.to_list()})
        assert sync.dirty is False
        assert sync.isFlushPending() is False

    def test_flush_writes_whole_collection(self, sync, model, repository):
        model.createNote("A", "feature", 0.0, 0.0)
        model.createNote("B", "question", 1.0, 1.0, category_data={"urgency": "low"})
        flushed = []
        sync.flushed.connect(flushed.append)
        assert sync.flush() is True
        idea_id, updates = repository.updates[-1]
        assert idea_id == "idea_1"
        assert [note["title"] for note in updates["notes"]] == ["A", "B"]
        assert repository.ideas["idea_1"]["notes"] == updates["notes"]
        assert flushed == ["idea_1"]

    def test_rejected_note_never_flushes(self, sync, model, repository):
        for title in ("", "   "):
            with pytest.raises(NoteValidationError):
                model.createNote(title, "feature", 0.0, 0.0)
        assert sync.dirty is False
        assert sync.isFlushPending() is False
        assert sync.flushPending() is True
        assert repository.updates == []

    def test_detached_synchronizer_ignores_mutations(self, model, repository):
        sync = PersistenceSynchronizer(model, repository)
        model.createNote("Loose", "feature", 0.0, 0.0)
        assert sync.isFlushPending() is False
        assert sync.flush() is False
        assert repository.updates == []

    def test_attach_treats_loaded_notes_as_saved(self, model, repository):
        sync = PersistenceSynchronizer(model, repository)
        model.from_list([{"id": "note_1", "title": "Loaded", "category": "todo"}])
        sync.attach("idea_1")
        assert sync.dirty is False
        assert sync.isFlushPending() is False

    def test_detach_cancels_pending_flush(self, sync, model, repository):
        model.createNote("A", "feature", 0.0, 0.0)
        sync.detach()
        assert sync.isFlushPending() is False
        assert sync.idea_id is None


class TestDragInteraction:
    def test_no_flush_while_dragging(self, sync, model, repository):
        note = model.createNote("Drag", "feature", 0.0, 0.0)
        sync.flush()
        model.beginDrag(note.id)
        model.updateNote(note.id, {"content": "edited mid-drag"})
        assert sync.isFlushPending() is False
        assert sync.flush() is False
        assert len(repository.updates) == 1

    def test_drag_release_flushes_without_delay(self, sync, model, repository):
        note = model.createNote("Drag", "feature", 0.0, 0.0)
        sync.flush()
        model.beginDrag(note.id)
        model.commitDrag(note.id, 25.0, -5.0)
        assert sync.pendingDelay() == 0

        assert sync._task.fire()
        _, updates = repository.updates[-1]
        assert updates["notes"][0]["position"] == {"x": 25.0, "y": -5.0}

    def test_later_mutation_does_not_delay_release_flush(self, sync, model, repository):
        note = model.createNote("Drag", "feature", 0.0, 0.0)
        model.beginDrag(note.id)
        model.commitDrag(note.id, 10.0, 0.0)
        model.createNote("Other", "todo", 50.0, 50.0)
        assert sync.pendingDelay() == 0
        sync._task.fire()
        assert len(repository.updates) == 1
        assert len(repository.updates[0][1]["notes"]) == 2

    def test_dirty_changes_flush_on_release_even_without_movement(self, sync, model, repository):
        note = model.createNote("Drag", "feature", 0.0, 0.0)
        model.beginDrag(note.id)
        assert sync.isFlushPending() is False
        model.commitDrag(note.id, 0.0, 0.0)
        assert sync.pendingDelay() == 0

    def test_clean_release_without_movement_schedules_nothing(self, sync, model, repository):
        note = model.createNote("Drag", "feature", 0.0, 0.0)
        sync.flush()
        model.beginDrag(note.id)
        model.commitDrag(note.id, 0.0, 0.0)
        assert sync.isFlushPending() is False

    def test_cancelled_drag_rearms_debounce(self, sync, model):
        note = model.createNote("Drag", "feature", 0.0, 0.0)
        model.beginDrag(note.id)
        model.cancelDrag()
        assert sync.pendingDelay() == 500


class TestFailures:
    @pytest.mark.parametrize("error", [
        IdeaStorageError("offline"),
        OSError("disk full"),
        RuntimeError("backend exploded"),
        TypeError("payload not serializable"),
    ])
    def test_failed_flush_keeps_notes_and_stays_dirty(self, sync, model, repository, error):
        failures = []
        sync.flushFailed.connect(lambda idea_id, message: failures.append((idea_id, message)))
        model.createNote("Keep me", "feature", 0.0, 0.0)
        repository.fail_with = error

        assert sync._task.fire()
        assert failures == [("idea_1", str(error))]
        assert sync.dirty is True
        assert model.count == 1
        # No retry timer after a failure.
        assert sync.isFlushPending() is False

        repository.fail_with = None
        model.createNote("Next", "todo", 0.0, 0.0)
        assert sync.pendingDelay() == 500
        assert sync._task.fire()
        assert sync.dirty is False
        assert len(repository.updates[-1][1]["notes"]) == 2

    def test_flush_pending_writes_immediately(self, sync, model, repository):
        model.createNote("Unsaved", "feature", 0.0, 0.0)
        assert sync.flushPending() is True
        assert sync.isFlushPending() is False
        assert len(repository.updates) == 1
