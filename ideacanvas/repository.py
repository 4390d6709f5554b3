"""Idea persistence used by the notes canvas.

The canvas only needs ``get_idea`` and ``update_idea``. The JSON repository
keeps one ``<idea_id>.json`` document per idea on local disk, with the same
field names the hosted document store uses.
"""

from __future__ import annotations

import json
import logging
import os
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Protocol, Union

from .errors import IdeaNotFoundError, IdeaStorageError

logger = logging.getLogger(__name__)

STATUS_ACTIVE = "active"
STATUS_ARCHIVED = "archived"
STATUS_DELETED = "deleted"


class IdeaRepository(Protocol):
    """Collaborator that owns idea documents."""

    def get_idea(self, idea_id: str) -> Dict[str, Any]:
        ...

    def update_idea(self, idea_id: str, updates: Mapping[str, Any]) -> None:
        ...


class JsonIdeaRepository:
    """Store idea documents as JSON files in a directory."""

    SUFFIX = ".json"

    def __init__(self, directory: Union[str, os.PathLike]) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path_for(self, idea_id: str) -> Path:
        if not idea_id or any(sep in idea_id for sep in ("/", "\\")) or idea_id.startswith("."):
            raise IdeaNotFoundError(f"Invalid idea id: {idea_id!r}")
        return self._directory / f"{idea_id}{self.SUFFIX}"

    def _read(self, idea_id: str) -> Dict[str, Any]:
        path = self._path_for(idea_id)
        if not path.exists():
            raise IdeaNotFoundError(f"Idea not found: {idea_id}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise IdeaStorageError(f"Invalid idea file format: {e}") from e
        except OSError as e:
            raise IdeaStorageError(f"Failed to read idea {idea_id}: {e}") from e
        if not isinstance(data, dict):
            raise IdeaStorageError(f"Corrupted idea file: {path}")
        return data

    def _write(self, idea_id: str, data: Mapping[str, Any]) -> None:
        path = self._path_for(idea_id)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            raise IdeaStorageError(f"Failed to save idea {idea_id}: {e}") from e

    def create_idea(self, user_id: str, idea_data: Mapping[str, Any]) -> str:
        """Create an idea document and return its id."""
        idea_id = uuid.uuid4().hex
        now = datetime.now().isoformat()
        document = {
            "userId": user_id,
            "notes": [],
            **dict(idea_data),
            "createdAt": now,
            "updatedAt": now,
            "status": STATUS_ACTIVE,
        }
        self._write(idea_id, document)
        logger.info("Created idea %s", idea_id)
        return idea_id

    def get_idea(self, idea_id: str) -> Dict[str, Any]:
        data = self._read(idea_id)
        if data.get("status") == STATUS_DELETED:
            raise IdeaNotFoundError(f"Idea not found: {idea_id}")
        return {"id": idea_id, **data}

    def update_idea(self, idea_id: str, updates: Mapping[str, Any]) -> None:
        data = self._read(idea_id)
        data.update({key: value for key, value in updates.items() if key != "id"})
        data["updatedAt"] = datetime.now().isoformat()
        self._write(idea_id, data)

    def archive_idea(self, idea_id: str) -> None:
        self.update_idea(idea_id, {"status": STATUS_ARCHIVED})

    def delete_idea(self, idea_id: str) -> None:
        """Soft delete: the document stays on disk but is no longer returned."""
        self.update_idea(idea_id, {"status": STATUS_DELETED})
