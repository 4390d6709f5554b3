"""UI creation functions for the idea notes canvas."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QByteArray, QUrl
from PySide6.QtQml import QQmlApplicationEngine

from .config import ENV_PREFIX, load_config
from .qml import NOTES_CANVAS_QML
from .repository import JsonIdeaRepository
from .workspace import IdeaWorkspace

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".ideacanvas" / "ideas"


def create_workspace_window(workspace: IdeaWorkspace) -> QQmlApplicationEngine:
    """Create and return a QQmlApplicationEngine hosting the notes canvas."""
    engine = QQmlApplicationEngine()
    context = engine.rootContext()
    context.setContextProperty("workspace", workspace)
    context.setContextProperty("noteModel", workspace.model)
    context.setContextProperty("viewport", workspace.viewport)
    context.setContextProperty("gestures", workspace.gestures)
    context.setContextProperty("noteEditor", workspace.editor)
    engine._workspace = workspace
    engine.loadData(
        QByteArray(NOTES_CANVAS_QML.encode("utf-8")),
        QUrl("qrc:/ideacanvas/NotesCanvas.qml"),
    )
    return engine


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ideacanvas", description="Sticky-note canvas for an idea.")
    parser.add_argument("idea_id", nargs="?", default="", help="id of the idea to open")
    parser.add_argument(
        "--data-dir",
        default=os.environ.get(ENV_PREFIX + "DATA_DIR", str(DEFAULT_DATA_DIR)),
        help="directory holding <idea_id>.json documents",
    )
    parser.add_argument(
        "--new",
        metavar="TITLE",
        help="create a new idea with this title and open it",
    )
    parser.add_argument(
        "--smoke",
        action="store_true",
        default=os.environ.get(ENV_PREFIX + "SMOKE") == "1",
        help="load the window and exit",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get(ENV_PREFIX + "LOG_LEVEL", "WARNING"),
        help="logging level (DEBUG, INFO, WARNING, ...)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the notes canvas."""
    from PySide6.QtWidgets import QApplication

    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)

    repository = JsonIdeaRepository(args.data_dir)
    idea_id = args.idea_id
    if args.new:
        idea_id = repository.create_idea("local", {"title": args.new})
        print(f"Created idea {idea_id}")
    if not idea_id and not args.smoke:
        logger.error("No idea ID provided")
        return 2

    workspace = IdeaWorkspace(repository, load_config())
    workspace.closeRequested.connect(app.quit)
    engine = create_workspace_window(workspace)
    if not engine.rootObjects():
        return 1

    if idea_id and not workspace.openIdea(idea_id):
        return 1

    if args.smoke:
        workspace.close()
        return 0

    return app.exec()
