"""UI creation functions for WorkflowDraw."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from PySide6.QtCore import QUrl
from PySide6.QtQml import QQmlApplicationEngine

from .config import EditorSettings
from .model import DiagramModel
from .qml import QML_DIR, WORKFLOWDRAW_QML_PATH

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Configure console logging for the application."""
    level = logging.DEBUG if debug else logging.INFO

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)


def create_workflowdraw_window(diagram_model: DiagramModel) -> QQmlApplicationEngine:
    """Create and return a QQmlApplicationEngine hosting the WorkflowDraw UI."""
    engine = QQmlApplicationEngine()
    engine.rootContext().setContextProperty("diagramModel", diagram_model)
    engine.addImportPath(str(QML_DIR))
    engine.load(QUrl.fromLocalFile(str(WORKFLOWDRAW_QML_PATH)))
    return engine


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="WorkflowDraw diagram editor")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--smoke",
        action="store_true",
        help="Load the window and exit immediately",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for WorkflowDraw."""
    from PySide6.QtWidgets import QApplication

    args = _parse_args(sys.argv[1:] if argv is None else argv)
    setup_logging(debug=args.debug)
    smoke_mode = args.smoke or os.environ.get("WORKFLOWDRAW_SMOKE") == "1"

    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)

    settings = EditorSettings.from_env()
    diagram_model = DiagramModel(settings=settings)
    engine = create_workflowdraw_window(diagram_model)
    if not engine.rootObjects():
        logger.error("Failed to load %s", WORKFLOWDRAW_QML_PATH)
        return 1

    if smoke_mode:
        return 0

    return app.exec()
