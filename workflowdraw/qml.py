"""QML UI location for WorkflowDraw."""

from __future__ import annotations

from pathlib import Path

QML_DIR = Path(__file__).with_name("qml_ui")
WORKFLOWDRAW_QML_PATH = QML_DIR / "WorkflowDrawWindow.qml"

__all__ = [
    "QML_DIR",
    "WORKFLOWDRAW_QML_PATH",
]
