"""Run Qt headless and share one QGuiApplication across the session."""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtGui import QGuiApplication


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """QImage painting and font lookup need a QGuiApplication."""
    app = QGuiApplication.instance() or QGuiApplication([])
    yield app
