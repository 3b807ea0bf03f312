import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    # Signals, timers and widgets need an application object, not a running loop.
    app = QApplication.instance() or QApplication([])
    yield app
