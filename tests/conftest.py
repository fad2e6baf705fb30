# Shared fixtures. Provides a fallback 'qtbot' fixture if pytest-qt is not
# installed; widget tests still perform basic lifecycle operations. If pytest-qt
# is installed, its fixture wins.

import sys
import os
import contextlib

import matplotlib

matplotlib.use("Agg")
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest  # noqa: E402

try:  # If pytest-qt present, do nothing (its fixture will be used)
    import pytestqt  # type: ignore  # noqa: F401
except Exception:  # pragma: no cover
    try:
        from PyQt6.QtWidgets import QApplication
    except Exception:  # pragma: no cover
        QApplication = None  # type: ignore

    @pytest.fixture
    def qtbot():  # type: ignore
        if QApplication is None:
            pytest.skip("PyQt6 not available")
        app = QApplication.instance() or QApplication(sys.argv)  # type: ignore  # noqa: F841
        widgets = []

        class Bot:
            def addWidget(self, w):  # mimic pytest-qt API subset
                widgets.append(w)

            @contextlib.contextmanager
            def waitSignal(self, *args, **kwargs):  # no-op stub
                yield

        return Bot()


class FakeClock:
    """Manually advanced clock (seconds) for deterministic transition timing."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


class RecordingSurface:
    """RenderSurface that keeps every drawn scene."""

    def __init__(self) -> None:
        self.scenes = []

    def draw(self, scene) -> None:
        self.scenes.append(scene)

    @property
    def last(self):
        return self.scenes[-1] if self.scenes else None


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def sales():
    return [
        {"year": 2020, "sales": 10},
        {"year": 2021, "sales": 20},
        {"year": 2020, "sales": 10},
    ]
