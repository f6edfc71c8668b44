import os
import pytest

QT_TESTS_ENV_VAR = "INPUT_MASK_QT_TESTS"


def pytest_runtest_setup(item):
    # Qt line edits need a display (or QT_QPA_PLATFORM=offscreen); opt in explicitly.
    if item.get_closest_marker("pyqt_required") and not os.getenv(QT_TESTS_ENV_VAR):
        pytest.skip(f"{QT_TESTS_ENV_VAR} not set; skipping QLineEdit adapter test")
