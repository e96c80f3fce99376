"""Shared fixtures for the jinspect test suite."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from classfile_builder import sample_class  # noqa: E402
from shared.config import InspectConfig  # noqa: E402
from shared.logger import InspectLogger  # noqa: E402


@pytest.fixture
def sample_bytes():
    return sample_class()


@pytest.fixture
def sample_path(tmp_path, sample_bytes):
    path = tmp_path / "App.class"
    path.write_bytes(sample_bytes)
    return path


@pytest.fixture
def config():
    return InspectConfig()


@pytest.fixture
def logger():
    return InspectLogger("tests", log_level="DEBUG", console_output=False)
