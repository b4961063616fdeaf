"""Shared fixtures for stage tests."""

from unittest.mock import MagicMock

import pytest

from s3_stage.config import StageConfig
from tests.helpers import make_config


@pytest.fixture
def config() -> StageConfig:
    return make_config()


@pytest.fixture
def mock_store() -> MagicMock:
    """Store double that records every put."""
    return MagicMock()
