"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.fixtures.test_inputs import (
    get_simple_project_inputs,
    get_sample_project_inputs,
)


@pytest.fixture
def simple_project():
    """Hand-checkable project (see get_simple_project_inputs)."""
    return get_simple_project_inputs()


@pytest.fixture
def sample_project():
    """Full sample deal."""
    return get_sample_project_inputs()
