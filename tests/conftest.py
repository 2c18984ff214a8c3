"""Shared pytest fixtures for unit, integration, and e2e tests.

This module provides:
- Temporary directory fixtures for file I/O testing
- A fresh EventProcessor per test
- Configuration fixtures for parameter testing
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any, Dict, Generator, List

import pytest
import yaml

from rxreport.processor import EventProcessor
from tests.fixtures.sample_input import CANONICAL_LINES


@pytest.fixture
def tmp_test_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that's cleaned up after each test.

    Yields
    ------
    Path
        Absolute path to temporary directory (automatically deleted after test)
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def processor() -> EventProcessor:
    """Provide an empty processor; each run starts with no patients."""
    return EventProcessor()


@pytest.fixture
def canonical_lines() -> List[str]:
    """Event stream from the business requirements example.

    Real-world significance:
    - Exercises create, fill, return, fill-before-create and a patient that
      never qualifies for the report
    """
    return list(CANONICAL_LINES)


@pytest.fixture
def default_config() -> Dict[str, Any]:
    """Provide a minimal configuration matching the production schema."""
    return {
        "report": {"order": "activity"},
        "logging": {"level": "WARNING", "log_dir": None},
    }


@pytest.fixture
def config_file(tmp_test_dir: Path, default_config: Dict[str, Any]) -> Path:
    """Write the default configuration to a temporary parameters.yaml."""
    config_path = tmp_test_dir / "parameters.yaml"
    with open(config_path, "w") as f:
        yaml.dump(default_config, f)
    return config_path
