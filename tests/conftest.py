"""Pytest configuration for tests.

No sys.path hacks - tests import from the installed schemaunion package.
"""

import json
import os
from pathlib import Path

import pytest

FIXTURES = Path(__file__).resolve().parent.parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def animal_schema_path() -> Path:
    return FIXTURES / "animal" / "oneOfAsRoot.json"


@pytest.fixture
def animal_schema(animal_schema_path) -> dict:
    with open(animal_schema_path, 'r', encoding='utf-8') as f:
        return json.load(f)


@pytest.fixture
def animal(animal_schema_path):
    """The Animal union (Dog | Cat) generated from the fixture schema."""
    from schemaunion.api import generate_union
    return generate_union(animal_schema_path)


def pytest_sessionfinish(session, exitstatus):
    """Best-effort cleanup for basetemp on Windows."""
    if os.name != "nt":
        return
    basetemp = getattr(session.config.option, "basetemp", None)
    if not basetemp or not Path(basetemp).exists():
        return
    try:
        import shutil
        shutil.rmtree(basetemp)
    except OSError:
        import warnings
        warnings.warn(f"Could not remove basetemp: {basetemp}")
