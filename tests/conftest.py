"""
Shared pytest fixtures for sqldiagnostics tests.
"""

import json
import sys
from pathlib import Path

import pytest

# Ensure src is in python path
PROJECT_ROOT = Path(__file__).parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))


SAMPLE_CATALOG = {
    "querysource": {
        "sqlserverversion": "2019",
        "name": "Test diagnostics",
        "author": "DBA team",
    },
    "queries": [
        {
            "name": "Single Value",
            "description": "Returns one value",
            "query": "SELECT 5 AS X",
            "notes": "Smoke test",
        },
        {
            "name": "Broken",
            "description": "Always fails",
            "query": "SELECT FROM nowhere",
            "notes": "",
        },
        {
            "name": "Multi Row",
            "description": "Two rows",
            "query": "SELECT 1 AS a UNION ALL SELECT 2",
            "notes": "Line one\nline two",
        },
    ],
}


def write_catalog(path: Path, data: dict) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def sample_catalog_data() -> dict:
    """A fresh copy of the sample catalog document."""
    return json.loads(json.dumps(SAMPLE_CATALOG))


@pytest.fixture
def catalog_file(tmp_path, sample_catalog_data) -> Path:
    """Sample catalog written to a temporary sql_queries.json."""
    return write_catalog(tmp_path / "sql_queries.json", sample_catalog_data)
