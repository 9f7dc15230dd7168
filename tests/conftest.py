"""
pytest configuration for the task-request pipeline tests.

Adds src directory to Python path for imports and provides the shared
platform fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from core.logging.context import clear_log_context  # noqa: E402


@pytest.fixture(autouse=True)
def _clean_log_context():
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def employees():
    """Employee collection as returned by /api/masterdata/employee."""
    return [
        {"id": "E1", "userName": "alice", "firstname": "Alice"},
        {"id": "E2", "userName": "bob", "firstname": "Bob"},
    ]


@pytest.fixture
def equipments():
    """Equipment collection as returned by /api/assetmanagement/equipment."""
    return [
        {"id": "Q7", "uniqueNumber": "UIN-004094"},
        {"id": "Q8", "uniqueNumber": "UIN-004095"},
    ]


@pytest.fixture
def code_element_payload():
    """Flat code element list: module root -> kind -> grouping -> types."""
    return [
        {"id": 1, "code": "TR-KIND", "name": "Task request kinds"},
        {"id": 2, "parentId": 1, "name": "Onderhoud/herstelling"},
        {"id": 3, "parentId": 2, "name": "Types"},
        {"id": 4, "parentId": 3, "name": "Elektriciteit"},
        {"id": 5, "parentId": 3, "name": "Sanitair"},
        {"id": 6, "parentId": 1, "name": "Inspectie"},
        {"id": 10, "code": "OTHER", "name": "Other module"},
        {"id": 11, "parentId": 99, "name": "Orphan"},
    ]


@pytest.fixture
def module_metadata():
    """getmetadatabymodules/{module} response."""
    return {
        "TR-STATUS": {"hierarchyType": "Flat"},
        "TR-KIND": {"hierarchyType": "SortKindAndType"},
    }
