import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from finance_tracker.db import RecordStore


@pytest.fixture
def store(tmp_path):
    return RecordStore(tmp_path / "tracker.db")


@pytest.fixture
def user(store):
    return store.create_user("alice", "not-a-real-hash")
