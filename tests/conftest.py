import random
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, List

import pytest

from revocab.db import VocabDatabase
from revocab.models import SetMetadata, VocabItem, VocabSet


OWNER_ID = "owner-1"


# each test runs on cwd to its temp dir
@pytest.fixture(autouse=True)
def go_to_tmpdir(request):
    """
    Run each test with its tmpdir as the working directory, so that files
    such as `.env` or default database paths never leak between tests.
    """
    tmpdir = request.getfixturevalue("tmpdir")
    sys.path.insert(0, str(tmpdir))
    with tmpdir.as_cwd():
        yield


# --- Database Fixtures ---
@pytest.fixture
def db_path_memory() -> str:
    return ":memory:"


@pytest.fixture
def db_path_file(tmp_path: Path) -> Path:
    return tmp_path / "test_revocab.db"


@pytest.fixture(params=["memory", "file"])
def db_manager(
    request, db_path_memory: str, db_path_file: Path
) -> Generator[VocabDatabase, None, None]:
    """
    Provide a VocabDatabase backed either by memory or by a temporary file
    and close it on teardown.
    """
    if request.param == "memory":
        db_man = VocabDatabase(db_path_memory)
    else:
        db_man = VocabDatabase(db_path_file)
    try:
        yield db_man
    finally:
        db_man.close_connection()


@pytest.fixture
def initialized_db_manager(db_manager: VocabDatabase) -> VocabDatabase:
    db_manager.initialize_schema()
    return db_manager


# --- Model Fixtures ---
@pytest.fixture
def owner_id() -> str:
    return OWNER_ID


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


def _make_items(count: int, prefix: str = "w") -> List[VocabItem]:
    return [
        VocabItem(
            id=f"{prefix}{index}",
            original=f"{prefix}-original-{index}",
            translation=f"{prefix}-translation-{index}",
        )
        for index in range(count)
    ]


@pytest.fixture
def make_items():
    """Factory for items with ids `<prefix>0..` and unique translations."""
    return _make_items


@pytest.fixture
def five_items() -> List[VocabItem]:
    return _make_items(5)


@pytest.fixture
def sample_set() -> VocabSet:
    """A set with five words: three mastered, two tough."""
    return VocabSet(
        id="set-a",
        owner_id=OWNER_ID,
        title="English - Grade 7 - Chapter 3",
        metadata=SetMetadata(language="English", grade="7", chapter="3"),
        items=[
            VocabItem(id="a1", original="house", translation="Haus", correct_count=9, wrong_count=1),
            VocabItem(id="a2", original="tree", translation="Baum", correct_count=5, wrong_count=3),
            VocabItem(id="a3", original="dog", translation="Hund", correct_count=10, wrong_count=0),
            VocabItem(id="a4", original="cat", translation="Katze"),
            VocabItem(id="a5", original="bird", translation="Vogel", correct_count=81, wrong_count=19),
        ],
        created_at=datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
        last_score=60,
    )


@pytest.fixture
def second_set() -> VocabSet:
    return VocabSet(
        id="set-b",
        owner_id=OWNER_ID,
        title="French - Grade 6",
        metadata=SetMetadata(language="French", grade="6"),
        items=[
            VocabItem(id="b1", original="maison", translation="Haus", correct_count=1, wrong_count=4),
            VocabItem(id="b2", original="chat", translation="Katze", correct_count=20, wrong_count=0),
        ],
        created_at=datetime(2024, 2, 1, 8, 30, tzinfo=timezone.utc),
        last_score=None,
    )
