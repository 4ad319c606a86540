from pathlib import Path
from typing import List, Optional, Tuple

from revocab.db.database import VocabDatabase
from revocab.exceptions import ExtractionFileError
from revocab.models import VocabSet
from revocab.parser import (
    ExtractionFileLoader,
    ExtractionLoaderConfig,
    find_extraction_files,
)
from revocab.set_builder import build_set_from_extractions
from revocab.study_manager import StudySessionManager


def ingest_logic(
    db_path: Path,
    owner_id: str,
    source: Path,
    title: Optional[str] = None,
    fail_fast: bool = False,
) -> Tuple[Optional[VocabSet], List[ExtractionFileError]]:
    """
    Build one new set from the extraction files at `source` and store it
    at the top of the owner's library.

    Returns:
        (new_set, errors): `new_set` is None when no file could be loaded.

    Raises:
        ExtractionFileError: On the first bad file when `fail_fast` is set.
        ValueError: If the loaded files contain no vocabulary.
    """
    loader = ExtractionFileLoader(ExtractionLoaderConfig(fail_fast=fail_fast))
    results, errors = loader.load_files(find_extraction_files(source))
    if not results:
        return None, errors

    vocab_set = build_set_from_extractions(results, owner_id=owner_id, title=title)
    with VocabDatabase(db_path=db_path) as db_manager:
        db_manager.initialize_schema()
        manager = StudySessionManager(db_manager=db_manager, owner_id=owner_id)
        manager.load()
        manager.add_set(vocab_set)
    return vocab_set, errors
