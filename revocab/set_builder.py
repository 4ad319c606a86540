"""
Creates new vocabulary sets from extraction results.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .extraction import ExtractionResult
from .models import SetMetadata, VocabItem, VocabSet

logger = logging.getLogger(__name__)


def merge_metadata(results: Sequence[ExtractionResult]) -> SetMetadata:
    """
    Combine page metadata from several extraction results.

    Each field takes the first non-empty value in page order.
    """
    merged = {"language": "", "grade": "", "chapter": "", "page": ""}
    for result in results:
        for field_name in merged:
            value = getattr(result.metadata, field_name)
            if not merged[field_name] and value:
                merged[field_name] = value
    return SetMetadata(**merged)


def generate_title(metadata: SetMetadata, now: Optional[datetime] = None) -> str:
    """
    Build a display title such as "English - Grade 7 - Chapter 3 - (p. 42)".

    Falls back to "Vocabulary from <date>" when no metadata is known.
    """
    parts: List[str] = []
    if metadata.language:
        parts.append(metadata.language)
    if metadata.grade:
        parts.append(f"Grade {metadata.grade}")
    if metadata.chapter:
        parts.append(f"Chapter {metadata.chapter}")
    if metadata.page:
        parts.append(f"(p. {metadata.page})")

    title = " - ".join(parts)
    if title:
        return title
    now = now or datetime.now(timezone.utc)
    return f"Vocabulary from {now.strftime('%Y-%m-%d')}"


def build_set_from_extractions(
    results: Sequence[ExtractionResult],
    owner_id: str,
    title: Optional[str] = None,
    now: Optional[datetime] = None,
) -> VocabSet:
    """
    Create a new set from one or more extraction results.

    Vocabulary from all pages is concatenated in order into fresh items
    with zero counters.

    Raises:
        ValueError: If no vocabulary was found in any result.
    """
    items = [
        VocabItem(original=pair.original, translation=pair.translation)
        for result in results
        for pair in result.vocabulary
    ]
    if not items:
        raise ValueError("No vocabulary was found in the extraction results.")

    now = now or datetime.now(timezone.utc)
    metadata = merge_metadata(results)
    vocab_set = VocabSet(
        owner_id=owner_id,
        title=title or generate_title(metadata, now),
        metadata=metadata,
        items=items,
        created_at=now,
    )
    logger.info(
        f"Built set '{vocab_set.title}' with {len(items)} items "
        f"from {len(results)} extraction result(s)."
    )
    return vocab_set
