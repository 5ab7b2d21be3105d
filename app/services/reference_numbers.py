"""
Reference number allocation for memos and documents.

Reference numbers look like ``MEM-2025-004``: prefix, four digit year and
a per-year sequence left-padded to three digits. Each scope keeps its own
counter: memos count in the ``memo`` scope, while ``DOC-`` and ``EXT-DOC-``
references draw from one shared ``document`` scope. The counter lives in a
``reference_sequences`` row per scope and year whose version column makes
two concurrent allocations collide instead of silently handing out the same
number; the caller rolls back and retries on collision.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app import crud
from app.core.config import settings
from app.models.reference_sequence import ReferenceSequence

logger = logging.getLogger(__name__)

MEMO_SCOPE = "memo"
DOCUMENT_SCOPE = "document"


def format_reference_number(year: int, sequence: int, prefix: Optional[str] = None) -> str:
    prefix = prefix or settings.REFERENCE_PREFIX
    return f"{prefix}-{year:04d}-{sequence:03d}"


def reference_prefix_for_year(year: int, prefix: Optional[str] = None) -> str:
    return f"{prefix or settings.REFERENCE_PREFIX}-{year:04d}-"


def _existing_count(db: Session, scope: str, year: int) -> int:
    if scope == DOCUMENT_SCOPE:
        return sum(
            crud.document.count_with_reference_prefix(db, prefix=reference_prefix_for_year(year, prefix))
            for prefix in (settings.DOCUMENT_REFERENCE_PREFIX, settings.EXTERNAL_DOCUMENT_REFERENCE_PREFIX)
        )
    return crud.memo.count_with_reference_prefix(db, prefix=reference_prefix_for_year(year))


def next_sequence(db: Session, year: int, scope: str = MEMO_SCOPE) -> int:
    """
    Increment and return the counter for ``scope`` and ``year``.

    The first allocation of a year seeds the counter from the rows that
    already carry that year's prefix, so imported data keeps its numbering.
    Flushes but does not commit; a concurrent writer surfaces as
    ``StaleDataError`` (update) or ``IntegrityError`` (first insert).
    """
    sequence = (
        db.query(ReferenceSequence)
        .filter(ReferenceSequence.scope == scope, ReferenceSequence.year == year)
        .first()
    )
    if sequence is None:
        existing = _existing_count(db, scope, year)
        logger.info(f"Starting {scope} reference sequence for {year} at {existing}")
        sequence = ReferenceSequence(scope=scope, year=year, last_value=existing)
        db.add(sequence)
    sequence.last_value = sequence.last_value + 1
    db.flush()
    return sequence.last_value


def allocate_reference_number(db: Session, year: Optional[int] = None) -> str:
    year = year or datetime.utcnow().year
    return format_reference_number(year, next_sequence(db, year))


def allocate_document_reference(db: Session, is_external: bool = False, year: Optional[int] = None) -> str:
    """``DOC-YYYY-NNN`` or ``EXT-DOC-YYYY-NNN``, numbered from the shared document counter."""
    year = year or datetime.utcnow().year
    prefix = settings.EXTERNAL_DOCUMENT_REFERENCE_PREFIX if is_external else settings.DOCUMENT_REFERENCE_PREFIX
    return format_reference_number(year, next_sequence(db, year, scope=DOCUMENT_SCOPE), prefix=prefix)
