"""Registry-wide counters and recent activity for the dashboard."""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app import crud
from app.models.memo import MemoStatus
from app.models.document import DocumentStatus

logger = logging.getLogger(__name__)

RECENT_LIMIT = 3


def get_stats(db: Session, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Totals plus the most recently touched documents and memos.

    ``completed_today`` counts documents archived since midnight (UTC).
    """
    now = now or datetime.utcnow()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

    recent_documents = [
        {
            "id": document.id,
            "title": document.title,
            "department": document.current_department_name,
            "status": document.status,
            "updated_at": document.updated_at,
        }
        for document in crud.document.get_recently_updated(db, limit=RECENT_LIMIT)
    ]
    recent_memos = [
        {
            "id": memo.id,
            "subject": memo.subject,
            "type": memo.type,
            "sender": memo.department.name if memo.department else memo.created_by.full_name,
            "priority": memo.priority,
            "updated_at": memo.updated_at,
        }
        for memo in crud.memo.get_recently_updated(db, limit=RECENT_LIMIT)
    ]

    stats = {
        "total_documents": crud.document.count_by_status(db),
        "pending_memos": crud.memo.count_by_status(db, status=MemoStatus.PENDING_APPROVAL),
        "in_transit_documents": crud.document.count_by_status(db, status=DocumentStatus.IN_TRANSIT),
        "completed_today": crud.document.count_updated_since(db, status=DocumentStatus.ARCHIVED, since=midnight),
        "recent_documents": recent_documents,
        "recent_memos": recent_memos,
    }
    logger.debug(
        f"Dashboard stats: {stats['total_documents']} documents, {stats['pending_memos']} memos pending"
    )
    return stats
