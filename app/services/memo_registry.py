"""
Memo registry: create, list, fetch and edit memos.

Status changes driven by approvals live in ``approval_chain``; this module
only allows the direct SENT / ARCHIVED edits.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app import crud
from app.core.config import settings
from app.core.exceptions import InvalidInput, NotFound, UpstreamFailure
from app.models.memo import Memo, MemoRecipient, MemoType, MemoPriority, MemoStatus
from app.schemas.memo import MemoCreate, MemoUpdate
from app.services.reference_numbers import allocate_reference_number

logger = logging.getLogger(__name__)

DIRECT_STATUS_EDITS = (MemoStatus.SENT, MemoStatus.ARCHIVED)


def parse_filter(enum_cls, value):
    if value is None or value == "" or value == "All":
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as e:
        raise InvalidInput(f"Unknown {enum_cls.__name__} filter: {value}") from e


def create_memo(db: Session, memo_in: MemoCreate, year: Optional[int] = None) -> Memo:
    if not memo_in.subject or not memo_in.subject.strip() or not memo_in.body or not memo_in.body.strip():
        raise InvalidInput("Subject, body, type, and creator are required")

    if not crud.user.get(db, memo_in.created_by_id):
        raise NotFound("Creator not found")
    if memo_in.department_id is not None and not crud.department.get(db, memo_in.department_id):
        raise NotFound("Department not found")

    recipient_ids = list(dict.fromkeys(memo_in.recipient_ids))
    found = {user.id for user in crud.user.get_many(db, ids=recipient_ids)}
    missing = [user_id for user_id in recipient_ids if user_id not in found]
    if missing:
        raise NotFound(f"Recipient(s) not found: {', '.join(str(user_id) for user_id in missing)}")

    year = year or datetime.utcnow().year
    attempts = max(1, settings.REFERENCE_ALLOCATION_RETRIES)
    for attempt in range(1, attempts + 1):
        try:
            reference_number = allocate_reference_number(db, year)
            memo = Memo(
                reference_number=reference_number,
                subject=memo_in.subject,
                body=memo_in.body,
                type=memo_in.type,
                priority=memo_in.priority or MemoPriority.MEDIUM,
                status=MemoStatus.DRAFT,
                department_id=memo_in.department_id,
                created_by_id=memo_in.created_by_id,
            )
            memo.recipients = [MemoRecipient(user_id=user_id) for user_id in recipient_ids]
            db.add(memo)
            db.commit()
            break
        except (StaleDataError, IntegrityError) as e:
            db.rollback()
            logger.warning(f"Reference number collision on attempt {attempt}/{attempts}: {e}")
    else:
        raise UpstreamFailure("Could not allocate a unique reference number")

    logger.info(f"Created memo {memo.reference_number} ({memo.type.value}) by user {memo.created_by_id}")
    return crud.memo.get_with_children(db, memo_id=memo.id)


def get_memo(db: Session, memo_id: int) -> Memo:
    memo = crud.memo.get_with_children(db, memo_id=memo_id)
    if not memo:
        raise NotFound("Memo not found")
    return memo


def list_memos(
    db: Session,
    search: Optional[str] = None,
    memo_type=None,
    status=None,
) -> List[Dict[str, Any]]:
    memos = crud.memo.get_filtered(
        db,
        search=search.strip() if search else None,
        memo_type=parse_filter(MemoType, memo_type),
        status=parse_filter(MemoStatus, status),
    )
    return [summarize_memo(memo) for memo in memos]


def summarize_memo(memo: Memo) -> Dict[str, Any]:
    """Flatten a memo into the row shown by the registry listing."""
    departments = []
    for recipient in memo.recipients:
        name = recipient.user.department_name if recipient.user else None
        if name and name not in departments:
            departments.append(name)

    return {
        "id": memo.id,
        "reference_number": memo.reference_number,
        "subject": memo.subject,
        "type": memo.type,
        "priority": memo.priority,
        "status": memo.status,
        "created_by": memo.department.name if memo.department else memo.created_by.full_name,
        "department": memo.department.name if memo.department else None,
        "recipient_departments": ", ".join(departments) or "All Departments",
        "created_at": memo.created_at,
        "updated_at": memo.updated_at,
    }


def update_memo(db: Session, memo_id: int, memo_in: MemoUpdate) -> Memo:
    memo = crud.memo.get(db, memo_id)
    if not memo:
        raise NotFound("Memo not found")

    changes = memo_in.model_dump(exclude_unset=True)
    for field in ("subject", "body"):
        if field in changes and (changes[field] is None or not changes[field].strip()):
            raise InvalidInput(f"{field} cannot be empty")
    for field in ("type", "priority"):
        if field in changes and changes[field] is None:
            raise InvalidInput(f"{field} cannot be empty")

    if "status" in changes:
        new_status = changes["status"]
        if new_status not in DIRECT_STATUS_EDITS:
            raise InvalidInput("Only SENT or ARCHIVED can be set directly; approvals drive every other status")

    if changes.get("department_id") is not None and not crud.department.get(db, changes["department_id"]):
        raise NotFound("Department not found")

    crud.memo.update(db, db_obj=memo, obj_in=changes)
    logger.info(f"Updated memo {memo.reference_number}: {', '.join(sorted(changes)) or 'no changes'}")
    return crud.memo.get_with_children(db, memo_id=memo.id)
