from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.memo import Memo, MemoRecipient, MemoType, MemoStatus
from app.models.memo_approval import MemoApproval
from app.models.memo_comment import MemoComment
from app.models.user import User
from app.schemas.memo import MemoCreate, MemoUpdate


class CRUDMemo(CRUDBase[Memo, MemoCreate, MemoUpdate]):
    def get_with_children(self, db: Session, *, memo_id: int) -> Optional[Memo]:
        """Fetch one memo with every child collection eagerly loaded."""
        return (
            db.query(Memo)
            .options(
                selectinload(Memo.created_by).selectinload(User.department),
                selectinload(Memo.department),
                selectinload(Memo.recipients).selectinload(MemoRecipient.user).selectinload(User.department),
                selectinload(Memo.approvals).selectinload(MemoApproval.approver).selectinload(User.department),
                selectinload(Memo.comments).selectinload(MemoComment.user).selectinload(User.department),
            )
            .filter(Memo.id == memo_id)
            .first()
        )

    def get_for_update(self, db: Session, *, memo_id: int) -> Optional[Memo]:
        """Row-lock a memo for the rest of the current transaction."""
        return db.query(Memo).filter(Memo.id == memo_id).with_for_update().first()

    def get_filtered(
        self,
        db: Session,
        *,
        search: Optional[str] = None,
        memo_type: Optional[MemoType] = None,
        status: Optional[MemoStatus] = None,
    ) -> List[Memo]:
        query = db.query(Memo).options(
            selectinload(Memo.created_by),
            selectinload(Memo.department),
            selectinload(Memo.recipients).selectinload(MemoRecipient.user).selectinload(User.department),
        )
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(Memo.subject.ilike(pattern), Memo.reference_number.ilike(pattern))
            )
        if memo_type is not None:
            query = query.filter(Memo.type == memo_type)
        if status is not None:
            query = query.filter(Memo.status == status)
        return query.order_by(Memo.created_at.desc(), Memo.id.desc()).all()

    def get_recently_updated(self, db: Session, *, limit: int = 3) -> List[Memo]:
        return (
            db.query(Memo)
            .options(selectinload(Memo.created_by), selectinload(Memo.department))
            .order_by(Memo.updated_at.desc(), Memo.id.desc())
            .limit(limit)
            .all()
        )

    def count_by_status(self, db: Session, *, status: MemoStatus) -> int:
        return db.query(Memo).filter(Memo.status == status).count()

    def count_with_reference_prefix(self, db: Session, *, prefix: str) -> int:
        return db.query(Memo).filter(Memo.reference_number.like(f"{prefix}%")).count()


memo = CRUDMemo(Memo)
