from typing import List
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.memo_approval import MemoApproval, ApprovalStatus
from app.models.user import User
from app.schemas.memo_approval import ApproverEntry, ApprovalUpdate


class CRUDMemoApproval(CRUDBase[MemoApproval, ApproverEntry, ApprovalUpdate]):
    def get_by_memo(self, db: Session, *, memo_id: int) -> List[MemoApproval]:
        return (
            db.query(MemoApproval)
            .options(selectinload(MemoApproval.approver).selectinload(User.department))
            .filter(MemoApproval.memo_id == memo_id)
            .order_by(MemoApproval.step_order, MemoApproval.id)
            .all()
        )

    def add_chain(self, db: Session, *, memo_id: int, entries: List[ApproverEntry]) -> List[MemoApproval]:
        """Stage one PENDING step per entry. The caller owns the commit."""
        steps = []
        for entry in entries:
            step = MemoApproval(
                memo_id=memo_id,
                approver_id=entry.approver_id,
                step_order=entry.order,
                status=ApprovalStatus.PENDING,
            )
            db.add(step)
            steps.append(step)
        db.flush()
        return steps


memo_approval = CRUDMemoApproval(MemoApproval)
