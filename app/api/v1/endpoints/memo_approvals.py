"""Memo approval chain endpoints."""
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.schemas.memo_approval import (
    AttachApproversRequest,
    AttachApproversResponse,
    ApprovalUpdate,
    ApprovalResponse,
)
from app.services import approval_chain

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{memo_id}/approvals", response_model=List[ApprovalResponse])
async def get_memo_approvals(memo_id: int, db: Session = Depends(get_db)):
    """Get the approval chain of a memo in step order"""
    return approval_chain.list_approvals(db, memo_id)


@router.post("/{memo_id}/approvals", response_model=AttachApproversResponse)
async def attach_memo_approvers(
    memo_id: int,
    payload: AttachApproversRequest,
    db: Session = Depends(get_db),
):
    """Attach an ordered list of approvers and send the memo for approval"""
    logger.info(f"Attaching {len(payload.approvers)} approver(s) to memo {memo_id}")
    memo = approval_chain.attach_approvers(db, memo_id, payload.approvers)
    return {
        "message": "Approvers added successfully",
        "memo_id": memo.id,
        "memo_status": memo.status.value,
        "steps": len(payload.approvers),
    }


@router.patch("/{memo_id}/approvals/{approval_id}", response_model=ApprovalResponse)
async def update_memo_approval(
    memo_id: int,
    approval_id: int,
    payload: ApprovalUpdate,
    db: Session = Depends(get_db),
):
    """Record an approver's decision on one step"""
    logger.info(f"Approval {approval_id} on memo {memo_id} -> {payload.status}")
    return approval_chain.update_approval_step(
        db,
        approval_id,
        payload.status,
        comments=payload.comments,
        memo_id=memo_id,
    )
