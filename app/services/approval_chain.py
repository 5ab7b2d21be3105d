"""
Memo approval chain engine.

A memo's chain is the ordered list of MemoApproval steps attached to it.
Memo status only moves through this module:

* attaching approvers puts the memo in PENDING_APPROVAL,
* any single REJECTED step rejects the memo immediately, including a
  memo the chain had already approved,
* once every step is APPROVED or SKIPPED the memo is APPROVED and
  ``approved_at`` is stamped.

Each step update runs in one transaction with the owning memo row locked,
so two approvers acting on the same chain cannot lose each other's
recomputation.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app import crud
from app.core.config import settings
from app.core.exceptions import InvalidInput, NotFound
from app.models.memo import Memo, MemoStatus
from app.models.memo_approval import MemoApproval, ApprovalStatus
from app.schemas.memo_approval import ApproverEntry

logger = logging.getLogger(__name__)

DECISION_STATUSES = (ApprovalStatus.APPROVED, ApprovalStatus.REJECTED, ApprovalStatus.SKIPPED)
PASSING_STATUSES = (ApprovalStatus.APPROVED, ApprovalStatus.SKIPPED)
REJECTABLE_STATUSES = (MemoStatus.PENDING_APPROVAL, MemoStatus.APPROVED)


def parse_decision(value) -> ApprovalStatus:
    """
    Map a caller-supplied status onto one of the three decision values.

    Matching is exact: "approved" or " APPROVED " is not a decision.
    """
    candidate = None
    if isinstance(value, ApprovalStatus):
        candidate = value
    elif isinstance(value, str) and value in ApprovalStatus.__members__:
        candidate = ApprovalStatus[value]
    if candidate not in DECISION_STATUSES:
        raise InvalidInput("Valid status is required (APPROVED, REJECTED, SKIPPED)")
    return candidate


def evaluate_chain(statuses: Iterable[ApprovalStatus]) -> Optional[MemoStatus]:
    """
    Fold a chain's step statuses into the memo status they imply.

    Returns REJECTED if any step is rejected, APPROVED if every step passed
    (SKIPPED counts as a pass) and None when the chain is still open.
    """
    statuses = list(statuses)
    if not statuses:
        return None
    if ApprovalStatus.REJECTED in statuses:
        return MemoStatus.REJECTED
    if all(status in PASSING_STATUSES for status in statuses):
        return MemoStatus.APPROVED
    return None


def _validate_entries(approvers) -> List[ApproverEntry]:
    if not approvers:
        raise InvalidInput("Approvers array is required")

    entries = []
    for raw in approvers:
        if isinstance(raw, ApproverEntry):
            entry = raw
        elif isinstance(raw, dict):
            try:
                entry = ApproverEntry(**raw)
            except (TypeError, ValueError) as e:
                raise InvalidInput(f"Malformed approver entry: {raw}") from e
        else:
            raise InvalidInput(f"Malformed approver entry: {raw}")
        if entry.order < 1:
            raise InvalidInput(f"Approver order must be a positive integer, got {entry.order}")
        entries.append(entry)

    approver_ids = [entry.approver_id for entry in entries]
    if len(set(approver_ids)) != len(approver_ids):
        raise InvalidInput("Each approver may appear only once in a chain")
    orders = [entry.order for entry in entries]
    if len(set(orders)) != len(orders):
        raise InvalidInput("Approval order values must be unique")
    return entries


def attach_approvers(db: Session, memo_id: int, approvers) -> Memo:
    """
    Create one PENDING step per approver and move the memo to PENDING_APPROVAL.

    Either the whole chain is created or nothing is: every entry and every
    approver is checked before the first row is written.
    """
    entries = _validate_entries(approvers)

    memo = crud.memo.get_for_update(db, memo_id=memo_id)
    if not memo:
        raise NotFound("Memo not found")

    wanted = {entry.approver_id for entry in entries}
    found = {user.id for user in crud.user.get_many(db, ids=list(wanted))}
    missing = sorted(wanted - found)
    if missing:
        raise NotFound(f"Approver(s) not found: {', '.join(str(user_id) for user_id in missing)}")

    try:
        crud.memo_approval.add_chain(db, memo_id=memo.id, entries=entries)
        memo.status = MemoStatus.PENDING_APPROVAL
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(memo)
    logger.info(f"Attached {len(entries)} approver(s) to memo {memo.reference_number}, status now {memo.status.value}")
    return memo


def list_approvals(db: Session, memo_id: int) -> List[MemoApproval]:
    if not crud.memo.get(db, memo_id):
        raise NotFound("Memo not found")
    return crud.memo_approval.get_by_memo(db, memo_id=memo_id)


def _check_sequence(chain: List[MemoApproval], step: MemoApproval) -> None:
    blocking = [
        other for other in chain
        if other.step_order < step.step_order and other.status == ApprovalStatus.PENDING
    ]
    if blocking:
        orders = ", ".join(str(other.step_order) for other in blocking)
        raise InvalidInput(f"Approval step {step.step_order} is waiting on earlier step(s): {orders}")


def update_approval_step(
    db: Session,
    step_id: int,
    status,
    comments: Optional[str] = None,
    memo_id: Optional[int] = None,
) -> MemoApproval:
    """
    Record one approver's decision and recompute the memo status.

    The owning memo is always taken from the step itself. A caller-supplied
    ``memo_id`` that does not own the step is rejected as NotFound.
    """
    decision = parse_decision(status)

    step = crud.memo_approval.get(db, step_id)
    if not step or (memo_id is not None and step.memo_id != memo_id):
        raise NotFound("Approval not found")

    try:
        memo = crud.memo.get_for_update(db, memo_id=step.memo_id)
        if not memo:
            raise NotFound("Memo not found")

        # Re-read the step under the memo lock
        db.refresh(step)

        if settings.ENFORCE_SEQUENTIAL_APPROVALS:
            _check_sequence(crud.memo_approval.get_by_memo(db, memo_id=memo.id), step)

        step.status = decision
        step.comments = comments
        if decision == ApprovalStatus.APPROVED:
            step.approved_at = datetime.utcnow()
        db.flush()

        # A rejection also overturns an approved memo; REJECTED is never left
        if decision == ApprovalStatus.REJECTED and memo.status in REJECTABLE_STATUSES:
            memo.status = MemoStatus.REJECTED
        elif memo.status == MemoStatus.PENDING_APPROVAL:
            chain = crud.memo_approval.get_by_memo(db, memo_id=memo.id)
            if evaluate_chain(link.status for link in chain) == MemoStatus.APPROVED:
                memo.status = MemoStatus.APPROVED
                memo.approved_at = datetime.utcnow()
        else:
            logger.warning(
                f"Memo {memo.reference_number} is {memo.status.value}; "
                f"decision on step {step.id} recorded without a status change"
            )

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(step)
    logger.info(
        f"Approval step {step.id} (order {step.step_order}) on memo {memo.reference_number} "
        f"set to {decision.value}; memo status {memo.status.value}"
    )
    return step
