import pytest

from app.core.config import settings
from app.core.exceptions import InvalidInput, NotFound
from app.models.memo import MemoStatus
from app.models.memo_approval import ApprovalStatus, MemoApproval
from app.services import approval_chain


def chain_for(approvers):
    return [{"approver_id": user.id, "order": index} for index, user in enumerate(approvers, start=1)]


def test_evaluate_chain_folds_statuses():
    A, R, S, P = (ApprovalStatus.APPROVED, ApprovalStatus.REJECTED,
                  ApprovalStatus.SKIPPED, ApprovalStatus.PENDING)

    assert approval_chain.evaluate_chain([A, A, S]) == MemoStatus.APPROVED
    assert approval_chain.evaluate_chain([A, R, P]) == MemoStatus.REJECTED
    assert approval_chain.evaluate_chain([A, P]) is None
    assert approval_chain.evaluate_chain([]) is None


@pytest.mark.parametrize("value", ["MAYBE", "PENDING", "", None, "approve", "approved", " approved ", " APPROVED ", "Rejected"])
def test_parse_decision_rejects_non_decisions(value):
    with pytest.raises(InvalidInput):
        approval_chain.parse_decision(value)


def test_parse_decision_matches_exact_values_only():
    assert approval_chain.parse_decision("APPROVED") == ApprovalStatus.APPROVED
    assert approval_chain.parse_decision("REJECTED") == ApprovalStatus.REJECTED
    assert approval_chain.parse_decision(ApprovalStatus.SKIPPED) == ApprovalStatus.SKIPPED

    for value in ("approved", " approved ", "APPROVED\n"):
        with pytest.raises(InvalidInput):
            approval_chain.parse_decision(value)


def test_full_chain_approves_memo(db_session, make_memo, creator, approvers):
    memo = make_memo(created_by=creator)

    approval_chain.attach_approvers(db_session, memo.id, chain_for(approvers))
    db_session.refresh(memo)
    assert memo.status == MemoStatus.PENDING_APPROVAL

    steps = approval_chain.list_approvals(db_session, memo.id)
    assert [step.order for step in steps] == [1, 2, 3]
    assert all(step.status == ApprovalStatus.PENDING for step in steps)

    approval_chain.update_approval_step(db_session, steps[0].id, "APPROVED", comments="Fine by me")
    db_session.refresh(memo)
    assert memo.status == MemoStatus.PENDING_APPROVAL

    approval_chain.update_approval_step(db_session, steps[1].id, "SKIPPED")
    db_session.refresh(memo)
    assert memo.status == MemoStatus.PENDING_APPROVAL
    assert memo.approved_at is None

    last = approval_chain.update_approval_step(db_session, steps[2].id, "APPROVED")
    db_session.refresh(memo)
    assert memo.status == MemoStatus.APPROVED
    assert memo.approved_at is not None
    assert last.approved_at is not None

    first = db_session.get(MemoApproval, steps[0].id)
    assert first.comments == "Fine by me"
    assert first.approved_at is not None
    assert db_session.get(MemoApproval, steps[1].id).approved_at is None


def test_rejection_in_the_middle_rejects_memo(db_session, make_memo, creator, approvers):
    memo = make_memo(created_by=creator)
    approval_chain.attach_approvers(db_session, memo.id, chain_for(approvers))
    steps = approval_chain.list_approvals(db_session, memo.id)

    approval_chain.update_approval_step(db_session, steps[0].id, "APPROVED")
    approval_chain.update_approval_step(db_session, steps[1].id, "REJECTED", comments="Budget too high")

    db_session.refresh(memo)
    assert memo.status == MemoStatus.REJECTED
    assert memo.approved_at is None
    assert db_session.get(MemoApproval, steps[2].id).status == ApprovalStatus.PENDING

    # Later approvals are recorded but cannot un-reject the memo
    approval_chain.update_approval_step(db_session, steps[2].id, "APPROVED")
    db_session.refresh(memo)
    assert memo.status == MemoStatus.REJECTED
    assert memo.approved_at is None


def test_rejection_after_approval_rejects_memo(db_session, make_memo, creator, approvers):
    memo = make_memo(created_by=creator)
    approval_chain.attach_approvers(db_session, memo.id, chain_for(approvers[:2]))
    steps = approval_chain.list_approvals(db_session, memo.id)

    approval_chain.update_approval_step(db_session, steps[0].id, "APPROVED")
    approval_chain.update_approval_step(db_session, steps[1].id, "APPROVED")
    db_session.refresh(memo)
    assert memo.status == MemoStatus.APPROVED

    approval_chain.update_approval_step(db_session, steps[1].id, "REJECTED", comments="Changed my mind")
    db_session.refresh(memo)
    assert memo.status == MemoStatus.REJECTED
    assert db_session.get(MemoApproval, steps[1].id).status == ApprovalStatus.REJECTED

    # No way back to APPROVED once rejected
    approval_chain.update_approval_step(db_session, steps[1].id, "APPROVED")
    db_session.refresh(memo)
    assert memo.status == MemoStatus.REJECTED


def test_empty_approver_list_is_rejected(db_session, make_memo):
    memo = make_memo()

    with pytest.raises(InvalidInput):
        approval_chain.attach_approvers(db_session, memo.id, [])

    db_session.refresh(memo)
    assert memo.status == MemoStatus.DRAFT
    assert db_session.query(MemoApproval).count() == 0


def test_invalid_status_changes_nothing(db_session, make_memo, approvers):
    memo = make_memo()
    approval_chain.attach_approvers(db_session, memo.id, chain_for(approvers))
    step = approval_chain.list_approvals(db_session, memo.id)[0]

    with pytest.raises(InvalidInput):
        approval_chain.update_approval_step(db_session, step.id, "MAYBE")

    db_session.refresh(step)
    db_session.refresh(memo)
    assert step.status == ApprovalStatus.PENDING
    assert memo.status == MemoStatus.PENDING_APPROVAL


def test_unknown_approver_aborts_whole_attach(db_session, make_memo, approvers):
    memo = make_memo()
    entries = chain_for(approvers) + [{"approver_id": 99999, "order": 4}]

    with pytest.raises(NotFound):
        approval_chain.attach_approvers(db_session, memo.id, entries)

    db_session.refresh(memo)
    assert memo.status == MemoStatus.DRAFT
    assert db_session.query(MemoApproval).count() == 0


@pytest.mark.parametrize("entries", [
    [{"approver_id": 1, "order": 1}, {"approver_id": 1, "order": 2}],
    [{"approver_id": 1, "order": 1}, {"approver_id": 2, "order": 1}],
    [{"approver_id": 1, "order": 0}],
    [{"approver_id": 1}],
])
def test_malformed_chains_are_rejected(db_session, make_memo, entries):
    memo = make_memo()

    with pytest.raises(InvalidInput):
        approval_chain.attach_approvers(db_session, memo.id, entries)
    assert db_session.query(MemoApproval).count() == 0


def test_malformed_entry_error_keeps_its_cause(db_session, make_memo):
    memo = make_memo()

    with pytest.raises(InvalidInput) as excinfo:
        approval_chain.attach_approvers(db_session, memo.id, [{"approver_id": "someone", "order": 1}])

    assert "Malformed approver entry" in excinfo.value.message
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_attach_to_unknown_memo(db_session, approvers):
    with pytest.raises(NotFound):
        approval_chain.attach_approvers(db_session, 424242, chain_for(approvers))


def test_steps_are_listed_by_order_not_insertion(db_session, make_memo, approvers):
    memo = make_memo()
    entries = [
        {"approver_id": approvers[0].id, "order": 3},
        {"approver_id": approvers[1].id, "order": 1},
        {"approver_id": approvers[2].id, "order": 2},
    ]
    approval_chain.attach_approvers(db_session, memo.id, entries)

    first = approval_chain.list_approvals(db_session, memo.id)
    second = approval_chain.list_approvals(db_session, memo.id)
    assert [step.order for step in first] == [1, 2, 3]
    assert [step.approver_id for step in first] == [approvers[1].id, approvers[2].id, approvers[0].id]
    assert [step.id for step in first] == [step.id for step in second]


def test_step_of_another_memo_is_not_found(db_session, make_memo, approvers):
    memo = make_memo()
    other = make_memo()
    approval_chain.attach_approvers(db_session, memo.id, chain_for(approvers))
    step = approval_chain.list_approvals(db_session, memo.id)[0]

    with pytest.raises(NotFound):
        approval_chain.update_approval_step(db_session, step.id, "APPROVED", memo_id=other.id)

    db_session.refresh(step)
    assert step.status == ApprovalStatus.PENDING


def test_unknown_step_is_not_found(db_session):
    with pytest.raises(NotFound):
        approval_chain.update_approval_step(db_session, 31337, "APPROVED")


def test_sequential_gating_blocks_out_of_order_decisions(db_session, make_memo, approvers, monkeypatch):
    monkeypatch.setattr(settings, "ENFORCE_SEQUENTIAL_APPROVALS", True)
    memo = make_memo()
    approval_chain.attach_approvers(db_session, memo.id, chain_for(approvers))
    steps = approval_chain.list_approvals(db_session, memo.id)

    with pytest.raises(InvalidInput):
        approval_chain.update_approval_step(db_session, steps[2].id, "APPROVED")

    approval_chain.update_approval_step(db_session, steps[0].id, "APPROVED")
    approval_chain.update_approval_step(db_session, steps[1].id, "SKIPPED")
    approval_chain.update_approval_step(db_session, steps[2].id, "APPROVED")

    db_session.refresh(memo)
    assert memo.status == MemoStatus.APPROVED


def test_out_of_order_decisions_allowed_by_default(db_session, make_memo, approvers):
    memo = make_memo()
    approval_chain.attach_approvers(db_session, memo.id, chain_for(approvers))
    steps = approval_chain.list_approvals(db_session, memo.id)

    for step in reversed(steps):
        approval_chain.update_approval_step(db_session, step.id, "APPROVED")

    db_session.refresh(memo)
    assert memo.status == MemoStatus.APPROVED
