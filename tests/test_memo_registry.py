import pytest
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import InvalidInput, NotFound, UpstreamFailure
from app.models.memo import Memo, MemoRecipient, MemoType, MemoPriority, MemoStatus
from app.schemas.memo import MemoCreate, MemoUpdate
from app.services import memo_registry


def new_memo(creator, **overrides):
    data = {
        "subject": "Procurement of transformers",
        "body": "Requesting approval for the purchase of 12 distribution transformers.",
        "type": MemoType.APPROVAL,
        "created_by_id": creator.id,
    }
    data.update(overrides)
    return MemoCreate(**data)


def test_create_memo_allocates_reference_and_recipients(db_session, creator, department, make_user):
    recipients = [make_user(department=department), make_user()]

    memo = memo_registry.create_memo(
        db_session,
        new_memo(creator, department_id=department.id, recipient_ids=[r.id for r in recipients]),
        year=2025,
    )

    assert memo.reference_number == "MEM-2025-001"
    assert memo.status == MemoStatus.DRAFT
    assert memo.priority == MemoPriority.MEDIUM
    assert sorted(r.user_id for r in memo.recipients) == sorted(r.id for r in recipients)

    second = memo_registry.create_memo(db_session, new_memo(creator), year=2025)
    assert second.reference_number == "MEM-2025-002"


def test_create_memo_validates_references(db_session, creator):
    with pytest.raises(InvalidInput):
        memo_registry.create_memo(db_session, new_memo(creator, subject="  "))
    with pytest.raises(NotFound):
        memo_registry.create_memo(db_session, new_memo(creator, created_by_id=5555))
    with pytest.raises(NotFound):
        memo_registry.create_memo(db_session, new_memo(creator, department_id=5555))
    with pytest.raises(NotFound):
        memo_registry.create_memo(db_session, new_memo(creator, recipient_ids=[5555]))
    assert db_session.query(Memo).count() == 0


def test_create_memo_retries_on_sequence_collision(db_session, creator, monkeypatch):
    calls = {"count": 0}
    real_allocate = memo_registry.allocate_reference_number

    def flaky_allocate(db, year=None):
        calls["count"] += 1
        if calls["count"] == 1:
            raise StaleDataError("reference_sequences row changed underneath us")
        return real_allocate(db, year)

    monkeypatch.setattr(memo_registry, "allocate_reference_number", flaky_allocate)

    memo = memo_registry.create_memo(db_session, new_memo(creator), year=2025)
    assert calls["count"] == 2
    assert memo.reference_number == "MEM-2025-001"


def test_create_memo_gives_up_after_retries(db_session, creator, monkeypatch):
    def always_stale(db, year=None):
        raise StaleDataError("conflict")

    monkeypatch.setattr(memo_registry, "allocate_reference_number", always_stale)

    with pytest.raises(UpstreamFailure):
        memo_registry.create_memo(db_session, new_memo(creator))


def test_list_memos_filters_and_summaries(db_session, make_memo, make_user, make_department, creator):
    ops = make_department(name="Operations", code="OPS")
    audit = make_department(name="Audit", code="AUD")
    circular = make_memo(created_by=creator, type=MemoType.CIRCULAR, subject="Holiday schedule")
    approval = make_memo(created_by=creator, subject="Budget request", status=MemoStatus.PENDING_APPROVAL)

    memo_registry.update_memo(db_session, approval.id, MemoUpdate(department_id=ops.id))
    for user in (make_user(department=ops), make_user(department=ops), make_user(department=audit)):
        approval.recipients.append(MemoRecipient(user_id=user.id))
    db_session.commit()

    everything = memo_registry.list_memos(db_session, memo_type="All", status="All")
    assert {row["id"] for row in everything} == {circular.id, approval.id}

    by_search = memo_registry.list_memos(db_session, search="budget")
    assert [row["id"] for row in by_search] == [approval.id]
    assert by_search[0]["recipient_departments"] == "Operations, Audit"
    assert by_search[0]["created_by"] == "Operations"

    by_reference = memo_registry.list_memos(db_session, search=circular.reference_number.lower())
    assert [row["id"] for row in by_reference] == [circular.id]
    assert by_reference[0]["recipient_departments"] == "All Departments"
    assert by_reference[0]["created_by"] == creator.full_name

    assert [row["id"] for row in memo_registry.list_memos(db_session, memo_type="CIRCULAR")] == [circular.id]
    assert [row["id"] for row in memo_registry.list_memos(db_session, status="PENDING_APPROVAL")] == [approval.id]

    with pytest.raises(InvalidInput):
        memo_registry.list_memos(db_session, status="LOST")


def test_direct_status_edits_are_limited(db_session, make_memo):
    memo = make_memo(status=MemoStatus.APPROVED)

    with pytest.raises(InvalidInput):
        memo_registry.update_memo(db_session, memo.id, MemoUpdate(status=MemoStatus.APPROVED))
    with pytest.raises(InvalidInput):
        memo_registry.update_memo(db_session, memo.id, MemoUpdate(status=MemoStatus.DRAFT))

    updated = memo_registry.update_memo(db_session, memo.id, MemoUpdate(status=MemoStatus.SENT))
    assert updated.status == MemoStatus.SENT


def test_update_rejects_blank_fields_and_unknown_memo(db_session, make_memo):
    memo = make_memo()
    with pytest.raises(InvalidInput):
        memo_registry.update_memo(db_session, memo.id, MemoUpdate(body=""))
    with pytest.raises(NotFound):
        memo_registry.update_memo(db_session, 5555, MemoUpdate(subject="New"))
    with pytest.raises(NotFound):
        memo_registry.get_memo(db_session, 5555)
