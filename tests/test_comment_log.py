import pytest

from app.core.exceptions import InvalidInput, NotFound
from app.models.memo import MemoStatus
from app.models.memo_comment import MemoComment
from app.services import comment_log


def test_comments_are_listed_oldest_first(db_session, make_memo, make_user):
    memo = make_memo()
    author = make_user()
    other = make_user()

    first = comment_log.add_comment(db_session, memo.id, author.id, "Please review section 2")
    second = comment_log.add_comment(db_session, memo.id, other.id, "Reviewed, no objections")
    third = comment_log.add_comment(db_session, memo.id, author.id, "Thanks")

    comments = comment_log.list_comments(db_session, memo.id)
    assert [c.id for c in comments] == [first.id, second.id, third.id]
    assert comments[1].user.id == other.id


def test_comment_does_not_touch_memo_status(db_session, make_memo, make_user):
    memo = make_memo(status=MemoStatus.PENDING_APPROVAL)
    comment_log.add_comment(db_session, memo.id, make_user().id, "Noted")

    db_session.refresh(memo)
    assert memo.status == MemoStatus.PENDING_APPROVAL


@pytest.mark.parametrize("text", ["", "   ", None])
def test_empty_comment_is_rejected(db_session, make_memo, make_user, text):
    memo = make_memo()
    with pytest.raises(InvalidInput):
        comment_log.add_comment(db_session, memo.id, make_user().id, text)
    assert db_session.query(MemoComment).count() == 0


def test_unknown_author(db_session, make_memo):
    memo = make_memo()
    with pytest.raises(NotFound):
        comment_log.add_comment(db_session, memo.id, 98765, "Hello")


def test_unknown_memo(db_session, make_user):
    with pytest.raises(NotFound):
        comment_log.add_comment(db_session, 98765, make_user().id, "Hello")
    with pytest.raises(NotFound):
        comment_log.list_comments(db_session, 98765)
