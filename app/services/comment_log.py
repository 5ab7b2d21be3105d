"""Append-only comments / minutes on memos."""
import logging
from typing import List

from sqlalchemy.orm import Session

from app import crud
from app.core.exceptions import InvalidInput, NotFound
from app.models.memo_comment import MemoComment

logger = logging.getLogger(__name__)


def add_comment(db: Session, memo_id: int, author_id: int, text: str) -> MemoComment:
    """Append a remark; memo status is never touched."""
    if not author_id or not text or not text.strip():
        raise InvalidInput("userId and comment are required")

    if not crud.user.get(db, author_id):
        logger.error(f"User not found: {author_id}")
        raise NotFound("User not found")

    if not crud.memo.get(db, memo_id):
        logger.error(f"Memo not found: {memo_id}")
        raise NotFound("Memo not found")

    comment = crud.memo_comment.create_for_memo(db, memo_id=memo_id, user_id=author_id, text=text)
    logger.info(f"Comment {comment.id} added to memo {memo_id} by user {author_id}")
    return comment


def list_comments(db: Session, memo_id: int) -> List[MemoComment]:
    if not crud.memo.get(db, memo_id):
        raise NotFound("Memo not found")
    return crud.memo_comment.get_by_memo(db, memo_id=memo_id)
