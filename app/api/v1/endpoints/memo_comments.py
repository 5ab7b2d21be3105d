"""Comments / minutes on memos."""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.schemas.memo_comment import CommentCreate, CommentResponse
from app.services import comment_log

router = APIRouter()


@router.get("/{memo_id}/comments", response_model=List[CommentResponse])
async def get_memo_comments(memo_id: int, db: Session = Depends(get_db)):
    return comment_log.list_comments(db, memo_id)


@router.post("/{memo_id}/comments", response_model=CommentResponse)
async def add_memo_comment(memo_id: int, payload: CommentCreate, db: Session = Depends(get_db)):
    return comment_log.add_comment(db, memo_id, payload.user_id, payload.comment)
