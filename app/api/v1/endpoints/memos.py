"""Memo registry endpoints: create, list, read and edit memos."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.schemas.memo import MemoCreate, MemoUpdate, MemoListItem, MemoDetail
from app.services import memo_registry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[MemoListItem])
async def list_memos(
    search: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """List memos, newest first. ``All`` for type or status means no filter."""
    logger.info(f"📋 Listing memos search={search!r} type={type} status={status}")
    return memo_registry.list_memos(db, search=search, memo_type=type, status=status)


@router.post("", response_model=MemoDetail, status_code=201)
async def create_memo(memo_in: MemoCreate, db: Session = Depends(get_db)):
    return memo_registry.create_memo(db, memo_in)


@router.get("/{memo_id}", response_model=MemoDetail)
async def get_memo(memo_id: int, db: Session = Depends(get_db)):
    return memo_registry.get_memo(db, memo_id)


@router.patch("/{memo_id}", response_model=MemoDetail)
async def update_memo(memo_id: int, memo_in: MemoUpdate, db: Session = Depends(get_db)):
    return memo_registry.update_memo(db, memo_id, memo_in)
