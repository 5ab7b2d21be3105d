from typing import List
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.memo_comment import MemoComment
from app.models.user import User
from app.schemas.memo_comment import CommentCreate


class CRUDMemoComment(CRUDBase[MemoComment, CommentCreate, CommentCreate]):
    def get_by_memo(self, db: Session, *, memo_id: int) -> List[MemoComment]:
        return (
            db.query(MemoComment)
            .options(selectinload(MemoComment.user).selectinload(User.department))
            .filter(MemoComment.memo_id == memo_id)
            .order_by(MemoComment.created_at.asc(), MemoComment.id.asc())
            .all()
        )

    def create_for_memo(self, db: Session, *, memo_id: int, user_id: int, text: str) -> MemoComment:
        db_obj = MemoComment(memo_id=memo_id, user_id=user_id, comment=text)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj


memo_comment = CRUDMemoComment(MemoComment)
