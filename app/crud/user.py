from typing import List
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.user import User, Department


class CRUDUser(CRUDBase[User, BaseModel, BaseModel]):

    def get_many(self, db: Session, *, ids: List[int]) -> List[User]:
        if not ids:
            return []
        return db.query(User).filter(User.id.in_(ids)).all()


user = CRUDUser(User)
department = CRUDBase[Department, BaseModel, BaseModel](Department)
