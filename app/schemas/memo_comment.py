from pydantic import BaseModel
from datetime import datetime
from app.schemas.user import UserSummary

class CommentCreate(BaseModel):
    user_id: int
    comment: str

class CommentResponse(BaseModel):
    id: int
    memo_id: int
    comment: str
    created_at: datetime
    user: UserSummary

    class Config:
        from_attributes = True
