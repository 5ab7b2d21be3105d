"""Comments / minutes recorded against a memo."""
from sqlalchemy import Column, Integer, ForeignKey, Text
from sqlalchemy.orm import relationship
from app.models.base import BaseModel


class MemoComment(BaseModel):
    __tablename__ = "memo_comments"

    memo_id = Column(Integer, ForeignKey("memos.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    comment = Column(Text, nullable=False)

    memo = relationship("Memo", back_populates="comments")
    # Author display fields and signature are read through the user at render time
    user = relationship("User")
