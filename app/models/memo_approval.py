"""Memo approval step model."""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Text, Enum
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
import enum


class ApprovalStatus(enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SKIPPED = "SKIPPED"


class MemoApproval(BaseModel):
    """One approver's slot in a memo's sign-off chain."""
    __tablename__ = "memo_approvals"

    memo_id = Column(Integer, ForeignKey("memos.id", ondelete="CASCADE"), nullable=False, index=True)
    approver_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    step_order = Column(Integer, nullable=False)
    status = Column(Enum(ApprovalStatus), nullable=False, default=ApprovalStatus.PENDING)
    comments = Column(Text, nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)  # only set on APPROVED

    # Relationships
    memo = relationship("Memo", back_populates="approvals")
    approver = relationship("User", foreign_keys=[approver_id])

    @property
    def order(self) -> int:
        return self.step_order
