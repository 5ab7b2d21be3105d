"""Memo and recipient models."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Enum, Boolean
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
import enum


class MemoType(enum.Enum):
    APPROVAL = "APPROVAL"
    EXTERNAL_LETTER = "EXTERNAL_LETTER"
    AUDIT_LETTER = "AUDIT_LETTER"
    INTERNAL = "INTERNAL"
    CIRCULAR = "CIRCULAR"


class MemoPriority(enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class MemoStatus(enum.Enum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SENT = "SENT"
    ARCHIVED = "ARCHIVED"


class Memo(BaseModel):
    __tablename__ = "memos"

    reference_number = Column(String(50), unique=True, nullable=False, index=True)
    subject = Column(String(500), nullable=False)
    body = Column(Text, nullable=False)
    type = Column(Enum(MemoType), nullable=False)
    priority = Column(Enum(MemoPriority), nullable=False, default=MemoPriority.MEDIUM)
    status = Column(Enum(MemoStatus), nullable=False, default=MemoStatus.DRAFT, index=True)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Set exactly once, when the whole chain passes
    approved_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    created_by = relationship("User", foreign_keys=[created_by_id])
    department = relationship("Department", foreign_keys=[department_id])
    approvals = relationship(
        "MemoApproval",
        back_populates="memo",
        cascade="all, delete-orphan",
        order_by="[MemoApproval.step_order, MemoApproval.id]",
    )
    comments = relationship(
        "MemoComment",
        back_populates="memo",
        cascade="all, delete-orphan",
        order_by="[MemoComment.created_at, MemoComment.id]",
    )
    recipients = relationship(
        "MemoRecipient",
        back_populates="memo",
        cascade="all, delete-orphan",
        order_by="MemoRecipient.id",
    )


class MemoRecipient(BaseModel):
    """Delivery and read tracking for one user on one memo."""
    __tablename__ = "memo_recipients"

    memo_id = Column(Integer, ForeignKey("memos.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)

    memo = relationship("Memo", back_populates="recipients")
    user = relationship("User")

