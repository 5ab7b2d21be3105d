"""Physical and external document tracking: documents and their movements."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Enum, Boolean
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
from app.models.memo import MemoPriority
import enum


class DocumentStatus(enum.Enum):
    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    IN_TRANSIT = "IN_TRANSIT"
    RECEIVED = "RECEIVED"
    ARCHIVED = "ARCHIVED"


class MovementStatus(enum.Enum):
    SENT = "SENT"
    RECEIVED = "RECEIVED"
    REJECTED = "REJECTED"


class Document(BaseModel):
    __tablename__ = "documents"

    reference_number = Column(String(50), unique=True, nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    is_external = Column(Boolean, default=False, nullable=False)
    priority = Column(Enum(MemoPriority), nullable=False, default=MemoPriority.MEDIUM)
    status = Column(Enum(DocumentStatus), nullable=False, default=DocumentStatus.PENDING, index=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    current_department_id = Column(Integer, ForeignKey("departments.id"), nullable=True, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Uploaded file, relative to SIGNATURE_STORAGE_DIR
    file_path = Column(String(500), nullable=True)
    file_name = Column(String(255), nullable=True)
    file_size = Column(Integer, nullable=True)
    mime_type = Column(String(100), nullable=True)

    # Relationships
    created_by = relationship("User", foreign_keys=[created_by_id])
    current_department = relationship("Department", foreign_keys=[current_department_id])
    movements = relationship(
        "DocumentMovement",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="[DocumentMovement.moved_at.desc(), DocumentMovement.id.desc()]",
    )

    @property
    def current_department_name(self) -> str:
        if self.is_external and not self.current_department:
            return "External"
        return self.current_department.name if self.current_department else "N/A"


class DocumentMovement(BaseModel):
    """One hand-over of a document. A missing destination department means it left the organization."""
    __tablename__ = "document_movements"

    document_id = Column(Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True)
    from_department_id = Column(Integer, ForeignKey("departments.id"), nullable=True)
    to_department_id = Column(Integer, ForeignKey("departments.id"), nullable=True)
    moved_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    received_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    moved_at = Column(DateTime(timezone=True), nullable=False)
    received_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(Enum(MovementStatus), nullable=False, default=MovementStatus.SENT)

    document = relationship("Document", back_populates="movements")
    from_department = relationship("Department", foreign_keys=[from_department_id])
    to_department = relationship("Department", foreign_keys=[to_department_id])
    moved_by = relationship("User", foreign_keys=[moved_by_id])
    received_by = relationship("User", foreign_keys=[received_by_id])

    @property
    def from_label(self) -> str:
        return self.from_department.name if self.from_department else "External"

    @property
    def to_label(self) -> str:
        return self.to_department.name if self.to_department else "External"
