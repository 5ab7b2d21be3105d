from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.document import Document, DocumentMovement, DocumentStatus
from app.schemas.document import DocumentCreate, DocumentUpdate


class CRUDDocument(CRUDBase[Document, DocumentCreate, DocumentUpdate]):
    def get_with_children(self, db: Session, *, document_id: int) -> Optional[Document]:
        return (
            db.query(Document)
            .options(
                selectinload(Document.created_by),
                selectinload(Document.current_department),
                selectinload(Document.movements).selectinload(DocumentMovement.moved_by),
                selectinload(Document.movements).selectinload(DocumentMovement.received_by),
                selectinload(Document.movements).selectinload(DocumentMovement.from_department),
                selectinload(Document.movements).selectinload(DocumentMovement.to_department),
            )
            .filter(Document.id == document_id)
            .first()
        )

    def get_for_update(self, db: Session, *, document_id: int) -> Optional[Document]:
        return db.query(Document).filter(Document.id == document_id).with_for_update().first()

    def get_filtered(
        self,
        db: Session,
        *,
        search: Optional[str] = None,
        status: Optional[DocumentStatus] = None,
    ) -> List[Document]:
        query = db.query(Document).options(
            selectinload(Document.created_by),
            selectinload(Document.current_department),
        )
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(Document.title.ilike(pattern), Document.reference_number.ilike(pattern))
            )
        if status is not None:
            query = query.filter(Document.status == status)
        return query.order_by(Document.created_at.desc(), Document.id.desc()).all()

    def get_recently_updated(self, db: Session, *, limit: int = 3) -> List[Document]:
        return (
            db.query(Document)
            .options(selectinload(Document.current_department))
            .order_by(Document.updated_at.desc(), Document.id.desc())
            .limit(limit)
            .all()
        )

    def count_by_status(self, db: Session, *, status: Optional[DocumentStatus] = None) -> int:
        query = db.query(Document)
        if status is not None:
            query = query.filter(Document.status == status)
        return query.count()

    def count_updated_since(self, db: Session, *, status: DocumentStatus, since: datetime) -> int:
        return (
            db.query(Document)
            .filter(Document.status == status, Document.updated_at >= since)
            .count()
        )

    def count_with_reference_prefix(self, db: Session, *, prefix: str) -> int:
        return db.query(Document).filter(Document.reference_number.like(f"{prefix}%")).count()


document = CRUDDocument(Document)
document_movement = CRUDBase[DocumentMovement, BaseModel, BaseModel](DocumentMovement)
