"""
Document registry: physical and external documents moving between departments.

A document is numbered from the shared document counter (``DOC-`` for
internal, ``EXT-DOC-`` for external documents). Each hand-over is a
DocumentMovement: sending puts the document IN_TRANSIT, the receiving side
either accepts it (the document moves to the destination and is RECEIVED)
or rejects it (the document stays with the sender and is PENDING again).
Only one movement may be open at a time.
"""
import logging
import os
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app import crud
from app.core.config import settings
from app.core.exceptions import InvalidInput, NotFound, UpstreamFailure
from app.models.memo import MemoPriority
from app.models.document import Document, DocumentMovement, DocumentStatus, MovementStatus
from app.schemas.document import DocumentCreate, DocumentUpdate, MovementCreate, MovementReceive
from app.services.memo_registry import parse_filter
from app.services.reference_numbers import allocate_document_reference
from app.services.signature_store import resolve_local_path

logger = logging.getLogger(__name__)

UPLOAD_NOTE = "External document uploaded"
RECEIVING_STATUSES = (MovementStatus.RECEIVED, MovementStatus.REJECTED)


def _check_people_and_place(db: Session, user_id: int, department_id: Optional[int], role: str = "Creator") -> None:
    if not crud.user.get(db, user_id):
        raise NotFound(f"{role} not found")
    if department_id is not None and not crud.department.get(db, department_id):
        raise NotFound("Department not found")


def _insert_with_reference(db: Session, build, is_external: bool, year: Optional[int]) -> Document:
    """Allocate a reference and commit the document built by ``build``, retrying on collisions."""
    attempts = max(1, settings.REFERENCE_ALLOCATION_RETRIES)
    for attempt in range(1, attempts + 1):
        try:
            document = build(allocate_document_reference(db, is_external=is_external, year=year))
            db.add(document)
            db.commit()
            return document
        except (StaleDataError, IntegrityError) as e:
            db.rollback()
            logger.warning(f"Document reference collision on attempt {attempt}/{attempts}: {e}")
    raise UpstreamFailure("Could not allocate a unique reference number")


def create_document(db: Session, document_in: DocumentCreate, year: Optional[int] = None) -> Document:
    if not document_in.title or not document_in.title.strip():
        raise InvalidInput("Title and creator are required")
    _check_people_and_place(db, document_in.created_by_id, document_in.current_department_id)

    def build(reference_number: str) -> Document:
        return Document(
            reference_number=reference_number,
            title=document_in.title,
            description=document_in.description,
            is_external=document_in.is_external,
            priority=document_in.priority or MemoPriority.MEDIUM,
            status=DocumentStatus.PENDING,
            due_date=document_in.due_date,
            current_department_id=document_in.current_department_id,
            created_by_id=document_in.created_by_id,
        )

    document = _insert_with_reference(db, build, document_in.is_external, year)
    logger.info(f"📄 Created document {document.reference_number} by user {document.created_by_id}")
    return crud.document.get_with_children(db, document_id=document.id)


def safe_file_name(filename: Optional[str]) -> str:
    name = os.path.basename(filename or "") or "document"
    return re.sub(r"[^a-zA-Z0-9.-]", "_", name)


def upload_external_document(
    db: Session,
    *,
    title: str,
    created_by_id: int,
    filename: Optional[str],
    content_type: Optional[str],
    data: bytes,
    description: Optional[str] = None,
    priority: Optional[MemoPriority] = None,
    due_date: Optional[datetime] = None,
    year: Optional[int] = None,
) -> Document:
    """
    Store an incoming external file and register it as an EXT-DOC document.

    The document starts UNDER_REVIEW with one closed movement recording its
    arrival from outside the organization. The stored file is removed again
    if the document cannot be registered.
    """
    if not title or not title.strip():
        raise InvalidInput("Title and creator are required")
    if not data:
        raise InvalidInput("Uploaded file is empty")
    if len(data) > settings.DOCUMENT_MAX_BYTES:
        raise InvalidInput(f"File must be smaller than {settings.DOCUMENT_MAX_BYTES} bytes")
    _check_people_and_place(db, created_by_id, None)

    timestamp = int(datetime.utcnow().timestamp() * 1000)
    file_name = safe_file_name(filename)
    relative = f"documents/{timestamp}-{file_name}"
    target = resolve_local_path(relative)
    try:
        os.makedirs(target.parent, exist_ok=True)
        target.write_bytes(data)
    except OSError as e:
        logger.error(f"Error storing uploaded document {file_name}: {e}")
        raise UpstreamFailure(f"Failed to store document: {e}") from e

    def build(reference_number: str) -> Document:
        document = Document(
            reference_number=reference_number,
            title=title,
            description=description,
            is_external=True,
            priority=priority or MemoPriority.MEDIUM,
            status=DocumentStatus.UNDER_REVIEW,
            due_date=due_date,
            created_by_id=created_by_id,
            file_path=relative,
            file_name=filename or file_name,
            file_size=len(data),
            mime_type=content_type,
        )
        arrived_at = datetime.utcnow()
        document.movements = [
            DocumentMovement(
                moved_by_id=created_by_id,
                received_by_id=created_by_id,
                moved_at=arrived_at,
                received_at=arrived_at,
                notes=UPLOAD_NOTE,
                status=MovementStatus.RECEIVED,
            )
        ]
        return document

    try:
        document = _insert_with_reference(db, build, True, year)
    except Exception:
        target.unlink(missing_ok=True)
        raise

    logger.info(f"📥 Uploaded external document {document.reference_number} ({len(data)} bytes) to {relative}")
    return crud.document.get_with_children(db, document_id=document.id)


def get_document(db: Session, document_id: int) -> Document:
    document = crud.document.get_with_children(db, document_id=document_id)
    if not document:
        raise NotFound("Document not found")
    return document


def list_documents(db: Session, search: Optional[str] = None, status=None) -> List[Dict[str, Any]]:
    documents = crud.document.get_filtered(
        db,
        search=search.strip() if search else None,
        status=parse_filter(DocumentStatus, status),
    )
    return [summarize_document(document) for document in documents]


def summarize_document(document: Document) -> Dict[str, Any]:
    return {
        "id": document.id,
        "reference_number": document.reference_number,
        "title": document.title,
        "description": document.description,
        "current_department": document.current_department_name,
        "status": document.status,
        "priority": document.priority,
        "is_external": document.is_external,
        "created_by": document.created_by.full_name,
        "created_at": document.created_at,
        "updated_at": document.updated_at,
    }


def update_document(db: Session, document_id: int, document_in: DocumentUpdate) -> Document:
    document = crud.document.get(db, document_id)
    if not document:
        raise NotFound("Document not found")

    changes = document_in.model_dump(exclude_unset=True)
    if "title" in changes and (changes["title"] is None or not changes["title"].strip()):
        raise InvalidInput("title cannot be empty")
    for field in ("priority", "status"):
        if field in changes and changes[field] is None:
            raise InvalidInput(f"{field} cannot be empty")
    if changes.get("current_department_id") is not None and not crud.department.get(db, changes["current_department_id"]):
        raise NotFound("Department not found")

    crud.document.update(db, db_obj=document, obj_in=changes)
    logger.info(f"Updated document {document.reference_number}: {', '.join(sorted(changes)) or 'no changes'}")
    return crud.document.get_with_children(db, document_id=document.id)


def move_document(db: Session, document_id: int, movement_in: MovementCreate) -> DocumentMovement:
    """Send a document from its current department to another one, or outside when no destination is given."""
    _check_people_and_place(db, movement_in.moved_by_id, movement_in.to_department_id, role="Sender")

    try:
        document = crud.document.get_for_update(db, document_id=document_id)
        if not document:
            raise NotFound("Document not found")
        if document.status == DocumentStatus.ARCHIVED:
            raise InvalidInput("Archived documents cannot be moved")
        if any(movement.status == MovementStatus.SENT for movement in document.movements):
            raise InvalidInput("Document is already in transit")
        if movement_in.to_department_id is not None and movement_in.to_department_id == document.current_department_id:
            raise InvalidInput("Document is already in that department")

        movement = DocumentMovement(
            document_id=document.id,
            from_department_id=document.current_department_id,
            to_department_id=movement_in.to_department_id,
            moved_by_id=movement_in.moved_by_id,
            moved_at=datetime.utcnow(),
            notes=movement_in.notes,
            status=MovementStatus.SENT,
        )
        db.add(movement)
        document.status = DocumentStatus.IN_TRANSIT
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(movement)
    logger.info(f"🚚 Document {document.reference_number} sent {movement.from_label} -> {movement.to_label}")
    return movement


def receive_movement(db: Session, document_id: int, movement_id: int, receive_in: MovementReceive) -> DocumentMovement:
    """Close an open movement as RECEIVED (document changes hands) or REJECTED (it stays with the sender)."""
    if receive_in.status not in RECEIVING_STATUSES:
        raise InvalidInput("Valid status is required (RECEIVED, REJECTED)")
    _check_people_and_place(db, receive_in.received_by_id, None, role="Receiver")

    movement = crud.document_movement.get(db, movement_id)
    if not movement or movement.document_id != document_id:
        raise NotFound("Movement not found")

    try:
        document = crud.document.get_for_update(db, document_id=document_id)
        db.refresh(movement)
        if movement.status != MovementStatus.SENT:
            raise InvalidInput(f"Movement is already {movement.status.value}")

        movement.status = receive_in.status
        movement.received_by_id = receive_in.received_by_id
        movement.received_at = datetime.utcnow()
        if receive_in.status == MovementStatus.RECEIVED:
            document.current_department_id = movement.to_department_id
            document.status = DocumentStatus.RECEIVED
        else:
            document.status = DocumentStatus.PENDING
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(movement)
    logger.info(f"Movement {movement.id} of document {document.reference_number} {movement.status.value}")
    return movement
