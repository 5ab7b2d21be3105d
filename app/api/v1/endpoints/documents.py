"""Document registry endpoints: register, upload, track and move documents."""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.models.memo import MemoPriority
from app.schemas.document import (
    DocumentCreate,
    DocumentUpdate,
    DocumentListItem,
    DocumentDetail,
    MovementCreate,
    MovementReceive,
    MovementResponse,
)
from app.services import document_registry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[DocumentListItem])
async def list_documents(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """List documents, newest first. ``All`` for status means no filter."""
    logger.info(f"📋 Listing documents search={search!r} status={status}")
    return document_registry.list_documents(db, search=search, status=status)


@router.post("", response_model=DocumentDetail, status_code=201)
async def create_document(document_in: DocumentCreate, db: Session = Depends(get_db)):
    return document_registry.create_document(db, document_in)


@router.post("/upload", response_model=DocumentDetail, status_code=201)
async def upload_external_document(
    file: UploadFile = File(...),
    title: str = Form(...),
    created_by_id: int = Form(...),
    description: Optional[str] = Form(None),
    priority: Optional[MemoPriority] = Form(None),
    due_date: Optional[datetime] = Form(None),
    db: Session = Depends(get_db),
):
    """Upload an incoming external document; it is registered as EXT-DOC and put under review"""
    data = await file.read()
    logger.info(f"📤 External document upload by user {created_by_id}: {file.filename} ({file.content_type}, {len(data)} bytes)")
    return document_registry.upload_external_document(
        db,
        title=title,
        created_by_id=created_by_id,
        filename=file.filename,
        content_type=file.content_type,
        data=data,
        description=description,
        priority=priority,
        due_date=due_date,
    )


@router.get("/{document_id}", response_model=DocumentDetail)
async def get_document(document_id: int, db: Session = Depends(get_db)):
    return document_registry.get_document(db, document_id)


@router.patch("/{document_id}", response_model=DocumentDetail)
async def update_document(document_id: int, document_in: DocumentUpdate, db: Session = Depends(get_db)):
    return document_registry.update_document(db, document_id, document_in)


@router.post("/{document_id}/movements", response_model=MovementResponse, status_code=201)
async def move_document(document_id: int, movement_in: MovementCreate, db: Session = Depends(get_db)):
    """Send a document to another department, or outside when ``to_department_id`` is null"""
    return document_registry.move_document(db, document_id, movement_in)


@router.patch("/{document_id}/movements/{movement_id}", response_model=MovementResponse)
async def receive_movement(
    document_id: int,
    movement_id: int,
    receive_in: MovementReceive,
    db: Session = Depends(get_db),
):
    return document_registry.receive_movement(db, document_id, movement_id, receive_in)
