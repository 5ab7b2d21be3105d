"""User signature upload and removal."""
import logging

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.schemas.user import SignatureResponse
from app.services import signature_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/{user_id}/signature", response_model=SignatureResponse)
async def upload_signature(
    user_id: int,
    signature: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    data = await signature.read()
    logger.info(f"✍️ Signature upload for user {user_id}: {signature.filename} ({signature.content_type}, {len(data)} bytes)")
    user = signature_store.save_signature(db, user_id, signature.filename, signature.content_type, data)
    return {"message": "Signature uploaded successfully", "signature_path": user.signature_path}


@router.delete("/{user_id}/signature", response_model=SignatureResponse)
async def delete_signature(user_id: int, db: Session = Depends(get_db)):
    signature_store.remove_signature(db, user_id)
    return {"message": "Signature removed successfully", "signature_path": None}
