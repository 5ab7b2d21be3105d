"""
Memo PDF download endpoint.
"""

import logging

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.services.memo_pdf import render_memo_document

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{memo_id}/pdf")
def download_memo_pdf(
    memo_id: int,
    compact: bool = Query(False),
    db: Session = Depends(get_db),
):
    """Render the memo, its approvals and its minutes as a PDF attachment."""
    rendered = render_memo_document(db, memo_id, compact=compact)
    return Response(
        content=rendered.content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{rendered.filename}"'},
    )
