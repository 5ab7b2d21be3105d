# File: app/api/v1/api.py
from fastapi import APIRouter
from app.api.v1.endpoints import (
    memos, memo_approvals, memo_comments, memo_pdf, signatures, documents, dashboard
)

# Create main API router
api_router = APIRouter()

api_router.include_router(
    memos.router,
    prefix="/memos",
    tags=["memos"]
)

api_router.include_router(
    memo_approvals.router,
    prefix="/memos",
    tags=["memo-approvals"]
)

api_router.include_router(
    memo_comments.router,
    prefix="/memos",
    tags=["memo-comments"]
)

api_router.include_router(
    memo_pdf.router,
    prefix="/memos",
    tags=["memo-pdf"]
)

api_router.include_router(
    signatures.router,
    prefix="/users",
    tags=["signatures"]
)

api_router.include_router(
    documents.router,
    prefix="/documents",
    tags=["documents"]
)

api_router.include_router(
    dashboard.router,
    prefix="/dashboard",
    tags=["dashboard"]
)
