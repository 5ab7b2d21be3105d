from pydantic import BaseModel
from typing import List
from datetime import datetime
from app.models.memo import MemoType, MemoPriority
from app.models.document import DocumentStatus

class RecentDocument(BaseModel):
    id: int
    title: str
    department: str
    status: DocumentStatus
    updated_at: datetime

class RecentMemo(BaseModel):
    id: int
    subject: str
    type: MemoType
    sender: str
    priority: MemoPriority
    updated_at: datetime

class DashboardStats(BaseModel):
    total_documents: int
    pending_memos: int
    in_transit_documents: int
    completed_today: int
    recent_documents: List[RecentDocument] = []
    recent_memos: List[RecentMemo] = []
