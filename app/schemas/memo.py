from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from app.models.memo import MemoType, MemoPriority, MemoStatus
from app.schemas.user import UserSummary
from app.schemas.memo_approval import ApprovalResponse
from app.schemas.memo_comment import CommentResponse

class MemoCreate(BaseModel):
    subject: str
    body: str
    type: MemoType
    priority: Optional[MemoPriority] = None
    department_id: Optional[int] = None
    created_by_id: int
    recipient_ids: List[int] = []

class MemoUpdate(BaseModel):
    subject: Optional[str] = None
    body: Optional[str] = None
    type: Optional[MemoType] = None
    priority: Optional[MemoPriority] = None
    department_id: Optional[int] = None
    status: Optional[MemoStatus] = None

class DepartmentSummary(BaseModel):
    id: int
    name: str
    code: str

    class Config:
        from_attributes = True

class RecipientResponse(BaseModel):
    id: int
    user_id: int
    is_read: bool
    read_at: Optional[datetime] = None
    user: UserSummary

    class Config:
        from_attributes = True

class MemoListItem(BaseModel):
    id: int
    reference_number: str
    subject: str
    type: MemoType
    priority: MemoPriority
    status: MemoStatus
    created_by: str
    department: Optional[str] = None
    recipient_departments: str
    created_at: datetime
    updated_at: datetime

class MemoDetail(BaseModel):
    id: int
    reference_number: str
    subject: str
    body: str
    type: MemoType
    priority: MemoPriority
    status: MemoStatus
    department_id: Optional[int] = None
    created_by_id: int
    approved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    created_by: UserSummary
    department: Optional[DepartmentSummary] = None
    recipients: List[RecipientResponse] = []
    approvals: List[ApprovalResponse] = []
    comments: List[CommentResponse] = []

    class Config:
        from_attributes = True
