from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from app.models.memo import MemoPriority
from app.models.document import DocumentStatus, MovementStatus
from app.schemas.user import UserSummary
from app.schemas.memo import DepartmentSummary

class DocumentCreate(BaseModel):
    title: str
    description: Optional[str] = None
    is_external: bool = False
    priority: Optional[MemoPriority] = None
    due_date: Optional[datetime] = None
    current_department_id: Optional[int] = None
    created_by_id: int

class DocumentUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[MemoPriority] = None
    due_date: Optional[datetime] = None
    current_department_id: Optional[int] = None
    status: Optional[DocumentStatus] = None

class MovementCreate(BaseModel):
    # None sends the document outside the organization
    to_department_id: Optional[int] = None
    moved_by_id: int
    notes: Optional[str] = None

class MovementReceive(BaseModel):
    received_by_id: int
    status: MovementStatus = MovementStatus.RECEIVED
    notes: Optional[str] = None

class MovementResponse(BaseModel):
    id: int
    document_id: int
    from_department_id: Optional[int] = None
    to_department_id: Optional[int] = None
    from_label: str
    to_label: str
    moved_at: datetime
    received_at: Optional[datetime] = None
    notes: Optional[str] = None
    status: MovementStatus
    moved_by: UserSummary
    received_by: Optional[UserSummary] = None

    class Config:
        from_attributes = True

class DocumentListItem(BaseModel):
    id: int
    reference_number: str
    title: str
    description: Optional[str] = None
    current_department: str
    status: DocumentStatus
    priority: MemoPriority
    is_external: bool
    created_by: str
    created_at: datetime
    updated_at: datetime

class DocumentDetail(BaseModel):
    id: int
    reference_number: str
    title: str
    description: Optional[str] = None
    is_external: bool
    priority: MemoPriority
    status: DocumentStatus
    due_date: Optional[datetime] = None
    current_department_id: Optional[int] = None
    current_department_name: str
    created_by_id: int
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    created_by: UserSummary
    current_department: Optional[DepartmentSummary] = None
    movements: List[MovementResponse] = []

    class Config:
        from_attributes = True
