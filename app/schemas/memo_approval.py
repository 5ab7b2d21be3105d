from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from app.models.memo_approval import ApprovalStatus
from app.schemas.user import UserSummary

class ApproverEntry(BaseModel):
    approver_id: int
    order: int

class AttachApproversRequest(BaseModel):
    # Emptiness is checked by the chain engine so it surfaces as InvalidInput
    approvers: List[ApproverEntry]

class ApprovalUpdate(BaseModel):
    # Plain string: out-of-enum values must be rejected by the chain engine, not the parser
    status: str
    comments: Optional[str] = None

class ApprovalResponse(BaseModel):
    id: int
    memo_id: int
    approver_id: int
    order: int
    status: ApprovalStatus
    comments: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: datetime
    approver: UserSummary

    class Config:
        from_attributes = True

class AttachApproversResponse(BaseModel):
    message: str
    memo_id: int
    memo_status: str
    steps: int
