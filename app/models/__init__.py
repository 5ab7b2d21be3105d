from .base import BaseModel
from .user import User, UserRole, Department
from .memo import Memo, MemoType, MemoPriority, MemoStatus, MemoRecipient
from .memo_approval import MemoApproval, ApprovalStatus
from .memo_comment import MemoComment
from .document import Document, DocumentMovement, DocumentStatus, MovementStatus
from .reference_sequence import ReferenceSequence

__all__ = [
    "BaseModel", "User", "UserRole", "Department",
    "Memo", "MemoType", "MemoPriority", "MemoStatus", "MemoRecipient",
    "MemoApproval", "ApprovalStatus", "MemoComment",
    "Document", "DocumentMovement", "DocumentStatus", "MovementStatus",
    "ReferenceSequence",
]
