from .user import UserSummary, SignatureResponse
from .memo_approval import (
    ApproverEntry, AttachApproversRequest, ApprovalUpdate, ApprovalResponse, AttachApproversResponse
)
from .memo_comment import CommentCreate, CommentResponse
from .memo import MemoCreate, MemoUpdate, MemoListItem, MemoDetail, RecipientResponse, DepartmentSummary
from .document import (
    DocumentCreate, DocumentUpdate, DocumentListItem, DocumentDetail,
    MovementCreate, MovementReceive, MovementResponse,
)
from .dashboard import DashboardStats, RecentDocument, RecentMemo
