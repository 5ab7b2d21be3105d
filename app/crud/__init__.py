from .user import user, department
from .memo import memo
from .memo_approval import memo_approval
from .memo_comment import memo_comment
from .document import document, document_movement

__all__ = [
    "user", "department", "memo", "memo_approval", "memo_comment",
    "document", "document_movement",
]
