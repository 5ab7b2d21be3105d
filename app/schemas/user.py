from pydantic import BaseModel
from typing import Optional
from app.models.user import UserRole

class UserSummary(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    full_name: str
    role: UserRole
    department_name: Optional[str] = None
    signature_path: Optional[str] = None

    class Config:
        from_attributes = True

class SignatureResponse(BaseModel):
    message: str
    signature_path: Optional[str] = None
