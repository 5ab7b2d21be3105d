# File: app/models/user.py
from sqlalchemy import Column, String, Boolean, Enum, Integer, ForeignKey, Text
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
import enum

class UserRole(enum.Enum):
    MD = "MD"
    DEPARTMENT_HEAD = "DEPARTMENT_HEAD"
    STAFF = "STAFF"
    ADMIN = "ADMIN"
    AUDITOR = "AUDITOR"

class Department(BaseModel):
    __tablename__ = "departments"

    name = Column(String(255), nullable=False)
    code = Column(String(50), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)

    users = relationship("User", back_populates="department")

class User(BaseModel):
    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.STAFF)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True, index=True)
    is_active = Column(Boolean, default=True)

    # Local storage path or absolute URL; null when the user has no signature
    signature_path = Column(String(500), nullable=True)

    department = relationship("Department", back_populates="users")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def department_name(self):
        return self.department.name if self.department else None
