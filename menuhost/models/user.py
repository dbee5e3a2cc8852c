"""
User model with roles and tenant scoping
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
import uuid
from enum import Enum


class UserRole(str, Enum):
    """User roles for RBAC"""
    USER = "user"
    ADMIN = "admin"
    MANAGER = "manager"
    SUPER_ADMIN = "super_admin"     # Tenant owner, one per tenant
    SUPPORT = "support"             # Platform staff
    SYS_ADMIN = "sys_admin"         # Platform operator


class User(SQLModel, table=True):
    """User model with tenant isolation"""

    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: Optional[uuid.UUID] = Field(
        default=None,
        foreign_key="tenants.id",
        index=True,
        nullable=True,
        ondelete="CASCADE",
        description="Tenant ID; empty only for platform operators"
    )

    # Authentication
    email: str = Field(unique=True, index=True, nullable=False, max_length=255)
    password_hash: str = Field(nullable=False)

    # Profile
    full_name: str = Field(nullable=False, max_length=200)

    # RBAC
    role: UserRole = Field(default=UserRole.USER, nullable=False)

    # Status
    is_active: bool = Field(default=False, index=True)

    created_by_id: Optional[uuid.UUID] = Field(default=None, nullable=True)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None
