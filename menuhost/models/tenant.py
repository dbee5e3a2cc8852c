"""
Tenant model - Multi-tenancy foundation
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
import uuid


class Tenant(SQLModel, table=True):
    """A restaurant account, addressed by its subdomain"""

    __tablename__ = "tenants"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(unique=True, index=True, max_length=255)
    subdomain: str = Field(unique=True, index=True, max_length=63, description="Lowercase [a-z0-9-]+ label used for routing")
    email: str = Field(unique=True, index=True, max_length=255)

    # Public profile
    logo: Optional[str] = Field(default=None, description="Reference to the stored logo image")
    description: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    opening_hours: Optional[str] = None
    theme_color: Optional[str] = Field(default=None, max_length=20)
    show_info_to_clients: bool = Field(default=False)

    created_by_id: Optional[uuid.UUID] = Field(default=None, description="Platform user who provisioned the tenant")

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None
