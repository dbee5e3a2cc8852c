"""
Pydantic schemas for authentication and tokens
"""

from pydantic import BaseModel, Field
from typing import Optional
import uuid


class Principal(BaseModel):
    """The authenticated caller, as carried by the access token"""
    sub: uuid.UUID = Field(..., description="User ID")
    role: str = Field(..., description="User role")
    tenant_id: Optional[uuid.UUID] = Field(None, description="Tenant ID, absent for platform operators")
