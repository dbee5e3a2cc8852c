"""
Pydantic schemas for tenants
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional
from datetime import datetime
import uuid

from menuhost.schemas.plan import PlanRead
from menuhost.schemas.subscription import SubscriptionRead


class TenantCreate(BaseModel):
    """Provisioning request: the tenant, its owner account and its plan"""
    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., max_length=100, description="Minimum length comes from PASSWORD_MIN_LENGTH")
    subdomain: str = Field(..., min_length=1, max_length=63, pattern=r"^[a-z0-9-]+$")
    phone: Optional[str] = Field(None, max_length=50)
    plan_id: uuid.UUID
    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Defaults to the subdomain")


class TenantProfileUpdate(BaseModel):
    """Fields a tenant owner may edit on their own tenant"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    logo: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=50)
    opening_hours: Optional[str] = None
    theme_color: Optional[str] = Field(None, max_length=20)
    show_info_to_clients: Optional[bool] = None


class TenantAdminUpdate(TenantProfileUpdate):
    """Operator edit; may also move the tenant to another address or plan"""
    email: Optional[EmailStr] = None
    subdomain: Optional[str] = Field(None, min_length=1, max_length=63, pattern=r"^[a-z0-9-]+$")
    plan_id: Optional[uuid.UUID] = None


class TenantRead(BaseModel):
    """Tenant response model"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    subdomain: str
    email: str
    logo: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    opening_hours: Optional[str] = None
    theme_color: Optional[str] = None
    show_info_to_clients: bool
    created_by_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ActiveSubscriptionRead(SubscriptionRead):
    """Subscription with its plan resolved"""
    plan: Optional[PlanRead] = None


class TenantView(TenantRead):
    """Tenant together with its current subscription, if any"""
    active_subscription: Optional[ActiveSubscriptionRead] = None


class PublicTenantProfile(BaseModel):
    """What guests of a restaurant may see; no contact email or ownership"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    subdomain: str
    logo: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    opening_hours: Optional[str] = None
    show_info_to_clients: bool
    theme_color: Optional[str] = None
