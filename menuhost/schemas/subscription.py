"""
Pydantic schemas for subscriptions
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
import uuid

from menuhost.models.subscription import SubscriptionStatus


class SubscriptionChange(BaseModel):
    """Move a tenant onto another plan"""
    tenant_id: uuid.UUID
    plan_id: uuid.UUID


class SubscriptionUpdate(BaseModel):
    """Direct edit of a subscription row"""
    plan_id: Optional[uuid.UUID] = None
    end_date: Optional[datetime] = None
    status: Optional[SubscriptionStatus] = Field(
        None, description="Setting 'active' expires the tenant's other active subscriptions"
    )


class SubscriptionRead(BaseModel):
    """Subscription response model"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    tenant_id: uuid.UUID
    plan_id: uuid.UUID
    start_date: datetime
    end_date: datetime
    status: SubscriptionStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
