"""
Subscription model - a tenant's time-bounded binding to a plan
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid


class SubscriptionStatus(str, Enum):
    """Status of a subscription"""
    ACTIVE = "active"           # The tenant's current term (at most one per tenant)
    EXPIRED = "expired"         # Superseded or past its end date
    CANCELED = "canceled"       # Disabled by an operator
    PENDING = "pending"
    TRIALING = "trialing"
    UNPAID = "unpaid"


class Subscription(SQLModel, table=True):
    """Subscription history row for a tenant"""

    __tablename__ = "subscriptions"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: uuid.UUID = Field(
        foreign_key="tenants.id",
        index=True,
        ondelete="CASCADE",
        description="Owning tenant"
    )
    plan_id: uuid.UUID = Field(foreign_key="plans.id", index=True)

    # Term
    start_date: datetime = Field(default_factory=datetime.utcnow)
    end_date: datetime = Field(index=True)

    status: SubscriptionStatus = Field(
        default=SubscriptionStatus.ACTIVE,
        index=True,
        description="Current lifecycle status"
    )

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    def is_active(self) -> bool:
        """Check if the status flag reads active"""
        return self.status == SubscriptionStatus.ACTIVE

    def has_lapsed(self, now: Optional[datetime] = None) -> bool:
        """Check if the end date is already behind us, whatever the status says"""
        return self.end_date < (now or datetime.utcnow())
