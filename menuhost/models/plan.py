"""
Plan model - billable product tiers
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, JSON, Numeric
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from enum import Enum
import uuid


class BillingPeriodUnit(str, Enum):
    """Unit of a plan's billing period"""
    MONTH = "month"
    YEAR = "year"


# Columns that define what a subscriber pays; frozen once the plan is in use
BILLING_TERMS = ("price", "currency", "billing_period_unit", "billing_period_value")


class Plan(SQLModel, table=True):
    """Subscription plan offered to tenants"""

    __tablename__ = "plans"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(unique=True, index=True, max_length=100)

    # Pricing
    price: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(10, 2), nullable=False),
        description="Price per billing period"
    )
    currency: str = Field(default="USD", max_length=3)

    # Billing period, e.g. 3 x month
    billing_period_unit: BillingPeriodUnit = Field(default=BillingPeriodUnit.MONTH)
    billing_period_value: int = Field(default=1, ge=1)

    features: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    is_popular: bool = Field(default=False)
    is_archived: bool = Field(default=False, index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None
