"""
Pydantic schemas for plans
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
import uuid

from menuhost.models.plan import BillingPeriodUnit


class PlanCreate(BaseModel):
    """Plan creation schema"""
    name: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    billing_period_unit: BillingPeriodUnit = Field(default=BillingPeriodUnit.MONTH)
    billing_period_value: int = Field(default=1, ge=1)
    features: List[str] = Field(..., min_length=1)
    is_popular: bool = False


class PlanUpdate(BaseModel):
    """Partial plan update; billing terms are frozen once subscribed to"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    billing_period_unit: Optional[BillingPeriodUnit] = None
    billing_period_value: Optional[int] = Field(None, ge=1)
    features: Optional[List[str]] = None
    is_popular: Optional[bool] = None


class PlanRead(BaseModel):
    """Plan response model"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    price: Decimal
    currency: str
    billing_period_unit: BillingPeriodUnit
    billing_period_value: int
    features: List[str]
    is_popular: bool
    is_archived: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class PlanStatistics(BaseModel):
    """Aggregates over the plans currently on sale"""
    total_plans: int
    average_price: float
    popular_plan_name: Optional[str] = None
