"""
Schemas module
"""

from menuhost.schemas.pagination import Page, PageQuery
from menuhost.schemas.plan import PlanCreate, PlanRead, PlanStatistics, PlanUpdate
from menuhost.schemas.subscription import SubscriptionChange, SubscriptionRead, SubscriptionUpdate
from menuhost.schemas.tenant import (
    ActiveSubscriptionRead,
    PublicTenantProfile,
    TenantCreate,
    TenantRead,
    TenantView,
)
from menuhost.schemas.token import Principal

__all__ = [
    "ActiveSubscriptionRead",
    "Page",
    "PageQuery",
    "PlanCreate",
    "PlanRead",
    "PlanStatistics",
    "PlanUpdate",
    "Principal",
    "PublicTenantProfile",
    "SubscriptionChange",
    "SubscriptionRead",
    "SubscriptionUpdate",
    "TenantCreate",
    "TenantRead",
    "TenantView",
]
