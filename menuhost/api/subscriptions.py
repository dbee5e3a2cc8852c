"""
Subscription API endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Optional
import structlog
import uuid

from menuhost.api.errors import to_http_exception
from menuhost.core.dependencies import (
    get_current_principal,
    get_subscription_ledger,
    require_permission,
)
from menuhost.core.exceptions import MenuHostError
from menuhost.core.permissions import Permission, get_permissions_for_role
from menuhost.schemas.subscription import SubscriptionChange, SubscriptionRead, SubscriptionUpdate
from menuhost.schemas.token import Principal
from menuhost.services.subscription_ledger import SubscriptionLedger

logger = structlog.get_logger(__name__)
router = APIRouter()


def _ensure_can_view(principal: Principal, tenant_id: uuid.UUID) -> None:
    """Platform roles see every tenant; tenant admins only their own"""
    permissions = get_permissions_for_role(principal.role)
    if Permission.SUBSCRIPTION_VIEW_ANY in permissions:
        return
    if Permission.SUBSCRIPTION_VIEW_OWN in permissions and principal.tenant_id == tenant_id:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Not allowed to view subscriptions of this tenant",
    )


@router.post("/change", response_model=SubscriptionRead)
async def change_subscription(
    data: SubscriptionChange,
    principal: Principal = Depends(require_permission(Permission.SUBSCRIPTION_MANAGE)),
    ledger: SubscriptionLedger = Depends(get_subscription_ledger),
):
    """Move a tenant onto another plan, closing its current subscription now"""
    try:
        return ledger.change_subscription(data.tenant_id, data.plan_id)
    except MenuHostError as e:
        raise to_http_exception(e)


@router.patch("/{subscription_id}", response_model=SubscriptionRead)
async def update_subscription(
    subscription_id: uuid.UUID,
    patch: SubscriptionUpdate,
    principal: Principal = Depends(require_permission(Permission.SUBSCRIPTION_MANAGE)),
    ledger: SubscriptionLedger = Depends(get_subscription_ledger),
):
    """Edit plan, end date or status of a subscription"""
    try:
        return ledger.update_subscription(subscription_id, patch)
    except MenuHostError as e:
        raise to_http_exception(e)


@router.patch("/{subscription_id}/disable", response_model=SubscriptionRead)
async def disable_subscription(
    subscription_id: uuid.UUID,
    principal: Principal = Depends(require_permission(Permission.SUBSCRIPTION_MANAGE)),
    ledger: SubscriptionLedger = Depends(get_subscription_ledger),
):
    """Cancel a subscription"""
    try:
        return ledger.disable_subscription(subscription_id)
    except MenuHostError as e:
        raise to_http_exception(e)


@router.get("/tenant/{tenant_id}", response_model=List[SubscriptionRead])
async def list_tenant_subscriptions(
    tenant_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    ledger: SubscriptionLedger = Depends(get_subscription_ledger),
):
    """Subscription history of a tenant, newest first"""
    _ensure_can_view(principal, tenant_id)
    try:
        return ledger.list_subscriptions(tenant_id)
    except MenuHostError as e:
        raise to_http_exception(e)


@router.get("/tenant/{tenant_id}/active", response_model=Optional[SubscriptionRead])
async def get_active_subscription(
    tenant_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    ledger: SubscriptionLedger = Depends(get_subscription_ledger),
):
    """The tenant's active subscription, or null"""
    _ensure_can_view(principal, tenant_id)
    return ledger.get_active_subscription(tenant_id)
