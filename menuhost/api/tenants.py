"""
Tenant API endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, status
import structlog
import uuid

from menuhost.api.errors import to_http_exception
from menuhost.core.dependencies import (
    get_access_guard,
    get_current_principal,
    get_subscription_ledger,
    get_tenant_directory,
    get_tenant_provisioner,
    require_active_subscription,
    require_permission,
)
from menuhost.core.exceptions import MenuHostError
from menuhost.core.permissions import Permission
from menuhost.models.subscription import Subscription
from menuhost.schemas.pagination import Page, PageQuery
from menuhost.schemas.plan import PlanRead
from menuhost.schemas.tenant import (
    ActiveSubscriptionRead,
    PublicTenantProfile,
    TenantAdminUpdate,
    TenantCreate,
    TenantProfileUpdate,
    TenantRead,
    TenantView,
)
from menuhost.schemas.token import Principal
from menuhost.services.access_guard import AccessGuard
from menuhost.services.subscription_ledger import SubscriptionLedger
from menuhost.services.tenant_directory import TenantDirectory
from menuhost.services.tenant_provisioner import TenantProvisioner

logger = structlog.get_logger(__name__)
router = APIRouter()


def _tenant_view(tenant, ledger: SubscriptionLedger) -> TenantView:
    view = TenantView.model_validate(tenant)
    subscription = ledger.get_active_subscription(tenant.id)
    if subscription is not None:
        view.active_subscription = ActiveSubscriptionRead.model_validate(subscription)
        view.active_subscription.plan = PlanRead.model_validate(ledger.plans.find_by_id(subscription.plan_id))
    return view


def _own_tenant_id(principal: Principal) -> uuid.UUID:
    """Tenant named by the caller's token; platform accounts have none"""
    if principal.tenant_id is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User must be associated with a tenant",
        )
    return principal.tenant_id


@router.post("/", response_model=TenantView, status_code=status.HTTP_201_CREATED)
async def create_tenant(
    data: TenantCreate,
    principal: Principal = Depends(require_permission(Permission.TENANT_CREATE)),
    provisioner: TenantProvisioner = Depends(get_tenant_provisioner),
):
    """Provision a tenant with its owner account and first subscription"""
    try:
        return provisioner.create_tenant(data, created_by_id=principal.sub)
    except MenuHostError as e:
        raise to_http_exception(e)


@router.get("/", response_model=Page[TenantRead])
async def list_tenants(
    query: PageQuery = Depends(),
    principal: Principal = Depends(require_permission(Permission.TENANT_VIEW_ANY)),
    tenants: TenantDirectory = Depends(get_tenant_directory),
):
    """Paginated tenant listing"""
    try:
        return tenants.list_tenants(query)
    except MenuHostError as e:
        raise to_http_exception(e)


@router.get("/public/profile", response_model=PublicTenantProfile)
async def get_public_profile(
    subscription: Subscription = Depends(require_active_subscription),
    tenants: TenantDirectory = Depends(get_tenant_directory),
):
    """Guest-facing profile of the tenant addressed by the request"""
    try:
        return tenants.find_by_id(subscription.tenant_id)
    except MenuHostError as e:
        raise to_http_exception(e)


@router.get("/info", response_model=TenantView)
async def get_own_tenant(
    principal: Principal = Depends(get_current_principal),
    guard: AccessGuard = Depends(get_access_guard),
    tenants: TenantDirectory = Depends(get_tenant_directory),
    ledger: SubscriptionLedger = Depends(get_subscription_ledger),
):
    """Profile of the caller's tenant with its current subscription"""
    # The token decides the tenant here, never the subdomain
    tenant_id = _own_tenant_id(principal)
    try:
        guard.check(tenant_id)
        return _tenant_view(tenants.find_by_id(tenant_id), ledger)
    except MenuHostError as e:
        raise to_http_exception(e)


@router.put("/profile", response_model=TenantView)
async def update_own_profile(
    data: TenantProfileUpdate,
    principal: Principal = Depends(require_permission(Permission.TENANT_UPDATE_OWN)),
    tenants: TenantDirectory = Depends(get_tenant_directory),
    ledger: SubscriptionLedger = Depends(get_subscription_ledger),
):
    """Tenant owner edits the public profile of their own tenant"""
    tenant_id = _own_tenant_id(principal)
    try:
        return _tenant_view(tenants.update_profile(tenant_id, data), ledger)
    except MenuHostError as e:
        raise to_http_exception(e)


@router.get("/subdomain/{subdomain}", response_model=TenantView)
async def get_tenant_by_subdomain(
    subdomain: str,
    principal: Principal = Depends(require_permission(Permission.TENANT_VIEW_ANY)),
    tenants: TenantDirectory = Depends(get_tenant_directory),
    ledger: SubscriptionLedger = Depends(get_subscription_ledger),
):
    """Get tenant by subdomain"""
    try:
        return _tenant_view(tenants.find_by_subdomain(subdomain), ledger)
    except MenuHostError as e:
        raise to_http_exception(e)


@router.get("/{tenant_id}", response_model=TenantView)
async def get_tenant(
    tenant_id: uuid.UUID,
    principal: Principal = Depends(require_permission(Permission.TENANT_VIEW_ANY)),
    tenants: TenantDirectory = Depends(get_tenant_directory),
    ledger: SubscriptionLedger = Depends(get_subscription_ledger),
):
    """Get tenant by ID"""
    try:
        return _tenant_view(tenants.find_by_id(tenant_id), ledger)
    except MenuHostError as e:
        raise to_http_exception(e)


@router.put("/{tenant_id}", response_model=TenantView)
async def update_tenant(
    tenant_id: uuid.UUID,
    data: TenantAdminUpdate,
    principal: Principal = Depends(require_permission(Permission.TENANT_MANAGE)),
    tenants: TenantDirectory = Depends(get_tenant_directory),
    ledger: SubscriptionLedger = Depends(get_subscription_ledger),
):
    """Operator edit of a tenant, optionally moving it to another plan"""
    try:
        if data.plan_id is not None:
            # Unknown plans fail before any tenant field is written
            ledger.plans.find_by_id(data.plan_id)

        tenant = tenants.update_tenant(tenant_id, data)

        if data.plan_id is not None:
            current = ledger.get_active_subscription(tenant.id)
            if current is None or current.plan_id != data.plan_id:
                ledger.change_subscription(tenant.id, data.plan_id)
                logger.info("Tenant moved to another plan", tenant_id=str(tenant.id), plan_id=str(data.plan_id))

        return _tenant_view(tenant, ledger)
    except MenuHostError as e:
        raise to_http_exception(e)


@router.delete("/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tenant(
    tenant_id: uuid.UUID,
    principal: Principal = Depends(require_permission(Permission.TENANT_MANAGE)),
    tenants: TenantDirectory = Depends(get_tenant_directory),
):
    """Delete a tenant with its users and subscription history"""
    try:
        tenants.delete_tenant(tenant_id)
    except MenuHostError as e:
        raise to_http_exception(e)
