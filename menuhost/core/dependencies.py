"""
Authentication, authorization and service dependencies for FastAPI
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session
from typing import Optional
import structlog

from menuhost.core.auth import decode_access_token
from menuhost.core.config import Settings, get_settings
from menuhost.core.database import get_session
from menuhost.core.exceptions import ForbiddenError
from menuhost.core.permissions import Permission, get_permissions_for_role, has_permission
from menuhost.models.subscription import Subscription
from menuhost.schemas.token import Principal
from menuhost.services.access_guard import AccessGuard
from menuhost.services.plan_catalog import PlanCatalog
from menuhost.services.subscription_ledger import SubscriptionLedger
from menuhost.services.tenant_directory import TenantDirectory
from menuhost.services.tenant_provisioner import TenantProvisioner
from menuhost.services.user_accounts import UserAccounts

logger = structlog.get_logger(__name__)
security = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------

async def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[Principal]:
    """Caller identity if a valid bearer token was sent"""
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        principal = Principal(
            sub=payload.get("sub"),
            role=payload.get("role"),
            tenant_id=payload.get("tenant_id"),
        )
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Malformed token claims",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.debug("User authenticated", user_id=str(principal.sub), role=principal.role)
    return principal


async def get_current_principal(
    principal: Optional[Principal] = Depends(get_optional_principal)
) -> Principal:
    """Caller identity; 401 when missing"""
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal


def require_permission(required_permission: Permission):
    """Dependency factory to check permissions"""
    async def check_permission(
        principal: Principal = Depends(get_current_principal)
    ) -> Principal:
        if not has_permission(required_permission, get_permissions_for_role(principal.role)):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission required: {required_permission.value}",
            )
        return principal
    return check_permission


def get_request_subdomain(request: Request) -> Optional[str]:
    """Subdomain stored by TenantSubdomainMiddleware"""
    return getattr(request.state, "tenant_subdomain", None)


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

def get_plan_catalog(session: Session = Depends(get_session)) -> PlanCatalog:
    return PlanCatalog(session)


def get_tenant_directory(session: Session = Depends(get_session)) -> TenantDirectory:
    return TenantDirectory(session)


def get_subscription_ledger(
    session: Session = Depends(get_session),
    plans: PlanCatalog = Depends(get_plan_catalog),
    settings: Settings = Depends(get_settings),
) -> SubscriptionLedger:
    return SubscriptionLedger(session, plans, accelerated=settings.USE_TEST_SUBSCRIPTION_DURATION)


def get_tenant_provisioner(
    session: Session = Depends(get_session),
    tenants: TenantDirectory = Depends(get_tenant_directory),
    plans: PlanCatalog = Depends(get_plan_catalog),
    ledger: SubscriptionLedger = Depends(get_subscription_ledger),
) -> TenantProvisioner:
    return TenantProvisioner(session, tenants, UserAccounts(session), plans, ledger)


def get_access_guard(
    tenants: TenantDirectory = Depends(get_tenant_directory),
    ledger: SubscriptionLedger = Depends(get_subscription_ledger),
) -> AccessGuard:
    return AccessGuard(tenants, ledger)


async def require_active_subscription(
    subdomain: Optional[str] = Depends(get_request_subdomain),
    principal: Optional[Principal] = Depends(get_optional_principal),
    guard: AccessGuard = Depends(get_access_guard),
) -> Subscription:
    """Gate a route on the acting tenant holding a valid subscription"""
    try:
        return guard.authorize(subdomain, principal.tenant_id if principal else None)
    except ForbiddenError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
