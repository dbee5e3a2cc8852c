"""
Subscription access guard

Decides whether the acting tenant of a request may use protected resources.
Read-only: a subscription that is still flagged active but whose end date has
passed is denied here and left untouched; it is only demoted the next time
the ledger activates another subscription for the tenant.
"""

from datetime import datetime
from typing import Optional
import uuid

import structlog

from menuhost.core.exceptions import ForbiddenError, NotFoundError
from menuhost.models.subscription import Subscription, SubscriptionStatus
from menuhost.services.subscription_ledger import SubscriptionLedger
from menuhost.services.tenant_directory import TenantDirectory

logger = structlog.get_logger(__name__)


class AccessGuard:
    """Request-time gate on subscription validity"""

    def __init__(self, tenants: TenantDirectory, ledger: SubscriptionLedger):
        self.tenants = tenants
        self.ledger = ledger

    def resolve_tenant_id(
        self,
        subdomain: Optional[str],
        principal_tenant_id: Optional[uuid.UUID],
    ) -> uuid.UUID:
        """Subdomain first, then the authenticated user's tenant"""
        if subdomain:
            try:
                return self.tenants.find_by_subdomain(subdomain).id
            except NotFoundError:
                logger.debug("Unknown subdomain, falling back to principal", subdomain=subdomain)

        if principal_tenant_id is not None:
            return principal_tenant_id

        raise ForbiddenError("Tenant not found. Please provide a valid subdomain or be authenticated.")

    def check(self, tenant_id: uuid.UUID, now: Optional[datetime] = None) -> Subscription:
        """Return the tenant's valid subscription or raise ForbiddenError"""
        subscription = self.ledger.get_active_subscription(tenant_id)

        if subscription is None:
            logger.debug("Access denied: no active subscription", tenant_id=str(tenant_id))
            raise ForbiddenError(
                "No active subscription found. Please renew your subscription to access this resource."
            )

        if subscription.has_lapsed(now):
            logger.debug("Access denied: subscription expired", tenant_id=str(tenant_id), end_date=subscription.end_date.isoformat())
            raise ForbiddenError("Your subscription has expired. Please renew to continue using the service.")

        if subscription.status != SubscriptionStatus.ACTIVE:
            raise ForbiddenError(f"Subscription is {subscription.status.value}. Please contact support.")

        return subscription

    def authorize(
        self,
        subdomain: Optional[str],
        principal_tenant_id: Optional[uuid.UUID],
        now: Optional[datetime] = None,
    ) -> Subscription:
        """Resolve the acting tenant and check its subscription"""
        tenant_id = self.resolve_tenant_id(subdomain, principal_tenant_id)
        return self.check(tenant_id, now)
