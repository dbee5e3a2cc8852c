"""
Tenant provisioning

Creates a tenant, its owner account and its first subscription as a sequence
of separate commits. Failures while creating the owner account (or resolving
the requested plan) are compensated by deleting what was already written, and
the original error is re-raised. It is flagged ``rolled_back`` only when
that compensation succeeded, so callers know a retry will not collide with
leftover rows. A failure of the subscription insert itself is logged and
swallowed: the tenant then exists without an active subscription, which the
access guard treats as a denial, not as corruption.
"""

from typing import Optional
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
import structlog

from menuhost.core.exceptions import (
    ConflictError,
    InternalFailureError,
    MenuHostError,
)
from menuhost.models.subscription import Subscription
from menuhost.models.tenant import Tenant
from menuhost.models.user import User, UserRole
from menuhost.schemas.plan import PlanRead
from menuhost.schemas.tenant import ActiveSubscriptionRead, TenantCreate, TenantView
from menuhost.services.plan_catalog import PlanCatalog
from menuhost.services.subscription_ledger import SubscriptionLedger
from menuhost.services.tenant_directory import TenantDirectory
from menuhost.services.user_accounts import UserAccounts

logger = structlog.get_logger(__name__)


class TenantProvisioner:
    """Orchestrates tenant -> owner account -> initial subscription"""

    def __init__(
        self,
        session: Session,
        tenants: TenantDirectory,
        users: UserAccounts,
        plans: PlanCatalog,
        ledger: SubscriptionLedger,
    ):
        self.session = session
        self.tenants = tenants
        self.users = users
        self.plans = plans
        self.ledger = ledger

    def create_tenant(self, data: TenantCreate, created_by_id: Optional[uuid.UUID] = None) -> TenantView:
        subdomain = data.subdomain.lower()

        if self.tenants.subdomain_taken(subdomain):
            raise ConflictError(f"Subdomain '{subdomain}' is already taken", field="subdomain")
        if self.tenants.email_taken(data.email):
            raise ConflictError(f"A tenant with email '{data.email}' already exists", field="email")
        name = data.name or subdomain
        if self.tenants.name_taken(name):
            raise ConflictError(f"A tenant named '{name}' already exists", field="name")

        tenant = self._insert_tenant(data, name, subdomain, created_by_id)
        tenant_id = tenant.id
        log = logger.bind(tenant_id=str(tenant_id), subdomain=subdomain)

        # From here on the tenant row is compensated on failure
        owner: Optional[User] = None
        try:
            owner = self.users.create_user(
                email=data.email,
                full_name=data.full_name,
                password=data.password,
                role=UserRole.SUPER_ADMIN,
                tenant_id=tenant.id,
                created_by_id=created_by_id,
                is_active=True,
            )
            plan = self.plans.find_by_id(data.plan_id)
        except MenuHostError as e:
            rolled_back = self._roll_back(tenant_id, owner)
            log.info("Tenant provisioning aborted", reason=e.message, field=e.field, rolled_back=rolled_back)
            if rolled_back:
                raise e.with_rollback() from e
            raise
        except Exception as e:
            rolled_back = self._roll_back(tenant_id, owner)
            log.exception("Tenant provisioning failed unexpectedly", rolled_back=rolled_back)
            raise InternalFailureError("Failed to create tenant", rolled_back=rolled_back) from e

        subscription: Optional[Subscription] = None
        try:
            subscription = self.ledger.create_subscription(tenant, plan)
        except MenuHostError as e:
            # Tenant and owner stay; the tenant has no active subscription
            log.error("Initial subscription not created", plan_id=str(plan.id), reason=e.message)

        log.info(
            "Tenant provisioned",
            owner_id=str(owner.id),
            subscription_id=str(subscription.id) if subscription else None,
        )
        self.session.refresh(tenant)
        view = TenantView.model_validate(tenant)
        if subscription is not None:
            view.active_subscription = ActiveSubscriptionRead.model_validate(subscription)
            view.active_subscription.plan = PlanRead.model_validate(plan)
        return view

    def _insert_tenant(self, data: TenantCreate, name: str, subdomain: str, created_by_id: Optional[uuid.UUID]) -> Tenant:
        tenant = Tenant(
            name=name,
            subdomain=subdomain,
            email=data.email,
            phone=data.phone,
            created_by_id=created_by_id,
        )
        self.session.add(tenant)
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            # Lost a race with a concurrent request for the same name/subdomain/email
            if (
                self.tenants.subdomain_taken(subdomain)
                or self.tenants.email_taken(data.email)
                or self.tenants.name_taken(name)
            ):
                raise ConflictError("Tenant name, subdomain or email is already taken") from e
            logger.exception("Failed to insert tenant", subdomain=subdomain)
            raise InternalFailureError("Failed to create tenant") from e
        self.session.refresh(tenant)
        return tenant

    def _roll_back(self, tenant_id: uuid.UUID, owner: Optional[User]) -> bool:
        """Compensating delete; returns False when rows may have been left behind"""
        try:
            self.session.rollback()
            if owner is not None:
                self.users.delete_user(owner.id)
            tenant = self.session.get(Tenant, tenant_id)
            if tenant is not None:
                self.session.delete(tenant)
                self.session.commit()
            logger.info("Tenant rolled back", tenant_id=str(tenant_id))
            return True
        except Exception:
            self.session.rollback()
            logger.exception("Failed to roll back tenant", tenant_id=str(tenant_id))
            return False
