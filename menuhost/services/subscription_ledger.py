"""
Subscription ledger

Owns a tenant's subscription history and keeps at most one subscription per
tenant in ``active`` status. Every path that activates a subscription expires
the tenant's other active rows in the same transaction, with the tenant row
locked so that concurrent activations for one tenant serialize.

Expiry by date is lazy: nothing here rewrites a subscription whose end date
has passed. Readers compare ``end_date`` with the clock themselves (see
menuhost.services.access_guard).
"""

from datetime import datetime, timezone
from typing import List, Optional
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
import structlog

from menuhost.core.exceptions import InternalFailureError, NotFoundError
from menuhost.models.plan import Plan
from menuhost.models.subscription import Subscription, SubscriptionStatus
from menuhost.models.tenant import Tenant
from menuhost.schemas.subscription import SubscriptionUpdate
from menuhost.services.billing_period import period_end
from menuhost.services.plan_catalog import PlanCatalog

logger = structlog.get_logger(__name__)


def to_naive_utc(value: datetime) -> datetime:
    """Timestamps are stored as naive UTC"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class SubscriptionLedger:
    """Create, change, update and disable tenant subscriptions"""

    def __init__(self, session: Session, plans: PlanCatalog, accelerated: bool = False):
        """
        Args:
            session: Request-scoped database session
            plans: Catalog used to resolve plan IDs
            accelerated: Use minute-long billing periods (fixed per process)
        """
        self.session = session
        self.plans = plans
        self.accelerated = accelerated

    def create_subscription(self, tenant: Tenant, plan: Plan) -> Subscription:
        """Expire the tenant's active subscriptions and open a new one on ``plan``"""
        now = datetime.utcnow()
        end_date = period_end(plan.billing_period_unit, plan.billing_period_value, self.accelerated, start=now)

        try:
            self._lock_tenant(tenant.id)
            self._expire_active(tenant.id, now)
            subscription = self._open(tenant.id, plan.id, now, end_date)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to create subscription", tenant_id=str(tenant.id), plan_id=str(plan.id))
            raise InternalFailureError("Failed to create subscription")

        self.session.refresh(subscription)
        logger.info(
            "Subscription activated",
            subscription_id=str(subscription.id),
            tenant_id=str(tenant.id),
            plan_id=str(plan.id),
            end_date=subscription.end_date.isoformat(),
        )
        return subscription

    def change_subscription(self, tenant_id: uuid.UUID, new_plan_id: uuid.UUID) -> Subscription:
        """
        Move a tenant to another plan.

        The current term is cut short: its end date becomes now and its
        status expired. No proration. Works for tenants without any
        prior subscription.
        """
        tenant = self.session.get(Tenant, tenant_id)
        if not tenant:
            raise NotFoundError(f"Tenant with ID {tenant_id} not found", field="tenant_id")
        plan = self.plans.find_by_id(new_plan_id)

        now = datetime.utcnow()
        end_date = period_end(plan.billing_period_unit, plan.billing_period_value, self.accelerated, start=now)

        try:
            self._lock_tenant(tenant_id)
            self._expire_active(tenant_id, now, truncate=True)
            subscription = self._open(tenant_id, plan.id, now, end_date)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to change subscription", tenant_id=str(tenant_id), plan_id=str(new_plan_id))
            raise InternalFailureError("Failed to change subscription")

        self.session.refresh(subscription)
        logger.info(
            "Subscription changed",
            subscription_id=str(subscription.id),
            tenant_id=str(tenant_id),
            plan_id=str(plan.id),
        )
        return subscription

    def update_subscription(self, subscription_id: uuid.UUID, patch: SubscriptionUpdate) -> Subscription:
        """Edit plan, end date or status; activating expires the siblings"""
        subscription = self._get(subscription_id)
        changes = patch.model_dump(exclude_unset=True)
        now = datetime.utcnow()

        if changes.get("plan_id") is not None:
            plan = self.plans.find_by_id(changes["plan_id"])
            subscription.plan_id = plan.id

        if changes.get("end_date") is not None:
            subscription.end_date = to_naive_utc(changes["end_date"])

        status = changes.get("status")
        try:
            if status == SubscriptionStatus.ACTIVE:
                self._lock_tenant(subscription.tenant_id)
                self._expire_active(subscription.tenant_id, now, keep=subscription.id)
                subscription.status = SubscriptionStatus.ACTIVE
            elif status is not None:
                subscription.status = status

            subscription.updated_at = now
            self.session.add(subscription)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to update subscription", subscription_id=str(subscription_id))
            raise InternalFailureError("Failed to update subscription")

        self.session.refresh(subscription)
        logger.info(
            "Subscription updated",
            subscription_id=str(subscription.id),
            fields=sorted(changes),
            status=subscription.status.value,
        )
        return subscription

    def disable_subscription(self, subscription_id: uuid.UUID) -> Subscription:
        """Cancel a subscription; repeating the call changes nothing"""
        subscription = self._get(subscription_id)
        subscription.status = SubscriptionStatus.CANCELED
        subscription.updated_at = datetime.utcnow()
        self.session.add(subscription)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to disable subscription", subscription_id=str(subscription_id))
            raise InternalFailureError("Failed to disable subscription")

        self.session.refresh(subscription)
        logger.info("Subscription canceled", subscription_id=str(subscription_id))
        return subscription

    def get_active_subscription(self, tenant_id: uuid.UUID) -> Optional[Subscription]:
        """The tenant's active row, without checking its end date"""
        return self.session.exec(
            select(Subscription)
            .where(Subscription.tenant_id == tenant_id)
            .where(Subscription.status == SubscriptionStatus.ACTIVE)
            .order_by(Subscription.start_date.desc())
        ).first()

    def list_subscriptions(self, tenant_id: uuid.UUID) -> List[Subscription]:
        """Full history of a tenant, most recent first"""
        if not self.session.get(Tenant, tenant_id):
            raise NotFoundError(f"Tenant with ID {tenant_id} not found", field="tenant_id")
        return list(self.session.exec(
            select(Subscription)
            .where(Subscription.tenant_id == tenant_id)
            .order_by(Subscription.created_at.desc(), Subscription.start_date.desc())
        ).all())

    def _get(self, subscription_id: uuid.UUID) -> Subscription:
        subscription = self.session.get(Subscription, subscription_id)
        if not subscription:
            raise NotFoundError(f"Subscription with ID {subscription_id} not found", field="subscription_id")
        return subscription

    def _lock_tenant(self, tenant_id: uuid.UUID) -> None:
        # FOR UPDATE is dropped by dialects without row locks (SQLite)
        self.session.exec(
            select(Tenant.id).where(Tenant.id == tenant_id).with_for_update()
        ).first()

    def _expire_active(
        self,
        tenant_id: uuid.UUID,
        now: datetime,
        truncate: bool = False,
        keep: Optional[uuid.UUID] = None,
    ) -> int:
        """Mark the tenant's active subscriptions expired, except ``keep``"""
        statement = (
            select(Subscription)
            .where(Subscription.tenant_id == tenant_id)
            .where(Subscription.status == SubscriptionStatus.ACTIVE)
        )
        if keep is not None:
            statement = statement.where(Subscription.id != keep)

        expired = 0
        for subscription in self.session.exec(statement).all():
            subscription.status = SubscriptionStatus.EXPIRED
            if truncate:
                subscription.end_date = now
            subscription.updated_at = now
            self.session.add(subscription)
            expired += 1

        if expired:
            logger.info("Expired active subscriptions", tenant_id=str(tenant_id), count=expired, truncated=truncate)
        return expired

    def _open(self, tenant_id: uuid.UUID, plan_id: uuid.UUID, now: datetime, end_date: datetime) -> Subscription:
        subscription = Subscription(
            tenant_id=tenant_id,
            plan_id=plan_id,
            start_date=now,
            end_date=end_date,
            status=SubscriptionStatus.ACTIVE,
            created_at=now,
        )
        self.session.add(subscription)
        return subscription
