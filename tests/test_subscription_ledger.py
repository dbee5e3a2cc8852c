"""
Unit tests for the subscription ledger
"""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock
import uuid

from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from menuhost.core.exceptions import InternalFailureError, NotFoundError
from menuhost.models.plan import Plan
from menuhost.models.subscription import Subscription, SubscriptionStatus
from menuhost.models.tenant import Tenant
from menuhost.schemas.subscription import SubscriptionUpdate
from menuhost.services.billing_period import add_months
from menuhost.services.plan_catalog import PlanCatalog
from menuhost.services.subscription_ledger import SubscriptionLedger


def active_count(db: Session, tenant_id: uuid.UUID) -> int:
    return len(db.exec(
        select(Subscription)
        .where(Subscription.tenant_id == tenant_id)
        .where(Subscription.status == SubscriptionStatus.ACTIVE)
    ).all())


def test_create_subscription_opens_active_term(ledger: SubscriptionLedger, tenant: Tenant, monthly_plan: Plan):
    """A new subscription is active for one billing period"""
    subscription = ledger.create_subscription(tenant, monthly_plan)

    assert subscription.status == SubscriptionStatus.ACTIVE
    assert subscription.tenant_id == tenant.id
    assert subscription.plan_id == monthly_plan.id
    assert subscription.end_date == add_months(subscription.start_date, 1)


def test_create_subscription_twice_keeps_one_active(
    db: Session, ledger: SubscriptionLedger, tenant: Tenant, monthly_plan: Plan
):
    """The second subscription supersedes the first"""
    first = ledger.create_subscription(tenant, monthly_plan)
    second = ledger.create_subscription(tenant, monthly_plan)

    db.refresh(first)
    assert first.status == SubscriptionStatus.EXPIRED
    assert second.status == SubscriptionStatus.ACTIVE
    assert active_count(db, tenant.id) == 1
    assert ledger.get_active_subscription(tenant.id).id == second.id


def test_accelerated_ledger_uses_minutes(
    db: Session, plan_catalog: PlanCatalog, tenant: Tenant, yearly_plan: Plan
):
    """Accelerated mode shrinks a year to five minutes"""
    ledger = SubscriptionLedger(db, plan_catalog, accelerated=True)
    subscription = ledger.create_subscription(tenant, yearly_plan)
    assert subscription.end_date - subscription.start_date == timedelta(minutes=5)


def test_change_subscription_truncates_previous_term(
    db: Session, ledger: SubscriptionLedger, tenant: Tenant, monthly_plan: Plan, yearly_plan: Plan
):
    """Changing plan ends the current term now"""
    old = ledger.create_subscription(tenant, monthly_plan)
    new = ledger.change_subscription(tenant.id, yearly_plan.id)

    db.refresh(old)
    assert old.status == SubscriptionStatus.EXPIRED
    assert old.end_date == new.start_date
    assert new.status == SubscriptionStatus.ACTIVE
    assert new.plan_id == yearly_plan.id
    assert new.end_date == add_months(new.start_date, 12)
    assert active_count(db, tenant.id) == 1


def test_change_subscription_without_prior_subscription(
    ledger: SubscriptionLedger, tenant: Tenant, monthly_plan: Plan
):
    """A tenant with no history can be put on a plan"""
    subscription = ledger.change_subscription(tenant.id, monthly_plan.id)
    assert subscription.status == SubscriptionStatus.ACTIVE


def test_change_subscription_unknown_tenant(ledger: SubscriptionLedger, monthly_plan: Plan):
    """Unknown tenant is reported as not found"""
    with pytest.raises(NotFoundError) as exc_info:
        ledger.change_subscription(uuid.uuid4(), monthly_plan.id)
    assert exc_info.value.field == "tenant_id"


def test_change_subscription_unknown_plan(db: Session, ledger: SubscriptionLedger, tenant: Tenant, monthly_plan: Plan):
    """Unknown plan leaves the current subscription untouched"""
    current = ledger.create_subscription(tenant, monthly_plan)

    with pytest.raises(NotFoundError) as exc_info:
        ledger.change_subscription(tenant.id, uuid.uuid4())
    assert exc_info.value.field == "plan_id"

    db.refresh(current)
    assert current.status == SubscriptionStatus.ACTIVE


def test_update_to_active_expires_siblings(
    db: Session, ledger: SubscriptionLedger, tenant: Tenant, monthly_plan: Plan, yearly_plan: Plan
):
    """Reactivating an old subscription demotes the current one"""
    old = ledger.create_subscription(tenant, monthly_plan)
    current = ledger.change_subscription(tenant.id, yearly_plan.id)

    reactivated = ledger.update_subscription(old.id, SubscriptionUpdate(status=SubscriptionStatus.ACTIVE))

    db.refresh(current)
    assert reactivated.status == SubscriptionStatus.ACTIVE
    assert current.status == SubscriptionStatus.EXPIRED
    assert active_count(db, tenant.id) == 1


def test_update_end_date_is_stored_as_naive_utc(ledger: SubscriptionLedger, tenant: Tenant, monthly_plan: Plan):
    """Offset-aware end dates are normalized"""
    subscription = ledger.create_subscription(tenant, monthly_plan)
    end_date = datetime(2030, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))

    updated = ledger.update_subscription(subscription.id, SubscriptionUpdate(end_date=end_date))

    assert updated.end_date == datetime(2030, 1, 1, 10, 0)
    assert updated.status == SubscriptionStatus.ACTIVE


def test_update_plan(ledger: SubscriptionLedger, tenant: Tenant, monthly_plan: Plan, yearly_plan: Plan):
    """Plan can be swapped without touching the term"""
    subscription = ledger.create_subscription(tenant, monthly_plan)
    end_date = subscription.end_date

    updated = ledger.update_subscription(subscription.id, SubscriptionUpdate(plan_id=yearly_plan.id))

    assert updated.plan_id == yearly_plan.id
    assert updated.end_date == end_date


def test_update_to_inert_status(ledger: SubscriptionLedger, tenant: Tenant, monthly_plan: Plan):
    """Non-active statuses are stored as given"""
    subscription = ledger.create_subscription(tenant, monthly_plan)
    updated = ledger.update_subscription(subscription.id, SubscriptionUpdate(status=SubscriptionStatus.UNPAID))

    assert updated.status == SubscriptionStatus.UNPAID
    assert ledger.get_active_subscription(tenant.id) is None


def test_update_unknown_plan(ledger: SubscriptionLedger, tenant: Tenant, monthly_plan: Plan):
    """Unknown plan on update is not found"""
    subscription = ledger.create_subscription(tenant, monthly_plan)
    with pytest.raises(NotFoundError):
        ledger.update_subscription(subscription.id, SubscriptionUpdate(plan_id=uuid.uuid4()))


def test_update_unknown_subscription(ledger: SubscriptionLedger):
    """Unknown subscription is not found"""
    with pytest.raises(NotFoundError) as exc_info:
        ledger.update_subscription(uuid.uuid4(), SubscriptionUpdate(status=SubscriptionStatus.ACTIVE))
    assert exc_info.value.field == "subscription_id"


def test_disable_subscription(ledger: SubscriptionLedger, tenant: Tenant, monthly_plan: Plan):
    """Disabling cancels and is idempotent"""
    subscription = ledger.create_subscription(tenant, monthly_plan)

    assert ledger.disable_subscription(subscription.id).status == SubscriptionStatus.CANCELED
    assert ledger.disable_subscription(subscription.id).status == SubscriptionStatus.CANCELED
    assert ledger.get_active_subscription(tenant.id) is None


def test_disable_unknown_subscription(ledger: SubscriptionLedger):
    """Unknown subscription is not found"""
    with pytest.raises(NotFoundError):
        ledger.disable_subscription(uuid.uuid4())


def test_disable_storage_failure_is_internal(
    monkeypatch, db: Session, ledger: SubscriptionLedger, tenant: Tenant, monthly_plan: Plan
):
    """A failed commit is rolled back and reported as an internal failure"""
    subscription = ledger.create_subscription(tenant, monthly_plan)
    monkeypatch.setattr(db, "commit", Mock(side_effect=OperationalError("UPDATE subscriptions", {}, Exception("connection lost"))))

    with pytest.raises(InternalFailureError):
        ledger.disable_subscription(subscription.id)

    assert ledger.get_active_subscription(tenant.id).id == subscription.id


def test_list_subscriptions_newest_first(
    ledger: SubscriptionLedger, tenant: Tenant, monthly_plan: Plan, yearly_plan: Plan
):
    """History is returned most recent first"""
    first = ledger.create_subscription(tenant, monthly_plan)
    second = ledger.change_subscription(tenant.id, yearly_plan.id)

    history = ledger.list_subscriptions(tenant.id)
    assert [s.id for s in history] == [second.id, first.id]


def test_list_subscriptions_unknown_tenant(ledger: SubscriptionLedger):
    """Unknown tenant is not found"""
    with pytest.raises(NotFoundError):
        ledger.list_subscriptions(uuid.uuid4())


def test_subscriptions_of_other_tenants_untouched(
    db: Session, ledger: SubscriptionLedger, tenant: Tenant, monthly_plan: Plan
):
    """Activation only demotes rows of the same tenant"""
    other = Tenant(name="Bistro Dos", subdomain="bistro-dos", email="owner@bistro-dos.com")
    db.add(other)
    db.commit()
    db.refresh(other)

    theirs = ledger.create_subscription(other, monthly_plan)
    ledger.create_subscription(tenant, monthly_plan)
    ledger.create_subscription(tenant, monthly_plan)

    db.refresh(theirs)
    assert theirs.status == SubscriptionStatus.ACTIVE
    assert active_count(db, other.id) == 1
    assert active_count(db, tenant.id) == 1


def test_single_active_after_mixed_operations(
    db: Session, ledger: SubscriptionLedger, tenant: Tenant, monthly_plan: Plan, yearly_plan: Plan
):
    """Any sequence of activations leaves at most one active row"""
    a = ledger.create_subscription(tenant, monthly_plan)
    assert active_count(db, tenant.id) == 1

    b = ledger.change_subscription(tenant.id, yearly_plan.id)
    assert active_count(db, tenant.id) == 1

    ledger.update_subscription(a.id, SubscriptionUpdate(status=SubscriptionStatus.ACTIVE))
    assert active_count(db, tenant.id) == 1

    ledger.update_subscription(b.id, SubscriptionUpdate(status=SubscriptionStatus.ACTIVE))
    assert active_count(db, tenant.id) == 1

    ledger.disable_subscription(b.id)
    assert active_count(db, tenant.id) == 0

    ledger.create_subscription(tenant, monthly_plan)
    assert active_count(db, tenant.id) == 1
