"""
Test configuration for pytest
"""

import pytest
import os
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session
from typing import Generator
import uuid

# Test environment variables
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["USE_TEST_SUBSCRIPTION_DURATION"] = "false"

from fastapi.testclient import TestClient  # noqa: E402

import menuhost.models  # noqa: E402,F401
from menuhost.core.auth import create_access_token  # noqa: E402
from menuhost.core.database import get_session  # noqa: E402
from menuhost.main import app  # noqa: E402
from menuhost.models.plan import BillingPeriodUnit, Plan  # noqa: E402
from menuhost.models.tenant import Tenant  # noqa: E402
from menuhost.models.user import UserRole  # noqa: E402
from menuhost.schemas.plan import PlanCreate  # noqa: E402
from menuhost.services.access_guard import AccessGuard  # noqa: E402
from menuhost.services.plan_catalog import PlanCatalog  # noqa: E402
from menuhost.services.subscription_ledger import SubscriptionLedger  # noqa: E402
from menuhost.services.tenant_directory import TenantDirectory  # noqa: E402
from menuhost.services.tenant_provisioner import TenantProvisioner  # noqa: E402
from menuhost.services.user_accounts import UserAccounts  # noqa: E402


# Create test engine using in-memory SQLite shared by every connection
test_engine = create_engine(
    "sqlite:///:memory:",
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a clean database session for each test"""
    # Create all tables
    SQLModel.metadata.create_all(test_engine)

    # Create session
    with Session(test_engine) as session:
        yield session

    # Cleanup
    SQLModel.metadata.drop_all(test_engine)


# Services
@pytest.fixture
def plan_catalog(db: Session) -> PlanCatalog:
    return PlanCatalog(db)


@pytest.fixture
def ledger(db: Session, plan_catalog: PlanCatalog) -> SubscriptionLedger:
    return SubscriptionLedger(db, plan_catalog)


@pytest.fixture
def tenant_directory(db: Session) -> TenantDirectory:
    return TenantDirectory(db)


@pytest.fixture
def provisioner(
    db: Session,
    tenant_directory: TenantDirectory,
    plan_catalog: PlanCatalog,
    ledger: SubscriptionLedger,
) -> TenantProvisioner:
    return TenantProvisioner(db, tenant_directory, UserAccounts(db), plan_catalog, ledger)


@pytest.fixture
def guard(tenant_directory: TenantDirectory, ledger: SubscriptionLedger) -> AccessGuard:
    return AccessGuard(tenant_directory, ledger)


# Data
@pytest.fixture
def monthly_plan(plan_catalog: PlanCatalog) -> Plan:
    """A one-month plan"""
    return plan_catalog.create_plan(PlanCreate(
        name="Basic",
        price=Decimal("10.00"),
        billing_period_unit=BillingPeriodUnit.MONTH,
        billing_period_value=1,
        features=["Digital menu", "QR code"],
    ))


@pytest.fixture
def yearly_plan(plan_catalog: PlanCatalog) -> Plan:
    """A one-year plan"""
    return plan_catalog.create_plan(PlanCreate(
        name="Pro",
        price=Decimal("100.00"),
        billing_period_unit=BillingPeriodUnit.YEAR,
        billing_period_value=1,
        features=["Digital menu", "QR code", "Custom theme"],
        is_popular=True,
    ))


@pytest.fixture
def tenant(db: Session) -> Tenant:
    """A tenant without any subscription"""
    tenant = Tenant(
        name="Cafe Uno",
        subdomain="cafe-uno",
        email="owner@cafe-uno.com",
        phone="555-1234",
    )
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


# HTTP
@pytest.fixture
def client(db: Session) -> Generator[TestClient, None, None]:
    """Test client sharing the test database session"""
    def override_get_session():
        yield db

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


def bearer(role: UserRole, tenant_id: uuid.UUID = None) -> dict:
    """Authorization header for a freshly minted token"""
    token = create_access_token(user_id=uuid.uuid4(), role=role.value, tenant_id=tenant_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def sys_admin_headers() -> dict:
    return bearer(UserRole.SYS_ADMIN)


@pytest.fixture
def support_headers() -> dict:
    return bearer(UserRole.SUPPORT)


@pytest.fixture
def headers_for():
    """Build an Authorization header for a role and optional tenant"""
    return bearer
