"""
Tenant lookups and edits
"""

from datetime import datetime
import math
from typing import Any, Dict, Optional
import uuid

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select
import structlog

from menuhost.core.exceptions import (
    ConflictError,
    InternalFailureError,
    NotFoundError,
    ValidationFailedError,
)
from menuhost.models.subscription import Subscription
from menuhost.models.tenant import Tenant
from menuhost.models.user import User
from menuhost.schemas.pagination import Page, PageQuery
from menuhost.schemas.tenant import TenantAdminUpdate, TenantProfileUpdate

logger = structlog.get_logger(__name__)

SORTABLE_COLUMNS = {"name", "subdomain", "email", "created_at", "updated_at"}

# Columns that cannot be cleared by sending null
NOT_NULLABLE = {"name", "subdomain", "email", "show_info_to_clients"}


class TenantDirectory:
    """Find, edit and remove tenants"""

    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, tenant_id: uuid.UUID) -> Tenant:
        tenant = self.session.get(Tenant, tenant_id)
        if not tenant:
            raise NotFoundError(f"Tenant with ID {tenant_id} not found", field="tenant_id")
        return tenant

    def find_by_subdomain(self, subdomain: str) -> Tenant:
        tenant = self.session.exec(
            select(Tenant).where(Tenant.subdomain == subdomain.lower())
        ).first()
        if not tenant:
            raise NotFoundError(f"Tenant with subdomain '{subdomain}' not found", field="subdomain")
        return tenant

    def subdomain_taken(self, subdomain: str, exclude: Optional[uuid.UUID] = None) -> bool:
        statement = select(Tenant.id).where(Tenant.subdomain == subdomain.lower())
        if exclude is not None:
            statement = statement.where(Tenant.id != exclude)
        return self.session.exec(statement).first() is not None

    def email_taken(self, email: str, exclude: Optional[uuid.UUID] = None) -> bool:
        statement = select(Tenant.id).where(func.lower(Tenant.email) == email.lower())
        if exclude is not None:
            statement = statement.where(Tenant.id != exclude)
        return self.session.exec(statement).first() is not None

    def name_taken(self, name: str, exclude: Optional[uuid.UUID] = None) -> bool:
        statement = select(Tenant.id).where(Tenant.name == name)
        if exclude is not None:
            statement = statement.where(Tenant.id != exclude)
        return self.session.exec(statement).first() is not None

    def list_tenants(self, query: PageQuery) -> Page[Tenant]:
        """Paginated tenant listing with search over name, subdomain and email"""
        sort_by = query.sort_by or "created_at"
        if sort_by not in SORTABLE_COLUMNS:
            raise ValidationFailedError(f"Cannot sort by '{sort_by}'", field="sort_by")

        statement = select(Tenant)
        if query.search:
            term = f"%{query.search.lower()}%"
            statement = statement.where(or_(
                func.lower(Tenant.name).like(term),
                func.lower(Tenant.subdomain).like(term),
                func.lower(Tenant.email).like(term),
            ))

        total = self.session.exec(
            select(func.count()).select_from(statement.subquery())
        ).one()
        total_pages = math.ceil(total / query.limit)
        if query.offset >= total:
            return Page(data=[], total_elements=total, total_pages=total_pages, has_next=False)

        column = getattr(Tenant, sort_by)
        statement = statement.order_by(column.desc() if query.descending else column.asc())
        tenants = self.session.exec(statement.offset(query.offset).limit(query.limit)).all()
        return Page(
            data=list(tenants),
            total_elements=total,
            total_pages=total_pages,
            has_next=query.page < total_pages,
        )

    def update_profile(self, tenant_id: uuid.UUID, patch: TenantProfileUpdate) -> Tenant:
        """Owner edit of the public profile"""
        tenant = self.find_by_id(tenant_id)
        changes = self._changes(patch)
        self._ensure_unique(tenant.id, changes)
        return self._apply(tenant, changes)

    def update_tenant(self, tenant_id: uuid.UUID, patch: TenantAdminUpdate) -> Tenant:
        """
        Operator edit of a tenant.

        Name, subdomain and email stay unique across tenants. A plan change is
        not handled here; it goes through the subscription ledger.
        """
        tenant = self.find_by_id(tenant_id)
        changes = self._changes(patch, exclude={"plan_id"})
        if "subdomain" in changes:
            changes["subdomain"] = changes["subdomain"].lower()
        self._ensure_unique(tenant.id, changes)
        return self._apply(tenant, changes)

    def delete_tenant(self, tenant_id: uuid.UUID) -> None:
        """Remove a tenant together with its users and subscription history"""
        tenant = self.find_by_id(tenant_id)
        try:
            subscriptions = self.session.exec(
                select(Subscription).where(Subscription.tenant_id == tenant_id)
            ).all()
            users = self.session.exec(select(User).where(User.tenant_id == tenant_id)).all()
            for row in [*subscriptions, *users]:
                self.session.delete(row)
            # Dependents go first; the models carry no relationships to order them
            self.session.flush()
            self.session.delete(tenant)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to delete tenant", tenant_id=str(tenant_id))
            raise InternalFailureError("Failed to delete tenant")

        logger.info(
            "Tenant deleted",
            tenant_id=str(tenant_id),
            users=len(users),
            subscriptions=len(subscriptions),
        )

    def _changes(self, patch, exclude: Optional[set] = None) -> Dict[str, Any]:
        changes = patch.model_dump(exclude_unset=True, exclude=exclude)
        return {
            key: value for key, value in changes.items()
            if value is not None or key not in NOT_NULLABLE
        }

    def _ensure_unique(self, tenant_id: uuid.UUID, changes: Dict[str, Any]) -> None:
        if "subdomain" in changes and self.subdomain_taken(changes["subdomain"], exclude=tenant_id):
            raise ConflictError(f"Subdomain '{changes['subdomain']}' is already taken", field="subdomain")
        if "email" in changes and self.email_taken(changes["email"], exclude=tenant_id):
            raise ConflictError(f"A tenant with email '{changes['email']}' already exists", field="email")
        if "name" in changes and self.name_taken(changes["name"], exclude=tenant_id):
            raise ConflictError(f"A tenant named '{changes['name']}' already exists", field="name")

    def _apply(self, tenant: Tenant, changes: Dict[str, Any]) -> Tenant:
        for key, value in changes.items():
            setattr(tenant, key, value)
        tenant.updated_at = datetime.utcnow()
        self.session.add(tenant)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            # Lost a race with a concurrent edit claiming the same value
            raise ConflictError("Tenant name, subdomain or email is already taken") from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Failed to update tenant", tenant_id=str(tenant.id))
            raise InternalFailureError("Failed to update tenant") from e

        self.session.refresh(tenant)
        logger.info("Tenant updated", tenant_id=str(tenant.id), fields=sorted(changes))
        return tenant
