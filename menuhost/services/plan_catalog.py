"""
Plan catalog: lookup of billing terms and plan administration
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
import math
import uuid

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select
import structlog

from menuhost.core.exceptions import ConflictError, NotFoundError, ValidationFailedError
from menuhost.models.plan import BILLING_TERMS, Plan
from menuhost.models.subscription import Subscription
from menuhost.schemas.pagination import Page, PageQuery
from menuhost.schemas.plan import PlanCreate, PlanStatistics, PlanUpdate

logger = structlog.get_logger(__name__)

SORTABLE_COLUMNS = {
    "name", "price", "currency", "billing_period_unit", "billing_period_value",
    "is_popular", "is_archived", "created_at", "updated_at",
}


class PlanCatalog:
    """Read and administer plans"""

    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, plan_id: uuid.UUID) -> Plan:
        """Resolve a plan, archived or not; raises NotFoundError"""
        plan = self.session.get(Plan, plan_id)
        if not plan:
            raise NotFoundError(f"Plan with ID {plan_id} not found", field="plan_id")
        return plan

    def list_plans(self, query: PageQuery, is_archived: Optional[bool] = None) -> Page[Plan]:
        """Paginated, sortable, searchable plan listing"""
        sort_by = query.sort_by or "created_at"
        if sort_by not in SORTABLE_COLUMNS:
            raise ValidationFailedError(f"Cannot sort by '{sort_by}'", field="sort_by")

        statement = select(Plan)
        if is_archived is not None:
            statement = statement.where(Plan.is_archived == is_archived)
        if query.search:
            statement = statement.where(func.lower(Plan.name).contains(query.search.lower()))

        total = self.session.exec(
            select(func.count()).select_from(statement.subquery())
        ).one()
        total_pages = math.ceil(total / query.limit)

        if query.offset >= total:
            return Page(data=[], total_elements=total, total_pages=total_pages, has_next=False)

        column = getattr(Plan, sort_by)
        statement = statement.order_by(column.desc() if query.descending else column.asc())
        plans = self.session.exec(statement.offset(query.offset).limit(query.limit)).all()

        return Page(
            data=list(plans),
            total_elements=total,
            total_pages=total_pages,
            has_next=query.page < total_pages,
        )

    def list_public_plans(self, include_archived: bool = False) -> List[Plan]:
        """Plans on sale, cheapest first"""
        statement = select(Plan)
        if not include_archived:
            statement = statement.where(Plan.is_archived == False)  # noqa: E712
        return list(self.session.exec(statement.order_by(Plan.price.asc())).all())

    def create_plan(self, data: PlanCreate) -> Plan:
        plan = Plan(**data.model_dump())
        self.session.add(plan)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError(f"A plan named '{data.name}' already exists", field="name")
        self.session.refresh(plan)
        logger.info("Plan created", plan_id=str(plan.id), name=plan.name)
        return plan

    def update_plan(self, plan_id: uuid.UUID, data: PlanUpdate) -> Plan:
        """Apply a partial update; billing terms of a plan in use cannot change"""
        plan = self.find_by_id(plan_id)
        changes = data.model_dump(exclude_unset=True)

        changed_terms = [
            key for key in BILLING_TERMS
            if key in changes and changes[key] != getattr(plan, key)
        ]
        if changed_terms and self.count_subscriptions(plan_id) > 0:
            raise ConflictError(
                f"Cannot change {', '.join(changed_terms)} of a plan that has subscriptions",
                field=changed_terms[0],
            )

        for key, value in changes.items():
            setattr(plan, key, value)
        plan.updated_at = datetime.utcnow()
        self.session.add(plan)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError(f"A plan named '{changes.get('name')}' already exists", field="name")
        self.session.refresh(plan)
        logger.info("Plan updated", plan_id=str(plan.id), fields=sorted(changes))
        return plan

    def delete_plan(self, plan_id: uuid.UUID) -> None:
        """Delete a plan no subscription has ever referenced"""
        plan = self.find_by_id(plan_id)

        subscriptions_count = self.count_subscriptions(plan_id)
        if subscriptions_count > 0:
            raise ConflictError(
                f"Cannot delete plan. There are {subscriptions_count} subscription(s) using this plan. "
                "Please update or delete the subscriptions first."
            )

        self.session.delete(plan)
        self.session.commit()
        logger.info("Plan deleted", plan_id=str(plan_id))

    def toggle_archive(self, plan_id: uuid.UUID) -> Plan:
        """Flip the archived flag; existing subscriptions are untouched"""
        plan = self.find_by_id(plan_id)
        plan.is_archived = not plan.is_archived
        plan.updated_at = datetime.utcnow()
        self.session.add(plan)
        self.session.commit()
        self.session.refresh(plan)
        logger.info("Plan archive toggled", plan_id=str(plan_id), is_archived=plan.is_archived)
        return plan

    def statistics(self) -> PlanStatistics:
        """Counts and averages over non-archived plans"""
        total_plans = self.session.exec(
            select(func.count()).select_from(Plan).where(Plan.is_archived == False)  # noqa: E712
        ).one()
        average = self.session.exec(
            select(func.avg(Plan.price)).where(Plan.is_archived == False)  # noqa: E712
        ).one()
        popular = self.session.exec(
            select(Plan.name).where(Plan.is_popular == True, Plan.is_archived == False)  # noqa: E712
        ).first()

        average_price = 0.0
        if average is not None:
            average_price = float(Decimal(str(average)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))

        return PlanStatistics(
            total_plans=total_plans,
            average_price=average_price,
            popular_plan_name=popular,
        )

    def count_subscriptions(self, plan_id: uuid.UUID) -> int:
        return self.session.exec(
            select(func.count()).select_from(Subscription).where(Subscription.plan_id == plan_id)
        ).one()
