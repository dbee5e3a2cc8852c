"""
Bootstrap the first platform operator

Run once against an empty database so that somebody can call the
operator-only endpoints:

    python -m menuhost.scripts.seed_sys_admin
"""

import sys
from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select
import structlog

from menuhost.core.auth import create_access_token
from menuhost.core.config import Settings, get_settings
from menuhost.core.database import engine, init_db
from menuhost.core.exceptions import MenuHostError
from menuhost.models.user import User, UserRole
from menuhost.services.user_accounts import UserAccounts

logger = structlog.get_logger(__name__)


def seed_sys_admin(session: Session, settings: Settings) -> Optional[User]:
    """Create the SYS_ADMIN account if no user exists yet"""
    if settings.ENVIRONMENT == "production":
        logger.info("Skipping seed in production")
        return None

    users_count = session.exec(select(func.count()).select_from(User)).one()
    if users_count > 0:
        logger.info("Database already seeded", users=users_count)
        return None

    admin = UserAccounts(session).create_user(
        email=settings.SEED_SYS_ADMIN_EMAIL,
        full_name="System Admin",
        password=settings.SEED_SYS_ADMIN_PASSWORD,
        role=UserRole.SYS_ADMIN,
        is_active=True,
    )
    logger.info("Seed complete", user_id=str(admin.id), email=admin.email)
    return admin


def main():
    """Main entry point for the seed job"""
    settings = get_settings()
    # No-op for tables Alembic already created
    init_db()

    try:
        with Session(engine) as session:
            admin = seed_sys_admin(session, settings)
    except MenuHostError as e:
        logger.error("Seed failed", error=e.message, field=e.field)
        sys.exit(1)

    if admin is not None:
        token = create_access_token(user_id=admin.id, role=admin.role.value)
        print(token)


if __name__ == "__main__":
    main()
