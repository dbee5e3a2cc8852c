"""
Unit tests for the platform operator seed
"""

from sqlmodel import Session, select

from menuhost.core.config import Settings
from menuhost.models.user import User, UserRole
from menuhost.scripts.seed_sys_admin import seed_sys_admin


def test_seed_creates_sys_admin(db: Session):
    """An empty database gets one active SYS_ADMIN"""
    settings = Settings(SEED_SYS_ADMIN_EMAIL="ops@menuhost.test", SEED_SYS_ADMIN_PASSWORD="ops-secret")

    admin = seed_sys_admin(db, settings)

    assert admin is not None
    assert admin.role == UserRole.SYS_ADMIN
    assert admin.tenant_id is None
    assert admin.is_active is True


def test_seed_is_skipped_when_users_exist(db: Session):
    """Seeding twice creates nothing the second time"""
    settings = Settings(SEED_SYS_ADMIN_EMAIL="ops@menuhost.test", SEED_SYS_ADMIN_PASSWORD="ops-secret")
    seed_sys_admin(db, settings)

    assert seed_sys_admin(db, settings) is None
    assert len(db.exec(select(User)).all()) == 1


def test_seed_is_skipped_in_production(db: Session):
    settings = Settings(ENVIRONMENT="production")

    assert seed_sys_admin(db, settings) is None
    assert db.exec(select(User)).all() == []
