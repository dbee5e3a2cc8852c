"""
Unit test for JWT authentication and password hashing
"""

import pytest
from datetime import timedelta
import uuid
from jose import jwt

from menuhost.core.auth import create_access_token, decode_access_token, hash_password, verify_password
from menuhost.core.config import get_settings

settings = get_settings()


def test_create_access_token():
    """Test JWT token creation"""
    user_id = uuid.uuid4()
    tenant_id = uuid.uuid4()

    token = create_access_token(
        user_id=user_id,
        tenant_id=tenant_id,
        role="super_admin",
        expires_delta=timedelta(hours=24)
    )

    assert isinstance(token, str)

    payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    assert payload["sub"] == str(user_id)
    assert payload["tenant_id"] == str(tenant_id)
    assert payload["role"] == "super_admin"
    assert "exp" in payload
    assert "iat" in payload


def test_platform_token_has_no_tenant():
    """Platform operators carry no tenant claim"""
    token = create_access_token(user_id=uuid.uuid4(), role="sys_admin")

    payload = decode_access_token(token)
    assert payload is not None
    assert "tenant_id" not in payload


def test_decode_invalid_token():
    """Test token verification with invalid token"""
    assert decode_access_token("invalid.token.string.here") is None


def test_decode_token_with_wrong_key():
    """Tokens signed with another key are rejected"""
    token = jwt.encode({"sub": str(uuid.uuid4()), "role": "sys_admin"}, "other-key", algorithm="HS256")
    assert decode_access_token(token) is None


def test_expired_token():
    """Test that expired tokens are rejected"""
    token = create_access_token(
        user_id=uuid.uuid4(),
        role="admin",
        expires_delta=timedelta(hours=-1)
    )
    assert decode_access_token(token) is None


def test_password_hashing():
    """Hashes verify only the original password"""
    password_hash = hash_password("secret123")

    assert password_hash != "secret123"
    assert verify_password("secret123", password_hash)
    assert not verify_password("wrong-password", password_hash)
