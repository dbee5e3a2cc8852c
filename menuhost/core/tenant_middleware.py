"""
Tenant subdomain middleware for multi-tenant routing
"""

from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request
from typing import Callable, Optional
import structlog

from menuhost.core.config import get_settings

logger = structlog.get_logger(__name__)
settings = get_settings()


def extract_subdomain(header_value: Optional[str], host: Optional[str]) -> Optional[str]:
    """Subdomain from the explicit header, else the first label of the host"""
    subdomain = header_value
    if not subdomain and host:
        # Extract subdomain from host: tenant.example.com[:port]
        hostname = host.split(":")[0]
        parts = hostname.split(".")
        if len(parts) > 2:
            subdomain = parts[0]
    return subdomain.lower() if subdomain else None


class TenantSubdomainMiddleware(BaseHTTPMiddleware):
    """Middleware to extract the tenant subdomain into request state"""

    async def dispatch(self, request: Request, call_next: Callable):
        subdomain = extract_subdomain(
            request.headers.get(settings.TENANT_SUBDOMAIN_HEADER),
            request.headers.get("host"),
        )
        request.state.tenant_subdomain = subdomain

        logger.debug("Tenant subdomain", subdomain=subdomain)

        response = await call_next(request)
        return response
