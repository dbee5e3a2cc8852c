"""
HTTP routers
"""

from menuhost.api import plans, subscriptions, tenants

__all__ = [
    "plans",
    "subscriptions",
    "tenants",
]
