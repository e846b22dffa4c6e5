"""
Strongroom tenants module.

Handles tenant (organization / client) management.
"""

from .models import CreateTenantRequest, StrongroomTenant, UpdateTenantRequest
from .tenants import TenantManager

__all__ = [
    "TenantManager",
    "StrongroomTenant",
    "CreateTenantRequest",
    "UpdateTenantRequest",
]
