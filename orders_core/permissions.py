# orders_core/permissions.py
from __future__ import annotations

from typing import Optional

from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import BasePermission

from .models import Tenant, TenantMember


# ------------------------------------------------------------------
# Utilities
# ------------------------------------------------------------------
def _parse_int(value) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _lookup_tenant(raw) -> Optional[Tenant]:
    qs = Tenant.objects.filter(is_active=True)
    tenant_id = _parse_int(raw)
    if tenant_id is not None:
        return qs.filter(id=tenant_id).first()
    code = str(raw or "").strip()
    if not code:
        return None
    return qs.filter(code=code).first()


def resolve_current_tenant(request) -> Optional[Tenant]:
    """
    Canonical tenant resolver used by the order APIs.

    Priority:
      1) ?tenant=<id|code>
      2) X-Tenant header (id or code)
      3) single-tenant auto resolution via TenantMember
      4) superuser with exactly one active tenant
    """
    user = getattr(request, "user", None)
    if not user or not user.is_authenticated:
        return None

    raw = getattr(request, "query_params", {}).get("tenant")
    if raw is None:
        raw = getattr(request, "headers", {}).get("X-Tenant")

    if raw is not None:
        tenant = _lookup_tenant(raw)
        if tenant is None:
            return None

        if user.is_superuser:
            return tenant

        if TenantMember.objects.filter(user=user, tenant=tenant).exists():
            return tenant

        return None

    tenants = list(
        Tenant.objects.filter(
            is_active=True,
            members__user=user,
        ).distinct()[:2]
    )
    if len(tenants) == 1:
        return tenants[0]

    if user.is_superuser:
        only = list(Tenant.objects.filter(is_active=True)[:2])
        if len(only) == 1:
            return only[0]

    return None


# ------------------------------------------------------------------
# Permission class
# ------------------------------------------------------------------
class IsTenantMember(BasePermission):
    """
    Authenticated user acting inside a tenant they belong to.

    Sets request.tenant for the view.
    """

    message = (
        "Tenant access denied. Provide ?tenant=<id> or X-Tenant header "
        "and ensure you are a member of that tenant."
    )

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return False

        tenant = resolve_current_tenant(request)
        if tenant is None:
            raise PermissionDenied(self.message)

        request.tenant = tenant
        return True

    def has_object_permission(self, request, view, obj):
        tenant = getattr(request, "tenant", None)
        return tenant is not None and getattr(obj, "tenant_id", None) == tenant.id
