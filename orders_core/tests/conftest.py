# orders_core/tests/conftest.py

from __future__ import annotations

import uuid
from datetime import timedelta
from typing import Any, Callable, Optional

import pytest
from django.contrib.auth import authenticate, get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from orders_core.models import (
    Order,
    OrderIssue,
    OrderItem,
    OrderPiece,
    Tenant,
    TenantMember,
    TenantWorkflowSettings,
)
from orders_core.workflows.rules import IMMUTABLE_STATUSES


def _rand(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class AuthAPIClient(APIClient):
    """
    Test client that uses force_authenticate for predictable DRF auth.
    """

    _user = None

    def login(self, username: str, password: str, **kwargs) -> bool:  # type: ignore[override]
        user = authenticate(username=username, password=password)
        if not user:
            return False
        self.force_authenticate(user=user)
        self._user = user
        return True

    def logout(self) -> None:  # type: ignore[override]
        # DO NOT call force_authenticate(user=None) here.
        # DRF's force_authenticate(user=None) calls self.logout() internally.
        super().logout()
        self.handler._force_user = None
        self.handler._force_token = None
        self._user = None


@pytest.fixture
def api_client() -> AuthAPIClient:
    return AuthAPIClient()


# ===============================================================
# Tenants and users
# ===============================================================

@pytest.fixture
def tenant(db) -> Tenant:
    return Tenant.objects.create(code=_rand("t").lower(), name=_rand("Laundry"))


@pytest.fixture
def other_tenant(db) -> Tenant:
    return Tenant.objects.create(code=_rand("o").lower(), name=_rand("Other Laundry"))


@pytest.fixture
def stage_settings(db) -> Callable[..., TenantWorkflowSettings]:
    """
    Create or update a tenant's workflow settings.
    """

    def _factory(tenant: Tenant, **flags: Any) -> TenantWorkflowSettings:
        row, _created = TenantWorkflowSettings.objects.get_or_create(tenant=tenant)
        for name, value in flags.items():
            setattr(row, name, value)
        row.save()
        return row

    return _factory


@pytest.fixture
def staff_user(db, tenant):
    User = get_user_model()
    user, _created = User.objects.get_or_create(username="counter", defaults={"is_staff": False})
    user.set_password("pass123")
    user.save(update_fields=["password"])
    TenantMember.objects.get_or_create(user=user, tenant=tenant, defaults={"role": "operator"})
    return user


@pytest.fixture
def outsider_user(db, other_tenant):
    User = get_user_model()
    user, _created = User.objects.get_or_create(username="outsider", defaults={"is_staff": False})
    user.set_password("pass123")
    user.save(update_fields=["password"])
    TenantMember.objects.get_or_create(user=user, tenant=other_tenant, defaults={"role": "operator"})
    return user


@pytest.fixture
def staff_client(api_client, staff_user, tenant) -> AuthAPIClient:
    assert api_client.login(username="counter", password="pass123") is True
    api_client.credentials(HTTP_X_TENANT=str(tenant.id))
    return api_client


# ===============================================================
# Orders
# ===============================================================

@pytest.fixture
def order_factory(db) -> Callable[..., Order]:
    """
    Factory for orders in any status, with items, pieces and issues.

    items: number of items, each with `quantity` pieces
    """

    def _factory(
        *,
        tenant: Tenant,
        status: str = "intake",
        items: int = 1,
        quantity: int = 1,
        item_status: str = "pending",
        qa_status: str = "pending",
        tagged: bool = False,
        scanned: bool = False,
        rack_location: str = "",
        ready_by: Optional[Any] = "default",
        issues: Optional[list] = None,
        **extra: Any,
    ) -> Order:
        if ready_by == "default":
            ready_by = timezone.now() + timedelta(days=1)

        # frozen statuses are applied after the children exist
        frozen = status in IMMUTABLE_STATUSES

        order = Order.objects.create(
            tenant=tenant,
            order_no=_rand("ORD"),
            status="intake" if frozen else status,
            rack_location=rack_location,
            ready_by=ready_by,
            **extra,
        )

        for i in range(items):
            item = OrderItem.objects.create(
                order=order,
                name=f"Shirt {i + 1}",
                quantity=quantity,
                item_status=item_status,
                qa_status=qa_status,
            )
            if tagged or scanned:
                for seq in range(1, quantity + 1):
                    OrderPiece.objects.create(
                        item=item,
                        piece_seq=seq,
                        tag_code=f"{order.order_no}-{i}-{seq}" if tagged else "",
                        scan_state="scanned" if scanned else "pending",
                    )

        for priority in issues or []:
            OrderIssue.objects.create(order=order, issue_code="stain", priority=priority)

        if frozen:
            Order.objects.filter(pk=order.pk).update(status=status)
            order.refresh_from_db()

        return order

    return _factory


@pytest.fixture
def packing_order(tenant, order_factory) -> Order:
    """
    Order waiting on the packing screen, everything done except the rack.
    """
    return order_factory(
        tenant=tenant,
        status="packing",
        item_status="assembled",
        qa_status="passed",
    )
