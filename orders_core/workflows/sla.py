# orders_core/workflows/sla.py
"""
Ready-by promise tracking.

An order is overdue when its stored ready_by is in the past and it has not
reached a terminal status. Delivered orders are never overdue.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from django.utils import timezone

from orders_core.models import Order
from orders_core.workflows.rules import TERMINAL_STATUSES


def overdue_orders_queryset(*, tenant_id: Optional[int] = None, now=None):
    now = now or timezone.now()
    qs = (
        Order.objects
        .exclude(status__in=TERMINAL_STATUSES)
        .filter(ready_by__isnull=False, ready_by__lt=now)
    )
    if tenant_id is not None:
        qs = qs.filter(tenant_id=tenant_id)
    return qs.order_by("ready_by", "id")


def find_overdue_orders(tenant_id: Optional[int] = None, now=None) -> List[Dict[str, Any]]:
    """
    Overdue orders, most overdue first.
    """
    now = now or timezone.now()
    out = []
    for order in overdue_orders_queryset(tenant_id=tenant_id, now=now).iterator():
        hours = (now - order.ready_by).total_seconds() / 3600
        out.append(
            {
                "id": order.pk,
                "tenant_id": order.tenant_id,
                "order_no": order.order_no,
                "status": order.status,
                "ready_by": order.ready_by,
                "hours_overdue": round(hours, 1),
            }
        )
    return out
