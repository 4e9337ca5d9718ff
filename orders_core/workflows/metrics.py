from datetime import timedelta
from typing import Any, Dict

from django.db.models import Count, Min
from django.utils.timezone import now as tz_now

from orders_core.models import Order, OrderTransition
from orders_core.workflows.rules import (
    CANCELLED,
    CLOSED,
    DELIVERED,
    OUT_FOR_DELIVERY,
    READY,
)
from orders_core.workflows.sla import overdue_orders_queryset


def compute_time_in_states(*, order_id: int, now=None) -> Dict[str, timedelta]:
    """
    Returns time spent in each status, from the transition history.

    The order sits in its initial status from creation until the first
    transition. Example output:
    {
        "intake": timedelta(hours=2),
        "processing": timedelta(days=1),
    }
    """
    order = Order.objects.filter(pk=order_id).first()
    if order is None:
        return {}

    transitions = list(
        OrderTransition.objects
        .filter(order_id=order_id)
        .order_by("created_at", "id")
    )
    end_of_time = now or tz_now()

    durations: Dict[str, timedelta] = {}

    if not transitions:
        return {order.status: end_of_time - order.created_at}

    first = transitions[0]
    durations[first.from_status] = max(first.created_at - order.created_at, timedelta())

    for i, current in enumerate(transitions):
        start = current.created_at
        if i + 1 < len(transitions):
            end = transitions[i + 1].created_at
        elif current.to_status in (DELIVERED, CANCELLED, CLOSED):
            # terminal: the clock stops
            end = start
        else:
            end = end_of_time

        durations[current.to_status] = durations.get(current.to_status, timedelta()) + (end - start)

    return durations


def compute_total_cycle_time(*, order_id: int, now=None) -> timedelta:
    """
    Total time from order creation to the last transition (or now).
    """
    order = Order.objects.filter(pk=order_id).first()
    if order is None:
        return timedelta()

    last = OrderTransition.objects.filter(order_id=order_id).order_by("created_at", "id").last()
    if last is not None and order.is_terminal:
        return last.created_at - order.created_at
    return (now or tz_now()) - order.created_at


def _sla_compliance(tenant_id: int) -> Dict[str, Any]:
    ready_at = (
        OrderTransition.objects
        .filter(tenant_id=tenant_id, to_status=READY, order__ready_by__isnull=False)
        .values("order_id", "order__ready_by")
        .annotate(first_ready=Min("created_at"))
        .order_by()
    )

    on_time = late = 0
    for row in ready_at:
        if row["first_ready"] <= row["order__ready_by"]:
            on_time += 1
        else:
            late += 1

    total = on_time + late
    rate = round(on_time / total * 100, 1) if total else 0.0
    return {"on_time": on_time, "late": late, "compliance_rate": rate}


def workflow_stats(tenant_id: int, *, now=None) -> Dict[str, Any]:
    """
    Dashboard summary for one tenant.

    Distribution covers every order that is not cancelled or closed.
    """
    rows = (
        Order.objects
        .filter(tenant_id=tenant_id)
        .exclude(status__in=[CANCELLED, CLOSED])
        .values("status")
        .annotate(count=Count("id"))
        .order_by("status")
    )
    counts = {row["status"]: row["count"] for row in rows}
    total = sum(counts.values())

    distribution = [
        {
            "status": status,
            "count": count,
            "percentage": round(count / total * 100, 1) if total else 0.0,
        }
        for status, count in sorted(counts.items())
    ]

    in_progress = sum(
        count for status, count in counts.items()
        if status not in (READY, OUT_FOR_DELIVERY, DELIVERED)
    )

    return {
        "status_distribution": distribution,
        "sla_compliance": _sla_compliance(tenant_id),
        "current_orders": {
            "total": total,
            "in_progress": in_progress,
            "ready": counts.get(READY, 0),
            "overdue": overdue_orders_queryset(tenant_id=tenant_id, now=now).count(),
        },
    }
