# orders_core/tasks.py
from __future__ import annotations

import logging
from collections import Counter

from celery import shared_task

from orders_core.workflows.sla import find_overdue_orders

logger = logging.getLogger(__name__)


@shared_task
def scan_overdue_orders(tenant_id: int | None = None) -> dict:
    """
    Log overdue orders per tenant. Returns {tenant_id: count}.
    """
    per_tenant = Counter(row["tenant_id"] for row in find_overdue_orders(tenant_id=tenant_id))

    for tid, count in sorted(per_tenant.items()):
        logger.warning("Tenant %s has %s overdue order(s)", tid, count)

    # celery json serializer needs string keys
    return {str(tid): count for tid, count in per_tenant.items()}
