# orders_core/workflows/repository.py
"""
Order persistence for the transition executor.

The repository is the only code that writes Order.status / Order.version.
It does so with a compare-and-swap queryset update, in the same database
transaction as the OrderTransition insert.
"""

from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from orders_core.models import Order, OrderTransition
from orders_core.workflows.runtime import ConflictError, OrderNotFoundError
from orders_core.workflows.snapshot import OrderSnapshot, snapshot_from_order

logger = logging.getLogger(__name__)


class OrderRepository:
    def load_order(self, order_id: int, *, tenant_id: Optional[int] = None) -> OrderSnapshot:
        qs = Order.objects.prefetch_related("items__pieces", "issues")
        if tenant_id is not None:
            qs = qs.filter(tenant_id=tenant_id)

        order = qs.filter(pk=order_id).first()
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} not found", order_id=order_id)
        return snapshot_from_order(order)

    def save_order_with_history(
        self,
        *,
        snapshot: OrderSnapshot,
        to_status: str,
        screen: str,
        notes: str = "",
        actor_id: str = "",
        routing: str = "legacy",
    ) -> OrderTransition:
        """
        Apply from_status -> to_status if nobody else moved the order since
        the snapshot was taken. Raises ConflictError otherwise.
        """
        with transaction.atomic():
            updated = (
                Order.objects.filter(
                    pk=snapshot.order_id,
                    status=snapshot.status,
                    version=snapshot.version,
                )
                .update(
                    status=to_status,
                    version=F("version") + 1,
                    updated_at=timezone.now(),
                )
            )
            if updated != 1:
                raise ConflictError(
                    f"Order {snapshot.order_id} changed since version {snapshot.version}",
                    order_id=snapshot.order_id,
                    version=snapshot.version,
                )

            record = OrderTransition.objects.create(
                order_id=snapshot.order_id,
                tenant_id=snapshot.tenant_id,
                from_status=snapshot.status,
                to_status=to_status,
                screen=screen,
                notes=notes or "",
                actor_id=str(actor_id or ""),
                routing=routing,
            )

        logger.debug(
            "Order %s moved %s -> %s (version %s)",
            snapshot.order_id,
            snapshot.status,
            to_status,
            snapshot.version + 1,
        )
        return record
