from django.db import models

from orders_core.models.core import Order, Tenant


class ImmutableQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise PermissionError("Order transitions are append-only.")

    def delete(self):
        raise PermissionError("Order transitions are append-only.")


class OrderTransition(models.Model):
    """
    Immutable audit record of one order status transition.

    Written only by the transition executor, in the same database
    transaction as the status change.
    """

    ROUTING_CHOICES = (
        ("legacy", "Legacy"),
        ("contract", "Screen contract"),
    )

    order = models.ForeignKey(
        Order,
        on_delete=models.PROTECT,
        related_name="history",
    )
    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="order_transitions",
    )

    from_status = models.CharField(max_length=32)
    to_status = models.CharField(max_length=32)
    screen = models.CharField(max_length=50)
    notes = models.TextField(blank=True)
    actor_id = models.CharField(max_length=128)
    routing = models.CharField(max_length=16, choices=ROUTING_CHOICES, default="legacy")

    created_at = models.DateTimeField(auto_now_add=True)

    objects = ImmutableQuerySet.as_manager()

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["order", "created_at"], name="order_transition_order_idx"),
            models.Index(fields=["tenant", "to_status"], name="order_transition_tenant_idx"),
        ]

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise PermissionError("Order transitions are append-only.")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionError("Order transitions are append-only.")

    def __str__(self):
        return (
            f"order {self.order_id}: "
            f"{self.from_status} → {self.to_status} "
            f"via {self.screen} by {self.actor_id}"
        )
