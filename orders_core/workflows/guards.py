# orders_core/workflows/guards.py

from django.core.exceptions import PermissionDenied
from django.db import models

from orders_core.workflows.rules import IMMUTABLE_STATUSES


def _bypass_requested(instance, kwargs) -> bool:
    return bool(
        kwargs.pop(WorkflowWriteGuardMixin.WORKFLOW_BYPASS_KWARG, False)
        or getattr(instance, "_workflow_bypass", False)
    )


class WorkflowWriteGuardMixin(models.Model):
    """
    Prevent direct modification of workflow-controlled fields outside the
    transition executor.

    Orders move only through the executor, which writes these fields with a
    compare-and-swap queryset update. Changing any WORKFLOW_FIELDS through
    .save() on an existing row raises PermissionDenied. Once the stored
    status is cancelled or closed the whole row is frozen.

    Escape hatch:
      - pass _workflow_bypass=True to save(), OR
      - set instance._workflow_bypass = True
    Use sparingly (fixtures, data repair scripts).
    """

    WORKFLOW_FIELDS = ("status", "version")
    WORKFLOW_BYPASS_KWARG = "_workflow_bypass"

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        bypass = _bypass_requested(self, kwargs)

        if not bypass and self.pk is not None and self.WORKFLOW_FIELDS:
            stored = (
                self.__class__.objects.filter(pk=self.pk)
                .values(*self.WORKFLOW_FIELDS)
                .first()
            )
            if stored is not None:
                if stored.get("status") in IMMUTABLE_STATUSES:
                    raise PermissionDenied(
                        f"Order is {stored['status']} and can no longer be edited."
                    )
                changed = [
                    name for name in self.WORKFLOW_FIELDS
                    if stored[name] != getattr(self, name, None)
                ]
                if changed:
                    raise PermissionDenied(
                        f"Direct modification of {', '.join(changed)} is forbidden. "
                        "Use the order transition API."
                    )

        return super().save(*args, **kwargs)


class OrderChildWriteGuardMixin(models.Model):
    """
    Rows hanging off an order (items, pieces, issues) freeze with it.

    ORDER_PATH is the attribute chain from the row to its Order. The order's
    status is read from the database, never from a cached instance.
    """

    ORDER_PATH = "order"

    class Meta:
        abstract = True

    def _stored_order_status(self):
        owner = self
        for attr in self.ORDER_PATH.split("."):
            owner = getattr(owner, attr, None)
            if owner is None:
                return None
        return (
            owner.__class__.objects.filter(pk=owner.pk)
            .values_list("status", flat=True)
            .first()
        )

    def _check_order_open(self):
        status = self._stored_order_status()
        if status in IMMUTABLE_STATUSES:
            raise PermissionDenied(
                f"Order is {status}; its {self._meta.verbose_name_plural} can no longer be changed."
            )

    def save(self, *args, **kwargs):
        if not _bypass_requested(self, kwargs):
            self._check_order_open()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if not _bypass_requested(self, kwargs):
            self._check_order_open()
        return super().delete(*args, **kwargs)
