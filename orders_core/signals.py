# orders_core/signals.py
from __future__ import annotations

import logging

from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal, receiver

from orders_core.models import TenantWorkflowSettings
from orders_core.workflows.context import invalidate_workflow_context

logger = logging.getLogger(__name__)


# ===============================================================
# Order lifecycle hook
# ===============================================================
# Sent after a transition commits, with send_robust. kwargs:
#   order_id, tenant_id, from_status, to_status, screen, actor_id,
#   transition_id
order_status_changed = Signal()


# ===============================================================
# Workflow context cache
# ===============================================================
@receiver(post_save, sender=TenantWorkflowSettings)
def tenant_workflow_settings_saved(sender, instance, **kwargs):
    invalidate_workflow_context(instance.tenant_id)


@receiver(post_delete, sender=TenantWorkflowSettings)
def tenant_workflow_settings_deleted(sender, instance, **kwargs):
    invalidate_workflow_context(instance.tenant_id)


@receiver(order_status_changed)
def log_order_status_changed(sender, order_id, from_status, to_status, **kwargs):
    logger.info(
        "Order %s: %s -> %s (screen=%s, actor=%s)",
        order_id,
        from_status,
        to_status,
        kwargs.get("screen"),
        kwargs.get("actor_id"),
    )
