# orders_core/workflows/context.py
"""
Workflow context provider.

Read-only aggregation of per-tenant stage toggles and order metrics.
The context feeds graph construction and informational UI only; it is
never the authority on whether a transition is legal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

from django.core.cache import cache
from django.db.models import Count, Sum

from orders_core.conf import app_setting
from orders_core.workflows.rules import DEFAULT_STAGE_FLAGS, TERMINAL_STATUSES, normalize_screen

logger = logging.getLogger(__name__)

CACHE_KEY = "orders_core:workflow_flags:{tenant_id}"


@dataclass(frozen=True)
class WorkflowMetrics:
    items_count: int = 0
    pieces_total: int = 0


@dataclass(frozen=True)
class WorkflowContext:
    tenant_id: Optional[int]
    flags: Dict[str, bool] = field(default_factory=lambda: dict(DEFAULT_STAGE_FLAGS))
    metrics: WorkflowMetrics = field(default_factory=WorkflowMetrics)
    use_contract_routing: bool = False
    contract_screens: Tuple[str, ...] = ()

    def flag(self, name: str) -> bool:
        if name in self.flags:
            return bool(self.flags[name])
        return bool(DEFAULT_STAGE_FLAGS.get(name, False))

    def as_dict(self) -> Dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "flags": {k: bool(v) for k, v in sorted(self.flags.items())},
            "metrics": {
                "items_count": self.metrics.items_count,
                "pieces_total": self.metrics.pieces_total,
            },
            "use_contract_routing": self.use_contract_routing,
            "contract_screens": list(self.contract_screens),
        }


def build_context(
    *,
    tenant_id: Optional[int] = None,
    flags: Optional[Dict[str, bool]] = None,
    metrics: Optional[WorkflowMetrics] = None,
    use_contract_routing: bool = False,
    contract_screens: Iterable[str] = (),
) -> WorkflowContext:
    """
    Construct a context from plain values (defaults fill missing flags).
    """
    merged = dict(DEFAULT_STAGE_FLAGS)
    merged.update({k: bool(v) for k, v in (flags or {}).items()})
    return WorkflowContext(
        tenant_id=tenant_id,
        flags=merged,
        metrics=metrics or WorkflowMetrics(),
        use_contract_routing=bool(use_contract_routing),
        contract_screens=tuple(sorted({normalize_screen(s) for s in contract_screens if s})),
    )


# ---------------------------------------------------------------
# Tenant configuration (cache-friendly)
# ---------------------------------------------------------------

def _load_tenant_config(tenant_id: int) -> Dict[str, Any]:
    from orders_core.models import TenantWorkflowSettings

    row = TenantWorkflowSettings.objects.filter(tenant_id=tenant_id).first()
    if row is None:
        return {
            "flags": dict(DEFAULT_STAGE_FLAGS),
            "use_contract_routing": False,
            "contract_screens": list(app_setting("CONTRACT_SCREENS")),
        }

    screens = row.contract_screens or list(app_setting("CONTRACT_SCREENS"))
    return {
        "flags": row.stage_flags(),
        "use_contract_routing": row.use_contract_routing,
        "contract_screens": list(screens),
    }


def get_stage_toggles(tenant_id: int, *, use_cache: bool = True) -> Dict[str, Any]:
    if not use_cache:
        return _load_tenant_config(tenant_id)

    key = CACHE_KEY.format(tenant_id=tenant_id)
    data = cache.get(key)
    if data is None:
        data = _load_tenant_config(tenant_id)
        cache.set(key, data, app_setting("WORKFLOW_CONTEXT_TTL"))
    return data


def invalidate_workflow_context(tenant_id: int) -> None:
    cache.delete(CACHE_KEY.format(tenant_id=tenant_id))
    logger.debug("Workflow context cache cleared for tenant %s", tenant_id)


# ---------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------

def _order_metrics(*, tenant_id: int, order_id: Optional[int]) -> WorkflowMetrics:
    from orders_core.models import OrderItem

    qs = OrderItem.objects.filter(order__tenant_id=tenant_id)
    if order_id is not None:
        qs = qs.filter(order_id=order_id)
    else:
        qs = qs.exclude(order__status__in=TERMINAL_STATUSES)

    agg = qs.aggregate(items_count=Count("id"), pieces_total=Sum("quantity"))
    return WorkflowMetrics(
        items_count=agg["items_count"] or 0,
        pieces_total=agg["pieces_total"] or 0,
    )


def get_workflow_context(
    tenant_id: int,
    *,
    order_id: Optional[int] = None,
    use_cache: bool = True,
    include_metrics: bool = True,
) -> WorkflowContext:
    """
    Return the WorkflowContext for a tenant.

    - flags are cached for WORKFLOW_CONTEXT_TTL seconds unless use_cache=False
    - metrics are scoped to one order when order_id is given, otherwise to all
      of the tenant's open orders
    """
    config = get_stage_toggles(tenant_id, use_cache=use_cache)
    metrics = _order_metrics(tenant_id=tenant_id, order_id=order_id) if include_metrics else WorkflowMetrics()

    return build_context(
        tenant_id=tenant_id,
        flags=config["flags"],
        metrics=metrics,
        use_contract_routing=config["use_contract_routing"],
        contract_screens=config["contract_screens"],
    )
