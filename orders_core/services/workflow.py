from __future__ import annotations

"""
Single-order workflow services.

IMPORTANT:
- Bulk transitions are implemented ONLY in:
  orders_core/services/workflow_bulk.py

Callers (views, tasks, scripts) go through these functions instead of the
executor so that protocol and infrastructure errors come back as a
TransitionResult with an error code and a generic message.
"""

import logging
from typing import Any, Dict, Optional

from orders_core.models import OrderTransition
from orders_core.workflows import context as workflow_context
from orders_core.workflows.blockers import describe_blockers, evaluate_preconditions
from orders_core.workflows.executor import TransitionExecutor
from orders_core.workflows.graph import build_status_graph
from orders_core.workflows.repository import OrderRepository
from orders_core.workflows.rules import STATUS_LABELS, is_terminal_status, normalize_screen
from orders_core.workflows.runtime import (
    OrderNotFoundError,
    PersistenceError,
    TransitionResult,
    WorkflowError,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# COMMANDS
# ---------------------------------------------------------------------

def request_transition(
    *,
    order_id: int,
    screen: str,
    to_status: Optional[str] = None,
    notes: Optional[str] = None,
    actor_id: str = "",
    routing_hint: Optional[str] = None,
    tenant_id: Optional[int] = None,
    executor: Optional[TransitionExecutor] = None,
) -> TransitionResult:
    """
    RequestTransition -> TransitionResult. Never raises WorkflowError.
    """
    executor = executor or TransitionExecutor()
    try:
        return executor.execute(
            order_id,
            screen,
            to_status,
            notes=notes,
            actor_id=actor_id,
            routing_hint=routing_hint,
            tenant_id=tenant_id,
        )
    except PersistenceError as exc:
        # already logged with traceback by the executor
        return TransitionResult.failed(exc)
    except WorkflowError as exc:
        logger.warning(
            "Order %s transition to %s from screen %s rejected: %s (%s)",
            order_id,
            to_status or "(screen default)",
            screen,
            exc.code,
            exc,
        )
        return TransitionResult.failed(exc)


# ---------------------------------------------------------------------
# QUERIES
# ---------------------------------------------------------------------

def get_workflow_context(tenant_id: int, *, order_id: Optional[int] = None):
    return workflow_context.get_workflow_context(tenant_id, order_id=order_id)


def get_workflow_definition(tenant_id: int) -> Dict[str, Any]:
    ctx = workflow_context.get_workflow_context(tenant_id, include_metrics=False)
    definition = build_status_graph(ctx).as_definition()
    definition["labels"] = {s: STATUS_LABELS[s] for s in definition["statuses"]}
    definition["flags"] = dict(ctx.flags)
    return definition


def get_allowed_transitions(
    order_id: int,
    *,
    tenant_id: Optional[int] = None,
    screen: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Outgoing edges from the order's current status, each with the blockers
    that would currently stop it. Raises OrderNotFoundError.

    Informational only: the executor re-evaluates everything on submit.
    """
    snapshot = OrderRepository().load_order(order_id, tenant_id=tenant_id)
    ctx = workflow_context.get_workflow_context(snapshot.tenant_id, order_id=snapshot.order_id)
    graph = build_status_graph(ctx)

    edges = graph.outgoing(snapshot.status)
    if screen:
        edges = tuple(e for e in edges if e.allows_screen(screen))

    transitions = []
    for edge in edges:
        unmet = evaluate_preconditions(snapshot, edge, ctx)
        transitions.append(
            {
                "to_status": edge.to_status,
                "label": STATUS_LABELS.get(edge.to_status, edge.to_status),
                "screens": sorted(edge.allowed_screens),
                "blockers": describe_blockers(unmet),
            }
        )

    return {
        "order_id": snapshot.order_id,
        "current_status": snapshot.status,
        "version": snapshot.version,
        "is_terminal": is_terminal_status(snapshot.status),
        "screen": normalize_screen(screen) if screen else None,
        "allowed": [t["to_status"] for t in transitions],
        "transitions": transitions,
    }


def get_order_history(order_id: int, *, tenant_id: Optional[int] = None):
    """
    Transition records for an order, oldest first. Raises OrderNotFoundError.
    """
    from orders_core.models import Order

    qs = Order.objects.filter(pk=order_id)
    if tenant_id is not None:
        qs = qs.filter(tenant_id=tenant_id)
    if not qs.exists():
        raise OrderNotFoundError(f"Order {order_id} not found", order_id=order_id)

    return OrderTransition.objects.filter(order_id=order_id).order_by("created_at", "id")
