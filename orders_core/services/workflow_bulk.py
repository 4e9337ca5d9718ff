# orders_core/services/workflow_bulk.py

from typing import Any, Dict, Iterable, List, Optional

from orders_core.services.workflow import request_transition
from orders_core.workflows.executor import TransitionExecutor


# ---------------------------------------------------------------------
# BULK WORKFLOW TRANSITION
# ---------------------------------------------------------------------

def bulk_transition(
    *,
    order_ids: Iterable[int],
    screen: str,
    to_status: Optional[str] = None,
    notes: str = "",
    actor_id: str = "",
    routing_hint: Optional[str] = None,
    tenant_id: Optional[int] = None,
    executor: Optional[TransitionExecutor] = None,
) -> Dict[str, Any]:
    """
    Sequence of independent single-order transitions.

    - Never raises for per-order failures
    - No cross-order atomicity: orders that succeeded stay advanced
    - Duplicate ids are processed once
    """
    executor = executor or TransitionExecutor()

    results: Dict[str, List] = {
        "success": [],
        "failed": [],
    }

    seen = set()
    for order_id in order_ids:
        if order_id in seen:
            continue
        seen.add(order_id)

        result = request_transition(
            order_id=order_id,
            screen=screen,
            to_status=to_status,
            notes=notes,
            actor_id=actor_id,
            routing_hint=routing_hint,
            tenant_id=tenant_id,
            executor=executor,
        )

        if result.success:
            results["success"].append(
                {
                    "order_id": order_id,
                    "from_status": result.from_status,
                    "new_status": result.new_status,
                }
            )
        elif result.blockers:
            results["failed"].append({"order_id": order_id, "blockers": list(result.blockers)})
        else:
            results["failed"].append(
                {"order_id": order_id, "error": result.error, "message": result.message}
            )

    return {
        **results,
        "success_count": len(results["success"]),
        "failure_count": len(results["failed"]),
    }
