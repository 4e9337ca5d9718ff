# orders_core/workflows/executor.py

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from django.db import DatabaseError, OperationalError, transaction

from orders_core.conf import app_setting
from orders_core.workflows.blockers import evaluate_preconditions
from orders_core.workflows.context import get_workflow_context
from orders_core.workflows.contracts import ScreenContractResolver
from orders_core.workflows.graph import build_status_graph, resolve_next_status
from orders_core.workflows.repository import OrderRepository
from orders_core.workflows.rules import (
    is_known_status,
    is_terminal_status,
    normalize_screen,
    normalize_status,
)
from orders_core.workflows.runtime import (
    InvalidTransitionError,
    PersistenceError,
    TerminalStateError,
    TransitionResult,
)
from orders_core.workflows.strategies import (
    ROUTING_CONTRACT,
    normalize_routing,
    select_strategy,
)

logger = logging.getLogger(__name__)


class TransitionExecutor:
    """
    Single writer of order status and transition history.

    One execute() call handles one request:
      1) load snapshot, reject terminal orders
      2) build the effective graph from a fresh workflow context; a blank
         target becomes the screen's single forward step
      3) pick the legacy or contract strategy and authorize the edge
      4) evaluate blockers (unmet -> result with blockers, nothing written)
      5) compare-and-swap status + append history, retrying transient DB errors
    """

    def __init__(
        self,
        *,
        repository: Optional[OrderRepository] = None,
        resolver: Optional[ScreenContractResolver] = None,
        context_provider: Optional[Callable] = None,
        max_retries: Optional[int] = None,
        retry_backoff: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.repository = repository or OrderRepository()
        self.resolver = resolver or ScreenContractResolver()
        self.context_provider = context_provider or get_workflow_context
        self.max_retries = app_setting("PERSIST_MAX_RETRIES") if max_retries is None else max_retries
        self.retry_backoff = app_setting("PERSIST_RETRY_BACKOFF") if retry_backoff is None else retry_backoff
        self.sleep = sleep

    def resolve_routing_hint(self, routing_hint: Optional[str], context) -> str:
        hint = normalize_routing(routing_hint)
        if hint:
            return hint
        if getattr(context, "use_contract_routing", False):
            return ROUTING_CONTRACT
        return normalize_routing(app_setting("DEFAULT_ROUTING")) or "legacy"

    def execute(
        self,
        order_id: int,
        screen: str,
        to_status: Optional[str] = None,
        notes: Optional[str] = None,
        actor_id: str = "",
        routing_hint: Optional[str] = None,
        tenant_id: Optional[int] = None,
    ) -> TransitionResult:
        snapshot = self.repository.load_order(order_id, tenant_id=tenant_id)
        from_status = snapshot.status
        target = normalize_status(to_status)
        scr = normalize_screen(screen)

        # 1) Terminal lock
        if is_terminal_status(from_status):
            raise TerminalStateError(
                f"Order {order_id} is in terminal status '{from_status}'",
                order_id=order_id,
                status=from_status,
            )

        # 2) Effective graph (never from cache: legality must be current)
        context = self.context_provider(snapshot.tenant_id, order_id=snapshot.order_id, use_cache=False)
        graph = build_status_graph(context)

        # no explicit target: the screen's own next step
        if not target:
            target = resolve_next_status(graph, scr, from_status)

        if not is_known_status(from_status) or not is_known_status(target):
            raise InvalidTransitionError(f"Unknown status {from_status} -> {target}")
        if graph.find_edge(from_status, target) is None:
            raise InvalidTransitionError(
                f"Transition {from_status} -> {target} is not allowed",
                allowed=graph.next_statuses(from_status),
            )

        # 3) Routing decision, made once per request
        strategy = select_strategy(
            routing_hint=self.resolve_routing_hint(routing_hint, context),
            resolver=self.resolver,
            tenant_id=snapshot.tenant_id,
            screen=scr,
            graph=graph,
            from_status=from_status,
            to_status=target,
            context=context,
        )
        edge = strategy.authorize(graph=graph, screen=scr, from_status=from_status, to_status=target)

        # 4) Blockers
        blockers = evaluate_preconditions(snapshot, edge, context)
        if blockers:
            logger.info(
                "Order %s %s -> %s blocked by %s",
                order_id,
                from_status,
                target,
                ", ".join(blockers),
            )
            return TransitionResult.blocked(from_status=from_status, blockers=blockers, routing=strategy.name)

        # 5) Persist
        record = self._persist(
            snapshot=snapshot,
            to_status=target,
            screen=scr,
            notes=notes or "",
            actor_id=actor_id,
            routing=strategy.name,
        )

        transaction.on_commit(
            lambda: self._notify(snapshot=snapshot, to_status=target, screen=scr, actor_id=actor_id, record=record)
        )

        return TransitionResult(
            success=True,
            new_status=target,
            from_status=from_status,
            routing=strategy.name,
            transition_id=record.pk,
        )

    def _persist(self, *, snapshot, to_status, screen, notes, actor_id, routing):
        attempt = 0
        while True:
            attempt += 1
            try:
                return self.repository.save_order_with_history(
                    snapshot=snapshot,
                    to_status=to_status,
                    screen=screen,
                    notes=notes,
                    actor_id=actor_id,
                    routing=routing,
                )
            except OperationalError as exc:
                if attempt > self.max_retries:
                    logger.error(
                        "Persisting order %s transition failed after %s attempts",
                        snapshot.order_id,
                        attempt,
                        exc_info=True,
                    )
                    raise PersistenceError(str(exc), order_id=snapshot.order_id) from exc
                logger.warning(
                    "Transient DB error on order %s (attempt %s/%s): %s",
                    snapshot.order_id,
                    attempt,
                    self.max_retries + 1,
                    exc,
                )
                self.sleep(self.retry_backoff * attempt)
            except DatabaseError as exc:
                logger.error(
                    "Persisting order %s transition failed",
                    snapshot.order_id,
                    exc_info=True,
                )
                raise PersistenceError(str(exc), order_id=snapshot.order_id) from exc

    def _notify(self, *, snapshot, to_status, screen, actor_id, record) -> None:
        # best-effort: receiver failures never undo a committed transition
        from orders_core.models import Order
        from orders_core.signals import order_status_changed

        responses = order_status_changed.send_robust(
            sender=Order,
            order_id=snapshot.order_id,
            tenant_id=snapshot.tenant_id,
            from_status=snapshot.status,
            to_status=to_status,
            screen=screen,
            actor_id=actor_id,
            transition_id=record.pk,
        )
        for receiver, response in responses:
            if isinstance(response, Exception):
                logger.warning(
                    "order_status_changed receiver %r failed for order %s: %s",
                    receiver,
                    snapshot.order_id,
                    response,
                )

