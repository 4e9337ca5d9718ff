# orders_core/workflows/strategies.py
"""
Transition strategies.

Two code paths coexist while screen contracts are rolled out:

- LegacyTransitionStrategy: checks only that the edge lists the screen
- ContractTransitionStrategy: authorizes through the resolved ScreenContract

Both return the same graph edge, so the blocker set and the outcome are
identical; the routing decision is made once, in select_strategy().
"""

from __future__ import annotations

from typing import Any, Optional

from orders_core.workflows.contracts import ScreenContract, ScreenContractResolver
from orders_core.workflows.graph import StatusGraph, TransitionEdge
from orders_core.workflows.rules import normalize_screen
from orders_core.workflows.runtime import InvalidTransitionError, ScreenNotAllowedError

ROUTING_LEGACY = "legacy"
ROUTING_CONTRACT = "contract"
ROUTING_CHOICES = (ROUTING_LEGACY, ROUTING_CONTRACT)


class TransitionStrategy:
    name = ""

    def authorize(self, *, graph: StatusGraph, screen: str, from_status: str, to_status: str) -> TransitionEdge:
        raise NotImplementedError


class LegacyTransitionStrategy(TransitionStrategy):
    name = ROUTING_LEGACY

    def authorize(self, *, graph: StatusGraph, screen: str, from_status: str, to_status: str) -> TransitionEdge:
        edge = graph.find_edge(from_status, to_status)
        if edge is None:
            raise InvalidTransitionError(f"No edge {from_status} -> {to_status}")
        if not edge.allows_screen(screen):
            raise ScreenNotAllowedError(
                f"Screen '{normalize_screen(screen)}' cannot request {from_status} -> {to_status}"
            )
        return edge


class ContractTransitionStrategy(TransitionStrategy):
    name = ROUTING_CONTRACT

    def __init__(self, contract: ScreenContract):
        self.contract = contract

    def authorize(self, *, graph: StatusGraph, screen: str, from_status: str, to_status: str) -> TransitionEdge:
        if normalize_screen(screen) != self.contract.screen or not self.contract.allows(from_status, to_status):
            raise ScreenNotAllowedError(
                f"Contract for '{self.contract.screen}' does not allow {from_status} -> {to_status}"
            )
        # the contract is a view over the graph: hand back the graph's own edge
        edge = graph.find_edge(from_status, to_status)
        if edge is None:
            raise InvalidTransitionError(f"No edge {from_status} -> {to_status}")
        return edge


def normalize_routing(value: Optional[str]) -> Optional[str]:
    v = str(value or "").strip().lower()
    return v if v in ROUTING_CHOICES else None


def select_strategy(
    *,
    routing_hint: Optional[str],
    resolver: ScreenContractResolver,
    tenant_id: Optional[int],
    screen: str,
    graph: StatusGraph,
    from_status: str,
    to_status: str,
    context: Any = None,
) -> TransitionStrategy:
    """
    Contract path only when the hint asks for it, a contract exists, and the
    contract allows the edge. Everything else falls back to legacy.
    """
    if normalize_routing(routing_hint) == ROUTING_CONTRACT:
        contract = resolver.resolve(tenant_id, screen, graph, context)
        if contract is not None and contract.allows(from_status, to_status):
            return ContractTransitionStrategy(contract)
    return LegacyTransitionStrategy()


__all__ = [
    "ROUTING_LEGACY",
    "ROUTING_CONTRACT",
    "ROUTING_CHOICES",
    "TransitionStrategy",
    "LegacyTransitionStrategy",
    "ContractTransitionStrategy",
    "normalize_routing",
    "select_strategy",
]
