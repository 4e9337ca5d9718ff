# orders_core/workflows/contracts.py
"""
Screen contracts.

A contract is the per-screen slice of the effective status graph. It is
always materialized from graph edges, so a screen can never be granted a
transition that the graph does not contain.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from orders_core.workflows.graph import StatusGraph, TransitionEdge
from orders_core.workflows.rules import normalize_screen, normalize_status


@dataclass(frozen=True)
class ScreenContract:
    tenant_id: Optional[int]
    screen: str
    edges: Tuple[TransitionEdge, ...]

    @property
    def transitions(self) -> FrozenSet[Tuple[str, str]]:
        return frozenset(e.key for e in self.edges)

    @property
    def statuses(self) -> List[str]:
        """Statuses an order must be in for this screen to act on it."""
        seen: List[str] = []
        for edge in self.edges:
            if edge.from_status not in seen:
                seen.append(edge.from_status)
        return seen

    def allows(self, from_status: str, to_status: str) -> bool:
        return (normalize_status(from_status), normalize_status(to_status)) in self.transitions

    def targets_from(self, from_status: str) -> List[str]:
        cur = normalize_status(from_status)
        return [e.to_status for e in self.edges if e.from_status == cur]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "screen": self.screen,
            "statuses": self.statuses,
            "transitions": [e.as_dict() for e in self.edges],
        }


def contract_from_graph(graph: StatusGraph, screen: str, *, tenant_id: Optional[int] = None) -> ScreenContract:
    scr = normalize_screen(screen)
    return ScreenContract(tenant_id=tenant_id, screen=scr, edges=graph.edges_for_screen(scr))


class ScreenContractResolver:
    """
    Resolve(tenantID, screen) -> ScreenContract | None

    None is not an error: it means the screen has no contract yet and the
    executor must take the legacy path.
    """

    def __init__(self, contract_screens: Optional[Iterable[str]] = None):
        # None: take the screens from the workflow context on each call
        self._fixed_screens = (
            None if contract_screens is None else frozenset(normalize_screen(s) for s in contract_screens)
        )

    def contract_screens(self, context: Any) -> FrozenSet[str]:
        if self._fixed_screens is not None:
            return self._fixed_screens
        return frozenset(normalize_screen(s) for s in getattr(context, "contract_screens", ()) or ())

    def resolve(
        self,
        tenant_id: Optional[int],
        screen: str,
        graph: StatusGraph,
        context: Any = None,
    ) -> Optional[ScreenContract]:
        scr = normalize_screen(screen)
        if not scr or scr not in self.contract_screens(context):
            return None

        contract = contract_from_graph(graph, scr, tenant_id=tenant_id)
        if not contract.edges:
            return None
        return contract


__all__ = [
    "ScreenContract",
    "ScreenContractResolver",
    "contract_from_graph",
]
