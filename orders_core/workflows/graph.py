# orders_core/workflows/graph.py
"""
Effective status graph.

build_status_graph() turns the static TRANSITION_TABLE plus a tenant's stage
toggles into an immutable StatusGraph. Disabling an optional stage removes
every edge touching it and rewires its predecessors straight to its
successors.

Pure function of configuration: no Django, no I/O, no caching.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from orders_core.workflows.rules import (
    CANCELLED,
    DEFAULT_STAGE_FLAGS,
    OPTIONAL_STAGES,
    ORDER_STATUSES,
    TERMINAL_STATUSES,
    TRANSITION_TABLE,
    normalize_screen,
    normalize_status,
)
from orders_core.workflows.runtime import InvalidTransitionError


@dataclass(frozen=True)
class TransitionEdge:
    from_status: str
    to_status: str
    allowed_screens: FrozenSet[str]
    blocker_ids: Tuple[str, ...] = ()

    @property
    def key(self) -> Tuple[str, str]:
        return (self.from_status, self.to_status)

    def allows_screen(self, screen: str) -> bool:
        return normalize_screen(screen) in self.allowed_screens

    def as_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_status,
            "to": self.to_status,
            "screens": sorted(self.allowed_screens),
            "blockers": list(self.blocker_ids),
        }


def _merge_blockers(*groups: Iterable[str]) -> Tuple[str, ...]:
    out: List[str] = []
    for group in groups:
        for blocker_id in group:
            if blocker_id not in out:
                out.append(blocker_id)
    return tuple(out)


class StatusGraph:
    """
    Immutable set of TransitionEdges with lookup helpers.
    """

    def __init__(self, edges: Iterable[TransitionEdge], *, disabled_stages: Iterable[str] = ()):
        index: Dict[Tuple[str, str], TransitionEdge] = {}
        for edge in edges:
            index[edge.key] = edge
        self._index = index
        self.disabled_stages: FrozenSet[str] = frozenset(disabled_stages)

    def __iter__(self):
        return iter(self.edges)

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, key) -> bool:
        return key in self._index

    @property
    def edges(self) -> Tuple[TransitionEdge, ...]:
        order = {s: i for i, s in enumerate(ORDER_STATUSES)}
        return tuple(
            sorted(
                self._index.values(),
                key=lambda e: (order.get(e.from_status, 99), order.get(e.to_status, 99)),
            )
        )

    @property
    def statuses(self) -> Tuple[str, ...]:
        return tuple(s for s in ORDER_STATUSES if s not in self.disabled_stages)

    def find_edge(self, from_status: str, to_status: str) -> Optional[TransitionEdge]:
        return self._index.get((normalize_status(from_status), normalize_status(to_status)))

    def outgoing(self, from_status: str) -> Tuple[TransitionEdge, ...]:
        cur = normalize_status(from_status)
        return tuple(e for e in self.edges if e.from_status == cur)

    def next_statuses(self, from_status: str) -> List[str]:
        return [e.to_status for e in self.outgoing(from_status)]

    def is_terminal(self, status: str) -> bool:
        return normalize_status(status) in TERMINAL_STATUSES

    def edges_for_screen(self, screen: str) -> Tuple[TransitionEdge, ...]:
        scr = normalize_screen(screen)
        return tuple(e for e in self.edges if scr in e.allowed_screens)

    def as_definition(self) -> Dict[str, Any]:
        """
        Stable JSON-serializable definition for UI.
        """
        return {
            "statuses": list(self.statuses),
            "terminal_statuses": sorted(TERMINAL_STATUSES),
            "disabled_stages": sorted(self.disabled_stages),
            "transitions": [e.as_dict() for e in self.edges],
        }


# ===============================================================
# Construction
# ===============================================================

def static_edges() -> List[TransitionEdge]:
    edges: List[TransitionEdge] = []
    for from_status, targets in TRANSITION_TABLE.items():
        for to_status, spec in targets.items():
            edges.append(
                TransitionEdge(
                    from_status=from_status,
                    to_status=to_status,
                    allowed_screens=frozenset(normalize_screen(s) for s in spec.get("screens", [])),
                    blocker_ids=tuple(spec.get("blockers", [])),
                )
            )
    return edges


def _skip_stage(edges: Dict[Tuple[str, str], TransitionEdge], stage: str) -> Dict[Tuple[str, str], TransitionEdge]:
    incoming = [e for e in edges.values() if e.to_status == stage]
    outgoing = [e for e in edges.values() if e.from_status == stage and e.to_status != CANCELLED]

    kept = {k: e for k, e in edges.items() if stage not in k}

    for into in incoming:
        for out in outgoing:
            key = (into.from_status, out.to_status)
            if into.from_status == out.to_status or key in kept:
                continue
            kept[key] = TransitionEdge(
                from_status=into.from_status,
                to_status=out.to_status,
                allowed_screens=into.allowed_screens,
                blocker_ids=_merge_blockers(into.blocker_ids, out.blocker_ids),
            )
    return kept


def _flags_of(context: Any) -> Mapping[str, bool]:
    if context is None:
        return DEFAULT_STAGE_FLAGS
    flags = getattr(context, "flags", context)
    merged = dict(DEFAULT_STAGE_FLAGS)
    merged.update(flags or {})
    return merged


def build_status_graph(context: Any = None) -> StatusGraph:
    """
    Edges(tenantConfig) -> StatusGraph

    `context` is a WorkflowContext or a plain flags mapping. Called once per
    request; the result is never shared across tenants.
    """
    flags = _flags_of(context)
    edges = {e.key: e for e in static_edges()}

    disabled: List[str] = []
    for flag_name, stage in OPTIONAL_STAGES:
        if flags.get(flag_name, True):
            continue
        edges = _skip_stage(edges, stage)
        disabled.append(stage)

    return StatusGraph(edges.values(), disabled_stages=disabled)


def resolve_next_status(graph: StatusGraph, screen: str, from_status: str) -> str:
    """
    Target for a plain "complete" action on a screen.

    The screen's single forward edge out of from_status, so disabled stages
    are skipped by the graph rewiring. Cancellation is never implied.
    """
    cur = normalize_status(from_status)
    targets = [
        e.to_status for e in graph.outgoing(cur)
        if e.to_status != CANCELLED and e.allows_screen(screen)
    ]
    if len(targets) != 1:
        raise InvalidTransitionError(
            f"Screen '{normalize_screen(screen)}' has no single next status from '{cur}'",
            candidates=targets,
        )
    return targets[0]


__all__ = [
    "TransitionEdge",
    "StatusGraph",
    "static_edges",
    "build_status_graph",
    "resolve_next_status",
]
