# orders_core/workflows/blockers.py
"""
Precondition evaluator ("quality gates").

Each blocker is a named precondition evaluated against an OrderSnapshot.
A blocker either applies to the current tenant configuration or not; an
applicable blocker whose condition is unmet contributes its id to the
result.

Rules:
- Blockers are evaluated in edge order, all of them, no short-circuit.
- Evaluation never mutates anything and never reads the wall clock;
  time-based checks use dates already stored on the order.
- Business failures are returned as data, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List

from orders_core.conf import app_setting
from orders_core.workflows.rules import DEFAULT_STAGE_FLAGS
from orders_core.workflows.snapshot import OrderSnapshot


Predicate = Callable[[OrderSnapshot, Any], bool]


def _always(snapshot: OrderSnapshot, context: Any) -> bool:
    return True


def _flag(name: str) -> Predicate:
    def _applies(snapshot: OrderSnapshot, context: Any) -> bool:
        if context is None:
            # same defaults the graph uses when built without a context
            return bool(DEFAULT_STAGE_FLAGS.get(name, False))
        return bool(context.flag(name))

    return _applies


@dataclass(frozen=True)
class Blocker:
    id: str
    description: str
    check: Predicate
    applies: Predicate = _always

    def is_unmet(self, snapshot: OrderSnapshot, context: Any) -> bool:
        if not self.applies(snapshot, context):
            return False
        return not self.check(snapshot, context)


class UnknownBlockerError(LookupError):
    pass


# ===============================================================
# Checks
# ===============================================================

def _has_items(snapshot: OrderSnapshot, context: Any) -> bool:
    return snapshot.items_count > 0


def _ready_by_set(snapshot: OrderSnapshot, context: Any) -> bool:
    return snapshot.ready_by is not None


def _all_pieces_tagged(snapshot: OrderSnapshot, context: Any) -> bool:
    for item in snapshot.items:
        tagged = sum(1 for p in item.pieces if p.is_tagged)
        if len(item.pieces) < item.quantity or tagged < len(item.pieces):
            return False
    return True


def _all_pieces_scanned(snapshot: OrderSnapshot, context: Any) -> bool:
    for item in snapshot.items:
        scanned = sum(1 for p in item.pieces if p.is_scanned)
        if scanned < item.quantity:
            return False
    return True


def _all_items_assembled(snapshot: OrderSnapshot, context: Any) -> bool:
    return all(item.item_status == "assembled" for item in snapshot.items)


def _all_items_passed_qa(snapshot: OrderSnapshot, context: Any) -> bool:
    return all(item.qa_status == "passed" for item in snapshot.items)


def _no_blocking_issues(snapshot: OrderSnapshot, context: Any) -> bool:
    blocking = {p.lower() for p in app_setting("BLOCKING_ISSUE_PRIORITIES")}
    return not any(issue.priority in blocking for issue in snapshot.open_issues)


def _rack_location_set(snapshot: OrderSnapshot, context: Any) -> bool:
    return bool((snapshot.rack_location or "").strip())


# ===============================================================
# Registry
# ===============================================================

BLOCKERS: Dict[str, Blocker] = {
    b.id: b
    for b in (
        Blocker("order_has_items", "Order has no items.", _has_items),
        Blocker("ready_by_required", "A ready-by date must be set.", _ready_by_set),
        Blocker(
            "all_pieces_tagged",
            "Every piece must be created and tagged.",
            _all_pieces_tagged,
            applies=_flag("track_individual_piece"),
        ),
        Blocker(
            "all_pieces_scanned",
            "Every piece must be scanned.",
            _all_pieces_scanned,
            applies=_flag("track_individual_piece"),
        ),
        Blocker(
            "all_items_assembled",
            "Every item must be assembled.",
            _all_items_assembled,
            applies=_flag("assembly_enabled"),
        ),
        Blocker(
            "qa_all_items_passed",
            "Every item must pass quality check.",
            _all_items_passed_qa,
            applies=_flag("qa_enabled"),
        ),
        Blocker(
            "qa_no_open_issues",
            "High or urgent issues must be resolved.",
            _no_blocking_issues,
        ),
        Blocker(
            "rack_location_required",
            "A rack location must be assigned.",
            _rack_location_set,
        ),
    )
}


def get_blocker(blocker_id: str) -> Blocker:
    try:
        return BLOCKERS[blocker_id]
    except KeyError:
        raise UnknownBlockerError(f"Unknown blocker: {blocker_id}") from None


def unknown_blocker_ids(blocker_ids: Iterable[str]) -> List[str]:
    return [b for b in blocker_ids if b not in BLOCKERS]


def evaluate_preconditions(snapshot: OrderSnapshot, edge, context: Any = None) -> List[str]:
    """
    Evaluate(order, edge) -> list of unmet blocker ids (empty = pass).
    """
    unmet: List[str] = []
    for blocker_id in edge.blocker_ids:
        if get_blocker(blocker_id).is_unmet(snapshot, context):
            unmet.append(blocker_id)
    return unmet


def describe_blockers(blocker_ids: Iterable[str]) -> List[Dict[str, str]]:
    """
    Human-readable checklist entries for UI.
    """
    out = []
    for blocker_id in blocker_ids:
        blocker = BLOCKERS.get(blocker_id)
        out.append(
            {
                "id": blocker_id,
                "description": blocker.description if blocker else blocker_id,
            }
        )
    return out


__all__ = [
    "Blocker",
    "BLOCKERS",
    "UnknownBlockerError",
    "get_blocker",
    "unknown_blocker_ids",
    "evaluate_preconditions",
    "describe_blockers",
]
