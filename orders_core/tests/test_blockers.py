# orders_core/tests/test_blockers.py

from datetime import datetime, timezone

import pytest

from orders_core.workflows.blockers import (
    UnknownBlockerError,
    describe_blockers,
    evaluate_preconditions,
    get_blocker,
)
from orders_core.workflows.context import build_context
from orders_core.workflows.graph import TransitionEdge, build_status_graph
from orders_core.workflows.snapshot import IssueSnapshot, ItemSnapshot, OrderSnapshot, PieceSnapshot


READY_BY = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _snapshot(**overrides):
    item = ItemSnapshot(item_id=1, name="Shirt", quantity=2, item_status="assembled", qa_status="passed")
    data = dict(
        order_id=10,
        tenant_id=1,
        status="packing",
        version=3,
        rack_location="",
        ready_by=READY_BY,
        items=(item,),
    )
    data.update(overrides)
    return OrderSnapshot(**data)


def _edge(*blocker_ids):
    return TransitionEdge("a", "b", frozenset({"x"}), tuple(blocker_ids))


# ===============================================================
# Evaluation semantics
# ===============================================================

def test_rack_location_blocks_packing_to_ready():
    edge = build_status_graph().find_edge("packing", "ready")

    assert evaluate_preconditions(_snapshot(), edge, build_context()) == ["rack_location_required"]
    assert evaluate_preconditions(_snapshot(rack_location="A-12"), edge, build_context()) == []


def test_whitespace_rack_location_is_blank():
    edge = build_status_graph().find_edge("packing", "ready")
    assert evaluate_preconditions(_snapshot(rack_location="   "), edge, build_context()) == [
        "rack_location_required"
    ]


def test_evaluation_is_idempotent():
    snapshot = _snapshot(items=(), ready_by=None)
    edge = build_status_graph().find_edge("intake", "preparation")
    ctx = build_context()

    first = evaluate_preconditions(snapshot, edge, ctx)
    second = evaluate_preconditions(snapshot, edge, ctx)

    assert first == second == ["order_has_items", "ready_by_required"]


def test_all_blockers_reported_in_edge_order():
    snapshot = _snapshot(items=(), ready_by=None, rack_location="")
    edge = _edge("rack_location_required", "ready_by_required", "order_has_items")

    assert evaluate_preconditions(snapshot, edge, build_context()) == [
        "rack_location_required",
        "ready_by_required",
        "order_has_items",
    ]


def test_unknown_blocker_raises():
    with pytest.raises(UnknownBlockerError):
        evaluate_preconditions(_snapshot(), _edge("does_not_exist"), build_context())

    with pytest.raises(UnknownBlockerError):
        get_blocker("does_not_exist")


# ===============================================================
# Applicability follows tenant flags
# ===============================================================

def test_piece_blockers_only_apply_with_piece_tracking():
    item = ItemSnapshot(item_id=1, name="Shirt", quantity=2, pieces=(PieceSnapshot(piece_seq=1, tag_code="T1"),))
    snapshot = _snapshot(items=(item,))
    edge = _edge("all_pieces_tagged", "all_pieces_scanned")

    assert evaluate_preconditions(snapshot, edge, build_context()) == []
    assert evaluate_preconditions(snapshot, edge, build_context(flags={"track_individual_piece": True})) == [
        "all_pieces_tagged",
        "all_pieces_scanned",
    ]


def test_pieces_complete_when_tagged_and_scanned():
    pieces = (
        PieceSnapshot(piece_seq=1, tag_code="T1", scan_state="scanned"),
        PieceSnapshot(piece_seq=2, tag_code="T2", scan_state="scanned"),
    )
    snapshot = _snapshot(items=(ItemSnapshot(item_id=1, name="Shirt", quantity=2, pieces=pieces),))
    ctx = build_context(flags={"track_individual_piece": True})

    assert evaluate_preconditions(snapshot, _edge("all_pieces_tagged", "all_pieces_scanned"), ctx) == []


def test_assembly_blocker_ignored_when_assembly_disabled():
    snapshot = _snapshot(items=(ItemSnapshot(item_id=1, name="Shirt", quantity=1, item_status="pending"),))
    ctx = build_context(flags={"assembly_enabled": False})
    edge = build_status_graph(ctx).find_edge("processing", "qa")

    assert "all_items_assembled" in edge.blocker_ids
    assert evaluate_preconditions(snapshot, edge, ctx) == []


def test_qa_blockers():
    failed = ItemSnapshot(item_id=1, name="Shirt", quantity=1, item_status="assembled", qa_status="failed")
    edge = build_status_graph().find_edge("qa", "packing")

    assert evaluate_preconditions(_snapshot(items=(failed,)), edge, build_context()) == ["qa_all_items_passed"]
    assert evaluate_preconditions(
        _snapshot(items=(failed,)), edge, build_context(flags={"qa_enabled": False})
    ) == []


@pytest.mark.parametrize(
    "priority, blocked",
    [("low", False), ("normal", False), ("high", True), ("urgent", True)],
)
def test_open_issue_priority(priority, blocked):
    snapshot = _snapshot(open_issues=(IssueSnapshot(issue_id=1, issue_code="stain", priority=priority),))
    result = evaluate_preconditions(snapshot, _edge("qa_no_open_issues"), build_context())
    assert result == (["qa_no_open_issues"] if blocked else [])


def test_blocking_priorities_follow_settings(settings):
    settings.ORDERS_CORE = {"BLOCKING_ISSUE_PRIORITIES": ["urgent"]}
    snapshot = _snapshot(open_issues=(IssueSnapshot(issue_id=1, issue_code="damage", priority="high"),))

    assert evaluate_preconditions(snapshot, _edge("qa_no_open_issues"), build_context()) == []


def test_describe_blockers():
    out = describe_blockers(["rack_location_required", "mystery"])
    assert out[0] == {"id": "rack_location_required", "description": "A rack location must be assigned."}
    assert out[1] == {"id": "mystery", "description": "mystery"}


def test_missing_context_uses_default_stage_flags():
    pending = ItemSnapshot(item_id=1, name="Shirt", quantity=1, item_status="pending", qa_status="failed")
    snapshot = _snapshot(items=(pending,))
    edge = _edge("all_items_assembled", "qa_all_items_passed", "all_pieces_tagged")

    # stage blockers apply exactly as with an explicit default context
    assert evaluate_preconditions(snapshot, edge) == ["all_items_assembled", "qa_all_items_passed"]
    assert evaluate_preconditions(snapshot, edge) == evaluate_preconditions(snapshot, edge, build_context())
