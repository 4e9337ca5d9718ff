# orders_core/workflows/snapshot.py
"""
Read-only order snapshots.

Everything except the executor's write path works on these frozen
structures. They are built once per request and never touch the ORM
afterwards, so blocker evaluation stays deterministic and side-effect free.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class PieceSnapshot:
    piece_seq: int
    tag_code: str = ""
    scan_state: str = "pending"

    @property
    def is_tagged(self) -> bool:
        return bool((self.tag_code or "").strip())

    @property
    def is_scanned(self) -> bool:
        return self.scan_state == "scanned"


@dataclass(frozen=True)
class ItemSnapshot:
    item_id: int
    name: str
    quantity: int
    item_status: str = "pending"
    qa_status: str = "pending"
    pieces: Tuple[PieceSnapshot, ...] = ()


@dataclass(frozen=True)
class IssueSnapshot:
    issue_id: int
    issue_code: str
    priority: str
    item_id: Optional[int] = None


@dataclass(frozen=True)
class OrderSnapshot:
    order_id: int
    tenant_id: int
    status: str
    version: int = 0
    rack_location: str = ""
    ready_by: Optional[datetime] = None
    items: Tuple[ItemSnapshot, ...] = ()
    open_issues: Tuple[IssueSnapshot, ...] = field(default_factory=tuple)

    @property
    def items_count(self) -> int:
        return len(self.items)

    @property
    def pieces_total(self) -> int:
        return sum(item.quantity for item in self.items)


def snapshot_from_order(order) -> OrderSnapshot:
    """
    Build a snapshot from an Order instance.

    Callers should prefetch "items__pieces" and "issues" to keep this to a
    fixed number of queries.
    """
    items = []
    for item in order.items.all():
        pieces = tuple(
            PieceSnapshot(
                piece_seq=p.piece_seq,
                tag_code=p.tag_code or "",
                scan_state=p.scan_state,
            )
            for p in sorted(item.pieces.all(), key=lambda p: p.piece_seq)
        )
        items.append(
            ItemSnapshot(
                item_id=item.pk,
                name=item.name,
                quantity=item.quantity,
                item_status=item.item_status,
                qa_status=item.qa_status,
                pieces=pieces,
            )
        )

    open_issues = tuple(
        IssueSnapshot(
            issue_id=issue.pk,
            issue_code=issue.issue_code,
            priority=issue.priority,
            item_id=issue.item_id,
        )
        for issue in order.issues.all()
        if issue.solved_at is None
    )

    return OrderSnapshot(
        order_id=order.pk,
        tenant_id=order.tenant_id,
        status=order.status,
        version=order.version,
        rack_location=order.rack_location or "",
        ready_by=order.ready_by,
        items=tuple(sorted(items, key=lambda i: i.item_id)),
        open_issues=tuple(sorted(open_issues, key=lambda i: i.issue_id)),
    )
