"""
Authoritative order lifecycle rules.

Defines:
- Status universe and terminal statuses
- Screens (physical workstations)
- The static transition table (allowed screens + blockers per edge)
- Optional stages that tenants may switch off

This module is PURE DATA. The effective, tenant-specific graph is computed
in orders_core.workflows.graph.
"""

from __future__ import annotations

from typing import Dict, List, Set, Tuple


# ===============================================================
# STATUSES
# ===============================================================
INTAKE = "intake"
PREPARATION = "preparation"
PROCESSING = "processing"
ASSEMBLY = "assembly"
QA = "qa"
READY = "ready"
PACKING = "packing"
OUT_FOR_DELIVERY = "out_for_delivery"
DELIVERED = "delivered"
CANCELLED = "cancelled"
CLOSED = "closed"

# Display order follows the physical flow through the laundry.
ORDER_STATUSES: Tuple[str, ...] = (
    INTAKE,
    PREPARATION,
    PROCESSING,
    ASSEMBLY,
    QA,
    PACKING,
    READY,
    OUT_FOR_DELIVERY,
    DELIVERED,
    CANCELLED,
    CLOSED,
)

STATUS_LABELS: Dict[str, str] = {
    INTAKE: "Intake",
    PREPARATION: "Preparation",
    PROCESSING: "Processing",
    ASSEMBLY: "Assembly",
    QA: "Quality Check",
    PACKING: "Packing",
    READY: "Ready",
    OUT_FOR_DELIVERY: "Out for Delivery",
    DELIVERED: "Delivered",
    CANCELLED: "Cancelled",
    CLOSED: "Closed",
}

# delivered is locked as well: a delivered order can no longer be moved
TERMINAL_STATUSES: Set[str] = {DELIVERED, CANCELLED, CLOSED}

# cancelled and closed orders are frozen entirely: no field or child edits
IMMUTABLE_STATUSES: Set[str] = {CANCELLED, CLOSED}


# ===============================================================
# SCREENS
# ===============================================================
SCREEN_INTAKE = "intake"
SCREEN_PREPARATION = "preparation"
SCREEN_PROCESSING = "processing"
SCREEN_ASSEMBLY = "assembly"
SCREEN_QA = "qa"
SCREEN_PACKING = "packing"
SCREEN_READY_RELEASE = "ready_release"
SCREEN_DRIVER_DELIVERY = "driver_delivery"
SCREEN_ORDERS = "orders"  # back office

SCREENS: Tuple[str, ...] = (
    SCREEN_INTAKE,
    SCREEN_PREPARATION,
    SCREEN_PROCESSING,
    SCREEN_ASSEMBLY,
    SCREEN_QA,
    SCREEN_PACKING,
    SCREEN_READY_RELEASE,
    SCREEN_DRIVER_DELIVERY,
    SCREEN_ORDERS,
)


# ===============================================================
# OPTIONAL STAGES
# ===============================================================
# Order matters: stages are removed one after another so that
# combined toggles compose (assembly + qa off -> processing -> packing).
OPTIONAL_STAGES: Tuple[Tuple[str, str], ...] = (
    ("assembly_enabled", ASSEMBLY),
    ("qa_enabled", QA),
    ("packing_enabled", PACKING),
)

DEFAULT_STAGE_FLAGS: Dict[str, bool] = {
    "assembly_enabled": True,
    "qa_enabled": True,
    "packing_enabled": True,
    "track_individual_piece": False,
}


# ===============================================================
# STATIC TRANSITION TABLE
# ===============================================================
# from_status -> to_status -> {"screens": [...], "blockers": [...]}
#
# Blockers are evaluated in the listed order.
TRANSITION_TABLE: Dict[str, Dict[str, Dict[str, List[str]]]] = {
    INTAKE: {
        PREPARATION: {
            "screens": [SCREEN_INTAKE, SCREEN_PREPARATION],
            "blockers": ["order_has_items", "ready_by_required"],
        },
        CANCELLED: {"screens": [SCREEN_INTAKE, SCREEN_ORDERS], "blockers": []},
    },
    PREPARATION: {
        PROCESSING: {
            "screens": [SCREEN_PREPARATION],
            "blockers": ["order_has_items", "all_pieces_tagged"],
        },
        CANCELLED: {"screens": [SCREEN_PREPARATION, SCREEN_ORDERS], "blockers": []},
    },
    PROCESSING: {
        ASSEMBLY: {"screens": [SCREEN_PROCESSING], "blockers": []},
        CANCELLED: {"screens": [SCREEN_PROCESSING, SCREEN_ORDERS], "blockers": []},
    },
    ASSEMBLY: {
        QA: {
            "screens": [SCREEN_ASSEMBLY],
            "blockers": ["all_pieces_scanned", "all_items_assembled"],
        },
        CANCELLED: {"screens": [SCREEN_ASSEMBLY, SCREEN_ORDERS], "blockers": []},
    },
    QA: {
        PACKING: {
            "screens": [SCREEN_QA],
            "blockers": ["qa_all_items_passed", "qa_no_open_issues"],
        },
        CANCELLED: {"screens": [SCREEN_QA, SCREEN_ORDERS], "blockers": []},
    },
    PACKING: {
        READY: {"screens": [SCREEN_PACKING], "blockers": ["rack_location_required"]},
        CANCELLED: {"screens": [SCREEN_PACKING, SCREEN_ORDERS], "blockers": []},
    },
    READY: {
        OUT_FOR_DELIVERY: {"screens": [SCREEN_READY_RELEASE], "blockers": []},
        # counter pick-up
        CLOSED: {"screens": [SCREEN_READY_RELEASE], "blockers": []},
        CANCELLED: {"screens": [SCREEN_ORDERS], "blockers": []},
    },
    OUT_FOR_DELIVERY: {
        DELIVERED: {"screens": [SCREEN_DRIVER_DELIVERY], "blockers": []},
        # failed delivery goes back to the rack
        READY: {"screens": [SCREEN_DRIVER_DELIVERY], "blockers": []},
    },
    DELIVERED: {},
    CANCELLED: {},
    CLOSED: {},
}


def normalize_status(value) -> str:
    return str(value or "").strip().lower()


def normalize_screen(value) -> str:
    return str(value or "").strip().lower()


def is_known_status(value) -> bool:
    return normalize_status(value) in ORDER_STATUSES


def is_terminal_status(value) -> bool:
    return normalize_status(value) in TERMINAL_STATUSES


__all__ = [
    "ORDER_STATUSES",
    "STATUS_LABELS",
    "TERMINAL_STATUSES",
    "IMMUTABLE_STATUSES",
    "SCREENS",
    "OPTIONAL_STAGES",
    "DEFAULT_STAGE_FLAGS",
    "TRANSITION_TABLE",
    "normalize_status",
    "normalize_screen",
    "is_known_status",
    "is_terminal_status",
]
