# orders_core/workflows/__init__.py
"""
Order lifecycle engine.

Import-safe from models: nothing here touches the ORM. The executor,
repository, metrics and overdue helpers live in their own modules and are
imported explicitly.
"""

from __future__ import annotations

from orders_core.workflows.graph import StatusGraph, TransitionEdge, build_status_graph
from orders_core.workflows.rules import (
    DEFAULT_STAGE_FLAGS,
    ORDER_STATUSES,
    SCREENS,
    TERMINAL_STATUSES,
    is_known_status,
    is_terminal_status,
    normalize_screen,
    normalize_status,
)
from orders_core.workflows.runtime import (
    ConflictError,
    InvalidTransitionError,
    OrderNotFoundError,
    PersistenceError,
    ScreenNotAllowedError,
    TerminalStateError,
    TransitionResult,
    WorkflowError,
)

__all__ = [
    "DEFAULT_STAGE_FLAGS",
    "ORDER_STATUSES",
    "SCREENS",
    "TERMINAL_STATUSES",
    "is_known_status",
    "is_terminal_status",
    "normalize_screen",
    "normalize_status",
    "StatusGraph",
    "TransitionEdge",
    "build_status_graph",
    "WorkflowError",
    "InvalidTransitionError",
    "ScreenNotAllowedError",
    "TerminalStateError",
    "ConflictError",
    "PersistenceError",
    "OrderNotFoundError",
    "TransitionResult",
]
