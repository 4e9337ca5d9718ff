# orders_core/workflows/runtime.py

"""
Workflow runtime outcomes.

Responsibilities:
- Structured exceptions for protocol and infrastructure failures
- The TransitionResult returned for every handled request

Blocker failures are NOT exceptions: they come back as a TransitionResult
with success=False and the list of unmet blockers.

This module MUST remain free of UI, serializers, or persistence logic.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


GENERIC_PROTOCOL_MESSAGE = (
    "This action is not available for the order in its current state. "
    "Reload the order and try again."
)
GENERIC_RETRY_MESSAGE = "Something went wrong while saving. Please retry or contact support."


class WorkflowError(Exception):
    """
    Base class for protocol and infrastructure failures.
    """

    code = "workflow_error"
    retryable = False
    user_message = GENERIC_PROTOCOL_MESSAGE

    def __init__(self, message: str = "", **details: Any):
        self.details = details
        super().__init__(message or self.code)

    def as_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.user_message, "retryable": self.retryable}


class InvalidTransitionError(WorkflowError):
    """
    The requested edge does not exist in the effective graph.
    Stale client state or a configuration bug; never retried automatically.
    """

    code = "invalid_transition"


class ScreenNotAllowedError(InvalidTransitionError):
    """
    The edge exists but the requesting screen may not use it.
    """


class TerminalStateError(WorkflowError):
    code = "terminal_state"


class ConflictError(WorkflowError):
    """
    Lost an optimistic-concurrency race. Reload and retry.
    """

    code = "conflict"
    retryable = True
    user_message = "The order was changed by someone else. Reload it and try again."


class PersistenceError(WorkflowError):
    """
    Infrastructure failure that survived the executor's bounded retries.
    """

    code = "persistence"
    user_message = GENERIC_RETRY_MESSAGE


class OrderNotFoundError(WorkflowError):
    code = "not_found"
    user_message = "Order not found."


@dataclass
class TransitionResult:
    success: bool
    new_status: Optional[str] = None
    blockers: List[str] = field(default_factory=list)
    error: Optional[str] = None
    message: Optional[str] = None
    from_status: Optional[str] = None
    routing: Optional[str] = None
    transition_id: Optional[int] = None

    @classmethod
    def blocked(cls, *, from_status: str, blockers: List[str], routing: str) -> "TransitionResult":
        return cls(success=False, blockers=list(blockers), from_status=from_status, routing=routing)

    @classmethod
    def failed(cls, exc: WorkflowError) -> "TransitionResult":
        return cls(success=False, error=exc.code, message=exc.user_message)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "new_status": self.new_status,
            "blockers": list(self.blockers),
            "error": self.error,
            "message": self.message,
        }


__all__ = [
    "WorkflowError",
    "InvalidTransitionError",
    "ScreenNotAllowedError",
    "TerminalStateError",
    "ConflictError",
    "PersistenceError",
    "OrderNotFoundError",
    "TransitionResult",
]
