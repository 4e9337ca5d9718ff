# orders_core/conf.py
from __future__ import annotations

from typing import Any, Dict

from django.conf import settings


DEFAULTS: Dict[str, Any] = {
    # seconds; stage toggles change rarely
    "WORKFLOW_CONTEXT_TTL": 60,
    "PERSIST_MAX_RETRIES": 3,
    "PERSIST_RETRY_BACKOFF": 0.05,
    # screens that already have a contract when a tenant does not override it
    "CONTRACT_SCREENS": [],
    "DEFAULT_ROUTING": "legacy",
    "BLOCKING_ISSUE_PRIORITIES": ["high", "urgent"],
}


def app_setting(name: str) -> Any:
    """
    Read an ORDERS_CORE setting, falling back to the app default.
    """
    if name not in DEFAULTS:
        raise KeyError(f"Unknown orders_core setting: {name}")
    overrides = getattr(settings, "ORDERS_CORE", None) or {}
    return overrides.get(name, DEFAULTS[name])
