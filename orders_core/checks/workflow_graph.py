# orders_core/checks/workflow_graph.py

from itertools import product

from django.core.checks import Error, register

from orders_core.workflows.blockers import unknown_blocker_ids
from orders_core.workflows.graph import build_status_graph
from orders_core.workflows.rules import OPTIONAL_STAGES, TERMINAL_STATUSES


def _toggle_combinations():
    names = [flag for flag, _stage in OPTIONAL_STAGES]
    for values in product((True, False), repeat=len(names)):
        yield dict(zip(names, values))


@register()
def check_workflow_graph(app_configs, **kwargs):
    """
    Django system check: every stage toggle combination must give a graph
    where open orders can always move on and every blocker is registered.
    """
    errors = []

    for flags in _toggle_combinations():
        graph = build_status_graph(flags)
        label = ", ".join(f"{k}={v}" for k, v in flags.items())

        # 1. Dead ends
        for status in graph.statuses:
            if status in TERMINAL_STATUSES:
                continue
            if not graph.outgoing(status):
                errors.append(
                    Error(
                        f"Status '{status}' has no outgoing transition",
                        hint=f"Stage toggles: {label}",
                        id="orders_core.E001",
                    )
                )

        # 2. Blocker registry
        for edge in graph.edges:
            for blocker_id in unknown_blocker_ids(edge.blocker_ids):
                errors.append(
                    Error(
                        f"Unknown blocker '{blocker_id}' on {edge.from_status} -> {edge.to_status}",
                        hint=f"Stage toggles: {label}",
                        id="orders_core.E002",
                    )
                )

    # identical errors repeat across combinations
    unique = []
    for err in errors:
        if err not in unique:
            unique.append(err)
    return unique
