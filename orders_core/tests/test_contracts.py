# orders_core/tests/test_contracts.py

import pytest

from orders_core.workflows.context import build_context
from orders_core.workflows.contracts import ScreenContractResolver, contract_from_graph
from orders_core.workflows.graph import build_status_graph
from orders_core.workflows.runtime import ScreenNotAllowedError
from orders_core.workflows.strategies import (
    ContractTransitionStrategy,
    LegacyTransitionStrategy,
    select_strategy,
)


def test_contract_is_the_screen_slice_of_the_graph():
    graph = build_status_graph()
    contract = contract_from_graph(graph, "Ready_Release")

    assert contract.screen == "ready_release"
    assert contract.statuses == ["ready"]
    assert contract.targets_from("ready") == ["out_for_delivery", "closed"]
    assert contract.allows("ready", "closed")
    assert not contract.allows("ready", "cancelled")


def test_resolver_returns_none_for_screens_without_contract():
    graph = build_status_graph()
    resolver = ScreenContractResolver(contract_screens=["packing"])

    assert resolver.resolve(1, "packing", graph) is not None
    assert resolver.resolve(1, "qa", graph) is None
    assert resolver.resolve(1, "", graph) is None


def test_resolver_returns_none_when_screen_has_no_edges():
    graph = build_status_graph({"assembly_enabled": False})
    resolver = ScreenContractResolver(contract_screens=["assembly"])

    assert resolver.resolve(1, "assembly", graph) is None


def test_resolver_reads_screens_from_context():
    graph = build_status_graph()
    ctx = build_context(tenant_id=1, contract_screens=["qa"])

    assert ScreenContractResolver().resolve(1, "qa", graph, ctx).screen == "qa"
    assert ScreenContractResolver().resolve(1, "packing", graph, ctx) is None


@pytest.mark.parametrize(
    "hint, screens, expected",
    [
        ("contract", ["packing"], ContractTransitionStrategy),
        ("CONTRACT", ["packing"], ContractTransitionStrategy),
        ("legacy", ["packing"], LegacyTransitionStrategy),
        (None, ["packing"], LegacyTransitionStrategy),
        ("contract", [], LegacyTransitionStrategy),
        ("bogus", ["packing"], LegacyTransitionStrategy),
    ],
)
def test_select_strategy(hint, screens, expected):
    strategy = select_strategy(
        routing_hint=hint,
        resolver=ScreenContractResolver(contract_screens=screens),
        tenant_id=1,
        screen="packing",
        graph=build_status_graph(),
        from_status="packing",
        to_status="ready",
    )
    assert isinstance(strategy, expected)


def test_both_strategies_return_the_graph_edge():
    graph = build_status_graph()
    contract = contract_from_graph(graph, "packing")

    legacy_edge = LegacyTransitionStrategy().authorize(
        graph=graph, screen="packing", from_status="packing", to_status="ready"
    )
    contract_edge = ContractTransitionStrategy(contract).authorize(
        graph=graph, screen="packing", from_status="packing", to_status="ready"
    )

    assert legacy_edge is contract_edge
    assert legacy_edge.blocker_ids == ("rack_location_required",)


def test_contract_strategy_rejects_other_screen():
    graph = build_status_graph()
    strategy = ContractTransitionStrategy(contract_from_graph(graph, "packing"))

    with pytest.raises(ScreenNotAllowedError):
        strategy.authorize(graph=graph, screen="qa", from_status="packing", to_status="ready")
