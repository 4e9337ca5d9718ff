# orders_core/tests/test_workflow_context.py

import pytest
from django.core.cache import cache

from orders_core.models import TenantWorkflowSettings
from orders_core.workflows.context import (
    CACHE_KEY,
    build_context,
    get_stage_toggles,
    get_workflow_context,
    invalidate_workflow_context,
)
from orders_core.workflows.rules import DEFAULT_STAGE_FLAGS


@pytest.mark.django_db
def test_defaults_when_tenant_has_no_settings(tenant):
    ctx = get_workflow_context(tenant.id)

    assert ctx.flags == DEFAULT_STAGE_FLAGS
    assert ctx.use_contract_routing is False
    assert ctx.contract_screens == ()


@pytest.mark.django_db
def test_flags_come_from_tenant_settings(tenant, stage_settings):
    stage_settings(tenant, assembly_enabled=False, use_contract_routing=True, contract_screens=["QA", "packing"])

    ctx = get_workflow_context(tenant.id)

    assert ctx.flag("assembly_enabled") is False
    assert ctx.flag("qa_enabled") is True
    assert ctx.use_contract_routing is True
    assert ctx.contract_screens == ("packing", "qa")


@pytest.mark.django_db
def test_project_default_contract_screens(tenant, settings):
    settings.ORDERS_CORE = {"CONTRACT_SCREENS": ["packing"]}
    assert get_workflow_context(tenant.id).contract_screens == ("packing",)


@pytest.mark.django_db
def test_flags_are_cached(tenant):
    get_stage_toggles(tenant.id)
    assert cache.get(CACHE_KEY.format(tenant_id=tenant.id)) is not None

    # bypass save() so no invalidation happens
    TenantWorkflowSettings.objects.bulk_create([TenantWorkflowSettings(tenant=tenant, qa_enabled=False)])

    assert get_workflow_context(tenant.id).flag("qa_enabled") is True
    assert get_workflow_context(tenant.id, use_cache=False).flag("qa_enabled") is False

    invalidate_workflow_context(tenant.id)
    assert get_workflow_context(tenant.id).flag("qa_enabled") is False


@pytest.mark.django_db
def test_saving_settings_invalidates_cache(tenant, stage_settings):
    assert get_workflow_context(tenant.id).flag("packing_enabled") is True

    stage_settings(tenant, packing_enabled=False)

    assert get_workflow_context(tenant.id).flag("packing_enabled") is False


@pytest.mark.django_db
def test_metrics_per_order_and_per_tenant(tenant, order_factory):
    first = order_factory(tenant=tenant, items=2, quantity=3)
    order_factory(tenant=tenant, items=1, quantity=5)
    order_factory(tenant=tenant, status="closed", items=4, quantity=1)

    per_order = get_workflow_context(tenant.id, order_id=first.pk).metrics
    assert (per_order.items_count, per_order.pieces_total) == (2, 6)

    # terminal orders are left out of the tenant-wide numbers
    overall = get_workflow_context(tenant.id).metrics
    assert (overall.items_count, overall.pieces_total) == (3, 11)


def test_build_context_fills_missing_flags():
    ctx = build_context(flags={"qa_enabled": False})

    assert ctx.flag("qa_enabled") is False
    assert ctx.flag("assembly_enabled") is True
    assert ctx.flag("unknown_flag") is False
    assert ctx.as_dict()["flags"]["qa_enabled"] is False
