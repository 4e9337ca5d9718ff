# orders_core/tests/test_workflow_api.py

import pytest
from django.db import OperationalError

from orders_core.models import Order, OrderTransition
from orders_core.workflows.repository import OrderRepository


def _transition_url(order):
    return f"/api/orders/{order.pk}/transition/"


# ===============================================================
# POST /api/orders/<id>/transition/
# ===============================================================

@pytest.mark.django_db
def test_transition_requires_authentication(api_client, packing_order):
    resp = api_client.post(_transition_url(packing_order), {"screen": "packing", "to_status": "ready"}, format="json")
    assert resp.status_code in (401, 403)


@pytest.mark.django_db
def test_transition_blocked_returns_422(staff_client, packing_order):
    resp = staff_client.post(
        _transition_url(packing_order),
        {"screen": "packing", "to_status": "ready"},
        format="json",
    )

    assert resp.status_code == 422
    data = resp.json()
    assert data["success"] is False
    assert data["blockers"] == ["rack_location_required"]
    assert data["blocker_details"][0]["id"] == "rack_location_required"

    packing_order.refresh_from_db()
    assert packing_order.status == "packing"


@pytest.mark.django_db
def test_transition_success_returns_200(staff_client, staff_user, packing_order):
    Order.objects.filter(pk=packing_order.pk).update(rack_location="A-12")

    resp = staff_client.post(
        _transition_url(packing_order),
        {"screen": "packing", "to_status": "ready", "notes": " bagged "},
        format="json",
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["new_status"] == "ready"
    assert data["from_status"] == "packing"

    record = OrderTransition.objects.get(order=packing_order)
    assert record.actor_id == str(staff_user.pk)
    assert record.notes == "bagged"


@pytest.mark.django_db
def test_terminal_order_returns_400(staff_client, tenant, order_factory):
    order = order_factory(tenant=tenant, status="delivered")

    resp = staff_client.post(_transition_url(order), {"screen": "orders", "to_status": "cancelled"}, format="json")

    assert resp.status_code == 400
    assert resp.json()["error"] == "terminal_state"


@pytest.mark.django_db
def test_invalid_transition_returns_400(staff_client, tenant, order_factory):
    order = order_factory(tenant=tenant, status="intake")

    resp = staff_client.post(_transition_url(order), {"screen": "intake", "to_status": "delivered"}, format="json")

    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_transition"


@pytest.mark.django_db
def test_malformed_body_returns_validation_errors(staff_client, packing_order):
    resp = staff_client.post(
        _transition_url(packing_order),
        {"screen": "laundromat", "to_status": "ready", "routing_hint": "fast"},
        format="json",
    )

    assert resp.status_code == 400
    data = resp.json()
    assert "screen" in data
    assert "routing_hint" in data


@pytest.mark.django_db
def test_other_tenants_order_returns_404(staff_client, other_tenant, order_factory):
    order = order_factory(tenant=other_tenant, status="ready")

    resp = staff_client.post(_transition_url(order), {"screen": "ready_release", "to_status": "closed"}, format="json")

    assert resp.status_code == 404
    order.refresh_from_db()
    assert order.status == "ready"


@pytest.mark.django_db
def test_tenant_header_for_foreign_tenant_is_forbidden(api_client, outsider_user, tenant, packing_order):
    assert api_client.login(username="outsider", password="pass123") is True

    resp = api_client.post(
        _transition_url(packing_order),
        {"screen": "packing", "to_status": "ready"},
        format="json",
        HTTP_X_TENANT=str(tenant.id),
    )

    assert resp.status_code == 403


@pytest.mark.django_db
def test_conflict_returns_409(staff_client, tenant, order_factory, monkeypatch):
    order = order_factory(tenant=tenant, status="ready")
    stale = OrderRepository().load_order(order.pk)
    OrderRepository().save_order_with_history(snapshot=stale, to_status="out_for_delivery", screen="ready_release")

    monkeypatch.setattr(OrderRepository, "load_order", lambda self, order_id, tenant_id=None: stale)

    resp = staff_client.post(_transition_url(order), {"screen": "ready_release", "to_status": "closed"}, format="json")

    assert resp.status_code == 409
    assert resp.json()["error"] == "conflict"


@pytest.mark.django_db
def test_persistence_failure_returns_503(staff_client, tenant, order_factory, monkeypatch, settings):
    settings.ORDERS_CORE = {"PERSIST_MAX_RETRIES": 0}
    order = order_factory(tenant=tenant, status="ready")

    def _fail(self, **kwargs):
        raise OperationalError("server closed the connection")

    monkeypatch.setattr(OrderRepository, "save_order_with_history", _fail)

    resp = staff_client.post(_transition_url(order), {"screen": "ready_release", "to_status": "closed"}, format="json")

    assert resp.status_code == 503
    assert resp.json()["error"] == "persistence"


# ===============================================================
# Read endpoints
# ===============================================================

@pytest.mark.django_db
def test_allowed_endpoint(staff_client, packing_order):
    resp = staff_client.get(f"/api/orders/{packing_order.pk}/allowed/", {"screen": "packing"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["current_status"] == "packing"
    assert data["allowed"] == ["ready", "cancelled"]


@pytest.mark.django_db
def test_allowed_endpoint_404(staff_client):
    resp = staff_client.get("/api/orders/999999/allowed/")
    assert resp.status_code == 404


@pytest.mark.django_db
def test_history_and_metrics_endpoints(staff_client, tenant, order_factory):
    order = order_factory(tenant=tenant, status="ready")
    staff_client.post(_transition_url(order), {"screen": "ready_release", "to_status": "closed"}, format="json")

    resp = staff_client.get(f"/api/orders/{order.pk}/history/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["count"] == 1
    assert data["results"][0]["from_status"] == "ready"
    assert data["results"][0]["to_status"] == "closed"
    assert data["results"][0]["screen"] == "ready_release"

    resp = staff_client.get(f"/api/orders/{order.pk}/metrics/")
    assert resp.status_code == 200
    assert set(resp.json()["time_in_status_seconds"]) == {"ready", "closed"}


@pytest.mark.django_db
def test_bulk_endpoint(staff_client, tenant, order_factory):
    orders = [order_factory(tenant=tenant, status="ready") for _ in range(2)]
    closed = order_factory(tenant=tenant, status="closed")

    resp = staff_client.post(
        "/api/orders/bulk-transition/",
        {
            "order_ids": [o.pk for o in orders] + [closed.pk],
            "screen": "ready_release",
            "to_status": "out_for_delivery",
        },
        format="json",
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["success_count"] == 2
    assert data["failed"] == [
        {"order_id": closed.pk, "error": "terminal_state", "message": data["failed"][0]["message"]}
    ]


@pytest.mark.django_db
def test_bulk_endpoint_requires_ids(staff_client):
    resp = staff_client.post(
        "/api/orders/bulk-transition/",
        {"order_ids": [], "screen": "ready_release", "to_status": "closed"},
        format="json",
    )
    assert resp.status_code == 400


@pytest.mark.django_db
def test_order_list_is_tenant_scoped_and_filterable(staff_client, tenant, other_tenant, order_factory):
    mine = order_factory(tenant=tenant, status="ready", rack_location="A-12")
    order_factory(tenant=tenant, status="intake")
    order_factory(tenant=other_tenant, status="ready")

    resp = staff_client.get("/api/orders/", {"status": "ready"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["count"] == 1
    assert data["results"][0]["id"] == mine.pk
    assert data["results"][0]["version"] == 0

    resp = staff_client.get("/api/orders/", {"rack_location": "a-1"})
    assert [row["id"] for row in resp.json()["results"]] == [mine.pk]


@pytest.mark.django_db
def test_order_detail_includes_items(staff_client, tenant, order_factory):
    order = order_factory(tenant=tenant, items=2, quantity=3, tagged=True)

    resp = staff_client.get(f"/api/orders/{order.pk}/")

    assert resp.status_code == 200
    data = resp.json()
    assert len(data["items"]) == 2
    assert len(data["items"][0]["pieces"]) == 3


@pytest.mark.django_db
def test_orders_api_is_read_only(staff_client, packing_order):
    resp = staff_client.patch(f"/api/orders/{packing_order.pk}/", {"status": "ready"}, format="json")
    assert resp.status_code == 405


# ===============================================================
# Tenant workflow endpoints
# ===============================================================

@pytest.mark.django_db
def test_workflow_context_endpoint(staff_client, tenant, order_factory, stage_settings):
    stage_settings(tenant, qa_enabled=False, track_individual_piece=True)
    order_factory(tenant=tenant, items=2, quantity=2)

    resp = staff_client.get("/api/workflow/context/")

    assert resp.status_code == 200
    data = resp.json()
    assert data["tenant_id"] == tenant.id
    assert data["flags"]["qa_enabled"] is False
    assert data["flags"]["track_individual_piece"] is True
    assert data["metrics"] == {"items_count": 2, "pieces_total": 4}


@pytest.mark.django_db
def test_workflow_definition_endpoint(staff_client):
    resp = staff_client.get("/api/workflow/definition/")

    assert resp.status_code == 200
    keys = {(t["from"], t["to"]) for t in resp.json()["transitions"]}
    assert ("packing", "ready") in keys


@pytest.mark.django_db
def test_workflow_stats_endpoint(staff_client, tenant, order_factory):
    order_factory(tenant=tenant, status="ready")
    order_factory(tenant=tenant, status="processing")
    order_factory(tenant=tenant, status="cancelled")

    resp = staff_client.get("/api/workflow/stats/")

    assert resp.status_code == 200
    current = resp.json()["current_orders"]
    assert current["total"] == 2
    assert current["ready"] == 1
    assert current["in_progress"] == 1


# ===============================================================
# Screen "complete" and history filters
# ===============================================================

@pytest.mark.django_db
def test_transition_without_target_uses_screen_default(staff_client, tenant, order_factory):
    order = order_factory(tenant=tenant, status="processing")

    resp = staff_client.post(_transition_url(order), {"screen": "processing"}, format="json")

    assert resp.status_code == 200
    assert resp.json()["new_status"] == "assembly"


@pytest.mark.django_db
def test_transition_without_target_ambiguous_returns_400(staff_client, tenant, order_factory):
    order = order_factory(tenant=tenant, status="ready")

    resp = staff_client.post(_transition_url(order), {"screen": "ready_release", "to_status": ""}, format="json")

    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_transition"


@pytest.mark.django_db
def test_history_endpoint_filters(staff_client, tenant, order_factory):
    order = order_factory(tenant=tenant, status="ready")
    url = f"/api/orders/{order.pk}/history/"
    staff_client.post(_transition_url(order), {"screen": "ready_release", "to_status": "out_for_delivery"}, format="json")
    staff_client.post(_transition_url(order), {"screen": "driver_delivery", "to_status": "ready"}, format="json")

    resp = staff_client.get(url, {"screen": "driver_delivery"})
    assert resp.status_code == 200
    assert [r["to_status"] for r in resp.json()["results"]] == ["ready"]

    resp = staff_client.get(url, {"to_status": "out_for_delivery"})
    assert resp.json()["count"] == 1

    resp = staff_client.get(url, {"created_at_after": "2999-01-01T00:00:00Z"})
    assert resp.json()["count"] == 0

    resp = staff_client.get(url, {"routing": "sideways"})
    assert resp.status_code == 400
