# orders_core/views_workflow_api.py

from __future__ import annotations

from rest_framework import status as http
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from django_filters.utils import translate_validation
from drf_spectacular.utils import extend_schema

from orders_core.filters import OrderTransitionFilter
from orders_core.permissions import IsTenantMember
from orders_core.serializers import OrderTransitionSerializer
from orders_core.serializers_workflow import (
    BulkTransitionRequestSerializer,
    TransitionRequestSerializer,
    TransitionResultSerializer,
)
from orders_core.services.workflow import (
    get_allowed_transitions,
    get_order_history,
    request_transition,
)
from orders_core.services.workflow_bulk import bulk_transition
from orders_core.workflows.blockers import describe_blockers
from orders_core.workflows.metrics import compute_time_in_states, compute_total_cycle_time
from orders_core.workflows.runtime import OrderNotFoundError


# =============================================================
# Error code -> HTTP status
# =============================================================

ERROR_HTTP_STATUS = {
    "invalid_transition": http.HTTP_400_BAD_REQUEST,
    "terminal_state": http.HTTP_400_BAD_REQUEST,
    "not_found": http.HTTP_404_NOT_FOUND,
    "conflict": http.HTTP_409_CONFLICT,
    "persistence": http.HTTP_503_SERVICE_UNAVAILABLE,
}


def _actor_id(request) -> str:
    user = getattr(request, "user", None)
    return str(getattr(user, "pk", "") or "")


def _result_response(result) -> Response:
    payload = result.as_dict()

    if result.success:
        payload["from_status"] = result.from_status
        return Response(payload, status=http.HTTP_200_OK)

    if result.blockers:
        payload["blocker_details"] = describe_blockers(result.blockers)
        return Response(payload, status=http.HTTP_422_UNPROCESSABLE_ENTITY)

    return Response(payload, status=ERROR_HTTP_STATUS.get(result.error, http.HTTP_400_BAD_REQUEST))


# =============================================================
# API: Execute transition (AUTHORITATIVE)
# =============================================================

class OrderTransitionView(APIView):
    """
    POST /api/orders/<pk>/transition/

    Body:
        {"screen": "packing", "to_status": "ready", "notes": "", "routing_hint": "legacy"}

    This endpoint is the ONLY API-level entry point that mutates order
    status.
    """
    permission_classes = [IsTenantMember]

    @extend_schema(
        tags=["Orders"],
        request=TransitionRequestSerializer,
        responses={200: TransitionResultSerializer, 422: TransitionResultSerializer},
    )
    def post(self, request, pk: int):
        serializer = TransitionRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = request_transition(
            order_id=pk,
            screen=data["screen"],
            to_status=data.get("to_status") or None,
            notes=data.get("notes") or "",
            actor_id=_actor_id(request),
            routing_hint=data.get("routing_hint"),
            tenant_id=request.tenant.id,
        )
        return _result_response(result)


# =============================================================
# API: Allowed transitions
# =============================================================

class OrderAllowedTransitionsView(APIView):
    """
    GET /api/orders/<pk>/allowed/?screen=<screen>

    Current status plus every outgoing transition with the blockers that
    would currently stop it.
    """
    permission_classes = [IsTenantMember]

    @extend_schema(tags=["Orders"])
    def get(self, request, pk: int):
        try:
            payload = get_allowed_transitions(
                pk,
                tenant_id=request.tenant.id,
                screen=request.query_params.get("screen") or None,
            )
        except OrderNotFoundError:
            raise NotFound("Order not found.")
        return Response(payload)


# =============================================================
# API: History
# =============================================================

class OrderHistoryView(APIView):
    """
    GET /api/orders/<pk>/history/ (oldest first)

    Filters: ?screen=, ?to_status=, ?routing=, ?created_at_after=, ?created_at_before=
    """
    permission_classes = [IsTenantMember]

    @extend_schema(tags=["Orders"], responses=OrderTransitionSerializer(many=True))
    def get(self, request, pk: int):
        try:
            qs = get_order_history(pk, tenant_id=request.tenant.id)
        except OrderNotFoundError:
            raise NotFound("Order not found.")

        filterset = OrderTransitionFilter(request.query_params, queryset=qs)
        if not filterset.is_valid():
            raise translate_validation(filterset.errors)
        qs = filterset.qs

        return Response(
            {
                "order_id": pk,
                "count": qs.count(),
                "results": OrderTransitionSerializer(qs, many=True).data,
            }
        )


# =============================================================
# API: Time-in-status metrics
# =============================================================

class OrderMetricsView(APIView):
    """
    GET /api/orders/<pk>/metrics/
    """
    permission_classes = [IsTenantMember]

    @extend_schema(tags=["Orders"])
    def get(self, request, pk: int):
        try:
            get_order_history(pk, tenant_id=request.tenant.id)
        except OrderNotFoundError:
            raise NotFound("Order not found.")

        durations = compute_time_in_states(order_id=pk)
        total = compute_total_cycle_time(order_id=pk)

        return Response(
            {
                "order_id": pk,
                "time_in_status_seconds": {
                    status: int(delta.total_seconds()) for status, delta in durations.items()
                },
                "total_cycle_time_seconds": int(total.total_seconds()),
            }
        )


# =============================================================
# API: Bulk transition
# =============================================================

class OrderBulkTransitionView(APIView):
    """
    POST /api/orders/bulk-transition/

    Body:
        {"order_ids": [1, 2, 3], "screen": "ready_release", "to_status": "out_for_delivery"}

    Each order is transitioned independently; per-order outcomes are
    returned and orders that succeeded stay advanced.
    """
    permission_classes = [IsTenantMember]

    @extend_schema(tags=["Orders"], request=BulkTransitionRequestSerializer)
    def post(self, request):
        serializer = BulkTransitionRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        outcome = bulk_transition(
            order_ids=data["order_ids"],
            screen=data["screen"],
            to_status=data.get("to_status") or None,
            notes=data.get("notes") or "",
            actor_id=_actor_id(request),
            routing_hint=data.get("routing_hint"),
            tenant_id=request.tenant.id,
        )
        return Response(outcome, status=http.HTTP_200_OK)
