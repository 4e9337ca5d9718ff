# orders_core/views.py
from __future__ import annotations

from rest_framework import viewsets
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import extend_schema, extend_schema_view

from .filters import OrderFilter
from .models import Order
from .permissions import IsTenantMember, resolve_current_tenant
from .serializers import OrderDetailSerializer, OrderSerializer


# ===============================================================
# Health
# ===============================================================
class HealthCheckView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(tags=["System"])
    def get(self, request):
        tenant = resolve_current_tenant(request)
        payload = {"status": "ok", "service": "laundry-ops"}
        if tenant:
            payload["tenant"] = {
                "id": tenant.id,
                "code": tenant.code,
                "name": tenant.name,
            }
        return Response(payload)


# ===============================================================
# Orders (read-only; status moves through the transition API)
# ===============================================================
@extend_schema_view(
    list=extend_schema(tags=["Orders"]),
    retrieve=extend_schema(tags=["Orders"]),
)
class OrderViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    permission_classes = [IsTenantMember]
    filterset_class = OrderFilter

    def get_queryset(self):
        tenant = getattr(self.request, "tenant", None)
        if tenant is None:
            return Order.objects.none()

        qs = super().get_queryset().filter(tenant=tenant)
        if self.action == "retrieve":
            qs = qs.prefetch_related("items__pieces", "issues")
        return qs.order_by("-created_at", "-id")

    def get_serializer_class(self):
        if self.action == "retrieve":
            return OrderDetailSerializer
        return OrderSerializer
