# orders_core/urls.py

from django.urls import path, include
from rest_framework.routers import DefaultRouter

# -------------------------------------------------
# Core API ViewSets
# -------------------------------------------------
from .views import HealthCheckView, OrderViewSet

# -------------------------------------------------
# Order transitions (authoritative) + introspection
# -------------------------------------------------
from .views_workflow_api import (
    OrderAllowedTransitionsView,
    OrderBulkTransitionView,
    OrderHistoryView,
    OrderMetricsView,
    OrderTransitionView,
)

# -------------------------------------------------
# Tenant workflow context
# -------------------------------------------------
from .views_workflow_context import (
    OverdueOrdersView,
    WorkflowContextView,
    WorkflowDefinitionView,
    WorkflowStatsView,
)


app_name = "orders_core"

# -------------------------------------------------
# Router (read-only order API)
# -------------------------------------------------
router = DefaultRouter()
router.register(r"orders", OrderViewSet, basename="order")


urlpatterns = [
    # ============================================================
    # Bulk transitions (before the router so it is not read as a pk)
    # ============================================================
    path("orders/bulk-transition/", OrderBulkTransitionView.as_view(), name="order-bulk-transition"),

    # ============================================================
    # Single-order workflow
    # ============================================================
    path("orders/<int:pk>/transition/", OrderTransitionView.as_view(), name="order-transition"),
    path("orders/<int:pk>/allowed/", OrderAllowedTransitionsView.as_view(), name="order-allowed"),
    path("orders/<int:pk>/history/", OrderHistoryView.as_view(), name="order-history"),
    path("orders/<int:pk>/metrics/", OrderMetricsView.as_view(), name="order-metrics"),

    # ============================================================
    # Core read API
    # ============================================================
    path("", include(router.urls)),

    # ============================================================
    # System
    # ============================================================
    path("health/", HealthCheckView.as_view(), name="health_check"),

    # ============================================================
    # Tenant workflow
    # ============================================================
    path("workflow/context/", WorkflowContextView.as_view(), name="workflow-context"),
    path("workflow/definition/", WorkflowDefinitionView.as_view(), name="workflow-definition"),
    path("workflow/stats/", WorkflowStatsView.as_view(), name="workflow-stats"),
    path("workflow/overdue/", OverdueOrdersView.as_view(), name="workflow-overdue"),
]
