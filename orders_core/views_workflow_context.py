# orders_core/views_workflow_context.py

from __future__ import annotations

from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import extend_schema

from orders_core.permissions import IsTenantMember
from orders_core.services.workflow import get_workflow_context, get_workflow_definition
from orders_core.workflows.metrics import workflow_stats
from orders_core.workflows.sla import find_overdue_orders


class WorkflowContextView(APIView):
    """
    GET /api/workflow/context/[?order=<id>]

    Stage toggles and item/piece metrics. Informational only.
    """
    permission_classes = [IsTenantMember]

    @extend_schema(tags=["Workflow"])
    def get(self, request):
        order_id = request.query_params.get("order")
        try:
            order_id = int(order_id) if order_id else None
        except ValueError:
            order_id = None

        ctx = get_workflow_context(request.tenant.id, order_id=order_id)
        return Response(ctx.as_dict())


class WorkflowDefinitionView(APIView):
    """
    GET /api/workflow/definition/

    The tenant's effective status graph.
    """
    permission_classes = [IsTenantMember]

    @extend_schema(tags=["Workflow"])
    def get(self, request):
        return Response(get_workflow_definition(request.tenant.id))


class WorkflowStatsView(APIView):
    permission_classes = [IsTenantMember]

    @extend_schema(tags=["Workflow"])
    def get(self, request):
        return Response(workflow_stats(request.tenant.id))


class OverdueOrdersView(APIView):
    permission_classes = [IsTenantMember]

    @extend_schema(tags=["Workflow"])
    def get(self, request):
        rows = find_overdue_orders(tenant_id=request.tenant.id)
        return Response({"count": len(rows), "results": rows})
