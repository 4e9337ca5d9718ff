# orders_core/serializers.py
from rest_framework import serializers

from .models import (
    Order,
    OrderIssue,
    OrderItem,
    OrderPiece,
    OrderTransition,
    TenantWorkflowSettings,
)


# ===============================================================
# Orders (read-only, status changes go through the transition API)
# ===============================================================
class OrderPieceSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderPiece
        fields = ["id", "piece_seq", "tag_code", "scan_state"]
        read_only_fields = fields


class OrderItemSerializer(serializers.ModelSerializer):
    pieces = OrderPieceSerializer(many=True, read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "name", "quantity", "item_status", "qa_status", "pieces"]
        read_only_fields = fields


class OrderIssueSerializer(serializers.ModelSerializer):
    is_open = serializers.BooleanField(read_only=True)

    class Meta:
        model = OrderIssue
        fields = ["id", "item", "issue_code", "priority", "issue_text", "solved_at", "is_open"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    is_terminal = serializers.BooleanField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_no",
            "status",
            "version",
            "is_terminal",
            "rack_location",
            "ready_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderDetailSerializer(OrderSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    issues = OrderIssueSerializer(many=True, read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["notes", "items", "issues"]
        read_only_fields = fields


# ===============================================================
# Audit
# ===============================================================
class OrderTransitionSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderTransition
        fields = [
            "id",
            "from_status",
            "to_status",
            "screen",
            "notes",
            "actor_id",
            "routing",
            "created_at",
        ]
        read_only_fields = fields


class TenantWorkflowSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = TenantWorkflowSettings
        fields = [
            "assembly_enabled",
            "qa_enabled",
            "packing_enabled",
            "track_individual_piece",
            "use_contract_routing",
            "contract_screens",
        ]
