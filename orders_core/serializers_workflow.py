# orders_core/serializers_workflow.py
from __future__ import annotations

from typing import Any, Dict

from rest_framework import serializers

from orders_core.workflows.rules import ORDER_STATUSES, SCREENS, normalize_screen, normalize_status
from orders_core.workflows.strategies import ROUTING_CHOICES


class TransitionRequestSerializer(serializers.Serializer):
    screen = serializers.CharField(max_length=50)
    # blank: the screen's single forward step
    to_status = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")
    routing_hint = serializers.ChoiceField(choices=ROUTING_CHOICES, required=False, allow_null=True)

    def validate_screen(self, value: str) -> str:
        screen = normalize_screen(value)
        if screen not in SCREENS:
            raise serializers.ValidationError(f"Unknown screen. Use one of: {', '.join(SCREENS)}")
        return screen

    def validate_to_status(self, value: str) -> str:
        status = normalize_status(value)
        if status and status not in ORDER_STATUSES:
            raise serializers.ValidationError("Unknown order status.")
        return status

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        attrs["notes"] = (attrs.get("notes") or "").strip()
        return attrs


class BulkTransitionRequestSerializer(TransitionRequestSerializer):
    order_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=False,
        max_length=500,
    )


class TransitionResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    new_status = serializers.CharField(allow_null=True)
    blockers = serializers.ListField(child=serializers.CharField())
    error = serializers.CharField(allow_null=True)
    message = serializers.CharField(allow_null=True)
