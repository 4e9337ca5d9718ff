# orders_core/filters.py
import django_filters as df

from .models import Order, OrderTransition
from .workflows.rules import ORDER_STATUSES, TERMINAL_STATUSES


class OrderFilter(df.FilterSet):
    status = df.MultipleChoiceFilter(choices=[(s, s) for s in ORDER_STATUSES])
    order_no = df.CharFilter(field_name="order_no", lookup_expr="icontains")
    rack_location = df.CharFilter(field_name="rack_location", lookup_expr="icontains")
    ready_by = df.IsoDateTimeFromToRangeFilter()
    open = df.BooleanFilter(method="filter_open", label="Non-terminal only")

    class Meta:
        model = Order
        fields = ["status", "order_no", "rack_location", "ready_by"]

    def filter_open(self, queryset, name, value):
        if value is None:
            return queryset
        if value:
            return queryset.exclude(status__in=TERMINAL_STATUSES)
        return queryset.filter(status__in=TERMINAL_STATUSES)


class OrderTransitionFilter(df.FilterSet):
    screen = df.CharFilter(field_name="screen")
    to_status = df.CharFilter(field_name="to_status")
    created_at = df.IsoDateTimeFromToRangeFilter()

    class Meta:
        model = OrderTransition
        fields = ["screen", "to_status", "routing", "created_at"]
