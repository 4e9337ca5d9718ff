from django.contrib import admin

from .models import (
    Order,
    OrderIssue,
    OrderItem,
    OrderPiece,
    OrderTransition,
    Tenant,
    TenantMember,
    TenantWorkflowSettings,
)


# =============================================================
# Order transitions (READ-ONLY AUDIT LOG)
# =============================================================

@admin.register(OrderTransition)
class OrderTransitionAdmin(admin.ModelAdmin):
    list_display = (
        "order",
        "from_status",
        "to_status",
        "screen",
        "routing",
        "actor_id",
        "tenant",
        "created_at",
    )
    list_filter = (
        "from_status",
        "to_status",
        "screen",
        "routing",
        "tenant",
    )
    search_fields = (
        "order__order_no",
        "actor_id",
    )
    ordering = ("-created_at",)

    readonly_fields = [f.name for f in OrderTransition._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =============================================================
# Tenant
# =============================================================

class TenantWorkflowSettingsInline(admin.StackedInline):
    model = TenantWorkflowSettings
    can_delete = False
    extra = 0


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "is_active")
    search_fields = ("code", "name")
    list_filter = ("is_active",)
    inlines = [TenantWorkflowSettingsInline]


@admin.register(TenantMember)
class TenantMemberAdmin(admin.ModelAdmin):
    list_display = ("user", "tenant", "role")
    list_filter = ("tenant", "role")
    search_fields = ("user__username", "tenant__code")


# =============================================================
# Orders
# =============================================================

class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0


class OrderIssueInline(admin.TabularInline):
    model = OrderIssue
    extra = 0
    fk_name = "order"


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_no", "tenant", "status", "version", "rack_location", "ready_by", "created_at")
    list_filter = ("status", "tenant")
    search_fields = ("order_no", "rack_location")
    readonly_fields = ("status", "version", "created_at", "updated_at")
    inlines = [OrderItemInline, OrderIssueInline]


@admin.register(OrderPiece)
class OrderPieceAdmin(admin.ModelAdmin):
    list_display = ("item", "piece_seq", "tag_code", "scan_state")
    list_filter = ("scan_state",)
    search_fields = ("tag_code",)
