# orders_core/models/core.py

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from orders_core.workflows.guards import OrderChildWriteGuardMixin, WorkflowWriteGuardMixin
from orders_core.workflows.rules import (
    INTAKE,
    ORDER_STATUSES,
    SCREENS,
    STATUS_LABELS,
    TERMINAL_STATUSES,
)


STATUS_CHOICES = [(s, STATUS_LABELS[s]) for s in ORDER_STATUSES]


# ============================================================
# Base
# ============================================================
class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# ============================================================
# Tenant
# ============================================================
class Tenant(TimeStampedModel):
    code = models.SlugField(max_length=50, unique=True)
    name = models.CharField(max_length=255)
    is_active = models.BooleanField(default=True)

    def __str__(self):
        return f"{self.code} - {self.name}"


class TenantMember(TimeStampedModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="tenant_memberships",
    )
    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.CASCADE,
        related_name="members",
    )
    role = models.CharField(max_length=50, blank=True)

    class Meta:
        unique_together = ("user", "tenant")

    def __str__(self):
        return f"{self.user} @ {self.tenant.code}"


class TenantWorkflowSettings(TimeStampedModel):
    """
    Per-tenant stage toggles and routing flags.

    Read through orders_core.workflows.context, never directly by the
    transition engine.
    """

    tenant = models.OneToOneField(
        Tenant,
        on_delete=models.CASCADE,
        related_name="workflow_settings",
    )
    assembly_enabled = models.BooleanField(default=True)
    qa_enabled = models.BooleanField(default=True)
    packing_enabled = models.BooleanField(default=True)
    track_individual_piece = models.BooleanField(default=False)

    use_contract_routing = models.BooleanField(
        default=False,
        help_text="Route transitions through screen contracts when a contract exists.",
    )
    contract_screens = models.JSONField(
        default=list,
        blank=True,
        help_text="Screens that have a contract. Empty uses the project default.",
    )

    class Meta:
        verbose_name_plural = "tenant workflow settings"

    def clean(self):
        screens = self.contract_screens or []
        if not isinstance(screens, list):
            raise ValidationError({"contract_screens": "Must be a list of screen codes."})
        unknown = sorted({str(s) for s in screens} - set(SCREENS))
        if unknown:
            raise ValidationError({"contract_screens": f"Unknown screens: {', '.join(unknown)}"})

    def stage_flags(self):
        return {
            "assembly_enabled": self.assembly_enabled,
            "qa_enabled": self.qa_enabled,
            "packing_enabled": self.packing_enabled,
            "track_individual_piece": self.track_individual_piece,
        }

    def __str__(self):
        return f"Workflow settings for {self.tenant.code}"


# ============================================================
# Order
# ============================================================
class Order(WorkflowWriteGuardMixin, TimeStampedModel):
    WORKFLOW_FIELDS = ("status", "version")

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    order_no = models.CharField(max_length=40)

    status = models.CharField(
        max_length=32,
        choices=STATUS_CHOICES,
        default=INTAKE,
        editable=False,
    )
    # optimistic concurrency token, bumped by every transition
    version = models.PositiveIntegerField(default=0, editable=False)

    rack_location = models.CharField(max_length=50, blank=True)
    ready_by = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        unique_together = ("tenant", "order_no")
        indexes = [
            models.Index(fields=["tenant", "status"], name="order_tenant_status_idx"),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def __str__(self):
        return f"{self.order_no} ({self.status})"


class OrderItem(OrderChildWriteGuardMixin, TimeStampedModel):
    ITEM_STATUS_CHOICES = (
        ("pending", "Pending"),
        ("assembled", "Assembled"),
    )
    QA_STATUS_CHOICES = (
        ("pending", "Pending"),
        ("passed", "Passed"),
        ("failed", "Failed"),
    )

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )
    name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(default=1, help_text="Expected number of pieces.")
    item_status = models.CharField(max_length=20, choices=ITEM_STATUS_CHOICES, default="pending")
    qa_status = models.CharField(max_length=20, choices=QA_STATUS_CHOICES, default="pending")

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.name} x{self.quantity}"


class OrderPiece(OrderChildWriteGuardMixin, TimeStampedModel):
    ORDER_PATH = "item.order"

    SCAN_STATE_CHOICES = (
        ("pending", "Pending"),
        ("scanned", "Scanned"),
    )

    item = models.ForeignKey(
        OrderItem,
        on_delete=models.CASCADE,
        related_name="pieces",
    )
    piece_seq = models.PositiveIntegerField()
    tag_code = models.CharField(max_length=64, blank=True)
    scan_state = models.CharField(max_length=20, choices=SCAN_STATE_CHOICES, default="pending")

    class Meta:
        ordering = ["item_id", "piece_seq"]
        unique_together = ("item", "piece_seq")

    def __str__(self):
        return f"{self.item_id}#{self.piece_seq}"


class OrderIssue(OrderChildWriteGuardMixin, TimeStampedModel):
    ISSUE_CODE_CHOICES = (
        ("damage", "Damage"),
        ("stain", "Stain"),
        ("complaint", "Complaint"),
        ("other", "Other"),
    )
    PRIORITY_CHOICES = (
        ("low", "Low"),
        ("normal", "Normal"),
        ("high", "High"),
        ("urgent", "Urgent"),
    )

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="issues",
    )
    item = models.ForeignKey(
        OrderItem,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="issues",
    )
    issue_code = models.CharField(max_length=20, choices=ISSUE_CODE_CHOICES, default="other")
    priority = models.CharField(max_length=20, choices=PRIORITY_CHOICES, default="normal")
    issue_text = models.TextField(blank=True)
    solved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["id"]

    def clean(self):
        if self.item_id and self.item.order_id != self.order_id:
            raise ValidationError("Issue item must belong to the same order.")

    @property
    def is_open(self) -> bool:
        return self.solved_at is None

    def __str__(self):
        return f"{self.issue_code} ({self.priority})"
