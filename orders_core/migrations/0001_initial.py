# orders_core/migrations/0001_initial.py

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Tenant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("code", models.SlugField(unique=True)),
                ("name", models.CharField(max_length=255)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("order_no", models.CharField(max_length=40)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("intake", "Intake"),
                            ("preparation", "Preparation"),
                            ("processing", "Processing"),
                            ("assembly", "Assembly"),
                            ("qa", "Quality Check"),
                            ("packing", "Packing"),
                            ("ready", "Ready"),
                            ("out_for_delivery", "Out for Delivery"),
                            ("delivered", "Delivered"),
                            ("cancelled", "Cancelled"),
                            ("closed", "Closed"),
                        ],
                        default="intake",
                        editable=False,
                        max_length=32,
                    ),
                ),
                ("version", models.PositiveIntegerField(default=0, editable=False)),
                ("rack_location", models.CharField(blank=True, max_length=50)),
                ("ready_by", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True)),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="orders_core.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["tenant", "status"], name="order_tenant_status_idx")],
                "unique_together": {("tenant", "order_no")},
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("quantity", models.PositiveIntegerField(default=1, help_text="Expected number of pieces.")),
                (
                    "item_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("assembled", "Assembled")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "qa_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("passed", "Passed"), ("failed", "Failed")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders_core.order",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="OrderIssue",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "issue_code",
                    models.CharField(
                        choices=[
                            ("damage", "Damage"),
                            ("stain", "Stain"),
                            ("complaint", "Complaint"),
                            ("other", "Other"),
                        ],
                        default="other",
                        max_length=20,
                    ),
                ),
                (
                    "priority",
                    models.CharField(
                        choices=[("low", "Low"), ("normal", "Normal"), ("high", "High"), ("urgent", "Urgent")],
                        default="normal",
                        max_length=20,
                    ),
                ),
                ("issue_text", models.TextField(blank=True)),
                ("solved_at", models.DateTimeField(blank=True, null=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="issues",
                        to="orders_core.order",
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="issues",
                        to="orders_core.orderitem",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="OrderPiece",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("piece_seq", models.PositiveIntegerField()),
                ("tag_code", models.CharField(blank=True, max_length=64)),
                (
                    "scan_state",
                    models.CharField(
                        choices=[("pending", "Pending"), ("scanned", "Scanned")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="pieces",
                        to="orders_core.orderitem",
                    ),
                ),
            ],
            options={
                "ordering": ["item_id", "piece_seq"],
                "unique_together": {("item", "piece_seq")},
            },
        ),
        migrations.CreateModel(
            name="OrderTransition",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("from_status", models.CharField(max_length=32)),
                ("to_status", models.CharField(max_length=32)),
                ("screen", models.CharField(max_length=50)),
                ("notes", models.TextField(blank=True)),
                ("actor_id", models.CharField(max_length=128)),
                (
                    "routing",
                    models.CharField(
                        choices=[("legacy", "Legacy"), ("contract", "Screen contract")],
                        default="legacy",
                        max_length=16,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="history",
                        to="orders_core.order",
                    ),
                ),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order_transitions",
                        to="orders_core.tenant",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["order", "created_at"], name="order_transition_order_idx"),
                    models.Index(fields=["tenant", "to_status"], name="order_transition_tenant_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TenantMember",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("role", models.CharField(blank=True, max_length=50)),
                (
                    "tenant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="members",
                        to="orders_core.tenant",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tenant_memberships",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "unique_together": {("user", "tenant")},
            },
        ),
        migrations.CreateModel(
            name="TenantWorkflowSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("assembly_enabled", models.BooleanField(default=True)),
                ("qa_enabled", models.BooleanField(default=True)),
                ("packing_enabled", models.BooleanField(default=True)),
                ("track_individual_piece", models.BooleanField(default=False)),
                (
                    "use_contract_routing",
                    models.BooleanField(
                        default=False,
                        help_text="Route transitions through screen contracts when a contract exists.",
                    ),
                ),
                (
                    "contract_screens",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Screens that have a contract. Empty uses the project default.",
                    ),
                ),
                (
                    "tenant",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="workflow_settings",
                        to="orders_core.tenant",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "tenant workflow settings",
            },
        ),
    ]
