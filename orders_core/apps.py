# orders_core/apps.py

from django.apps import AppConfig


class OrdersCoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "orders_core"
    verbose_name = "Order lifecycle"

    def ready(self):
        from . import signals  # noqa

        # Register Django system checks only
        from .checks import workflow_graph  # noqa
