from orders_core.models.core import (  # noqa: F401
    STATUS_CHOICES,
    TimeStampedModel,
    Tenant,
    TenantMember,
    TenantWorkflowSettings,
    Order,
    OrderItem,
    OrderPiece,
    OrderIssue,
)
from orders_core.models.order_transition import OrderTransition  # noqa: F401
