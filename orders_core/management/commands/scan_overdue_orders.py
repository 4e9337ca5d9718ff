from django.core.management.base import BaseCommand

from orders_core.workflows.sla import find_overdue_orders


class Command(BaseCommand):
    help = "List orders whose ready-by date has passed"

    def add_arguments(self, parser):
        parser.add_argument("--tenant", type=int, default=None, help="Restrict to one tenant id")

    def handle(self, *args, **options):
        rows = find_overdue_orders(tenant_id=options["tenant"])

        for row in rows:
            self.stdout.write(
                f"{row['order_no']}\t{row['status']}\t"
                f"ready_by={row['ready_by'].isoformat()}\t"
                f"{row['hours_overdue']}h overdue"
            )

        self.stdout.write(self.style.SUCCESS(f"{len(rows)} overdue order(s)"))
