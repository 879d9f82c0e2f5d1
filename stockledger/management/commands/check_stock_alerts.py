"""
Management command to re-evaluate stock alerts.

Usage:
    python manage.py check_stock_alerts
    python manage.py check_stock_alerts --dry-run
    python manage.py check_stock_alerts --sku TSHIRT-RED-M
"""

from django.core.management.base import BaseCommand

from stockledger.adapters import get_gateway
from stockledger.services.alerts import check_alerts


class Command(BaseCommand):
    """Check stock alerts command."""

    help = 'Reavalia alertas de estoque dos itens ativos'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Mostra os alertas que seriam gerados sem gravar'
        )
        parser.add_argument(
            '--sku',
            help='Verifica apenas este SKU'
        )

    def handle(self, *args, **options):
        triggered = check_alerts(
            get_gateway(),
            sku=options['sku'],
            dry_run=options['dry_run'],
        )

        for record, alerts in triggered:
            for alert in alerts:
                self.stdout.write(f'{record.sku}: {alert.type.value} ({alert.severity.value}) {alert.message}')

        total = sum(len(alerts) for _, alerts in triggered)
        if options['dry_run']:
            self.stdout.write(f'{total} alerta(s) seria(m) gerado(s)')
        else:
            self.stdout.write(
                self.style.SUCCESS(f'{total} alerta(s) gerado(s)')
            )
