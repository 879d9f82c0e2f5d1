"""
Stock alerts — derive low stock / out of stock / overstock alerts.

Usage:
    from stockledger.services.alerts import evaluate

    # After any change to the record's counters or thresholds
    new_alerts = evaluate(record)

    # Periodically (celery beat, cron), over every active record
    from stockledger.services.alerts import check_alerts
    triggered = check_alerts(gateway)
"""

import logging

from django.utils import timezone

from stockledger.exceptions import StockError
from stockledger.models.enums import AlertSeverity, AlertType
from stockledger.records import AlertRecord, StockRecord

logger = logging.getLogger('stockledger')


def conditions(record: StockRecord) -> list[tuple[AlertType, AlertSeverity, str]]:
    """
    Alert conditions that currently hold, evaluated independently.

    - low_stock:    0 < current <= reorder_point
                    (critical at or below min_stock_level, else high)
    - out_of_stock: current == 0
    - overstock:    current > max_stock_level
    """
    current = record.current_stock
    fired = []

    if 0 < current <= record.reorder_point:
        severity = AlertSeverity.CRITICAL if current <= record.min_stock_level else AlertSeverity.HIGH
        fired.append((
            AlertType.LOW_STOCK,
            severity,
            f"Stock level ({current}) is at or below reorder point ({record.reorder_point})",
        ))

    if current == 0:
        fired.append((AlertType.OUT_OF_STOCK, AlertSeverity.CRITICAL, "Product is out of stock"))

    if current > record.max_stock_level:
        fired.append((
            AlertType.OVERSTOCK,
            AlertSeverity.MEDIUM,
            f"Stock level ({current}) exceeds maximum level ({record.max_stock_level})",
        ))

    return fired


def open_alerts(record: StockRecord, alert_type: AlertType | None = None) -> list[AlertRecord]:
    """Unresolved alerts, optionally of one type."""
    return [
        alert for alert in record.alerts
        if not alert.resolved and (alert_type is None or alert.type == alert_type)
    ]


def evaluate(record: StockRecord) -> list[AlertRecord]:
    """
    Merge currently firing conditions into record.alerts.

    A new alert is appended only if no unresolved alert of the same type
    exists; an existing open alert is left as is (severity and message
    are not refreshed). Alerts are never resolved here.

    Returns:
        Alerts appended by this call (empty when nothing new fired).
    """
    now = timezone.now()
    appended = []

    for alert_type, severity, message in conditions(record):
        if open_alerts(record, alert_type):
            continue
        alert = AlertRecord(
            type=alert_type,
            severity=severity,
            message=message,
            triggered_at=now,
        )
        record.alerts.append(alert)
        appended.append(alert)
        logger.warning(
            "stock.alert.triggered",
            extra={
                "sku": record.sku,
                "alert_type": alert_type.value,
                "severity": severity.value,
                "current": record.current_stock,
                "reorder_point": record.reorder_point,
                "max_stock_level": record.max_stock_level,
            },
        )

    return appended


def resolve(record: StockRecord, alert_type: AlertType | str) -> int:
    """
    Mark the open alert(s) of a type as resolved.

    Returns:
        Number of alerts resolved.

    Raises:
        StockError('ALERT_NOT_FOUND'): No open alert of that type.
    """
    try:
        alert_type = AlertType(alert_type)
    except ValueError:
        raise StockError('INVALID_FIELD', field='alert_type', value=alert_type) from None

    pending = open_alerts(record, alert_type)
    if not pending:
        raise StockError('ALERT_NOT_FOUND', sku=record.sku, alert_type=alert_type.value)

    now = timezone.now()
    for alert in pending:
        alert.resolved = True
        alert.resolved_at = now
    record.updated_at = now

    logger.info(
        "stock.alert.resolved",
        extra={"sku": record.sku, "alert_type": alert_type.value, "count": len(pending)},
    )
    return len(pending)


def check_alerts(gateway, sku: str | None = None, dry_run: bool = False) -> list[tuple[StockRecord, list[AlertRecord]]]:
    """
    Re-evaluate alerts for active records and store those that changed.

    Args:
        gateway: StockGateway to read and write through.
        sku: Optional SKU to check (None = all active records).
        dry_run: Evaluate without storing.

    Returns:
        List of (record, new_alerts) tuples for records that gained alerts.
    """
    if sku is not None:
        record = gateway.load(sku)
        records = [record] if record is not None and record.is_active else []
    else:
        records = gateway.list(status='active')

    triggered = []
    for record in records:
        new_alerts = evaluate(record)
        if not new_alerts:
            continue
        if not dry_run:
            record.updated_at = timezone.now()
            gateway.store(record)
        triggered.append((record, new_alerts))

    return triggered
