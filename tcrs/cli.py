"""CLI entry-point for the credit-monitoring alert client.

Usage examples
--------------
# Sign in once; tokens are kept in TCRS_TOKEN_STORE_PATH:
tcrs-alerts login --email me@example.com

# First page of unread alerts, narrowed to critical ones on that page:
tcrs-alerts alerts --unread --severity CRITICAL

# Acknowledge an alert with notes:
tcrs-alerts ack 42 --notes "reviewed"

# Keep badge counts on screen, polling every 5 minutes:
tcrs-alerts watch
"""

import argparse
import asyncio
import getpass
import sys
from typing import List, Optional

from tcrs.core.config import settings
from tcrs.core.errors import TcrsError, display_message
from tcrs.core.logging import configure_logging
from tcrs.models.alert import Alert, AlertSeverity, AlertStatistics
from tcrs.models.labels import (
    ALERT_SEVERITY_LABELS,
    MONITORING_TYPE_LABELS,
    NOTIFICATION_FREQUENCY_LABELS,
    alert_type_label,
    format_timestamp,
    relative_time,
)
from tcrs.models.monitoring import CreditMonitoringRequest, MonitoringType, NotificationFrequency
from tcrs.services.alert_service import AlertService
from tcrs.services.api_client import ApiClient
from tcrs.services.auth_service import AuthService
from tcrs.services.badge import AlertBadge
from tcrs.services.monitoring_service import MonitoringService
from tcrs.services.statistics_store import get_statistics_store
from tcrs.views.alert_detail import AlertDetailView
from tcrs.views.alert_list import AlertListView
from tcrs.views.dashboard import DashboardShell


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tcrs-alerts",
        description="Trade Credit Reference System: credit-monitoring alerts",
    )
    p.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level. Default: TCRS_LOG_LEVEL ({settings.LOG_LEVEL})",
    )
    sub = p.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Sign in and store tokens")
    login.add_argument("--email", required=True)
    login.add_argument("--password", default=None, help="Prompted for if omitted")

    sub.add_parser("logout", help="Revoke and forget stored tokens")

    alerts = sub.add_parser("alerts", help="List one page of alerts")
    alerts.add_argument("--page", type=int, default=0, help="Zero-based page index")
    alerts.add_argument("--size", type=int, default=settings.DEFAULT_PAGE_SIZE)
    alerts.add_argument("--unread", action="store_true", help="Only unread alerts")
    alerts.add_argument(
        "--severity",
        choices=[s.value for s in AlertSeverity],
        default=None,
        help="Narrow the fetched page by severity",
    )
    alerts.add_argument("--type", dest="alert_type", default=None, help="Narrow the fetched page by alert type")
    alerts.add_argument("--search", default="", help="Narrow the fetched page by text")

    show = sub.add_parser("show", help="Show one alert (marks it read)")
    show.add_argument("alert_id", type=int)

    read = sub.add_parser("read", help="Mark an alert read")
    read.add_argument("alert_id", type=int)

    ack = sub.add_parser("ack", help="Acknowledge an alert")
    ack.add_argument("alert_id", type=int)
    ack.add_argument("--notes", default=None)

    sub.add_parser("stats", help="Show alert statistics")

    watch = sub.add_parser("watch", help="Keep badge counts on screen")
    watch.add_argument(
        "--interval",
        type=int,
        default=settings.STATISTICS_POLL_INTERVAL,
        help=f"Poll interval in seconds. Default: {settings.STATISTICS_POLL_INTERVAL}",
    )

    monitoring = sub.add_parser("monitoring", help="Manage monitoring setups")
    msub = monitoring.add_subparsers(dest="monitoring_command", required=True)

    mlist = msub.add_parser("list", help="List your monitoring setups")
    mlist.add_argument("--page", type=int, default=0)
    mlist.add_argument("--size", type=int, default=settings.MONITORING_PAGE_SIZE)

    msetup = msub.add_parser("setup", help="Create a monitoring setup")
    msetup.add_argument("--business-id", type=int, required=True)
    msetup.add_argument("--name", required=True)
    msetup.add_argument(
        "--type",
        dest="monitoring_type",
        choices=[t.value for t in MonitoringType],
        default=MonitoringType.COMPREHENSIVE.value,
    )
    msetup.add_argument(
        "--frequency",
        choices=[f.value for f in NotificationFrequency],
        default=NotificationFrequency.IMMEDIATE.value,
    )
    msetup.add_argument("--score-min", type=int, default=300)
    msetup.add_argument("--score-max", type=int, default=850)
    msetup.add_argument("--notes", default=None)

    mdeactivate = msub.add_parser("deactivate", help="Deactivate a monitoring setup")
    mdeactivate.add_argument("monitoring_id", type=int)

    return p


def format_alert_line(alert: Alert) -> str:
    flags = ""
    flags += " " if alert.is_read else "*"
    flags += "A" if alert.is_acknowledged else " "
    severity = ALERT_SEVERITY_LABELS[alert.severity_level]
    return (
        f"{flags} #{alert.id:<6} {severity:<8} {alert_type_label(alert.alert_type):<26} "
        f"{alert.title} ({alert.business_name}, {relative_time(alert.created_at)})"
    )


def format_alert_detail(alert: Alert) -> List[str]:
    lines = [
        f"{alert.alert_number}: {alert.title}",
        f"  Business:  {alert.business_name}",
        f"  Type:      {alert_type_label(alert.alert_type)}",
        f"  Severity:  {ALERT_SEVERITY_LABELS[alert.severity_level]}",
        f"  Status:    {'Read' if alert.is_read else 'Unread'}, "
        f"{'Acknowledged' if alert.is_acknowledged else 'Pending'}",
        f"  Created:   {format_timestamp(alert.created_at)}",
    ]
    if alert.description:
        lines.append(f"  {alert.description}")
    if alert.previous_value or alert.current_value:
        lines.append(f"  Change:    {alert.previous_value or '-'} -> {alert.current_value or '-'}")
    if alert.threshold_value:
        lines.append(f"  Threshold: {alert.threshold_value}")
    if alert.is_acknowledged:
        lines.append(f"  Acknowledged by {alert.acknowledged_by or 'unknown'}: {alert.acknowledgment_notes or ''}")
    if alert.expires_at:
        lines.append(f"  Expires:   {format_timestamp(alert.expires_at)}")
    if alert.related_link:
        lines.append(f"  Related:   {alert.related_link}")
    return lines


def format_statistics(statistics: AlertStatistics) -> List[str]:
    badge = AlertBadge.from_statistics(statistics)
    lines = [
        f"Unread:          {statistics.unread_alerts} (badge '{badge.label}')",
        f"Total:           {statistics.total_alerts}",
        f"Unacknowledged:  {statistics.unacknowledged_alerts}",
        f"High priority:   {statistics.high_priority_alerts} ({statistics.critical_alerts} critical)",
        f"Last 7 days:     {statistics.recent_alerts}",
        f"Active monitors: {statistics.active_monitoring}",
    ]
    for label, count in sorted(statistics.alert_type_distribution.items()):
        lines.append(f"  {label}: {count}")
    return lines


async def _list_alerts(alert_service: AlertService, args) -> int:
    view = AlertListView(alert_service, page_size=args.size, unread_only=args.unread)
    await view.load(args.page)
    if view.banner.visible:
        print(view.banner.message, file=sys.stderr)
        return 1

    view.set_filters(
        severity=AlertSeverity(args.severity) if args.severity else None,
        alert_type=args.alert_type,
        search=args.search,
    )
    for alert in view.visible_alerts:
        print(format_alert_line(alert))
    if view.empty_message:
        print(view.empty_message)
    print(f"Page {view.current_page + 1} of {max(view.total_pages, 1)} ({view.total_elements} total)")
    return 0


async def _show_alert(alert_service: AlertService, args) -> int:
    view = AlertDetailView(alert_service)
    await view.open(args.alert_id)
    if view.alert is None:
        print(view.banner.message, file=sys.stderr)
        return 1
    print("\n".join(format_alert_detail(view.alert)))
    return 0


async def _watch(alert_service: AlertService, monitoring_service: MonitoringService, args) -> int:
    store = get_statistics_store(alert_service, poll_interval=args.interval)
    shell = DashboardShell(alert_service, monitoring_service, store)

    def on_snapshot(statistics: AlertStatistics) -> None:
        badge = AlertBadge.from_statistics(statistics)
        marker = " !" if badge.high_priority else ""
        print(f"[alerts] unread {badge.label or '0'}{marker}", flush=True)

    subscription = await store.subscribe(on_snapshot)
    try:
        await shell.mount()
        while True:
            await asyncio.sleep(3600)
    finally:
        shell.dispose()
        subscription.unsubscribe()


async def _monitoring(monitoring_service: MonitoringService, args) -> int:
    if args.monitoring_command == "list":
        page = await monitoring_service.list_mine(args.page, args.size)
        for setup in page.items:
            state = "active" if setup.is_active else "inactive"
            print(
                f"#{setup.id:<6} {setup.monitoring_name} [{MONITORING_TYPE_LABELS[setup.monitoring_type]}, "
                f"{NOTIFICATION_FREQUENCY_LABELS[setup.notification_frequency]}, {state}] "
                f"{setup.total_alerts_sent} alerts sent"
            )
        print(f"{page.total_elements} total")
        return 0

    if args.monitoring_command == "setup":
        request = CreditMonitoringRequest(
            business_id=args.business_id,
            monitoring_name=args.name,
            monitoring_type=MonitoringType(args.monitoring_type),
            notification_frequency=NotificationFrequency(args.frequency),
            credit_score_threshold_min=args.score_min,
            credit_score_threshold_max=args.score_max,
            notes=args.notes,
        )
        created = await monitoring_service.setup(request)
        print(f"Created monitoring #{created.id} for {created.business_name or created.business_id}")
        return 0

    message = await monitoring_service.deactivate(args.monitoring_id)
    print(message)
    return 0


async def run(args, client: Optional[ApiClient] = None) -> int:
    """Execute one parsed command. Returns the process exit status."""
    owns_client = client is None
    client = client or ApiClient()
    alert_service = AlertService(client)
    monitoring_service = MonitoringService(client)

    try:
        if args.command == "login":
            password = args.password or getpass.getpass("Password: ")
            await AuthService(client).login(args.email, password)
            print("Logged in")
            return 0
        if args.command == "logout":
            await AuthService(client).logout()
            print("Logged out")
            return 0
        if args.command == "alerts":
            return await _list_alerts(alert_service, args)
        if args.command == "show":
            return await _show_alert(alert_service, args)
        if args.command == "read":
            alert = await alert_service.mark_read(args.alert_id)
            print(format_alert_line(alert))
            return 0
        if args.command == "ack":
            alert = await alert_service.acknowledge(args.alert_id, args.notes)
            print(format_alert_line(alert))
            return 0
        if args.command == "stats":
            statistics = await alert_service.fetch_statistics()
            print("\n".join(format_statistics(statistics)))
            return 0
        if args.command == "watch":
            return await _watch(alert_service, monitoring_service, args)
        if args.command == "monitoring":
            return await _monitoring(monitoring_service, args)
        raise ValueError(f"Unknown command: {args.command}")
    except TcrsError as e:
        print(display_message(e), file=sys.stderr)
        return 1
    finally:
        if owns_client:
            await client.aclose()


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level or settings.LOG_LEVEL, json_output=settings.LOG_JSON)
    try:
        code = asyncio.run(run(args))
    except KeyboardInterrupt:
        code = 0
    sys.exit(code)


if __name__ == "__main__":
    main()
