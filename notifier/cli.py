"""
Command line entry point for the notification worker
"""
import asyncio
import json
import sys
from datetime import timedelta

import click

from .config import config
from .database.manager import DatabaseManager
from .models import NOTIFICATION_TYPES
from .utils.logger import setup_logging
from .utils.timeutil import parse_timestamp, utcnow


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL")
@click.option("--log-file/--no-log-file", default=True, help="Also write a rotating log file")
def cli(log_level, log_file):
    """Study Buddy notifier - delivers scheduled notifications and enqueues session reminders"""
    setup_logging(level=log_level, log_to_file=log_file)


@cli.command()
@click.option("--status-port", type=int, default=None, help="Serve /health and /api/worker/status on this port")
@click.option("--once", is_flag=True, help="Run one delivery pass and one scheduling pass, then exit")
def run(status_port, once):
    """Start the notification worker (stops on SIGINT/SIGTERM)"""
    from .worker.service import build_worker

    try:
        config.validate()
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(2)

    db_manager = DatabaseManager()

    # The worker owns an AsyncIOScheduler, so build it inside the running loop
    if once:
        async def _once():
            worker = build_worker(db_manager, config)
            await worker.ensure_pool()
            delivery = await worker.run_delivery()
            scheduling = await worker.run_scheduling()
            await worker.shutdown()
            return delivery, scheduling

        delivery, scheduling = asyncio.run(_once())
        click.echo(f"Delivered: {len(delivery.delivered_ids)}  Failed: {len(delivery.failed_ids)}")
        click.echo(f"Reminders enqueued: {scheduling.enqueued}")
        sys.exit(1 if delivery.aborted else 0)

    port = status_port if status_port is not None else config.STATUS_PORT

    async def _serve():
        worker = build_worker(db_manager, config)
        server = None
        if port:
            from .web import StatusServer, create_app

            server = StatusServer(create_app(db_manager, worker), config.STATUS_HOST, port)
            server.start()
        try:
            return await worker.run_forever()
        finally:
            if server is not None:
                server.stop()

    sys.exit(asyncio.run(_serve()))


@cli.command("init-db")
def init_db():
    """Create or migrate the notification store"""
    db_manager = DatabaseManager()
    db_manager.init()
    db_manager.close()
    click.echo(f"Database ready: {db_manager.db_path}")


@cli.command()
@click.option("--user", "user_id", required=True, help="Recipient user id")
@click.option("--type", "notification_type", type=click.Choice(NOTIFICATION_TYPES), default="system")
@click.option("--title", required=True)
@click.option("--message", required=True)
@click.option("--metadata", default=None, help="JSON object attached to the notification")
@click.option("--at", "scheduled_for", default=None, help="Delivery time (ISO-8601, UTC if naive)")
@click.option("--in-minutes", type=int, default=None, help="Deliver this many minutes from now")
def enqueue(user_id, notification_type, title, message, metadata, scheduled_for, in_minutes):
    """Insert a notification for the worker to deliver"""
    try:
        meta = json.loads(metadata) if metadata else None
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--metadata")

    if in_minutes is not None:
        when = utcnow() + timedelta(minutes=in_minutes)
    elif scheduled_for:
        try:
            when = parse_timestamp(scheduled_for)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--at")
    else:
        when = utcnow()

    db_manager = DatabaseManager()
    db_manager.init()
    try:
        notification = db_manager.notifications.create(
            user_id, notification_type, title, message, metadata=meta, scheduled_for=when
        )
    finally:
        db_manager.close()
    click.echo(f"Queued notification {notification.notification_id} for {when.isoformat()}")


@cli.command()
def status():
    """Show pending notification count"""
    db_manager = DatabaseManager()
    db_manager.init()
    try:
        pending = db_manager.notifications.count_pending()
    finally:
        db_manager.close()

    click.echo("\n" + "=" * 40)
    click.echo("Notification Store Status")
    click.echo("=" * 40)
    click.echo(f"Database: {db_manager.db_path}")
    click.echo(f"Pending notifications: {pending}")
    click.echo(f"Delivery interval: {config.DELIVERY_INTERVAL}s")
    click.echo(f"Scheduling interval: {config.SCHEDULING_INTERVAL}s")
    click.echo(f"Delivery channel: {config.DELIVERY_CHANNEL}")


if __name__ == "__main__":
    cli()
