from __future__ import annotations

import asyncio
import json
from dataclasses import asdict

import typer
import uvicorn

from partnerhub.config import get_settings
from partnerhub.infra.db.session import Database
from partnerhub.services.matching import MatchingService
from partnerhub.services.notifications import LoggingSender, NotificationOutbox
from partnerhub.services.shared_goals import SharedGoalService
from partnerhub.utils.logging_utils import configure_logging


app = typer.Typer(help="PartnerHub CLI")
notifications_app = typer.Typer(help="Notification outbox")
app.add_typer(notifications_app, name="notifications")


def _database() -> Database:
	settings = get_settings()
	configure_logging(settings.log_level)
	return Database.from_settings(settings)


@app.command()
def serve(
	host: str = typer.Option("127.0.0.1", help="Host interface"),
	port: int = typer.Option(8000, help="Port to bind"),
	reload: bool = typer.Option(False, help="Enable autoreload (dev only)"),
):
	"""Start the PartnerHub API server."""
	uvicorn.run(
		"partnerhub.main:create_app",
		host=host,
		port=port,
		reload=reload,
		factory=True,
	)


@app.command("init-db")
def init_db():
	"""Create all tables."""

	async def _run() -> None:
		database = _database()
		try:
			await database.create_all()
		finally:
			await database.dispose()

	asyncio.run(_run())
	typer.echo("Database initialized")


@app.command()
def match(
	user_id: str = typer.Argument(..., help="User to find a partner for"),
):
	"""Run automatic matching for one user."""

	async def _run():
		database = _database()
		try:
			async with database.session() as session:
				return await MatchingService(session, settings=get_settings()).find_and_create_partnership(user_id)
		finally:
			await database.dispose()

	result = asyncio.run(_run())
	if not result.success:
		typer.echo(f"{result.error_code.value if result.error_code else 'ERROR'}\t{result.message}", err=True)
		raise typer.Exit(code=1)
	typer.echo(f"{result.data.id}\t{result.data.user2_id}\t{result.message}")


@app.command()
def stats(
	partnership_id: str = typer.Argument(..., help="Partnership ID"),
):
	"""Print goal and task stats for a partnership."""

	async def _run():
		database = _database()
		try:
			async with database.session() as session:
				return await SharedGoalService(session).get_partnership_stats(partnership_id)
		finally:
			await database.dispose()

	result = asyncio.run(_run())
	if result is None:
		typer.echo(f"Partnership {partnership_id} not found", err=True)
		raise typer.Exit(code=1)
	typer.echo(json.dumps(asdict(result), indent=2))


@notifications_app.command("drain")
def notifications_drain(
	limit: int = typer.Option(0, help="Max notifications to deliver (0 = notification_batch_size)"),
):
	"""Deliver queued notifications through the logging sender."""
	batch = limit or get_settings().notification_batch_size

	async def _run() -> int:
		database = _database()
		try:
			async with database.session() as session:
				return await NotificationOutbox(session).drain(LoggingSender(), limit=batch)
		finally:
			await database.dispose()

	delivered = asyncio.run(_run())
	typer.echo(f"Delivered {delivered} notification(s)")


if __name__ == "__main__":
	app()
