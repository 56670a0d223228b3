"""
Administrative command line for the last-heard service.

    lastheard serve
    lastheard refresh-talkgroups
    lastheard prune
    lastheard create-user EA7KLK --email ea7klk@example.com --password ...
    lastheard create-api-key "My script" --days 365
"""
import asyncio
import time
from typing import Optional

import click
from sqlalchemy import select

from lastheard.core import get_settings, init_db, close_db
from lastheard.core.auth import generate_token, hash_password
from lastheard.core.database import AsyncSessionLocal
from lastheard.models import ApiKey, User


def _run(coro):
    async def wrapper():
        await init_db()
        try:
            return await coro
        finally:
            await close_db()
    return asyncio.run(wrapper())


@click.group()
def main():
    """Brandmeister last-heard service administration."""


@main.command()
@click.option("--host", default=None, help="Bind address")
@click.option("--port", default=None, type=int, help="Bind port")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "lastheard.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("refresh-talkgroups")
def refresh_talkgroups():
    """Download the talkgroup directory now."""
    from lastheard.services.talkgroups import refresh_directory

    result = _run(refresh_directory(AsyncSessionLocal))
    if not result["success"]:
        raise click.ClickException(f"Refresh failed: {result['error']}")
    click.echo(f"Loaded {result['count']} talkgroups from {result['source']}")


@main.command()
def prune():
    """Run the retention jobs once."""
    from lastheard.services.maintenance import MaintenanceScheduler

    results = _run(MaintenanceScheduler(AsyncSessionLocal).run_retention())
    for job, count in results.items():
        click.echo(f"{job}: {'failed' if count is None else count}")


@main.command("create-user")
@click.argument("callsign")
@click.option("--email", required=True, help="Contact e-mail")
@click.option("--name", default=None, help="Operator name")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--admin", is_flag=True, help="Grant admin rights")
def create_user(callsign: str, email: str, name: Optional[str], password: str, admin: bool):
    """Create a user account."""
    async def create():
        async with AsyncSessionLocal() as db:
            existing = await db.execute(select(User).where(User.callsign == callsign.upper()))
            if existing.scalar_one_or_none():
                return False
            db.add(User(
                callsign=callsign.upper(),
                email=email,
                name=name,
                password_hash=hash_password(password),
                is_admin=admin,
            ))
            await db.commit()
            return True

    if not _run(create()):
        raise click.ClickException(f"User {callsign.upper()} already exists")
    click.echo(f"User {callsign.upper()} created")


@main.command("create-api-key")
@click.argument("name")
@click.option("--callsign", default=None, help="Owner callsign")
@click.option("--days", default=None, type=int, help="Expire after this many days")
def create_api_key(name: str, callsign: Optional[str], days: Optional[int]):
    """Issue a new API key and print it."""
    async def create():
        async with AsyncSessionLocal() as db:
            user_id = None
            if callsign:
                result = await db.execute(select(User).where(User.callsign == callsign.upper()))
                user = result.scalar_one_or_none()
                if user is None:
                    raise click.ClickException(f"No user {callsign.upper()}")
                user_id = user.id
            key = ApiKey(
                user_id=user_id,
                name=name,
                api_key=generate_token(),
                expires_at=int(time.time()) + days * 86400 if days else None,
            )
            db.add(key)
            await db.commit()
            return key.api_key

    click.echo(_run(create()))


if __name__ == "__main__":
    main()
