"""
Study Abroad CLI.

Command-line interface for local development: create tables, issue dev
tokens, and poke the running server over HTTP and WebSocket.

Usage:
    python cli.py init-db
    python cli.py token <user-id> --role student
    python cli.py ws-test --token <jwt>
"""

import asyncio
import json
import sys
import time

import httpx
import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="studyabroad",
    help="Study Abroad platform CLI",
    add_completion=False,
)
console = Console()


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def init_db():
    """Create all database tables."""
    from shared.infrastructure.db import engine
    from rest_api.models import Base

    console.print(f"[blue]Creating tables on: {engine.url.render_as_string(hide_password=True)}[/blue]")
    Base.metadata.create_all(bind=engine)
    console.print(f"[green]✓ {len(Base.metadata.tables)} tables created/verified[/green]")


# =============================================================================
# Auth Commands
# =============================================================================

@app.command()
def token(
    user_id: str = typer.Argument(..., help="User ID to put in the sub claim"),
    role: str = typer.Option("student", help="student, counselor or admin"),
    ttl: int = typer.Option(3600, help="Lifetime in seconds"),
):
    """Issue a development access token."""
    from shared.config.constants import Roles
    from shared.config.settings import settings
    from shared.security.auth import sign_user_token

    if role not in Roles.ALL:
        console.print(f"[red]Unknown role: {role}[/red]")
        raise typer.Exit(1)
    if settings.environment == "production":
        console.print("[red]Refusing to issue dev tokens in production[/red]")
        raise typer.Exit(1)

    # Plain echo so the token is never wrapped
    typer.echo(sign_user_token(user_id, role, ttl_seconds=ttl))


# =============================================================================
# WebSocket Commands
# =============================================================================

@app.command()
def ws_test(
    url: str = typer.Option("ws://localhost:8000/ws", help="WebSocket URL"),
    auth_token: str = typer.Option(None, "--token", help="Access token to authenticate with"),
):
    """Connect to the gateway, optionally authenticate, and ping."""
    import websockets

    async def _test():
        console.print(f"[blue]Testing WebSocket: {url}[/blue]")
        try:
            async with websockets.connect(url, close_timeout=5) as ws:
                greeting = await asyncio.wait_for(ws.recv(), timeout=5)
                console.print(f"[green]✓ Connected: {greeting}[/green]")

                if auth_token:
                    await ws.send(json.dumps({"type": "authenticate", "token": auth_token}))
                    reply = await asyncio.wait_for(ws.recv(), timeout=5)
                    console.print(f"[green]Auth reply: {reply}[/green]")

                await ws.send(json.dumps({"type": "ping"}))
                response = await asyncio.wait_for(ws.recv(), timeout=5)
                console.print(f"[green]✓ Ping reply: {response}[/green]")
        except asyncio.TimeoutError:
            console.print("[red]✗ Connection timed out[/red]")
            raise typer.Exit(1)
        except (OSError, websockets.WebSocketException) as e:
            console.print(f"[red]✗ Connection failed: {e}[/red]")
            raise typer.Exit(1)

    asyncio.run(_test())


# =============================================================================
# Health Commands
# =============================================================================

@app.command()
def health(
    base_url: str = typer.Option("http://localhost:8000", help="API base URL"),
):
    """Check system health."""
    endpoints = [
        ("REST API", f"{base_url}/api/health/detailed"),
        ("WS Gateway", f"{base_url}/ws/health"),
    ]

    table = Table(title="Service Health")
    table.add_column("Service", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Response Time", style="yellow")

    with httpx.Client(timeout=5.0) as client:
        for name, url in endpoints:
            try:
                start = time.time()
                response = client.get(url)
                elapsed = (time.time() - start) * 1000
                if response.status_code == 200:
                    table.add_row(name, "✓ Healthy", f"{elapsed:.0f}ms")
                else:
                    table.add_row(name, f"✗ Status {response.status_code}", f"{elapsed:.0f}ms")
            except httpx.HTTPError as e:
                table.add_row(name, f"✗ {type(e).__name__}", "-")

    console.print(table)


@app.command()
def version():
    """Show version information."""
    table = Table(title="Study Abroad Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", "0.1.0")
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
