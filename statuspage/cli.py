import asyncio

import typer
from rich.console import Console
from rich.table import Table

console = Console()
cli_app = typer.Typer(name="statuspage-admin", help="Status page administrative CLI")


def _run_async(coro):
    """Run async code from sync CLI context."""
    return asyncio.run(coro)


async def _ensure_db():
    from statuspage.core.database import init_db
    await init_db()


@cli_app.command("init-db")
def init_db():
    """Create or migrate the database schema."""
    _run_async(_ensure_db())
    console.print("[bold green]Database is up to date.[/bold green]")


@cli_app.command("issue-token")
def issue_token(
    user_id: str = typer.Option(..., "--user-id", help="Identity provider user id (sub claim)"),
    email: str = typer.Option(..., "--email", help="Email claim"),
    name: str = typer.Option("", "--name", help="Display name claim"),
    expiry: int = typer.Option(None, "--expiry", help="Lifetime in seconds"),
):
    """Sign a development identity token with the configured secret."""
    from statuspage.services.jwt_service import JWTService

    token = JWTService(expiry_seconds=expiry).create_token(user_id=user_id, email=email, name=name)
    console.print(f"\n  [bold yellow]{token}[/bold yellow]\n")


@cli_app.command("list-organizations")
def list_organizations():
    """List every organization with its service and member counts."""
    async def _list():
        await _ensure_db()
        from sqlalchemy import func, select

        import statuspage.core.database as db_module
        from statuspage.core.database import Organization, Service, TeamMember

        services = (
            select(func.count()).where(Service.organization_id == Organization.id).scalar_subquery()
        )
        members = (
            select(func.count()).where(TeamMember.organization_id == Organization.id).scalar_subquery()
        )
        async with db_module.async_session() as session:
            result = await session.execute(
                select(Organization, services, members).order_by(Organization.created_at)
            )
            return list(result.all())

    rows = _run_async(_list())

    if not rows:
        console.print("[dim]No organizations found.[/dim]")
        return

    table = Table(title="Organizations")
    table.add_column("Domain", style="cyan")
    table.add_column("Name")
    table.add_column("Services", justify="right")
    table.add_column("Members", justify="right", style="green")
    table.add_column("Created")

    for org, service_count, member_count in rows:
        created = org.created_at.strftime("%Y-%m-%d %H:%M") if org.created_at else "-"
        table.add_row(org.domain, org.name, str(service_count), str(member_count), created)

    console.print(table)


def main():
    cli_app()


if __name__ == "__main__":
    main()
