"""Training management CLI tool (tmsctl)."""

import typer

app = typer.Typer(name="tmsctl", help="Training management platform CLI")
db_app = typer.Typer(help="Database management commands")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init():
    """Create all tables that don't exist yet."""
    from tms_backend.db.base import Base
    from tms_backend.db.session import engine
    import tms_backend.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    typer.echo("Tables created")


@db_app.command("seed")
def db_seed():
    """Sync permissions from routes, then seed roles, permission groups, administrator and departments."""
    from tms_backend.db.session import SessionLocal
    from tms_backend.db.seeds.seed_admin import seed_admin
    from tms_backend.db.seeds.seed_departments import seed_departments
    from tms_backend.db.seeds.seed_permission_groups import seed_permission_groups
    from tms_backend.db.seeds.seed_permissions import sync_permissions
    from tms_backend.db.seeds.seed_roles import seed_roles
    from tms_backend.main import app as api_app

    db = SessionLocal()
    try:
        added = sync_permissions(db, api_app.routes)
        seed_roles(db)
        seed_permission_groups(db)
        seed_admin(db)
        seed_departments(db)
    finally:
        db.close()
    typer.echo(f"All seeds applied ({added} new permission(s))")


@db_app.command("reset")
def db_reset():
    """Drop and recreate every table (DANGER)."""
    confirm = typer.confirm("This will DROP every table. Continue?")
    if not confirm:
        raise typer.Abort()
    from tms_backend.db.base import Base
    from tms_backend.db.session import engine
    import tms_backend.models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    typer.echo("Database reset")


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", help="Host"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(False, help="Auto-reload"),
):
    """Start the FastAPI server."""
    import uvicorn
    uvicorn.run("tms_backend.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
