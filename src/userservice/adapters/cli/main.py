"""Main CLI application entry point."""

import sys
from typing import Optional
import typer
from rich.console import Console

from .commands import (
    config_command,
    health_command,
    serve_command,
    users_create_command,
    users_delete_command,
    users_get_by_email_command,
    users_get_command,
    users_list_command,
    users_update_command,
)

# Create Typer app
app = typer.Typer(
    name="userservice",
    help="userservice - User CRUD service",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Rich console for output
console = Console()

CONFIG_OPTION = typer.Option(
    None,
    "--config", "-c",
    help="Path to configuration file",
    envvar="USERSERVICE_CONFIG",
)
VERBOSE_OPTION = typer.Option(
    False,
    "--verbose", "-v",
    help="Enable verbose output with technical details",
)
JSON_OPTION = typer.Option(
    False,
    "--json",
    help="Print users as JSON",
)


@app.command(name="serve")
def serve(
    host: Optional[str] = typer.Option(
        None,
        "--host",
        help="Interface to bind (defaults to http.host)",
    ),
    port: Optional[int] = typer.Option(
        None,
        "--port", "-p",
        help="Port to listen on (defaults to http.port)",
    ),
    config: Optional[str] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """
    Run the HTTP API.

    Serves the users resource and the /health probes with uvicorn.
    """
    serve_command(
        host=host,
        port=port,
        config_path=config,
        verbose=verbose,
        console=console,
    )


@app.command(name="health")
def health(
    config: Optional[str] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """
    Check readiness.

    Runs every readiness check once; exits with status 1 when any fails.
    """
    health_command(config_path=config, verbose=verbose, console=console)


@app.command(name="config")
def config_cmd(
    init: bool = typer.Option(
        False,
        "--init",
        help="Create default configuration file",
    ),
    path: Optional[str] = typer.Option(
        None,
        "--path",
        help="Configuration file path",
    ),
    show: bool = typer.Option(
        False,
        "--show",
        help="Show current configuration",
    ),
):
    """
    Manage configuration.

    Create, view, or locate configuration files.
    """
    config_command(
        init=init,
        path=path,
        show=show,
        console=console,
    )


# Create users subcommand group
users_app = typer.Typer(
    name="users",
    help="Manage users",
    no_args_is_help=True,
)


@users_app.command(name="create")
def users_create(
    email: str = typer.Argument(..., help="Email address"),
    name: str = typer.Argument(..., help="Display name"),
    as_json: bool = JSON_OPTION,
    config: Optional[str] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Create a user."""
    users_create_command(
        email=email,
        name=name,
        as_json=as_json,
        config_path=config,
        verbose=verbose,
        console=console,
    )


@users_app.command(name="get")
def users_get(
    user_id: str = typer.Argument(..., help="User ID"),
    as_json: bool = JSON_OPTION,
    config: Optional[str] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Show a user by id."""
    users_get_command(
        user_id=user_id,
        as_json=as_json,
        config_path=config,
        verbose=verbose,
        console=console,
    )


@users_app.command(name="get-by-email")
def users_get_by_email(
    email: str = typer.Argument(..., help="Email address"),
    as_json: bool = JSON_OPTION,
    config: Optional[str] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Show a user by email."""
    users_get_by_email_command(
        email=email,
        as_json=as_json,
        config_path=config,
        verbose=verbose,
        console=console,
    )


@users_app.command(name="list")
def users_list(
    limit: int = typer.Option(10, "--limit", "-n", min=1, help="Page size"),
    offset: int = typer.Option(0, "--offset", min=0, help="Users to skip"),
    as_json: bool = JSON_OPTION,
    config: Optional[str] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """
    List users, newest first.
    """
    users_list_command(
        limit=limit,
        offset=offset,
        as_json=as_json,
        config_path=config,
        verbose=verbose,
        console=console,
    )


@users_app.command(name="update")
def users_update(
    user_id: str = typer.Argument(..., help="User ID"),
    name: str = typer.Argument(..., help="New display name"),
    as_json: bool = JSON_OPTION,
    config: Optional[str] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Rename a user."""
    users_update_command(
        user_id=user_id,
        name=name,
        as_json=as_json,
        config_path=config,
        verbose=verbose,
        console=console,
    )


@users_app.command(name="delete")
def users_delete(
    user_id: str = typer.Argument(..., help="User ID"),
    yes: bool = typer.Option(
        False,
        "--yes", "-y",
        help="Skip confirmation prompt",
    ),
    config: Optional[str] = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """
    Delete a user.

    The user disappears from lookups and listings and its email can be
    registered again.
    """
    users_delete_command(
        user_id=user_id,
        yes=yes,
        config_path=config,
        verbose=verbose,
        console=console,
    )


# Add users command group to main app
app.add_typer(users_app, name="users")


def main():
    """Main entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
