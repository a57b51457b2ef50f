"""CLI command implementations."""

import asyncio
import json
from typing import Awaitable, Callable, List, Optional, TypeVar

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ... import __version__
from ...application.services.user_service import UserService
from ...domain.models.user import User
from ...infrastructure.config.config_loader import ConfigLoader
from ...infrastructure.di.container import Container
from ...infrastructure.presentation.error_presenter import ErrorPresenter

T = TypeVar("T")


def _run_use_case(
    config_path: Optional[str],
    verbose: bool,
    console: Console,
    use_case: Callable[[UserService], Awaitable[T]],
) -> T:
    """
    Build the container and run one use case to completion.

    Any failure is rendered by ErrorPresenter and ends the process with
    exit status 1.
    """
    try:
        container = Container.create(config_path)
        return asyncio.run(use_case(container.user_service))
    except KeyboardInterrupt:
        console.print(f"\n{ErrorPresenter.present(KeyboardInterrupt(), verbose=verbose)}")
        raise SystemExit(1)
    except Exception as e:
        console.print(f"\n{ErrorPresenter.present(e, verbose=verbose)}")
        raise SystemExit(1)


def _user_table(users: List[User], title: Optional[str] = None) -> Table:
    table = Table(title=title)
    table.add_column("ID", no_wrap=True)
    table.add_column("Email")
    table.add_column("Name")
    table.add_column("Created")
    table.add_column("Updated")
    for user in users:
        table.add_row(
            user.id,
            user.email,
            user.name,
            user.created_at.isoformat(timespec="seconds"),
            user.updated_at.isoformat(timespec="seconds"),
        )
    return table


def _print_users(users: List[User], as_json: bool, console: Console, title: Optional[str] = None) -> None:
    if as_json:
        typer.echo(json.dumps([user.to_dict() for user in users], indent=2))
        return
    console.print(_user_table(users, title=title))


def _print_user(user: User, as_json: bool, console: Console) -> None:
    if as_json:
        typer.echo(json.dumps(user.to_dict(), indent=2))
        return
    console.print(_user_table([user]))


def users_create_command(
    email: str,
    name: str,
    as_json: bool,
    config_path: Optional[str],
    verbose: bool,
    console: Console,
):
    """Execute users create command."""
    user = _run_use_case(
        config_path, verbose, console,
        lambda service: service.create_user(email, name),
    )
    if not as_json:
        console.print("[green]User created[/green]")
    _print_user(user, as_json, console)


def users_get_command(
    user_id: str,
    as_json: bool,
    config_path: Optional[str],
    verbose: bool,
    console: Console,
):
    """Execute users get command."""
    user = _run_use_case(
        config_path, verbose, console,
        lambda service: service.get_user(user_id),
    )
    _print_user(user, as_json, console)


def users_get_by_email_command(
    email: str,
    as_json: bool,
    config_path: Optional[str],
    verbose: bool,
    console: Console,
):
    """Execute users get-by-email command."""
    user = _run_use_case(
        config_path, verbose, console,
        lambda service: service.get_user_by_email(email),
    )
    _print_user(user, as_json, console)


def users_list_command(
    limit: int,
    offset: int,
    as_json: bool,
    config_path: Optional[str],
    verbose: bool,
    console: Console,
):
    """Execute users list command."""
    users = _run_use_case(
        config_path, verbose, console,
        lambda service: service.list_users(limit, offset),
    )
    _print_users(users, as_json, console, title=f"Users (limit={limit}, offset={offset})")


def users_update_command(
    user_id: str,
    name: str,
    as_json: bool,
    config_path: Optional[str],
    verbose: bool,
    console: Console,
):
    """Execute users update command."""
    user = _run_use_case(
        config_path, verbose, console,
        lambda service: service.update_user(user_id, name),
    )
    if not as_json:
        console.print("[green]User updated[/green]")
    _print_user(user, as_json, console)


def users_delete_command(
    user_id: str,
    yes: bool,
    config_path: Optional[str],
    verbose: bool,
    console: Console,
):
    """Execute users delete command."""
    if not yes:
        typer.confirm(f"Delete user {user_id}?", abort=True)

    _run_use_case(
        config_path, verbose, console,
        lambda service: service.delete_user(user_id),
    )
    console.print(f"[green]User {user_id} deleted[/green]")


def serve_command(
    host: Optional[str],
    port: Optional[int],
    config_path: Optional[str],
    verbose: bool,
    console: Console,
):
    """
    Execute serve command.

    Args:
        host: Bind address (config value when omitted)
        port: Port (config value when omitted)
        config_path: Config file path
        verbose: Verbose error output
        console: Rich console
    """
    import uvicorn

    from ..http.app import create_app

    try:
        container = Container.create(config_path)
    except Exception as e:
        console.print(f"\n{ErrorPresenter.present(e, verbose=verbose)}")
        raise SystemExit(1)

    host = host or container.config.http.host
    port = port or container.config.http.port

    console.print(Panel.fit(
        f"[bold]{container.config.app.name}[/bold] v{__version__}\n"
        f"Listening on http://{host}:{port} ({container.config.app.environment})",
        border_style="blue"
    ))

    uvicorn.run(
        create_app(container),
        host=host,
        port=port,
        log_level=container.config.logging.level.lower(),
    )


def health_command(config_path: Optional[str], verbose: bool, console: Console):
    """Execute health command: run readiness checks once and print them."""
    try:
        container = Container.create(config_path)
        result = asyncio.run(container.health_checker.readiness())
    except Exception as e:
        console.print(f"\n{ErrorPresenter.present(e, verbose=verbose)}")
        raise SystemExit(1)

    table = Table(title="Readiness")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Error")
    for name, check in result.checks.items():
        style = "green" if check.error is None else "red"
        table.add_row(name, f"[{style}]{check.status.value}[/{style}]", check.error or "")
    console.print(table)

    if not result.healthy:
        console.print("[red]Service is not ready[/red]")
        raise SystemExit(1)
    console.print("[green]Service is ready[/green]")


def config_command(
    init: bool,
    path: Optional[str],
    show: bool,
    console: Console,
):
    """
    Execute config command.

    Args:
        init: Create default config
        path: Config file path
        show: Show current config
        console: Rich console
    """
    console.print(Panel.fit(
        "[bold]userservice Configuration[/bold]",
        border_style="blue"
    ))

    if init:
        try:
            config_path = ConfigLoader.create_default_config(path)
        except Exception as e:
            console.print(f"\n{ErrorPresenter.present(e)}")
            raise SystemExit(1)
        console.print(f"\n[green]Configuration file created: {config_path}[/green]")

    elif show:
        try:
            config = ConfigLoader.load(path)
        except Exception as e:
            console.print(f"\n{ErrorPresenter.present(e)}")
            raise SystemExit(1)
        console.print("\n[bold]Current Configuration:[/bold]")
        console.print(config.to_yaml(), markup=False)

    else:
        config_info = ConfigLoader.get_config_info()

        console.print("\n[bold]Configuration Files:[/bold]")
        if config_info["existing_configs"]:
            for cfg in config_info["existing_configs"]:
                console.print(f"  [green]{cfg}[/green]")
        else:
            console.print("  No configuration files found")

        console.print("\n[bold]Environment Overrides:[/bold]")
        if config_info["env_overrides"]:
            for env_var in config_info["env_overrides"]:
                console.print(f"  {env_var}")
        else:
            console.print("  None")

        console.print("\n[bold]Default Locations:[/bold]")
        for default_path in config_info["default_paths"]:
            console.print(f"  {default_path}")
