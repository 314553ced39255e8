"""Flask CLI commands for HabitLoop."""

from __future__ import annotations

import click

from .errors import HabitLoopError


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("habitloop-create-user")
    @click.option("--username", prompt=True, help="Unique login name")
    @click.option("--display-name", default="", help="Name shown to other users")
    @click.password_option(help="Password (at least 8 characters)")
    def habitloop_create_user(username: str, display_name: str, password: str) -> None:
        """Create a user account."""

        from .extensions import get_context
        from .services.users import create_user

        ctx = get_context()
        try:
            user = create_user(
                username=username,
                password=password,
                display_name=display_name,
                repository=ctx.user_repo,
            )
        except HabitLoopError as exc:
            raise click.ClickException(exc.message) from exc
        click.echo(f"Created user {user.username} (id={user.id})")

    @app.cli.command("habitloop-dispatch-reminders")
    def habitloop_dispatch_reminders() -> None:
        """Send today's habit reminders now."""

        from .extensions import get_context

        count = get_context().dispatch_reminders()
        click.echo(f"Sent {count} reminder(s).")
