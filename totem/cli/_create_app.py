"""Create the main Typer CLI app."""

import typer

from totem.cli.store import store


def _create_app() -> typer.Typer:
    """Create and configure the main CLI Typer app."""
    app = typer.Typer(
        pretty_exceptions_show_locals=False,
        pretty_exceptions_enable=False,
        help="Totem storage CLI",
        context_settings={"help_option_names": ["-h", "--help"]},
        invoke_without_command=True,
    )

    app.add_typer(store(), name="store")

    @app.callback(invoke_without_command=True)
    def main_callback(
        ctx: typer.Context,
        verbose: bool = typer.Option(False, "--verbose", "-V", help="Log debug output to stderr and the log file"),
    ) -> None:
        from totem.api.config.TotemConfig import TotemConfig
        from totem.logging_config import setup_logging

        try:
            level = TotemConfig.load().log.level
        except ValueError:
            level = None
        if verbose:
            level = "DEBUG"
        if level is not None:
            setup_logging(level)

        if ctx.invoked_subcommand is None:
            typer.echo(ctx.get_help())
            raise typer.Exit()

    return app
