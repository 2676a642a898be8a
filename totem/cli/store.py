"""Store Typer app that registers all document store commands."""

import typer

from totem.api.storage.cmd_get import cmd_get
from totem.api.storage.cmd_list import cmd_list
from totem.api.storage.cmd_search import cmd_search
from totem.cli._handle_stage_result import handle_stage_result


def store() -> typer.Typer:
    """Create the `store` sub-app."""
    store_app = typer.Typer(
        name="store",
        help="Document store operations",
        pretty_exceptions_show_locals=False,
        pretty_exceptions_enable=False,
        context_settings={"help_option_names": ["-h", "--help"]},
        invoke_without_command=True,
    )

    @store_app.callback(invoke_without_command=True)
    def store_callback(ctx: typer.Context) -> None:
        """Document store operations - shows available commands."""
        if ctx.invoked_subcommand is None:
            typer.echo(ctx.get_help(), err=True)
            raise typer.Exit()

    @store_app.command(name="list")
    def list_command() -> None:
        """List all collections."""
        handle_stage_result(cmd_list)()

    @store_app.command(name="get")
    def get_command(
        collection: str = typer.Argument(..., help="Collection name (e.g., 'users')"),
        doc_id: str = typer.Argument(..., help="Document id"),
    ) -> None:
        """Show one document."""
        handle_stage_result(cmd_get)(collection, doc_id)

    @store_app.command(name="search")
    def search_command(
        collection: str = typer.Argument(..., help="Collection name (e.g., 'users')"),
        terms: list[str] = typer.Argument(..., help="Criteria as field=value pairs"),
        exact: bool = typer.Option(False, "--exact", "-e", help="Match values exactly"),
        any_field: bool = typer.Option(False, "--any", "-a", help="Match when any field matches"),
        ignore_case: bool = typer.Option(False, "--ignore-case", "-i", help="Case-insensitive substring match"),
        limit: int = typer.Option(50, "--limit", "-l", help="Maximum number of documents (0 for no limit)"),
    ) -> None:
        """Search documents by field values."""
        handle_stage_result(cmd_search)(collection, terms, exact, any_field, ignore_case, limit)

    return store_app
