"""Click CLI interface definitions.

Defines the command-line interface structure and routes commands
to the command runner.
"""

from __future__ import annotations

from pathlib import Path

import click
from dotenv import load_dotenv

from ArchiveSearch.cli.commands import (
    AddCommand,
    ClearCommand,
    DeleteCommand,
    ExportCommand,
    GroupsCommand,
    RelabelCommand,
    RowsCommand,
    SetCommand,
    ValidateCommand,
)
from ArchiveSearch.cli.runner import CommandRunner
from ArchiveSearch.config import load_config


@click.group(help="ArchiveSearch: build and validate archive search criteria.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=Path("config/default.yml"),
    show_default=True,
    help="Path to YAML config file.",
)
@click.option("--locale", default=None, help="Display locale (defaults to locale.default).")
@click.pass_context
def cli(ctx: click.Context, config_path: Path, locale: str | None) -> None:
    """CLI entry group.

    Loads environment variables from .env file before processing config.

    Args:
        ctx: Click context.
        config_path: Path to YAML config file.
        locale: Optional display locale override.
    """
    load_dotenv()

    cfg = load_config(config_path)
    ctx.obj = CommandRunner(cfg, locale=locale)


@cli.command("rows")
@click.pass_context
def rows_cmd(ctx: click.Context) -> None:
    """List the selected rows."""
    runner: CommandRunner = ctx.obj
    click.echo(runner.run(ctx.command.name, lambda session: RowsCommand(session).execute()))


@cli.command("add")
@click.argument("field_id")
@click.option("--label", default=None, help="Field label; looked up in the catalog when omitted.")
@click.option("--parent", "parent_ids", multiple=True, help="Parent (archival type) id; repeat for several.")
@click.option("--path", default="", help="Accordion path the field was picked from.")
@click.pass_context
def add_cmd(ctx: click.Context, field_id: str, label: str | None, parent_ids: tuple[str, ...], path: str) -> None:
    """Add a row for FIELD_ID with its default operator."""
    runner: CommandRunner = ctx.obj
    output = runner.run(
        ctx.command.name,
        lambda session: AddCommand(session, field_id, label=label, parent_ids=parent_ids, path=path).execute(),
    )
    click.echo(output)


@cli.command("set")
@click.argument("index", type=int)
@click.option("--parent", "parent_ids", multiple=True, help="Parent id; repeat for a multi-valued selection.")
@click.option("--operator", "operator_id", default=None, help="Operator id, e.g. equals or between.")
@click.option("--value", "values", multiple=True, help="Value; give it twice for range operators.")
@click.pass_context
def set_cmd(
    ctx: click.Context,
    index: int,
    parent_ids: tuple[str, ...],
    operator_id: str | None,
    values: tuple[str, ...],
) -> None:
    """Edit the row at INDEX."""
    runner: CommandRunner = ctx.obj
    output = runner.run(
        ctx.command.name,
        lambda session: SetCommand(
            session,
            index,
            parent_ids=parent_ids,
            operator_id=operator_id,
            values=values,
        ).execute(),
    )
    click.echo(output)


@cli.command("delete")
@click.argument("index", type=int)
@click.pass_context
def delete_cmd(ctx: click.Context, index: int) -> None:
    """Delete the row at INDEX."""
    runner: CommandRunner = ctx.obj
    click.echo(runner.run(ctx.command.name, lambda session: DeleteCommand(session, index).execute()))


@cli.command("clear")
@click.pass_context
def clear_cmd(ctx: click.Context) -> None:
    """Remove all rows and reset the search-page state."""
    runner: CommandRunner = ctx.obj
    click.echo(runner.run(ctx.command.name, lambda session: ClearCommand(session).execute()))


@cli.command("validate")
@click.pass_context
def validate_cmd(ctx: click.Context) -> None:
    """Validate all rows; exits with status 1 when any row is invalid."""
    runner: CommandRunner = ctx.obj
    is_valid, output = runner.run(ctx.command.name, lambda session: ValidateCommand(session).execute())
    click.echo(output)
    if not is_valid:
        ctx.exit(1)


@cli.command("export")
@click.option("--title", default=None, help="Search title; defaults to the saved search name.")
@click.option("--title-id", default=None, help="Search title id.")
@click.pass_context
def export_cmd(ctx: click.Context, title: str | None, title_id: str | None) -> None:
    """Print the rows as a JSON search request."""
    runner: CommandRunner = ctx.obj
    output = runner.run(
        ctx.command.name,
        lambda session: ExportCommand(session, title=title, title_id=title_id).execute(),
    )
    click.echo(output)


@cli.command("relabel")
@click.argument("locale")
@click.pass_context
def relabel_cmd(ctx: click.Context, locale: str) -> None:
    """Switch row labels to LOCALE."""
    runner: CommandRunner = ctx.obj
    click.echo(runner.run(ctx.command.name, lambda session: RelabelCommand(session, locale).execute()))


@cli.command("groups")
@click.option("--refresh", is_flag=True, help="Reload saved groups from the catalog provider.")
@click.option("--toggle-group", "toggle_groups", multiple=True, help="Expand or collapse a group.")
@click.option("--toggle-field", "toggle_fields", multiple=True, help="Expand or collapse a field group.")
@click.option("--select", default=None, help="Select a saved field by its unique id.")
@click.option("--load", "load_into_rows", is_flag=True, help="Replace the rows with the selected field.")
@click.pass_context
def groups_cmd(
    ctx: click.Context,
    refresh: bool,
    toggle_groups: tuple[str, ...],
    toggle_fields: tuple[str, ...],
    select: str | None,
    load_into_rows: bool,
) -> None:
    """Show saved groups and change their expand/select state."""
    runner: CommandRunner = ctx.obj
    output = runner.run(
        ctx.command.name,
        lambda session: GroupsCommand(
            session,
            refresh=refresh,
            toggle_groups=toggle_groups,
            toggle_fields=toggle_fields,
            select=select,
            load_into_rows=load_into_rows,
        ).execute(),
    )
    click.echo(output)
