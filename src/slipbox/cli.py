#!/usr/bin/env python3
"""
sb: CLI for slipbox notes

Usage:
    sb new "Road trip ideas"       # Create a note
    sb rename old-id new-id        # Rename, rewriting links everywhere
    sb mv travel note-a note-b     # Move notes into a folder
    sb search tag:travel -tag:old  # Search with qualifiers
    sb tags                        # Tag cloud
"""

from __future__ import annotations

import difflib
import json
import sys
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, NoReturn

import click
from click.exceptions import ClickException, UsageError

from . import __version__ as SLIPBOX_VERSION

if TYPE_CHECKING:
    from .notebook import Notebook


def output(data, as_json: bool = False):
    """Output data as JSON or formatted text."""
    if as_json:
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        click.echo(data)


def format_table(rows: list[dict], columns: list[str], max_widths: dict | None = None) -> str:
    """Format rows as a simple table."""
    if not rows:
        return ""

    max_widths = max_widths or {}
    widths = {col: len(col) for col in columns}

    def cell(row: dict, col: str) -> str:
        val = str(row.get(col, ""))
        limit = max_widths.get(col, 50)
        if len(val) > limit:
            val = val[: limit - 3] + "..."
        return val

    for row in rows:
        for col in columns:
            widths[col] = max(widths[col], len(cell(row, col)))

    lines = [
        "  ".join(col.upper().ljust(widths[col]) for col in columns),
        "  ".join("-" * widths[col] for col in columns),
    ]
    for row in rows:
        lines.append("  ".join(cell(row, col).ljust(widths[col]) for col in columns))

    return "\n".join(lines)


def _handle_error(ctx: click.Context, error: Exception, exit_code: int = 1) -> NoReturn:
    """Report an error as text or, with --json-errors, as JSON, then exit."""
    from .config import ConfigurationError
    from .errors import ErrorCode, SlipboxError, format_error_json

    json_errors = ctx.obj.get("json_errors", False) if ctx.obj else False

    if isinstance(error, SlipboxError):
        if json_errors:
            click.echo(error.to_json(), err=True)
        else:
            click.echo(f"Error: {error.message}", err=True)
            suggestion = error.details.get("suggestion") if error.details else None
            if suggestion:
                click.echo(f"Hint: {suggestion}", err=True)
    else:
        code = ErrorCode.CONFIGURATION_ERROR if isinstance(error, ConfigurationError) else "INTERNAL_ERROR"
        if json_errors:
            click.echo(format_error_json(code, str(error)), err=True)
        else:
            click.echo(f"Error: {error}", err=True)

    sys.exit(exit_code)


def get_error_code_for_exception(exc: Exception) -> str:
    """Map Click exceptions to error codes."""
    if isinstance(exc, click.BadParameter):
        return "INVALID_ARGUMENT"
    elif isinstance(exc, click.MissingParameter):
        return "MISSING_ARGUMENT"
    elif isinstance(exc, click.NoSuchOption):
        return "UNKNOWN_OPTION"
    elif isinstance(exc, UsageError):
        return "USAGE_ERROR"
    return "CLI_ERROR"


# ─────────────────────────────────────────────────────────────────────────────
# JSON Error Handling
# ─────────────────────────────────────────────────────────────────────────────


class JsonErrorGroup(click.Group):
    """Click group that formats usage errors as JSON when --json-errors is set.

    Also suggests the closest command name for typos.
    """

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except UsageError as e:
            cmd_name = args[0] if args else ""
            if cmd_name and "No such command" in str(e):
                matches = difflib.get_close_matches(cmd_name, self.list_commands(ctx), n=1, cutoff=0.6)
                if matches:
                    raise UsageError(f"No such command '{cmd_name}'. Did you mean '{matches[0]}'?")
            raise

    def main(
        self,
        args: Sequence[str] | None = None,
        prog_name: str | None = None,
        complete_var: str | None = None,
        standalone_mode: bool = True,
        **extra: Any,
    ) -> Any:
        argv = list(args) if args is not None else list(sys.argv[1:])
        if "--json-errors" not in argv:
            return super().main(args, prog_name, complete_var, standalone_mode, **extra)

        # Accept --json-errors anywhere by moving it in front of the subcommand
        argv = ["--json-errors"] + [a for a in argv if a != "--json-errors"]
        try:
            return super().main(argv, prog_name, complete_var, standalone_mode=False, **extra)
        except ClickException as e:
            from .errors import format_error_json

            click.echo(format_error_json(get_error_code_for_exception(e), e.format_message()), err=True)
            raise SystemExit(1)


# ─────────────────────────────────────────────────────────────────────────────
# Notebook access
# ─────────────────────────────────────────────────────────────────────────────


def _open_notebook(ctx: click.Context) -> Notebook:
    """Notebook over the configured notes root, with its saved folder ledger."""
    from .config import LEDGER_FILENAME, ConfigurationError, commits_enabled, get_notes_root
    from .folders import load_ledger
    from .mirror import GistMirror
    from .notebook import Notebook
    from .store import DirectoryStore

    try:
        root = get_notes_root()
    except ConfigurationError as exc:
        _handle_error(ctx, exc)

    ctx.obj["ledger_path"] = root / LEDGER_FILENAME
    return Notebook(
        DirectoryStore(root, commit=commits_enabled()),
        folders=load_ledger(ctx.obj["ledger_path"]),
        mirror=GistMirror.from_config(),
    )


def _save_folders(ctx: click.Context, notebook: Notebook) -> None:
    from .folders import save_ledger

    save_ledger(notebook.folders, ctx.obj["ledger_path"])


def _normalize_folder(folder: str) -> str:
    """'/' and '.' name the root."""
    folder = folder.strip().strip("/")
    return "" if folder in ("", ".") else folder


# ─────────────────────────────────────────────────────────────────────────────
# Main CLI Group
# ─────────────────────────────────────────────────────────────────────────────


@click.group(cls=JsonErrorGroup)
@click.version_option(version=SLIPBOX_VERSION, prog_name="sb")
@click.option("--json-errors", "json_errors", is_flag=True, help="Output errors as JSON")
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    envvar="SLIPBOX_QUIET",
    help="Suppress warnings, show only errors and essential output",
)
@click.pass_context
def cli(ctx: click.Context, json_errors: bool, quiet: bool):
    """sb: Markdown notes with hierarchical ids.

    \b
    Notes live at <root>/<id>.md. Set SLIPBOX_ROOT or put a .slipbox
    file at the top of your notes directory.

    \b
    Examples:
      sb new "Road trip ideas" --folder travel
      sb rename travel/road-trip-ideas travel/road-trip
      sb mv archive travel/road-trip
      sb search tag:travel -tag:done
    """
    from ._logging import configure_logging

    configure_logging(quiet=quiet)
    ctx.ensure_object(dict)
    ctx.obj["json_errors"] = json_errors


# ─────────────────────────────────────────────────────────────────────────────
# Identity Commands
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.argument("text")
@click.pass_context
def slug(ctx: click.Context, text: str):
    """Show the note id that TEXT turns into.

    \b
    Examples:
      sb slug "Projects / Road Trip"   # projects/road-trip
    """
    from .errors import SlipboxError
    from .note_id import to_slug

    result = to_slug(text)
    if not result:
        _handle_error(ctx, SlipboxError.invalid_identifier(text))
    click.echo(result)


@cli.command()
@click.argument("name")
@click.option("--folder", "-f", default=None, help="Create the note inside this folder")
@click.option("--tag", "-t", "tags", multiple=True, help="Initial tag (repeatable)")
@click.option("--query", default=None, help="Take initial tags from the tag filters of a search")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def new(ctx: click.Context, name: str, folder: str | None, tags: tuple[str, ...], query: str | None, as_json: bool):
    """Create a note. NAME becomes the title and, slugified, the id.

    \b
    Examples:
      sb new "Road trip ideas"
      sb new "Packing list" --folder travel --tag checklist
      sb new "Pasta" --query "tag:recipes -tag:draft"
    """
    from .errors import SlipboxError
    from .search import tags_from_query

    if not name.strip():
        raise click.BadParameter("name must not be empty", param_hint="NAME")

    notebook = _open_notebook(ctx)
    initial_tags = list(dict.fromkeys([*tags, *tags_from_query(query or "")]))

    try:
        note = notebook.create_note(
            name,
            folder=_normalize_folder(folder) if folder else None,
            tags=initial_tags,
        )
    except SlipboxError as exc:
        _handle_error(ctx, exc)
    _save_folders(ctx, notebook)

    if as_json:
        output({"id": note.id, "title": note.title, "tags": note.tags}, as_json=True)
    else:
        click.echo(f"Created {note.id}")


@cli.command()
@click.argument("note_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def show(ctx: click.Context, note_id: str, as_json: bool):
    """Print a note."""
    from .errors import SlipboxError
    from .note_id import parent_folder

    notebook = _open_notebook(ctx)
    try:
        note = notebook.get(note_id)
    except SlipboxError as exc:
        _handle_error(ctx, exc)

    if as_json:
        output(
            {
                "id": note.id,
                "title": note.title,
                "folder": parent_folder(note.id),
                "tags": note.tags,
                "links": note.links,
                "content": note.content,
            },
            as_json=True,
        )
    else:
        click.echo(note.content, nl=False)


@cli.command()
@click.argument("note_id")
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.pass_context
def save(ctx: click.Context, note_id: str, source):
    """Save content from SOURCE (default stdin) as NOTE_ID.

    \b
    Examples:
      sb save travel/road-trip draft.md
      cat draft.md | sb save travel/road-trip
    """
    from .errors import SlipboxError

    notebook = _open_notebook(ctx)
    try:
        note = notebook.save_note(note_id, source.read())
    except SlipboxError as exc:
        _handle_error(ctx, exc)
    _save_folders(ctx, notebook)
    click.echo(f"Saved {note.id}")


@cli.command()
@click.argument("old_id")
@click.argument("new_name")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def rename(ctx: click.Context, old_id: str, new_name: str, as_json: bool):
    """Rename a note and update every [[link]] to it.

    \b
    Examples:
      sb rename notes/draft notes/final
    """
    from .errors import SlipboxError

    notebook = _open_notebook(ctx)
    try:
        result = notebook.rename_note(old_id, new_name)
    except SlipboxError as exc:
        _handle_error(ctx, exc)

    error = result.to_error()
    if error is not None:
        _handle_error(ctx, error)
    _save_folders(ctx, notebook)

    changed = len(result.batch.written) - 1 if result.batch else 0
    if as_json:
        output({"old_id": old_id, "new_id": new_name, "links_updated": changed}, as_json=True)
    else:
        click.echo(f"Renamed {old_id} -> {new_name} ({changed} other note(s) updated)")


@cli.command()
@click.argument("folder")
@click.argument("note_ids", nargs=-1, required=True)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def mv(ctx: click.Context, folder: str, note_ids: tuple[str, ...], as_json: bool):
    """Move notes into FOLDER ('/' for the root), keeping their names.

    Notes that cannot move are reported and left where they are.

    \b
    Examples:
      sb mv archive travel/road-trip travel/packing
      sb mv / archive/old-idea
    """
    from .errors import SlipboxError

    notebook = _open_notebook(ctx)
    target = _normalize_folder(folder)
    try:
        result = notebook.move_notes(list(note_ids), target)
    except SlipboxError as exc:
        _handle_error(ctx, exc)
    _save_folders(ctx, notebook)

    if as_json:
        output({"moved": result.moved, "skipped": result.skipped, "folder": target}, as_json=True)
        return

    click.echo(f"Moved {result.moved} note(s) to {target or 'root'}")
    for note_id in result.skipped:
        click.echo(f"Skipped {note_id}", err=True)


@cli.command()
@click.argument("note_id")
@click.pass_context
def rm(ctx: click.Context, note_id: str):
    """Delete a note (and its mirrored gist, if any)."""
    from .errors import SlipboxError

    notebook = _open_notebook(ctx)
    try:
        notebook.delete_note(note_id)
    except SlipboxError as exc:
        _handle_error(ctx, exc)
    click.echo(f"Deleted {note_id}")


@cli.command()
@click.argument("note_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def publish(ctx: click.Context, note_id: str, as_json: bool):
    """Mirror a note to a GitHub gist.

    The gist id is stored in the note's frontmatter, so later saves update
    the gist and deleting the note deletes it. Needs SLIPBOX_GITHUB_TOKEN.

    \b
    Examples:
      sb publish recipes/pasta
    """
    from .config import ConfigurationError
    from .errors import SlipboxError
    from .parser import ParseError

    notebook = _open_notebook(ctx)
    try:
        note = notebook.publish_note(note_id)
    except (SlipboxError, ConfigurationError, ParseError) as exc:
        _handle_error(ctx, exc)

    if as_json:
        output({"id": note.id, "gist_id": note.frontmatter.gist_id}, as_json=True)
    else:
        click.echo(f"Published {note.id} as gist {note.frontmatter.gist_id}")


# ─────────────────────────────────────────────────────────────────────────────
# Folder Commands
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.argument("name")
@click.option("--in", "parent", default=None, help="Create inside this folder")
@click.pass_context
def mkdir(ctx: click.Context, name: str, parent: str | None):
    """Create an empty folder.

    The folder is remembered until a note is saved inside it.
    """
    from .errors import SlipboxError

    notebook = _open_notebook(ctx)
    try:
        path = notebook.create_folder(name, _normalize_folder(parent) if parent else None)
    except SlipboxError as exc:
        _handle_error(ctx, exc)
    _save_folders(ctx, notebook)
    click.echo(f"Created folder {path}")


@cli.command()
@click.argument("folder", default="")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def ls(ctx: click.Context, folder: str, as_json: bool):
    """List subfolders and notes directly inside FOLDER (default: root)."""
    notebook = _open_notebook(ctx)
    folder = _normalize_folder(folder)
    subfolders, notes = notebook.list_folder(folder)

    if as_json:
        output(
            {"folder": folder, "folders": subfolders, "notes": [note.id for note in notes]},
            as_json=True,
        )
        return

    for name in subfolders:
        click.echo(f"{name}/")
    for note in notes:
        click.echo(note.id)


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def folders(ctx: click.Context, as_json: bool):
    """List every folder a note can be moved into."""
    notebook = _open_notebook(ctx)
    paths = notebook.folder_paths()
    if as_json:
        output(paths, as_json=True)
        return
    click.echo("/")
    for path in paths:
        click.echo(f"{path}/")


# ─────────────────────────────────────────────────────────────────────────────
# Search Commands
# ─────────────────────────────────────────────────────────────────────────────


def _format_tag_cloud(tags, limit: int) -> str:
    shown = "  ".join(f"{entry.tag} {entry.count}" for entry in tags[:limit])
    if len(tags) > limit:
        shown += f"  +{len(tags) - limit} more"
    return shown


def _tag_cloud_json(text: str, cloud) -> list[dict]:
    """Tag cloud entries with the query that narrows the search to each tag."""
    from .search import add_qualifier

    return [{**entry.model_dump(), "query": add_qualifier(text, "tag", entry.tag)} for entry in cloud]


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("query", nargs=-1, type=click.UNPROCESSED)
@click.option("--limit", default=20, type=click.IntRange(min=1), help="Max results")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def search(ctx: click.Context, query: tuple[str, ...], limit: int, as_json: bool):
    """Search notes.

    \b
    Qualifiers (prefix with - to exclude, comma separate alternatives):
      tag:recipes       notes tagged recipes (or recipes/...)
      link:some/note    notes linking to some/note
      date:2024-05-01   the daily note or notes linking to it

    \b
    Examples:
      sb search pasta tag:recipes
      sb search -tag:draft
    """
    from .config import DEFAULT_TAG_CLOUD_LIMIT
    from .search import format_filter, highlight_paths, parse_query, remove_filter, tag_frequencies

    notebook = _open_notebook(ctx)
    text = " ".join(query)
    results = notebook.search(text)
    cloud = tag_frequencies(results)

    if as_json:
        parsed = parse_query(text)
        output(
            {
                "query": text,
                "total": len(results),
                "results": [{"id": n.id, "title": n.title, "tags": n.tags} for n in results[:limit]],
                "tags": _tag_cloud_json(text, cloud),
                "filters": [
                    {"filter": format_filter(f), "without": remove_filter(text, f)} for f in parsed.filters
                ],
                "highlight": highlight_paths(parsed),
            },
            as_json=True,
        )
        return

    if not results:
        click.echo("No results found.")
        return

    rows = [{"id": n.id, "title": n.title, "tags": ", ".join(n.tags)} for n in results[:limit]]
    click.echo(format_table(rows, ["id", "title", "tags"], {"title": 40, "tags": 30}))
    if cloud:
        click.echo("")
        click.echo(_format_tag_cloud(cloud, DEFAULT_TAG_CLOUD_LIMIT))


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("query", nargs=-1, type=click.UNPROCESSED)
@click.option("--all", "show_all", is_flag=True, help="Show every tag, not just the top ones")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def tags(ctx: click.Context, query: tuple[str, ...], show_all: bool, as_json: bool):
    """Show the tag cloud for all notes or for a search.

    Tags shared by every matching note, and parent tags that say nothing
    their children don't, are left out.

    \b
    Examples:
      sb tags
      sb tags tag:recipes --all
    """
    from .config import DEFAULT_TAG_CLOUD_LIMIT

    notebook = _open_notebook(ctx)
    text = " ".join(query)
    cloud = notebook.tag_cloud(text)

    if as_json:
        output(_tag_cloud_json(text, cloud), as_json=True)
        return

    if not cloud:
        click.echo("No tags found.")
        return

    if show_all:
        for entry in cloud:
            click.echo(f"  {entry.tag}: {entry.count}")
    else:
        click.echo(_format_tag_cloud(cloud, DEFAULT_TAG_CLOUD_LIMIT))


def main():
    cli()


if __name__ == "__main__":
    main()
