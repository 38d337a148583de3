"""CLI entry point for mdsession."""

import asyncio
import logging
import sys
from typing import Callable, TypeVar

import click

from .config import Config, load_config
from .exceptions import ConfigError, LoadError, MdSessionError
from .models import HeadingNode
from .session import EXPORT_FORMATS, Session
from .storage import JsonFileStore
from .templates import TEMPLATES
from .themes import THEMES

T = TypeVar("T")


def _run(config: Config, action: Callable[[Session], T]) -> T:
    """Open a session, run action against it, and close it.

    The session lives on a fresh event loop so autosave timers have a loop
    to run on; they are cancelled when the session closes.
    """

    async def runner() -> T:
        session = Session(JsonFileStore(config.data_dir), config)
        if not session.initialize():
            raise session.last_error
        try:
            return action(session)
        finally:
            session.close()

    try:
        return asyncio.run(runner())
    except LoadError as e:
        click.echo(f"Failed to load editor state: {e}", err=True)
        sys.exit(2)
    except MdSessionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _open(session: Session, doc_id: str) -> None:
    if session.active_id != doc_id:
        session.switch_document(doc_id)


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Where documents are stored (default: ~/.mdsession or MDSESSION_DATA_DIR env var)",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output",
)
@click.pass_context
def main(ctx, data_dir, verbose):
    """Manage markdown documents, their history and snapshots.

    Example: mdsession new "Release notes"
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        ctx.obj = load_config(data_dir=data_dir, verbose=verbose)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(2)


@main.command("list")
@click.pass_obj
def list_documents(config):
    """List documents, most recently created first."""
    def action(session: Session):
        for doc in session.documents:
            marker = "*" if doc.id == session.active_id else " "
            tags = f"  [{', '.join(doc.tags)}]" if doc.tags else ""
            click.echo(
                f"{marker} {doc.id}  {doc.modified_at:%Y-%m-%d %H:%M}  {doc.title}{tags}"
            )

    _run(config, action)


@main.command()
@click.argument("title", required=False)
@click.pass_obj
def new(config, title):
    """Create a document and print its id."""
    doc = _run(config, lambda session: session.create_document(title))
    click.echo(doc.id)


@main.command()
@click.argument("doc_id")
@click.pass_obj
def show(config, doc_id):
    """Print a document's markdown."""
    def action(session: Session):
        _open(session, doc_id)
        return session.content

    click.echo(_run(config, action), nl=False)


@main.command()
@click.argument("doc_id")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.pass_obj
def write(config, doc_id, source):
    """Replace a document's content with SOURCE ('-' for stdin) and save."""
    text = source.read()

    def action(session: Session):
        _open(session, doc_id)
        changed = session.update_content(text)
        if changed:
            session.save()
        return changed

    click.echo("Saved." if _run(config, action) else "No changes.")


@main.command("export")
@click.argument("doc_id")
@click.option(
    "--format", "-f", "fmt",
    type=click.Choice(EXPORT_FORMATS),
    default="markdown",
    help="Export format (default: markdown)",
)
@click.option(
    "--output", "-o",
    type=click.File("w", encoding="utf-8"),
    default="-",
    help="Output file (default: stdout)",
)
@click.pass_obj
def export_document(config, doc_id, fmt, output):
    """Export a document as markdown, html, text or json."""
    def action(session: Session):
        _open(session, doc_id)
        return session.export_as(fmt)

    output.write(_run(config, action))


def _echo_outline(nodes: list[HeadingNode], depth: int = 0) -> None:
    for node in nodes:
        click.echo(f"{'  ' * depth}- {node.title} (#{node.id}, line {node.line})")
        _echo_outline(node.children, depth + 1)


@main.command()
@click.argument("doc_id")
@click.pass_obj
def outline(config, doc_id):
    """Print the heading outline of a document."""
    def action(session: Session):
        _open(session, doc_id)
        return session.document_structure()

    _echo_outline(_run(config, action))


@main.command()
@click.argument("doc_id")
@click.argument("kind", type=click.Choice(sorted(TEMPLATES)))
@click.pass_obj
def template(config, doc_id, kind):
    """Append a template body to a document."""
    def action(session: Session):
        _open(session, doc_id)
        session.insert_template(kind)
        session.save()

    _run(config, action)
    click.echo(f"Inserted {kind} template.")


@main.command()
@click.argument("doc_id")
@click.argument("pattern")
@click.argument("replacement")
@click.option("--case-sensitive", is_flag=True, default=False, help="Match case exactly")
@click.option("--whole-word", is_flag=True, default=False, help="Only match whole words")
@click.option("--regex", "use_regex", is_flag=True, default=False, help="Treat PATTERN as a regular expression")
@click.pass_obj
def replace(config, doc_id, pattern, replacement, case_sensitive, whole_word, use_regex):
    """Replace every match of PATTERN in a document."""
    def action(session: Session):
        _open(session, doc_id)
        replaced = session.search_and_replace(
            pattern,
            replacement,
            case_sensitive=case_sensitive,
            whole_word=whole_word,
            use_regex=use_regex,
        )
        if replaced:
            session.save()
        return replaced

    click.echo("Replaced." if _run(config, action) else "No matches.")


@main.command("format")
@click.argument("doc_id")
@click.pass_obj
def format_cmd(config, doc_id):
    """Normalize heading, list and blank-line spacing."""
    def action(session: Session):
        _open(session, doc_id)
        changed = session.format_document()
        if changed:
            session.save()
        return changed

    click.echo("Formatted." if _run(config, action) else "Already formatted.")


@main.command()
@click.argument("doc_id")
@click.argument("title")
@click.pass_obj
def rename(config, doc_id, title):
    """Rename a document."""
    _run(config, lambda session: session.rename_document(doc_id, title))
    click.echo(f"Renamed to {title}.")


@main.command()
@click.argument("doc_id")
@click.option("--remove", is_flag=True, default=False, help="Remove the tag instead of adding it")
@click.argument("tag")
@click.pass_obj
def tag(config, doc_id, remove, tag):
    """Add or remove a tag on a document."""
    def action(session: Session):
        _open(session, doc_id)
        if remove:
            session.remove_tag(tag)
        else:
            session.add_tag(tag)
        session.save(create_snapshot=False)
        return session.tags

    click.echo(", ".join(_run(config, action)))


@main.command()
@click.argument("doc_id")
@click.pass_obj
def delete(config, doc_id):
    """Delete a document."""
    _run(config, lambda session: session.delete_document(doc_id))
    click.echo(f"Deleted {doc_id}.")


@main.command()
@click.pass_obj
def snapshots(config):
    """List saved snapshots, newest first."""
    def action(session: Session):
        for snap in session.snapshots:
            summary = snap.summary.replace("\n", " ")
            click.echo(f"{snap.id}  {snap.timestamp:%Y-%m-%d %H:%M:%S}  {snap.title}  {summary}")

    _run(config, action)


@main.command()
@click.argument("snapshot_id")
@click.argument("doc_id", required=False)
@click.pass_obj
def restore(config, snapshot_id, doc_id):
    """Restore a snapshot into DOC_ID (default: the active document)."""
    def action(session: Session):
        if doc_id:
            _open(session, doc_id)
        session.restore_snapshot(snapshot_id)
        session.save()
        return session.active_id

    click.echo(f"Restored snapshot into {_run(config, action)}.")


@main.command()
@click.argument("theme_id", required=False)
@click.pass_obj
def theme(config, theme_id):
    """Show or set the preview theme."""
    def action(session: Session):
        if theme_id and not session.set_theme(theme_id):
            known = ", ".join(t.id for t in THEMES)
            raise ConfigError(f"Unknown theme: {theme_id}. Use one of: {known}.")
        return session.current_theme

    current = _run(config, action)
    click.echo(f"{current.id} ({current.name}, {current.category})")
