"""CLI entry point for the novelshelf catalog.

Usage:
  novelshelf init-db                       create / migrate the store
  novelshelf author create "Jane Doe"      add an author
  novelshelf novel create "Title" -a ID    add a novel
  novelshelf chapter create NOVEL_ID ...   add a chapter
  novelshelf --help                        list every command
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

# Ensure UTF-8 output on Windows so Rich can print accented titles
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")

import click

from catalog.base import UNSET
from catalog.engine import Catalog
from catalog.results import Result
from cli.theme import (
    get_console,
    app_header,
    command_panel,
    success_panel,
    error_panel,
    named_table,
    novel_table,
    chapter_table,
)
from config.logging_config import setup_logging
from config.settings import Settings
from models.enums import NovelStatus

console = get_console()


def _init_logging(verbose: bool, settings: Settings):
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.INFO)
    setup_logging(level=level, log_dir=settings.log_dir, console_enabled=verbose)


def _catalog(ctx: click.Context) -> Catalog:
    obj = ctx.find_root().obj
    if obj.get("catalog") is None:
        obj["catalog"] = Catalog(settings=obj["settings"])
    return obj["catalog"]


def _report(ctx: click.Context, title: str, result: Result) -> None:
    """Print the outcome of a mutation; exit 1 on failure."""
    catalog = _catalog(ctx)
    catalog.flush(catalog.settings.revalidate_timeout_seconds)
    if not result.success:
        console.print(error_panel(f"{title} failed", result.error))
        sys.exit(1)

    if result.data:
        body = "\n".join(f"[stat.label]{k}:[/] [stat.value]{v}[/]" for k, v in result.data.items())
    else:
        body = "Done."
    console.print(success_panel(title, body))


def _read_body(body: Optional[str], body_file: Optional[Path]) -> Optional[str]:
    if body is not None and body_file is not None:
        raise click.UsageError("Use either --body or --body-file, not both")
    if body_file is not None:
        return body_file.read_text(encoding="utf-8")
    return body


def _detail(value: Optional[str], clear: bool):
    """Map a CLI option pair to UNSET / None / value for partial updates."""
    if clear:
        return None
    return UNSET if value is None else value


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--db", "db_path", type=click.Path(path_type=Path), default=None,
              help="SQLite store path (overrides NOVELSHELF_SQLITE_DB_PATH)")
@click.pass_context
def cli(ctx, verbose, db_path):
    """novelshelf: catalog lifecycle for authors, genres, novels and chapters."""
    settings = Settings(sqlite_db_path=db_path) if db_path else Settings()
    _init_logging(verbose, settings)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["catalog"] = None


@cli.command(name="init-db")
@click.pass_context
def init_db(ctx):
    """Create the store and apply schema migrations."""
    catalog = _catalog(ctx)
    catalog.migrate()
    console.print(app_header())
    console.print(success_panel("Store ready", str(catalog.db.db_path)))


# ---------------------------------------------------------------------------
# Authors and genres
# ---------------------------------------------------------------------------

@cli.group()
def author():
    """Manage authors."""


@author.command(name="create")
@click.argument("name")
@click.option("--slug", default=None, help="URL slug (derived from the name when omitted)")
@click.option("--bio", default=None, help="Short biography")
@click.pass_context
def author_create(ctx, name, slug, bio):
    console.print(command_panel("Create author", {"Name": name, "Slug": slug or "(derived)"}))
    _report(ctx, "Author created", _catalog(ctx).create_author(name, slug=slug, bio=bio))


@author.command(name="update")
@click.argument("author_id")
@click.option("--name", default=None)
@click.option("--slug", default=None)
@click.option("--bio", default=None)
@click.option("--clear-bio", is_flag=True, help="Remove the biography")
@click.pass_context
def author_update(ctx, author_id, name, slug, bio, clear_bio):
    result = _catalog(ctx).update_author(author_id, name=name, slug=slug, bio=_detail(bio, clear_bio))
    _report(ctx, "Author updated", result)


@author.command(name="retire")
@click.argument("author_id")
@click.pass_context
def author_retire(ctx, author_id):
    """Retire an author; their novels stay as they are."""
    _report(ctx, "Author retired", _catalog(ctx).retire_author(author_id))


@author.command(name="list")
@click.option("--all", "include_retired", is_flag=True, help="Include retired authors")
@click.pass_context
def author_list(ctx, include_retired):
    authors = _catalog(ctx).list_authors(include_retired)
    if not authors:
        console.print("[muted]No authors yet.[/]")
        return
    console.print(named_table("Authors", authors, "bio"))


@cli.group()
def genre():
    """Manage genres."""


@genre.command(name="create")
@click.argument("name")
@click.option("--slug", default=None, help="URL slug (derived from the name when omitted)")
@click.option("--description", default=None)
@click.pass_context
def genre_create(ctx, name, slug, description):
    console.print(command_panel("Create genre", {"Name": name, "Slug": slug or "(derived)"}))
    _report(ctx, "Genre created", _catalog(ctx).create_genre(name, slug=slug, description=description))


@genre.command(name="update")
@click.argument("genre_id")
@click.option("--name", default=None)
@click.option("--slug", default=None)
@click.option("--description", default=None)
@click.option("--clear-description", is_flag=True)
@click.pass_context
def genre_update(ctx, genre_id, name, slug, description, clear_description):
    result = _catalog(ctx).update_genre(
        genre_id, name=name, slug=slug, description=_detail(description, clear_description),
    )
    _report(ctx, "Genre updated", result)


@genre.command(name="retire")
@click.argument("genre_id")
@click.pass_context
def genre_retire(ctx, genre_id):
    _report(ctx, "Genre retired", _catalog(ctx).retire_genre(genre_id))


@genre.command(name="list")
@click.option("--all", "include_retired", is_flag=True, help="Include retired genres")
@click.pass_context
def genre_list(ctx, include_retired):
    genres = _catalog(ctx).list_genres(include_retired)
    if not genres:
        console.print("[muted]No genres yet.[/]")
        return
    console.print(named_table("Genres", genres, "description"))


# ---------------------------------------------------------------------------
# Novels
# ---------------------------------------------------------------------------

_STATUS_CHOICE = click.Choice([s.value for s in NovelStatus])


@cli.group()
def novel():
    """Manage novels (works)."""


@novel.command(name="create")
@click.argument("title")
@click.option("--author", "-a", "author_id", default=None, help="Author ID")
@click.option("--description", "-d", default=None)
@click.option("--status", "-s", type=_STATUS_CHOICE, default=None)
@click.option("--genre", "-g", "genre_ids", multiple=True, help="Genre ID (repeatable)")
@click.option("--cover-url", default=None)
@click.option("--publish", is_flag=True, help="Publish immediately")
@click.pass_context
def novel_create(ctx, title, author_id, description, status, genre_ids, cover_url, publish):
    console.print(command_panel("Create novel", {
        "Title": title,
        "Author": author_id or "-",
        "Genres": ", ".join(genre_ids) or "-",
        "Visible": "yes" if publish else "no",
    }))
    result = _catalog(ctx).create_novel(
        title, description=description, author_id=author_id, status=status,
        visible=publish, genre_ids=list(genre_ids), cover_url=cover_url,
    )
    _report(ctx, "Novel created", result)


@novel.command(name="update")
@click.argument("novel_id")
@click.option("--title", default=None)
@click.option("--author", "-a", "author_id", default=None, help="New author ID")
@click.option("--no-author", is_flag=True, help="Detach the author")
@click.option("--description", "-d", default=None)
@click.option("--status", "-s", type=_STATUS_CHOICE, default=None)
@click.option("--genre", "-g", "genre_ids", multiple=True, help="Replace genres (repeatable)")
@click.option("--clear-genres", is_flag=True, help="Remove every genre")
@click.option("--cover-url", default=None)
@click.pass_context
def novel_update(ctx, novel_id, title, author_id, no_author, description, status,
                 genre_ids, clear_genres, cover_url):
    if clear_genres:
        genres = []
    else:
        genres = list(genre_ids) if genre_ids else None
    result = _catalog(ctx).update_novel(
        novel_id,
        title=title,
        description=_detail(description, False),
        author_id=_detail(author_id, no_author),
        status=status,
        cover_url=_detail(cover_url, False),
        genre_ids=genres,
    )
    _report(ctx, "Novel updated", result)


@novel.command(name="publish")
@click.argument("novel_id")
@click.pass_context
def novel_publish(ctx, novel_id):
    _report(ctx, "Novel published", _catalog(ctx).publish_novel(novel_id, True))


@novel.command(name="unpublish")
@click.argument("novel_id")
@click.pass_context
def novel_unpublish(ctx, novel_id):
    _report(ctx, "Novel unpublished", _catalog(ctx).publish_novel(novel_id, False))


@novel.command(name="retire")
@click.argument("novel_id")
@click.pass_context
def novel_retire(ctx, novel_id):
    """Retire a novel together with all of its chapters."""
    _report(ctx, "Novel retired", _catalog(ctx).retire_novel(novel_id))


@novel.command(name="list")
@click.option("--all", "include_retired", is_flag=True, help="Include retired novels")
@click.pass_context
def novel_list(ctx, include_retired):
    novels = _catalog(ctx).list_novels(include_retired)
    if not novels:
        console.print("[muted]No novels yet.[/]")
        return
    console.print(novel_table(novels))


# ---------------------------------------------------------------------------
# Chapters
# ---------------------------------------------------------------------------

_BODY_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


@cli.group()
def chapter():
    """Manage chapters."""


@chapter.command(name="create")
@click.argument("novel_id")
@click.option("--title", "-t", required=True)
@click.option("--body", "-b", default=None, help="Chapter text")
@click.option("--body-file", "-f", type=_BODY_FILE, default=None, help="Read chapter text from a file")
@click.option("--number", "-n", type=int, default=None, help="Chapter number (next free when omitted)")
@click.option("--publish", is_flag=True, help="Publish immediately")
@click.pass_context
def chapter_create(ctx, novel_id, title, body, body_file, number, publish):
    text = _read_body(body, body_file)
    console.print(command_panel("Create chapter", {
        "Novel": novel_id,
        "Title": title,
        "Number": str(number) if number else "(next)",
    }))
    result = _catalog(ctx).create_chapter(novel_id, title, text, number=number, visible=publish)
    _report(ctx, "Chapter created", result)


@chapter.command(name="update")
@click.argument("chapter_id")
@click.option("--title", "-t", default=None)
@click.option("--body", "-b", default=None)
@click.option("--body-file", "-f", type=_BODY_FILE, default=None)
@click.pass_context
def chapter_update(ctx, chapter_id, title, body, body_file):
    text = _read_body(body, body_file)
    _report(ctx, "Chapter updated", _catalog(ctx).update_chapter(chapter_id, title=title, body=text))


@chapter.command(name="publish")
@click.argument("chapter_id")
@click.pass_context
def chapter_publish(ctx, chapter_id):
    _report(ctx, "Chapter published", _catalog(ctx).toggle_publish_chapter(chapter_id, True))


@chapter.command(name="unpublish")
@click.argument("chapter_id")
@click.pass_context
def chapter_unpublish(ctx, chapter_id):
    _report(ctx, "Chapter unpublished", _catalog(ctx).toggle_publish_chapter(chapter_id, False))


@chapter.command(name="retire")
@click.argument("chapter_id")
@click.pass_context
def chapter_retire(ctx, chapter_id):
    _report(ctx, "Chapter retired", _catalog(ctx).retire_chapter(chapter_id))


@chapter.command(name="list")
@click.argument("novel_id")
@click.option("--all", "include_retired", is_flag=True, help="Include retired chapters")
@click.pass_context
def chapter_list(ctx, novel_id, include_retired):
    chapters = _catalog(ctx).list_chapters(novel_id, include_retired)
    if not chapters:
        console.print("[muted]No chapters.[/]")
        return
    console.print(chapter_table(chapters))


if __name__ == "__main__":
    cli()
