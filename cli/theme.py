"""Unified Rich theme and reusable UI helper functions for the CLI."""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.theme import Theme

from models.enums import LifecycleState, NovelStatus

CATALOG_THEME = Theme({
    "app.title": "bold",
    "success": "green",
    "warning": "yellow",
    "error": "red",
    "info": "blue",
    "muted": "dim",
    "accent": "cyan",
    "stat.label": "dim",
    "stat.value": "bold",
    "chapter.num": "blue",
    "entity.id": "dim cyan",
})

_STATE_COLORS = {
    LifecycleState.DRAFT: "yellow",
    LifecycleState.PUBLISHED: "green",
    LifecycleState.RETIRED: "dim",
}

_STATUS_COLORS = {
    NovelStatus.DRAFT: "dim",
    NovelStatus.ONGOING: "green",
    NovelStatus.COMPLETED: "cyan",
    NovelStatus.HIATUS: "yellow",
    NovelStatus.DROPPED: "red",
}


def get_console() -> Console:
    """Return a Console instance with the catalog theme applied."""
    return Console(theme=CATALOG_THEME)


def app_header(title: str = "novelshelf") -> Rule:
    """Return a Rule element for the application header banner."""
    return Rule(title=f"[bold]{title}[/]", style="dim")


def command_panel(title: str, fields: dict[str, str]) -> Panel:
    """Return a Panel displaying command parameters.

    Args:
        title: Panel title (e.g. "Create author").
        fields: Ordered dict of label -> value pairs.
    """
    lines = []
    for label, value in fields.items():
        lines.append(f"  [stat.label]{label}:[/] [stat.value]{value}[/]")
    body = "\n".join(lines)
    return Panel(body, title=f"[bold]{title}[/]", box=box.ROUNDED, border_style="dim", padding=(0, 2))


def success_panel(title: str, body: str) -> Panel:
    """Return a green-bordered Panel for success results."""
    return Panel(body, title=f"[success]{title}[/]", box=box.ROUNDED, border_style="green", padding=(0, 2))


def error_panel(title: str, message: str) -> Panel:
    """Return a red-bordered Panel showing a failure message verbatim."""
    return Panel(message, title=f"[error]{title}[/]", box=box.ROUNDED, border_style="red", padding=(0, 2))


def _state_label(entity) -> str:
    if hasattr(entity, "lifecycle_state"):
        state = entity.lifecycle_state
    else:
        state = LifecycleState.RETIRED if entity.deleted_at else LifecycleState.PUBLISHED
    return f"[{_STATE_COLORS[state]}]{state.value}[/]"


def named_table(title: str, rows: list, detail_attr: str) -> Table:
    """Table of authors or genres (id, name, slug, state, detail excerpt)."""
    table = Table(title=title, box=box.ROUNDED, border_style="dim")
    table.add_column("ID", style="entity.id")
    table.add_column("Name", style="bold")
    table.add_column("Slug", style="accent")
    table.add_column("State")
    table.add_column(detail_attr.capitalize())

    for r in rows:
        detail = getattr(r, detail_attr) or ""
        if len(detail) > 40:
            detail = detail[:40] + "..."
        state = "[dim]retired[/]" if r.deleted_at else "[green]live[/]"
        table.add_row(r.id, r.name, r.slug, state, detail)
    return table


def novel_table(novels: list) -> Table:
    table = Table(title="Novels", box=box.ROUNDED, border_style="dim")
    table.add_column("ID", style="entity.id")
    table.add_column("Title", style="bold")
    table.add_column("Slug", style="accent")
    table.add_column("Status")
    table.add_column("State")
    table.add_column("Chapters", justify="right")

    for n in novels:
        color = _STATUS_COLORS.get(n.status, "white")
        table.add_row(
            n.id, n.title, n.slug,
            f"[{color}]{n.status.value}[/]",
            _state_label(n),
            str(n.total_chapters),
        )
    return table


def chapter_table(chapters: list, title: str = "Chapters") -> Table:
    table = Table(title=title, box=box.ROUNDED, border_style="dim")
    table.add_column("No.", style="chapter.num", justify="right")
    table.add_column("ID", style="entity.id")
    table.add_column("Title")
    table.add_column("Words", justify="right")
    table.add_column("State")

    for ch in chapters:
        table.add_row(str(ch.chapter_number), ch.id, ch.title or "-", str(ch.word_count), _state_label(ch))
    return table
