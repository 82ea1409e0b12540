"""CLI for inspecting a photo blog loaded from provider snapshots."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from photoblog.blog import PhotoBlog, Post, init_blog
from photoblog.config import BlogConfig, PostSort, load_config, merge_cli_overrides
from photoblog.errors import ConfigurationError, PhotoBlogError
from photoblog.providers import ProviderBindings
from photoblog.providers.snapshot import (
    SnapshotMapProvider,
    SnapshotPostProvider,
    load_snapshot,
)
from photoblog.syndication.atom import blog_feed

app = typer.Typer(
    name="photoblog",
    help="Load photo blog snapshots and inspect posts, series, and changes.",
)

console = Console()
logger = logging.getLogger(__name__)

SnapshotArg = Annotated[
    Path,
    typer.Argument(help="Provider snapshot (JSON).", exists=True, dir_okay=False),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from photoblog import __version__

        console.print(f"photoblog {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .photoblog.toml file."),
    ] = None,
    oldest_first: Annotated[
        Optional[bool],
        typer.Option(
            "--oldest-first/--newest-first",
            help="Order in which the provider lists posts.",
        ),
    ] = None,
    separator: Annotated[
        Optional[str],
        typer.Option("--separator", help="Separator between post title and subtitle."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Show debug logging."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Photo blog - series correlation and change detection for photo albums."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )

    sort = None
    if oldest_first is not None:
        sort = PostSort.OLDEST_FIRST if oldest_first else PostSort.NEWEST_FIRST

    try:
        config = load_config(config_path)
        ctx.obj = merge_cli_overrides(
            config,
            subtitle_separator=separator,
            provider_post_sort=sort,
        )
    except ConfigurationError as exc:
        _fail(exc)


def _load_blog(config: BlogConfig, snapshot: Path) -> tuple[PhotoBlog, ProviderBindings]:
    """Create the process blog bound to a snapshot and run one load."""
    data = load_snapshot(snapshot)
    providers = ProviderBindings(post=SnapshotPostProvider(data), map=SnapshotMapProvider(data))
    blog = init_blog(config, providers)
    asyncio.run(blog.load())
    return blog, providers


def _fail(exc: Exception) -> NoReturn:
    console.print(f"[red]Error:[/red] {exc}")
    raise typer.Exit(1)


def _key(post: Optional[Post]) -> str:
    if post is None:
        return "-"
    return post.key or ""


@app.command()
def posts(ctx: typer.Context, snapshot: SnapshotArg) -> None:
    """List posts newest first with their neighbours."""
    try:
        blog, _ = _load_blog(ctx.obj, snapshot)
    except PhotoBlogError as exc:
        _fail(exc)

    table = Table(title=f"{len(blog.posts)} posts")
    table.add_column("Key")
    table.add_column("Title")
    table.add_column("Part", justify="right")
    table.add_column("Previous")
    table.add_column("Next")

    for post in blog.posts:
        part = f"{post.part}/{post.total_parts}" if post.is_partial else ""
        table.add_row(post.key or "", post.name(), part, _key(post.previous), _key(post.next))

    console.print(table)


@app.command()
def series(ctx: typer.Context, snapshot: SnapshotArg) -> None:
    """Show detected series and their parts in order."""
    try:
        blog, _ = _load_blog(ctx.obj, snapshot)
    except PhotoBlogError as exc:
        _fail(exc)

    starts = [p for p in blog.posts if p.is_series_start]
    if not starts:
        console.print("[yellow]No series found.[/yellow]")
        raise typer.Exit(0)

    for start in starts:
        console.print(f"[bold]{start.title}[/bold] ({start.total_parts} parts)")
        post: Optional[Post] = start
        while post is not None:
            console.print(f"  {post.part}. {post.sub_title}  [dim]{post.key}[/dim]")
            post = post.next if post.next_is_part else None


@app.command()
def diff(
    ctx: typer.Context,
    old: SnapshotArg,
    new: SnapshotArg,
) -> None:
    """Load OLD, reload with NEW, and print the keys that changed."""
    try:
        blog, providers = _load_blog(ctx.obj, old)
        data = load_snapshot(new)
        # Tracks and posts must come from the same snapshot
        providers.post.snapshot = data
        providers.map.snapshot = data
        asyncio.run(blog.load())
    except PhotoBlogError as exc:
        _fail(exc)

    if not blog.changed_keys:
        console.print("[green]No changes.[/green]")
        return

    console.print(f"[bold]{len(blog.changed_keys)} changed key(s):[/bold]")
    for key in blog.changed_keys:
        console.print(f"  - {key}")


@app.command()
def feed(ctx: typer.Context, snapshot: SnapshotArg) -> None:
    """Print the Atom feed as JSON."""
    try:
        blog, _ = _load_blog(ctx.obj, snapshot)
        atom = blog_feed(blog, ctx.obj)
    except PhotoBlogError as exc:
        _fail(exc)

    console.print_json(atom.model_dump_json())


@app.command()
def category(ctx: typer.Context, snapshot: SnapshotArg, key: str) -> None:
    """Resolve a category key such as ``when/2016``."""
    try:
        blog, _ = _load_blog(ctx.obj, snapshot)
    except PhotoBlogError as exc:
        _fail(exc)

    found = blog.category_with_key(key)
    if found is None:
        console.print(f"[yellow]No category with key {key}[/yellow]")
        raise typer.Exit(1)

    console.print(f"[bold]{found.title}[/bold] ({found.key})")
    console.print(f"  Posts: {len(found.posts)}")
    for sub in found.subcategories:
        console.print(f"  - {sub.title} ({sub.key}): {len(sub.posts)} posts")
