"""Atom feed projection of posts and the blog."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from photoblog import __version__
from photoblog.config import BlogConfig, OwnerConfig

if TYPE_CHECKING:
    from photoblog.blog.post import Post
    from photoblog.blog.services import PhotoBlog

# ---------------------------------------------------------------------------
# Feed models
# ---------------------------------------------------------------------------


class AtomPerson(BaseModel):
    name: str
    uri: str | None = None
    email: str | None = None


class AtomLink(BaseModel):
    href: str
    rel: str | None = None


class AtomGenerator(BaseModel):
    name: str = "photoblog"
    version: str = __version__


class AtomEntry(BaseModel):
    """One feed entry per post. ``content`` is the post URL."""

    id: str
    title: str
    link: str
    published: datetime | None = None
    updated: datetime | None = None
    rights: str
    summary: str | None = None
    author: AtomPerson
    content: str


class AtomFeed(BaseModel):
    id: str
    title: str
    subtitle: str = ""
    link: AtomLink
    updated: datetime
    author: AtomPerson
    generator: AtomGenerator = Field(default_factory=AtomGenerator)
    entry: list[AtomEntry] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------


def post_entry(post: Post, config: BlogConfig, now: datetime | None = None) -> AtomEntry:
    """Atom entry for a post. Rights default to full copyright.

    Raises:
        ConfigurationError: If site or owner configuration is missing.
    """
    site, owner = config.ensure_site()
    now = now or datetime.now(timezone.utc)
    url = f"{site.url}/{post.key}"

    return AtomEntry(
        id=url,
        title=post.name(),
        link=f"http://{site.domain}",
        published=post.created_on,
        updated=post.updated_on,
        rights=f"Copyright © {now.year} {owner.name}. All rights reserved.",
        summary=post.description,
        author=_author(owner),
        content=url,
    )


def blog_feed(blog: PhotoBlog, config: BlogConfig, now: datetime | None = None) -> AtomFeed:
    """Atom feed of all posts, newest first.

    The feed is as recent as its most recently updated post, or ``now``
    when no post carries an update time.
    """
    site, owner = config.ensure_site()
    now = now or datetime.now(timezone.utc)
    entries = [post_entry(p, config, now) for p in blog.posts]
    updated = max((e.updated for e in entries if e.updated is not None), default=now)

    return AtomFeed(
        id=site.url,
        title=site.title,
        subtitle=site.subtitle,
        link=AtomLink(href=site.url, rel="alternate"),
        updated=updated,
        author=_author(owner),
        entry=entries,
    )


def _author(owner: OwnerConfig) -> AtomPerson:
    return AtomPerson(
        name=owner.name,
        uri=owner.urls[0] if owner.urls else None,
        email=owner.email or None,
    )
