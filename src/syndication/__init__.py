"""Read-only projections of blog entities for feeds and linked data."""

from photoblog.syndication.atom import AtomEntry, AtomFeed, blog_feed, post_entry
from photoblog.syndication.json_ld import category_ld, owner_ld, post_ld, video_ld

__all__ = [
    "AtomEntry",
    "AtomFeed",
    "blog_feed",
    "category_ld",
    "owner_ld",
    "post_entry",
    "post_ld",
    "video_ld",
]
