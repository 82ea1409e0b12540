"""The PhotoBlog aggregate: post collection, correlation, and change detection.

One blog exists per process. It is created explicitly with
``init_blog()`` at startup; constructing a second instance is an error.

None of the mutating methods (``begin_load``, ``add_post``,
``finish_load``, ``correlate_posts``, ``remove``, ``unload``) are safe
for concurrent use. The provider driving a load must await each step
before issuing the next.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import ClassVar

from photoblog.blog.category import CATEGORY_KEY_SEPARATOR, Category
from photoblog.blog.models import EXIF
from photoblog.blog.photo import Photo
from photoblog.blog.post import SERIES_KEY_SEPARATOR, Post
from photoblog.config import BlogConfig
from photoblog.errors import BlogNotInitializedError, DuplicateBlogError
from photoblog.providers.base import FeatureCollection, PostProvider, ProviderBindings

logger = logging.getLogger(__name__)


class PhotoBlog:
    """Photos grouped into posts ("sets" or "albums" at most providers),
    which are in turn assigned categories.

    ``posts`` is always newest-first regardless of the order the provider
    supplies them in; the configured ``provider_post_sort`` decides
    whether added posts are appended or prepended.
    """

    _instance: ClassVar[PhotoBlog | None] = None

    def __init__(
        self,
        config: BlogConfig | None = None,
        providers: ProviderBindings | None = None,
    ) -> None:
        if PhotoBlog._instance is not None:
            raise DuplicateBlogError("PhotoBlog instance already exists")

        self.config = config or BlogConfig()
        self.providers = providers or ProviderBindings()
        # Categories keyed by their slug-style key
        self.categories: dict[str, Category] = {}
        # Indexed list rather than a set so posts can be walked as a linked list
        self.posts: list[Post] = []
        # Photo tag slugs mapped to their full names
        self.tags: dict[str, str] = {}
        # Categories and post summaries have been loaded
        self.loaded = False
        # A provider is mid-load; lookups go to ``post_cache``
        self.is_loading = False
        # All post details have been loaded
        self.post_info_loaded = False
        # Keys touched by the most recent reload, for cache invalidation
        self.changed_keys: list[str] = []
        # Previous posts, reset, kept for lookup while ``posts`` is rebuilt
        self.post_cache: list[Post] = []
        # Post keys present before the current load
        self.had_post_keys: list[str] = []
        self._reverse_post_order = self.config.reverse_post_order

        PhotoBlog._instance = self

    def __repr__(self) -> str:
        return f"PhotoBlog(posts={len(self.posts)}, categories={len(self.categories)})"

    # ── Load lifecycle ──────────────────────────────────────────

    async def load(self, empty_if_loaded: bool = False) -> PhotoBlog:
        """Load blog data through the configured post provider.

        Args:
            empty_if_loaded: Discard existing data first if already loaded.
        """
        provider = self._provider()
        if self.loaded and empty_if_loaded:
            self.empty()
        return await provider.photo_blog(self)

    def begin_load(self) -> PhotoBlog:
        """Set aside current posts so a provider can rebuild the sequence.

        Existing keys are recorded for change detection and every post is
        reset and moved into ``post_cache``, where lookups find it until
        ``finish_load()``.
        """
        self.is_loading = True
        self.had_post_keys = [p.key for p in self.posts if p.key is not None]
        self.post_cache = [p.reset() for p in self.posts]
        self.posts = []
        self.changed_keys = []
        self._reverse_post_order = self.config.reverse_post_order
        logger.debug(
            "Began blog load with %d cached posts (reverse=%s)",
            len(self.post_cache),
            self._reverse_post_order,
        )
        return self

    def add_post(self, post: Post) -> PhotoBlog:
        """Add a post and link it with its chronological neighbour.

        No-op if a post with the same ID is already present. Neighbours are
        linked only when both posts are chronological. Posts without
        provider bindings or their own configuration inherit the blog's.
        """
        if any(existing.id == post.id for existing in self.posts):
            return self

        if post.providers is None:
            post.providers = self.providers
        if not post.config_bound:
            post.bind_config(self.config)

        also_cache = self.is_loading and not any(c.id == post.id for c in self.post_cache)
        link_adjacent = post.chronological and len(self.posts) > 0

        if self._reverse_post_order:
            # Provider lists oldest first, so each post is newer than the last
            self.posts.insert(0, post)
            if also_cache:
                self.post_cache.insert(0, post)
            if link_adjacent:
                older = self.posts[1]
                if older.chronological:
                    post.previous = older
                    older.next = post
        else:
            # [newest, older1, older2, oldest]
            self.posts.append(post)
            if also_cache:
                self.post_cache.append(post)
            if link_adjacent:
                newer = self.posts[-2]
                if newer.chronological:
                    post.next = newer
                    newer.previous = post
        return self

    def add_all(self, *posts: Post) -> PhotoBlog:
        """Replace posts in one load cycle and identify changes."""
        self.begin_load()
        for post in posts:
            self.add_post(post)
        return self.finish_load()

    def finish_load(self) -> PhotoBlog:
        """Correlate series and record keys changed since the previous load.

        Only posts that are new relative to the previous load are reported,
        together with their categories and neighbours whose links changed.
        Posts that disappeared are not reported.
        """
        self.correlate_posts()

        if self.had_post_keys:
            had = set(self.had_post_keys)
            changed: list[str] = []
            for post in self.posts:
                if post.key in had:
                    continue
                logger.info('Found new post "%s" (%s)', post.title, post.key)
                candidates = [post.key, *post.categories.keys()]
                if post.next is not None:
                    candidates.append(post.next.key)
                if post.previous is not None:
                    candidates.append(post.previous.key)
                for key in candidates:
                    if key is not None and key not in changed:
                        changed.append(key)
            self.changed_keys = changed
            self.had_post_keys = []

        self.post_cache = []
        self.is_loading = False
        self.loaded = True
        logger.debug(
            "Finished blog load: %d posts, %d changed keys",
            len(self.posts),
            len(self.changed_keys),
        )
        return self

    def correlate_posts(self) -> PhotoBlog:
        """Group consecutive posts sharing a title into numbered series.

        Walks from the oldest post toward the newest so each series is
        built forward in time. A post with a subtitle but no same-titled
        neighbour is ungrouped. Unrelated posts with identical titles are
        grouped too; titles are the only signal.
        """
        i = len(self.posts) - 1
        while i >= 0:
            post = self.posts[i]
            i -= 1

            if not post.sub_title:
                continue
            if post.next is None:
                post.ungroup()
                continue

            parts = [post]
            while post.next is not None and post.next.title == post.title:
                post = post.next
                parts.append(post)
                i -= 1

            if len(parts) == 1:
                post.ungroup()
                continue

            parts[0].make_series_start()
            total = len(parts)
            for index, part in enumerate(parts):
                part.part = index + 1
                part.total_parts = total
                part.is_partial = True
                part.previous_is_part = index > 0
                part.next_is_part = index < total - 1
        return self

    # ── Lookup ──────────────────────────────────────────────────

    def create_post(
        self, id: str, title: str, *, chronological: bool = True
    ) -> Post:
        """Build a post bound to this blog's configuration and providers."""
        return Post(
            id,
            title,
            chronological=chronological,
            config=self.config,
            providers=self.providers,
        )

    def post_with_id(self, id: str | None) -> Post | None:
        """Post with the given provider ID, or None."""
        if id is None:
            return None
        for post in self._searchable_posts():
            if post.id == id:
                return post
        return None

    def post_with_key(self, key: str, part_key: str | None = None) -> Post | None:
        """Post with the given slug, or None.

        Args:
            key: Post key, or series key when ``part_key`` is given.
            part_key: Optional part slug combined into a compound key.
        """
        if part_key is not None:
            key = f"{key}{SERIES_KEY_SEPARATOR}{part_key}"
        for post in self._searchable_posts():
            if post.has_key(key):
                return post
        return None

    def post_keys(self) -> list[str]:
        return [p.key for p in self.posts if p.key is not None]

    def add_category(self, category: Category) -> Category:
        """Register a root category."""
        self.categories[category.key] = category
        return category

    def category_with_key(self, key: str) -> Category | None:
        """Category with the given key, or None.

        Subcategory keys are fully qualified, so a compound key is matched
        against the root's subcategories as a whole.
        """
        root_key = key.split(CATEGORY_KEY_SEPARATOR, 1)[0]
        for category in self.categories.values():
            if category.key == root_key:
                return category if key == root_key else category.get_subcategory(key)
        return None

    def category_keys(self, *with_names: str) -> list[str]:
        """Keys of all categories and subcategories.

        Args:
            *with_names: Only include categories with these titles (or
                keys), searching subcategories as well.
        """
        keys: list[str] = []
        if with_names:
            for name in with_names:
                for category in self.categories.values():
                    sub = category.get_subcategory(name)
                    if category.title == name or category.key == name:
                        keys.append(category.key)
                    elif sub is not None:
                        keys.append(sub.key)
        else:
            for category in self.categories.values():
                keys.append(category.key)
                keys.extend(s.key for s in category.subcategories)
        return keys

    # ── Removal ─────────────────────────────────────────────────

    def empty(self) -> PhotoBlog:
        """Remove all blog data."""
        self.categories.clear()
        self.posts = []
        self.tags.clear()
        self.loaded = False
        self.post_info_loaded = False
        return self

    def unload(self, *keys: str) -> PhotoBlog:
        """Discard details of the given posts so they reload on next access."""
        for key in keys:
            post = self.post_with_key(key)
            if post is not None:
                post.empty()
        return self

    def remove(self, *keys: str) -> PhotoBlog:
        """Remove posts, detaching neighbours and categories."""
        for key in keys:
            post = self.post_with_key(key)
            if post is None or post not in self.posts:
                continue
            self.posts.remove(post)
            if post.next is not None:
                post.next.previous = None
            if post.previous is not None:
                post.previous.next = None
            for category in self.categories.values():
                category.remove_post(post)
        return self

    # ── Photos ──────────────────────────────────────────────────

    async def photos(self) -> list[Photo]:
        """All photos in all posts, de-duplicated by ID."""
        per_post = await asyncio.gather(*(p.get_photos() for p in self.posts))
        unique: dict[str, Photo] = {}
        for photos in per_post:
            for photo in photos:
                unique.setdefault(photo.id, photo)
        return list(unique.values())

    async def geo_json(self, geo: FeatureCollection | None = None) -> FeatureCollection:
        """Append photo point features to ``geo`` or a new collection."""
        if geo is None:
            geo = {"type": "FeatureCollection", "features": []}
        photos = await self.photos()
        geo["features"] = [
            *geo.get("features", []),
            *(p.geo_json() for p in photos if p.latitude > 0),
        ]
        return geo

    async def get_exif(self, photo_id: str) -> EXIF:
        """EXIF for a photo when no Photo instance is at hand."""
        return await self._provider().exif(photo_id)

    async def post_with_photo(self, photo: Photo | str) -> Post | None:
        """First post containing the photo."""
        photo_id = photo if isinstance(photo, str) else photo.id
        post_id = await self._provider().post_id_with_photo_id(photo_id)
        return self.post_with_id(post_id)

    async def photos_with_tags(self, tags: str | Iterable[str]) -> list[Photo]:
        return await self._provider().photos_with_tags(tags)

    def photo_tag_list(self, photos: Iterable[Photo]) -> str | None:
        """Replace photo tag slugs with full names and list the unique names.

        Slugs missing from ``tags`` are dropped from the photo; providers
        may intentionally exclude some tags from the blog.
        """
        names: dict[str, None] = {}
        for photo in photos:
            resolved = {self.tags[slug] for slug in photo.tags if self.tags.get(slug)}
            for slug in sorted(photo.tags):
                name = self.tags.get(slug)
                if name:
                    names.setdefault(name, None)
            photo.tags = resolved
        return ", ".join(names) if names else None

    # ── Internal ────────────────────────────────────────────────

    def _searchable_posts(self) -> list[Post]:
        return self.post_cache if self.is_loading else self.posts

    def _provider(self) -> PostProvider:
        return self.providers.require_post()


def init_blog(
    config: BlogConfig | None = None,
    providers: ProviderBindings | None = None,
) -> PhotoBlog:
    """Create the process-wide blog.

    Raises:
        DuplicateBlogError: If the blog was already created.
    """
    return PhotoBlog(config, providers)


def get_blog() -> PhotoBlog:
    """Return the process-wide blog.

    Raises:
        BlogNotInitializedError: If ``init_blog()`` has not been called.
    """
    if PhotoBlog._instance is None:
        raise BlogNotInitializedError("PhotoBlog has not been initialized")
    return PhotoBlog._instance
