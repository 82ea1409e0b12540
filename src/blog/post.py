"""Post entity: a provider album with title, series, and adjacency state."""

from __future__ import annotations

import asyncio
import re
from datetime import datetime
from typing import TYPE_CHECKING, TextIO

from photoblog.blog.models import Location, MapBounds, VideoInfo
from photoblog.blog.photo import Photo
from photoblog.config import BlogConfig
from photoblog.errors import MissingProviderError
from photoblog.shared.text import slugify

if TYPE_CHECKING:
    from photoblog.providers.base import (
        FeatureCollection,
        MapProvider,
        PostProvider,
        ProviderBindings,
    )

# Separates series and part in a compound key, e.g. ``brother-ride/day-10``.
# Independent of the subtitle separator shown in titles.
SERIES_KEY_SEPARATOR = "/"

# Posts with more photos than the marker limit skip this many lead photos,
# which are usually preparation shots
_LEAD_PHOTOS_SKIPPED = 5


def is_not_found(exc: BaseException) -> bool:
    """Whether a provider failure means the requested item does not exist."""
    return "not found" in str(exc)


class Post:
    """A provider album ("set") shown as a blog post.

    Posts are linked to chronological neighbours through ``next`` (newer)
    and ``previous`` (older). Those references carry no ownership: the
    blog's ordered ``posts`` list owns post lifetime.
    """

    def __init__(
        self,
        id: str | None = None,
        title: str | None = None,
        *,
        chronological: bool = True,
        config: BlogConfig | None = None,
        providers: ProviderBindings | None = None,
    ) -> None:
        self.id = id
        # URL slug; compound (``series/part``) for series members
        self.key: str | None = None
        self.title: str | None = None
        self.sub_title: str | None = None
        self.original_title: str | None = None
        self.description: str | None = None
        # Description including computed photo and video counts
        self.long_description: str | None = None
        self.happened_on: datetime | None = None
        self.created_on: datetime | None = None
        self.updated_on: datetime | None = None
        # Photos taken in one time span, as opposed to a themed collection
        self.chronological = chronological
        # Featured in main navigation
        self.feature = False
        self.big_thumb_url: str | None = None
        self.small_thumb_url: str | None = None
        self.photos: list[Photo] = []
        self.photo_count = 0
        self.photo_tag_list: str | None = None
        self.photo_locations: list[list[float]] | None = None
        self.bounds: MapBounds | None = None
        self.centroid: Location | None = None
        self.cover_photo: Photo | None = None
        self.video: VideoInfo | None = None
        # Category titles keyed by category key
        self.categories: dict[str, str] = {}

        self.info_loaded = False
        self.photos_loaded = False
        self.tried_track = False
        self.has_track = False

        self.next: Post | None = None
        self.previous: Post | None = None

        # Series state; ``part`` is 1-based and 0 outside a series
        self.series_key: str | None = None
        self.part_key: str | None = None
        self.part = 0
        self.total_parts = 0
        self.is_partial = False
        self.is_series_start = False
        self.previous_is_part = False
        self.next_is_part = False

        self.config = config or BlogConfig()
        # False until a configuration is given or adopted from a blog
        self.config_bound = config is not None
        self.providers = providers
        self._track: FeatureCollection | None = None

        if title is not None:
            self.infer_title_and_key(title)

    def __repr__(self) -> str:
        return f"Post(id={self.id!r}, key={self.key!r})"

    # ── Titles and keys ─────────────────────────────────────────

    def infer_title_and_key(self, title: str) -> Post:
        """Set the provider title and derive subtitle, series, and keys.

        A title containing the configured subtitle separator is split into
        ``title`` and ``sub_title`` and receives a compound key. Calling
        again with the same title reproduces the same fields.
        """
        self.original_title = title
        pattern = re.escape(self.config.subtitle_separator) + r"\s*"
        parts = re.split(pattern, title)

        if len(parts) > 1 and parts[1]:
            self.title = parts[0]
            self.sub_title = parts[1]
            self.series_key = slugify(self.title)
            self.part_key = slugify(self.sub_title)
            self.key = self.series_key + SERIES_KEY_SEPARATOR + self.part_key
        else:
            self.title = title
            self.sub_title = None
            self.series_key = None
            self.part_key = None
            self.key = slugify(title)
        return self

    def bind_config(self, config: BlogConfig) -> Post:
        """Adopt a blog configuration and re-split the title with its separator."""
        self.config = config
        self.config_bound = True
        if self.original_title is not None:
            self.infer_title_and_key(self.original_title)
        return self

    def has_key(self, key: str) -> bool:
        """Whether ``key`` addresses this post.

        The first post of a series is keyed by the bare series key but is
        still found by its full compound key: ``series-1/part-1`` matches
        the post whose key is ``series-1``.
        """
        if self.key == key:
            return True
        return (
            self.part_key is not None
            and key == f"{self.series_key}{SERIES_KEY_SEPARATOR}{self.part_key}"
        )

    def name(self) -> str:
        """Title with subtitle appended for series members."""
        title = self.title or ""
        if self.is_partial and self.sub_title:
            return f"{title}{self.config.subtitle_separator} {self.sub_title}"
        return title

    # ── Series state ────────────────────────────────────────────

    def make_series_start(self) -> Post:
        """Flag as first post of a series, addressed by the bare series key."""
        self.is_series_start = True
        self.key = self.series_key
        return self

    def ungroup(self) -> Post:
        """Drop series membership inferred from a title that only looks serial.

        Other members of a genuine series are not updated.
        """
        if self.original_title is not None:
            self.title = self.original_title
            self.key = slugify(self.original_title)
        self.sub_title = None
        self.series_key = None
        self.part_key = None
        return self._remove_from_series()

    def reset(self) -> Post:
        """Return to the pre-correlation state: no series, no neighbours."""
        if self.original_title is not None:
            self.infer_title_and_key(self.original_title)
        self.previous = None
        self.next = None
        return self._remove_from_series()

    def _remove_from_series(self) -> Post:
        self.part = 0
        self.total_parts = 0
        self.is_series_start = False
        self.is_partial = False
        self.next_is_part = False
        self.previous_is_part = False
        return self

    # ── Lazy detail loading ─────────────────────────────────────

    @property
    def has_categories(self) -> bool:
        return len(self.categories) > 0

    async def get_info(self) -> Post:
        """Load post details from the provider unless already loaded."""
        if not self.info_loaded:
            await self._post_provider().post_info(self)
            self.info_loaded = True
        return self

    async def get_photos(self) -> list[Photo]:
        """Load post photos from the provider unless already loaded."""
        if not self.photos_loaded:
            self.photos = await self._post_provider().post_photos(self)
            self.photos_loaded = True
        return self.photos

    async def ensure_loaded(self) -> tuple[Post, list[Photo]]:
        """Ensure details and photos are both loaded."""
        post, photos = await asyncio.gather(self.get_info(), self.get_photos())
        return post, photos

    def empty(self) -> Post:
        """Discard loaded details so they are fetched again on next access."""
        self.video = None
        self.created_on = None
        self.updated_on = None
        self.photo_count = 0
        self.description = None
        self.cover_photo = None
        self.big_thumb_url = None
        self.small_thumb_url = None
        self.info_loaded = False
        self.tried_track = False
        self._track = None

        self.photos = []
        self.bounds = None
        self.centroid = None
        self.happened_on = None
        self.photo_tag_list = None
        self.photo_locations = None
        self.long_description = None
        self.photos_loaded = False
        return self

    # ── Map ─────────────────────────────────────────────────────

    def update_photo_locations(self) -> None:
        """Recompute photo coordinates, bounds, and centroid from ``photos``.

        The first photo is always skipped. Posts with more photos than
        ``max_photo_markers_on_map`` skip the first five and are capped
        at that many markers.
        """
        limit = self.config.max_photo_markers_on_map
        start = 1
        total = len(self.photos)

        if total > limit:
            start = _LEAD_PHOTOS_SKIPPED
            total = min(limit + _LEAD_PHOTOS_SKIPPED, len(self.photos))

        locations: list[list[float]] = []
        bounds = MapBounds()

        for photo in self.photos[start:total]:
            if photo.latitude <= 0:
                continue
            lon, lat = photo.longitude, photo.latitude
            locations.append([round(lon, 5), round(lat, 5)])
            if bounds.sw[0] == 0 or bounds.sw[0] > lon:
                bounds.sw[0] = lon
            if bounds.sw[1] == 0 or bounds.sw[1] > lat:
                bounds.sw[1] = lat
            if bounds.ne[0] == 0 or bounds.ne[0] < lon:
                bounds.ne[0] = lon
            if bounds.ne[1] == 0 or bounds.ne[1] < lat:
                bounds.ne[1] = lat

        self.photo_locations = locations or None
        self.bounds = bounds
        self.centroid = _centroid(locations)

    async def geo_json(self) -> FeatureCollection:
        """Track and photo features for the post map.

        The track is requested once. A track that is "not found" leaves
        ``has_track`` False; any other provider failure propagates.
        """
        if not self.tried_track:
            provider = self._map_provider()
            try:
                self._track = await provider.track(self.key or "")
            except Exception as exc:
                if not is_not_found(exc):
                    raise
                self._track = None
            self.tried_track = True

        self.has_track = self._track is not None
        features = list(self._track["features"]) if self._track else []
        features.extend(p.geo_json(self.part_key) for p in self.photos)
        return {"type": "FeatureCollection", "features": features}

    async def gpx(self, stream: TextIO) -> None:
        """Write the post GPX track to ``stream``.

        A "not found" failure records that no track exists before being
        re-raised so the caller can respond.
        """
        provider = self._map_provider()
        try:
            await provider.gpx(self.key or "", stream)
        except Exception as exc:
            if is_not_found(exc):
                self.tried_track = True
                self.has_track = False
            raise

    # ── Providers ───────────────────────────────────────────────

    def _post_provider(self) -> PostProvider:
        if self.providers is None:
            raise MissingProviderError("post")
        return self.providers.require_post()

    def _map_provider(self) -> MapProvider:
        if self.providers is None:
            raise MissingProviderError("map")
        return self.providers.require_map()


def _centroid(locations: list[list[float]]) -> Location | None:
    """Mean position of ``[longitude, latitude]`` pairs."""
    if not locations:
        return None
    count = len(locations)
    return Location(
        longitude=sum(loc[0] for loc in locations) / count,
        latitude=sum(loc[1] for loc in locations) / count,
    )
