"""Post and map providers backed by a local JSON snapshot.

A snapshot is a provider export: tags, categories, posts with their
photos, EXIF by photo ID, and GeoJSON tracks by post key. Posts are
listed in the provider's own order, which the blog configuration
declares through ``provider_post_sort``.
"""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

from pydantic import BaseModel, Field, ValidationError

from photoblog.blog.category import Category
from photoblog.blog.models import EXIF, PhotoSize, VideoInfo
from photoblog.blog.photo import Photo, identify_outliers
from photoblog.errors import ProviderError
from photoblog.providers.base import FeatureCollection, MapProvider, PostProvider

if TYPE_CHECKING:
    from photoblog.blog.post import Post
    from photoblog.blog.services import PhotoBlog

logger = logging.getLogger(__name__)

GPX_NAMESPACE = "http://www.topografix.com/GPX/1/1"

# ---------------------------------------------------------------------------
# Snapshot models
# ---------------------------------------------------------------------------


class SnapshotPhoto(BaseModel):
    """A photo as exported by the provider."""

    id: str
    title: str | None = None
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    latitude: float = 0.0
    longitude: float = 0.0
    date_taken: datetime | None = None
    primary: bool = False
    sizes: dict[str, PhotoSize] = Field(default_factory=dict)


class SnapshotPost(BaseModel):
    """A post (album) as exported by the provider."""

    id: str
    title: str
    chronological: bool = True
    feature: bool = False
    description: str | None = None
    created_on: datetime | None = None
    updated_on: datetime | None = None
    # Fully qualified category keys, e.g. ``when/2016``
    categories: list[str] = Field(default_factory=list)
    photos: list[SnapshotPhoto] = Field(default_factory=list)
    video: VideoInfo | None = None


class SnapshotCategory(BaseModel):
    """A root category and its direct subcategories (own keys only)."""

    key: str
    title: str
    subcategories: list[SnapshotCategory] = Field(default_factory=list)


class Snapshot(BaseModel):
    """Complete provider export."""

    tags: dict[str, str] = Field(default_factory=dict)
    categories: list[SnapshotCategory] = Field(default_factory=list)
    posts: list[SnapshotPost] = Field(default_factory=list)
    exif: dict[str, EXIF] = Field(default_factory=dict)
    tracks: dict[str, dict[str, Any]] = Field(default_factory=dict)


def load_snapshot(path: Path) -> Snapshot:
    """Read and validate a snapshot file.

    Raises:
        ProviderError: If the file is missing, unreadable, or malformed.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return Snapshot.model_validate(raw)
    except FileNotFoundError as exc:
        raise ProviderError(f"Snapshot {path} not found") from exc
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        raise ProviderError(f"Invalid snapshot {path}: {exc}") from exc


# ---------------------------------------------------------------------------
# Post provider
# ---------------------------------------------------------------------------


class SnapshotPostProvider(PostProvider):
    """Serves blog structure and post details from a snapshot."""

    def __init__(self, snapshot: Snapshot) -> None:
        self.snapshot = snapshot
        self._blog: PhotoBlog | None = None

    @classmethod
    def from_file(cls, path: Path) -> SnapshotPostProvider:
        return cls(load_snapshot(path))

    async def photo_blog(self, blog: PhotoBlog) -> PhotoBlog:
        """Run a full load cycle on ``blog``.

        Posts already known from a previous load are found through the
        blog's load-scoped cache and reused rather than rebuilt.
        """
        self._blog = blog
        blog.begin_load()
        blog.tags = dict(self.snapshot.tags)
        blog.categories = {}

        for data in self.snapshot.categories:
            root = Category(data.key, data.title)
            for sub in data.subcategories:
                root.add(Category(sub.key, sub.title))
            blog.add_category(root)

        for data in self.snapshot.posts:
            post = blog.post_with_id(data.id)
            if post is None:
                post = blog.create_post(data.id, data.title, chronological=data.chronological)
            else:
                if post.original_title != data.title:
                    post.infer_title_and_key(data.title)
                post.chronological = data.chronological
            post.feature = data.feature
            post.categories = {}

            for key in data.categories:
                category = blog.category_with_key(key)
                if category is None:
                    logger.warning("Post %s references unknown category %s", data.id, key)
                    continue
                category.add_post(post)

            blog.add_post(post)

        blog.finish_load()
        logger.info("Loaded %d posts from snapshot", len(blog.posts))
        return blog

    async def exif(self, photo_id: str) -> EXIF:
        if photo_id not in self.snapshot.exif:
            raise ProviderError(f"EXIF for photo {photo_id} not found")
        return self.snapshot.exif[photo_id]

    async def post_id_with_photo_id(self, photo_id: str) -> str | None:
        for data in self.snapshot.posts:
            if any(p.id == photo_id for p in data.photos):
                return data.id
        return None

    async def photos_with_tags(self, tags: str | Iterable[str]) -> list[Photo]:
        wanted = {tags} if isinstance(tags, str) else set(tags)
        photos: list[Photo] = []
        for data in self.snapshot.posts:
            for index, photo in enumerate(data.photos):
                if wanted.intersection(photo.tags):
                    photos.append(self._build_photo(photo, index))
        return photos

    async def post_info(self, post: Post) -> Post:
        data = self._post_data(post)
        post.description = data.description
        post.created_on = data.created_on
        post.updated_on = data.updated_on
        post.video = data.video
        post.feature = data.feature
        post.photo_count = len(data.photos)

        summary = f"{post.photo_count} photos"
        if data.video is not None and not data.video.empty:
            summary += " and one video"
        post.long_description = (
            f"{data.description} ({summary})" if data.description else summary
        )

        primary = next((p for p in data.photos if p.primary), None)
        if primary is not None:
            big = primary.sizes.get("big") or primary.sizes.get("normal")
            small = primary.sizes.get("thumb") or primary.sizes.get("preview")
            post.big_thumb_url = big.url if big else None
            post.small_thumb_url = small.url if small else None
        return post

    async def post_photos(self, post: Post) -> list[Photo]:
        data = self._post_data(post)
        photos = [self._build_photo(p, index) for index, p in enumerate(data.photos)]

        identify_outliers(photos)
        post.photos = photos
        post.cover_photo = next((p for p in photos if p.primary), photos[0] if photos else None)
        taken = [p.date_taken for p in photos if p.date_taken is not None and not p.outlier_date]
        post.happened_on = min(taken) if taken else None
        post.update_photo_locations()
        if self._blog is not None:
            post.photo_tag_list = self._blog.photo_tag_list(photos)
        return photos

    def _post_data(self, post: Post) -> SnapshotPost:
        for data in self.snapshot.posts:
            if data.id == post.id:
                return data
        raise ProviderError(f"Post {post.id} not found")

    def _build_photo(self, data: SnapshotPhoto, index: int) -> Photo:
        photo = Photo(data.id, index, provider=self)
        photo.title = data.title
        photo.description = data.description
        photo.tags = set(data.tags)
        photo.latitude = data.latitude
        photo.longitude = data.longitude
        photo.date_taken = data.date_taken
        photo.primary = data.primary
        photo.size = dict(data.sizes)
        photo.preview = data.sizes.get("preview")
        photo.normal = data.sizes.get("normal")
        photo.big = data.sizes.get("big")
        return photo


# ---------------------------------------------------------------------------
# Map provider
# ---------------------------------------------------------------------------


class SnapshotMapProvider(MapProvider):
    """Serves GPS tracks stored in a snapshot."""

    def __init__(self, snapshot: Snapshot) -> None:
        self.snapshot = snapshot

    async def track(self, post_key: str) -> FeatureCollection | None:
        if post_key not in self.snapshot.tracks:
            raise ProviderError(f"Track for {post_key} not found")
        return self.snapshot.tracks[post_key]

    async def gpx(self, post_key: str, stream: TextIO) -> None:
        track = await self.track(post_key)
        stream.write(render_gpx(post_key, track or {}))


def render_gpx(name: str, track: FeatureCollection) -> str:
    """Render line geometries of a GeoJSON collection as a GPX document."""
    root = ET.Element("gpx", {"version": "1.1", "creator": "photoblog", "xmlns": GPX_NAMESPACE})
    trk = ET.SubElement(root, "trk")
    ET.SubElement(trk, "name").text = name

    for segment in _line_segments(track):
        trkseg = ET.SubElement(trk, "trkseg")
        for point in segment:
            attrs = {"lat": str(point[1]), "lon": str(point[0])}
            trkpt = ET.SubElement(trkseg, "trkpt", attrs)
            if len(point) > 2:
                ET.SubElement(trkpt, "ele").text = str(point[2])

    return ET.tostring(root, encoding="unicode", xml_declaration=True)


def _line_segments(track: FeatureCollection) -> list[list[list[float]]]:
    segments: list[list[list[float]]] = []
    for feature in track.get("features", []):
        geometry = feature.get("geometry") or {}
        kind = geometry.get("type")
        if kind == "LineString":
            segments.append(geometry["coordinates"])
        elif kind == "MultiLineString":
            segments.extend(geometry["coordinates"])
    return segments
