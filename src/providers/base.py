"""Provider contracts the blog model loads itself through.

Providers are injected once (see ``ProviderBindings``) rather than
looked up on every access. A capability requested from a provider that
was never bound is a wiring mistake and fails immediately.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, TextIO

from pydantic import BaseModel, ConfigDict

from photoblog.errors import MissingProviderError

if TYPE_CHECKING:
    from photoblog.blog.models import EXIF
    from photoblog.blog.photo import Photo
    from photoblog.blog.post import Post
    from photoblog.blog.services import PhotoBlog

# GeoJSON FeatureCollection as a plain mapping
FeatureCollection = dict[str, Any]


class PostProvider(ABC):
    """Loads blog structure and lazily fetches post details."""

    @abstractmethod
    async def photo_blog(self, blog: PhotoBlog) -> PhotoBlog:
        """Populate categories and post summaries.

        Implementations drive the load cycle: ``blog.begin_load()``, one
        ``blog.add_post()`` per post, then ``blog.finish_load()``.
        """

    @abstractmethod
    async def exif(self, photo_id: str) -> EXIF:
        """Retrieve EXIF for a single photo."""

    @abstractmethod
    async def post_id_with_photo_id(self, photo_id: str) -> str | None:
        """Find the ID of the post containing the photo."""

    @abstractmethod
    async def photos_with_tags(self, tags: str | Iterable[str]) -> list[Photo]:
        """All photos carrying any of the given tags."""

    @abstractmethod
    async def post_info(self, post: Post) -> Post:
        """Fill in post details such as description and dates."""

    @abstractmethod
    async def post_photos(self, post: Post) -> list[Photo]:
        """Retrieve the photos of a post."""


class MapProvider(ABC):
    """Loads map data such as GPS tracks."""

    @abstractmethod
    async def track(self, post_key: str) -> FeatureCollection | None:
        """GeoJSON track for a post.

        Raises an error whose message contains ``not found`` when the
        post has no track.
        """

    @abstractmethod
    async def gpx(self, post_key: str, stream: TextIO) -> None:
        """Write GPX for a post to ``stream``; returns when writing is done."""


class VideoProvider(ABC):  # noqa: B024
    """Loads videos associated with a post."""


class ProviderBindings(BaseModel):
    """Providers configured for the blog and its entities."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    post: PostProvider | None = None
    map: MapProvider | None = None
    video: VideoProvider | None = None

    def require_post(self) -> PostProvider:
        """Return the post provider or raise MissingProviderError."""
        if self.post is None:
            raise MissingProviderError("post")
        return self.post

    def require_map(self) -> MapProvider:
        """Return the map provider or raise MissingProviderError."""
        if self.map is None:
            raise MissingProviderError("map")
        return self.map

    def require_video(self) -> VideoProvider:
        """Return the video provider or raise MissingProviderError."""
        if self.video is None:
            raise MissingProviderError("video")
        return self.video
