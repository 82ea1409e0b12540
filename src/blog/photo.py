"""Photo entity and date outlier detection."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING, Any

from photoblog.blog.models import EXIF, PhotoSize
from photoblog.errors import MissingProviderError
from photoblog.shared.stats import DEFAULT_FENCE_DISTANCE, boundary

if TYPE_CHECKING:
    from photoblog.providers.base import PostProvider


class Photo:
    """A single photo within a post."""

    def __init__(
        self,
        id: str,
        index: int = 0,
        *,
        provider: PostProvider | None = None,
    ) -> None:
        self.id = id
        # Position of photo within post
        self.index = index
        self.source_url: str | None = None
        self.title: str | None = None
        self.description: str | None = None
        self.tags: set[str] = set()
        self.date_taken: datetime | None = None
        self.latitude: float = 0.0
        self.longitude: float = 0.0
        # Whether this is the post's main photo
        self.primary = False
        self.size: dict[str, PhotoSize] = {}
        self.preview: PhotoSize | None = None
        self.normal: PhotoSize | None = None
        self.big: PhotoSize | None = None
        # Taken date far from the rest of the post; such photos are left
        # off mini-maps so contextual shots don't zoom the map out
        self.outlier_date = False
        self.provider = provider
        self._exif: EXIF | None = None

    def __repr__(self) -> str:
        return f"Photo(id={self.id!r}, index={self.index})"

    @property
    def tag_list(self) -> str:
        """Comma-delimited, sorted list of all tags applied to the photo."""
        return ",".join(sorted(self.tags))

    async def exif(self) -> EXIF:
        """EXIF for this photo, fetched from the provider on first call.

        Raises:
            MissingProviderError: If no post provider is bound.
        """
        if self._exif is None:
            if self.provider is None:
                raise MissingProviderError("post")
            self._exif = await self.provider.exif(self.id)
        return self._exif

    def geo_json(self, part_key: str | None = None) -> dict[str, Any]:
        """GeoJSON point feature for the photo.

        Args:
            part_key: Series part of the owning post. Given only when
                rendering a single post so the map can link back to it.
        """
        preview = self.size.get("preview") or self.preview
        properties: dict[str, Any] = {"url": preview.url if preview else None}

        if part_key is not None:
            properties["title"] = self.title
            properties["partKey"] = part_key

        return {
            "type": "Feature",
            "properties": properties,
            "geometry": {
                "type": "Point",
                "coordinates": [self.longitude, self.latitude],
            },
        }


def identify_outliers(
    photos: Iterable[Photo], distance: float = DEFAULT_FENCE_DISTANCE
) -> list[Photo]:
    """Flag photos whose taken date lies outside the interquartile fence.

    Photos without a taken date are ignored. Nothing is flagged when no
    photo has a date.

    Returns:
        The photos that were flagged.
    """
    dated = [p for p in photos if p.date_taken is not None]
    fence = boundary([p.date_taken.timestamp() for p in dated], distance)  # type: ignore[union-attr]
    if fence is None:
        return []

    low, high = fence
    flagged: list[Photo] = []
    for photo in dated:
        taken = photo.date_taken.timestamp()  # type: ignore[union-attr]
        if taken < low or taken > high:
            photo.outlier_date = True
            flagged.append(photo)
    return flagged
