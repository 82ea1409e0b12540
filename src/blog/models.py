"""Value objects attached to posts and photos.

All Pydantic models live here. No I/O, no provider calls. Entities
with identity (posts, photos, categories) are plain classes in their
own modules because they reference each other.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Media
# ---------------------------------------------------------------------------


class PhotoSize(BaseModel):
    """URL of a specific photo size."""

    url: str | None = None
    width: int = 0
    height: int = 0

    @property
    def is_empty(self) -> bool:
        return self.url is None and self.width == 0


class VideoInfo(BaseModel):
    """Video associated with a post."""

    id: str
    width: int = 0
    height: int = 0

    @property
    def empty(self) -> bool:
        return self.width == 0 or self.height == 0


class EXIF(BaseModel):
    """EXIF data for a photo as supplied by the provider."""

    artist: str = ""
    compensation: str = ""
    time: str = ""
    f_number: float = 0.0
    focal_length: float = 0.0
    iso: int = 0
    lens: str = ""
    model: str = ""
    software: str = ""
    # Whether raw values have been formatted
    sanitized: bool = False


# ---------------------------------------------------------------------------
# Map
# ---------------------------------------------------------------------------


class Location(BaseModel):
    """A point given as longitude and latitude."""

    longitude: float
    latitude: float

    def as_coordinates(self) -> list[float]:
        """GeoJSON ordering: ``[longitude, latitude]``."""
        return [self.longitude, self.latitude]


class MapBounds(BaseModel):
    """South-west and north-east corners as ``[longitude, latitude]``."""

    sw: list[float] = Field(default_factory=lambda: [0.0, 0.0])
    ne: list[float] = Field(default_factory=lambda: [0.0, 0.0])
