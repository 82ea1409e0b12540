"""Provider contracts the blog model is loaded through."""

from photoblog.providers.base import (
    FeatureCollection,
    MapProvider,
    PostProvider,
    ProviderBindings,
    VideoProvider,
)

__all__ = [
    "FeatureCollection",
    "MapProvider",
    "PostProvider",
    "ProviderBindings",
    "VideoProvider",
]
