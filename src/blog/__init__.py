"""In-memory photo blog model.

Posts, photos, and categories loaded through a provider, with
chronological adjacency and series grouping computed after each load
and the keys changed by a reload collected for cache invalidation.
"""

from photoblog.blog.category import Category
from photoblog.blog.models import EXIF, Location, MapBounds, PhotoSize, VideoInfo
from photoblog.blog.photo import Photo, identify_outliers
from photoblog.blog.post import SERIES_KEY_SEPARATOR, Post
from photoblog.blog.services import PhotoBlog, get_blog, init_blog

__all__ = [
    "Category",
    "EXIF",
    "Location",
    "MapBounds",
    "Photo",
    "PhotoBlog",
    "PhotoSize",
    "Post",
    "SERIES_KEY_SEPARATOR",
    "VideoInfo",
    "get_blog",
    "identify_outliers",
    "init_blog",
]
