"""schema.org linked data for posts, categories, videos, and the owner.

Projections return plain dicts ready for ``json.dumps``. Only root
objects carry ``@context``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from photoblog.blog.category import CATEGORY_KEY_SEPARATOR
from photoblog.config import BlogConfig, ImageConfig, SiteConfig

if TYPE_CHECKING:
    from photoblog.blog.category import Category
    from photoblog.blog.models import PhotoSize, VideoInfo
    from photoblog.blog.post import Post
    from photoblog.blog.services import PhotoBlog

SCHEMA_CONTEXT = "http://schema.org"
YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v="

LinkedData = dict[str, Any]


def _ld(type_: str, values: dict[str, Any], root: bool = False) -> LinkedData:
    """Typed schema.org object with ``None`` values dropped."""
    data = {k: v for k, v in values.items() if v is not None}
    data["@type"] = type_
    if root:
        data["@context"] = SCHEMA_CONTEXT
    return data


def _web_page(url: str) -> LinkedData:
    return _ld("WebPage", {"@id": url})


def _image(img: ImageConfig | PhotoSize | None) -> LinkedData | None:
    if img is None or img.url is None:
        return None
    return _ld("ImageObject", {"url": img.url, "width": img.width, "height": img.height})


def _organization(site: SiteConfig) -> LinkedData:
    return _ld("Organization", {"name": site.title, "logo": _image(site.company_logo)})


def _breadcrumb(url: str, title: str, position: int) -> LinkedData:
    return _ld(
        "BreadcrumbList",
        {"item": {"@id": url, "name": title}, "position": position},
    )


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


def search_action(config: BlogConfig) -> LinkedData:
    """Site search action for search engine result boxes."""
    site, _ = config.ensure_site()
    placeholder = "search_term_string"
    return _ld(
        "SearchAction",
        {
            "target": f"{site.url}/search?q={{{placeholder}}}",
            "query-input": f"required name={placeholder}",
        },
    )


def discover_action(post: Post, config: BlogConfig) -> LinkedData:
    site, _ = config.ensure_site()
    return _ld("DiscoverAction", {"target": f"{site.url}/{post.key}/map"})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


def owner_ld(config: BlogConfig) -> LinkedData:
    site, owner = config.ensure_site()
    return _ld(
        "Person",
        {
            "name": owner.name,
            "url": f"{site.url}/about",
            "sameAs": owner.urls,
            "mainEntityOfPage": _web_page("about"),
            "image": _image(owner.image),
        },
    )


def video_ld(video: VideoInfo | None) -> LinkedData | None:
    """Linked data for a YouTube video, or None when there is no playable video."""
    if video is None or video.empty:
        return None
    return _ld(
        "VideoObject",
        {
            "contentUrl": YOUTUBE_WATCH_URL + video.id,
            "videoFrameSize": f"{video.width}x{video.height}",
        },
    )


def post_ld(post: Post, config: BlogConfig) -> LinkedData:
    """BlogPosting for a post.

    Chronological posts with a known centroid also get a mapped place
    and a discover action pointing at the post map.

    Raises:
        ConfigurationError: If site or owner configuration is missing.
    """
    site, _ = config.ensure_site()
    cover = post.cover_photo.size.get("normal") if post.cover_photo else None
    image = _image(cover)

    if image is not None and post.cover_photo is not None:
        thumb = _image(post.cover_photo.size.get("thumb"))
        if thumb is not None:
            image["thumbnail"] = thumb

    values: dict[str, Any] = {
        "author": owner_ld(config),
        "name": post.title,
        "headline": post.title,
        "description": post.description,
        "image": image,
        "publisher": _organization(site),
        "mainEntityOfPage": _web_page(f"{site.url}/{post.key}"),
        "datePublished": post.created_on.isoformat() if post.created_on else None,
        "dateModified": post.updated_on.isoformat() if post.updated_on else None,
        "articleSection": ",".join(post.categories.keys()),
        "video": video_ld(post.video),
    }

    if post.chronological and post.centroid is not None:
        values["locationCreated"] = _ld("Place", {"hasMap": f"{site.url}/{post.key}/map"})
        values["potentialAction"] = discover_action(post, config)

    return _ld("BlogPosting", values, root=True)


def category_ld(
    category: Category,
    blog: PhotoBlog,
    config: BlogConfig,
    home_page: bool = False,
) -> LinkedData:
    """Blog (home page) or WebPage with breadcrumbs for a category."""
    site, _ = config.ensure_site()

    if home_page:
        return _ld(
            "Blog",
            {
                "url": site.url,
                "name": site.title,
                "author": owner_ld(config),
                "description": site.description,
                "mainEntityOfPage": _web_page(site.url),
                "potentialAction": search_action(config),
                "publisher": _organization(site),
            },
            root=True,
        )

    position = 1
    crumbs = [_breadcrumb(site.url, "Home", position)]

    if category.is_child:
        root_key = category.key.split(CATEGORY_KEY_SEPARATOR, 1)[0]
        root = blog.category_with_key(root_key)
        if root is not None:
            position += 1
            crumbs.append(_breadcrumb(f"{site.url}/{root.key}", root.title, position))

    position += 1
    crumbs.append(_breadcrumb(f"{site.url}/{category.key}", category.title, position))

    return _ld(
        "WebPage",
        {
            "@id": f"{site.url}/{category.key}",
            "name": category.title,
            "publisher": _organization(site),
            "breadcrumb": crumbs,
        },
        root=True,
    )
