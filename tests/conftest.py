"""Shared fixtures: blog singleton reset, provider doubles, sample posts, and snapshots."""

import copy
import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from photoblog.blog import Category, Photo, PhotoBlog, PhotoSize, Post, init_blog
from photoblog.blog.models import EXIF
from photoblog.config import BlogConfig, ImageConfig, OwnerConfig, PostSort, SiteConfig
from photoblog.providers import MapProvider, PostProvider, ProviderBindings

SOME_DATE = datetime(1973, 3, 15, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _reset_blog(monkeypatch):
    """Each test starts without a process-wide blog."""
    monkeypatch.setattr(PhotoBlog, "_instance", None)


@pytest.fixture
def image_config():
    return ImageConfig(url="http://test.com/image.jpg", width=100, height=100)


@pytest.fixture
def config(image_config):
    """Oldest-first provider with site and owner information."""
    return BlogConfig(
        provider_post_sort=PostSort.OLDEST_FIRST,
        site=SiteConfig(
            domain="test.com",
            title="Test Site",
            subtitle="Where Tests Run Best",
            description="Test Site Description",
            url="http://www.test.com",
            post_alias="Test",
            logo=image_config,
            company_logo=image_config,
        ),
        owner=OwnerConfig(
            name="Test Person",
            image=image_config,
            email="owner@test.com",
            urls=["http://testsite1.com", "http://testsite2.com"],
        ),
    )


@pytest.fixture
def post_provider():
    provider = MagicMock(spec=PostProvider)
    provider.exif.return_value = EXIF(artist="Test Person", iso=200)
    provider.post_id_with_photo_id.return_value = None
    provider.photos_with_tags.return_value = []
    provider.post_photos.return_value = []
    return provider


@pytest.fixture
def map_provider():
    provider = MagicMock(spec=MapProvider)
    provider.track.return_value = {"type": "FeatureCollection", "features": []}
    provider.gpx.return_value = None
    return provider


@pytest.fixture
def providers(post_provider, map_provider):
    return ProviderBindings(post=post_provider, map=map_provider)


@pytest.fixture
def blog(config, providers):
    return init_blog(config, providers)


@pytest.fixture
def mock_categories():
    """Two root categories; the first has two subcategories."""
    root0 = Category("key0", "Title 1")
    root1 = Category("key1", "Title 2")
    root0.add(Category("key2", "Title 3"))
    root0.add(Category("key3", "Title 4"))
    return [root0, root1]


@pytest.fixture
def mock_photos():
    """Four located photos and one without coordinates."""
    data = [
        ("id1", "Title 1", 43.1, -116.1, {"tag1", "tag2", "tag3"}),
        ("id2", "Title 2", 43.2, -116.2, {"tag1", "tag4"}),
        ("id3", "Title 3", 43.3, -116.3, {"tag2"}),
        ("id4", "Title 4", 43.4, -116.4, set()),
        ("id5", "Title 5", 0.0, 0.0, {"tag5"}),
    ]
    photos = []
    for index, (id_, title, lat, lon, tags) in enumerate(data):
        photo = Photo(id_, index)
        photo.title = title
        photo.latitude = lat
        photo.longitude = lon
        photo.tags = tags
        photo.size["preview"] = PhotoSize(url=f"preview-{id_}", width=100, height=100)
        photos.append(photo)
    return photos


@pytest.fixture
def mock_posts(config, mock_categories, mock_photos):
    """Six posts in chronological order, oldest first.

    The fourth post has no categories and the sixth is not chronological.
    """
    data = [
        ("id0", "Series 1: Part 1", True),
        ("id1", "Series 1: Part 2", True),
        ("id2", "Series 1: Part 3", True),
        ("id3", "Title 4", True),
        ("id4", "Not a Series: Subtitle", True),
        ("id5", "Highlights", False),
    ]
    category_titles = {c.key: c.title for c in mock_categories}

    posts = []
    for index, (id_, title, chronological) in enumerate(data):
        post = Post(id_, title, chronological=chronological, config=config)
        post.photos = mock_photos
        post.photos_loaded = True
        post.created_on = SOME_DATE
        post.updated_on = SOME_DATE
        if index != 3:
            post.categories = dict(category_titles)
        posts.append(post)
    return posts


@pytest.fixture
def loaded_blog(blog, mock_posts):
    """Blog loaded with the sample posts in one cycle."""
    return blog.add_all(*mock_posts)


SNAPSHOT_DATA = {
    "tags": {"boise": "Boise", "river": "River"},
    "categories": [
        {
            "key": "when",
            "title": "When",
            "subcategories": [{"key": "2016", "title": "2016"}, {"key": "2017", "title": "2017"}],
        },
        {"key": "what", "title": "What"},
    ],
    # Provider order: oldest first
    "posts": [
        {
            "id": "72157666685116730",
            "title": "Owyhee Ride: Day 1",
            "description": "Into the canyons",
            "created_on": "2016-05-01T10:00:00Z",
            "updated_on": "2016-05-03T10:00:00Z",
            "categories": ["when/2016"],
            "photos": [
                {
                    "id": "p1",
                    "title": "Trailhead",
                    "tags": ["boise"],
                    "latitude": 43.1,
                    "longitude": -116.1,
                    "date_taken": "2016-04-30T08:00:00Z",
                    "primary": True,
                    "sizes": {
                        "preview": {"url": "p1-preview.jpg", "width": 100, "height": 75},
                        "normal": {"url": "p1-normal.jpg", "width": 800, "height": 600},
                        "thumb": {"url": "p1-thumb.jpg", "width": 50, "height": 50},
                    },
                },
                {
                    "id": "p2",
                    "title": "Canyon",
                    "tags": ["river", "unlisted"],
                    "latitude": 42.9,
                    "longitude": -116.5,
                    "date_taken": "2016-04-30T12:00:00Z",
                },
            ],
        },
        {
            "id": "72157666685116731",
            "title": "Owyhee Ride: Day 2",
            "created_on": "2016-05-02T10:00:00Z",
            "updated_on": "2016-05-04T10:00:00Z",
            "categories": ["when/2016", "what"],
            "photos": [{"id": "p3", "title": "Camp", "tags": ["river"]}],
        },
        {
            "id": "72157666685116732",
            "title": "Spring Fish & Chips",
            "created_on": "2017-03-01T10:00:00Z",
            "updated_on": "2017-03-02T10:00:00Z",
            "categories": ["when/2017", "nowhere"],
            "video": {"id": "abc123", "width": 640, "height": 480},
        },
    ],
    "exif": {"p1": {"artist": "Test Person", "iso": 400, "model": "X-T2"}},
    "tracks": {
        "owyhee-ride": {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "properties": {},
                    "geometry": {
                        "type": "LineString",
                        "coordinates": [[-116.1, 43.1, 900.0], [-116.5, 42.9, 950.0]],
                    },
                }
            ],
        }
    },
}


@pytest.fixture
def snapshot_data():
    return copy.deepcopy(SNAPSHOT_DATA)


@pytest.fixture
def snapshot_file(tmp_path, snapshot_data):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(snapshot_data))
    return path
