"""Tests for src/blog/photo.py: EXIF memoisation, GeoJSON, and outlier dates."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from photoblog.blog import Photo, PhotoSize, identify_outliers
from photoblog.errors import MissingProviderError


def _dated(*offsets_days):
    start = datetime(2016, 6, 1, tzinfo=timezone.utc)
    photos = []
    for index, days in enumerate(offsets_days):
        photo = Photo(f"p{index}", index)
        photo.date_taken = start + timedelta(days=days)
        photos.append(photo)
    return photos


class TestExif:
    def test_fetched_once(self, post_provider):
        photo = Photo("id1", provider=post_provider)

        first = asyncio.run(photo.exif())
        second = asyncio.run(photo.exif())

        assert first is second
        assert first.artist == "Test Person"
        post_provider.exif.assert_awaited_once_with("id1")

    def test_missing_provider(self):
        with pytest.raises(MissingProviderError):
            asyncio.run(Photo("id1").exif())


class TestGeoJSON:
    def test_point_feature(self, mock_photos):
        feature = mock_photos[0].geo_json()
        assert feature["type"] == "Feature"
        assert feature["geometry"] == {"type": "Point", "coordinates": [-116.1, 43.1]}
        assert feature["properties"] == {"url": "preview-id1"}

    def test_part_key_adds_title(self, mock_photos):
        feature = mock_photos[0].geo_json("day-1")
        assert feature["properties"]["title"] == "Title 1"
        assert feature["properties"]["partKey"] == "day-1"

    def test_preview_attribute_fallback(self):
        photo = Photo("id1")
        photo.preview = PhotoSize(url="small.jpg", width=10, height=10)
        assert photo.geo_json()["properties"]["url"] == "small.jpg"


class TestTagList:
    def test_sorted_comma_list(self):
        photo = Photo("id1")
        photo.tags = {"b", "a", "c"}
        assert photo.tag_list == "a,b,c"


class TestIdentifyOutliers:
    def test_flags_distant_date(self):
        photos = _dated(0, 0, 0, 1000)

        flagged = identify_outliers(photos)

        assert flagged == [photos[3]]
        assert [p.outlier_date for p in photos] == [False, False, False, True]

    def test_flags_distant_early_date(self):
        photos = _dated(-1000, 0, 0, 0)

        flagged = identify_outliers(photos)

        assert flagged == [photos[0]]
        assert [p.outlier_date for p in photos] == [True, False, False, False]

    def test_no_outliers_in_tight_range(self):
        photos = _dated(0, 1, 2, 3, 4)
        assert identify_outliers(photos) == []

    def test_undated_photos_ignored(self):
        photos = _dated(0, 0, 0, 1000)
        undated = Photo("undated")
        flagged = identify_outliers([*photos, undated])

        assert undated.outlier_date is False
        assert flagged == [photos[3]]

    def test_nothing_dated(self):
        assert identify_outliers([Photo("a"), Photo("b")]) == []
