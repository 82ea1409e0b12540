"""Tests for src/providers/base.py: provider bindings."""

import pytest
from photoblog.errors import ConfigurationError, MissingProviderError
from photoblog.providers import PostProvider, ProviderBindings, VideoProvider


class TestProviderBindings:
    def test_unbound_post_provider(self):
        with pytest.raises(MissingProviderError, match="^post provider is undefined$"):
            ProviderBindings().require_post()

    def test_unbound_map_provider(self):
        with pytest.raises(MissingProviderError, match="map provider is undefined"):
            ProviderBindings().require_map()

    def test_unbound_video_provider(self):
        with pytest.raises(ConfigurationError, match="video provider is undefined"):
            ProviderBindings().require_video()

    def test_bound_providers_returned(self, providers, post_provider, map_provider):
        assert providers.require_post() is post_provider
        assert providers.require_map() is map_provider

    def test_video_marker(self):
        video = VideoProvider()
        assert ProviderBindings(video=video).require_video() is video

    def test_rejects_wrong_type(self):
        with pytest.raises(ValueError):
            ProviderBindings(post=object())

    def test_error_records_name(self):
        with pytest.raises(MissingProviderError) as exc_info:
            ProviderBindings().require_map()
        assert exc_info.value.name == "map"


def test_post_provider_is_abstract():
    with pytest.raises(TypeError):
        PostProvider()
