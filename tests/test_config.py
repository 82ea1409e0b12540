"""Tests for src/config.py: BlogConfig, TOML loading, env vars, CLI overrides."""

import pytest
from photoblog import config as config_module
from photoblog.config import (
    BlogConfig,
    OwnerConfig,
    PostSort,
    SiteConfig,
    load_config,
    merge_cli_overrides,
)
from photoblog.errors import ConfigurationError

ENV_VARS = (
    "PHOTOBLOG_SUBTITLE_SEPARATOR",
    "PHOTOBLOG_MAX_PHOTO_MARKERS",
    "PHOTOBLOG_POST_SORT",
    "PHOTOBLOG_SITE_URL",
    "PHOTOBLOG_SITE_DOMAIN",
    "PHOTOBLOG_OWNER_NAME",
)

SITE_TOML = """
subtitle_separator = " -"
provider_post_sort = "oldest-first"

[site]
domain = "test.com"
title = "Test Site"
url = "http://www.test.com"

[owner]
name = "Test Person"
urls = ["http://testsite1.com"]
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    """Remove env vars _apply_env_vars reads and hide any global config."""
    for key in ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(config_module, "GLOBAL_CONFIG_PATH", tmp_path / "missing.toml")


class TestBlogConfigDefaults:
    def test_defaults(self):
        cfg = BlogConfig()
        assert cfg.subtitle_separator == ":"
        assert cfg.max_photo_markers_on_map == 100
        assert cfg.provider_post_sort is PostSort.NEWEST_FIRST
        assert cfg.reverse_post_order is False
        assert cfg.site is None

    def test_oldest_first_reverses(self):
        assert BlogConfig(provider_post_sort="oldest-first").reverse_post_order is True

    def test_site_post_alias_default(self):
        site = SiteConfig(domain="a.com", title="A", url="http://a.com")
        assert site.post_alias == "Post"


class TestEnsureSite:
    def test_missing_site_raises(self):
        with pytest.raises(ConfigurationError, match="missing site or owner"):
            BlogConfig().ensure_site()

    def test_missing_owner_raises(self):
        cfg = BlogConfig(site=SiteConfig(domain="a.com", title="A", url="http://a.com"))
        with pytest.raises(ConfigurationError):
            cfg.ensure_site()

    def test_returns_site_and_owner(self):
        site = SiteConfig(domain="a.com", title="A", url="http://a.com")
        owner = OwnerConfig(name="Owner")
        assert BlogConfig(site=site, owner=owner).ensure_site() == (site, owner)


class TestLoadConfig:
    def test_load_from_explicit_path(self, tmp_path):
        path = tmp_path / "blog.toml"
        path.write_text(SITE_TOML)

        cfg = load_config(path)

        assert cfg.subtitle_separator == " -"
        assert cfg.provider_post_sort is PostSort.OLDEST_FIRST
        assert cfg.site.title == "Test Site"
        assert cfg.owner.urls == ["http://testsite1.com"]

    def test_missing_path_returns_defaults(self, tmp_path):
        assert load_config(tmp_path / "nonexistent.toml") == BlogConfig()

    def test_searches_cwd(self, tmp_path, monkeypatch):
        (tmp_path / ".photoblog.toml").write_text("max_photo_markers_on_map = 20\n")
        monkeypatch.chdir(tmp_path)

        assert load_config().max_photo_markers_on_map == 20

    def test_invalid_toml_returns_defaults(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("this is not [valid toml")
        assert load_config(path) == BlogConfig()

    def test_invalid_value_raises(self, tmp_path):
        path = tmp_path / "blog.toml"
        path.write_text('provider_post_sort = "sideways"\n')
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(path)


class TestEnvVars:
    def test_scalar_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PHOTOBLOG_SUBTITLE_SEPARATOR", "|")
        monkeypatch.setenv("PHOTOBLOG_MAX_PHOTO_MARKERS", "7")
        monkeypatch.setenv("PHOTOBLOG_POST_SORT", "Oldest-First")

        cfg = load_config(tmp_path / "none.toml")

        assert cfg.subtitle_separator == "|"
        assert cfg.max_photo_markers_on_map == 7
        assert cfg.provider_post_sort is PostSort.OLDEST_FIRST

    def test_bad_marker_count_ignored(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PHOTOBLOG_MAX_PHOTO_MARKERS", "lots")
        assert load_config(tmp_path / "none.toml").max_photo_markers_on_map == 100

    def test_bad_post_sort_raises(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PHOTOBLOG_POST_SORT", "sideways")
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "none.toml")

    def test_site_vars_patch_existing_sections(self, tmp_path, monkeypatch):
        path = tmp_path / "blog.toml"
        path.write_text(SITE_TOML)
        monkeypatch.setenv("PHOTOBLOG_SITE_URL", "https://photos.example.com")
        monkeypatch.setenv("PHOTOBLOG_OWNER_NAME", "Someone Else")

        cfg = load_config(path)

        assert cfg.site.url == "https://photos.example.com"
        assert cfg.owner.name == "Someone Else"

    def test_site_vars_without_section_ignored(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PHOTOBLOG_SITE_URL", "https://photos.example.com")
        assert load_config(tmp_path / "none.toml").site is None


class TestMergeCliOverrides:
    def test_none_values_ignored(self):
        cfg = merge_cli_overrides(BlogConfig(subtitle_separator="|"), subtitle_separator=None)
        assert cfg.subtitle_separator == "|"

    def test_explicit_values_applied(self):
        cfg = merge_cli_overrides(
            BlogConfig(),
            subtitle_separator=" -",
            provider_post_sort=PostSort.OLDEST_FIRST,
        )
        assert cfg.subtitle_separator == " -"
        assert cfg.reverse_post_order is True

    def test_unknown_keys_ignored(self):
        assert merge_cli_overrides(BlogConfig(), verbose=True) == BlogConfig()
