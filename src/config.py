"""Blog model configuration loaded from .photoblog.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from photoblog.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".photoblog.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "photoblog" / "config.toml"

DEFAULT_SUBTITLE_SEPARATOR = ":"
DEFAULT_MAX_PHOTO_MARKERS = 100


class PostSort(StrEnum):
    """Order in which the provider lists posts."""

    NEWEST_FIRST = "newest-first"
    OLDEST_FIRST = "oldest-first"


class ImageConfig(BaseModel):
    """Image reference used in linked data (logos, owner portrait)."""

    url: str
    width: int = 0
    height: int = 0


class SiteConfig(BaseModel):
    """[site] section."""

    domain: str
    title: str
    subtitle: str = ""
    description: str = ""
    url: str
    # Generic name for a post, pluralized with a trailing "s" ("27 posts")
    post_alias: str = "Post"
    logo: ImageConfig | None = None
    company_logo: ImageConfig | None = None


class OwnerConfig(BaseModel):
    """[owner] section."""

    name: str
    image: ImageConfig | None = None
    email: str = ""
    urls: list[str] = Field(default_factory=list)


class BlogConfig(BaseModel):
    """Top-level configuration consumed by the blog model.

    ``site`` and ``owner`` are only read by the syndication projections;
    the correlation engine itself needs none of them.
    """

    subtitle_separator: str = DEFAULT_SUBTITLE_SEPARATOR
    max_photo_markers_on_map: int = DEFAULT_MAX_PHOTO_MARKERS
    provider_post_sort: PostSort = PostSort.NEWEST_FIRST
    site: SiteConfig | None = None
    owner: OwnerConfig | None = None

    @property
    def reverse_post_order(self) -> bool:
        """Whether provider order must be flipped to keep posts newest-first."""
        return self.provider_post_sort is PostSort.OLDEST_FIRST

    def ensure_site(self) -> tuple[SiteConfig, OwnerConfig]:
        """Return site and owner configuration or raise if either is missing.

        Raises:
            ConfigurationError: If ``site`` or ``owner`` is not configured.
        """
        if self.site is None or self.owner is None:
            raise ConfigurationError(
                "Invalid model configuration (missing site or owner information)"
            )
        return self.site, self.owner


def load_config(path: str | Path | None = None) -> BlogConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .photoblog.toml in CWD
    3. ~/.config/photoblog/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged BlogConfig.

    Raises:
        ConfigurationError: If a value fails validation.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = _validate(data) if data else BlogConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: BlogConfig, **cli_kwargs: object) -> BlogConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).

    Args:
        config: Base config.
        **cli_kwargs: CLI flag values keyed by field name
            (``subtitle_separator``, ``max_photo_markers_on_map``,
            ``provider_post_sort``).

    Returns:
        Updated config with CLI overrides applied.
    """
    data = config.model_dump()
    known = {"subtitle_separator", "max_photo_markers_on_map", "provider_post_sort"}

    for key, value in cli_kwargs.items():
        if value is None or key not in known:
            continue
        data[key] = value

    return _validate(data)


def _validate(data: dict[str, object]) -> BlogConfig:
    try:
        return BlogConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: BlogConfig) -> BlogConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    separator = os.environ.get("PHOTOBLOG_SUBTITLE_SEPARATOR")
    if separator:
        data["subtitle_separator"] = separator

    markers_raw = os.environ.get("PHOTOBLOG_MAX_PHOTO_MARKERS")
    if markers_raw is not None:
        try:
            data["max_photo_markers_on_map"] = int(markers_raw)
        except ValueError:
            logger.warning("Ignoring non-integer PHOTOBLOG_MAX_PHOTO_MARKERS=%r", markers_raw)

    sort_raw = os.environ.get("PHOTOBLOG_POST_SORT")
    if sort_raw is not None:
        data["provider_post_sort"] = sort_raw.strip().lower()

    # Site/owner env vars only patch sections that already exist
    site_mapping = {"PHOTOBLOG_SITE_URL": "url", "PHOTOBLOG_SITE_DOMAIN": "domain"}
    for env_var, field in site_mapping.items():
        value = os.environ.get(env_var)
        if value is not None and data.get("site") is not None:
            data["site"][field] = value

    owner_name = os.environ.get("PHOTOBLOG_OWNER_NAME")
    if owner_name is not None and data.get("owner") is not None:
        data["owner"]["name"] = owner_name

    return _validate(data)
