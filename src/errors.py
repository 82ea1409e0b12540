"""Exception types shared across the photo blog model.

Wiring mistakes (missing provider, second blog instance, absent site
configuration) derive from ``ConfigurationError`` and are raised
immediately. Provider I/O failures are propagated to the caller as-is.
"""


class PhotoBlogError(Exception):
    """Base error for the photo blog model."""


class ConfigurationError(PhotoBlogError, ReferenceError):
    """Raised when the model is wired incorrectly."""


class MissingProviderError(ConfigurationError):
    """Raised when a capability is requested from an unbound provider."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} provider is undefined")
        self.name = name


class DuplicateBlogError(ConfigurationError):
    """Raised when a second PhotoBlog is constructed."""


class BlogNotInitializedError(ConfigurationError):
    """Raised when the blog is requested before ``init_blog()``."""


class ProviderError(PhotoBlogError):
    """Raised by provider implementations for data they cannot supply."""
