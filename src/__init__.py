"""photoblog: in-memory photo blog model with series correlation."""

__version__ = "0.1.0"
