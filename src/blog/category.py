"""Post categories with one level of nesting."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from photoblog.blog.post import Post

CATEGORY_KEY_SEPARATOR = "/"


class Category:
    """A post category.

    ``key`` is a slug path; a subcategory's key is always fully qualified
    (``parent/child``). ``posts`` references posts without owning them.
    """

    def __init__(self, key: str, title: str) -> None:
        self.key = key
        self.title = title
        # Insertion-ordered; a category appears at most once
        self.subcategories: list[Category] = []
        self.posts: set[Post] = set()

    def __repr__(self) -> str:
        return f"Category(key={self.key!r}, title={self.title!r})"

    @property
    def is_child(self) -> bool:
        return CATEGORY_KEY_SEPARATOR in self.key

    @property
    def is_parent(self) -> bool:
        return len(self.subcategories) > 0

    def get_subcategory(self, key_or_title: str) -> Category | None:
        """Subcategory with a matching (fully qualified) key or title."""
        for sub in self.subcategories:
            if sub.title == key_or_title or sub.key == key_or_title:
                return sub
        return None

    def has(self, key_or_title: str) -> bool:
        """Whether a subcategory matches the key or title."""
        return self.get_subcategory(key_or_title) is not None

    def add(self, subcategory: Category | None) -> None:
        """Adopt a subcategory, prefixing its key with this category's key.

        Posts in the subcategory reference categories by key, so each one
        has its entry moved from the old key to the new one in the same
        step. Afterwards no post refers to the pre-adoption key.
        """
        if subcategory is None or subcategory in self.subcategories:
            return

        old_key = subcategory.key
        subcategory.key = f"{self.key}{CATEGORY_KEY_SEPARATOR}{old_key}"
        self.subcategories.append(subcategory)

        for post in subcategory.posts:
            post.categories.pop(old_key, None)
            post.categories[subcategory.key] = subcategory.title

    def add_post(self, post: Post) -> None:
        """Assign a post, updating the post's category mapping as well."""
        self.posts.add(post)
        post.categories[self.key] = self.title

    def remove_post(self, post: Post) -> Category:
        """Remove a post from this category and all subcategories.

        The post keeps its own category mapping.
        """
        self.posts.discard(post)
        for sub in self.subcategories:
            sub.remove_post(post)
        return self

    async def ensure_loaded(self) -> None:
        """Load details and photos for every post in the category."""

        async def _load(post: Post) -> None:
            await post.get_info()
            await post.get_photos()

        await asyncio.gather(*(_load(p) for p in self.posts))
