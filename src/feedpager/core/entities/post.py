"""Post entities."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class PostType(Enum):
    """Kind of community post.

    ALL is only meaningful as a filter value; stored posts are TEXT or AUDIO.
    """

    ALL = "all"
    TEXT = "text"
    AUDIO = "audio"


@dataclass(frozen=True)
class Post:
    """A feed post as returned by the backend.

    Identity is the ``id``; two posts with the same id are the same post
    even if their counters differ between fetches.
    """

    id: str
    post_type: PostType
    created_at: datetime
    content: str = ""
    like_count: int = 0
    author: str | None = None
    title: str | None = None

    def matches(self, term: str) -> bool:
        """Check whether a search term appears in the post's text fields.

        Args:
            term: Search term, compared case-insensitively.

        Returns:
            True if the term is found in content, title or author.
        """
        needle = term.strip().lower()
        if not needle:
            return True
        haystacks = (self.content, self.title, self.author)
        return any(text and needle in text.lower() for text in haystacks)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Post":
        """Build a post from a backend row.

        Accepts the column names used by the posts table and its joined
        ``user_profiles`` relation.

        Args:
            row: Mapping of column names to values.

        Returns:
            A new Post instance.

        Raises:
            KeyError: If ``id`` or ``created_at`` is missing.
            ValueError: If ``created_at`` or ``post_type`` is malformed.
        """
        created_at = row["created_at"]
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        author = row.get("author")
        profile = row.get("user_profiles")
        if author is None and isinstance(profile, dict):
            author = profile.get("username")

        like_count = row.get("likes_count", row.get("like_count")) or 0

        return cls(
            id=str(row["id"]),
            post_type=PostType(row.get("post_type") or PostType.TEXT.value),
            created_at=created_at,
            content=row.get("content") or "",
            like_count=int(like_count),
            author=author,
            title=row.get("title") or row.get("audio_filename"),
        )


@dataclass(frozen=True)
class PostPage:
    """One page of posts from the data source.

    Attributes:
        items: Posts on this page, in server order.
        total_count: Total number of posts the server holds for the query.
    """

    items: tuple[Post, ...]
    total_count: int

    def __post_init__(self) -> None:
        """Accept any sequence for items."""
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))
