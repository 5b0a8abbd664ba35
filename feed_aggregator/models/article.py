"""Article model.

An Article is owned by exactly one Feed. Folders never hold articles, they
only aggregate views over their feeds' articles.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional

from feed_aggregator.events import Signal

if TYPE_CHECKING:
    from feed_aggregator.services.feed_parser import ParsedArticle


@dataclass(eq=False)
class Article:
    """Represents a single entry of a feed."""

    guid: str
    date: datetime
    title: str = ""
    link: Optional[str] = None
    author: Optional[str] = None
    description: Optional[str] = None
    is_read: bool = False
    read: Signal = field(default_factory=lambda: Signal("read"), repr=False)

    def mark_as_read(self) -> None:
        """Flag the article as read and notify the owning feed."""
        if self.is_read:
            return

        self.is_read = True
        self.read.emit(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.guid,
            "date": self.date.isoformat(),
            "title": self.title,
            "link": self.link,
            "author": self.author,
            "description": self.description,
            "is_read": self.is_read,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Article":
        """Rebuild an article from to_dict() output.

        Raises:
            ValueError: If the id or date is missing or malformed
        """
        guid = data.get("id")
        if not guid:
            raise ValueError("Article data has no id")

        try:
            date = datetime.fromisoformat(data["date"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Article '{guid}' has an invalid date") from e

        return cls(
            guid=guid,
            date=date,
            title=data.get("title") or "",
            link=data.get("link"),
            author=data.get("author"),
            description=data.get("description"),
            is_read=bool(data.get("is_read", False)),
        )

    @classmethod
    def from_parsed(cls, parsed: "ParsedArticle") -> "Article":
        # Undated entries are stamped with the time they were first seen
        date = parsed.published_date or datetime.now(timezone.utc)
        return cls(
            guid=parsed.guid or parsed.url,
            date=date,
            title=parsed.title,
            link=parsed.url,
            author=parsed.author,
            description=parsed.description,
        )


def article_date_recent_than(article: Article, date: datetime) -> bool:
    """Return True if ``article`` is strictly more recent than ``date``."""
    return article.date > date
