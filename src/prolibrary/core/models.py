"""Data models for catalog records."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


class BookStatus:
    AVAILABLE = "available"
    BORROWED = "borrowed"

    @staticmethod
    def toggled(status: str) -> str:
        """Return the opposite loan status."""
        if status == BookStatus.AVAILABLE:
            return BookStatus.BORROWED
        return BookStatus.AVAILABLE


@dataclass
class Book:
    id: Any
    title: str
    author: str
    isbn: str | None = None
    cover_url: str | None = None
    status: str = BookStatus.AVAILABLE
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Book:
        return cls(
            id=row["id"],
            title=row.get("title") or "",
            author=row.get("author") or "",
            isbn=row.get("isbn"),
            cover_url=row.get("cover_url"),
            status=row.get("status") or BookStatus.AVAILABLE,
            created_at=row.get("created_at"),
        )

    @property
    def is_available(self) -> bool:
        return self.status == BookStatus.AVAILABLE

    @property
    def status_label(self) -> str:
        return "Available" if self.is_available else "Borrowed"

    @property
    def action_label(self) -> str:
        return "Borrow" if self.is_available else "Return"

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status_label"] = self.status_label
        data["action_label"] = self.action_label
        return data


@dataclass
class Draft:
    """Unsaved fields captured by the create form."""

    title: str = ""
    author: str = ""
    isbn: str = ""

    def is_complete(self) -> bool:
        return bool(self.title.strip() and self.author.strip())

    def to_insert_row(self, cover_url: str) -> dict[str, str]:
        # id, status and created_at are assigned by the server
        row = {
            "title": self.title.strip(),
            "author": self.author.strip(),
            "cover_url": cover_url,
        }
        if self.isbn.strip():
            row["isbn"] = self.isbn.strip()
        return row

    def to_dict(self) -> dict[str, str]:
        return asdict(self)
