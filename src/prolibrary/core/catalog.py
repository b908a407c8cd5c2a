"""Catalog controller: cached book list, search filter and create workflow."""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

import structlog

from .config import Settings
from .models import Book, BookStatus, Draft
from .store import RemoteTableError

log = structlog.get_logger()

REQUIRED_FIELDS_MESSAGE = "Title and author are required."

Listener = Callable[["CatalogState"], None]
Confirm = Callable[[], "bool | Awaitable[bool]"]


def filter_books(books: list[Book], term: str) -> list[Book]:
    """Books whose title or author contains ``term``, ignoring case.

    An empty term keeps every book in its original order.
    """
    needle = term.lower()
    if not needle:
        return list(books)
    return [
        book
        for book in books
        if needle in book.title.lower() or needle in book.author.lower()
    ]


@dataclass
class CatalogState:
    books: list[Book] = field(default_factory=list)
    loading: bool = False
    search_term: str = ""
    draft: Draft = field(default_factory=Draft)
    create_form_open: bool = False
    error: str = ""
    form_error: str = ""


class CatalogController:
    """Client-side view over the remote books table.

    The remote table is the only source of truth: every successful write is
    followed by a full refresh that replaces ``state.books``. Failed calls are
    logged and leave the previous state in place.

    ``table`` needs async ``list``, ``insert``, ``update`` and ``delete``
    methods raising ``RemoteTableError`` (see ``store.RemoteTable``).
    """

    def __init__(self, table: Any, settings: Settings | None = None) -> None:
        self.table = table
        self.settings = settings or Settings.from_env()
        self.state = CatalogState()
        self._listeners: list[Listener] = []
        self._closed = False

    # -- notifications -------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.state)

    @property
    def closed(self) -> bool:
        return self._closed

    def _stale(self, operation: str) -> bool:
        if self._closed:
            log.debug("stale_result_dropped", operation=operation)
        return self._closed

    # -- lifecycle -----------------------------------------------------

    async def start(self) -> None:
        await self.refresh()

    def close(self) -> None:
        """Tear down; results of calls still in flight are ignored."""
        self._closed = True
        self._listeners.clear()

    # -- derived view --------------------------------------------------

    def filtered_view(self) -> list[Book]:
        return filter_books(self.state.books, self.state.search_term)

    # -- form fields ---------------------------------------------------

    def set_search_term(self, term: str) -> None:
        self.state.search_term = term
        self._notify()

    def update_draft(self, **fields: str) -> Draft:
        for name, value in fields.items():
            if not hasattr(self.state.draft, name):
                raise AttributeError(f"Draft has no field {name!r}")
            setattr(self.state.draft, name, value)
        self.state.form_error = ""
        self._notify()
        return self.state.draft

    def open_create_form(self) -> None:
        self.state.create_form_open = True
        self._notify()

    def close_create_form(self) -> None:
        # the draft survives so reopening the form keeps what was typed
        self.state.create_form_open = False
        self.state.form_error = ""
        self._notify()

    def dismiss_error(self) -> None:
        self.state.error = ""
        self._notify()

    # -- remote operations ---------------------------------------------

    async def refresh(self) -> bool:
        """Replace the cached list with a fresh, newest-first fetch."""
        self.state.loading = True
        self._notify()
        try:
            rows = await self.table.list(order_by="created_at", descending=True)
            books = [Book.from_row(row) for row in rows]
        except (RemoteTableError, KeyError) as e:
            if self._stale("refresh"):
                return False
            log.error("refresh_failed", error=str(e))
            self.state.loading = False
            self._notify()
            return False

        if self._stale("refresh"):
            return False
        self.state.books = books
        self.state.loading = False
        log.info("books_refreshed", count=len(books))
        self._notify()
        return True

    async def create(self, draft: Draft | None = None) -> bool:
        """Insert the draft (or the current form draft) as a new book.

        Incomplete drafts are rejected locally without a remote call.
        """
        if draft is not None:
            self.state.draft = draft
        draft = self.state.draft

        if not draft.is_complete():
            self.state.form_error = REQUIRED_FIELDS_MESSAGE
            self._notify()
            return False

        row = draft.to_insert_row(self.settings.default_cover_url)
        try:
            await self.table.insert(row)
        except RemoteTableError as e:
            if self._stale("create"):
                return False
            log.error("create_failed", title=row["title"], error=str(e))
            self.state.error = f"Failed to add book: {e}"
            self._notify()
            return False

        if self._stale("create"):
            return False
        log.info("book_created", title=row["title"], author=row["author"])
        self.state.draft = Draft()
        self.state.create_form_open = False
        self.state.form_error = ""
        self.state.error = ""
        self._notify()
        await self.refresh()
        return True

    async def toggle_status(self, book_id: Any, current_status: str) -> bool:
        """Flip a book between available and borrowed."""
        new_status = BookStatus.toggled(current_status)
        try:
            await self.table.update({"id": book_id}, {"status": new_status})
        except RemoteTableError as e:
            if not self._stale("toggle_status"):
                log.error("toggle_failed", book_id=book_id, error=str(e))
            return False

        if self._stale("toggle_status"):
            return False
        log.info("status_toggled", book_id=book_id, status=new_status)
        await self.refresh()
        return True

    async def remove(self, book_id: Any, confirm: Confirm) -> bool:
        """Delete a book once ``confirm`` agrees; declining is a no-op."""
        answer = confirm()
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            log.info("delete_declined", book_id=book_id)
            return False

        try:
            await self.table.delete({"id": book_id})
        except RemoteTableError as e:
            if not self._stale("remove"):
                log.error("delete_failed", book_id=book_id, error=str(e))
            return False

        if self._stale("remove"):
            return False
        log.info("book_deleted", book_id=book_id)
        await self.refresh()
        return True
