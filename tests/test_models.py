"""Tests for book and draft models."""

from prolibrary.core.config import Settings
from prolibrary.core.models import Book, BookStatus, Draft


def test_toggled_flips_between_two_values():
    assert BookStatus.toggled("available") == "borrowed"
    assert BookStatus.toggled("borrowed") == "available"
    assert BookStatus.toggled(BookStatus.toggled("available")) == "available"


def test_from_row_defaults_missing_status():
    book = Book.from_row({"id": 3, "title": "Emma", "author": "Jane Austen"})

    assert book.status == "available"
    assert book.isbn is None
    assert book.status_label == "Available"
    assert book.action_label == "Borrow"


def test_borrowed_labels():
    book = Book(id=1, title="1984", author="George Orwell", status="borrowed")

    assert book.status_label == "Borrowed"
    assert book.action_label == "Return"
    assert book.to_dict()["status_label"] == "Borrowed"


def test_insert_row_omits_blank_isbn_and_status():
    row = Draft(title=" Dune ", author="Herbert").to_insert_row("https://cover")

    assert row == {"title": "Dune", "author": "Herbert", "cover_url": "https://cover"}


def test_draft_completeness():
    assert Draft(title="Dune", author="Herbert").is_complete()
    assert not Draft(title="Dune").is_complete()
    assert not Draft(title=" ", author="Herbert").is_complete()


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://db.example/")
    monkeypatch.setenv("SUPABASE_KEY", "k")
    monkeypatch.setenv("DEFAULT_COVER_URL", "https://cover")
    monkeypatch.setenv("REMOTE_TIMEOUT", "3")
    monkeypatch.delenv("BOOKS_TABLE", raising=False)

    settings = Settings.from_env()

    assert settings.supabase_url == "https://db.example"
    assert settings.supabase_key == "k"
    assert settings.table == "books"
    assert settings.default_cover_url == "https://cover"
    assert settings.timeout == 3.0
