"""
catalog.py

Catalog store: the ordered list of books and the lookups over it.
"""

from __future__ import annotations
import logging
from typing import Iterable, List, Optional

from .config import CATEGORIES
from .errors import DuplicateIdError, InvalidCategorySelectionError, NotFoundError
from .models import Book

logger = logging.getLogger(__name__)


def _norm(s: Optional[str]) -> str:
    """Lowercase a possibly-empty string for case-insensitive comparison."""
    return (s or "").lower()


class CatalogStore:
    """
    CatalogStore owns the books of the library in insertion order.

    Book ids are unique. Availability is only flipped by the lending engine;
    the store itself never lends or returns.
    """

    def __init__(self, books: Optional[Iterable[Book]] = None, categories: Optional[List[str]] = None):
        self._books: List[Book] = []
        self._categories = list(categories) if categories is not None else list(CATEGORIES)
        for book in books or []:
            if self.find(book.id) is not None:
                logger.warning("Skipping duplicate book id %s", book.id)
                continue
            self._books.append(book)

    def __len__(self) -> int:
        return len(self._books)

    def categories(self) -> List[str]:
        return list(self._categories)

    # ---------------- Mutations ----------------
    def add(self, book_id: int, title: str, author: str, category_index: int) -> Book:
        """
        Add a new, available book.

        Args:
            book_id: unique id of the book.
            title: book title.
            author: book author.
            category_index: 1-based position in the category list.

        Returns:
            The created Book.

        Raises:
            DuplicateIdError: a book with ``book_id`` already exists.
            InvalidCategorySelectionError: ``category_index`` is out of range.
        """
        if self.find(book_id) is not None:
            logger.debug("Attempt to add existing book: %s", book_id)
            raise DuplicateIdError("book", book_id)
        if category_index < 1 or category_index > len(self._categories):
            raise InvalidCategorySelectionError("Invalid category selection.")
        book = Book(id=book_id, title=title, author=author, category=self._categories[category_index - 1])
        self._books.append(book)
        logger.info("Added book %s", book_id)
        return book

    def remove(self, book_id: int) -> Book:
        """
        Delete a book by id and return it.

        Lent books can be deleted too; the caller is responsible for any
        outstanding loan.
        """
        for i, book in enumerate(self._books):
            if book.id == book_id:
                del self._books[i]
                if not book.is_available:
                    logger.warning("Deleted book %s while it was lent", book_id)
                logger.info("Deleted book %s", book_id)
                return book
        raise NotFoundError("Book not found!")

    # ---------------- Queries ----------------
    def find(self, book_id: int) -> Optional[Book]:
        return next((b for b in self._books if b.id == book_id), None)

    def list_all(self) -> List[Book]:
        return list(self._books)

    def list_available(self) -> List[Book]:
        return [b for b in self._books if b.is_available]

    def has_available(self) -> bool:
        return any(b.is_available for b in self._books)

    def search(self, keyword: str) -> List[Book]:
        """
        Find books by id, title, author or category.

        The keyword matches a book when it equals the book id, or when it is a
        case-insensitive substring of the title, author or category. Results
        keep catalog order; an empty list means nothing matched.
        """
        nk = _norm(keyword)
        return [
            b for b in self._books
            if str(b.id) == nk
            or nk in _norm(b.title)
            or nk in _norm(b.author)
            or nk in _norm(b.category)
        ]
