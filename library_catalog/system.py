"""
system.py

LibrarySystem: the operator-facing facade over the stores, the lending engine
and CSV persistence.
"""

from __future__ import annotations
import datetime
import logging
from typing import Callable, Dict, List, Optional, Tuple

import pandas as pd

from .catalog import CatalogStore
from .config import BOOKS_CSV, BORROW_LOG_CSV, BORROW_PERIOD_DAYS, FINE_PER_DAY, MEMBERS_CSV
from .errors import LibraryError
from .lending import LendingEngine
from .members import MemberStore
from .models import Book, Member
from .persistence import CsvPersistence, books_frame, history_frame

logger = logging.getLogger(__name__)

Outcome = Tuple[bool, str]


class LibrarySystem:
    """
    LibrarySystem manages books, members and loans in memory, backed by CSV files.

    State is loaded on construction and written back by ``save_state``.
    Mutating operations never raise for domain errors: they return
    ``(success, message)`` where message is human-readable.
    """

    def __init__(self,
                 data_dir: Optional[str] = None,
                 books_csv: str = BOOKS_CSV,
                 members_csv: str = MEMBERS_CSV,
                 borrow_log_csv: str = BORROW_LOG_CSV,
                 borrow_period_days: int = BORROW_PERIOD_DAYS,
                 fine_per_day: int = FINE_PER_DAY,
                 now: Optional[Callable[[], datetime.datetime]] = None):
        """
        Initialize the LibrarySystem.

        Args:
            data_dir: directory holding the CSV files (defaults to LIBRARY_DATA_DIR).
            books_csv: books file name.
            members_csv: members file name.
            borrow_log_csv: borrow/return history file name.
            borrow_period_days: days a book may be kept without a fine.
            fine_per_day: fine charged per overdue day.
            now: clock override, mainly for tests.
        """
        self.storage = CsvPersistence(data_dir, books_csv, members_csv, borrow_log_csv)
        self.catalog = CatalogStore(self.storage.load_books())
        self.members = MemberStore(self.storage.load_members())
        self.lending = LendingEngine(self.catalog, self.members, self.storage.load_history(),
                                     borrow_period_days=borrow_period_days,
                                     fine_per_day=fine_per_day, now=now)

    # ---------------- Persisting ----------------
    def save_state(self) -> None:
        """Overwrite the CSV files with the current in-memory state."""
        self.storage.save_books(self.catalog.list_all())
        self.storage.save_members(self.members.list_all())
        self.storage.save_history(self.lending.history)

    # -------------- Internal helpers ----------------
    @staticmethod
    def _failed(e: LibraryError) -> Outcome:
        logger.debug("Operation rejected: %s", e)
        return False, str(e)

    # ---------------- Core operations ----------------
    def add_book(self, book_id: int, title: str, author: str, category_index: int) -> Outcome:
        try:
            self.catalog.add(book_id, title, author, category_index)
        except LibraryError as e:
            return self._failed(e)
        return True, "Book added successfully!"

    def delete_book(self, book_id: int) -> Outcome:
        try:
            book = self.catalog.remove(book_id)
        except LibraryError as e:
            return self._failed(e)
        loan = self.lending.discard_loan(book.id)
        if loan is not None:
            logger.warning("Outstanding loan of book %s to member %s discarded", book.id, loan.member_id)
        return True, "Book deleted successfully!"

    def register_member(self, member_id: int, name: str) -> Outcome:
        try:
            self.members.register(member_id, name)
        except LibraryError as e:
            return self._failed(e)
        return True, "Member registered successfully!"

    def borrow_book(self, member_id: int, book_id: int) -> Outcome:
        try:
            _, msg = self.lending.borrow(member_id, book_id)
        except LibraryError as e:
            return self._failed(e)
        return True, msg

    def return_book(self, member_id: int, book_id: int, borrow_date: Optional[str] = None) -> Outcome:
        """
        Process a book return.

        Args:
            member_id: member returning the book.
            book_id: returned book.
            borrow_date: YYYY-MM-DD; when None the date recorded at borrow time is used.

        Returns:
            (success, message) with the fine summary on success.
        """
        try:
            assessment = self.lending.return_book(member_id, book_id, borrow_date)
        except LibraryError as e:
            return self._failed(e)
        return True, f"Book returned successfully! {assessment.message}"

    # ---------------- Queries ----------------
    def get_book(self, book_id: int) -> Optional[Book]:
        return self.catalog.find(book_id)

    def get_member(self, member_id: int) -> Optional[Member]:
        return self.members.find(member_id)

    def all_books(self) -> List[Book]:
        return self.catalog.list_all()

    def available_books(self) -> List[Book]:
        return self.catalog.list_available()

    def all_members(self) -> List[Member]:
        return self.members.list_all()

    def search_books(self, keyword: str) -> List[Book]:
        return self.catalog.search(keyword)

    # ---------------- Reports ----------------
    def members_with_borrowed_books(self) -> List[Dict]:
        """
        Return members who currently hold one or more books.

        Each entry contains the member ID, name and the list of held book IDs.
        """
        members_list = []
        for member_id, borrowed in self.lending.loans_by_member().items():
            member = self.members.find(member_id)
            name = member.name if member is not None else str(member_id)
            members_list.append({"Member ID": member_id, "Name": name, "BorrowedBooks": borrowed})
        return members_list

    def most_popular_category(self) -> Optional[str]:
        """
        Compute the most frequently borrowed category from the borrow history.

        Returns the category or None if there is insufficient data. Ties go to
        the category borrowed first.
        """
        log = history_frame(self.lending.history)
        borrows = log[log["action"] == "borrow"]
        if borrows.empty:
            return None
        books = books_frame(self.catalog.list_all())[["id", "category"]]
        merged = borrows.merge(books, left_on="book_id", right_on="id", how="inner")
        if merged.empty:
            return None
        counts = merged.groupby("category", sort=False).size()
        return str(counts.idxmax())

    def export_report_books(self) -> pd.DataFrame:
        """
        Produce a DataFrame for displaying the catalog.

        Availability is rendered as Yes/No.
        """
        out = books_frame(self.catalog.list_all())
        out["isAvailable"] = out["isAvailable"].map({1: "Yes", 0: "No"})
        return out.rename(columns={"id": "ID", "title": "Title", "author": "Author",
                                   "category": "Category", "isAvailable": "Available"})

    def export_report_members(self) -> pd.DataFrame:
        """
        Build a DataFrame summarizing members and their current loans.

        Returns columns: ID, Name, Books Borrowed, Holding (comma separated book IDs).
        """
        held = self.lending.loans_by_member()
        rows = []
        for m in self.members.list_all():
            rows.append({
                "ID": m.id,
                "Name": m.name,
                "Books Borrowed": m.books_borrowed,
                "Holding": ",".join(str(b) for b in held.get(m.id, [])),
            })
        return pd.DataFrame(rows, columns=["ID", "Name", "Books Borrowed", "Holding"])
