"""
Library catalog manager.

Tracks books and members, lends and takes back books with overdue fines, and
keeps its state in CSV files between runs.
"""

from .catalog import CatalogStore
from .errors import (
    BookNotBorrowedError,
    BookNotFoundError,
    DuplicateIdError,
    InvalidCategorySelectionError,
    InvalidDateFormatError,
    LibraryError,
    MemberNotFoundError,
    NotFoundError,
)
from .lending import LendingEngine, assess_fine, parse_borrow_date
from .members import MemberStore
from .models import Book, FineAssessment, Loan, LoanEvent, Member
from .persistence import CsvPersistence
from .system import LibrarySystem

__all__ = [
    "Book",
    "BookNotBorrowedError",
    "BookNotFoundError",
    "CatalogStore",
    "CsvPersistence",
    "DuplicateIdError",
    "FineAssessment",
    "InvalidCategorySelectionError",
    "InvalidDateFormatError",
    "LendingEngine",
    "LibraryError",
    "LibrarySystem",
    "Loan",
    "LoanEvent",
    "Member",
    "MemberNotFoundError",
    "MemberStore",
    "NotFoundError",
    "assess_fine",
    "parse_borrow_date",
]
