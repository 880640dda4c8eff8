"""
models.py

Plain records held by the stores and the lending engine.
"""

from __future__ import annotations
import datetime
from dataclasses import dataclass


@dataclass
class Book:
    """A catalog entry. ``is_available`` is False while the book is lent."""
    id: int
    title: str
    author: str
    category: str
    is_available: bool = True


@dataclass
class Member:
    id: int
    name: str
    books_borrowed: int = 0


@dataclass
class Loan:
    """Which member holds which book, and since when."""
    book_id: int
    member_id: int
    borrow_date: datetime.date


@dataclass
class LoanEvent:
    """One row of the borrow/return history."""
    timestamp: str
    member_id: int
    book_id: int
    action: str  # "borrow" or "return"
    borrow_date: str


@dataclass
class FineAssessment:
    """
    Result of a return: how long the book was out and what is owed.

    ``message`` renders the operator-facing summary.
    """
    days_borrowed: int
    overdue_days: int
    fine: int

    @property
    def message(self) -> str:
        if self.overdue_days > 0:
            return f"Overdue by {self.overdue_days} day(s). Fine: ${self.fine}"
        return "Book returned on time. No fine."
