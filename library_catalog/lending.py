"""
lending.py

Lending engine: borrow/return transitions over the catalog and the roster,
overdue-fine computation and the loan ledger.

A book moves Available -> Borrowed -> Available. Each borrow records a Loan
(book, member, borrow date) and appends a "borrow" event to the history; each
return removes the Loan and appends a "return" event.
"""

from __future__ import annotations
import datetime
import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .catalog import CatalogStore
from .config import BORROW_PERIOD_DAYS, FINE_PER_DAY
from .errors import BookNotBorrowedError, BookNotFoundError, InvalidDateFormatError, MemberNotFoundError
from .members import MemberStore
from .models import Book, FineAssessment, Loan, LoanEvent, Member

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60
DATE_FORMAT = "%Y-%m-%d"


def parse_borrow_date(text: str) -> datetime.date:
    """
    Parse a ``YYYY-MM-DD`` borrow date.

    The fields are read at fixed positions (year ``[0:4]``, month ``[5:7]``,
    day ``[8:10]``); the separators are not inspected.

    Args:
        text: date string entered by the operator or read from the history.

    Returns:
        The calendar date.

    Raises:
        InvalidDateFormatError: a field is not numeric or the date does not exist.
    """
    text = text or ""
    try:
        return datetime.date(int(text[0:4]), int(text[5:7]), int(text[8:10]))
    except ValueError as e:
        raise InvalidDateFormatError(f"Invalid borrow date '{text}'. Expected YYYY-MM-DD.") from e


def assess_fine(borrow_date: datetime.date, now: datetime.datetime,
                borrow_period_days: int = BORROW_PERIOD_DAYS,
                fine_per_day: int = FINE_PER_DAY) -> FineAssessment:
    """
    Compute days out, overdue days and fine for a loan returned at ``now``.

    The borrow date counts from local midnight; partial days are dropped.
    """
    midnight = datetime.datetime.combine(borrow_date, datetime.time())
    days_borrowed = int((now.timestamp() - midnight.timestamp()) // SECONDS_PER_DAY)
    overdue_days = max(0, days_borrowed - borrow_period_days)
    return FineAssessment(days_borrowed=days_borrowed, overdue_days=overdue_days,
                          fine=overdue_days * fine_per_day)


class LendingEngine:
    """
    Coordinates the catalog and the roster for borrowing and returning.

    Args:
        catalog: the CatalogStore whose books are lent.
        members: the MemberStore whose counters are updated.
        history: previously persisted borrow/return events, replayed to
            rebuild the active loans.
        borrow_period_days: days a book may be kept without a fine.
        fine_per_day: fine charged per overdue day.
        now: clock returning a naive local datetime; injectable for tests.
    """

    def __init__(self, catalog: CatalogStore, members: MemberStore,
                 history: Optional[Iterable[LoanEvent]] = None,
                 borrow_period_days: int = BORROW_PERIOD_DAYS,
                 fine_per_day: int = FINE_PER_DAY,
                 now: Optional[Callable[[], datetime.datetime]] = None):
        self.catalog = catalog
        self.members = members
        self.borrow_period_days = int(borrow_period_days)
        self.fine_per_day = int(fine_per_day)
        self._now = now or datetime.datetime.now
        self.history: List[LoanEvent] = list(history or [])
        self._loans: Dict[int, Loan] = {}
        self._rebuild_loans()

    # -------------- Internal helpers ----------------
    def _rebuild_loans(self) -> None:
        """
        Replay the history into the active loan map.

        Only loans whose book is still in the catalog and marked unavailable
        are kept: the books file is authoritative for availability.
        """
        loans: Dict[int, Loan] = {}
        for event in self.history:
            if event.action == "borrow":
                try:
                    borrow_date = parse_borrow_date(event.borrow_date)
                except InvalidDateFormatError:
                    logger.warning("Ignoring borrow event with bad date: %s", event)
                    continue
                loans[event.book_id] = Loan(event.book_id, event.member_id, borrow_date)
            elif event.action == "return":
                loans.pop(event.book_id, None)
        for book_id in list(loans):
            book = self.catalog.find(book_id)
            if book is None or book.is_available:
                logger.debug("Dropping stale loan for book %s", book_id)
                del loans[book_id]
        self._loans = loans

    def _record(self, action: str, member_id: int, book_id: int, borrow_date: datetime.date) -> None:
        self.history.append(LoanEvent(
            timestamp=self._now().isoformat(timespec="seconds"),
            member_id=member_id,
            book_id=book_id,
            action=action,
            borrow_date=borrow_date.strftime(DATE_FORMAT),
        ))

    def _lendable(self, book_id: int) -> Book:
        book = self.catalog.find(book_id)
        if book is None or not book.is_available:
            raise BookNotFoundError("Book is not available or does not exist!")
        return book

    def _lent(self, book_id: int) -> Book:
        book = self.catalog.find(book_id)
        if book is None or book.is_available:
            raise BookNotBorrowedError("Book is not borrowed!")
        return book

    def _holder(self, loan: Optional[Loan]) -> Optional[Member]:
        return self.members.find(loan.member_id) if loan is not None else None

    @staticmethod
    def _release(member: Member) -> None:
        if member.books_borrowed > 0:
            member.books_borrowed -= 1
        else:
            logger.warning("Member %s has no borrowed books on record; counter stays at 0", member.id)

    def _member(self, member_id: int) -> Member:
        member = self.members.find(member_id)
        if member is None:
            raise MemberNotFoundError("Member not found!")
        return member

    # ---------------- Core operations ----------------
    def borrow(self, member_id: int, book_id: int) -> Tuple[Loan, str]:
        """
        Lend an available book to a member.

        Returns:
            (loan, message) where message reminds the borrow period.

        Raises:
            BookNotFoundError: the book is unknown or already lent.
            MemberNotFoundError: the member is unknown.
        """
        book = self._lendable(book_id)
        member = self._member(member_id)

        today = self._now().date()
        book.is_available = False
        member.books_borrowed += 1
        loan = Loan(book_id=book.id, member_id=member.id, borrow_date=today)
        self._loans[book.id] = loan
        self._record("borrow", member.id, book.id, today)

        logger.info("Borrowed %s to %s on %s", book.id, member.id, today.isoformat())
        return loan, (f"Book borrowed successfully! Please return this book within "
                      f"{self.borrow_period_days} days to avoid fines.")

    def return_book(self, member_id: int, book_id: int,
                    borrow_date_input: Optional[str] = None) -> FineAssessment:
        """
        Take back a lent book and assess any overdue fine.

        Args:
            member_id: member returning the book.
            book_id: book being returned.
            borrow_date_input: borrow date as ``YYYY-MM-DD``. When omitted the
                date recorded at borrow time is used.

        Returns:
            FineAssessment for the loan.

        Raises:
            BookNotBorrowedError: the book is unknown or not lent.
            MemberNotFoundError: the member is unknown.
            InvalidDateFormatError: the supplied date is malformed, or no date
                was supplied and none was recorded.

        The borrowed counter of the member holding the recorded loan is
        decremented; without a recorded loan the returning member's is.
        Nothing is mutated when an error is raised.
        """
        book = self._lent(book_id)
        member = self._member(member_id)

        loan = self._loans.get(book.id)
        if borrow_date_input is not None:
            borrow_date = parse_borrow_date(borrow_date_input)
        elif loan is not None:
            borrow_date = loan.borrow_date
        else:
            raise InvalidDateFormatError("No borrow date recorded for this book; please enter it (YYYY-MM-DD).")

        if loan is not None and loan.member_id != member.id:
            logger.warning("Book %s was lent to member %s but returned by %s", book.id, loan.member_id, member.id)

        assessment = assess_fine(borrow_date, self._now(), self.borrow_period_days, self.fine_per_day)

        book.is_available = True
        self._release(self._holder(loan) or member)
        self._loans.pop(book.id, None)
        self._record("return", member.id, book.id, borrow_date)

        logger.info("Book %s returned by %s (overdue %d day(s), fine %d)",
                    book.id, member.id, assessment.overdue_days, assessment.fine)
        return assessment

    def discard_loan(self, book_id: int) -> Optional[Loan]:
        """Forget the active loan of a book removed from the catalog and release its holder."""
        loan = self._loans.pop(book_id, None)
        if loan is not None:
            holder = self._holder(loan)
            if holder is not None:
                self._release(holder)
        return loan

    # ---------------- Queries ----------------
    def loan_for(self, book_id: int) -> Optional[Loan]:
        return self._loans.get(book_id)

    def active_loans(self) -> List[Loan]:
        return list(self._loans.values())

    def loans_by_member(self) -> Dict[int, List[int]]:
        """Map member id -> ids of the books they currently hold."""
        held: Dict[int, List[int]] = {}
        for loan in self._loans.values():
            held.setdefault(loan.member_id, []).append(loan.book_id)
        return held
