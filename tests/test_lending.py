import datetime

import pytest

from conftest import NOW, fixed_clock
from library_catalog import (
    BookNotBorrowedError,
    BookNotFoundError,
    InvalidDateFormatError,
    LendingEngine,
    LoanEvent,
    MemberNotFoundError,
    assess_fine,
    parse_borrow_date,
)


def test_parse_borrow_date():
    assert parse_borrow_date("2024-03-07") == datetime.date(2024, 3, 7)


def test_parse_ignores_separators():
    assert parse_borrow_date("2024/03/07") == datetime.date(2024, 3, 7)


@pytest.mark.parametrize("text", ["", "2024-3-7", "yesterday", "2024-13-01", "2023-02-30", "2024-01"])
def test_parse_rejects_malformed(text):
    with pytest.raises(InvalidDateFormatError):
        parse_borrow_date(text)


def test_assess_fine_overdue():
    a = assess_fine(datetime.date(2024, 1, 1), NOW, 3, 5)
    assert a.days_borrowed == 10
    assert a.overdue_days == 7
    assert a.fine == 35
    assert a.message == "Overdue by 7 day(s). Fine: $35"


def test_assess_fine_on_time():
    a = assess_fine(datetime.date(2024, 1, 9), NOW, 3, 5)
    assert a.days_borrowed == 2
    assert a.overdue_days == 0
    assert a.fine == 0
    assert "No fine" in a.message


def test_assess_fine_future_date_is_not_negative():
    a = assess_fine(datetime.date(2024, 2, 1), NOW)
    assert a.overdue_days == 0
    assert a.fine == 0


def test_borrow_updates_book_and_member(engine, catalog, members):
    loan, msg = engine.borrow(100, 1)
    assert catalog.find(1).is_available is False
    assert members.find(100).books_borrowed == 1
    assert loan.borrow_date == NOW.date()
    assert "3 days" in msg
    assert engine.loan_for(1) == loan
    assert engine.history[-1].action == "borrow"


def test_borrow_unavailable_book(engine, members):
    engine.borrow(100, 1)
    with pytest.raises(BookNotFoundError):
        engine.borrow(101, 1)
    assert members.find(101).books_borrowed == 0


def test_borrow_unknown_book(engine):
    with pytest.raises(BookNotFoundError):
        engine.borrow(100, 404)


def test_borrow_unknown_member_mutates_nothing(engine, catalog):
    with pytest.raises(MemberNotFoundError):
        engine.borrow(999, 1)
    assert catalog.find(1).is_available is True
    assert engine.history == []


def test_borrow_then_return_nets_zero(engine, catalog, members):
    engine.borrow(100, 2)
    assessment = engine.return_book(100, 2)
    assert catalog.find(2).is_available is True
    assert members.find(100).books_borrowed == 0
    assert assessment.fine == 0
    assert engine.loan_for(2) is None
    assert [e.action for e in engine.history] == ["borrow", "return"]


def test_return_with_supplied_date_overrides_recorded(engine):
    engine.borrow(100, 1)
    assessment = engine.return_book(100, 1, "2024-01-01")
    assert assessment.overdue_days == 7
    assert assessment.fine == 35


def test_return_available_book_fails_and_mutates_nothing(engine, catalog, members):
    with pytest.raises(BookNotBorrowedError):
        engine.return_book(100, 1, "2024-01-01")
    assert catalog.find(1).is_available is True
    assert members.find(100).books_borrowed == 0
    assert engine.history == []


def test_return_unknown_member(engine, catalog):
    engine.borrow(100, 1)
    with pytest.raises(MemberNotFoundError):
        engine.return_book(999, 1)
    assert catalog.find(1).is_available is False


def test_return_malformed_date_mutates_nothing(engine, catalog, members):
    engine.borrow(100, 1)
    with pytest.raises(InvalidDateFormatError):
        engine.return_book(100, 1, "01/01/2024")
    assert catalog.find(1).is_available is False
    assert members.find(100).books_borrowed == 1
    assert engine.loan_for(1) is not None


def test_return_without_any_borrow_date(catalog, members):
    catalog.find(3).is_available = False
    engine = LendingEngine(catalog, members, now=fixed_clock)
    with pytest.raises(InvalidDateFormatError):
        engine.return_book(100, 3)
    assessment = engine.return_book(100, 3, "2024-01-09")
    assert assessment.fine == 0


def test_books_borrowed_never_negative(catalog, members):
    catalog.find(3).is_available = False
    engine = LendingEngine(catalog, members, now=fixed_clock)
    engine.return_book(101, 3, "2024-01-10")
    assert members.find(101).books_borrowed == 0
    assert catalog.find(3).is_available is True


def test_return_by_other_member_releases_holder(engine, members):
    engine.borrow(100, 1)
    engine.return_book(101, 1)
    assert members.find(100).books_borrowed == 0
    assert members.find(101).books_borrowed == 0
    assert engine.loan_for(1) is None
    assert engine.loans_by_member() == {}


def test_discard_loan_releases_holder(engine, members):
    engine.borrow(100, 1)
    engine.borrow(100, 2)
    loan = engine.discard_loan(1)
    assert loan.member_id == 100
    assert members.find(100).books_borrowed == 1
    assert engine.loans_by_member() == {100: [2]}
    assert engine.discard_loan(1) is None
    assert members.find(100).books_borrowed == 1


def test_history_replay_rebuilds_loans(catalog, members):
    catalog.find(1).is_available = False
    history = [
        LoanEvent("2024-01-01T10:00:00", 100, 1, "borrow", "2024-01-01"),
        LoanEvent("2024-01-02T10:00:00", 101, 2, "borrow", "2024-01-02"),
        LoanEvent("2024-01-03T10:00:00", 101, 2, "return", "2024-01-02"),
    ]
    engine = LendingEngine(catalog, members, history, now=fixed_clock)
    assert engine.loan_for(1).member_id == 100
    assert engine.loan_for(1).borrow_date == datetime.date(2024, 1, 1)
    assert engine.loan_for(2) is None
    assert engine.loans_by_member() == {100: [1]}


def test_history_replay_drops_loans_for_available_books(catalog, members):
    history = [LoanEvent("2024-01-01T10:00:00", 100, 1, "borrow", "2024-01-01")]
    engine = LendingEngine(catalog, members, history, now=fixed_clock)
    assert engine.active_loans() == []


def test_custom_rules():
    from library_catalog import CatalogStore, MemberStore
    catalog = CatalogStore()
    catalog.add(1, "t", "a", 1)
    members = MemberStore()
    members.register(1, "m")
    engine = LendingEngine(catalog, members, borrow_period_days=7, fine_per_day=2, now=fixed_clock)
    engine.borrow(1, 1)
    assessment = engine.return_book(1, 1, "2024-01-01")
    assert assessment.overdue_days == 3
    assert assessment.fine == 6
