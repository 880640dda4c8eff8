"""
persistence.py

Load and save the catalog, the roster and the borrow history as CSV files.

books.csv and members.csv have no header row (``id,title,author,category,
isAvailable`` and ``id,name,booksBorrowed``); availability is stored as
``1``/``0``. Fields are quoted when needed, so commas inside titles survive a
round trip. borrow_log.csv carries a header row.
"""

from __future__ import annotations
import logging
import pathlib
import warnings
from typing import Callable, Iterable, List, Optional, TypeVar

import pandas as pd

from .config import BOOKS_CSV, BORROW_LOG_CSV, MEMBERS_CSV, resolve_data_dir
from .models import Book, LoanEvent, Member

logger = logging.getLogger(__name__)

BOOK_COLUMNS = ["id", "title", "author", "category", "isAvailable"]
MEMBER_COLUMNS = ["id", "name", "booksBorrowed"]
LOG_COLUMNS = ["timestamp", "member_id", "book_id", "action", "borrow_date"]

TRUTHY = ["1", "true", "yes", "y", "available"]

T = TypeVar("T")


def _read_frame(path: pathlib.Path, columns: List[str], header: bool) -> pd.DataFrame:
    """
    Read a CSV file as strings, returning an empty frame when it is missing or empty.
    """
    if not path.exists():
        logger.warning("CSV not found: %s (starting empty)", path)
        return pd.DataFrame(columns=columns)
    if header:
        options = {"index_col": False}
    else:
        options = {"header": None, "names": columns, "index_col": False}
    try:
        # Lines with too many fields (e.g. an unquoted comma in a title) are
        # dropped; pandas reports each one as a ParserWarning.
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", pd.errors.ParserWarning)
            df = pd.read_csv(path, dtype=str, keep_default_na=False, on_bad_lines="warn", **options)
    except pd.errors.EmptyDataError:
        return pd.DataFrame(columns=columns)
    except pd.errors.ParserError as e:
        logger.error("Could not parse %s (starting empty): %s", path, e)
        return pd.DataFrame(columns=columns)
    for w in caught:
        logger.warning("Skipping malformed lines in %s: %s", path, str(w.message).strip())
    # Ensure consistent columns
    for col in columns:
        if col not in df.columns:
            df[col] = ""
    return df.fillna("")


def _write_frame(path: pathlib.Path, df: pd.DataFrame, header: bool) -> None:
    """Overwrite ``path`` with ``df`` via a temporary sibling file."""
    tmp = path.with_name(path.name + ".tmp")
    df.to_csv(tmp, index=False, header=header)
    tmp.replace(path)


def _rows(df: pd.DataFrame, build: Callable[[pd.Series], T], path: pathlib.Path) -> List[T]:
    items: List[T] = []
    for lineno, row in df.iterrows():
        try:
            items.append(build(row))
        except ValueError:
            logger.warning("Skipping malformed row %s in %s: %s", lineno, path, row.to_dict())
    return items


def _book_from_row(row: pd.Series) -> Book:
    return Book(
        id=int(row["id"]),
        title=row["title"],
        author=row["author"],
        category=row["category"],
        is_available=str(row["isAvailable"]).strip().lower() in TRUTHY,
    )


def _member_from_row(row: pd.Series) -> Member:
    borrowed = str(row["booksBorrowed"]).strip()
    return Member(id=int(row["id"]), name=row["name"], books_borrowed=int(borrowed) if borrowed else 0)


def _event_from_row(row: pd.Series) -> LoanEvent:
    return LoanEvent(
        timestamp=row["timestamp"],
        member_id=int(row["member_id"]),
        book_id=int(row["book_id"]),
        action=str(row["action"]).strip().lower(),
        borrow_date=row["borrow_date"],
    )


def books_frame(books: Iterable[Book]) -> pd.DataFrame:
    """Books as a DataFrame in file column order, availability as 1/0."""
    rows = [[b.id, b.title, b.author, b.category, 1 if b.is_available else 0] for b in books]
    return pd.DataFrame(rows, columns=BOOK_COLUMNS)


def members_frame(members: Iterable[Member]) -> pd.DataFrame:
    rows = [[m.id, m.name, m.books_borrowed] for m in members]
    return pd.DataFrame(rows, columns=MEMBER_COLUMNS)


def history_frame(history: Iterable[LoanEvent]) -> pd.DataFrame:
    rows = [[e.timestamp, e.member_id, e.book_id, e.action, e.borrow_date] for e in history]
    return pd.DataFrame(rows, columns=LOG_COLUMNS)


class CsvPersistence:
    """
    CsvPersistence reads and writes the three CSV files of a data directory.

    Args:
        data_dir: directory holding the files; see ``config.resolve_data_dir``.
        books_csv: file name of the catalog.
        members_csv: file name of the roster.
        borrow_log_csv: file name of the borrow/return history.
    """

    def __init__(self,
                 data_dir: Optional[str] = None,
                 books_csv: str = BOOKS_CSV,
                 members_csv: str = MEMBERS_CSV,
                 borrow_log_csv: str = BORROW_LOG_CSV):
        base_dir = resolve_data_dir(data_dir)
        self.books_csv = base_dir / books_csv
        self.members_csv = base_dir / members_csv
        self.borrow_log_csv = base_dir / borrow_log_csv

    # ---------------- Loading ----------------
    def load_books(self) -> List[Book]:
        df = _read_frame(self.books_csv, BOOK_COLUMNS, header=False)
        books = _rows(df, _book_from_row, self.books_csv)
        logger.info("Loaded %d books", len(books))
        return books

    def load_members(self) -> List[Member]:
        df = _read_frame(self.members_csv, MEMBER_COLUMNS, header=False)
        members = _rows(df, _member_from_row, self.members_csv)
        logger.info("Loaded %d members", len(members))
        return members

    def load_history(self) -> List[LoanEvent]:
        df = _read_frame(self.borrow_log_csv, LOG_COLUMNS, header=True)
        history = _rows(df, _event_from_row, self.borrow_log_csv)
        logger.info("Loaded %d borrow-log entries", len(history))
        return history

    # ---------------- Persisting ----------------
    def save_books(self, books: Iterable[Book]) -> None:
        df = books_frame(books)
        _write_frame(self.books_csv, df, header=False)
        logger.info("Saved %d books to %s", len(df), self.books_csv)

    def save_members(self, members: Iterable[Member]) -> None:
        df = members_frame(members)
        _write_frame(self.members_csv, df, header=False)
        logger.info("Saved %d members to %s", len(df), self.members_csv)

    def save_history(self, history: Iterable[LoanEvent]) -> None:
        df = history_frame(history)
        _write_frame(self.borrow_log_csv, df, header=True)
        logger.info("Saved %d borrow-log records to %s", len(df), self.borrow_log_csv)
