"""
config.py

Module-level settings for the library catalog manager.

Values can be overridden through the environment (``LIBRARY_DATA_DIR``,
``LIBRARY_LOG_LEVEL``) or per instance via ``LibrarySystem(...)`` keyword
arguments.
"""

from __future__ import annotations
import os
import pathlib
from typing import List, Optional

# Lending rules
BORROW_PERIOD_DAYS = 3
FINE_PER_DAY = 5

# Categories offered when adding a book (selected by 1-based index)
CATEGORIES: List[str] = ["Fiction", "Non-Fiction", "Science", "Biography", "History", "Children"]

# Persistence
BOOKS_CSV = "books.csv"
MEMBERS_CSV = "members.csv"
BORROW_LOG_CSV = "borrow_log.csv"

DATA_DIR = os.getenv("LIBRARY_DATA_DIR", ".")
LOG_LEVEL = os.getenv("LIBRARY_LOG_LEVEL", "INFO")

LOG_FORMAT = "%(levelname)s: %(message)s"


def resolve_data_dir(data_dir: Optional[str] = None) -> pathlib.Path:
    """
    Resolve the directory holding the CSV files, creating it when missing.

    Args:
        data_dir: explicit directory; falls back to ``LIBRARY_DATA_DIR``.

    Returns:
        Absolute path of the data directory.
    """
    path = pathlib.Path(data_dir if data_dir is not None else DATA_DIR).expanduser().resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path
