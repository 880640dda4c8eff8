#!/usr/bin/env python3
"""
cli.py

Interactive menu for the library catalog manager.

Typical usage:
    library-catalog --data-dir ./data

State is loaded from the data directory on start and saved on exit.
"""

from __future__ import annotations
import argparse
import logging
from typing import List, Optional

import pandas as pd

from .config import DATA_DIR, LOG_FORMAT, LOG_LEVEL
from .system import LibrarySystem

logger = logging.getLogger(__name__)


def input_prompt(prompt: str) -> Optional[str]:
    """
    Wrapper around built-in input() that returns a stripped string.

    Returns None on EOF/KeyboardInterrupt so callers can stop.
    """
    try:
        return input(prompt).strip()
    except (EOFError, KeyboardInterrupt):
        print()
        return None


def input_int(prompt: str) -> Optional[int]:
    """Prompt until an integer is entered. Returns None on EOF."""
    while True:
        raw = input_prompt(prompt)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            print("Invalid input. Please enter a number.")


def print_table(df: pd.DataFrame, empty_message: str) -> None:
    if df.empty:
        print(empty_message)
    else:
        print(df.to_string(index=False))


def print_menu():
    print("\nLibrary Management System")
    print("1. Add Book")
    print("2. Delete Book")
    print("3. View Books")
    print("4. Register Member")
    print("5. View Members")
    print("6. Borrow Book")
    print("7. Return Book")
    print("8. Search Books")
    print("0. Exit")


def show_available(lib: LibrarySystem) -> None:
    report = lib.export_report_books()
    print_table(report[report["Available"] == "Yes"].drop(columns="Available"),
                "There are no books available to borrow.")


def cli_loop(lib: LibrarySystem) -> None:
    """
    Interactive command-loop for the library system.

    Presents a text menu, accepts user input and invokes `LibrarySystem` methods.
    Returns when the operator exits or input ends.
    """
    while True:
        print_menu()
        choice = input_int("Enter your choice: ")
        if choice is None or choice == 0:
            print("Exiting the system...")
            return
        elif choice == 1:
            bid = input_int("Enter Book ID: ")
            title = input_prompt("Enter Book Title: ")
            author = input_prompt("Enter Book Author: ")
            if bid is None or title is None or author is None:
                return
            print("Available Categories:")
            categories: List[str] = lib.catalog.categories()
            for i, name in enumerate(categories, start=1):
                print(f"{i}. {name}")
            idx = input_int("Select a category by number: ")
            if idx is None:
                return
            ok, msg = lib.add_book(bid, title, author, idx)
            print(msg)
        elif choice == 2:
            show_available(lib)
            bid = input_int("Enter Book ID to delete: ")
            if bid is None:
                return
            ok, msg = lib.delete_book(bid)
            print(msg)
        elif choice == 3:
            print_table(lib.export_report_books(), "There are no books in the library.")
        elif choice == 4:
            mid = input_int("Enter Member ID: ")
            name = input_prompt("Enter Member Name: ")
            if mid is None or name is None:
                return
            ok, msg = lib.register_member(mid, name)
            print(msg)
        elif choice == 5:
            print_table(lib.export_report_members(), "There are no registered members.")
        elif choice == 6:
            if not lib.catalog.has_available():
                print("There are no books available to borrow.")
                continue
            mid = input_int("Enter Member ID: ")
            if mid is None:
                return
            show_available(lib)
            bid = input_int("Enter Book ID to borrow: ")
            if bid is None:
                return
            ok, msg = lib.borrow_book(mid, bid)
            print(msg)
        elif choice == 7:
            mid = input_int("Enter Member ID: ")
            bid = input_int("Enter Book ID: ")
            if mid is None or bid is None:
                return
            date_hint = "press Enter to use the recorded date" if lib.lending.loan_for(bid) else "required"
            raw = input_prompt(f"Enter the borrow date (YYYY-MM-DD, {date_hint}): ")
            if raw is None:
                return
            ok, msg = lib.return_book(mid, bid, raw or None)
            print(msg)
        elif choice == 8:
            keyword = input_prompt("Enter keyword to search (ID, title, author, or category): ")
            if keyword is None:
                return
            found = {b.id for b in lib.search_books(keyword)}
            report = lib.export_report_books()
            print(f'Search results for "{keyword}":')
            print_table(report[report["ID"].isin(found)],
                        f'No books found matching the keyword "{keyword}".')
        else:
            print("Invalid choice! Please try again.")


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Library catalog manager")
    parser.add_argument("--data-dir", default=DATA_DIR, help="Folder holding books.csv, members.csv and borrow_log.csv")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Logging level (DEBUG, INFO, WARNING, ...)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format=LOG_FORMAT)

    lib = LibrarySystem(data_dir=args.data_dir)
    try:
        cli_loop(lib)
    finally:
        lib.save_state()
        logger.info("State saved to %s", lib.storage.books_csv.parent)


if __name__ == "__main__":
    main()
