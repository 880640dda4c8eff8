"""Exceptions raised by the catalog, roster and lending operations."""


class LibraryError(Exception):
    """Base exception for library system errors."""


class DuplicateIdError(LibraryError):
    """A book or member with the same id already exists."""

    def __init__(self, kind: str, item_id: int):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"A {kind} with ID {item_id} already exists. Please choose a different ID.")


class NotFoundError(LibraryError):
    """Requested id does not exist."""


class BookNotFoundError(NotFoundError):
    """Book does not exist or cannot be lent right now."""


class MemberNotFoundError(NotFoundError):
    """Requested member id does not exist."""


class BookNotBorrowedError(NotFoundError):
    """Book does not exist or is not currently lent."""


class InvalidCategorySelectionError(LibraryError):
    """Category index outside the enumerated range."""


class InvalidDateFormatError(LibraryError):
    """Borrow date is not a valid YYYY-MM-DD calendar date."""
