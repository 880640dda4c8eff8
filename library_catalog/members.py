"""
members.py

Member store: the roster of registered members.
"""

from __future__ import annotations
import logging
from typing import Iterable, List, Optional

from .errors import DuplicateIdError
from .models import Member

logger = logging.getLogger(__name__)


class MemberStore:
    """Registered members in registration order, keyed by unique id."""

    def __init__(self, members: Optional[Iterable[Member]] = None):
        self._members: List[Member] = []
        for member in members or []:
            if self.find(member.id) is not None:
                logger.warning("Skipping duplicate member id %s", member.id)
                continue
            self._members.append(member)

    def __len__(self) -> int:
        return len(self._members)

    def register(self, member_id: int, name: str) -> Member:
        """
        Register a new member with no borrowed books.

        Raises:
            DuplicateIdError: the id is already registered.
        """
        if self.find(member_id) is not None:
            logger.debug("Attempt to register existing member: %s", member_id)
            raise DuplicateIdError("member", member_id)
        member = Member(id=member_id, name=name)
        self._members.append(member)
        logger.info("Registered member %s", member_id)
        return member

    def find(self, member_id: int) -> Optional[Member]:
        return next((m for m in self._members if m.id == member_id), None)

    def list_all(self) -> List[Member]:
        return list(self._members)
