from __future__ import annotations

from typing import Optional, Protocol

from .model import Subject


class SubjectRepository(Protocol):
    """Read-only lookup of members and trainers.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, subject_id: int) -> Optional[Subject]:
        raise NotImplementedError

    def get_by_user(self, user_id: int, *, facility_id: Optional[int] = None) -> Optional[Subject]:
        raise NotImplementedError
