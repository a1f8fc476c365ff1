from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import SubjectKind


@dataclass(frozen=True)
class Subject:
    """A member or trainer whose attendance is tracked at one facility."""

    subject_id: int
    facility_id: int
    kind: SubjectKind
    full_name: str
    user_id: Optional[int] = None
    is_active: bool = True
