from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import QrConfig


class QrConfigRepository(Protocol):
    def get(self, facility_id: int) -> Optional[QrConfig]:
        raise NotImplementedError

    def create(self, *, facility_id: int, secret: str, now: datetime) -> QrConfig:
        raise NotImplementedError

    def rotate_secret(self, *, facility_id: int, secret: str, now: datetime) -> Optional[QrConfig]:
        """Replace the secret and re-enable. Returns None when no config exists."""

        raise NotImplementedError

    def set_enabled(self, *, facility_id: int, is_enabled: bool) -> Optional[QrConfig]:
        raise NotImplementedError
