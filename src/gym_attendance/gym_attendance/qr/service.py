from __future__ import annotations

import hmac
import json
import logging
import secrets
import string
from datetime import datetime
from typing import Callable

from ..attendance.model import AttendanceRecord
from ..attendance.service import AttendanceService
from ..common.datetime_utils import now_utc
from ..core.constants import QR_PAYLOAD_TYPE, QR_SECRET_LENGTH
from ..core.enums import CheckInSource
from ..core.exceptions import NotFoundError, QrCodeError, ValidationError
from ..subjects.repository import SubjectRepository
from .model import QrConfig
from .repository import QrConfigRepository

logger = logging.getLogger(__name__)

_ALPHABET = string.ascii_letters + string.digits


def generate_secret(length: int = QR_SECRET_LENGTH) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


class QrAttendanceService:
    """Facility QR codes: configuration and member self check-in by scan."""

    def __init__(
        self,
        configs: QrConfigRepository,
        subjects: SubjectRepository,
        attendance: AttendanceService,
        *,
        secret_factory: Callable[[], str] = generate_secret,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._configs = configs
        self._subjects = subjects
        self._attendance = attendance
        self._secret_factory = secret_factory
        self._clock = clock

    def get_or_create_config(self, facility_id: int) -> QrConfig:
        config = self._configs.get(facility_id)
        if config:
            return config
        logger.info("creating QR config for facility=%s", facility_id)
        return self._configs.create(facility_id=facility_id, secret=self._secret_factory(), now=self._clock())

    def regenerate(self, facility_id: int) -> QrConfig:
        config = self._configs.rotate_secret(facility_id=facility_id, secret=self._secret_factory(), now=self._clock())
        if not config:
            return self.get_or_create_config(facility_id)
        logger.info("rotated QR secret for facility=%s", facility_id)
        return config

    def toggle(self, facility_id: int, is_enabled: bool) -> QrConfig:
        if not isinstance(is_enabled, bool):
            raise ValidationError("isEnabled must be a boolean")
        self.get_or_create_config(facility_id)
        config = self._configs.set_enabled(facility_id=facility_id, is_enabled=is_enabled)
        if not config:
            raise NotFoundError("QR config not found")
        return config

    @staticmethod
    def parse_payload(qr_data: str) -> tuple[int, str]:
        if not qr_data or not str(qr_data).strip():
            raise QrCodeError("QR data is required")
        try:
            payload = json.loads(qr_data)
        except (TypeError, ValueError):
            raise QrCodeError("Invalid QR code format") from None

        if not isinstance(payload, dict) or payload.get("type") != QR_PAYLOAD_TYPE:
            raise QrCodeError("Invalid QR code")
        gym_id, secret = payload.get("gymId"), payload.get("secret")
        if not secret or not isinstance(secret, str):
            raise QrCodeError("Invalid QR code")
        if isinstance(gym_id, str) and gym_id.isascii() and gym_id.isdigit():
            gym_id = int(gym_id)
        if isinstance(gym_id, bool) or not isinstance(gym_id, int) or gym_id <= 0:
            raise QrCodeError("Invalid QR code")
        return gym_id, secret

    def scan_check_in(self, user_id: int, qr_data: str, *, now: datetime | None = None) -> AttendanceRecord:
        """Check a member in from a scanned facility QR code. Check-in only, never toggles."""

        facility_id, secret = self.parse_payload(qr_data)

        config = self._configs.get(facility_id)
        if not config:
            raise QrCodeError("QR attendance not configured for this gym")
        if not hmac.compare_digest(config.secret.encode("utf-8"), secret.encode("utf-8")):
            raise QrCodeError("Invalid QR code. The code may have been updated.")
        if not config.is_enabled:
            raise QrCodeError("QR attendance is currently disabled for this gym")

        subject = self._subjects.get_by_user(user_id, facility_id=facility_id)
        if not subject:
            raise ValidationError("You are not a member of this gym")

        return self._attendance.check_in(subject.subject_id, facility_id, source=CheckInSource.QR_SCAN, now=now)
