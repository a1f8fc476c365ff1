from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat_utc
from ..core.constants import QR_PAYLOAD_TYPE


@dataclass(frozen=True)
class QrConfig:
    """Per-facility QR attendance settings."""

    facility_id: int
    secret: str
    is_enabled: bool
    last_rotated_at: datetime
    created_at: Optional[datetime] = None

    def payload(self) -> str:
        return json.dumps({"type": QR_PAYLOAD_TYPE, "gymId": self.facility_id, "secret": self.secret})

    def to_dict(self, *, include_payload: bool = True) -> dict:
        data = {
            "gymId": self.facility_id,
            "isEnabled": self.is_enabled,
            "lastRotatedAt": isoformat_utc(self.last_rotated_at),
        }
        if include_payload:
            data["qrData"] = self.payload()
        return data
