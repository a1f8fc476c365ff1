from __future__ import annotations

import io
from typing import BinaryIO

import qrcode
from PIL import Image

from ..core.exceptions import QrCodeError


def render_png(data: str) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def payload_text(raw: bytes) -> str:
    try:
        return raw.decode("utf-8").strip()
    except UnicodeDecodeError:
        raise QrCodeError("Invalid QR code format") from None


def decode_image(stream: BinaryIO) -> str:
    """Read the first QR code found in an uploaded photo."""

    try:
        img = Image.open(stream).convert("RGB")
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise QrCodeError("Unreadable image") from e

    # pyzbar loads the native zbar library at import time.
    from pyzbar.pyzbar import decode as pyzbar_decode

    decoded = pyzbar_decode(img)
    if not decoded:
        raise QrCodeError("No QR code found in image")
    return payload_text(decoded[0].data)
