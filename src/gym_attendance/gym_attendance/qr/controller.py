from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..container import Container
from ..core.enums import Role
from ..core.exceptions import QrCodeError
from ..http_auth import current_facility_id, current_user_id, roles_required
from .imaging import decode_image, render_png


def register(app: Flask, container: Container) -> None:
    qr = container.qr_service

    def _checked_in(record):
        return jsonify({"status": "checked_in", "message": "You're checked in! Have a great workout!", "record": record.to_dict()})

    @app.route("/api/admin/attendance/qr/config", methods=["GET"], endpoint="qr_config")
    @roles_required(Role.ADMIN)
    def qr_config():
        return jsonify(qr.get_or_create_config(current_facility_id()).to_dict())

    @app.route("/api/admin/attendance/qr/generate", methods=["POST"], endpoint="qr_generate")
    @roles_required(Role.ADMIN)
    def qr_generate():
        return jsonify(qr.regenerate(current_facility_id()).to_dict())

    @app.route("/api/admin/attendance/qr/toggle", methods=["POST"], endpoint="qr_toggle")
    @roles_required(Role.ADMIN)
    def qr_toggle():
        data = request.get_json(silent=True) or {}
        config = qr.toggle(current_facility_id(), data.get("isEnabled"))
        return jsonify(config.to_dict(include_payload=False))

    @app.route("/api/admin/attendance/qr/image", methods=["GET"], endpoint="qr_image")
    @roles_required(Role.ADMIN)
    def qr_image():
        """Printable PNG of the facility's current QR payload."""
        config = qr.get_or_create_config(current_facility_id())
        return send_file(io.BytesIO(render_png(config.payload())), mimetype="image/png")

    @app.route("/api/member/attendance/scan", methods=["POST"], endpoint="qr_scan")
    @roles_required(Role.MEMBER)
    def qr_scan():
        data = request.get_json(silent=True) or {}
        record = qr.scan_check_in(current_user_id(), data.get("qrData") or "")
        return _checked_in(record)

    @app.route("/api/member/attendance/scan/image", methods=["POST"], endpoint="qr_scan_image")
    @roles_required(Role.MEMBER)
    def qr_scan_image():
        """Same as the scan endpoint, but decodes the QR code from an uploaded photo."""
        if "image" not in request.files:
            raise QrCodeError("Image file is required")
        qr_data = decode_image(request.files["image"].stream)
        record = qr.scan_check_in(current_user_id(), qr_data)
        return _checked_in(record)
