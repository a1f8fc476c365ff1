from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .core.exceptions import DomainError, StorageError

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    """Map domain and storage exceptions onto JSON error responses."""

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        logger.warning("rejected: %s (%s)", e, e.code)
        return jsonify({"success": False, "status": "error", "code": e.code, "message": str(e)}), e.http_status

    @app.errorhandler(StorageError)
    def handle_storage_error(e: StorageError):
        logger.error("storage failure: %s", e)
        return jsonify({"success": False, "status": "error", "code": "STORAGE_ERROR", "message": "Temporary system error, please retry"}), 500

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"success": False, "status": "error", "code": e.name.upper().replace(" ", "_"), "message": e.description}), e.code
