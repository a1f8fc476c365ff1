from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.validators import optional_int, require_enum, require_positive_int
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_DAYS, DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceAction, CheckInSource, Role, StatsPeriod
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..http_auth import current_facility_id, current_role, current_user_id, login_required, roles_required

STAFF_ROLES = (Role.ADMIN, Role.TRAINER)


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service
    queries = container.query_service

    def _own_subject():
        """Subject profile of the logged-in member."""
        subject = container.subjects_repo.get_by_user(current_user_id())
        if not subject:
            raise NotFoundError("Member profile not found")
        return subject

    def _parse_day(value, field_name):
        if not value:
            return None
        try:
            return parse_iso_date(value)
        except ValueError:
            raise ValidationError(f"{field_name} must be YYYY-MM-DD") from None

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_mark")
    @login_required
    def attendance_mark():
        data = request.get_json(silent=True) or {}
        action = require_enum(AttendanceAction, data.get("action"), "action")
        source = require_enum(CheckInSource, data.get("source") or CheckInSource.MANUAL.value, "source")

        if current_role() == Role.MEMBER:
            subject = _own_subject()
            facility_id, subject_id = subject.facility_id, subject.subject_id
        else:
            facility_id = current_facility_id()
            if data.get("subjectId") in (None, ""):
                raise ValidationError("subjectId is required for admin/trainer")
            subject_id = require_positive_int(data.get("subjectId"), "subjectId")

        record = attendance.mark(subject_id, facility_id, action, source=source)
        return jsonify(record.to_dict()), 201 if action == AttendanceAction.CHECK_IN else 200

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @roles_required(*STAFF_ROLES)
    def attendance_list():
        subject_id = request.args.get("subjectId")
        records = queries.list_records(
            current_facility_id(),
            subject_id=require_positive_int(subject_id, "subjectId") if subject_id else None,
            date_from=_parse_day(request.args.get("dateFrom"), "dateFrom"),
            date_to=_parse_day(request.args.get("dateTo"), "dateTo"),
        )
        return jsonify([r.to_dict() for r in records])

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @roles_required(*STAFF_ROLES)
    def attendance_today():
        # Dashboards poll this endpoint every pollSeconds.
        days = optional_int(request.args.get("days"), "days", default=DEFAULT_HISTORY_DAYS, hi=31)
        return jsonify(queries.dashboard(current_facility_id(), queries.today(), days=days))

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @roles_required(*STAFF_ROLES)
    def attendance_stats():
        period = require_enum(StatsPeriod, request.args.get("period") or StatsPeriod.TODAY.value, "period")
        return jsonify(queries.stats(current_facility_id(), period))

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @roles_required(*STAFF_ROLES)
    def attendance_history():
        days = optional_int(request.args.get("days"), "days", default=DEFAULT_HISTORY_DAYS)
        today = queries.today().day
        series = queries.history(current_facility_id(), today - timedelta(days=days - 1), today)
        return jsonify([d.to_dict() for d in series])

    @app.route("/api/subjects/<int:subject_id>/attendance", methods=["GET"], endpoint="subject_attendance")
    @login_required
    def subject_attendance(subject_id: int):
        subject = container.subjects_repo.get_by_id(subject_id)
        if not subject:
            raise NotFoundError("Member not found")

        role = current_role()
        if role == Role.MEMBER:
            if subject.user_id != current_user_id():
                raise AuthorizationError("Access denied to this member")
        elif role != Role.SUPERADMIN and subject.facility_id != current_facility_id():
            raise AuthorizationError("Access denied to this member")

        limit = optional_int(request.args.get("limit"), "limit", default=DEFAULT_HISTORY_LIMIT, hi=200)
        return jsonify([r.to_dict() for r in queries.subject_history(subject_id, limit=limit)])

    @app.route("/api/member/attendance/today", methods=["GET"], endpoint="member_attendance_today")
    @roles_required(Role.MEMBER)
    def member_attendance_today():
        subject = _own_subject()
        status = attendance.today_status(subject.subject_id, subject.facility_id, window=queries.today())
        return jsonify(status.to_dict())

    @app.route("/api/member/attendance/history", methods=["GET"], endpoint="member_attendance_history")
    @roles_required(Role.MEMBER)
    def member_attendance_history():
        subject = _own_subject()
        limit = optional_int(request.args.get("limit"), "limit", default=DEFAULT_HISTORY_LIMIT, hi=200)
        return jsonify([r.to_dict() for r in queries.subject_history(subject.subject_id, limit=limit)])

    @app.route("/api/member/attendance/checkout", methods=["POST"], endpoint="member_attendance_checkout")
    @roles_required(Role.MEMBER)
    def member_attendance_checkout():
        subject = _own_subject()
        record = attendance.check_out(subject.subject_id, subject.facility_id)
        return jsonify({"status": "checked_out", "message": "You're checked out. See you again!", "record": record.to_dict()})
