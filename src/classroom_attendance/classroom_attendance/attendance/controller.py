from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.http import (
    check_in_error_response,
    current_role,
    current_user_id,
    error_response,
    login_required,
    roles_required,
)
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus, ErrorKind, Role, VerificationMethod
from ..core.exceptions import AuthorizationError, CheckInError, ValidationError
from ..sessions.model import Session
from ..sessions.qr import decode_qr_image, render_token_qr
from .model import TokenEvidence, parse_evidence


def register(app: Flask, container: Container) -> None:
    service = container.checkin_service

    def _check_in(session_id: int, method: VerificationMethod, evidence):
        student_id = current_user_id()
        try:
            record = service.attempt_check_in(student_id, session_id, method, evidence)
        except CheckInError as e:
            if not e.is_benign:
                return check_in_error_response(e)
            existing = container.attendance_repo.get_for_session_and_student(session_id, student_id)
            return jsonify({
                "success": True,
                "already_recorded": True,
                "message": str(e),
                "record": existing.to_dict() if existing else None,
            }), 200
        return jsonify({"success": True, "already_recorded": False, "record": record.to_dict()}), 201

    def _owned_session(session_id: int) -> Session:
        session = container.sessions_repo.get_by_id(session_id)
        if session is None:
            raise CheckInError(ErrorKind.SESSION_NOT_FOUND, "Session not found")
        if current_role() == Role.INSTRUCTOR and session.instructor_id != current_user_id():
            raise AuthorizationError("You can only manage your own sessions")
        return session

    @app.route("/api/sessions/<int:session_id>/checkin", methods=["POST"], endpoint="api_checkin")
    @login_required
    def api_checkin(session_id: int):
        try:
            data = request.get_json(silent=True) or {}
            try:
                method = VerificationMethod(str(data.get("method", "")).strip().lower())
            except ValueError:
                raise ValidationError("method must be one of: token, geofence, network")

            payload = dict(data.get("evidence") or {})
            if method == VerificationMethod.NETWORK and not payload.get("address"):
                payload["address"] = request.remote_addr
            evidence = parse_evidence(method, payload)
            return _check_in(session_id, method, evidence)
        except Exception as e:
            return error_response(e)

    @app.route("/api/sessions/<int:session_id>/checkin/image", methods=["POST"], endpoint="api_checkin_image")
    @login_required
    def api_checkin_image(session_id: int):
        """Accept an uploaded photo of the projected QR code and check in with its token."""
        try:
            if "image" not in request.files:
                raise ValidationError("Missing image file")

            token = decode_qr_image(request.files["image"].stream)
            if not token:
                raise CheckInError(ErrorKind.INVALID_EVIDENCE, "No QR code found in the image")
            return _check_in(session_id, VerificationMethod.TOKEN, TokenEvidence(token=token))
        except Exception as e:
            return error_response(e)

    @app.route("/api/sessions/<int:session_id>/token", methods=["GET"], endpoint="api_session_token")
    @roles_required(Role.INSTRUCTOR, Role.ADMIN)
    def api_session_token(session_id: int):
        try:
            session = _owned_session(session_id)
            token = container.token_rotator.current_token(session, container.clock())
            return jsonify({"success": True, "token": token.to_dict()}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/sessions/<int:session_id>/qr.png", methods=["GET"], endpoint="api_session_qr")
    @roles_required(Role.INSTRUCTOR, Role.ADMIN)
    def api_session_qr(session_id: int):
        try:
            session = _owned_session(session_id)
            token = container.token_rotator.current_token(session, container.clock())
            png = render_token_qr(token)
        except Exception as e:
            return error_response(e)

        response = send_file(io.BytesIO(png), mimetype="image/png")
        response.headers["Cache-Control"] = "no-store"
        return response

    @app.route("/api/sessions/<int:session_id>/absences", methods=["POST"], endpoint="api_record_absences")
    @roles_required(Role.INSTRUCTOR, Role.ADMIN)
    def api_record_absences(session_id: int):
        try:
            _owned_session(session_id)
            created = service.record_absences(session_id)
            return jsonify({"success": True, "count": len(created), "records": [r.to_dict() for r in created]}), 201
        except Exception as e:
            return error_response(e)

    @app.route("/api/attendance/override", methods=["POST"], endpoint="api_attendance_override")
    @roles_required(Role.INSTRUCTOR, Role.ADMIN)
    def api_attendance_override():
        try:
            data = request.get_json(silent=True) or {}
            try:
                session_id = int(data["session_id"])
                student_id = int(data["student_id"])
                status = AttendanceStatus(str(data["status"]).strip().lower())
            except (KeyError, TypeError, ValueError):
                raise ValidationError("session_id, student_id and a valid status are required")

            record = service.apply_override(
                actor_id=current_user_id(),
                actor_role=current_role(),
                session_id=session_id,
                student_id=student_id,
                status=status,
                note=data.get("note"),
            )
            return jsonify({"success": True, "record": record.to_dict()}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/me/attendance", methods=["GET"], endpoint="api_my_attendance")
    @login_required
    def api_my_attendance():
        try:
            limit = int(request.args.get("limit") or DEFAULT_HISTORY_LIMIT)
        except ValueError:
            return error_response(ValidationError("limit must be a number"))
        if limit <= 0:
            return error_response(ValidationError("limit must be positive"))

        records = service.get_history(current_user_id(), limit=limit)
        return jsonify({"success": True, "records": [r.to_dict() for r in records]}), 200
