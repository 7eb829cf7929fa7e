from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_role, current_user_id, date_arg, error_response, login_required, roles_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError


def register(app: Flask, container: Container) -> None:
    analytics = container.analytics_service
    staff_only = roles_required(Role.INSTRUCTOR, Role.ADMIN)

    def _range() -> dict:
        start = date_arg("start")
        end = date_arg("end")
        if start and end and start > end:
            raise ValidationError("start must not be after end")
        return {"start": start, "end": end}

    def _int_arg(name: str, default: int) -> int:
        try:
            return int(request.args.get(name) or default)
        except ValueError:
            raise ValidationError(f"{name} must be a number")

    @app.route("/api/analytics/sessions/<int:session_id>", endpoint="api_analytics_session")
    @staff_only
    def api_analytics_session(session_id: int):
        try:
            return jsonify({"success": True, "stat": analytics.for_session(session_id).to_dict()}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/analytics/courses/<int:course_id>", endpoint="api_analytics_course")
    @staff_only
    def api_analytics_course(course_id: int):
        try:
            stat = analytics.for_course(course_id, **_range())
            return jsonify({"success": True, "stat": stat.to_dict()}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/analytics/courses/<int:course_id>/at-risk", endpoint="api_analytics_at_risk")
    @staff_only
    def api_analytics_at_risk(course_id: int):
        try:
            threshold = _int_arg("threshold", container.settings.at_risk_threshold)
            students = analytics.at_risk_students(course_id, threshold=threshold)
            return jsonify({"success": True, "threshold": threshold, "students": [s.to_dict() for s in students]}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/analytics/departments/<string:name>", endpoint="api_analytics_department")
    @staff_only
    def api_analytics_department(name: str):
        try:
            stat = analytics.for_department(name, **_range())
            return jsonify({"success": True, "department": name, "stat": stat.to_dict()}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/analytics/departments", endpoint="api_analytics_departments")
    @staff_only
    def api_analytics_departments():
        try:
            stats = analytics.by_department(**_range())
            return jsonify({"success": True, "departments": {k: v.to_dict() for k, v in stats.items()}}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/analytics/students/<int:student_id>", endpoint="api_analytics_student")
    @login_required
    def api_analytics_student(student_id: int):
        try:
            # Students may only look at their own numbers
            if current_role() == Role.STUDENT and student_id != current_user_id():
                raise AuthorizationError("You can only view your own attendance")
            stat = analytics.for_student(student_id, **_range())
            return jsonify({"success": True, "stat": stat.to_dict()}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/analytics/overall", endpoint="api_analytics_overall")
    @staff_only
    def api_analytics_overall():
        try:
            return jsonify({"success": True, "stat": analytics.overall(**_range()).to_dict()}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/analytics/trend", endpoint="api_analytics_trend")
    @staff_only
    def api_analytics_trend():
        try:
            days = _int_arg("days", container.settings.trend_days)
            if days <= 0:
                raise ValidationError("days must be positive")
            points = analytics.daily_trend(days)
            return jsonify({"success": True, "points": [p.to_dict() for p in points]}), 200
        except Exception as e:
            return error_response(e)

    @app.route("/api/analytics/me/progress", endpoint="api_analytics_my_progress")
    @login_required
    def api_analytics_my_progress():
        try:
            progress = analytics.student_progress(current_user_id())
            return jsonify({"success": True, "courses": [p.to_dict() for p in progress]}), 200
        except Exception as e:
            return error_response(e)
