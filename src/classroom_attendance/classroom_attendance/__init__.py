"""Classroom Attendance package.

Check-in verification and session lifecycle for classes, organized by feature
modules (sessions, attendance, analytics, ...) with a thin Flask controller
layer over service/repository layers.
"""
