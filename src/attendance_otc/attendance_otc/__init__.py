"""Attendance OTC package.

Attendance sessions with one-time-code self check-in, organized by feature
modules (sessions, otc, attendance, verification, ...) with a thin Flask
controller layer over service/repository layers.
"""
