"""Kiosk Attendance package.

Organized by feature modules (attendance, students, reconciliation, history,
...) with a thin Flask controller layer over service/repository layers.
"""
