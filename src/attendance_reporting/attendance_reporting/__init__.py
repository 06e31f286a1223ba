"""Attendance reporting package.

This package is organized by feature modules (attendance, reports, exports,
roster) with a thin Flask controller layer over plain service classes.
"""
