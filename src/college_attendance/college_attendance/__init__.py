"""College Attendance package.

This package is organized by feature modules (users, attendance, reports,
imports, leaves, dashboard) with a thin Flask controller layer over
service/repository layers.
"""
