"""HRMS Lite package.

Organized by feature modules (attendance, corrections, leave, payroll, ...)
with a thin Flask controller layer over service/repository layers.
"""
