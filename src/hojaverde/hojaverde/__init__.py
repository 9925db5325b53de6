"""Hoja Verde attendance package.

Organized by feature modules (areas, employees, attendance, payroll, ...)
with a thin Flask controller layer over service/repository layers.
"""
