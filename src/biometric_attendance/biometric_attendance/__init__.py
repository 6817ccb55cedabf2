"""Biometric Attendance package.

Feature modules (devices, policy, attendance, schedules, ...) each keep a
domain model, repository ports, MySQL adapters and a service layer.
"""
