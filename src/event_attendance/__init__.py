"""Event Attendance package.

Organized by feature modules (events, sessions, organizers, attendance, ...)
with a thin Flask controller layer on top of service/repository layers.
"""
