"""Timeclock package.

Attendance time-tracking core organised by feature modules (attendance,
reports, employees) with SOLID service/repository layers. Transport (HTTP)
is left to the caller.
"""
