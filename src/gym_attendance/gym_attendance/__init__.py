"""Gym Attendance package.

Organized by feature modules (attendance, subjects, qr) with a thin Flask
controller layer over service/repository layers.
"""
