"""
Attendance Service - Face Recognition Attendance Station

Registers students with a face descriptor, re-scans the webcam on an
interval and marks each recognized student present once per day and subject.
"""

__version__ = "1.0.0"
__author__ = "Attendance Service Team"
